"""
Symbol model representing one entry of the normalized symbol catalog.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any

from ..exceptions import ValidationError


class Market(str, Enum):
    """Markets whose catalogs are synchronized."""
    TW = "TW"
    US = "US"


@dataclass(frozen=True)
class Symbol:
    """
    Represents a symbol catalog entry.

    A symbol is uniquely identified by (symbol, market) and never changes once
    created; a refreshed upstream entry produces a new Symbol instead.

    Attributes:
        symbol: Symbol code (e.g. 2330, AAPL)
        name: Display name
        market: Market the symbol is listed on
        id: Auto-generated primary key
        created_at: Timestamp when the record was created
        last_updated_at: Timestamp when the record was last updated
    """
    symbol: str
    name: str
    market: Market
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    last_updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Normalize and validate the symbol data after initialization."""
        if not isinstance(self.symbol, str) or not self.symbol.strip():
            raise ValidationError("symbol", self.symbol, "Symbol cannot be empty")

        # frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "symbol", self.symbol.strip().upper())
        object.__setattr__(self, "name", (self.name or "").strip())
        if not isinstance(self.market, Market):
            try:
                object.__setattr__(self, "market", Market(str(self.market).upper()))
            except ValueError:
                raise ValidationError("market", self.market, "Unknown market")

        self.validate()

    def validate(self):
        """
        Validate symbol data.

        Raises:
            ValidationError: If validation fails
        """
        if len(self.symbol) > 20:
            raise ValidationError("symbol", self.symbol, "Symbol cannot be longer than 20 characters")

        if len(self.name) > 255:
            raise ValidationError("name", self.name, "Name cannot be longer than 255 characters")

    @property
    def key(self) -> tuple:
        """Unique key of the symbol in the catalog."""
        return (self.symbol, self.market.value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'symbol': self.symbol,
            'name': self.name,
            'market': self.market.value,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'last_updated_at': self.last_updated_at.isoformat() if self.last_updated_at else None,
        }

    @staticmethod
    def from_db_row(row: Any) -> 'Symbol':
        """
        Create Symbol instance from database row.

        Args:
            row: Database row tuple (id, symbol, name, market, created_at, last_updated_at)

        Returns:
            Symbol instance
        """
        return Symbol(
            id=row[0],
            symbol=row[1],
            name=row[2],
            market=Market(row[3]),
            created_at=row[4],
            last_updated_at=row[5],
        )

    def __str__(self) -> str:
        name_part = f" ({self.name})" if self.name else ""
        return f"{self.symbol}{name_part} [{self.market.value}]"
