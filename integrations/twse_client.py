"""
Taiwan Stock Exchange open data client.

Used for market-wide notifications: the daily market summary (FMTQIK) and the
top 20 stocks by trading volume (MI_INDEX20).
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from .exceptions import UpstreamAPIError

logger = logging.getLogger(__name__)

TWSE_BASE_URL = "https://www.twse.com.tw/exchangeReport"


@dataclass(frozen=True)
class DailyMarketInfo:
    """One trading day of the TAIEX summary."""
    date: str
    trade_volume: str
    trade_value: str
    transaction: str
    taiex: str
    change: str


@dataclass(frozen=True)
class VolumeRankItem:
    """One row of the top-20 volume ranking."""
    rank: int
    symbol: str
    name: str
    volume: str
    close: str
    direction: str
    change: str


def _clean(value: Any) -> str:
    """TWSE cells are strings with thousands separators and html markup for signs."""
    text = str(value if value is not None else "").strip()
    for markup in ("<p style= color:red>", "<p style= color:green>", "<p>", "</p>"):
        text = text.replace(markup, "")
    return text


class TwseClient:
    """Client for the TWSE exchangeReport JSON endpoints."""

    def __init__(self, timeout: float = 30, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get_report(self, report: str, **params: Any) -> Dict[str, Any]:
        """
        Fetch one report and check its 'stat' field.

        Raises:
            UpstreamAPIError: On network/HTTP/decode errors or a non-OK stat
        """
        url = f"{TWSE_BASE_URL}/{report}"
        query = {'response': 'json'}
        query.update(params)
        try:
            response = self.session.get(url, params=query, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.HTTPError as e:
            raise UpstreamAPIError("TWSE", str(e), e.response.status_code if e.response is not None else None)
        except requests.exceptions.RequestException as e:
            logger.error(f"Error fetching TWSE report {report}: {e}")
            raise UpstreamAPIError("TWSE", str(e))
        except ValueError as e:
            raise UpstreamAPIError("TWSE", f"Invalid JSON response: {e}")

        if not isinstance(payload, dict):
            raise UpstreamAPIError("TWSE", f"Unexpected JSON format: expected object, got {type(payload).__name__}")
        if payload.get('stat') != 'OK':
            raise UpstreamAPIError("TWSE", f"Report {report} returned stat={payload.get('stat')!r}")
        return payload

    def get_daily_market_info(self, count: int = 1) -> List[DailyMarketInfo]:
        """
        Latest trading days of the current month's market summary.

        Args:
            count: Number of most recent days to return
        """
        payload = self._get_report("FMTQIK")
        rows = payload.get('data') or []

        items = []
        for row in rows:
            if not isinstance(row, list) or len(row) < 6:
                logger.warning(f"Skipping malformed FMTQIK row: {row}")
                continue
            items.append(DailyMarketInfo(*[_clean(cell) for cell in row[:6]]))

        return items[-count:] if count > 0 else []

    def get_top_volume_items(self) -> List[VolumeRankItem]:
        """Top 20 stocks by trading volume on the latest trading day."""
        payload = self._get_report("MI_INDEX20")
        rows = payload.get('data') or []

        items = []
        for row in rows:
            if not isinstance(row, list) or len(row) < 11:
                logger.warning(f"Skipping malformed MI_INDEX20 row: {row}")
                continue
            try:
                rank = int(_clean(row[0]))
            except ValueError:
                logger.warning(f"Skipping MI_INDEX20 row with invalid rank: {row[0]!r}")
                continue
            items.append(VolumeRankItem(
                rank=rank,
                symbol=_clean(row[1]),
                name=_clean(row[2]),
                volume=_clean(row[3]),
                close=_clean(row[8]),
                direction=_clean(row[9]),
                change=_clean(row[10]),
            ))
        return items
