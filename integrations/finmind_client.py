"""
FinMind open data API client.

Provides the symbol catalog for the sync engine and the per-symbol price and
news data used to build notification payloads.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import requests

from data_layer.models import Market
from .exceptions import UpstreamAPIError

logger = logging.getLogger(__name__)

FINMIND_API_URL = "https://api.finmindtrade.com/api/v4/data"

# Catalog dataset per market
STOCK_INFO_DATASETS = {
    Market.TW: "TaiwanStockInfo",
    Market.US: "USStockInfo",
}


@dataclass
class FinMindResponse:
    """
    Response envelope returned by every FinMind dataset endpoint.

    A transport-level success can still carry a non-200 status (quota exceeded,
    invalid token); callers decide how to treat it.
    """
    status: int
    msg: str
    data: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == 200

    @classmethod
    def from_json(cls, payload: Any) -> 'FinMindResponse':
        if not isinstance(payload, dict):
            raise UpstreamAPIError("FinMind", f"Unexpected JSON format: expected object, got {type(payload).__name__}")

        data = payload.get('data') or []
        if not isinstance(data, list):
            raise UpstreamAPIError("FinMind", f"Unexpected data format: expected list, got {type(data).__name__}")

        try:
            status = int(payload.get('status', 0))
        except (TypeError, ValueError):
            raise UpstreamAPIError("FinMind", f"Invalid status field: {payload.get('status')!r}")

        return cls(
            status=status,
            msg=str(payload.get('msg', '')),
            data=[item for item in data if isinstance(item, dict)],
        )


class FinMindClient:
    """
    Thin client over the FinMind v4 data endpoint.

    The underlying requests.Session is shared by all threads that use the
    client; only stateless GETs are issued through it.
    """

    def __init__(self, api_token: Optional[str] = None, timeout: float = 30,
                 session: Optional[requests.Session] = None):
        self.api_token = api_token
        self.timeout = timeout
        self.session = session or requests.Session()

    def get_dataset(self, dataset: str, **params: Any) -> FinMindResponse:
        """
        Fetch one dataset.

        Raises:
            UpstreamAPIError: On network errors, HTTP errors or undecodable JSON
        """
        query = {'dataset': dataset}
        query.update({key: value for key, value in params.items() if value is not None})
        headers = {}
        if self.api_token:
            headers['Authorization'] = f"Bearer {self.api_token}"

        try:
            response = self.session.get(FINMIND_API_URL, params=query, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Error fetching FinMind dataset {dataset}: {e}")
            raise UpstreamAPIError("FinMind", str(e))

        # FinMind reports quota/token problems with HTTP 402/400 and a JSON envelope;
        # keep those as envelope statuses instead of transport errors.
        if response.status_code >= 500:
            raise UpstreamAPIError("FinMind", response.reason or "server error", response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"Error parsing FinMind response for {dataset}: {e}")
            raise UpstreamAPIError("FinMind", f"Invalid JSON response: {e}", response.status_code)

        return FinMindResponse.from_json(payload)

    def get_stock_info(self, market: Market) -> FinMindResponse:
        """Fetch the full symbol catalog of a market."""
        dataset = STOCK_INFO_DATASETS.get(market)
        if dataset is None:
            raise ValueError(f"No catalog dataset for market {market}")
        logger.info(f"Fetching {market.value} stock info from FinMind ({dataset})...")
        return self.get_dataset(dataset)

    def get_taiwan_stock_price(self, stock_id: str, start_date: str, end_date: Optional[str] = None) -> FinMindResponse:
        """Daily OHLC rows for a Taiwan stock between two dates (YYYY-MM-DD)."""
        return self.get_dataset(
            "TaiwanStockPrice",
            data_id=stock_id,
            start_date=start_date,
            end_date=end_date,
        )

    def get_taiwan_stock_news(self, stock_id: str, start_date: Optional[str] = None) -> FinMindResponse:
        """News headlines for a Taiwan stock, from start_date (defaults to yesterday)."""
        if start_date is None:
            start_date = (date.today() - timedelta(days=1)).isoformat()
        return self.get_dataset("TaiwanStockNews", data_id=stock_id, start_date=start_date)
