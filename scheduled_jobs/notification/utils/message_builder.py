"""
Builds notification payloads from market data.

Messages use the Telegram HTML subset; LINE recipients receive the same text
through NotificationMessage.plain_text.
"""

import html
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from data_layer import Market, SymbolsRepository
from integrations import FinMindClient, LinkButton, TwseClient, UpstreamAPIError
from ..entities.notification_message import NotificationMessage

logger = logging.getLogger(__name__)

# News items shown per symbol
MAX_NEWS_ITEMS = 5
# Telegram truncates long button labels
MAX_BUTTON_TEXT = 40


def _format_number(value: Any) -> str:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return str(value)
    if number.is_integer():
        return f"{int(number):,}"
    return f"{number:,.2f}"


def _format_change(value: Any) -> str:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return str(value)
    return f"{number:+.2f}"


class MarketMessageService:
    """Computes the payload of each notification feature."""

    def __init__(self, finmind_client: FinMindClient, twse_client: TwseClient,
                 symbols_repo: Optional[SymbolsRepository] = None):
        self.finmind_client = finmind_client
        self.twse_client = twse_client
        self.symbols_repo = symbols_repo

    def _display_name(self, symbol: str) -> str:
        if self.symbols_repo is None:
            return symbol
        try:
            record = self.symbols_repo.get_by_symbol(symbol, Market.TW)
        except Exception as e:
            logger.warning(f"Could not look up name of {symbol}: {e}")
            return symbol
        if record is None or not record.name:
            return symbol
        return f"{symbol} {record.name}"

    @staticmethod
    def _require_ok(response, what: str) -> List[Dict[str, Any]]:
        if not response.ok:
            raise UpstreamAPIError("FinMind", f"{what}: status {response.status} {response.msg}", response.status)
        return response.data

    def get_stock_price_message(self, symbol: str, trade_date: Optional[str] = None) -> Optional[NotificationMessage]:
        """
        Price summary of a Taiwan stock for one trading day.

        Args:
            symbol: Taiwan stock id
            trade_date: YYYY-MM-DD, defaults to today

        Returns:
            The message, or None when there was no trading on that day
        """
        trade_date = trade_date or date.today().isoformat()
        response = self.finmind_client.get_taiwan_stock_price(symbol, trade_date, trade_date)
        rows = self._require_ok(response, f"price of {symbol}")
        if not rows:
            logger.info(f"No price data for {symbol} on {trade_date}")
            return None

        row = rows[-1]
        name = html.escape(self._display_name(symbol))
        lines = [
            f"<b>{name}</b> {html.escape(str(row.get('date', trade_date)))}",
            f"Open: {_format_number(row.get('open'))}",
            f"High: {_format_number(row.get('max'))}",
            f"Low: {_format_number(row.get('min'))}",
            f"Close: {_format_number(row.get('close'))} ({_format_change(row.get('spread'))})",
            f"Volume: {_format_number(row.get('Trading_Volume'))} shares",
            f"Turnover: {_format_number(row.get('Trading_money'))}",
        ]
        return NotificationMessage("\n".join(lines))

    def get_stock_news_message(self, symbol: str) -> Optional[NotificationMessage]:
        """Latest news headlines of a Taiwan stock, one link button per article."""
        response = self.finmind_client.get_taiwan_stock_news(symbol)
        rows = self._require_ok(response, f"news of {symbol}")

        articles = [row for row in rows if row.get('title') and row.get('link')]
        if not articles:
            logger.info(f"No news for {symbol}")
            return None

        articles.sort(key=lambda row: str(row.get('date', '')), reverse=True)
        keyboard = []
        for article in articles[:MAX_NEWS_ITEMS]:
            title = str(article['title']).strip()
            if len(title) > MAX_BUTTON_TEXT:
                title = title[:MAX_BUTTON_TEXT - 1] + "…"
            keyboard.append([LinkButton(text=title, url=str(article['link']))])

        name = html.escape(self._display_name(symbol))
        return NotificationMessage(f"<b>{name}</b> latest news", keyboard)

    def get_daily_market_info_message(self, count: int = 1) -> Optional[NotificationMessage]:
        """TAIEX summary of the latest trading days."""
        items = self.twse_client.get_daily_market_info(count)
        if not items:
            return None

        blocks = []
        for item in items:
            blocks.append("\n".join([
                f"<b>{html.escape(item.date)} TAIEX</b>",
                f"Index: {item.taiex} ({item.change})",
                f"Volume: {item.trade_volume} shares",
                f"Value: {item.trade_value}",
                f"Transactions: {item.transaction}",
            ]))
        return NotificationMessage("\n\n".join(blocks))

    def get_top_volume_message(self) -> Optional[NotificationMessage]:
        """Top 20 stocks by trading volume."""
        items = self.twse_client.get_top_volume_items()
        if not items:
            return None

        lines = ["<b>Top 20 by volume</b>"]
        for item in items:
            lines.append(
                f"{item.rank}. {html.escape(item.symbol)} {html.escape(item.name)} "
                f"{item.close} {item.direction}{item.change} vol {item.volume}"
            )
        return NotificationMessage("\n".join(lines))
