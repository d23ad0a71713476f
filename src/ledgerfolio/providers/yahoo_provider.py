"""Yahoo Finance market data provider (yfinance)."""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import yfinance as yf

from ledgerfolio.providers.market_data_provider import QuoteData, SymbolMatch

logger = logging.getLogger(__name__)


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return result if result.is_finite() else None


class YahooMarketDataProvider:
    """
    Fetches quotes from Yahoo Finance via yfinance.

    No caching here; the quote cache owns freshness and timeouts.
    """

    def quote(self, ticker: str) -> Optional[QuoteData]:
        info = yf.Ticker(ticker).info
        if not isinstance(info, dict):
            return None

        # Price: currentPrice preferred, then regularMarketPrice
        price = _to_decimal(info.get("currentPrice"))
        if price is None:
            price = _to_decimal(info.get("regularMarketPrice"))
        if price is None:
            return None

        prev_close = _to_decimal(
            info.get("previousClose") or info.get("regularMarketPreviousClose")
        )
        name = (info.get("longName") or info.get("shortName") or "").strip() or None
        currency = info.get("currency")

        return QuoteData(
            ticker=ticker,
            price=price,
            previous_close=prev_close,
            currency=currency.upper() if isinstance(currency, str) else None,
            dividend_yield=_to_decimal(info.get("dividendYield")),
            fifty_two_week_high=_to_decimal(info.get("fiftyTwoWeekHigh")),
            fifty_two_week_low=_to_decimal(info.get("fiftyTwoWeekLow")),
            name=name,
            logo_url=info.get("logo_url"),
        )

    def search(self, query: str) -> list[SymbolMatch]:
        results = yf.Search(query, max_results=10).quotes
        return [
            SymbolMatch(
                symbol=item.get("symbol"),
                name=item.get("longname") or item.get("shortname"),
                exchange=item.get("exchange"),
                quote_type=item.get("quoteType"),
            )
            for item in results
            if item.get("symbol")
        ]
