"""Stub market data provider for offline/testing use."""

from decimal import Decimal
from typing import Optional

from ledgerfolio.providers.market_data_provider import QuoteData, SymbolMatch


# Deterministic fake quotes: price, previous close, currency, yield %
_STUB_QUOTES: dict[str, tuple[Decimal, Decimal, str, Optional[Decimal]]] = {
    "AAPL": (Decimal("185.50"), Decimal("184.25"), "USD", Decimal("0.52")),
    "MSFT": (Decimal("378.25"), Decimal("376.80"), "USD", Decimal("0.74")),
    "QQQ": (Decimal("418.75"), Decimal("417.50"), "USD", Decimal("0.60")),
    "SCHD": (Decimal("27.80"), Decimal("27.65"), "USD", Decimal("3.60")),
    "VOO": (Decimal("470.10"), Decimal("468.90"), "USD", Decimal("1.30")),
    "VNQ": (Decimal("88.40"), Decimal("88.10"), "USD", Decimal("4.10")),
    "XEQT.TO": (Decimal("31.20"), Decimal("31.05"), "CAD", Decimal("1.80")),
    "VFV.TO": (Decimal("138.60"), Decimal("138.10"), "CAD", Decimal("1.10")),
    "CAD=X": (Decimal("1.35"), Decimal("1.35"), "CAD", None),
}


class StubMarketDataProvider:
    """Deterministic provider for offline operation; unknown tickers return None."""

    def quote(self, ticker: str) -> Optional[QuoteData]:
        data = _STUB_QUOTES.get(ticker.upper())
        if data is None:
            return None
        price, prev_close, currency, dividend_yield = data
        return QuoteData(
            ticker=ticker.upper(),
            price=price,
            previous_close=prev_close,
            currency=currency,
            dividend_yield=dividend_yield,
            fifty_two_week_high=(price * Decimal("1.15")).quantize(Decimal("0.01")),
            fifty_two_week_low=(price * Decimal("0.80")).quantize(Decimal("0.01")),
            name=ticker.upper(),
        )

    def search(self, query: str) -> list[SymbolMatch]:
        needle = query.strip().upper()
        return [
            SymbolMatch(symbol=symbol, name=symbol)
            for symbol in sorted(_STUB_QUOTES)
            if needle and needle in symbol
        ]
