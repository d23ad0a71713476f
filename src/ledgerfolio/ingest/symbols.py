"""Resolution of broker symbols and descriptions to market tickers."""

import logging
import re
from typing import Optional

from ledgerfolio.core.timezone import now_eastern
from ledgerfolio.domain.models import SymbolMapping
from ledgerfolio.repositories.protocols import SymbolMappingRepository

logger = logging.getLogger(__name__)

# Broker-internal security codes look like H062990 or S029913
INTERNAL_CODE_PATTERN = re.compile(r"^[A-Z]\d{5,6}$")

KNOWN_MAPPINGS: dict[str, str] = {
    "H062990": "QQQ",
    "S029913": "SCHD",
    "H011456": "TLT",
    "H011457": "IEF",
    "H018936": "ICLN",
    "H052678": "REM",
    "H061833": "SPHD",
    "H062670": "KBWB",
    "V003293": "VNQ",
    "V003656": "VIG",
    "V007563": "VOO",
}

DESCRIPTION_PATTERNS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"INVESCO QQQ", re.I), "QQQ"),
    (re.compile(r"SCHWAB STRATEGIC TR US DIVID", re.I), "SCHD"),
    (re.compile(r"ISHARES 20 PLUS YEAR TREASURY", re.I), "TLT"),
    (re.compile(r"ISHARES 7.?10 YEAR TREASURY", re.I), "IEF"),
    (re.compile(r"ISHARES.*MORTGAGE REAL ESTATE", re.I), "REM"),
    (re.compile(r"ISHARES.*GLOBAL CLEAN ENERGY", re.I), "ICLN"),
    (re.compile(r"VANGUARD.*REAL ESTATE ETF", re.I), "VNQ"),
    (re.compile(r"VANGUARD.*DIVIDEND APPRECIATION", re.I), "VIG"),
    (re.compile(r"VANGUARD S&P 500", re.I), "VOO"),
    (re.compile(r"INVESCO.*KBW BANK", re.I), "KBWB"),
    (re.compile(r"INVESCO.*S&P 500 HIGH DIVID", re.I), "SPHD"),
    (re.compile(r"INVESCO DB COMMODITY", re.I), "DBC"),
]


def is_internal_code(symbol: Optional[str]) -> bool:
    """Return True if the symbol is a broker-internal security code."""
    return bool(symbol) and INTERNAL_CODE_PATTERN.match(symbol) is not None


def match_description(description: Optional[str]) -> Optional[str]:
    """Ticker implied by a security description, if any pattern matches."""
    if not description:
        return None
    for pattern, ticker in DESCRIPTION_PATTERNS:
        if pattern.search(description):
            return ticker
    return None


class SymbolResolver:
    """
    Maps raw broker symbols to canonical tickers.

    Lookup order for internal codes: stored mappings, built-in codes,
    description patterns. Mappings learned from the last two are stored so
    later imports resolve them directly. Results are memoized per instance.
    """

    def __init__(self, mapping_repo: Optional[SymbolMappingRepository] = None):
        self._mapping_repo = mapping_repo
        self._memo: dict[str, str] = {}

    def resolve(self, symbol: Optional[str], description: Optional[str] = None) -> Optional[str]:
        """Return the mapped symbol; unresolved codes fall back to the raw symbol."""
        if not symbol:
            return None
        if not is_internal_code(symbol):
            return symbol
        if symbol in self._memo:
            return self._memo[symbol]

        if self._mapping_repo is not None:
            stored = self._mapping_repo.get(symbol)
            if stored:
                self._memo[symbol] = stored.symbol
                return stored.symbol

        ticker = KNOWN_MAPPINGS.get(symbol) or match_description(description)
        if ticker is None:
            logger.warning("No ticker mapping for internal code %s (%s)", symbol, description)
            return symbol

        if self._mapping_repo is not None:
            self._mapping_repo.save(
                SymbolMapping(
                    internal_code=symbol,
                    symbol=ticker,
                    description=description,
                    created_at_est=now_eastern(),
                )
            )
        self._memo[symbol] = ticker
        return ticker
