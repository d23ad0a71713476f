"""Quote cache: TTL cache in front of the market data provider."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Iterable, Optional

from ledgerfolio.core.exceptions import ProviderError
from ledgerfolio.core.timezone import now_eastern, to_eastern
from ledgerfolio.domain.models import PriceCacheEntry
from ledgerfolio.domain.views import Quote
from ledgerfolio.providers.market_data_provider import MarketDataProvider, QuoteData, SymbolMatch
from ledgerfolio.repositories.protocols import (
    HoldingRepository,
    PriceCacheRepository,
    UnitOfWork,
)

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(minutes=15)


def _normalize_ticker(ticker: str) -> str:
    return (ticker or "").strip().upper()


class QuoteCache:
    """
    Cache-aside access to market quotes.

    Entries younger than the TTL are served without a network call. Misses
    and expired entries are fetched in small chunks with a pause between
    chunks; each provider call has a timeout, and a failed ticker is omitted
    rather than retried.
    """

    def __init__(
        self,
        price_repo: PriceCacheRepository,
        provider: MarketDataProvider,
        unit_of_work: UnitOfWork,
        ttl: timedelta = DEFAULT_TTL,
        batch_size: int = 5,
        batch_delay_seconds: float = 0.5,
        timeout_seconds: float = 10.0,
        holding_repo: Optional[HoldingRepository] = None,
        fx_ticker: str = "CAD=X",
        default_fx_rate: Decimal = Decimal("1.35"),
        clock: Callable[[], datetime] = now_eastern,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._price_repo = price_repo
        self._provider = provider
        self._uow = unit_of_work
        self._ttl = ttl
        self._batch_size = max(1, batch_size)
        self._batch_delay = batch_delay_seconds
        self._timeout = timeout_seconds
        self._holding_repo = holding_repo
        self._fx_ticker = fx_ticker
        self._default_fx_rate = Decimal(str(default_fx_rate))
        self._clock = clock
        self._sleep = sleep

    def get_quote(self, ticker: str) -> Quote:
        """
        Return a quote, from cache when fresh.

        A stale entry is returned (marked stale) when the provider fails.

        Raises:
            ProviderError: provider failed and nothing is cached
        """
        ticker = _normalize_ticker(ticker)
        entry = self._price_repo.get(ticker)
        if entry and self._is_fresh(entry):
            logger.debug("Quote cache hit for %s", ticker)
            return self._to_quote(entry, cached=True)

        data = self._fetch_chunk([ticker]).get(ticker)
        if data is not None:
            stored = self._store(ticker, data)
            self._uow.commit()
            return self._to_quote(stored, cached=False)

        if entry is not None:
            return self._to_quote(entry, cached=True, stale=True)
        raise ProviderError(ticker, "no data returned")

    def get_quotes(self, tickers: Iterable[str]) -> dict[str, Quote]:
        """
        Return quotes for many tickers.

        Fresh entries come from the cache; the rest are fetched in chunks.
        Tickers the provider cannot supply are left out of the result.
        """
        wanted = list(dict.fromkeys(t for t in (_normalize_ticker(t) for t in tickers) if t))
        if not wanted:
            return {}

        entries = self._price_repo.get_many(wanted)
        result: dict[str, Quote] = {}
        stale: list[str] = []
        for ticker in wanted:
            entry = entries.get(ticker)
            if entry and self._is_fresh(entry):
                result[ticker] = self._to_quote(entry, cached=True)
            else:
                stale.append(ticker)

        logger.debug("Quote cache: %d fresh, %d to fetch", len(result), len(stale))

        for offset in range(0, len(stale), self._batch_size):
            if offset and self._batch_delay > 0:
                self._sleep(self._batch_delay)
            chunk = stale[offset : offset + self._batch_size]
            fetched = self._fetch_chunk(chunk)
            for ticker in chunk:
                data = fetched.get(ticker)
                if data is not None:
                    result[ticker] = self._to_quote(self._store(ticker, data), cached=False)
            self._uow.commit()

        return {t: result[t] for t in wanted if t in result}

    def get_all_cached(self) -> list[Quote]:
        """Every stored entry, without network calls."""
        return [
            self._to_quote(entry, cached=True, stale=not self._is_fresh(entry))
            for entry in self._price_repo.list_all()
        ]

    def refresh_holdings(self) -> dict[str, Quote]:
        """Bring quotes for every held symbol up to date."""
        if self._holding_repo is None:
            return {}
        symbols = sorted({h.symbol for h in self._holding_repo.list_all()})
        return self.get_quotes(symbols)

    def get_fx_rate(self) -> Decimal:
        """USD to CAD rate; the configured default when no quote is available."""
        try:
            quote = self.get_quote(self._fx_ticker)
        except ProviderError:
            logger.warning(
                "FX quote %s unavailable; using default %s", self._fx_ticker, self._default_fx_rate
            )
            return self._default_fx_rate
        if quote.price <= 0:
            return self._default_fx_rate
        return quote.price

    def search(self, query: str) -> list[SymbolMatch]:
        """Ticker search; an empty list when the provider fails."""
        if not query or not query.strip():
            return []
        executor = ThreadPoolExecutor(max_workers=1)
        try:
            future = executor.submit(self._provider.search, query.strip())
            return future.result(timeout=self._timeout)
        except FuturesTimeoutError:
            logger.warning("Ticker search for %r timed out", query)
            return []
        except Exception as e:
            logger.warning("Ticker search for %r failed: %s", query, e)
            return []
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _fetch_chunk(self, tickers: list[str]) -> dict[str, QuoteData]:
        """Fetch a chunk concurrently; failures and timeouts are dropped."""
        fetched: dict[str, QuoteData] = {}
        if not tickers:
            return fetched

        executor = ThreadPoolExecutor(max_workers=len(tickers))
        try:
            futures = {t: executor.submit(self._provider.quote, t) for t in tickers}
            deadline = time.monotonic() + self._timeout
            for ticker, future in futures.items():
                remaining = max(0.0, deadline - time.monotonic())
                try:
                    data = future.result(timeout=remaining)
                except FuturesTimeoutError:
                    logger.warning("Quote for %s timed out after %ss", ticker, self._timeout)
                    continue
                except Exception as e:
                    logger.warning("Quote for %s failed: %s", ticker, e)
                    continue
                if data is None or data.price is None:
                    logger.warning("No quote returned for %s", ticker)
                    continue
                fetched[ticker] = data
        finally:
            # Do not wait on hung provider calls
            executor.shutdown(wait=False, cancel_futures=True)
        return fetched

    def _store(self, ticker: str, data: QuoteData) -> PriceCacheEntry:
        return self._price_repo.upsert(
            PriceCacheEntry(
                ticker=ticker,
                price=data.price,
                previous_close=data.previous_close,
                currency=data.currency,
                dividend_yield=data.dividend_yield,
                fifty_two_week_high=data.fifty_two_week_high,
                fifty_two_week_low=data.fifty_two_week_low,
                name=data.name,
                logo_url=data.logo_url,
                updated_at=to_eastern(self._clock()),
            )
        )

    def _is_fresh(self, entry: PriceCacheEntry) -> bool:
        return to_eastern(self._clock()) - to_eastern(entry.updated_at) < self._ttl

    @staticmethod
    def _to_quote(entry: PriceCacheEntry, cached: bool, stale: bool = False) -> Quote:
        return Quote(
            ticker=entry.ticker,
            price=entry.price,
            updated_at=to_eastern(entry.updated_at),
            cached=cached,
            previous_close=entry.previous_close,
            currency=entry.currency,
            dividend_yield=entry.dividend_yield,
            fifty_two_week_high=entry.fifty_two_week_high,
            fifty_two_week_low=entry.fifty_two_week_low,
            name=entry.name,
            logo_url=entry.logo_url,
            stale=stale,
        )
