"""Quote cache endpoints."""

from fastapi import APIRouter, Depends, Query

from ledgerfolio.api.deps import get_quote_cache
from ledgerfolio.api.schemas import QuoteResponse, QuotesResponse, SymbolMatchResponse
from ledgerfolio.core.exceptions import ValidationError
from ledgerfolio.services import QuoteCache

router = APIRouter(prefix="/quotes", tags=["quotes"])


def _quotes_response(requested: list[str], quotes: dict) -> QuotesResponse:
    return QuotesResponse(
        quotes={t: QuoteResponse.model_validate(q) for t, q in quotes.items()},
        missing=[t for t in requested if t not in quotes],
    )


@router.get("", response_model=QuotesResponse)
def get_quotes(
    tickers: str = Query(..., description="Comma-separated tickers"),
    cache: QuoteCache = Depends(get_quote_cache),
) -> QuotesResponse:
    """Quotes for several tickers; tickers that could not be fetched are listed as missing."""
    requested = [t.strip().upper() for t in tickers.split(",") if t.strip()]
    if not requested:
        raise ValidationError("At least one ticker is required")
    return _quotes_response(requested, cache.get_quotes(requested))


@router.get("/search", response_model=list[SymbolMatchResponse])
def search_symbols(
    q: str = Query(..., min_length=1),
    cache: QuoteCache = Depends(get_quote_cache),
) -> list[SymbolMatchResponse]:
    return [SymbolMatchResponse.model_validate(m) for m in cache.search(q)]


@router.get("/cached", response_model=list[QuoteResponse])
def list_cached(cache: QuoteCache = Depends(get_quote_cache)) -> list[QuoteResponse]:
    """Every cached quote, without contacting the provider."""
    return [QuoteResponse.model_validate(q) for q in cache.get_all_cached()]


@router.post("/refresh", response_model=QuotesResponse)
def refresh_holdings(cache: QuoteCache = Depends(get_quote_cache)) -> QuotesResponse:
    """Refresh expired quotes for every held symbol."""
    quotes = cache.refresh_holdings()
    return _quotes_response(sorted(quotes), quotes)


@router.get("/{ticker}", response_model=QuoteResponse)
def get_quote(ticker: str, cache: QuoteCache = Depends(get_quote_cache)) -> QuoteResponse:
    return QuoteResponse.model_validate(cache.get_quote(ticker.strip().upper()))
