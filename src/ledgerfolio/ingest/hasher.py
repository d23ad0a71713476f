"""Row identities used for duplicate detection."""

import hashlib
import re
from decimal import Decimal
from typing import Optional

from ledgerfolio.domain.views import NormalizedRow

_WHITESPACE = re.compile(r"\s+")
_CENTS = Decimal("0.01")
# Scale of the ledger money columns
_STORED = Decimal("0.0001")


def compute_file_hash(content: bytes) -> str:
    """SHA-256 of the uploaded bytes; identifies a verbatim re-upload."""
    return hashlib.sha256(content).hexdigest()


def compute_row_hash(row: NormalizedRow, row_index: int, file_hash: str) -> str:
    """
    Deterministic identity of a row within its source file.

    Uploading the same file twice reproduces every hash, so each row
    collides with its earlier insert and is skipped.
    """
    parts = [
        str(row_index),
        row.transaction_date.isoformat(),
        row.settlement_date.isoformat() if row.settlement_date else "",
        row.action.value,
        row.symbol or "",
        _normalize_description(row.description),
        _fmt(row.quantity),
        _fmt(row.price),
        _fmt(row.gross_amount),
        _fmt(row.commission),
        _fmt(row.net_amount),
        row.currency,
        row.account_number,
        file_hash,
    ]
    return hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()


def content_signature(
    transaction_date,
    action: str,
    symbol: Optional[str],
    net_amount: Optional[Decimal],
    currency: str,
    account_number: str,
) -> str:
    """
    Fingerprint of an economic event, independent of the file it came in.

    date|action|symbol|net(2dp)|currency|account
    """
    # Round to the stored scale first so batch and ledger rows agree
    net = net_amount if net_amount is not None else Decimal("0")
    net = net.quantize(_STORED).quantize(_CENTS)
    if net == 0:
        net = Decimal("0.00")
    return "|".join(
        [
            transaction_date.isoformat(),
            action,
            symbol or "",
            f"{net:.2f}",
            currency,
            account_number,
        ]
    )


def row_signature(row: NormalizedRow) -> str:
    """Content signature of a normalized row."""
    return content_signature(
        row.transaction_date,
        row.action.value,
        row.symbol,
        row.net_amount,
        row.currency,
        row.account_number,
    )


def _normalize_description(description: Optional[str]) -> str:
    if not description:
        return ""
    return _WHITESPACE.sub(" ", description).strip()


def _fmt(value: Optional[Decimal]) -> str:
    if value is None:
        return ""
    return format(value.normalize(), "f")
