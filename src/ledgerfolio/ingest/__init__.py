"""Ingestion: file reading, row normalization, symbol resolution and hashing."""

from ledgerfolio.ingest.hasher import (
    compute_file_hash,
    compute_row_hash,
    content_signature,
    row_signature,
)
from ledgerfolio.ingest.normalizer import (
    RowNormalizer,
    ColumnProfile,
    PROFILES,
    map_action,
    infer_action,
    normalize_account_type,
    extract_currency_equivalent,
    parse_amount,
)
from ledgerfolio.ingest.reader import read_table
from ledgerfolio.ingest.symbols import SymbolResolver, is_internal_code

__all__ = [
    "compute_file_hash",
    "compute_row_hash",
    "content_signature",
    "row_signature",
    "RowNormalizer",
    "ColumnProfile",
    "PROFILES",
    "map_action",
    "infer_action",
    "normalize_account_type",
    "extract_currency_equivalent",
    "parse_amount",
    "read_table",
    "SymbolResolver",
    "is_internal_code",
]
