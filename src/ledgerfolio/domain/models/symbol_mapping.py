"""Broker-internal symbol code mapping."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class SymbolMapping:
    """Learned mapping from a broker-internal code to a market ticker."""

    internal_code: str
    symbol: str
    description: Optional[str] = None
    created_at_est: Optional[datetime] = field(default=None)
