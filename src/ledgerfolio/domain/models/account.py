"""Account domain model."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class Account:
    """
    Brokerage account, the identity anchor for ledger rows.

    Created the first time an account number is seen during ingestion and
    never overwritten afterwards.
    """

    account_id: str
    account_number: str
    account_type: Optional[str] = None
    currency: str = "CAD"
    created_at_est: Optional[datetime] = field(default=None)
