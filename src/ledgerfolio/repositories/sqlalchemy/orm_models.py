"""SQLAlchemy ORM model definitions."""

from decimal import Decimal

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Enum as SqlEnum,
)
from sqlalchemy.orm import relationship

from ledgerfolio.core.timezone import now_eastern
from ledgerfolio.repositories.sqlalchemy.database import Base
from ledgerfolio.domain.models.enums import TransactionAction, ImportSource


class AccountORM(Base):
    """SQLAlchemy model for Account."""

    __tablename__ = "accounts"

    account_id = Column(String(36), primary_key=True)
    account_number = Column(String(64), unique=True, nullable=False)
    account_type = Column(String(64), nullable=True)
    currency = Column(String(3), nullable=False, default="CAD")
    created_at_est = Column(DateTime, nullable=False, default=now_eastern)

    transactions = relationship("TransactionORM", back_populates="account")


class ImportFileORM(Base):
    """SQLAlchemy model for ImportFile (one per ingestion run)."""

    __tablename__ = "import_files"

    import_id = Column(String(36), primary_key=True)
    filename = Column(String(255), nullable=False)
    file_hash = Column(String(64), nullable=False, index=True)
    source = Column(SqlEnum(ImportSource), nullable=False, default=ImportSource.FILE)
    row_count = Column(Integer, nullable=False, default=0)
    inserted_rows = Column(Integer, nullable=False, default=0)
    skipped_rows = Column(Integer, nullable=False, default=0)
    failed_rows = Column(Integer, nullable=False, default=0)
    imported_at_est = Column(DateTime, nullable=False, default=now_eastern)


class TransactionORM(Base):
    """SQLAlchemy model for Transaction (ledger row)."""

    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_account_date", "account_id", "transaction_date"),
    )

    txn_id = Column(String(36), primary_key=True)
    # Insertion order tiebreaker for rows on the same date
    seq = Column(Integer, nullable=False, default=0)
    account_id = Column(String(36), ForeignKey("accounts.account_id"), nullable=False)
    import_file_id = Column(String(36), ForeignKey("import_files.import_id"), nullable=True)
    transaction_date = Column(Date, nullable=False, index=True)
    settlement_date = Column(Date, nullable=True)
    action = Column(SqlEnum(TransactionAction), nullable=False)
    symbol = Column(String(32), nullable=True)
    symbol_mapped = Column(String(32), nullable=True)
    description = Column(Text, nullable=True)
    quantity = Column(Numeric(precision=20, scale=8), nullable=True)
    price = Column(Numeric(precision=20, scale=6), nullable=True)
    gross_amount = Column(Numeric(precision=20, scale=4), nullable=True)
    commission = Column(Numeric(precision=20, scale=4), nullable=True)
    net_amount = Column(Numeric(precision=20, scale=4), nullable=True)
    currency = Column(String(3), nullable=False)
    currency_equivalent = Column(Numeric(precision=20, scale=4), nullable=True)
    activity_type = Column(String(64), nullable=True)
    source = Column(SqlEnum(ImportSource), nullable=False, default=ImportSource.FILE)
    source_row_hash = Column(String(64), unique=True, nullable=False)
    created_at_est = Column(DateTime, nullable=False, default=now_eastern)

    account = relationship("AccountORM", back_populates="transactions")


class HoldingORM(Base):
    """SQLAlchemy model for Holding (derived positions)."""

    __tablename__ = "holdings"
    __table_args__ = (UniqueConstraint("account_id", "symbol", name="uq_holdings_account_symbol"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(String(36), ForeignKey("accounts.account_id"), nullable=False)
    symbol = Column(String(32), nullable=False)
    quantity = Column(Numeric(precision=20, scale=8), nullable=False, default=Decimal("0"))
    average_cost = Column(Numeric(precision=20, scale=6), nullable=False, default=Decimal("0"))
    currency = Column(String(3), nullable=False, default="CAD")
    updated_at_est = Column(DateTime, nullable=True)


class PriceCacheORM(Base):
    """SQLAlchemy model for PriceCacheEntry."""

    __tablename__ = "price_cache"

    ticker = Column(String(32), primary_key=True)
    price = Column(Numeric(precision=20, scale=6), nullable=False)
    previous_close = Column(Numeric(precision=20, scale=6), nullable=True)
    currency = Column(String(3), nullable=True)
    dividend_yield = Column(Numeric(precision=12, scale=6), nullable=True)
    fifty_two_week_high = Column(Numeric(precision=20, scale=6), nullable=True)
    fifty_two_week_low = Column(Numeric(precision=20, scale=6), nullable=True)
    name = Column(String(255), nullable=True)
    logo_url = Column(String(512), nullable=True)
    updated_at = Column(DateTime, nullable=False)


class SymbolMappingORM(Base):
    """SQLAlchemy model for SymbolMapping."""

    __tablename__ = "symbol_mappings"

    internal_code = Column(String(16), primary_key=True)
    symbol = Column(String(32), nullable=False)
    description = Column(Text, nullable=True)
    created_at_est = Column(DateTime, nullable=False, default=now_eastern)


class PortfolioSettingsORM(Base):
    """SQLAlchemy model for the single PortfolioSettings row."""

    __tablename__ = "portfolio_settings"

    id = Column(Integer, primary_key=True, default=1)
    weekly_amount = Column(Numeric(precision=20, scale=2), nullable=False, default=Decimal("0"))
    fx_fee_percent = Column(Numeric(precision=8, scale=4), nullable=False, default=Decimal("1.5"))
    updated_at_est = Column(DateTime, nullable=True, onupdate=now_eastern)


class AllocationTargetORM(Base):
    """SQLAlchemy model for AllocationTarget."""

    __tablename__ = "allocation_targets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    symbol = Column(String(32), unique=True, nullable=False)
    target_weight = Column(Numeric(precision=8, scale=4), nullable=False)
    currency = Column(String(3), nullable=False, default="CAD")


class BrokerSyncStateORM(Base):
    """SQLAlchemy model for broker sync bookkeeping."""

    __tablename__ = "broker_sync_state"

    account_number = Column(String(64), primary_key=True)
    last_synced_at = Column(DateTime, nullable=False)
