"""Ledger service: accounts, ledger queries and cash figures."""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ledgerfolio.core.exceptions import NotFoundError, ValidationError
from ledgerfolio.core.timezone import today_eastern
from ledgerfolio.domain.models import Account, Transaction, TransactionAction
from ledgerfolio.domain.views import ImportResult, NormalizedRow
from ledgerfolio.repositories.protocols import AccountRepository, TransactionRepository
from ledgerfolio.services.reconciliation_service import ReconciliationEngine


@dataclass
class TransactionCreate:
    """Input data for a hand-entered ledger row."""

    account_number: str
    action: TransactionAction
    currency: str
    transaction_date: Optional[date] = None
    symbol: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[Decimal] = None
    price: Optional[Decimal] = None
    commission: Optional[Decimal] = None
    net_amount: Optional[Decimal] = None
    account_type: Optional[str] = None


class LedgerService:
    """
    Read access to the ledger plus manual entry.

    The ledger is append-only; manual rows go through the reconciliation
    engine like any other source so holdings stay in sync.
    """

    def __init__(
        self,
        account_repo: AccountRepository,
        transaction_repo: TransactionRepository,
        engine: Optional[ReconciliationEngine] = None,
    ):
        self._account_repo = account_repo
        self._transaction_repo = transaction_repo
        self._engine = engine

    def list_accounts(self) -> list[Account]:
        """List all accounts."""
        return self._account_repo.list_all()

    def get_account(self, account_id: str) -> Account:
        """Get account by ID."""
        account = self._account_repo.get_by_id(account_id)
        if not account:
            raise NotFoundError("Account", account_id)
        return account

    def get_account_by_number(self, account_number: str) -> Account:
        """Get account by external account number."""
        account = self._account_repo.get_by_number(account_number)
        if not account:
            raise NotFoundError("Account", account_number)
        return account

    def query_transactions(
        self,
        account_ids: Optional[list[str]] = None,
        symbols: Optional[list[str]] = None,
        actions: Optional[list[TransactionAction]] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Transaction]:
        """Query the ledger with optional filters."""
        if start_date and end_date and start_date > end_date:
            raise ValidationError("start_date must not be after end_date")
        return self._transaction_repo.query(
            account_ids=account_ids,
            symbols=[s.upper() for s in symbols] if symbols else None,
            actions=actions,
            start_date=start_date,
            end_date=end_date,
        )

    def add_transaction(self, data: TransactionCreate) -> ImportResult:
        """Append a hand-entered row to the ledger."""
        if self._engine is None:
            raise ValidationError("Manual entry is not available")
        if data.action.requires_symbol and not data.symbol:
            raise ValidationError(f"{data.action.value} requires a symbol")

        quantity = abs(data.quantity) if data.quantity is not None else None
        price = abs(data.price) if data.price is not None else None
        commission = abs(data.commission) if data.commission is not None else None
        net_amount = data.net_amount
        if net_amount is None and quantity is not None and price is not None:
            fee = commission or Decimal("0")
            if data.action == TransactionAction.BUY:
                net_amount = -(quantity * price + fee)
            elif data.action == TransactionAction.SELL:
                net_amount = quantity * price - fee

        row = NormalizedRow(
            transaction_date=data.transaction_date or today_eastern(),
            action=data.action,
            currency=data.currency.upper(),
            account_number=data.account_number,
            symbol=data.symbol.strip().upper() if data.symbol else None,
            description=data.description,
            quantity=quantity,
            price=price,
            commission=commission,
            net_amount=net_amount,
            account_type=data.account_type,
            row_number=1,
        )
        return self._engine.record_manual(row)

    def cash_balances(self, account_id: Optional[str] = None) -> dict[str, Decimal]:
        """Sum of net amounts per currency."""
        balances: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
        for txn in self._transactions(account_id):
            if txn.net_amount is not None:
                balances[txn.currency] += txn.net_amount
        return dict(balances)

    def cash_in_base_currency(
        self,
        fx_rate: Decimal,
        account_id: Optional[str] = None,
        base_currency: str = "CAD",
    ) -> Decimal:
        """Cash across currencies expressed in the base currency (USD converted at fx_rate)."""
        total = Decimal("0")
        for currency, amount in self.cash_balances(account_id).items():
            total += amount if currency == base_currency else amount * fx_rate
        return total

    def net_deposits(self, account_id: Optional[str] = None) -> dict[str, Decimal]:
        """
        Money moved into the accounts minus money moved out, per currency.

        Transfers quoting a C$ equivalent are counted in CAD at that figure.
        """
        totals: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
        for txn in self._transactions(account_id):
            if not txn.action.is_transfer:
                continue
            if txn.currency_equivalent is not None:
                currency, amount = "CAD", txn.currency_equivalent
            elif txn.net_amount is not None:
                currency, amount = txn.currency, abs(txn.net_amount)
            else:
                continue
            if txn.action == TransactionAction.TRANSFER_IN:
                totals[currency] += amount
            else:
                totals[currency] -= amount
        return dict(totals)

    def _transactions(self, account_id: Optional[str]) -> list[Transaction]:
        if account_id:
            self.get_account(account_id)
            return self._transaction_repo.list_by_account(account_id)
        return self._transaction_repo.query()
