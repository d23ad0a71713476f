"""Reconciliation engine: merges incoming rows into the duplicate-free ledger."""

import logging
import uuid
from collections import Counter
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, Optional, Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ledgerfolio.core.exceptions import AppError, ImportRejectedError
from ledgerfolio.core.timezone import now_eastern
from ledgerfolio.domain.models import (
    Account,
    BrokerProfile,
    ImportFile,
    ImportSource,
    Transaction,
)
from ledgerfolio.domain.views import (
    ImportResult,
    NormalizedRow,
    PreviewResult,
    RowFailure,
)
from ledgerfolio.ingest import (
    RowNormalizer,
    SymbolResolver,
    compute_file_hash,
    compute_row_hash,
    content_signature,
    extract_currency_equivalent,
    normalize_account_type,
    read_table,
    row_signature,
)
from ledgerfolio.repositories.protocols import (
    AccountRepository,
    ImportFileRepository,
    TransactionRepository,
    UnitOfWork,
)

if TYPE_CHECKING:
    from ledgerfolio.services.holdings_sync import HoldingsSynchronizer

logger = logging.getLogger(__name__)


class ReconciliationEngine:
    """
    Ingestion orchestrator.

    Every row passes two duplicate guards in sequence: the content signature
    (same economic event from another file or channel, matched 1:1) and the
    row hash (same row of the same file). New rows are inserted one savepoint
    at a time so a bad row is reported without aborting the batch; the batch
    and its ImportFile record commit together. Holdings are resynchronized for
    every account that received rows.
    """

    def __init__(
        self,
        account_repo: AccountRepository,
        transaction_repo: TransactionRepository,
        import_repo: ImportFileRepository,
        unit_of_work: UnitOfWork,
        symbol_resolver: SymbolResolver,
        holdings_sync: Optional["HoldingsSynchronizer"] = None,
        error_limit: int = 20,
        parse_error_limit: int = 10,
        supported_currencies: Iterable[str] = ("CAD", "USD"),
    ):
        self._account_repo = account_repo
        self._transaction_repo = transaction_repo
        self._import_repo = import_repo
        self._uow = unit_of_work
        self._resolver = symbol_resolver
        self._holdings_sync = holdings_sync
        self._error_limit = error_limit
        self._parse_error_limit = parse_error_limit
        self._supported_currencies = list(supported_currencies)

    # ------------------------------------------------------------------
    # File ingestion
    # ------------------------------------------------------------------

    def import_file(
        self,
        content: bytes,
        filename: str,
        profile: BrokerProfile = BrokerProfile.QUESTRADE,
        default_account_number: Optional[str] = None,
        default_currency: Optional[str] = None,
        dedup_by_signature: bool = True,
        skip_known_files: bool = False,
    ) -> ImportResult:
        """
        Parse an uploaded file and ingest its valid rows.

        Raises:
            ImportRejectedError: unreadable file or no valid rows (nothing written)
        """
        normalizer = self._normalizer(profile, default_account_number, default_currency)
        parsed = normalizer.parse(read_table(content, filename))

        if not parsed.rows:
            raise ImportRejectedError(
                "No valid rows found in file",
                errors=[_failure_dict(f) for f in parsed.errors[: self._parse_error_limit]],
            )

        return self.ingest(
            parsed.rows,
            filename=filename,
            file_hash=compute_file_hash(content),
            source=ImportSource.FILE,
            parse_errors=parsed.errors,
            dedup_by_signature=dedup_by_signature,
            skip_known_files=skip_known_files,
        )

    def preview(
        self,
        content: bytes,
        filename: str,
        profile: BrokerProfile = BrokerProfile.QUESTRADE,
        default_account_number: Optional[str] = None,
        default_currency: Optional[str] = None,
        sample_size: int = 20,
    ) -> PreviewResult:
        """Parse without writing anything."""
        normalizer = self._normalizer(profile, default_account_number, default_currency)
        parsed = normalizer.parse(read_table(content, filename))

        totals: dict = {}
        for row in parsed.rows:
            if row.net_amount is not None:
                totals[row.currency] = totals.get(row.currency, Decimal("0")) + row.net_amount
        dates = [row.transaction_date for row in parsed.rows]

        return PreviewResult(
            valid_rows=parsed.valid_rows,
            rows=parsed.rows[:sample_size],
            errors=parsed.errors,
            accounts=sorted({row.account_number for row in parsed.rows}),
            date_from=min(dates) if dates else None,
            date_to=max(dates) if dates else None,
            currency_totals=totals,
        )

    def record_manual(self, row: NormalizedRow) -> ImportResult:
        """Insert a single hand-entered row; never deduplicated against the ledger."""
        channel_hash = compute_file_hash(f"manual:{uuid.uuid4()}".encode("utf-8"))
        return self.ingest(
            [row],
            filename="manual-entry",
            file_hash=channel_hash,
            source=ImportSource.MANUAL,
            dedup_by_signature=False,
        )

    # ------------------------------------------------------------------
    # Core algorithm
    # ------------------------------------------------------------------

    def ingest(
        self,
        rows: Sequence[NormalizedRow],
        filename: str,
        file_hash: str,
        source: ImportSource = ImportSource.FILE,
        parse_errors: Sequence[RowFailure] = (),
        dedup_by_signature: bool = True,
        skip_known_files: bool = False,
        row_identity: Optional[Sequence[int]] = None,
    ) -> ImportResult:
        """
        Merge normalized rows into the ledger.

        Args:
            rows: rows in original order
            file_hash: identity of the source file or channel
            parse_errors: rows already rejected by the normalizer (counted as failed)
            dedup_by_signature: skip rows whose content signature matches an
                existing ledger row in the batch date range
            skip_known_files: skip everything when this file hash was imported before
            row_identity: per-row index fed into the row hash (defaults to position)
        """
        if not rows:
            raise ImportRejectedError("No rows to import")

        result = ImportResult(total=len(rows), file_hash=file_hash)
        already_imported = skip_known_files and self._import_repo.get_by_hash(file_hash) is not None
        failures: list[RowFailure] = list(parse_errors)

        import_file = self._import_repo.create(
            ImportFile(
                import_id=str(uuid.uuid4()),
                filename=filename,
                file_hash=file_hash,
                source=source,
                row_count=len(rows) + len(parse_errors),
                imported_at_est=now_eastern(),
            )
        )
        result.import_id = import_file.import_id

        if already_imported:
            logger.info("File %s already imported (hash %s); skipping", filename, file_hash[:12])
            result.skipped = len(rows)
        else:
            touched = self._merge_rows(
                rows, import_file, file_hash, source, dedup_by_signature, row_identity, result, failures
            )
            result.account_ids = sorted(touched)

        result.failed = len(failures)
        result.errors = sorted(failures, key=lambda f: f.row)[: self._error_limit]

        import_file.inserted_rows = result.inserted
        import_file.skipped_rows = result.skipped
        import_file.failed_rows = result.failed
        self._import_repo.finalize(import_file)
        self._uow.commit()

        logger.info(
            "Imported %s: %d rows, %d inserted, %d skipped, %d failed",
            filename,
            result.total,
            result.inserted,
            result.skipped,
            result.failed,
        )

        if self._holdings_sync is not None:
            for account_id in result.account_ids:
                self._holdings_sync.sync(account_id)

        return result

    def _merge_rows(
        self,
        rows: Sequence[NormalizedRow],
        import_file: ImportFile,
        file_hash: str,
        source: ImportSource,
        dedup_by_signature: bool,
        row_identity: Optional[Sequence[int]],
        result: ImportResult,
        failures: list[RowFailure],
    ) -> set[str]:
        signatures = self._existing_signatures(rows) if dedup_by_signature else Counter()
        accounts: dict[str, Account] = {}
        touched: set[str] = set()

        for index, row in enumerate(rows):
            row_number = row.row_number or index + 2

            signature = row_signature(row)
            if signatures[signature] > 0:
                signatures[signature] -= 1
                result.skipped += 1
                logger.debug("Row %d duplicates ledger event %s", row_number, signature)
                continue

            identity = row_identity[index] if row_identity is not None else index
            row_hash = compute_row_hash(row, identity, file_hash)
            if self._transaction_repo.exists_by_hash(row_hash):
                result.skipped += 1
                continue

            try:
                account = self._upsert_account(row, accounts)
                # Learned mappings must survive a failed insert of this row
                with self._uow.savepoint():
                    symbol_mapped = self._resolver.resolve(row.symbol, row.description)
                with self._uow.savepoint():
                    self._transaction_repo.insert(
                        self._build_transaction(
                            row, account, symbol_mapped, row_hash, import_file, source
                        )
                    )
            except IntegrityError:
                if self._transaction_repo.exists_by_hash(row_hash):
                    # Inserted concurrently by another batch
                    result.skipped += 1
                else:
                    failures.append(RowFailure(row=row_number, message="Row violates a ledger constraint"))
                continue
            except (SQLAlchemyError, AppError, ArithmeticError, ValueError) as e:
                message = e.message if isinstance(e, AppError) else str(e)
                failures.append(RowFailure(row=row_number, message=message))
                continue

            result.inserted += 1
            touched.add(account.account_id)

        return touched

    def _existing_signatures(self, rows: Sequence[NormalizedRow]) -> Counter:
        """Signature counts of stored rows within the batch's date range."""
        dates = [row.transaction_date for row in rows]
        existing = self._transaction_repo.list_with_account_numbers(min(dates), max(dates))
        return Counter(
            content_signature(
                txn.transaction_date,
                txn.action.value,
                txn.symbol,
                txn.net_amount,
                txn.currency,
                account_number,
            )
            for txn, account_number in existing
        )

    def _upsert_account(self, row: NormalizedRow, accounts: dict[str, Account]) -> Account:
        """Find or create the owning account; existing accounts are left untouched."""
        number = row.account_number
        if number in accounts:
            return accounts[number]

        account = self._account_repo.get_by_number(number)
        if account is None:
            with self._uow.savepoint():
                account = self._account_repo.create(
                    Account(
                        account_id=str(uuid.uuid4()),
                        account_number=number,
                        account_type=normalize_account_type(row.account_type),
                        currency=row.currency,
                        created_at_est=now_eastern(),
                    )
                )
            logger.info("Created account %s (%s)", number, account.account_type or "unknown type")
        accounts[number] = account
        return account

    def _build_transaction(
        self,
        row: NormalizedRow,
        account: Account,
        symbol_mapped: Optional[str],
        row_hash: str,
        import_file: ImportFile,
        source: ImportSource,
    ) -> Transaction:
        currency_equivalent = (
            extract_currency_equivalent(row.description) if row.action.is_transfer else None
        )
        return Transaction(
            txn_id=str(uuid.uuid4()),
            account_id=account.account_id,
            import_file_id=import_file.import_id,
            transaction_date=row.transaction_date,
            settlement_date=row.settlement_date,
            action=row.action,
            symbol=row.symbol,
            symbol_mapped=symbol_mapped,
            description=row.description,
            quantity=row.quantity,
            price=row.price,
            gross_amount=row.gross_amount,
            commission=row.commission,
            net_amount=row.net_amount,
            currency=row.currency,
            currency_equivalent=currency_equivalent,
            activity_type=row.activity_type,
            source=source,
            source_row_hash=row_hash,
            created_at_est=now_eastern(),
        )

    def _normalizer(
        self,
        profile: BrokerProfile,
        default_account_number: Optional[str],
        default_currency: Optional[str],
    ) -> RowNormalizer:
        return RowNormalizer(
            profile=profile,
            default_account_number=default_account_number,
            default_currency=default_currency,
            supported_currencies=self._supported_currencies,
        )


def _failure_dict(failure: RowFailure) -> dict:
    return {"row": failure.row, "message": failure.message}
