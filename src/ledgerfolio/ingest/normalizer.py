"""Normalization of broker-specific rows into the common transaction shape."""

import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

from ledgerfolio.core.exceptions import RowError
from ledgerfolio.core.timezone import parse_trade_date
from ledgerfolio.domain.models import BrokerProfile, TransactionAction
from ledgerfolio.domain.views import NormalizedRow, ParseResult, RowFailure

A = TransactionAction

# Case-insensitive lookup of transaction-type text, including broker action codes
ACTION_TABLE: dict[str, TransactionAction] = {
    "buy": A.BUY,
    "sell": A.SELL,
    "dividend": A.DIVIDEND_CASH,
    "div": A.DIVIDEND_CASH,
    "reinvested dividend": A.DIVIDEND_DRIP,
    "dividend reinvestment": A.DIVIDEND_DRIP,
    "drip": A.DIVIDEND_DRIP,
    "rei": A.DIVIDEND_DRIP,
    "transfer in": A.TRANSFER_IN,
    "deposit": A.TRANSFER_IN,
    "con": A.TRANSFER_IN,
    "tfi": A.TRANSFER_IN,
    "transfer out": A.TRANSFER_OUT,
    "withdrawal": A.TRANSFER_OUT,
    "wdr": A.TRANSFER_OUT,
    "tfo": A.TRANSFER_OUT,
    "stock split": A.SPLIT,
    "split": A.SPLIT,
    "dis": A.SPLIT,
    # Cash-only broker codes: interest, fees, FX conversions, adjustments
    "int": A.OTHER,
    "fch": A.OTHER,
    "fxt": A.OTHER,
    "adj": A.OTHER,
    "dep": A.OTHER,
    "lfj": A.OTHER,
    "nac": A.OTHER,
    "brw": A.OTHER,
}

# Checked in order; first keyword found in the description wins
DESCRIPTION_RULES: list[tuple[tuple[str, ...], TransactionAction]] = [
    (("REINVEST", "DRIP"), A.DIVIDEND_DRIP),
    (("DIVIDEND", "DIST ON", "TAX WITHHELD"), A.DIVIDEND_CASH),
    (("CONTRIBUTION", "DEPOSIT", "TRANSFER IN"), A.TRANSFER_IN),
    (("WITHDRAWAL", "TRANSFER OUT"), A.TRANSFER_OUT),
    (("SPLIT",), A.SPLIT),
    (("INTEREST", "FEE", "CHARGE", "FX CONVERSION", "ADJUSTMENT"), A.OTHER),
    (("BUY", "BOUGHT"), A.BUY),
    (("SELL", "SOLD"), A.SELL),
]

_CAD_EQUIVALENT_PATTERNS = [
    re.compile(r"([\d,]+\.?\d*)\s*C\$\s*EQUIVALENT", re.I),
    re.compile(r"C\$\s*EQUIVALENT\s*\$?([\d,]+\.?\d*)", re.I),
]

FIELDS = (
    "transaction_date",
    "settlement_date",
    "action",
    "symbol",
    "description",
    "quantity",
    "price",
    "gross_amount",
    "commission",
    "net_amount",
    "currency",
    "account_number",
    "account_type",
    "activity_type",
)


@dataclass(frozen=True)
class ColumnProfile:
    """Maps canonical fields to the header names a given export uses."""

    name: BrokerProfile
    columns: dict[str, str]
    infer_action_from_description: bool = False


PROFILES: dict[BrokerProfile, ColumnProfile] = {
    BrokerProfile.QUESTRADE: ColumnProfile(
        name=BrokerProfile.QUESTRADE,
        columns={
            "transaction_date": "Transaction Date",
            "settlement_date": "Settlement Date",
            "action": "Action",
            "symbol": "Symbol",
            "description": "Description",
            "quantity": "Quantity",
            "price": "Price",
            "gross_amount": "Gross Amount",
            "commission": "Commission",
            "net_amount": "Net Amount",
            "currency": "Currency",
            "account_number": "Account #",
            "account_type": "Account Type",
            "activity_type": "Activity Type",
        },
        infer_action_from_description=True,
    ),
    BrokerProfile.WEALTHSIMPLE: ColumnProfile(
        name=BrokerProfile.WEALTHSIMPLE,
        columns={
            "transaction_date": "Date",
            "action": "Transaction Type",
            "symbol": "Symbol",
            "description": "Description",
            "quantity": "Quantity",
            "price": "Price",
            "commission": "Commission",
            "net_amount": "Amount",
            "currency": "Currency",
            "account_number": "Account",
        },
    ),
    BrokerProfile.GENERIC: ColumnProfile(
        name=BrokerProfile.GENERIC,
        columns={name: name for name in FIELDS},
    ),
}


def map_action(value: Optional[str]) -> Optional[TransactionAction]:
    """Look up transaction-type text; None when unrecognized."""
    if value is None:
        return None
    return ACTION_TABLE.get(str(value).strip().lower())


def infer_action(description: Optional[str]) -> Optional[TransactionAction]:
    """Guess the action from description keywords."""
    if not description:
        return None
    upper = description.upper()
    for keywords, action in DESCRIPTION_RULES:
        if any(keyword in upper for keyword in keywords):
            return action
    return None


def normalize_account_type(value: Optional[str]) -> Optional[str]:
    """Collapse broker account type labels to TFSA / RRSP where recognizable."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    upper = text.upper()
    if "TFSA" in upper:
        return "TFSA"
    if "RRSP" in upper or "RSP" in upper:
        return "RRSP"
    return text


def extract_currency_equivalent(description: Optional[str]) -> Optional[Decimal]:
    """Pull the 'C$ EQUIVALENT' figure out of a transfer description."""
    if not description:
        return None
    for pattern in _CAD_EQUIVALENT_PATTERNS:
        match = pattern.search(description)
        if match:
            try:
                return Decimal(match.group(1).replace(",", ""))
            except InvalidOperation:
                return None
    return None


def parse_amount(value: Any, field_name: str = "amount") -> Optional[Decimal]:
    """
    Parse a money/quantity cell. Strips $, commas and spaces; (x) is negative.

    Raises:
        RowError: for non-numeric text
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise RowError(f"Invalid {field_name}: {value}")
    if isinstance(value, (int, float, Decimal)):
        return Decimal(str(value))

    text = str(value).strip().replace("$", "").replace(",", "").replace(" ", "")
    if not text or text == "-":
        return None
    negative = text.startswith("(") and text.endswith(")")
    if negative:
        text = text[1:-1]
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise RowError(f"Invalid {field_name}: {value}")
    return -amount if negative else amount


def _abs(value: Optional[Decimal]) -> Optional[Decimal]:
    return abs(value) if value is not None else None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class RowNormalizer:
    """
    Converts raw rows of one export layout into NormalizedRow objects.

    A bad row raises RowError from normalize(); parse() collects those into
    the failure list so the rest of the batch still goes through.
    """

    def __init__(
        self,
        profile: BrokerProfile = BrokerProfile.QUESTRADE,
        default_account_number: Optional[str] = None,
        default_currency: Optional[str] = None,
        supported_currencies: Iterable[str] = ("CAD", "USD"),
    ):
        self._profile = PROFILES[BrokerProfile(profile)]
        self._default_account_number = default_account_number
        self._default_currency = default_currency.upper() if default_currency else None
        self._supported_currencies = {c.upper() for c in supported_currencies}

    @property
    def profile(self) -> ColumnProfile:
        return self._profile

    def parse(self, records: list[dict[str, Any]]) -> ParseResult:
        """Normalize every record; row numbers count the header as row 1."""
        result = ParseResult()
        for index, record in enumerate(records):
            row_number = index + 2
            try:
                result.rows.append(self.normalize(record, row_number))
            except RowError as e:
                result.errors.append(RowFailure(row=row_number, message=e.message))
        return result

    def normalize(self, record: dict[str, Any], row_number: Optional[int] = None) -> NormalizedRow:
        """Normalize one raw record or raise RowError."""
        cells = self._extract(record)

        description = _text(cells.get("description"))
        raw_action = _text(cells.get("action"))
        action = self._resolve_action(raw_action, description)

        symbol = _text(cells.get("symbol"))
        symbol = symbol.upper() if symbol else None
        if symbol is None and action.requires_symbol:
            raise RowError("missing ticker")

        try:
            transaction_date = parse_trade_date(cells.get("transaction_date"))
            settlement_date = parse_trade_date(cells.get("settlement_date"))
        except (ValueError, OverflowError) as e:
            raise RowError(f"Invalid date: {e}")
        if transaction_date is None:
            raise RowError("missing transaction date")

        currency = (_text(cells.get("currency")) or self._default_currency or "").upper()
        if currency not in self._supported_currencies:
            raise RowError(f"Invalid currency: {currency or 'missing'}")

        account_number = _text(cells.get("account_number")) or self._default_account_number
        if not account_number:
            raise RowError("missing account number")

        quantity = _abs(parse_amount(cells.get("quantity"), "quantity"))
        price = _abs(parse_amount(cells.get("price"), "price"))
        commission = _abs(parse_amount(cells.get("commission"), "commission"))
        gross_amount = parse_amount(cells.get("gross_amount"), "gross amount")
        net_amount = parse_amount(cells.get("net_amount"), "net amount")
        if net_amount is None:
            net_amount = self._derive_net(action, quantity, price, commission)

        return NormalizedRow(
            transaction_date=transaction_date,
            settlement_date=settlement_date or transaction_date,
            action=action,
            raw_action=raw_action,
            symbol=symbol,
            description=description,
            quantity=quantity,
            price=price,
            gross_amount=gross_amount,
            commission=commission,
            net_amount=net_amount,
            currency=currency,
            account_number=str(account_number),
            account_type=normalize_account_type(_text(cells.get("account_type"))),
            activity_type=_text(cells.get("activity_type")),
            row_number=row_number,
        )

    def _extract(self, record: dict[str, Any]) -> dict[str, Any]:
        by_lower = {str(k).strip().lower(): v for k, v in record.items()}
        return {
            name: by_lower.get(header.lower())
            for name, header in self._profile.columns.items()
        }

    def _resolve_action(
        self,
        raw_action: Optional[str],
        description: Optional[str],
    ) -> TransactionAction:
        if raw_action:
            action = map_action(raw_action)
            if action is None:
                raise RowError(f"Unrecognized transaction type: {raw_action}")
            return action
        if self._profile.infer_action_from_description:
            action = infer_action(description)
            if action is not None:
                return action
        raise RowError("missing transaction type")

    @staticmethod
    def _derive_net(
        action: TransactionAction,
        quantity: Optional[Decimal],
        price: Optional[Decimal],
        commission: Optional[Decimal],
    ) -> Optional[Decimal]:
        """Cash effect of a trade for layouts that omit the net amount column."""
        if quantity is None or price is None:
            return None
        fee = commission or Decimal("0")
        if action == TransactionAction.BUY:
            return -(quantity * price + fee)
        if action == TransactionAction.SELL:
            return quantity * price - fee
        return None
