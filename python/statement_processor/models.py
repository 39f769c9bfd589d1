"""
Statement Models

Unvalidated records recovered by the extractors (RawStatement,
RawTransaction, RawAccountInfo) and the canonical records produced by the
normalizer (Transaction, AccountInfo). The normalizer is the only place
that turns one into the other.
"""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from .utils import clean_text

WALLET_BRAND_TOKENS = ("opay", "o-pay")


class BankType(str, Enum):
    """Parsing strategy for a statement."""

    WALLET = "wallet"
    TRADITIONAL = "traditional"

    @classmethod
    def from_value(cls, value: Any) -> "BankType | None":
        """Resolve a declared bank type, accepting the wallet brand as an alias."""
        if isinstance(value, BankType):
            return value
        text = clean_text(value)
        if not text:
            return None
        text = text.lower()
        if text in WALLET_BRAND_TOKENS or text == cls.WALLET.value:
            return cls.WALLET
        if text == cls.TRADITIONAL.value:
            return cls.TRADITIONAL
        return None


class TransactionType(str, Enum):
    """Canonical transaction polarity."""

    CREDIT = "credit"
    DEBIT = "debit"

    @property
    def legacy_type(self) -> str:
        return "income" if self is TransactionType.CREDIT else "expense"


class StatementSource(Enum):
    """Where a transaction entered the system.

    Each source has its own synthetic reference prefix and default channel.
    """

    WALLET = ("OP", "Opay Mobile App")
    BANK_IMPORT = ("IMP", "Bank Statement Import")
    MANUAL = ("MAN", "Manual Entry")

    @property
    def reference_prefix(self) -> str:
        return self.value[0]

    @property
    def channel(self) -> str:
        return self.value[1]

    @classmethod
    def for_bank_type(cls, bank_type: BankType | None) -> "StatementSource":
        if bank_type is BankType.WALLET:
            return cls.WALLET
        return cls.BANK_IMPORT


def _first(data: dict, *keys: str) -> Any:
    """Return the first non-empty value among alias keys."""
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return value
    return None


@dataclass
class RawTransaction:
    """A transaction as recovered from a file, before validation.

    Nothing here is guaranteed valid: the amount may be zero, negative or
    unparsable and the date may be in any format.
    """

    date: Any = None
    amount: Any = None
    time: str | None = None
    description: str | None = None
    type: str | None = None
    balance_after: Any = None
    category: str | None = None
    transaction_reference: str | None = None
    channel: str | None = None
    counterparty: str | None = None
    legacy_type: str | None = None

    @classmethod
    def from_mapping(cls, data: dict) -> "RawTransaction":
        """Build from a loosely keyed dictionary (JSON upload or API body)."""
        return cls(
            date=_first(data, "date", "transaction_date", "valueDate", "value_date"),
            amount=_first(data, "amount", "debit", "credit"),
            time=clean_text(data.get("time")),
            description=clean_text(
                _first(data, "description", "narration", "details", "memo")
            ),
            type=clean_text(data.get("type")),
            balance_after=_first(data, "balance_after", "balance", "runningBalance"),
            category=clean_text(data.get("category")),
            transaction_reference=clean_text(
                _first(data, "transaction_reference", "reference", "ref")
            ),
            channel=clean_text(_first(data, "channel", "source")),
            counterparty=clean_text(
                _first(data, "counterparty", "beneficiary", "sender")
            ),
            legacy_type=clean_text(data.get("legacy_type")),
        )


@dataclass
class RawAccountInfo:
    """Partial account details recovered from a statement."""

    account_name: str | None = None
    account_number: str | None = None
    bank_name: str | None = None
    account_type: str | None = None
    currency: str | None = None
    statement_start: str | None = None
    statement_end: str | None = None
    opening_balance: Any = None
    closing_balance: Any = None
    wallet_balance: Any = None
    total_debits: Any = None
    total_credits: Any = None

    @classmethod
    def from_mapping(cls, data: dict) -> "RawAccountInfo":
        period = data.get("statement_period") or data.get("statementPeriod") or {}
        if not isinstance(period, dict):
            period = {}

        return cls(
            account_name=clean_text(_first(data, "account_name", "accountName", "name")),
            account_number=clean_text(
                _first(data, "account_number", "accountNumber", "number")
            ),
            bank_name=clean_text(_first(data, "bank_name", "bankName", "bank")),
            account_type=clean_text(_first(data, "account_type", "accountType")),
            currency=clean_text(data.get("currency")),
            statement_start=clean_text(
                _first(period, "start_date", "startDate")
                or _first(data, "startDate", "from")
            ),
            statement_end=clean_text(
                _first(period, "end_date", "endDate")
                or _first(data, "endDate", "to")
            ),
            opening_balance=_first(data, "opening_balance", "openingBalance"),
            closing_balance=_first(data, "closing_balance", "closingBalance"),
            wallet_balance=_first(data, "wallet_balance", "walletBalance"),
            total_debits=_first(data, "total_debits", "totalDebits"),
            total_credits=_first(data, "total_credits", "totalCredits"),
        )

    def has_data(self) -> bool:
        return any(value not in (None, "") for value in asdict(self).values())


@dataclass
class RawStatement:
    """Loosely typed result of any extractor."""

    bank_type: BankType | None = None
    account_info: RawAccountInfo | None = None
    transactions: list[RawTransaction] = field(default_factory=list)
    rejected_rows: int = 0
    warnings: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.transactions and self.account_info is None


@dataclass(frozen=True)
class Transaction:
    """Canonical, validated transaction owned by one user."""

    user_id: str
    date: date
    time: str
    description: str
    type: TransactionType
    amount: Decimal
    category: str
    channel: str
    transaction_reference: str
    balance_after: Decimal | None = None
    counterparty: str | None = None
    id: str | None = None
    # False when the time was filled in at import rather than read from the file
    time_from_source: bool = field(default=True, compare=False)

    @property
    def legacy_type(self) -> str:
        return self.type.legacy_type

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "date": self.date.isoformat(),
            "time": self.time,
            "description": self.description,
            "type": self.type.value,
            "amount": float(self.amount),
            "balance_after": (
                float(self.balance_after) if self.balance_after is not None else None
            ),
            "channel": self.channel,
            "transaction_reference": self.transaction_reference,
            "counterparty": self.counterparty,
            "category": self.category,
            "legacy_type": self.legacy_type,
        }


@dataclass
class AccountInfo:
    """Per-user account snapshot, overwritten on every successful upload."""

    user_id: str
    account_name: str
    account_number: str
    bank_name: str
    account_type: str
    currency: str
    statement_start: date | None = None
    statement_end: date | None = None
    opening_balance: Decimal = Decimal("0")
    closing_balance: Decimal = Decimal("0")
    wallet_balance: Decimal = Decimal("0")
    total_debits: Decimal = Decimal("0")
    total_credits: Decimal = Decimal("0")
    last_updated: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "account_name": self.account_name,
            "account_number": self.account_number,
            "bank_name": self.bank_name,
            "account_type": self.account_type,
            "currency": self.currency,
            "statement_period": {
                "start_date": self.statement_start.isoformat() if self.statement_start else None,
                "end_date": self.statement_end.isoformat() if self.statement_end else None,
            },
            "opening_balance": float(self.opening_balance),
            "closing_balance": float(self.closing_balance),
            "wallet_balance": float(self.wallet_balance),
            "total_debits": float(self.total_debits),
            "total_credits": float(self.total_credits),
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
        }


@dataclass
class NormalizedStatement:
    """Output of the normalizer: canonical records plus rejection stats."""

    bank_type: BankType
    account_info: AccountInfo | None = None
    transactions: list[Transaction] = field(default_factory=list)
    skipped: int = 0
    skip_reasons: list[str] = field(default_factory=list)
