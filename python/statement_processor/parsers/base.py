"""
Base Statement Parser Module

Abstract base for regex-driven statement parsers that turn extracted PDF
text into a RawStatement.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..categorizer import CategoryClassifier, default_classifier
from ..models import (
    BankType,
    RawAccountInfo,
    RawStatement,
    RawTransaction,
    StatementSource,
    TransactionType,
)
from ..references import ReferenceGenerator
from ..utils import clean_text, is_iso_date, normalize_time, parse_amount, to_iso_date

logger = logging.getLogger(__name__)

CREDIT_KEYWORDS = (
    "received",
    "credit",
    "deposit",
    "refund",
    "cashback",
    "bonus",
    "salary",
    "income",
    "loan disbursement",
)

DEBIT_KEYWORDS = (
    "sent",
    "paid",
    "purchase",
    "withdrawal",
    "transfer",
    "bill",
    "airtime",
    "data",
    "loan repayment",
)

AMOUNT_FIELDS = {
    "opening_balance",
    "closing_balance",
    "wallet_balance",
    "total_debits",
    "total_credits",
}
DATE_FIELDS = {"statement_start", "statement_end"}


class TransactionLineParser(ABC):
    """One transaction line shape.

    Implementations return the captured fields for a line, or None when the
    line does not have their shape.
    """

    label: str = "line"

    @abstractmethod
    def parse_line(self, line: str) -> dict[str, str] | None:
        pass


class RegexLineParser(TransactionLineParser):
    """Line shape described by a regex with named groups.

    Recognized groups: date, time, description, reference, amount, balance,
    type, status.
    """

    def __init__(self, label: str, pattern: str, flags: int = re.IGNORECASE):
        self.label = label
        self.pattern = re.compile(pattern, flags)

    def parse_line(self, line: str) -> dict[str, str] | None:
        match = self.pattern.match(line)
        if not match:
            return None
        return {k: v for k, v in match.groupdict().items() if v is not None}

    def __repr__(self) -> str:
        return f"RegexLineParser({self.label!r})"


@dataclass(frozen=True)
class AccountFieldPattern:
    """Regex for account-level fields; each named group fills the field of the same name."""

    label: str
    pattern: re.Pattern

    @classmethod
    def compile(cls, label: str, pattern: str) -> "AccountFieldPattern":
        return cls(label=label, pattern=re.compile(pattern, re.IGNORECASE | re.MULTILINE))


def infer_polarity(description: str) -> TransactionType:
    """Best-effort credit/debit guess from description keywords."""
    desc = description.lower()

    if any(keyword in desc for keyword in CREDIT_KEYWORDS):
        return TransactionType.CREDIT
    if any(keyword in desc for keyword in DEBIT_KEYWORDS):
        return TransactionType.DEBIT
    if "from" in desc and "₦" in desc:
        return TransactionType.CREDIT

    return TransactionType.DEBIT


def resolve_type_token(token: str | None) -> TransactionType | None:
    """Map an explicit statement type token (CR/DR/Credit/Debit) to a polarity."""
    if not token:
        return None
    token = token.strip().lower()
    if token in ("cr", "credit"):
        return TransactionType.CREDIT
    if token in ("dr", "debit"):
        return TransactionType.DEBIT
    return None


class BaseStatementParser(ABC):
    """Abstract base class for text statement parsers.

    Subclasses declare their tables: ACCOUNT_PATTERNS (first match wins per
    field) and LINE_PARSERS (tried most to least specific; the first shape
    that matches a line decides it).
    """

    BANK_TYPE: BankType = BankType.TRADITIONAL
    SOURCE: StatementSource = StatementSource.BANK_IMPORT

    ACCOUNT_PATTERNS: list[AccountFieldPattern] = []
    LINE_PARSERS: list[TransactionLineParser] = []

    def __init__(
        self,
        classifier: CategoryClassifier | None = None,
        reference_generator: ReferenceGenerator | None = None,
        logger: logging.Logger | None = None,
    ):
        self.classifier = classifier or default_classifier
        self.reference_generator = reference_generator
        self.logger = logger or globals()["logger"]

    def parse(self, text: str) -> RawStatement:
        """Parse statement text.

        Args:
            text: Raw text extracted from the statement

        Returns:
            RawStatement with account info (if any field was found) and
            transactions in document order
        """
        generator = self.reference_generator or ReferenceGenerator()

        account_info = self.parse_account_info(text)
        transactions, rejected = self.parse_transactions(text, generator)

        self.logger.info(
            f"{self.BANK_TYPE.value} parser recovered {len(transactions)} transactions "
            f"({rejected} rejected)"
        )

        return RawStatement(
            bank_type=self.BANK_TYPE,
            account_info=account_info,
            transactions=transactions,
            rejected_rows=rejected,
        )

    def parse_account_info(self, text: str) -> RawAccountInfo | None:
        info = RawAccountInfo()

        for field_pattern in self.ACCOUNT_PATTERNS:
            match = field_pattern.pattern.search(text)
            if not match:
                continue

            for name, value in match.groupdict().items():
                value = clean_text(value)
                if value is None or getattr(info, name) is not None:
                    continue
                if name in AMOUNT_FIELDS:
                    value = parse_amount(value)
                elif name in DATE_FIELDS:
                    value = to_iso_date(value)
                setattr(info, name, value)

        if not info.has_data():
            return None

        self.finalize_account_info(info)
        return info

    def finalize_account_info(self, info: RawAccountInfo) -> None:
        """Fill parser-specific defaults once at least one field was found."""

    def parse_transactions(
        self, text: str, generator: ReferenceGenerator
    ) -> tuple[list[RawTransaction], int]:
        transactions = []
        seen = set()
        rejected = 0

        for raw_line in text.splitlines():
            line = raw_line.strip()
            if not line:
                continue

            fields = self.match_line(line)
            if fields is None:
                continue

            transaction = self.build_transaction(fields, generator)
            if transaction is None:
                rejected += 1
                continue

            key = (transaction.date, transaction.amount, transaction.description)
            if key in seen:
                continue
            seen.add(key)
            transactions.append(transaction)

        return transactions, rejected

    def match_line(self, line: str) -> dict[str, str] | None:
        for line_parser in self.LINE_PARSERS:
            fields = line_parser.parse_line(line)
            if fields is not None:
                return fields
        return None

    def build_transaction(
        self, fields: dict[str, str], generator: ReferenceGenerator
    ) -> RawTransaction | None:
        """Turn captured line fields into a RawTransaction, or None to reject."""
        amount = parse_amount(fields.get("amount"))
        if amount is None or amount <= 0:
            return None

        description = re.sub(r"\s+", " ", fields.get("description", "")).strip()
        if len(description) <= 2:
            return None

        date_value = to_iso_date(fields.get("date"))
        if not is_iso_date(date_value):
            return None

        polarity = resolve_type_token(fields.get("type")) or infer_polarity(description)

        return RawTransaction(
            date=date_value,
            time=normalize_time(fields.get("time")),
            description=description,
            type=polarity.value,
            amount=amount,
            balance_after=parse_amount(fields.get("balance")),
            category=self.classifier.classify(description),
            transaction_reference=(
                fields.get("reference")
                or generator.generate(self.SOURCE.reference_prefix)
            ),
            channel=self.SOURCE.channel,
        )
