"""
CSV Statement Extractor

Sniffs the header row of a CSV export to find the date, description,
amount, type and balance columns, then reads each data row.
"""

import csv
import logging
from io import StringIO

from .categorizer import CategoryClassifier, default_classifier
from .errors import MalformedInputError
from .models import (
    WALLET_BRAND_TOKENS,
    BankType,
    RawStatement,
    RawTransaction,
    TransactionType,
)
from .utils import clean_text, is_iso_date, parse_amount, to_iso_date

logger = logging.getLogger(__name__)

# Column role -> header substrings, claimed in this order
COLUMN_HINTS = [
    ("date", ("date", "time")),
    ("description", ("description", "narration", "details")),
    ("amount", ("amount", "value")),
    ("type", ("type", "credit", "debit")),
    ("balance", ("balance",)),
    ("category", ("category",)),
    ("reference", ("reference", "ref")),
]


def find_columns(headers: list[str]) -> dict[str, int]:
    """Map column roles to header indexes.

    The first header containing any hint claims a role; a header claimed by
    an earlier role is never reused.
    """
    normalized = [h.strip().lower() for h in headers]
    columns: dict[str, int] = {}
    claimed: set[int] = set()

    for role, hints in COLUMN_HINTS:
        for idx, header in enumerate(normalized):
            if idx in claimed:
                continue
            if any(hint in header for hint in hints):
                columns[role] = idx
                claimed.add(idx)
                break

    return columns


def resolve_csv_type(value: str | None) -> TransactionType:
    text = (value or "").strip()
    if "credit" in text.lower() or text.upper() == "CR":
        return TransactionType.CREDIT
    return TransactionType.DEBIT


class CSVStatementExtractor:
    """Extractor for .csv uploads."""

    def __init__(
        self,
        classifier: CategoryClassifier | None = None,
        logger: logging.Logger | None = None,
    ):
        self.classifier = classifier or default_classifier
        self.logger = logger or globals()["logger"]

    def _decode(self, content: bytes) -> str:
        try:
            return content.decode("utf-8-sig")
        except UnicodeDecodeError:
            return content.decode("latin-1")

    def extract(self, content: bytes, filename: str = "") -> RawStatement:
        """Parse a CSV statement.

        Args:
            content: Raw file bytes
            filename: Original filename (checked for the wallet brand)

        Returns:
            RawStatement with one transaction per valid row

        Raises:
            MalformedInputError: Fewer than two lines, or no date/amount column
        """
        text = self._decode(content)
        lines = [line for line in text.splitlines() if line.strip()]
        if len(lines) < 2:
            raise MalformedInputError(
                "CSV file must have at least a header row and one data row",
                suggestions=["Check the export contains transactions"],
            )

        rows = list(csv.reader(StringIO("\n".join(lines))))
        headers = rows[0]
        columns = find_columns(headers)

        missing = [role for role in ("date", "amount") if role not in columns]
        if missing:
            raise MalformedInputError(
                "Could not identify required CSV columns",
                details=f"Missing column(s): {', '.join(missing)}. Found: {', '.join(headers)}",
                suggestions=["Include a date column and an amount column in the header row"],
            )

        transactions = []
        rejected = 0

        for row_num, row in enumerate(rows[1:], start=2):
            if len(row) < len(headers):
                self.logger.warning(f"Row {row_num}: expected {len(headers)} fields, got {len(row)}")
                rejected += 1
                continue

            transaction = self._parse_row(row, columns)
            if transaction is None:
                self.logger.warning(f"Row {row_num}: invalid date or amount, skipped")
                rejected += 1
                continue

            transactions.append(transaction)

        haystack = f"{filename}\n{text}".lower()
        bank_type = (
            BankType.WALLET
            if any(token in haystack for token in WALLET_BRAND_TOKENS)
            else BankType.TRADITIONAL
        )

        self.logger.info(
            f"CSV statement {filename or '<upload>'} parsed: {len(transactions)} transactions, "
            f"{rejected} rows rejected, bank type {bank_type.value}"
        )

        return RawStatement(
            bank_type=bank_type,
            transactions=transactions,
            rejected_rows=rejected,
        )

    def _parse_row(self, row: list[str], columns: dict[str, int]) -> RawTransaction | None:
        def cell(role: str) -> str | None:
            idx = columns.get(role)
            return clean_text(row[idx]) if idx is not None else None

        amount = parse_amount(cell("amount"))
        if amount is None or amount <= 0:
            return None

        date_value = to_iso_date(cell("date"))
        if not is_iso_date(date_value):
            return None

        description = cell("description")
        category = cell("category") or self.classifier.classify(description or "")

        return RawTransaction(
            date=date_value,
            description=description,
            type=resolve_csv_type(cell("type")).value,
            amount=amount,
            balance_after=parse_amount(cell("balance")),
            category=category,
            transaction_reference=cell("reference"),
        )
