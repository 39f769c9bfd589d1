"""
JSON Statement Extractor

Reads statements uploaded in the documented JSON template (and the older
camelCase / snake_case variants of it).
"""

import json
import logging

from .errors import MalformedInputError, StatementValidationError
from .models import (
    WALLET_BRAND_TOKENS,
    BankType,
    RawAccountInfo,
    RawStatement,
    RawTransaction,
)

logger = logging.getLogger(__name__)

TRANSACTION_KEYS = ("transactions", "statement_data")
ACCOUNT_KEYS = ("accountInfo", "account_info")


class JSONStatementExtractor:
    """Extractor for .json uploads."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or globals()["logger"]

    def extract(self, content: bytes, filename: str = "") -> RawStatement:
        """Parse a JSON statement.

        Args:
            content: Raw file bytes
            filename: Original filename (used in log messages only)

        Returns:
            RawStatement

        Raises:
            MalformedInputError: Content is not valid UTF-8 JSON
            StatementValidationError: JSON has neither transactions nor account info
        """
        try:
            data = json.loads(content.decode("utf-8-sig"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MalformedInputError(
                "Invalid JSON file format",
                details=str(e),
                suggestions=["Check the file is valid JSON", "Use the JSON upload template"],
            ) from e

        if isinstance(data, dict) and isinstance(data.get("statement"), dict):
            data = data["statement"]

        if not isinstance(data, dict) or not any(
            key in data for key in TRANSACTION_KEYS + ACCOUNT_KEYS
        ):
            raise StatementValidationError(
                "Invalid statement structure",
                details="The file must contain a 'transactions' array or an 'accountInfo' object",
                suggestions=["Use the JSON upload template"],
            )

        raw_transactions = next(
            (data[key] for key in TRANSACTION_KEYS if data.get(key) is not None), []
        )
        if not isinstance(raw_transactions, list):
            raise StatementValidationError(
                "Invalid statement structure",
                details="'transactions' must be an array",
            )

        transactions = [
            RawTransaction.from_mapping(item) if isinstance(item, dict) else RawTransaction()
            for item in raw_transactions
        ]

        account_info = None
        account_data = next(
            (data[key] for key in ACCOUNT_KEYS if isinstance(data.get(key), dict)), None
        )
        if account_data:
            account_info = RawAccountInfo.from_mapping(account_data)

        bank_type = BankType.from_value(data.get("bankType") or data.get("bank_type"))
        if bank_type is None and account_info and account_info.bank_name:
            if any(token in account_info.bank_name.lower() for token in WALLET_BRAND_TOKENS):
                bank_type = BankType.WALLET

        self.logger.info(
            f"JSON statement {filename or '<upload>'} parsed: "
            f"{len(transactions)} transactions, account info: {account_info is not None}"
        )

        return RawStatement(
            bank_type=bank_type,
            account_info=account_info,
            transactions=transactions,
        )
