"""
Statement Normalizer Module

The single boundary between unvalidated extractor output (RawStatement)
and canonical records (Transaction, AccountInfo).
"""

import logging
from datetime import datetime
from decimal import Decimal

from .categorizer import CategoryClassifier, default_classifier
from .models import (
    AccountInfo,
    BankType,
    NormalizedStatement,
    RawAccountInfo,
    RawStatement,
    RawTransaction,
    StatementSource,
    Transaction,
    TransactionType,
)
from .references import ReferenceGenerator
from .utils import clean_text, extract_time, normalize_time, parse_amount, parse_date

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
DEFAULT_DESCRIPTION = "Bank Statement Transaction"
LEGACY_TYPES = {
    "income": TransactionType.CREDIT,
    "expense": TransactionType.DEBIT,
}


class TransactionRejected(ValueError):
    """A raw transaction that cannot become a canonical record."""


def resolve_type(raw: RawTransaction) -> TransactionType:
    """Resolve polarity: explicit credit/debit, then legacy income/expense, then debit."""
    declared = (raw.type or "").strip().lower()
    if declared in ("credit", "debit"):
        return TransactionType(declared)

    for hint in (declared, (raw.legacy_type or "").strip().lower()):
        if hint in LEGACY_TYPES:
            return LEGACY_TYPES[hint]

    return TransactionType.DEBIT


class StatementNormalizer:
    """Validates and coerces raw statements into canonical records."""

    def __init__(
        self,
        classifier: CategoryClassifier | None = None,
        default_currency: str = "NGN",
        logger: logging.Logger | None = None,
    ):
        self.classifier = classifier or default_classifier
        self.default_currency = default_currency
        self.logger = logger or globals()["logger"]

    def normalize(
        self,
        raw: RawStatement,
        user_id: str,
        source: StatementSource | None = None,
    ) -> NormalizedStatement:
        """Normalize a raw statement for one user.

        Invalid transactions are skipped and counted; they never fail the batch.

        Args:
            raw: Extractor output
            user_id: Owner of the records
            source: Origin of the records (defaults from the bank type)

        Returns:
            NormalizedStatement
        """
        bank_type = raw.bank_type or BankType.TRADITIONAL
        source = source or StatementSource.for_bank_type(bank_type)
        generator = ReferenceGenerator()

        result = NormalizedStatement(bank_type=bank_type)

        if raw.account_info is not None:
            result.account_info = self.normalize_account_info(
                raw.account_info, user_id, bank_type
            )

        for idx, raw_txn in enumerate(raw.transactions):
            try:
                transaction = self.normalize_transaction(raw_txn, user_id, source, generator)
            except TransactionRejected as e:
                self.logger.warning(f"Transaction {idx + 1} skipped: {e}")
                result.skipped += 1
                result.skip_reasons.append(f"Transaction {idx + 1}: {e}")
                continue
            result.transactions.append(transaction)

        self.logger.info(
            f"Normalized {len(result.transactions)} of {len(raw.transactions)} "
            f"transactions for user {user_id}"
        )
        return result

    def normalize_transaction(
        self,
        raw: RawTransaction,
        user_id: str,
        source: StatementSource,
        generator: ReferenceGenerator | None = None,
    ) -> Transaction:
        """Coerce one raw transaction.

        Raises:
            TransactionRejected: Unparsable date, or amount that is zero or not a number
        """
        txn_date = parse_date(raw.date)
        if txn_date is None:
            raise TransactionRejected(f"invalid date {raw.date!r}")

        amount = parse_amount(raw.amount)
        if amount is None or amount == 0:
            raise TransactionRejected(f"invalid amount {raw.amount!r}")
        amount = abs(amount)

        description = clean_text(raw.description) or DEFAULT_DESCRIPTION

        time_value = normalize_time(raw.time) or extract_time(raw.date)
        time_from_source = time_value is not None
        if time_value is None:
            time_value = datetime.now().strftime("%H:%M:%S")

        category = self.classifier.resolve(raw.category) or self.classifier.classify(description)

        reference = clean_text(raw.transaction_reference)
        if reference is None:
            generator = generator or ReferenceGenerator()
            reference = generator.generate(source.reference_prefix)

        return Transaction(
            user_id=user_id,
            date=txn_date,
            time=time_value,
            description=description,
            type=resolve_type(raw),
            amount=amount,
            category=category,
            channel=clean_text(raw.channel) or source.channel,
            transaction_reference=reference,
            balance_after=parse_amount(raw.balance_after),
            counterparty=clean_text(raw.counterparty),
            time_from_source=time_from_source,
        )

    def normalize_account_info(
        self,
        raw: RawAccountInfo,
        user_id: str,
        bank_type: BankType,
    ) -> AccountInfo:
        is_wallet = bank_type is BankType.WALLET

        closing = parse_amount(raw.closing_balance)
        wallet = parse_amount(raw.wallet_balance)
        if wallet is None:
            wallet = closing

        return AccountInfo(
            user_id=user_id,
            account_name=clean_text(raw.account_name) or "Unknown Account",
            account_number=clean_text(raw.account_number) or "",
            bank_name=clean_text(raw.bank_name) or ("Opay" if is_wallet else "Unknown Bank"),
            account_type=(
                clean_text(raw.account_type) or ("Digital Wallet" if is_wallet else "Savings")
            ),
            currency=(clean_text(raw.currency) or self.default_currency).upper(),
            statement_start=parse_date(raw.statement_start),
            statement_end=parse_date(raw.statement_end),
            opening_balance=parse_amount(raw.opening_balance) or ZERO,
            closing_balance=closing or ZERO,
            wallet_balance=wallet or ZERO,
            total_debits=parse_amount(raw.total_debits) or ZERO,
            total_credits=parse_amount(raw.total_credits) or ZERO,
            last_updated=datetime.now(),
        )
