"""
Duplicate Resolver Module

Decides whether a normalized transaction already exists for the user
before writing it. Used for every upload so re-uploading a statement never
creates duplicates.
"""

import logging
from dataclasses import dataclass

from .errors import DuplicateTransactionError
from .models import BankType, Transaction
from .store import Store

logger = logging.getLogger(__name__)


@dataclass
class WriteOutcome:
    """Result of one write-or-skip decision."""

    written: bool
    reason: str | None = None
    transaction_id: str | None = None


@dataclass
class BatchOutcome:
    """Aggregated counts for a batch of writes."""

    saved: int = 0
    duplicates: int = 0
    failed: int = 0

    @property
    def skipped(self) -> int:
        return self.duplicates + self.failed


class DuplicateResolver:
    """Check-then-write against the store, one transaction at a time."""

    def __init__(self, store: Store, logger: logging.Logger | None = None):
        self.store = store
        self.logger = logger or globals()["logger"]

    def build_conditions(
        self, transaction: Transaction, bank_type: BankType | None = None
    ) -> list[dict]:
        """Build the alternative match conditions for a transaction.

        A condition is only included when every field in it has a value.

        Returns:
            List of field -> value mappings; any one matching means duplicate
        """
        conditions = []

        if transaction.transaction_reference and transaction.transaction_reference.strip():
            conditions.append({"transaction_reference": transaction.transaction_reference})

        by_details = {
            "date": transaction.date,
            "amount": abs(transaction.amount),
            "description": transaction.description,
            "type": transaction.type,
        }
        if all(value not in (None, "") for value in by_details.values()):
            conditions.append(by_details)

        if bank_type is BankType.WALLET and transaction.time_from_source:
            by_time = {
                "date": transaction.date,
                "time": transaction.time,
                "amount": abs(transaction.amount),
            }
            if all(value not in (None, "") for value in by_time.values()):
                conditions.append(by_time)

        return conditions

    def write_or_skip(
        self,
        user_id: str,
        transaction: Transaction,
        bank_type: BankType | None = None,
    ) -> WriteOutcome:
        """Write a transaction unless it already exists.

        Persistence failures are logged and reported as not written; they
        never propagate.
        """
        try:
            existing = self.store.find_transaction(
                user_id, self.build_conditions(transaction, bank_type)
            )
            if existing is not None:
                self.logger.debug(
                    f"Skipping duplicate transaction {transaction.transaction_reference} "
                    f"({transaction.description}, {transaction.amount}) for user {user_id}"
                )
                return WriteOutcome(written=False, reason="duplicate", transaction_id=existing.id)

            stored = self.store.create_transaction(transaction)

        except DuplicateTransactionError as e:
            self.logger.debug(f"Store rejected duplicate: {e}")
            return WriteOutcome(written=False, reason="duplicate")

        except Exception as e:
            self.logger.warning(
                f"Failed to save transaction {transaction.transaction_reference} "
                f"for user {user_id}: {e}"
            )
            return WriteOutcome(written=False, reason="error")

        return WriteOutcome(written=True, transaction_id=stored.id)

    def resolve_batch(
        self,
        user_id: str,
        transactions: list[Transaction],
        bank_type: BankType | None = None,
    ) -> BatchOutcome:
        """Write a batch sequentially in document order."""
        outcome = BatchOutcome()

        for transaction in transactions:
            result = self.write_or_skip(user_id, transaction, bank_type)
            if result.written:
                outcome.saved += 1
            elif result.reason == "duplicate":
                outcome.duplicates += 1
            else:
                outcome.failed += 1

        return outcome
