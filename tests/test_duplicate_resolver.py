"""
Duplicate Resolver and Store Tests

Tests for write-or-skip decisions against the SQL store.
"""

import sys
from dataclasses import replace
from datetime import date
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "python"))

from statement_processor.duplicate_resolver import DuplicateResolver
from statement_processor.errors import DuplicateTransactionError
from statement_processor.models import AccountInfo, BankType, Transaction, TransactionType


def make_transaction(**overrides) -> Transaction:
    values = dict(
        user_id="user-1",
        date=date(2024, 1, 15),
        time="14:30:00",
        description="Transfer to John Smith",
        type=TransactionType.DEBIT,
        amount=5000.0,
        category="Money Transfer",
        channel="Opay Mobile App",
        transaction_reference="OP123",
    )
    values.update(overrides)
    return Transaction(**values)


class FailingStore:
    """Store whose lookups always fail."""

    def find_transaction(self, user_id, any_of):
        raise RuntimeError("connection reset")

    def create_transaction(self, transaction):
        raise AssertionError("should not be called")


class RacingStore:
    """Store that finds nothing but rejects the write as a duplicate."""

    def find_transaction(self, user_id, any_of):
        return None

    def create_transaction(self, transaction):
        raise DuplicateTransactionError("already exists")


class TestBuildConditions:
    """Tests for duplicate match conditions."""

    def test_reference_and_details(self, store):
        """Test reference and detail conditions are always built."""
        conditions = DuplicateResolver(store).build_conditions(make_transaction())

        assert conditions[0] == {"transaction_reference": "OP123"}
        assert conditions[1] == {
            "date": date(2024, 1, 15),
            "amount": 5000.0,
            "description": "Transfer to John Smith",
            "type": TransactionType.DEBIT,
        }
        assert len(conditions) == 2

    def test_wallet_time_condition(self, store):
        """Test wallet statements add the date+time+amount condition."""
        conditions = DuplicateResolver(store).build_conditions(
            make_transaction(), BankType.WALLET
        )

        assert conditions[-1] == {
            "date": date(2024, 1, 15),
            "time": "14:30:00",
            "amount": 5000.0,
        }

    def test_no_time_condition_for_import_time(self, store):
        """Test a time filled in at import is not used for matching."""
        conditions = DuplicateResolver(store).build_conditions(
            make_transaction(time_from_source=False), BankType.WALLET
        )

        assert all("time" not in condition for condition in conditions)


class TestWriteOrSkip:
    """Tests for single write decisions."""

    def test_first_write(self, store):
        """Test a new transaction is written."""
        outcome = DuplicateResolver(store).write_or_skip("user-1", make_transaction())

        assert outcome.written is True
        assert outcome.transaction_id
        assert store.count_transactions("user-1") == 1

    def test_same_reference_skipped(self, store):
        """Test a matching reference is a duplicate."""
        resolver = DuplicateResolver(store)
        resolver.write_or_skip("user-1", make_transaction())

        outcome = resolver.write_or_skip(
            "user-1", make_transaction(description="Different", amount=1.0)
        )

        assert outcome.written is False
        assert outcome.reason == "duplicate"
        assert store.count_transactions("user-1") == 1

    def test_same_details_new_reference_skipped(self, store):
        """Test matching date, amount, description and type is a duplicate."""
        resolver = DuplicateResolver(store)
        resolver.write_or_skip("user-1", make_transaction())

        outcome = resolver.write_or_skip(
            "user-1", make_transaction(transaction_reference="OP999")
        )

        assert outcome.reason == "duplicate"

    def test_different_polarity_not_duplicate(self, store):
        """Test a credit and debit of the same details are both kept."""
        resolver = DuplicateResolver(store)
        resolver.write_or_skip("user-1", make_transaction())

        outcome = resolver.write_or_skip(
            "user-1",
            make_transaction(transaction_reference="OP999", type=TransactionType.CREDIT),
        )

        assert outcome.written is True

    def test_wallet_time_match(self, store):
        """Test wallet transactions at the same time and amount are duplicates."""
        resolver = DuplicateResolver(store)
        resolver.write_or_skip("user-1", make_transaction(), BankType.WALLET)

        outcome = resolver.write_or_skip(
            "user-1",
            make_transaction(transaction_reference="OP999", description="Transfer - J Smith"),
            BankType.WALLET,
        )

        assert outcome.reason == "duplicate"

    def test_users_are_isolated(self, store):
        """Test the same transaction for another user is written."""
        resolver = DuplicateResolver(store)
        resolver.write_or_skip("user-1", make_transaction())

        outcome = resolver.write_or_skip("user-2", make_transaction(user_id="user-2"))

        assert outcome.written is True

    def test_store_failure_reported(self):
        """Test a failing store yields an error outcome instead of raising."""
        outcome = DuplicateResolver(FailingStore()).write_or_skip("u", make_transaction())

        assert outcome.written is False
        assert outcome.reason == "error"

    def test_constraint_rejection_counted_as_duplicate(self):
        """Test a write rejected by the unique constraint is a duplicate."""
        outcome = DuplicateResolver(RacingStore()).write_or_skip("u", make_transaction())

        assert outcome.reason == "duplicate"


class TestResolveBatch:
    """Tests for batch writes."""

    def test_batch_counts(self, store):
        """Test saved and duplicate counts, including in-batch repeats."""
        txn = make_transaction()
        other = make_transaction(
            transaction_reference="OP2", description="Airtime MTN", amount=100.0, time="10:00:00"
        )

        outcome = DuplicateResolver(store).resolve_batch("user-1", [txn, other, txn])

        assert outcome.saved == 2
        assert outcome.duplicates == 1
        assert outcome.skipped == 1

    def test_idempotent_reupload(self, store):
        """Test writing the same batch twice saves nothing the second time."""
        batch = [make_transaction(), make_transaction(transaction_reference="OP2", amount=7.0)]
        resolver = DuplicateResolver(store)
        resolver.resolve_batch("user-1", batch)

        outcome = resolver.resolve_batch("user-1", batch)

        assert outcome.saved == 0
        assert outcome.duplicates == 2

    def test_failures_counted(self):
        """Test store failures are counted separately from duplicates."""
        outcome = DuplicateResolver(FailingStore()).resolve_batch("u", [make_transaction()])

        assert outcome.failed == 1
        assert outcome.duplicates == 0
        assert outcome.skipped == 1


class TestSqlStore:
    """Tests for the SQLAlchemy store."""

    def test_unique_reference_constraint(self, store):
        """Test the store itself rejects a repeated reference."""
        store.create_transaction(make_transaction())

        with pytest.raises(DuplicateTransactionError):
            store.create_transaction(make_transaction(description="Other"))

    def test_round_trip_and_ordering(self, store):
        """Test transactions come back newest first."""
        older = store.create_transaction(make_transaction(date=date(2024, 1, 1)))
        newer = store.create_transaction(
            make_transaction(transaction_reference="OP2", date=date(2024, 2, 1))
        )

        listed = store.list_transactions("user-1")

        assert [t.id for t in listed] == [newer.id, older.id]
        assert listed[0] == newer
        assert store.get_transaction("user-1", older.id).date == date(2024, 1, 1)
        assert store.get_transaction("user-2", older.id) is None

    def test_delete(self, store):
        """Test deleting is scoped to the owner."""
        txn = store.create_transaction(make_transaction())

        assert store.delete_transaction("user-2", txn.id) is False
        assert store.delete_transaction("user-1", txn.id) is True
        assert store.count_transactions("user-1") == 0

    def test_unknown_condition_field(self, store):
        """Test unknown fields in a condition are rejected."""
        with pytest.raises(ValueError):
            store.find_transaction("user-1", [{"colour": "red"}])

    def test_account_info_upsert(self, store):
        """Test account info is overwritten, never duplicated."""
        first = AccountInfo(
            user_id="user-1", account_name="Ada", account_number="1",
            bank_name="Opay", account_type="Digital Wallet", currency="NGN",
            wallet_balance=100.0,
        )
        store.upsert_account_info(first)
        store.upsert_account_info(replace(first, wallet_balance=250.0))

        info = store.get_account_info("user-1")

        assert info.wallet_balance == 250.0
        assert info.last_updated is not None
        assert store.get_account_info("user-2") is None
