"""
Transaction Store Module

Persistence for canonical transactions and per-user account snapshots.
`Store` is the capability the pipeline depends on; `SqlStore` implements it
on SQLAlchemy (PostgreSQL in deployment, SQLite in tests).
"""

import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any, Protocol

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
    and_,
    create_engine,
    delete,
    func,
    insert,
    or_,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import StaticPool

from .errors import DuplicateTransactionError
from .models import AccountInfo, Transaction, TransactionType

logger = logging.getLogger(__name__)

metadata = MetaData()

transactions_table = Table(
    "transactions",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(64), nullable=False, index=True),
    Column("date", Date, nullable=False),
    Column("time", String(8), nullable=False),
    Column("description", Text, nullable=False),
    Column("type", String(10), nullable=False),
    Column("amount", Numeric(15, 2), nullable=False),
    Column("balance_after", Numeric(15, 2)),
    Column("channel", String(100), nullable=False),
    Column("transaction_reference", String(100), nullable=False),
    Column("counterparty", String(255)),
    Column("category", String(100), nullable=False),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
    UniqueConstraint("user_id", "transaction_reference", name="uq_transactions_user_reference"),
)

account_info_table = Table(
    "account_info",
    metadata,
    Column("user_id", String(64), primary_key=True),
    Column("account_name", String(255), nullable=False),
    Column("account_number", String(64), nullable=False),
    Column("bank_name", String(255), nullable=False),
    Column("account_type", String(64), nullable=False),
    Column("currency", String(3), nullable=False),
    Column("statement_start", Date),
    Column("statement_end", Date),
    Column("opening_balance", Numeric(15, 2), nullable=False, default=0),
    Column("closing_balance", Numeric(15, 2), nullable=False, default=0),
    Column("wallet_balance", Numeric(15, 2), nullable=False, default=0),
    Column("total_debits", Numeric(15, 2), nullable=False, default=0),
    Column("total_credits", Numeric(15, 2), nullable=False, default=0),
    Column("last_updated", DateTime, nullable=False),
)

TRANSACTION_FIELDS = {
    "date",
    "time",
    "description",
    "type",
    "amount",
    "balance_after",
    "channel",
    "transaction_reference",
    "counterparty",
    "category",
}


class Store(Protocol):
    """Document-store capability used by the ingestion pipeline and API."""

    def find_transaction(
        self, user_id: str, any_of: list[dict[str, Any]]
    ) -> Transaction | None:
        ...

    def create_transaction(self, transaction: Transaction) -> Transaction:
        ...

    def upsert_account_info(self, account_info: AccountInfo) -> AccountInfo:
        ...

    def get_account_info(self, user_id: str) -> AccountInfo | None:
        ...

    def list_transactions(
        self, user_id: str, limit: int | None = None, offset: int = 0
    ) -> list[Transaction]:
        ...

    def get_transaction(self, user_id: str, transaction_id: str) -> Transaction | None:
        ...

    def delete_transaction(self, user_id: str, transaction_id: str) -> bool:
        ...

    def count_transactions(self, user_id: str) -> int:
        ...


def _row_to_transaction(row) -> Transaction:
    return Transaction(
        id=row.id,
        user_id=row.user_id,
        date=row.date,
        time=row.time,
        description=row.description,
        type=TransactionType(row.type),
        amount=row.amount,
        balance_after=row.balance_after,
        channel=row.channel,
        transaction_reference=row.transaction_reference,
        counterparty=row.counterparty,
        category=row.category,
    )


def _row_to_account_info(row) -> AccountInfo:
    return AccountInfo(
        user_id=row.user_id,
        account_name=row.account_name,
        account_number=row.account_number,
        bank_name=row.bank_name,
        account_type=row.account_type,
        currency=row.currency,
        statement_start=row.statement_start,
        statement_end=row.statement_end,
        opening_balance=row.opening_balance,
        closing_balance=row.closing_balance,
        wallet_balance=row.wallet_balance,
        total_debits=row.total_debits,
        total_credits=row.total_credits,
        last_updated=row.last_updated,
    )


class SqlStore:
    """SQLAlchemy implementation of Store."""

    def __init__(self, engine: Engine, create_tables: bool = True):
        self.engine = engine
        if create_tables:
            metadata.create_all(engine)

    def find_transaction(
        self, user_id: str, any_of: list[dict[str, Any]]
    ) -> Transaction | None:
        """Find one of the user's transactions matching any of the conditions.

        Args:
            user_id: Owner of the transactions
            any_of: Alternatives; each maps field name to the exact value
                required (all fields of one alternative must match)

        Returns:
            First matching transaction or None
        """
        clauses = []
        for condition in any_of:
            if not condition:
                continue
            unknown = set(condition) - TRANSACTION_FIELDS
            if unknown:
                raise ValueError(f"Unknown transaction fields: {', '.join(sorted(unknown))}")
            clauses.append(
                and_(*[
                    transactions_table.c[name] == (
                        value.value if isinstance(value, TransactionType) else value
                    )
                    for name, value in condition.items()
                ])
            )

        if not clauses:
            return None

        stmt = (
            select(transactions_table)
            .where(transactions_table.c.user_id == user_id, or_(*clauses))
            .limit(1)
        )
        with self.engine.connect() as conn:
            row = conn.execute(stmt).first()

        return _row_to_transaction(row) if row else None

    def create_transaction(self, transaction: Transaction) -> Transaction:
        """Insert a transaction.

        Raises:
            DuplicateTransactionError: The user already has this transaction_reference
        """
        now = datetime.now()
        stored = replace(transaction, id=transaction.id or str(uuid.uuid4()))

        try:
            with self.engine.begin() as conn:
                conn.execute(
                    insert(transactions_table).values(
                        id=stored.id,
                        user_id=stored.user_id,
                        date=stored.date,
                        time=stored.time,
                        description=stored.description,
                        type=stored.type.value,
                        amount=stored.amount,
                        balance_after=stored.balance_after,
                        channel=stored.channel,
                        transaction_reference=stored.transaction_reference,
                        counterparty=stored.counterparty,
                        category=stored.category,
                        created_at=now,
                        updated_at=now,
                    )
                )
        except IntegrityError as e:
            raise DuplicateTransactionError(
                f"Transaction {stored.transaction_reference} already exists for user {stored.user_id}"
            ) from e

        return stored

    def upsert_account_info(self, account_info: AccountInfo) -> AccountInfo:
        """Overwrite the user's account snapshot, creating it if needed."""
        values = {
            "account_name": account_info.account_name,
            "account_number": account_info.account_number,
            "bank_name": account_info.bank_name,
            "account_type": account_info.account_type,
            "currency": account_info.currency,
            "statement_start": account_info.statement_start,
            "statement_end": account_info.statement_end,
            "opening_balance": account_info.opening_balance,
            "closing_balance": account_info.closing_balance,
            "wallet_balance": account_info.wallet_balance,
            "total_debits": account_info.total_debits,
            "total_credits": account_info.total_credits,
            "last_updated": account_info.last_updated or datetime.now(),
        }

        with self.engine.begin() as conn:
            result = conn.execute(
                update(account_info_table)
                .where(account_info_table.c.user_id == account_info.user_id)
                .values(**values)
            )
            if result.rowcount == 0:
                conn.execute(
                    insert(account_info_table).values(user_id=account_info.user_id, **values)
                )

        return replace(account_info, last_updated=values["last_updated"])

    def get_account_info(self, user_id: str) -> AccountInfo | None:
        stmt = select(account_info_table).where(account_info_table.c.user_id == user_id)
        with self.engine.connect() as conn:
            row = conn.execute(stmt).first()
        return _row_to_account_info(row) if row else None

    def list_transactions(
        self, user_id: str, limit: int | None = None, offset: int = 0
    ) -> list[Transaction]:
        """List a user's transactions, newest first."""
        stmt = (
            select(transactions_table)
            .where(transactions_table.c.user_id == user_id)
            .order_by(
                transactions_table.c.date.desc(),
                transactions_table.c.time.desc(),
                transactions_table.c.created_at.desc(),
            )
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        with self.engine.connect() as conn:
            return [_row_to_transaction(row) for row in conn.execute(stmt)]

    def get_transaction(self, user_id: str, transaction_id: str) -> Transaction | None:
        stmt = select(transactions_table).where(
            transactions_table.c.user_id == user_id,
            transactions_table.c.id == transaction_id,
        )
        with self.engine.connect() as conn:
            row = conn.execute(stmt).first()
        return _row_to_transaction(row) if row else None

    def delete_transaction(self, user_id: str, transaction_id: str) -> bool:
        with self.engine.begin() as conn:
            result = conn.execute(
                delete(transactions_table).where(
                    transactions_table.c.user_id == user_id,
                    transactions_table.c.id == transaction_id,
                )
            )
        return result.rowcount > 0

    def count_transactions(self, user_id: str) -> int:
        stmt = select(func.count()).select_from(transactions_table).where(
            transactions_table.c.user_id == user_id
        )
        with self.engine.connect() as conn:
            return conn.execute(stmt).scalar_one()


def create_store(database_url: str) -> SqlStore:
    """Create a SqlStore for a database URL.

    Args:
        database_url: SQLAlchemy URL (postgresql://... or sqlite://...)

    Returns:
        SqlStore with tables created
    """
    if database_url.startswith("sqlite"):
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, **kwargs)
    else:
        engine = create_engine(
            database_url,
            pool_pre_ping=True,
            pool_size=5,
            max_overflow=10,
        )

    logger.info(f"Transaction store using {engine.url.get_backend_name()}")
    return SqlStore(engine)
