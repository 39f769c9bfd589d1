"""
Transactions API Routes

Provides endpoints for viewing, adding and deleting a user's transactions.
"""

import calendar
import logging
import math
from datetime import date, timedelta
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, Field

from statement_processor.advice import summarize_month
from statement_processor.errors import DuplicateTransactionError
from statement_processor.models import RawTransaction, StatementSource
from statement_processor.normalizer import StatementNormalizer, TransactionRejected
from statement_processor.store import Store

from ..auth import get_current_user_id
from ..database import get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["transactions"])

normalizer = StatementNormalizer()


class TransactionCreate(BaseModel):
    """Manual transaction entry."""

    amount: float
    description: str = Field(min_length=1)
    date: str | None = None
    time: str | None = None
    type: str | None = None
    legacy_type: str | None = None
    category: str | None = None
    channel: str | None = None
    transaction_reference: str | None = None
    counterparty: str | None = None
    balance_after: float | None = None


class MonthlySummary(BaseModel):
    """Month-to-date totals with change vs the previous month."""

    month: str
    income: float
    expenses: float
    savings: float
    savings_rate: float
    income_change: float | None
    expenses_change: float | None
    by_category: dict[str, float]


def _percent_change(current: Decimal, previous: Decimal) -> float | None:
    if previous == 0:
        return None
    return round(float((current - previous) / previous * 100), 1)


@router.get("")
async def list_transactions(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    user_id: str = Depends(get_current_user_id),
    store: Store = Depends(get_store),
) -> dict:
    """List transactions, newest first.

    Args:
        page: Page number
        page_size: Items per page
        user_id: Authenticated user
        store: Transaction store

    Returns:
        Paginated list including the derived legacy_type
    """
    total = store.count_transactions(user_id)
    items = store.list_transactions(user_id, limit=page_size, offset=(page - 1) * page_size)

    return {
        "items": [txn.to_dict() for txn in items],
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": math.ceil(total / page_size) if total else 0,
    }


@router.post("", status_code=201)
async def create_transaction(
    body: TransactionCreate,
    user_id: str = Depends(get_current_user_id),
    store: Store = Depends(get_store),
) -> dict:
    """Add a transaction by hand.

    Returns:
        Created transaction

    Raises:
        HTTPException: 400 for invalid values, 409 for a reused reference
    """
    raw = RawTransaction(
        date=body.date or date.today().isoformat(),
        time=body.time,
        description=body.description,
        type=body.type,
        legacy_type=body.legacy_type,
        amount=body.amount,
        balance_after=body.balance_after,
        category=body.category,
        transaction_reference=body.transaction_reference,
        channel=body.channel,
        counterparty=body.counterparty,
    )

    try:
        transaction = normalizer.normalize_transaction(raw, user_id, StatementSource.MANUAL)
    except TransactionRejected as e:
        raise HTTPException(status_code=400, detail=f"Validation error: {e}")

    try:
        stored = store.create_transaction(transaction)
    except DuplicateTransactionError as e:
        raise HTTPException(status_code=409, detail=str(e))

    logger.info(
        f"Transaction created for user {user_id}: {stored.type.value} {stored.amount} "
        f"{stored.description[:50]}"
    )
    return stored.to_dict()


@router.get("/summary", response_model=MonthlySummary)
async def get_summary(
    month: str | None = Query(None, pattern=r"^\d{4}-\d{2}$"),
    user_id: str = Depends(get_current_user_id),
    store: Store = Depends(get_store),
) -> MonthlySummary:
    """Get income, expenses and savings for a month (current month by default).

    Args:
        month: Month as YYYY-MM
        user_id: Authenticated user
        store: Transaction store

    Returns:
        Monthly summary with percentage change vs the previous month
    """
    today = date.today()
    if month:
        year, month_num = (int(part) for part in month.split("-"))
        if not 1 <= month_num <= 12:
            raise HTTPException(status_code=400, detail=f"Invalid month: {month}")
        end = date(year, month_num, calendar.monthrange(year, month_num)[1])
    else:
        end = today

    previous_end = end.replace(day=1) - timedelta(days=1)

    transactions = store.list_transactions(user_id)
    current = summarize_month(transactions, end)
    previous = summarize_month(transactions, previous_end)

    return MonthlySummary(
        month=end.strftime("%Y-%m"),
        income=float(current.income),
        expenses=float(current.expenses),
        savings=float(current.income - current.expenses),
        savings_rate=round(current.savings_rate, 1),
        income_change=_percent_change(current.income, previous.income),
        expenses_change=_percent_change(current.expenses, previous.expenses),
        by_category={name: float(amount) for name, amount in current.by_category.items()},
    )


@router.get("/{transaction_id}")
async def get_transaction(
    transaction_id: str,
    user_id: str = Depends(get_current_user_id),
    store: Store = Depends(get_store),
) -> dict:
    """Get a single transaction."""
    transaction = store.get_transaction(user_id, transaction_id)
    if transaction is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return transaction.to_dict()


@router.delete("/{transaction_id}", status_code=204)
async def delete_transaction(
    transaction_id: str,
    user_id: str = Depends(get_current_user_id),
    store: Store = Depends(get_store),
) -> Response:
    """Delete a transaction."""
    if not store.delete_transaction(user_id, transaction_id):
        raise HTTPException(status_code=404, detail="Transaction not found")

    logger.info(f"Transaction {transaction_id} deleted for user {user_id}")
    return Response(status_code=204)
