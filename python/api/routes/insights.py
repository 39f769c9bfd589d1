"""
Insights API Routes

Spending advice generated from the user's transactions.
"""

import logging
import os

from fastapi import APIRouter, Depends, Request

from statement_processor.advice import (
    AdviceProvider,
    ClaudeAdviceProvider,
    RuleBasedAdviceProvider,
)
from statement_processor.store import Store

from ..auth import get_current_user_id
from ..database import get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/insights", tags=["insights"])

ADVICE_HISTORY_LIMIT = 200


def default_advice_provider() -> AdviceProvider:
    """Claude advice when an API key is configured, rule-based advice otherwise."""
    api_key = os.getenv("ANTHROPIC_API_KEY")
    if not api_key:
        logger.info("ANTHROPIC_API_KEY not configured, using rule-based advice")
        return RuleBasedAdviceProvider()
    return ClaudeAdviceProvider(api_key=api_key, model=os.getenv("ADVICE_MODEL"))


def get_advice_provider(request: Request) -> AdviceProvider:
    state = request.app.state
    if state.advice_provider is None:
        state.advice_provider = default_advice_provider()
    return state.advice_provider


@router.get("")
def get_insights(
    user_id: str = Depends(get_current_user_id),
    store: Store = Depends(get_store),
    provider: AdviceProvider = Depends(get_advice_provider),
) -> dict:
    """Get advice for the authenticated user.

    Returns:
        {"advice": str}
    """
    transactions = store.list_transactions(user_id, limit=ADVICE_HISTORY_LIMIT)
    return {"advice": provider.generate(transactions)}
