"""
Financial Advice Module

Turns a user's transactions into a short piece of spending advice, either
from simple month-to-date heuristics or from Claude.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Protocol

import anthropic

from .models import Transaction, TransactionType

logger = logging.getLogger(__name__)

# Hint thresholds as shares of income, and the suggested cut in food spending
TOP_CATEGORY_SHARE = Decimal("0.3")
FOOD_SHARE = Decimal("0.25")
FOOD_SAVING_SHARE = Decimal("0.2")

EMPTY_ADVICE = (
    "Upload a bank statement or add some transactions to get personalized financial insights!"
)


def _naira(amount: Decimal) -> str:
    return f"₦{round(amount):,}"


@dataclass
class MonthSummary:
    """Month-to-date income, expenses and spending by category."""

    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")
    by_category: dict[str, Decimal] = field(default_factory=dict)

    @property
    def savings_rate(self) -> float:
        if self.income <= 0:
            return 0.0
        return float((self.income - self.expenses) / self.income * 100)

    @property
    def top_category(self) -> tuple[str, Decimal] | None:
        if not self.by_category:
            return None
        return max(self.by_category.items(), key=lambda item: item[1])


def summarize_month(transactions: list[Transaction], today: date | None = None) -> MonthSummary:
    """Summarize the transactions dated in the current calendar month."""
    today = today or date.today()
    start_of_month = today.replace(day=1)

    summary = MonthSummary()
    by_category: dict[str, Decimal] = defaultdict(Decimal)

    for txn in transactions:
        if txn.date < start_of_month or txn.date > today:
            continue
        if txn.type is TransactionType.CREDIT:
            summary.income += txn.amount
        else:
            summary.expenses += txn.amount
            by_category[txn.category] += txn.amount

    summary.by_category = dict(by_category)
    return summary


class AdviceProvider(Protocol):
    """Capability that produces advice text for a list of transactions."""

    def generate(self, transactions: list[Transaction]) -> str:
        ...


class RuleBasedAdviceProvider:
    """Heuristic advice based on savings rate and top spending category."""

    def __init__(self, today: date | None = None):
        self.today = today

    def generate(self, transactions: list[Transaction]) -> str:
        if not transactions:
            return EMPTY_ADVICE

        summary = summarize_month(transactions, self.today)
        income = summary.income
        expenses = summary.expenses
        savings_rate = summary.savings_rate
        top = summary.top_category

        if income == 0 and expenses > 0:
            return (
                "I notice you have expenses but no recorded income this month. Consider adding "
                "your salary or other income sources for better financial tracking."
            )

        if income > 0 and savings_rate < 10:
            if top and top[1] > income * TOP_CATEGORY_SHARE:
                return (
                    f"You're spending {_naira(top[1])} on {top[0]} "
                    f"({round(top[1] / income * 100)}% of income). Consider reducing this by "
                    f"20% to improve your savings rate."
                )
            return (
                f"Your savings rate is {round(savings_rate)}%. Try the 50/30/20 rule: 50% needs, "
                f"30% wants, 20% savings. Start by cutting one unnecessary expense."
            )

        if savings_rate >= 20:
            return (
                f"Excellent! You're saving {round(savings_rate)}% of your income. Consider "
                f"investing in Nigerian Treasury Bills or mutual funds for better returns."
            )

        food = summary.by_category.get("Food & Dining", Decimal("0"))
        if income > 0 and food > income * FOOD_SHARE:
            return (
                f"Food expenses are {round(food / income * 100)}% of your income. Meal prepping "
                f"and cooking at home could save you {_naira(food * FOOD_SAVING_SHARE)} monthly."
            )

        top_text = (
            f"Top expense: {top[0]} ({_naira(top[1])})"
            if top
            else "Keep tracking to get better insights!"
        )
        return (
            f"This month: Income {_naira(income)}, Expenses {_naira(expenses)}, "
            f"Savings rate {round(max(0.0, savings_rate))}%. {top_text}"
        )


class ClaudeAdviceProvider:
    """Advice written by Claude, falling back to the rule-based provider on any failure."""

    DEFAULT_MODEL = "claude-sonnet-4-5-20250929"
    MAX_TRANSACTIONS = 20

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        fallback: AdviceProvider | None = None,
        client: anthropic.Anthropic | None = None,
    ):
        """Initialize the provider.

        Args:
            api_key: Anthropic API key
            model: Claude model to use
            fallback: Provider used when the API call fails
            client: Pre-built Anthropic client
        """
        self.model = model or self.DEFAULT_MODEL
        self.fallback = fallback or RuleBasedAdviceProvider()
        self.client = client or anthropic.Anthropic(api_key=api_key)

    def _build_prompt(self, transactions: list[Transaction]) -> str:
        recent = sorted(transactions, key=lambda t: (t.date, t.time), reverse=True)
        recent = recent[: self.MAX_TRANSACTIONS]
        summary = summarize_month(recent)

        lines = "\n".join(
            f"{'+' if t.type is TransactionType.CREDIT else '-'}{_naira(t.amount)} - "
            f"{t.category} - {t.description} ({t.date.isoformat()})"
            for t in recent
        )
        categories = ", ".join(
            f"{name}: {_naira(amount)}" for name, amount in summary.by_category.items()
        )

        return f"""As a financial advisor for Nigerian users, analyze these financial patterns and provide specific, actionable advice:

MONTHLY SUMMARY:
- Income: {_naira(summary.income)}
- Expenses: {_naira(summary.expenses)}
- Savings Rate: {round(summary.savings_rate)}%
- Top Categories: {categories or "none"}

RECENT TRANSACTIONS:
{lines}

Provide one specific area for improvement and one actionable tip for the Nigerian context. Keep it under 100 words and include naira amounts where relevant."""

    def generate(self, transactions: list[Transaction]) -> str:
        if not transactions:
            return EMPTY_ADVICE

        try:
            message = self.client.messages.create(
                model=self.model,
                max_tokens=300,
                messages=[{"role": "user", "content": self._build_prompt(transactions)}],
            )
            advice = message.content[0].text.strip()
        except Exception as e:
            logger.warning(f"Claude advice failed, using rule-based advice: {e}")
            return self.fallback.generate(transactions)

        return advice or self.fallback.generate(transactions)
