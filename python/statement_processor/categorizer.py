"""
Transaction Categorizer Module

Maps a free-text transaction description to a category using an ordered
keyword table. Wallet-oriented rules are checked before the generic ones;
the first rule with a matching keyword wins.
"""

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

OTHER_CATEGORY = "Other"

WALLET_CATEGORY_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Wallet Funding", ("opay wallet", "wallet topup", "wallet top-up", "wallet funding")),
    ("POS Transaction", ("opay pos", "pos transaction", "pos withdrawal")),
    ("Money Transfer", ("opay transfer", "p2p transfer", "send money", "transfer to")),
    ("Bill Payment", ("opay bill", "bill payment", "utility payment")),
    ("Airtime/Data", ("opay airtime", "airtime purchase", "data purchase", "airtime")),
    ("Merchant Payment", ("opay merchant", "merchant payment", "qr payment")),
    ("Savings", ("opay savings", "ajo savings", "target savings")),
    ("Loan", ("opay loan", "loan disbursement", "loan repayment")),
    ("Investment", ("opay investment", "investment return", "mutual fund")),
    ("Rewards", ("cashback", "reward", "bonus")),
    ("Refund/Reversal", ("refund", "reversal", "failed transaction")),
)

GENERIC_CATEGORY_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Income", ("salary", "payroll", "bonus")),
    ("Transfers", ("transfer", "neft", "rtgs")),
    ("Cash Withdrawal", ("atm", "withdrawal")),
    ("Shopping", ("pos", "purchase", "jumia", "konga")),
    ("Food & Dining", ("food", "restaurant", "meal")),
    ("Utilities", ("electricity", "water", "utility")),
    ("Loans", ("loan", "emi")),
    ("Education", ("school", "tuition", "fees")),
    ("Insurance", ("insurance",)),
)

CATEGORY_RULES = WALLET_CATEGORY_RULES + GENERIC_CATEGORY_RULES


@dataclass(frozen=True)
class CategoryRule:
    """A category and the substrings that select it."""

    category: str
    keywords: tuple[str, ...]

    def matches(self, description: str) -> bool:
        return any(keyword in description for keyword in self.keywords)


class CategoryClassifier:
    """Ordered keyword classifier. Pure: no state changes after construction."""

    def __init__(self, rules: tuple[tuple[str, tuple[str, ...]], ...] = CATEGORY_RULES):
        self.rules = [CategoryRule(category, tuple(k.lower() for k in keywords))
                      for category, keywords in rules]
        self._canonical = {rule.category.lower(): rule.category for rule in self.rules}
        self._canonical[OTHER_CATEGORY.lower()] = OTHER_CATEGORY

    @property
    def categories(self) -> list[str]:
        """All category names in declaration order, plus the fallback."""
        names = list(dict.fromkeys(rule.category for rule in self.rules))
        names.append(OTHER_CATEGORY)
        return names

    def classify(self, description: str | None) -> str:
        """Classify a transaction description.

        Args:
            description: Free-text description (may be empty)

        Returns:
            Category name, or "Other" if no rule matches
        """
        if not description:
            return OTHER_CATEGORY

        desc = description.lower().strip()
        if not desc:
            return OTHER_CATEGORY

        for rule in self.rules:
            if rule.matches(desc):
                return rule.category

        return OTHER_CATEGORY

    def resolve(self, category: str | None) -> str | None:
        """Map a user-supplied category onto the taxonomy (case-insensitive).

        Returns:
            Canonical category name, or None if it is not part of the taxonomy
        """
        if not category:
            return None
        return self._canonical.get(category.strip().lower())


default_classifier = CategoryClassifier()


def classify(description: str | None) -> str:
    """Classify a description with the default taxonomy."""
    return default_classifier.classify(description)
