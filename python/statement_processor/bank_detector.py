"""
Bank Type Detector

Scores extracted statement text against digital-wallet and traditional-bank
vocabularies to pick the regex parser for a PDF statement.
"""

import logging
import re
from dataclasses import dataclass

from .models import WALLET_BRAND_TOKENS, BankType

logger = logging.getLogger(__name__)


@dataclass
class DetectionResult:
    """Scores behind a bank type decision."""

    bank_type: BankType
    wallet_score: int
    traditional_score: int


class BankTypeDetector:
    """Chooses between the wallet and traditional parsing strategies."""

    WALLET_INDICATORS = [
        "opay",
        "o-pay",
        "digital wallet",
        "wallet balance",
        "mobile money",
        "fintech",
        "pos transaction",
        "p2p transfer",
        "qr payment",
        "mobile app",
        "wallet funding",
    ]

    TRADITIONAL_INDICATORS = [
        "first bank",
        "access bank",
        "gtbank",
        "zenith bank",
        "uba",
        "fidelity bank",
        "sterling bank",
        "wema bank",
        "union bank",
        "current account",
        "savings account",
        "account statement",
        "sort code",
        "swift code",
    ]

    BRAND_BONUS = 5
    WALLET_CONTEXT_BONUS = 3
    PHONE_ACCOUNT_BONUS = 2
    ACCOUNT_NUMBER_BONUS = 1

    PHONE_ACCOUNT_PATTERN = re.compile(r"(?:Account|Phone).*?(?:\+234|0)[1-9]\d{9}")
    ACCOUNT_NUMBER_PATTERN = re.compile(r"\d{10,}")

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or globals()["logger"]

    def score(self, text: str) -> DetectionResult:
        """Score text for both bank types.

        Each indicator counts once (presence, not frequency). Traditional only
        wins with a strictly greater score.
        """
        text_lower = (text or "").lower()

        wallet_score = sum(1 for ind in self.WALLET_INDICATORS if ind in text_lower)
        traditional_score = sum(
            1 for ind in self.TRADITIONAL_INDICATORS if ind in text_lower
        )

        if any(token in text_lower for token in WALLET_BRAND_TOKENS):
            wallet_score += self.BRAND_BONUS

        if "wallet" in text_lower and ("balance" in text_lower or "funding" in text_lower):
            wallet_score += self.WALLET_CONTEXT_BONUS

        if self.PHONE_ACCOUNT_PATTERN.search(text or ""):
            wallet_score += self.PHONE_ACCOUNT_BONUS

        if self.ACCOUNT_NUMBER_PATTERN.search(text or ""):
            traditional_score += self.ACCOUNT_NUMBER_BONUS

        bank_type = (
            BankType.TRADITIONAL
            if traditional_score > wallet_score
            else BankType.WALLET
        )

        self.logger.info(
            f"Bank type detection scores: wallet={wallet_score}, "
            f"traditional={traditional_score} -> {bank_type.value}"
        )

        return DetectionResult(
            bank_type=bank_type,
            wallet_score=wallet_score,
            traditional_score=traditional_score,
        )

    def detect(self, text: str) -> BankType:
        return self.score(text).bank_type
