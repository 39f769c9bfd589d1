"""
Statement text parsers.

Each parser turns the text of one family of statements into a RawStatement.
"""

from ..models import BankType
from .base import (
    AccountFieldPattern,
    BaseStatementParser,
    RegexLineParser,
    TransactionLineParser,
    infer_polarity,
)
from .traditional import TraditionalStatementParser
from .wallet import WalletStatementParser

PARSERS = {
    BankType.WALLET: WalletStatementParser,
    BankType.TRADITIONAL: TraditionalStatementParser,
}


def get_parser(bank_type: BankType, **kwargs) -> BaseStatementParser:
    """Get a parser instance for the given bank type.

    Args:
        bank_type: Detected or declared bank type
        **kwargs: Passed to the parser constructor

    Returns:
        Parser instance
    """
    return PARSERS[bank_type](**kwargs)


__all__ = [
    "AccountFieldPattern",
    "BaseStatementParser",
    "PARSERS",
    "RegexLineParser",
    "TransactionLineParser",
    "TraditionalStatementParser",
    "WalletStatementParser",
    "get_parser",
    "infer_polarity",
]
