"""
Traditional Bank Statement Parser

Parses text extracted from conventional bank account statements (First
Bank, GTBank, Access Bank, ...). Amounts always carry two decimals and
polarity is usually an explicit CR/DR column.
"""

from ..models import BankType, RawAccountInfo, StatementSource
from .base import AccountFieldPattern, BaseStatementParser, RegexLineParser

DATE = r"(?P<date>\d{2}/\d{2}/\d{4}|\d{1,2}-[A-Za-z]{3}-\d{2,4}|\d{4}-\d{2}-\d{2})"
DESCRIPTION = r"(?P<description>.+?)"
AMOUNT = r"(?P<amount>\d[\d,]*\.\d{2})"
BALANCE = r"(?P<balance>-?\d[\d,]*\.\d{2})"
REFERENCE = r"(?-i:(?P<reference>(?=[A-Z0-9/-]*\d)[A-Z0-9][A-Z0-9/-]{5,}))"
TYPE = r"(?P<type>CR|DR|Credit|Debit)"

MONEY = r"(?:₦|NGN)?\s?[\d,]+\.\d{2}"
PERIOD_DATE = r"\d{2}/\d{2}/\d{4}|\d{1,2}-[A-Za-z]{3}-\d{2,4}|\d{4}-\d{2}-\d{2}"

NAMED_BANKS = (
    r"First\s+Bank|Access\s+Bank|GTBank|Guaranty\s+Trust\s+Bank|Zenith\s+Bank"
    r"|United\s+Bank\s+for\s+Africa|UBA|Fidelity\s+Bank|Sterling\s+Bank"
    r"|Wema\s+Bank|Union\s+Bank"
)


class TraditionalStatementParser(BaseStatementParser):
    """Parser for conventional bank statements."""

    BANK_TYPE = BankType.TRADITIONAL
    SOURCE = StatementSource.BANK_IMPORT

    DEFAULT_ACCOUNT_TYPE = "Savings"
    DEFAULT_CURRENCY = "NGN"

    ACCOUNT_PATTERNS = [
        AccountFieldPattern.compile(
            "account_number",
            r"Account\s+(?:Number|No\.?)\s*:?\s*(?P<account_number>\d{6,})",
        ),
        AccountFieldPattern.compile(
            "account_name",
            r"Account\s+Name\s*:?\s*(?P<account_name>[^\n]+?)\s*$",
        ),
        AccountFieldPattern.compile(
            "bank_name",
            r"Bank\s+Name\s*:?\s*(?P<bank_name>[^\n]+?)\s*$",
        ),
        AccountFieldPattern.compile("named_bank", rf"\b(?P<bank_name>{NAMED_BANKS})\b"),
        AccountFieldPattern.compile(
            "account_type",
            r"\b(?P<account_type>Current|Savings|Domiciliary)\s+Account\b",
        ),
        AccountFieldPattern.compile(
            "currency",
            r"Currency\s*:?\s*(?P<currency>[A-Z]{3})\b",
        ),
        AccountFieldPattern.compile(
            "period",
            rf"(?:Statement\s+)?Period\s*:?\s*(?P<statement_start>{PERIOD_DATE})"
            rf"\s*(?:to|-)\s*(?P<statement_end>{PERIOD_DATE})",
        ),
        AccountFieldPattern.compile(
            "opening_balance",
            rf"Opening\s+Balance\s*:?\s*(?P<opening_balance>{MONEY})",
        ),
        AccountFieldPattern.compile(
            "closing_balance",
            rf"Closing\s+Balance\s*:?\s*(?P<closing_balance>{MONEY})",
        ),
        AccountFieldPattern.compile(
            "total_debits",
            rf"Total\s+(?:Debits?|Withdrawals)\s*:?\s*(?P<total_debits>{MONEY})",
        ),
        AccountFieldPattern.compile(
            "total_credits",
            rf"Total\s+(?:Credits?|Lodgements|Deposits)\s*:?\s*(?P<total_credits>{MONEY})",
        ),
    ]

    LINE_PARSERS = [
        RegexLineParser(
            "reference_amount_type",
            rf"^{DATE}\s+{DESCRIPTION}\s+{REFERENCE}\s+{AMOUNT}\s+{TYPE}(?:\s+{BALANCE})?\s*$",
        ),
        RegexLineParser(
            "amount_crdr",
            rf"^{DATE}\s+{DESCRIPTION}\s+{AMOUNT}\s*(?P<type>CR|DR)(?:\s+{BALANCE})?\s*$",
        ),
        RegexLineParser(
            "amount_balance",
            rf"^{DATE}\s+{DESCRIPTION}\s+{AMOUNT}\s+{BALANCE}\s*$",
        ),
        RegexLineParser(
            "bare",
            rf"^{DATE}\s+{DESCRIPTION}\s+{AMOUNT}\s*$",
        ),
    ]

    def finalize_account_info(self, info: RawAccountInfo) -> None:
        if info.currency:
            info.currency = info.currency.upper()
        info.currency = info.currency or self.DEFAULT_CURRENCY
        if info.account_type:
            info.account_type = info.account_type.title()
        info.account_type = info.account_type or self.DEFAULT_ACCOUNT_TYPE
