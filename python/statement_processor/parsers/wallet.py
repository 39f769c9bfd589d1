"""
Wallet Statement Parser

Parses text extracted from Opay mobile-wallet statements.

Wallet statements print amounts with the naira sign, dates as DD/MM/YYYY
(newer exports use YYYY-MM-DD or "15 Jan 2024") and usually a time column.
"""

from ..models import BankType, RawAccountInfo, StatementSource
from .base import AccountFieldPattern, BaseStatementParser, RegexLineParser

DATE = r"(?P<date>\d{1,2}/\d{1,2}/\d{4}|\d{4}-\d{2}-\d{2}|\d{1,2}\s+[A-Za-z]{3}\s+\d{4})"
TIME = r"(?P<time>\d{1,2}:\d{2}(?::\d{2})?(?:\s*[AP]M)?)"
DESCRIPTION = r"(?P<description>.+?)"
AMOUNT = r"(?P<amount>(?:₦|NGN)?\s?\d[\d,]*(?:\.\d{1,2})?)"
BALANCE = r"(?P<balance>(?:₦|NGN)?\s?\d[\d,]*(?:\.\d{1,2})?)"
REFERENCE = r"(?-i:(?P<reference>(?=[A-Z0-9]*\d)[A-Z0-9]{8,}))"
TYPE = r"(?P<type>credit|debit)"
STATUS = r"(?P<status>successful|success|completed|failed|pending|declined|reversed)"

MONEY = r"(?:₦|NGN)?\s?[\d,]+(?:\.\d{1,2})?"
PERIOD_DATE = r"\d{1,2}/\d{1,2}/\d{4}|\d{4}-\d{2}-\d{2}|\d{1,2}\s+[A-Za-z]{3}\s+\d{4}"


class WalletStatementParser(BaseStatementParser):
    """Parser for Opay wallet statements."""

    BANK_TYPE = BankType.WALLET
    SOURCE = StatementSource.WALLET

    DEFAULT_BANK_NAME = "Opay"
    DEFAULT_ACCOUNT_TYPE = "Digital Wallet"
    DEFAULT_CURRENCY = "NGN"

    ACCOUNT_PATTERNS = [
        AccountFieldPattern.compile(
            "name",
            r"(?:Account\s+Holder|Customer\s+Name|(?<!Bank\s)Name)\s*:?\s*"
            r"(?P<account_name>[A-Za-z][A-Za-z .'-]+?)\s*$",
        ),
        AccountFieldPattern.compile(
            "wallet_id",
            r"(?:Account\s+Number|Opay\s+ID|Wallet\s+ID)\s*:?\s*(?P<account_number>\+?\d{10,14})",
        ),
        AccountFieldPattern.compile(
            "phone",
            r"(?:Phone(?:\s+Number)?|Mobile)\s*:?\s*(?P<account_number>(?:\+234|0)[1-9]\d{9})",
        ),
        AccountFieldPattern.compile(
            "period",
            rf"(?:Statement\s+)?Period\s*:?\s*(?P<statement_start>{PERIOD_DATE})"
            rf"\s*(?:to|-)\s*(?P<statement_end>{PERIOD_DATE})",
        ),
        AccountFieldPattern.compile(
            "opening_balance",
            rf"(?:Opening|Previous)\s+Balance\s*:?\s*(?P<opening_balance>{MONEY})",
        ),
        AccountFieldPattern.compile(
            "closing_balance",
            rf"(?:Closing|Current)\s+Balance\s*:?\s*(?P<closing_balance>{MONEY})",
        ),
        AccountFieldPattern.compile(
            "wallet_balance",
            rf"Wallet\s+Balance\s*:?\s*(?P<wallet_balance>{MONEY})",
        ),
        AccountFieldPattern.compile(
            "total_debits",
            rf"Total\s+(?:Debits?|Outflow|Money\s+Out)\s*:?\s*(?P<total_debits>{MONEY})",
        ),
        AccountFieldPattern.compile(
            "total_credits",
            rf"Total\s+(?:Credits?|Inflow|Money\s+In)\s*:?\s*(?P<total_credits>{MONEY})",
        ),
    ]

    LINE_PARSERS = [
        RegexLineParser(
            "date_time_amount_balance",
            rf"^{DATE}\s+{TIME}\s+{DESCRIPTION}\s+{AMOUNT}\s+{BALANCE}\s*$",
        ),
        RegexLineParser(
            "reference_type",
            rf"^{DATE}\s+{DESCRIPTION}\s+{REFERENCE}\s+{AMOUNT}\s+{TYPE}\s*$",
        ),
        RegexLineParser(
            "amount_status",
            rf"^{DATE}\s+{DESCRIPTION}\s+{AMOUNT}\s+{STATUS}\s*$",
        ),
        RegexLineParser(
            "date_time_amount",
            rf"^{DATE}\s+{TIME}\s+{DESCRIPTION}\s+{AMOUNT}\s*$",
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
        if info.wallet_balance is None:
            info.wallet_balance = info.closing_balance
        if info.closing_balance is None:
            info.closing_balance = info.wallet_balance

        info.bank_name = info.bank_name or self.DEFAULT_BANK_NAME
        info.account_type = info.account_type or self.DEFAULT_ACCOUNT_TYPE
        info.currency = info.currency or self.DEFAULT_CURRENCY
