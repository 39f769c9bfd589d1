"""
JSON upload templates.

Returned to users whenever a PDF cannot be processed so they can re-submit
the statement as JSON.
"""

import copy

from .models import BankType

SUPPORTED_BANKS = [
    "Opay Digital Wallet",
    "Access Bank",
    "GTBank",
    "First Bank",
    "Zenith Bank",
    "UBA",
    "Fidelity Bank",
    "Sterling Bank",
    "Wema Bank",
]

WALLET_TEMPLATE = {
    "bankType": "opay",
    "accountInfo": {
        "account_name": "John Doe",
        "account_number": "+2348012345678",
        "bank_name": "Opay",
        "account_type": "Digital Wallet",
        "currency": "NGN",
        "statement_period": {"start_date": "2024-01-01", "end_date": "2024-01-31"},
        "wallet_balance": 25000.00,
    },
    "transactions": [
        {
            "date": "2024-01-15",
            "time": "14:30:00",
            "description": "Transfer to John Smith",
            "type": "debit",
            "amount": 5000.00,
            "category": "Money Transfer",
            "transaction_reference": "OP123456789",
            "channel": "Opay Mobile App",
        },
        {
            "date": "2024-01-16",
            "time": "09:15:00",
            "description": "Cashback from merchant payment",
            "type": "credit",
            "amount": 100.00,
            "category": "Rewards",
            "transaction_reference": "CB987654321",
        },
    ],
}

TRADITIONAL_TEMPLATE = {
    "bankType": "traditional",
    "accountInfo": {
        "account_name": "John Doe",
        "account_number": "0123456789",
        "bank_name": "GTBank",
        "account_type": "Savings",
        "currency": "NGN",
        "statement_period": {"start_date": "2024-01-01", "end_date": "2024-01-31"},
        "opening_balance": 100000.00,
        "closing_balance": 320000.00,
    },
    "transactions": [
        {
            "date": "2024-01-05",
            "description": "Salary January",
            "type": "credit",
            "amount": 250000.00,
            "category": "Income",
            "transaction_reference": "GT240105001",
        },
        {
            "date": "2024-01-09",
            "description": "POS Purchase Shoprite Lekki",
            "type": "debit",
            "amount": 30000.00,
            "category": "Shopping",
        },
    ],
}


def build_json_template(bank_type: BankType | str | None = None) -> dict:
    """Return a fresh copy of the upload template for a bank type (wallet by default)."""
    resolved = BankType.from_value(bank_type) or BankType.WALLET
    if resolved is BankType.TRADITIONAL:
        return copy.deepcopy(TRADITIONAL_TEMPLATE)
    return copy.deepcopy(WALLET_TEMPLATE)
