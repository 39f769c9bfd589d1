"""
Pytest configuration and fixtures for statement processor tests.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "python"))

from statement_processor.config import IngestionSettings
from statement_processor.ingestion import IngestionOrchestrator
from statement_processor.pdf_extractor import build_text_pdf
from statement_processor.store import create_store

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

WALLET_STATEMENT_TEXT = """OPay Digital Wallet Statement
Account Holder: Adaeze Okafor
Phone Number: 08031234567
Statement Period: 01/01/2024 to 31/01/2024
Opening Balance: ₦10,000.00
Closing Balance: ₦25,500.00
15/01/2024 14:30:00 Transfer to John Smith ₦5,000.00 ₦5,000.00
16/01/2024 09:15 Wallet Funding from GTBank ₦20,000.00 ₦25,000.00
17/01/2024 Cashback from merchant payment ₦500.00 ₦25,500.00
18/01/2024 Airtime Purchase MTN ₦1,000.00 Failed
"""

TRADITIONAL_STATEMENT_TEXT = """GTBank
Account Statement
Account Name: Chinedu Eze
Account Number: 0123456789
Currency: NGN
Statement Period: 01/02/2024 to 29/02/2024
Opening Balance: 100,000.00
Closing Balance: 320,500.00
05/02/2024 Salary February GT240205001 250,000.00 CR 350,000.00
09/02/2024 POS Purchase Shoprite Lekki 30,000.00 DR 320,000.00
12/02/2024 ATM Withdrawal Ikeja 10,000.00 310,000.00
15/02/2024 Reversal of charges 500.00
"""


class FakeTextExtractor:
    """Text extractor returning canned text, with switchable availability."""

    def __init__(self, text: str = "", available: bool = True, can_initialize: bool = True):
        self.text = text
        self.available = available
        self.can_initialize = can_initialize
        self.extract_calls = 0
        self.initialize_calls = 0

    def is_available(self) -> bool:
        return self.available

    def initialize(self) -> bool:
        self.initialize_calls += 1
        self.available = self.can_initialize
        return self.available

    def extract_text(self, content: bytes) -> str:
        self.extract_calls += 1
        return self.text


class StaticAuthProvider:
    """Auth provider backed by a fixed token map."""

    def __init__(self, tokens: dict[str, str]):
        self.tokens = tokens

    def resolve_user_id(self, token: str) -> str | None:
        return self.tokens.get(token)


@pytest.fixture(autouse=True)
def test_environment(monkeypatch):
    """Run outside development mode so missing credentials are rejected."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def config_dir() -> Path:
    """Return the config directory path."""
    return PROJECT_ROOT / "config"


@pytest.fixture
def store():
    """Fresh in-memory SQLite store."""
    return create_store("sqlite://")


@pytest.fixture
def upload_dir(tmp_path) -> Path:
    """Directory receiving temporary upload files."""
    return tmp_path / "uploads"


@pytest.fixture
def settings(upload_dir) -> IngestionSettings:
    """Ingestion settings writing uploads under tmp_path."""
    return IngestionSettings(upload_dir=upload_dir, pdf_init_retries=1, pdf_init_delay=0)


@pytest.fixture
def wallet_text() -> str:
    return WALLET_STATEMENT_TEXT


@pytest.fixture
def traditional_text() -> str:
    return TRADITIONAL_STATEMENT_TEXT


@pytest.fixture
def text_extractor() -> FakeTextExtractor:
    """Available fake extractor returning the wallet statement text."""
    return FakeTextExtractor(WALLET_STATEMENT_TEXT)


@pytest.fixture
def orchestrator(store, settings, text_extractor) -> IngestionOrchestrator:
    return IngestionOrchestrator(store, settings=settings, text_extractor=text_extractor)


@pytest.fixture
def pdf_bytes() -> bytes:
    """A real PDF rendered with reportlab."""
    return build_text_pdf(["Account Statement", "05/02/2024 Salary 250,000.00"])
