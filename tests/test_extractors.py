"""
Format Extractor Tests

Tests for the JSON, CSV and PDF statement extractors.
"""

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "python"))

from conftest import FakeTextExtractor
from statement_processor.csv_extractor import CSVStatementExtractor, find_columns
from statement_processor.errors import (
    EmptyContentError,
    InvalidFileError,
    MalformedInputError,
    ServiceUnavailableError,
    StatementValidationError,
)
from statement_processor.json_extractor import JSONStatementExtractor
from statement_processor.models import BankType
from statement_processor.parsers import PARSERS
from statement_processor.pdf_extractor import (
    PDFStatementExtractor,
    PdfPlumberTextExtractor,
    build_text_pdf,
)


def to_bytes(data) -> bytes:
    return json.dumps(data).encode("utf-8")


class TestJSONStatementExtractor:
    """Tests for JSON uploads."""

    def test_transactions_only(self):
        """Test a statement with only transactions."""
        statement = JSONStatementExtractor().extract(to_bytes({
            "transactions": [
                {"date": "2024-01-15", "description": "Transfer to John Smith",
                 "type": "debit", "amount": 5000},
            ]
        }))

        assert statement.account_info is None
        assert len(statement.transactions) == 1
        assert statement.transactions[0].amount == 5000
        assert statement.transactions[0].description == "Transfer to John Smith"
        assert statement.bank_type is None

    def test_invalid_json(self):
        """Test unparsable content raises MalformedInputError."""
        with pytest.raises(MalformedInputError) as exc_info:
            JSONStatementExtractor().extract(b"{not json")

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Invalid JSON file format"

    def test_missing_required_keys(self):
        """Test JSON with neither transactions nor accountInfo."""
        with pytest.raises(StatementValidationError):
            JSONStatementExtractor().extract(to_bytes({"foo": 1}))

    def test_non_object_root(self):
        """Test a top-level array is rejected."""
        with pytest.raises(StatementValidationError):
            JSONStatementExtractor().extract(to_bytes([{"date": "2024-01-01"}]))

    def test_transactions_must_be_list(self):
        """Test a non-array transactions value is rejected."""
        with pytest.raises(StatementValidationError):
            JSONStatementExtractor().extract(to_bytes({"transactions": {"a": 1}}))

    def test_account_info_aliases(self):
        """Test camelCase account fields and the opay bank type alias."""
        statement = JSONStatementExtractor().extract(to_bytes({
            "bankType": "opay",
            "account_info": {
                "accountName": "Ada Obi",
                "accountNumber": "+2348012345678",
                "bankName": "Opay",
                "walletBalance": "25,000.00",
                "statementPeriod": {"startDate": "2024-01-01", "endDate": "2024-01-31"},
            },
        }))

        info = statement.account_info
        assert statement.bank_type == BankType.WALLET
        assert info.account_name == "Ada Obi"
        assert info.account_number == "+2348012345678"
        assert info.wallet_balance == "25,000.00"
        assert info.statement_start == "2024-01-01"
        assert info.statement_end == "2024-01-31"
        assert statement.transactions == []

    def test_bank_type_inferred_from_bank_name(self):
        """Test a wallet bank name marks the statement as wallet."""
        statement = JSONStatementExtractor().extract(to_bytes({
            "accountInfo": {"bank_name": "OPay Digital"},
        }))

        assert statement.bank_type == BankType.WALLET

    def test_transaction_aliases(self):
        """Test alternative transaction keys and the statement_data alias."""
        statement = JSONStatementExtractor().extract(to_bytes({
            "statement_data": [
                {"transaction_date": "2024-02-01", "narration": "POS purchase",
                 "debit": "1,200.00", "reference": "REF001", "beneficiary": "Shoprite"},
                "not a transaction",
            ]
        }))

        txn, empty = statement.transactions
        assert txn.date == "2024-02-01"
        assert txn.description == "POS purchase"
        assert txn.amount == "1,200.00"
        assert txn.transaction_reference == "REF001"
        assert txn.counterparty == "Shoprite"
        assert empty.date is None

    def test_byte_order_mark(self):
        """Test UTF-8 files with a BOM are accepted."""
        content = "﻿".encode("utf-8") + to_bytes({"transactions": []})

        statement = JSONStatementExtractor().extract(content)

        assert statement.transactions == []


class TestCSVStatementExtractor:
    """Tests for CSV uploads."""

    def test_jumia_row(self):
        """Test the date,narration,amount,type layout."""
        content = b"date,narration,amount,type\n2024-01-01,Jumia Purchase,15000,debit\n"

        statement = CSVStatementExtractor().extract(content, "statement.csv")

        assert len(statement.transactions) == 1
        txn = statement.transactions[0]
        assert txn.date == "2024-01-01"
        assert txn.description == "Jumia Purchase"
        assert txn.amount == 15000.0
        assert txn.type == "debit"
        assert txn.category == "Shopping"
        assert statement.bank_type == BankType.TRADITIONAL

    def test_too_few_lines(self):
        """Test a header-only file raises MalformedInputError."""
        with pytest.raises(MalformedInputError):
            CSVStatementExtractor().extract(b"date,description,amount\n")

    def test_missing_amount_column(self):
        """Test a file without an amount column is rejected."""
        with pytest.raises(MalformedInputError) as exc_info:
            CSVStatementExtractor().extract(b"date,description\n2024-01-01,Coffee\n")

        assert "amount" in exc_info.value.details

    def test_invalid_rows_skipped(self):
        """Test non-positive amounts, bad dates and short rows are skipped."""
        content = "\n".join([
            "Transaction Date,Description,Amount,Type,Balance",
            '15/01/2024,"Salary, January","₦250,000.00",CR,"300,000.00"',
            "16/01/2024,Refund,-500,credit,299500",
            "not a date,Coffee,1200,debit,298300",
            "17/01/2024,Short row",
            "18/01/2024,Airtime purchase,0,debit,298300",
        ]).encode("utf-8")

        statement = CSVStatementExtractor().extract(content, "gtbank.csv")

        assert len(statement.transactions) == 1
        assert statement.rejected_rows == 4

        salary = statement.transactions[0]
        assert salary.date == "2024-01-15"
        assert salary.amount == 250000.0
        assert salary.type == "credit"
        assert salary.balance_after == 300000.0
        assert salary.category == "Income"

    def test_wallet_detected_from_filename(self):
        """Test the wallet brand in the filename marks the statement as wallet."""
        content = b"date,details,value\n2024-01-01,Send money,500\n"

        statement = CSVStatementExtractor().extract(content, "opay_january.csv")

        assert statement.bank_type == BankType.WALLET

    def test_category_column_kept(self):
        """Test an explicit category column overrides classification."""
        content = b"date,description,amount,category\n2024-01-01,Jumia,100,Gifts\n"

        txn = CSVStatementExtractor().extract(content).transactions[0]

        assert txn.category == "Gifts"

    def test_find_columns(self):
        """Test header matching claims each column once."""
        columns = find_columns(["Value Date", "Narration", "Amount", "Credit/Debit", "Balance"])

        assert columns == {
            "date": 0,
            "description": 1,
            "amount": 2,
            "type": 3,
            "balance": 4,
        }


class TestPDFStatementExtractor:
    """Tests for PDF uploads."""

    def test_rejects_non_pdf_before_extraction(self, wallet_text):
        """Test content without the PDF header never reaches the extractor."""
        fake = FakeTextExtractor(wallet_text)

        with pytest.raises(InvalidFileError):
            PDFStatementExtractor(fake).extract(b"hello world", "statement.pdf")

        assert fake.extract_calls == 0

    def test_no_text_extractor(self, pdf_bytes):
        """Test a missing extractor is a recoverable unavailability."""
        with pytest.raises(ServiceUnavailableError) as exc_info:
            PDFStatementExtractor(None).extract(pdf_bytes)

        assert exc_info.value.status_code == 400

    def test_extractor_cannot_initialize(self, pdf_bytes):
        """Test an extractor that fails to initialize is reported unavailable."""
        fake = FakeTextExtractor("x" * 100, available=False, can_initialize=False)

        with pytest.raises(ServiceUnavailableError):
            PDFStatementExtractor(fake).extract(pdf_bytes)

        assert fake.initialize_calls == 1
        assert fake.extract_calls == 0

    def test_extractor_initialized_on_demand(self, pdf_bytes, wallet_text):
        """Test an unavailable extractor is initialized before use."""
        fake = FakeTextExtractor(wallet_text, available=False)

        statement = PDFStatementExtractor(fake).extract(pdf_bytes)

        assert fake.initialize_calls == 1
        assert len(statement.transactions) == 4

    def test_too_little_text(self, pdf_bytes):
        """Test scanned PDFs (little text) raise EmptyContentError."""
        fake = FakeTextExtractor("   short text   ")

        with pytest.raises(EmptyContentError) as exc_info:
            PDFStatementExtractor(fake).extract(pdf_bytes)

        assert exc_info.value.suggestions

    def test_wallet_statement(self, pdf_bytes, wallet_text):
        """Test wallet text goes to the wallet parser."""
        statement = PDFStatementExtractor(FakeTextExtractor(wallet_text)).extract(pdf_bytes)

        assert statement.bank_type == BankType.WALLET
        assert statement.rejected_rows == 0
        assert statement.account_info.account_name == "Adaeze Okafor"

    def test_traditional_statement(self, pdf_bytes, traditional_text):
        """Test traditional text goes to the traditional parser."""
        statement = PDFStatementExtractor(FakeTextExtractor(traditional_text)).extract(pdf_bytes)

        assert statement.bank_type == BankType.TRADITIONAL
        assert len(statement.transactions) == 4

    def test_default_parsers_from_registry(self):
        """Test one parser per registered bank type is built by default."""
        extractor = PDFStatementExtractor(FakeTextExtractor(""))

        assert set(extractor.parsers) == set(PARSERS)
        for bank_type, parser in extractor.parsers.items():
            assert isinstance(parser, PARSERS[bank_type])
            assert parser.logger is extractor.logger

    def test_warning_when_no_lines_recognized(self, pdf_bytes):
        """Test a warning is attached when no transaction line matched."""
        text = "GTBank Account Statement\nAccount Number: 0123456789\n" + "Notes " * 20

        statement = PDFStatementExtractor(FakeTextExtractor(text)).extract(pdf_bytes)

        assert statement.transactions == []
        assert statement.warnings


class TestPdfPlumberTextExtractor:
    """Tests for the pdfplumber-backed extractor on reportlab PDFs."""

    def test_initialize(self):
        """Test the self check round trip marks the extractor available."""
        extractor = PdfPlumberTextExtractor()

        assert extractor.is_available() is False
        assert extractor.initialize() is True
        assert extractor.is_available() is True

    def test_extract_text(self):
        """Test text drawn with reportlab is read back."""
        content = build_text_pdf(["Account Statement", "Closing Balance 320,500.00"])

        text = PdfPlumberTextExtractor().extract_text(content)

        assert "Account Statement" in text
        assert "320,500.00" in text

    def test_build_text_pdf_header(self):
        """Test generated documents start with the PDF header."""
        assert build_text_pdf(["hello"]).startswith(b"%PDF")
