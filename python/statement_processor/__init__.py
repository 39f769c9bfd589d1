"""
Statement Processor Package

Bank and wallet statement ingestion: format extraction, bank type
detection, regex parsing, normalization, categorization and duplicate-safe
persistence.
"""

from .bank_detector import BankTypeDetector, DetectionResult
from .categorizer import CategoryClassifier, classify
from .config import IngestionSettings
from .csv_extractor import CSVStatementExtractor
from .duplicate_resolver import DuplicateResolver, WriteOutcome
from .errors import ErrorResponse, StatementError
from .ingestion import IngestionOrchestrator, UploadedFile, UploadResult
from .json_extractor import JSONStatementExtractor
from .models import (
    AccountInfo,
    BankType,
    RawAccountInfo,
    RawStatement,
    RawTransaction,
    StatementSource,
    Transaction,
    TransactionType,
)
from .normalizer import StatementNormalizer
from .parsers import TraditionalStatementParser, WalletStatementParser
from .pdf_extractor import PDFStatementExtractor, PdfPlumberTextExtractor
from .store import SqlStore, Store, create_store

__all__ = [
    "AccountInfo",
    "BankType",
    "BankTypeDetector",
    "CSVStatementExtractor",
    "CategoryClassifier",
    "DetectionResult",
    "DuplicateResolver",
    "ErrorResponse",
    "IngestionOrchestrator",
    "IngestionSettings",
    "JSONStatementExtractor",
    "PDFStatementExtractor",
    "PdfPlumberTextExtractor",
    "RawAccountInfo",
    "RawStatement",
    "RawTransaction",
    "SqlStore",
    "StatementError",
    "StatementNormalizer",
    "StatementSource",
    "Store",
    "TraditionalStatementParser",
    "Transaction",
    "TransactionType",
    "UploadResult",
    "UploadedFile",
    "WalletStatementParser",
    "WriteOutcome",
    "classify",
    "create_store",
]
