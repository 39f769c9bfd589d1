"""
PDF Statement Extractor Module

Extracts text from text-based PDF statements with pdfplumber, detects the
bank type and hands the text to the matching regex parser.
"""

import io
import logging
import time
from typing import Protocol

import pdfplumber
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from .bank_detector import BankTypeDetector
from .categorizer import CategoryClassifier
from .errors import (
    EmptyContentError,
    InvalidFileError,
    MalformedInputError,
    ServiceUnavailableError,
)
from .models import BankType, RawStatement
from .parsers import PARSERS, BaseStatementParser, get_parser

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"
SELF_CHECK_TEXT = "Statement extractor self check"


def build_text_pdf(lines: list[str], font_size: int = 10) -> bytes:
    """Render plain text lines into a single-column PDF.

    Args:
        lines: Text lines, one per row; a new page starts when the page is full
        font_size: Font size in points

    Returns:
        PDF bytes
    """
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    width, height = A4
    margin = 40
    leading = font_size * 1.5

    y = height - margin
    pdf.setFont("Helvetica", font_size)
    for line in lines:
        if y < margin:
            pdf.showPage()
            pdf.setFont("Helvetica", font_size)
            y = height - margin
        pdf.drawString(margin, y, line)
        y -= leading

    pdf.save()
    return buffer.getvalue()


class TextExtractor(Protocol):
    """Capability that turns PDF bytes into text. May be unavailable."""

    def is_available(self) -> bool:
        ...

    def initialize(self) -> bool:
        ...

    def extract_text(self, content: bytes) -> str:
        ...


class PdfPlumberTextExtractor:
    """pdfplumber-backed text extraction with a warm-up self check."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or globals()["logger"]
        self._available = False

    def is_available(self) -> bool:
        return self._available

    def _read(self, content: bytes) -> str:
        with pdfplumber.open(io.BytesIO(content)) as pdf:
            return "\n".join((page.extract_text() or "") for page in pdf.pages)

    def initialize(self) -> bool:
        """Round-trip a generated PDF to verify extraction works."""
        try:
            text = self._read(build_text_pdf([SELF_CHECK_TEXT]))
        except Exception as e:
            self.logger.warning(f"PDF text extractor self check failed: {e}")
            self._available = False
            return False

        self._available = "self check" in text.lower()
        if self._available:
            self.logger.info("PDF text extractor ready")
        else:
            self.logger.warning("PDF text extractor returned unexpected self check text")
        return self._available

    def initialize_with_retry(self, retries: int = 3, delay: float = 2.0) -> bool:
        for attempt in range(1, retries + 1):
            if self.initialize():
                return True
            self.logger.warning(f"PDF extractor initialization attempt {attempt}/{retries} failed")
            if attempt < retries:
                time.sleep(delay)
        return False

    def extract_text(self, content: bytes) -> str:
        if not self._available and not self.initialize():
            raise ServiceUnavailableError(details="The PDF text extractor could not be initialized")
        return self._read(content)


class PDFStatementExtractor:
    """Extractor for .pdf uploads."""

    def __init__(
        self,
        text_extractor: TextExtractor | None,
        detector: BankTypeDetector | None = None,
        parsers: dict[BankType, BaseStatementParser] | None = None,
        classifier: CategoryClassifier | None = None,
        min_text_length: int = 50,
        logger: logging.Logger | None = None,
    ):
        self.logger = logger or globals()["logger"]
        self.text_extractor = text_extractor
        self.detector = detector or BankTypeDetector(logger=self.logger)
        self.parsers = parsers or {
            bank_type: get_parser(bank_type, classifier=classifier, logger=self.logger)
            for bank_type in PARSERS
        }
        self.min_text_length = min_text_length

    def extract(self, content: bytes, filename: str = "") -> RawStatement:
        """Extract a statement from PDF bytes.

        Args:
            content: Raw file bytes
            filename: Original filename (used in log messages only)

        Returns:
            RawStatement produced by the wallet or traditional parser

        Raises:
            InvalidFileError: Content does not start with the PDF header
            ServiceUnavailableError: No working text extractor
            EmptyContentError: Too little text (scanned or image PDF)
            MalformedInputError: Text could not be read or parsed
        """
        if not content.startswith(PDF_MAGIC):
            raise InvalidFileError(
                details="The uploaded file doesn't appear to be a valid PDF"
            )

        text = self._extract_text(content)

        if len(text.strip()) < self.min_text_length:
            self.logger.warning(
                f"PDF {filename or '<upload>'} yielded {len(text.strip())} characters of text"
            )
            raise EmptyContentError(
                "Could not extract text from PDF",
                details="The PDF might be scanned or image-based",
                suggestions=[
                    "Use a text-based PDF (not scanned)",
                    "For Opay: Export transactions as JSON from the app",
                    "Upload as JSON instead using our template",
                    "Use manual transaction entry",
                ],
            )

        bank_type = self.detector.detect(text)
        parser = self.parsers[bank_type]

        try:
            statement = parser.parse(text)
        except Exception as e:
            self.logger.exception(f"Failed to parse {bank_type.value} PDF text")
            raise MalformedInputError(
                "Failed to parse PDF bank statement",
                details=str(e),
                suggestions=[
                    "For Opay users: Try exporting as JSON from the app",
                    "For traditional banks: Ensure it's a text-based statement",
                    "Upload as JSON file using our template",
                ],
                bank_type=bank_type,
            ) from e

        if not statement.transactions:
            statement.warnings.append("No transaction lines were recognized in the PDF text")

        self.logger.info(
            f"PDF {filename or '<upload>'} parsed as {bank_type.value}: "
            f"{len(statement.transactions)} transactions"
        )
        return statement

    def _extract_text(self, content: bytes) -> str:
        unavailable = ServiceUnavailableError(
            details="We're working on fixing PDF support. In the meantime:",
            suggestions=[
                "Upload your Opay or bank statement as JSON using the template below",
                "Use manual transaction entry",
                "Contact support for assistance with your specific bank format",
            ],
        )

        if self.text_extractor is None:
            raise unavailable

        if not self.text_extractor.is_available():
            self.logger.info("PDF text extractor not available, attempting initialization")
            if not self.text_extractor.initialize():
                raise unavailable

        try:
            return self.text_extractor.extract_text(content) or ""
        except ServiceUnavailableError:
            raise
        except Exception as e:
            self.logger.warning(f"PDF text extraction failed: {e}")
            raise MalformedInputError(
                "Failed to parse PDF bank statement",
                details="The PDF format may not be supported or the file might be corrupted.",
                suggestions=[
                    "Ensure it's a text-based statement",
                    "Upload as JSON file using our template",
                    "Use manual transaction entry",
                ],
            ) from e
