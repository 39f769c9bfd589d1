"""
Statement Ingestion Module

Upload entry point: validates the file, dispatches it to the matching
extractor, normalizes the result, writes new transactions and builds the
client response.
"""

import logging
import re
import secrets
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from .bank_detector import BankTypeDetector
from .categorizer import CategoryClassifier, default_classifier
from .config import IngestionSettings
from .csv_extractor import CSVStatementExtractor
from .duplicate_resolver import DuplicateResolver
from .errors import (
    AuthError,
    EmptyContentError,
    ErrorResponse,
    FileTooLargeError,
    MissingFileError,
    StatementError,
    UnsupportedFormatError,
)
from .json_extractor import JSONStatementExtractor
from .models import BankType, RawStatement
from .normalizer import StatementNormalizer
from .pdf_extractor import PDFStatementExtractor, TextExtractor
from .store import Store
from .templates import build_json_template

logger = logging.getLogger(__name__)

FORMATS_BY_EXTENSION = {
    ".json": "json",
    ".csv": "csv",
    ".pdf": "pdf",
}

NO_NEW_TRANSACTIONS_WARNING = (
    "No new transactions were saved (may be duplicates or no transactions found)"
)
WALLET_NOTE = (
    "Opay statement processed! Your digital wallet transactions have been categorized."
)


@dataclass
class UploadedFile:
    """A file received from the client."""

    filename: str
    content: bytes
    size: int | None = None

    def __post_init__(self):
        if self.size is None:
            self.size = len(self.content)

    @property
    def extension(self) -> str:
        return Path(self.filename).suffix.lower()


@dataclass
class UploadResult:
    """Successful upload summary."""

    bank_type: BankType
    filename: str
    size: int
    total_transactions: int
    saved_transactions: int
    skipped_transactions: int
    account_info_updated: bool
    bank_detected: str
    warnings: list[str] = field(default_factory=list)

    status_code = 200

    @property
    def success(self) -> bool:
        return True

    def to_dict(self) -> dict:
        body = {
            "success": True,
            "message": f"{self.bank_detected} statement processed successfully",
            "bankType": self.bank_type.value,
            "filename": self.filename,
            "size": self.size,
            "processed": {
                "total_transactions": self.total_transactions,
                "saved_transactions": self.saved_transactions,
                "skipped_transactions": self.skipped_transactions,
                "account_info_updated": self.account_info_updated,
                "bank_detected": self.bank_detected,
            },
        }
        if self.saved_transactions == 0:
            body["warning"] = NO_NEW_TRANSACTIONS_WARNING
        if self.bank_type is BankType.WALLET:
            body["walletNote"] = WALLET_NOTE
        if self.warnings:
            body["notes"] = list(self.warnings)
        return body


class IngestionOrchestrator:
    """Runs one statement upload end to end."""

    def __init__(
        self,
        store: Store,
        settings: IngestionSettings | None = None,
        text_extractor: TextExtractor | None = None,
        classifier: CategoryClassifier | None = None,
        detector: BankTypeDetector | None = None,
        logger: logging.Logger | None = None,
    ):
        self.logger = logger or globals()["logger"]
        self.store = store
        self.settings = settings or IngestionSettings.load()
        classifier = classifier or default_classifier

        self.extractors = {
            "json": JSONStatementExtractor(logger=self.logger),
            "csv": CSVStatementExtractor(classifier=classifier, logger=self.logger),
            "pdf": PDFStatementExtractor(
                text_extractor,
                detector=detector or BankTypeDetector(logger=self.logger),
                classifier=classifier,
                min_text_length=self.settings.min_pdf_text_length,
                logger=self.logger,
            ),
        }
        self.normalizer = StatementNormalizer(
            classifier=classifier,
            default_currency=self.settings.default_currency,
            logger=self.logger,
        )
        self.resolver = DuplicateResolver(store, logger=self.logger)

    def handle_upload(
        self, user_id: str | None, upload: UploadedFile | None
    ) -> UploadResult | ErrorResponse:
        """Process an uploaded statement.

        Args:
            user_id: Authenticated user, or None
            upload: The uploaded file, or None if the request had none

        Returns:
            UploadResult on success, ErrorResponse otherwise (never raises)
        """
        if not user_id:
            return AuthError().to_response()
        if upload is None or not upload.filename:
            return MissingFileError().to_response()

        file_format = FORMATS_BY_EXTENSION.get(upload.extension)
        temp_path = None

        self.logger.info(
            f"Processing bank statement {upload.filename} ({upload.size} bytes) for user {user_id}"
        )

        try:
            self.validate(upload)
            temp_path = self.save_upload(user_id, upload)
            content = temp_path.read_bytes()

            raw = self.extractors[file_format].extract(content, upload.filename)
            return self.process(user_id, upload, raw)

        except StatementError as e:
            self.logger.warning(f"Upload {upload.filename} rejected for user {user_id}: {e}")
            if file_format == "pdf" and e.json_template is None:
                e.json_template = build_json_template(e.bank_type)
            return e.to_response()

        except Exception as e:
            self.logger.exception(
                f"Error processing bank statement {upload.filename} for user {user_id}"
            )
            return ErrorResponse(
                status_code=500,
                body={
                    "error": "Failed to process bank statement",
                    "details": str(e),
                    "support": f"Contact {self.settings.support_contact} if this problem persists",
                },
            )

        finally:
            self.cleanup(temp_path)

    def validate(self, upload: UploadedFile) -> None:
        """Check size and extension.

        Raises:
            FileTooLargeError: Upload exceeds the size ceiling
            UnsupportedFormatError: Extension is not .json, .csv or .pdf
        """
        max_bytes = self.settings.max_upload_bytes
        if upload.size > max_bytes or len(upload.content) > max_bytes:
            raise FileTooLargeError(
                details=f"Maximum size is {max_bytes // 1024 // 1024}MB",
            )

        if upload.extension not in FORMATS_BY_EXTENSION:
            raise UnsupportedFormatError(details=f"Received {upload.filename}")

    def save_upload(self, user_id: str, upload: UploadedFile) -> Path:
        """Write the upload to the upload directory under a generated name."""
        upload_dir = Path(self.settings.upload_dir)
        upload_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        safe_user = re.sub(r"[^A-Za-z0-9_-]", "_", str(user_id))[:32]
        file_path = upload_dir / f"{timestamp}_{safe_user}_{secrets.token_hex(4)}{upload.extension}"
        file_path.write_bytes(upload.content)
        return file_path

    def cleanup(self, file_path: Path | None) -> None:
        if file_path is None:
            return
        try:
            file_path.unlink(missing_ok=True)
        except OSError as e:
            self.logger.warning(f"Failed to delete uploaded file {file_path}: {e}")

    def process(self, user_id: str, upload: UploadedFile, raw: RawStatement) -> UploadResult:
        """Normalize, persist and summarize an extracted statement.

        Raises:
            EmptyContentError: The statement has neither transactions nor account info
        """
        if raw.is_empty:
            raise EmptyContentError(
                details="The file doesn't contain recognizable transaction or account data",
                suggestions=[
                    "Check the file format matches your bank type",
                    "For Opay: Ensure all transaction data is included",
                    "Try exporting a longer date range",
                    "Use manual transaction entry",
                ],
                bank_type=raw.bank_type,
            )

        normalized = self.normalizer.normalize(raw, user_id)

        account_info_updated = False
        if normalized.account_info is not None:
            try:
                self.store.upsert_account_info(normalized.account_info)
                account_info_updated = True
            except Exception as e:
                self.logger.error(f"Failed to save account info for user {user_id}: {e}")

        batch = self.resolver.resolve_batch(
            user_id, normalized.transactions, normalized.bank_type
        )

        if normalized.account_info is not None:
            bank_detected = normalized.account_info.bank_name
        elif normalized.bank_type is BankType.WALLET:
            bank_detected = "Opay"
        else:
            bank_detected = "Unknown Bank"

        result = UploadResult(
            bank_type=normalized.bank_type,
            filename=upload.filename,
            size=upload.size,
            total_transactions=len(raw.transactions) + raw.rejected_rows,
            saved_transactions=batch.saved,
            skipped_transactions=raw.rejected_rows + normalized.skipped + batch.skipped,
            account_info_updated=account_info_updated,
            bank_detected=bank_detected,
            warnings=list(raw.warnings) + normalized.skip_reasons,
        )

        self.logger.info(
            f"Bank statement processing completed for user {user_id}: "
            f"bank={bank_detected}, type={normalized.bank_type.value}, "
            f"total={result.total_transactions}, saved={batch.saved}, "
            f"skipped={result.skipped_transactions}, account_info={account_info_updated}"
        )
        return result
