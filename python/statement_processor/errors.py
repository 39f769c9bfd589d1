"""
Statement Ingestion Errors

Exception hierarchy for the upload pipeline. Every error knows the HTTP
status it maps to and renders the structured failure payload returned to
the client.
"""

from dataclasses import dataclass, field
from typing import Any

SUPPORTED_FORMATS = ["JSON (.json)", "PDF (.pdf)", "CSV (.csv)"]


@dataclass
class ErrorResponse:
    """Structured failure returned by the ingestion orchestrator."""

    status_code: int
    body: dict = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return False

    def to_dict(self) -> dict:
        return dict(self.body)


class StatementError(Exception):
    """Base exception for statement ingestion errors."""

    status_code: int = 400
    default_message: str = "Failed to process bank statement"

    def __init__(
        self,
        message: str | None = None,
        details: str | None = None,
        suggestions: list[str] | None = None,
        json_template: dict | None = None,
        supported_formats: list[str] | None = None,
        bank_type: Any = None,
    ):
        self.message = message or self.default_message
        self.details = details
        self.suggestions = suggestions
        self.json_template = json_template
        self.supported_formats = supported_formats
        self.bank_type = bank_type
        super().__init__(self.message)

    def to_response(self) -> ErrorResponse:
        """Render the error as a client-facing failure payload."""
        body: dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        if self.suggestions:
            body["suggestions"] = list(self.suggestions)
        if self.json_template is not None:
            body["jsonTemplate"] = self.json_template
        if self.supported_formats:
            body["supportedFormats"] = list(self.supported_formats)
        return ErrorResponse(status_code=self.status_code, body=body)


class AuthError(StatementError):
    """No authenticated user for the request."""

    status_code = 401
    default_message = "User not authenticated"


class MissingFileError(StatementError):
    """The upload carried no statement file."""

    default_message = "No file uploaded"


class FileTooLargeError(StatementError):
    """The upload exceeds the configured size ceiling."""

    status_code = 413
    default_message = "File too large"


class UnsupportedFormatError(StatementError):
    """File extension is not one of the accepted statement formats."""

    default_message = "Unsupported file format"

    def __init__(self, message: str | None = None, **kwargs):
        kwargs.setdefault("supported_formats", list(SUPPORTED_FORMATS))
        super().__init__(message, **kwargs)


class MalformedInputError(StatementError):
    """The file could not be parsed in its declared format."""

    default_message = "Malformed statement file"


class StatementValidationError(MalformedInputError):
    """The file parsed but does not have the shape of a statement."""

    default_message = "Invalid statement structure"


class InvalidFileError(StatementError):
    """The file content does not match its extension."""

    default_message = "Invalid PDF file"


class EmptyContentError(StatementError):
    """Nothing usable could be extracted from the file."""

    default_message = "No usable data found in file"


class ServiceUnavailableError(StatementError):
    """The PDF text extraction capability is not ready."""

    status_code = 400
    default_message = "PDF parsing is temporarily unavailable"


class DuplicateTransactionError(Exception):
    """Raised by a store when a write collides with an existing transaction."""
