"""
Ingestion Configuration

Settings for the upload pipeline, loaded from config/ingestion.yaml and
overridden by environment variables.
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path(__file__).parent.parent.parent / "config"

ENV_OVERRIDES = {
    "max_upload_bytes": ("MAX_UPLOAD_BYTES", int),
    "default_currency": ("DEFAULT_CURRENCY", str),
    "upload_dir": ("UPLOAD_DIR", Path),
    "support_contact": ("SUPPORT_CONTACT", str),
    "min_pdf_text_length": ("MIN_PDF_TEXT_LENGTH", int),
}


@dataclass
class IngestionSettings:
    """Upload pipeline settings."""

    max_upload_bytes: int = 10 * 1024 * 1024
    default_currency: str = "NGN"
    upload_dir: Path = field(
        default_factory=lambda: Path(tempfile.gettempdir()) / "statement_uploads"
    )
    support_contact: str = "support@algofinny.com"
    min_pdf_text_length: int = 50
    pdf_init_retries: int = 3
    pdf_init_delay: float = 2.0

    @classmethod
    def load(cls, config_dir: Path | str | None = None) -> "IngestionSettings":
        """Load settings.

        Args:
            config_dir: Directory containing ingestion.yaml (defaults to the
                repository config directory)

        Returns:
            IngestionSettings with YAML values applied, then environment overrides
        """
        config_path = Path(config_dir or DEFAULT_CONFIG_DIR) / "ingestion.yaml"
        values: dict = {}

        if config_path.exists():
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
            values.update(data.get("ingestion", data))

        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            logger.warning(f"Ignoring unknown ingestion settings: {', '.join(sorted(unknown))}")
        values = {k: v for k, v in values.items() if k in known}

        for name, (env_var, cast) in ENV_OVERRIDES.items():
            env_value = os.getenv(env_var)
            if env_value:
                values[name] = cast(env_value)

        if "upload_dir" in values:
            values["upload_dir"] = Path(values["upload_dir"])

        return cls(**values)
