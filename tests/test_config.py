"""
Ingestion Settings Tests
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "python"))

from statement_processor.config import IngestionSettings


class TestIngestionSettings:
    """Tests for YAML and environment configuration."""

    def test_repository_config(self, config_dir):
        """Test the shipped ingestion.yaml loads."""
        settings = IngestionSettings.load(config_dir)

        assert settings.max_upload_bytes == 10 * 1024 * 1024
        assert settings.default_currency == "NGN"
        assert settings.min_pdf_text_length == 50

    def test_missing_file_uses_defaults(self, tmp_path):
        """Test defaults when no config file exists."""
        settings = IngestionSettings.load(tmp_path)

        assert settings == IngestionSettings(upload_dir=settings.upload_dir)
        assert settings.pdf_init_retries == 3

    def test_yaml_values(self, tmp_path):
        """Test values under the ingestion key are applied."""
        (tmp_path / "ingestion.yaml").write_text(
            "ingestion:\n"
            "  max_upload_bytes: 2048\n"
            "  upload_dir: /tmp/custom_uploads\n"
            "  support_contact: help@example.com\n"
        )

        settings = IngestionSettings.load(tmp_path)

        assert settings.max_upload_bytes == 2048
        assert settings.upload_dir == Path("/tmp/custom_uploads")
        assert settings.support_contact == "help@example.com"

    def test_unknown_keys_ignored(self, tmp_path, caplog):
        """Test unknown keys are logged and dropped."""
        (tmp_path / "ingestion.yaml").write_text("ingestion:\n  colour: blue\n")

        settings = IngestionSettings.load(tmp_path)

        assert not hasattr(settings, "colour")
        assert "colour" in caplog.text

    def test_environment_overrides(self, tmp_path, monkeypatch):
        """Test environment variables take precedence over YAML."""
        (tmp_path / "ingestion.yaml").write_text(
            "ingestion:\n  max_upload_bytes: 2048\n  default_currency: NGN\n"
        )
        monkeypatch.setenv("MAX_UPLOAD_BYTES", "4096")
        monkeypatch.setenv("DEFAULT_CURRENCY", "USD")
        monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "env_uploads"))

        settings = IngestionSettings.load(tmp_path)

        assert settings.max_upload_bytes == 4096
        assert settings.default_currency == "USD"
        assert settings.upload_dir == tmp_path / "env_uploads"
