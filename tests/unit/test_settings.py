import pytest
from pydantic import ValidationError

from app.analysis.config import AnalysisConfig
from app.config.settings import Settings


class TestSettingsDefaults:
    def test_default_log_level(self) -> None:
        s = Settings()
        assert s.log_level == "INFO"

    def test_default_db_port(self) -> None:
        s = Settings()
        assert s.db_port == 5432

    def test_default_job_poll_interval(self) -> None:
        s = Settings()
        assert s.job_poll_interval_seconds == 5

    def test_default_pdf_engine(self) -> None:
        s = Settings()
        assert s.pdf_engine == "pdfplumber"

    def test_default_max_file_size_is_fifty_mebibytes(self) -> None:
        s = Settings()
        assert s.analysis_max_file_size_bytes == 50 * 1024 * 1024

    def test_default_chunking_and_pacing(self) -> None:
        s = Settings()
        assert s.analysis_chunk_size_chars == 15000
        assert s.analysis_batch_size == 2
        assert s.analysis_batch_delay_seconds == 3.0

    def test_default_retry_policy(self) -> None:
        s = Settings()
        assert s.analysis_max_retries == 3
        assert s.analysis_retry_initial_delay_seconds == 5.0

    def test_default_provider(self) -> None:
        s = Settings()
        assert s.analysis_default_provider == "gemini"


class TestSettingsFromEnv:
    def test_loads_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        s = Settings()
        assert s.log_level == "DEBUG"

    def test_loads_db_host(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_HOST", "db.example.com")
        s = Settings()
        assert s.db_host == "db.example.com"

    def test_loads_chunk_size(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANALYSIS_CHUNK_SIZE_CHARS", "8000")
        s = Settings()
        assert s.analysis_chunk_size_chars == 8000

    def test_loads_default_provider(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANALYSIS_DEFAULT_PROVIDER", "openai")
        s = Settings()
        assert s.analysis_default_provider == "openai"


class TestSettingsValidation:
    def test_invalid_db_port_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_PORT", "not_a_number")
        with pytest.raises(ValidationError):
            Settings()

    def test_zero_batch_size_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANALYSIS_BATCH_SIZE", "0")
        with pytest.raises(ValidationError):
            Settings()

    def test_negative_retry_delay_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANALYSIS_RETRY_INITIAL_DELAY_SECONDS", "-1")
        with pytest.raises(ValidationError):
            Settings()


class TestAnalysisConfigFromSettings:
    def test_copies_pipeline_tunables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANALYSIS_BATCH_SIZE", "4")
        monkeypatch.setenv("ANALYSIS_MAX_RETRIES", "5")
        config = AnalysisConfig.from_settings(Settings())
        assert config.batch_size == 4
        assert config.max_retries == 5
        assert config.chunk_size == 15000
        assert config.max_file_size_bytes == 50 * 1024 * 1024
