from dataclasses import dataclass

from app.config.settings import Settings


@dataclass(frozen=True)
class AnalysisConfig:
    """Tunables of the analysis pipeline."""

    max_file_size_bytes: int = 50 * 1024 * 1024
    chunk_size: int = 15000
    batch_size: int = 2
    batch_delay_seconds: float = 3.0
    max_retries: int = 3
    retry_initial_delay_seconds: float = 5.0
    temperature: float = 0.2

    @classmethod
    def from_settings(cls, settings: Settings) -> "AnalysisConfig":
        return cls(
            max_file_size_bytes=settings.analysis_max_file_size_bytes,
            chunk_size=settings.analysis_chunk_size_chars,
            batch_size=settings.analysis_batch_size,
            batch_delay_seconds=settings.analysis_batch_delay_seconds,
            max_retries=settings.analysis_max_retries,
            retry_initial_delay_seconds=settings.analysis_retry_initial_delay_seconds,
            temperature=settings.analysis_temperature,
        )
