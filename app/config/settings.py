from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "evidence"
    db_username: str = "evidence"
    db_password: str = "secret"
    db_pool_max_size: int = Field(default=10, gt=0)

    job_poll_interval_seconds: int = Field(default=5, gt=0)

    files_root: str = "/app/files"
    pdf_engine: str = "pdfplumber"

    analysis_max_file_size_bytes: int = Field(default=50 * 1024 * 1024, gt=0)
    analysis_chunk_size_chars: int = Field(default=15000, gt=0)
    analysis_batch_size: int = Field(default=2, gt=0)
    analysis_batch_delay_seconds: float = Field(default=3.0, ge=0)
    analysis_max_retries: int = Field(default=3, gt=0)
    analysis_retry_initial_delay_seconds: float = Field(default=5.0, ge=0)
    analysis_default_provider: str = "gemini"
    analysis_temperature: float = 0.2

    openai_api_key: str = ""
    openai_model_name: str = "gpt-4o"
    openai_timeout_seconds: int = 60

    gemini_api_key: str = ""
    gemini_model_name: str = "gemini-2.5-pro"
    gemini_timeout_seconds: int = 120
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    openai_compatible_base_url: str = ""
    openai_compatible_api_key: str = ""
    openai_compatible_model_name: str = ""
    openai_compatible_timeout_seconds: int = 60

    openrouter_api_key: str = ""
    openrouter_model_name: str = ""
    groq_api_key: str = ""
    groq_model_name: str = ""
    together_api_key: str = ""
    together_model_name: str = ""
    deepseek_api_key: str = ""
    deepseek_model_name: str = ""
    ollama_api_key: str = "ollama"
    ollama_model_name: str = ""
