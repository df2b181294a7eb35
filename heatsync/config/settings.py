from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "heatsync"
    db_username: str = "heatsync"
    db_password: str = "secret"
    db_pool_max_size: int = 10

    llm_provider: str = "openai"
    openai_api_key: str = ""
    openai_base_url: str | None = None
    openai_model_name: str = "gpt-4o"
    openai_timeout_seconds: int = 120
    openai_max_output_tokens: int = 16000
    openai_image_detail: str = "low"

    batch_size: int = 5
    batch_stagger_seconds: float = 0.5
    retry_max_attempts: int = 3
    retry_base_delay_seconds: float = 2.0
    retry_backoff_multiplier: float = 2.0

    pdf_engine: str = "pymupdf"
    pdf_render_scale: float = 2.0
    download_timeout_seconds: int = 60

    provider_file_ttl_days: int = 29
    provider_file_refresh_buffer_minutes: int = 60
    short_code_length: int = 8
    short_code_max_attempts: int = 5
    reservation_ttl_seconds: int = 600
    reservation_poll_interval_seconds: float = 2.0
