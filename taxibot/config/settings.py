from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "taxibot"
    db_username: str = "taxibot"
    db_password: str = "secret"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    persist_documents: bool = False

    pdf_engine: str = "pdfplumber"
    ocr_language: str = "por"

    llm_provider: str = "openai"
    llm_api_key: str = ""
    llm_base_url: str = ""
    llm_model_name: str = "gpt-4o-mini"
    llm_temperature: float = 0.0
    llm_timeout_seconds: int = 30

    embedding_model_name: str = "text-embedding-3-small"

    search_api_key: str = ""
    search_base_url: str = "https://api.search.brave.com/res/v1/web/search"
    search_result_count: int = 10
    search_timeout_seconds: int = 15

    rate_tables_path: str = ""

    pipeline_timeout_seconds: int = 120
