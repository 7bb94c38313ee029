from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    pdf_engine: str = "pymupdf"

    # Guardrails and classification
    max_size_bytes: int = 50 * 1024 * 1024
    classification_pages: int = 5
    classification_timeout_seconds: float = 10.0
    min_text_threshold: int = 100
    mixed_text_ratio: float = 0.3

    # Native text extraction
    extraction_timeout_seconds: float = 30.0
    batch_size: int = 10
    max_pages_text_based: int = 200

    # OCR
    ocr_enabled: bool = False
    max_pages_scanned_sync: int = 30
    max_pages_scanned_async: int = 100
    ocr_page_timeout_seconds: float = 30.0
    ocr_total_timeout_seconds: float = 300.0
    ocr_scale: float = 2.0
    ocr_language: str = "eng"

    # Vectorization
    chunk_size: int = 500
    chunk_overlap: int = 50
    max_chunks_per_document: int = 500
    embedding_batch_size: int = 20
    embedding_rate_limit_ms: int = 100
    target_page_size: int = 3000

    # Process-wide admission control
    extraction_concurrency: int = 2
    ocr_concurrency: int = 1

    embedding_provider: str = "example"
    embedding_api_key: str = ""
    embedding_model_name: str = "text-embedding-3-small"
    embedding_base_url: str = ""
    embedding_timeout_seconds: int = 30
    embedding_dimensions: int = 384

    storage_backend: str = "memory"
    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "docingest"
    db_username: str = "docingest"
    db_password: str = "secret"
    db_chunks_table: str = "chunks"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
