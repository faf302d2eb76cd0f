from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_file = ".env",
        env_file_encoding = "utf-8",
        extra = "ignore"
    )

    # Database
    DATABASE_URL: str = "sqlite:///./labelcheck.db"

    # JWT - tokens are issued by the external auth layer, we only decode them
    SECRET_KEY: str = "dev-secret-please-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # OpenAI - vision/LLM model
    OPENAI_API_KEY: Optional[str] = ""
    OPENAI_VISION_MODEL: str = "gpt-4o"
    OPENAI_TIMEOUT_SECONDS: float = 120.0
    RULE_SYNTHESIS_TEMPERATURE: float = 0.2
    EXTRACTION_TEMPERATURE: float = 0.1
    EVALUATION_TEMPERATURE: float = 0.1

    # External rule-extraction service
    RULES_EXTRACTION_API_URL: str = "http://localhost:8000"
    RULES_EXTRACTION_CONNECT_TIMEOUT_SECONDS: float = 30.0
    RULES_EXTRACTION_READ_TIMEOUT_SECONDS: float = 600.0
    RULES_EXTRACTION_MAX_ATTEMPTS: int = 3
    RULES_EXTRACTION_BACKOFF_SECONDS: float = 1.0

    # Object store
    STORAGE_BACKEND: str = "local"
    LOCAL_STORAGE_PATH: str = "./uploads"
    S3_BUCKET_NAME: Optional[str] = None
    S3_REGION_NAME: str = "us-east-1"
    S3_ENDPOINT_URL: Optional[str] = None
    UPLOAD_URL_TTL_SECONDS: int = 600
    UPLOAD_SPOOL_MAX_BYTES: int = 8 * 1024 * 1024

    # Compliance checks
    STALE_CHECK_MINUTES: int = 60

    # API
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"

settings = Settings()
