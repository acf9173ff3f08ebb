from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str
    SECRET_KEY: str = "dev-insecure-key-change-in-production"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480  # one cashier shift

    # CORS origins for the storefront UI
    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    LOG_LEVEL: str = "INFO"

    # Redis / Celery (receipt rendering)
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/1"
    CELERY_TASK_ALWAYS_EAGER: bool = False

    # File storage (receipts, company assets)
    FILE_STORAGE_PATH: str = "/tmp/kasir-files"
    PUBLIC_BASE_URL: str = ""

    # Calendar day for sale numbers and "today" figures
    STORE_TIMEZONE: str = "Asia/Jakarta"

    # Dashboard
    LOW_STOCK_THRESHOLD: int = 5


settings = Settings()  # type: ignore[call-arg]
