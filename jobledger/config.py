from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "postgresql+asyncpg://jobledger:jobledger_dev@db:5432/jobledger"
    DATABASE_ECHO: bool = False
    SQLITE_BUSY_TIMEOUT_SECONDS: float = 15.0
    CREATE_TABLES_ON_STARTUP: bool = False

    # Ledger policy
    DEPOSIT_CAP_DIVISOR: int = 4
    LEDGER_OPERATION_TIMEOUT_SECONDS: float = 10.0
    LEDGER_MAX_RETRIES: int = 5
    LEDGER_RETRY_BACKOFF_SECONDS: float = 0.05

    # Access
    ADMIN_PROFILE_IDS: list[int] = []

    # Reporting
    BEST_CLIENTS_DEFAULT_LIMIT: int = 2
    BEST_CLIENTS_MAX_LIMIT: int = 100

    # App
    ALLOWED_ORIGINS: str = "*"
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
