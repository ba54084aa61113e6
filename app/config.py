from dataclasses import dataclass
from datetime import timedelta
from pydantic_settings import BaseSettings
from typing import Optional
from pathlib import Path

# Get the backend directory (parent of app directory)
BACKEND_DIR = Path(__file__).parent.parent
ENV_FILE = BACKEND_DIR / ".env"


@dataclass(frozen=True)
class ReportCacheConfig:
    """Cache key names and TTLs used by the reporting service."""
    overdue_loans_key: str = "overdue-loans"
    overdue_loans_ttl: timedelta = timedelta(hours=1)
    popular_books_key: str = "popular-books"
    popular_books_ttl: timedelta = timedelta(hours=24)
    popular_books_limit: int = 10


class Settings(BaseSettings):
    # Server settings
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    # Database settings - database_url wins over the individual parts when set
    database_url: Optional[str] = None
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "lms"
    db_user: str = "lms"
    db_password: str = "lms"
    db_ssl_mode: str = "prefer"  # Options: disable, allow, prefer, require, verify-ca, verify-full

    # Redis settings
    redis_url: str = "redis://localhost:6379/0"
    cache_fill_timeout: float = 4.0  # Seconds a background cache write may take
    cache_fill_workers: int = 2
    cache_fill_max_pending: int = 32  # Fills queued or running before new ones are dropped

    # Report cache settings
    overdue_loans_cache_key: str = "overdue-loans"
    overdue_loans_ttl_seconds: int = 3600
    popular_books_cache_key: str = "popular-books"
    popular_books_ttl_seconds: int = 86400
    popular_books_limit: int = 10

    # Lending policy
    loan_period_days: int = 14
    timezone: str = "UTC"

    class Config:
        env_file = str(ENV_FILE) if ENV_FILE.exists() else ".env"
        case_sensitive = False

    @property
    def loan_period(self) -> timedelta:
        return timedelta(days=self.loan_period_days)

    def report_cache(self) -> ReportCacheConfig:
        return ReportCacheConfig(
            overdue_loans_key=self.overdue_loans_cache_key,
            overdue_loans_ttl=timedelta(seconds=self.overdue_loans_ttl_seconds),
            popular_books_key=self.popular_books_cache_key,
            popular_books_ttl=timedelta(seconds=self.popular_books_ttl_seconds),
            popular_books_limit=self.popular_books_limit,
        )


settings = Settings()
