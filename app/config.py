# app/config.py
"""
Runtime configuration, read from environment variables (a local .env file is
loaded first if present).
"""

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    database_url: str
    sql_echo: bool
    log_level: str

    # Optional collaborators
    cache_ttl_seconds: float
    retry_max_attempts: int
    retry_base_delay: float

    # Seeding
    seed_on_startup: bool
    seed_customer_count: int
    seed_min_invoices: int
    seed_max_invoices: int
    seed_min_phone_numbers: int
    seed_max_phone_numbers: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///db.sqlite"),
        sql_echo=_env_bool("SQL_ECHO", False),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        cache_ttl_seconds=float(os.getenv("CACHE_TTL_SECONDS", "0")),
        retry_max_attempts=int(os.getenv("RETRY_MAX_ATTEMPTS", "3")),
        retry_base_delay=float(os.getenv("RETRY_BASE_DELAY", "0.1")),
        seed_on_startup=_env_bool("SEED_ON_STARTUP", False),
        seed_customer_count=int(os.getenv("SEED_CUSTOMER_COUNT", "50")),
        seed_min_invoices=int(os.getenv("SEED_MIN_INVOICES", "1")),
        seed_max_invoices=int(os.getenv("SEED_MAX_INVOICES", "5")),
        seed_min_phone_numbers=int(os.getenv("SEED_MIN_PHONE_NUMBERS", "1")),
        seed_max_phone_numbers=int(os.getenv("SEED_MAX_PHONE_NUMBERS", "3")),
    )
