"""Application configuration: environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache), one instance per process
    - Django's config/settings.py is derived from this object

Design Decisions:
    - Defaults run out of the box on SQLite; PostgreSQL is selected by env
    - The event cache is per process by default; deployments with several
      workers set CACHE_BACKEND=database (after `manage.py createcachetable`)
      or another shared backend
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from elections.domain.validation import EventRules, IdentityRules

SQLITE_ENGINE = "django.db.backends.sqlite3"
POSTGRES_ENGINE = "django.db.backends.postgresql"
LOCMEM_CACHE = "django.core.cache.backends.locmem.LocMemCache"
DATABASE_CACHE = "django.core.cache.backends.db.DatabaseCache"


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    environment: str = "development"
    debug: bool = False
    secret_key: str = "django-insecure-change-me"
    allowed_hosts: list[str] = ["localhost", "127.0.0.1"]

    # Observability
    log_level: str = "INFO"

    # Database
    database_engine: str = SQLITE_ENGINE
    database_name: str = "elections.sqlite3"
    database_host: str = ""
    database_port: str = ""
    database_user: str = ""
    database_password: str = ""
    store_timeout_seconds: int = 5

    @field_validator("database_engine", mode="before")
    @classmethod
    def expand_engine_alias(cls, v: str) -> str:
        """Accept 'sqlite' / 'postgres' as shorthand for the Django backend path."""
        aliases = {"sqlite": SQLITE_ENGINE, "postgres": POSTGRES_ENGINE, "postgresql": POSTGRES_ENGINE}
        if isinstance(v, str):
            return aliases.get(v.lower(), v)
        return v

    # Cache
    cache_backend: str = LOCMEM_CACHE
    cache_location: str = "elections_cache"
    event_cache_ttl_seconds: int = 30

    @field_validator("cache_backend", mode="before")
    @classmethod
    def expand_cache_alias(cls, v: str) -> str:
        """Accept 'locmem' / 'database' as shorthand for the Django cache backend path."""
        aliases = {"locmem": LOCMEM_CACHE, "database": DATABASE_CACHE, "db": DATABASE_CACHE}
        if isinstance(v, str):
            return aliases.get(v.lower(), v)
        return v

    # Elections
    enforce_voting_window: bool = True
    start_grace_seconds: int = 60
    title_min_length: int = 3
    description_min_length: int = 10
    min_options: int = 2

    # Identity payloads
    min_password_len_register: int = 6
    min_password_len_self_service: int = 8

    def event_rules(self) -> EventRules:
        return EventRules(
            title_min_length=self.title_min_length,
            description_min_length=self.description_min_length,
            min_options=self.min_options,
            start_grace=timedelta(seconds=self.start_grace_seconds),
        )

    def identity_rules(self) -> IdentityRules:
        return IdentityRules(
            min_password_len_register=self.min_password_len_register,
            min_password_len_self_service=self.min_password_len_self_service,
        )

    def database_options(self) -> dict:
        """Driver options that bound how long a store operation may block."""
        if self.database_engine == SQLITE_ENGINE:
            return {"timeout": self.store_timeout_seconds}
        if self.database_engine == POSTGRES_ENGINE:
            return {
                "connect_timeout": self.store_timeout_seconds,
                "options": f"-c statement_timeout={self.store_timeout_seconds * 1000}",
            }
        return {}


@lru_cache
def get_settings() -> Settings:
    return Settings()
