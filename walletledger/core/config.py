from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Wallet Ledger"
    database_url: str
    database_echo: bool = False
    create_schema_on_startup: bool = False
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "wallet-ledger-auth"
    transfer_lock_timeout_seconds: float = 5.0
    log_level: str = "INFO"

    class Config:
        case_sensitive = False
        env_file = ".env"

    @field_validator("database_url")
    def validate_db_url(cls, v: str) -> str:
        if v.startswith("postgresql"):
            return v
        if v.startswith("sqlite+aiosqlite"):
            return v
        raise ValueError("Database URL must use PostgreSQL (prod) or sqlite+aiosqlite (testing).")

    @field_validator("transfer_lock_timeout_seconds")
    def validate_lock_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Transfer lock timeout must be positive.")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
