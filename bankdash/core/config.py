"""
Configuration settings for the ledger service.
Loads environment variables and provides application settings.
"""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    """

    # Database
    DATABASE_URL: str = "sqlite:///./bankdash.db"
    DATABASE_ECHO: bool = False

    # API
    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "Banking Dashboard Ledger"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "Accounts, transaction history, card payments and money transfers for the banking dashboard"
    CORS_ORIGINS: List[str] = ["*"]

    # Ledger
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100
    RECENT_TRANSACTIONS_LIMIT: int = 5

    # Payment collaborator
    PAYMENT_TIMEOUT_SECONDS: float = 10.0
    PAYMENT_SIMULATED_LATENCY_SECONDS: float = 0.0

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


# Create global settings instance
settings = Settings()
