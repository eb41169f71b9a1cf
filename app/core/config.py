from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # API Settings
    PROJECT_NAME: str = "Ledger API"
    API_V1_STR: str = "/api/v1"
    PROJECT_VERSION: str = "0.1.0"
    DESCRIPTION: str = "Customers, products, invoices, payments and customer ledgers"

    # MongoDB
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB: str = "ledger_system"
    # Multi-document transactions need a replica set
    MONGODB_TRANSACTIONS: bool = False

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # JWT
    JWT_SECRET: str = "change-this-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_MINUTES: int = 60 * 12

    # Initial admin, created on startup when the users collection is empty
    ADMIN_NAME: str = "Admin User"
    ADMIN_EMAIL: str = "admin@ledger.com"
    ADMIN_PASSWORD: Optional[str] = None

    # Numbering
    INVOICE_NUMBER_PREFIX: str = "110100"
    PAYMENT_VOUCHER_PREFIX: str = "PAY-"
    INVOICE_NUMBER_ATTEMPTS: int = 5

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env"
    )

settings = Settings()
