import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    APP_NAME: str = "GuestHouse Manager"
    # Core settings
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development").lower()
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    CURRENCY: str = os.getenv("CURRENCY", "INR").upper()

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./guesthouse.db")
    # Transient store errors are retried with exponential backoff
    DB_RETRY_ATTEMPTS: int = int(os.getenv("DB_RETRY_ATTEMPTS", "3"))
    DB_RETRY_BASE_DELAY: float = float(os.getenv("DB_RETRY_BASE_DELAY", "0.5"))

    # Admin bootstrap: hashed into the settings table on first start
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "admin12345")

    # Checkout reconciliation
    AUTO_CHECKOUT_ON_STARTUP: bool = os.getenv("AUTO_CHECKOUT_ON_STARTUP", "true").lower() == "true"

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    RATE_LIMIT_DEFAULT: str = os.getenv("RATE_LIMIT_DEFAULT", "100/minute")
    RATE_LIMIT_ADMIN: str = os.getenv("RATE_LIMIT_ADMIN", "5/minute")

settings = Settings()
