import os

# PostgreSQL settings
POSTGRES_USER = os.getenv("POSTGRES_USER", "postgres")
POSTGRES_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
POSTGRES_DB = os.getenv("POSTGRES_DB", "clubify")
POSTGRES_HOST = os.getenv("POSTGRES_HOST", "db")
POSTGRES_PORT = os.getenv("POSTGRES_PORT", "5432")

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+asyncpg://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_HOST}:{POSTGRES_PORT}/{POSTGRES_DB}",
)

# JWT settings
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# Environment
ENVIRONMENT = os.getenv("ENVIRONMENT", "production").lower()
DEBUG = ENVIRONMENT in ["development", "dev"]

# Retry settings for startup database checks
DB_RETRY_ATTEMPTS = int(os.getenv("DB_RETRY_ATTEMPTS", "3"))
DB_RETRY_DELAY = float(os.getenv("DB_RETRY_DELAY", "1.0"))
DB_RETRY_BACKOFF_FACTOR = float(os.getenv("DB_RETRY_BACKOFF_FACTOR", "2.0"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if not DEBUG else "DEBUG")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json" if not DEBUG else "text")

# Application
APP_NAME = os.getenv("APP_NAME", "Clubify.mk API")
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS", "http://localhost:3000,https://clubify.mk"
    ).split(",")
    if origin.strip()
]

# Club calendar and billing
CLUB_TIMEZONE = os.getenv("CLUB_TIMEZONE", "Europe/Skopje")
PAYMENT_DUE_DAY = int(os.getenv("PAYMENT_DUE_DAY", "5"))
MIN_BILLING_YEAR = int(os.getenv("MIN_BILLING_YEAR", "2024"))


def validate_config():
    """Validate critical settings at startup"""
    errors = []

    if not JWT_SECRET_KEY:
        errors.append("JWT_SECRET_KEY is required")

    if not DATABASE_URL:
        errors.append("DATABASE_URL is required")

    if DB_RETRY_ATTEMPTS < 1:
        errors.append("DB_RETRY_ATTEMPTS must be >= 1")

    if DB_RETRY_DELAY < 0:
        errors.append("DB_RETRY_DELAY must be >= 0")

    if not 1 <= PAYMENT_DUE_DAY <= 28:
        errors.append("PAYMENT_DUE_DAY must be between 1 and 28")

    if errors:
        raise ValueError(f"Configuration errors: {'; '.join(errors)}")
