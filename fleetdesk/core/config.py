import json
from typing import List, Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Values from .env take precedence over system-wide environment variables.
load_dotenv(override=True)

class Settings(BaseSettings):
    """Base settings for the FleetDesk API."""

    # API settings
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "FleetDesk API"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # CORS settings
    # Comma-separated list or a JSON array
    BACKEND_CORS_ORIGINS: str = "http://localhost:3000"

    @property
    def cors_origins(self) -> List[str]:
        v = self.BACKEND_CORS_ORIGINS.strip()
        if v.startswith("["):
            return [str(i) for i in json.loads(v)]
        return [i.strip() for i in v.split(",") if i.strip()]

    # Document store settings
    MONGODB_URL: str = "mongodb://localhost:27017"
    MONGODB_DB: str = "fleetdesk"
    MONGODB_TIMEOUT_MS: int = 5000

    # JWT Authentication settings
    JWT_SECRET_KEY: str = "your-default-secret-key"  # Change this in production
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days
    RESET_TOKEN_EXPIRE_MINUTES: int = 60

    # Password policy
    PASSWORD_MIN_LENGTH: int = 6
    BCRYPT_ROUNDS: int = 12
    ALLOW_ADMIN_SIGNUP: bool = False

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 50

    # Outbound mail
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_SECURE: bool = False
    SMTP_USER: Optional[str] = None
    SMTP_PASS: Optional[str] = None
    SMTP_FROM: Optional[str] = None
    ADMIN_EMAIL: Optional[str] = None

    # Google OAuth2 for the mail transport
    GOOGLE_CLIENT_ID: Optional[str] = None
    GOOGLE_CLIENT_SECRET: Optional[str] = None
    GOOGLE_REFRESH_TOKEN: Optional[str] = None
    GOOGLE_TOKEN_URL: str = "https://oauth2.googleapis.com/token"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    model_config = {
        "case_sensitive": True,
        "env_file": ".env",
        "extra": "ignore",
    }

# Create settings instance
settings = Settings()
