from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./cineman.db"
    
    # Security
    ACCESS_SECRET: str = "dev-access-secret-change-me-0123456789abcdef"
    REFRESH_SECRET: str = "dev-refresh-secret-change-me-0123456789abcdef"
    ALGORITHM: str = "HS256"
    JWT_ISSUER: str = "cineman"
    JWT_AUDIENCE: str = "cineman-clients"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    MIN_PASSWORD_LENGTH: int = 8
    
    # Bookings
    BOOKING_MAX_RETRIES: int = 3
    
    # Email
    SENDGRID_API_KEY: Optional[str] = None
    EMAIL_SENDER: str = "support@cineman.local"
    EMAIL_SENDER_NAME: str = "CineMan Support"
    EMAIL_CONFIRMATION_URI: str = "http://localhost:5173/confirm-email?token="
    PASSWORD_RESET_URI: str = "http://localhost:5173/reset-password?token="
    
    # Application
    PROJECT_NAME: str = "CineMan"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]
    
    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")
    
    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
