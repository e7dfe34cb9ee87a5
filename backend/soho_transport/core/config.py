from pydantic_settings import BaseSettings
from typing import List, Any
import json


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


def parse_number_plates(v: str) -> List[str]:
    """Parse seed plates from format: KAA 123A,KBB 456B"""
    if not v:
        return []
    return [plate.strip().upper() for plate in v.split(',') if plate.strip()]


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "SOHO School Transport"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    API_PREFIX: str = "/api"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 5000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./soho_transport.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes
    DB_ECHO: bool = False

    # Active plates inserted at startup if missing (comma-separated)
    SEED_NUMBER_PLATES: str = ""

    # School Admin created by `python -m soho_transport.db.seed_data`
    SCHOOL_ADMIN_EMAIL: str = ""
    SCHOOL_ADMIN_PASSWORD: str = ""
    SCHOOL_ADMIN_PHONE: str = "0700000000"

    # ==========================================
    # Security
    # ==========================================
    JWT_SECRET_KEY: str = "CHANGE_ME"
    JWT_REFRESH_SECRET_KEY: str = ""  # Empty means reuse JWT_SECRET_KEY
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    BCRYPT_ROUNDS: int = 10

    REFRESH_COOKIE_NAME: str = "refreshToken"
    REFRESH_COOKIE_PATH: str = "/api/auth"

    # ==========================================
    # CORS
    # ==========================================
    FRONTEND_ORIGIN: str = "http://localhost:5173"
    CORS_ORIGINS_STR: str = ""

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Frontend origin plus any extra origins from CORS_ORIGINS_STR"""
        origins = [self.FRONTEND_ORIGIN] if self.FRONTEND_ORIGIN else []
        for origin in parse_cors_origins(self.CORS_ORIGINS_STR):
            if origin not in origins:
                origins.append(origin)
        return origins

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    REGISTER_RATE_LIMIT: str = "3/minute"
    LOGIN_RATE_LIMIT: str = "5/minute"
    REFRESH_RATE_LIMIT: str = "10/minute"

    # Request body limit (bytes)
    MAX_REQUEST_SIZE: int = 10 * 1024

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    @property
    def IS_PRODUCTION(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def REFRESH_SECRET_KEY(self) -> str:
        return self.JWT_REFRESH_SECRET_KEY or self.JWT_SECRET_KEY

    @property
    def REFRESH_COOKIE_MAX_AGE(self) -> int:
        """Cookie lifetime in seconds, matching the refresh token expiry"""
        return self.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60

    @property
    def SEED_NUMBER_PLATE_LIST(self) -> List[str]:
        return parse_number_plates(self.SEED_NUMBER_PLATES)


# Create settings instance
settings = Settings()
