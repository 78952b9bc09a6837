"""
Configuration management for the credential service
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL
from typing import Optional


class Settings(BaseSettings):
    """Credential service configuration loaded from environment variables"""

    # Server Configuration
    HOST_AUTH: str = "0.0.0.0"
    PORT_AUTH: int = 8000
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None
    WORKER_THREADS: int = 40

    # Token signing
    JWT_SECRET: str = "change-this-secret-in-prod"
    JWT_ALGORITHM: str = "HS256"
    TOKEN_LIFETIME_SECONDS: int = 3600

    # Password hashing work factor (pbkdf2_sha256 rounds)
    HASH_ROUNDS: int = 29000

    # Database Configuration
    DATABASE_URL: Optional[str] = None
    DATABASE_DRIVER: str = "mysql+pymysql"
    DATABASE_HOST: Optional[str] = None
    DATABASE_USER: Optional[str] = None
    DATABASE_PASS: Optional[str] = None
    DATABASE_NAME: Optional[str] = None
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10

    # CORS Configuration
    URL_CORS: str = "*"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    def database_url(self) -> str:
        """
        Resolve the SQLAlchemy URL for the store.

        DATABASE_URL wins when set. Otherwise the URL is assembled from the
        DATABASE_* parts, and a local SQLite file is used when no host is
        configured.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if not self.DATABASE_HOST:
            return "sqlite:///./auth.db"
        return URL.create(
            self.DATABASE_DRIVER,
            username=self.DATABASE_USER,
            password=self.DATABASE_PASS,
            host=self.DATABASE_HOST,
            database=self.DATABASE_NAME,
        ).render_as_string(hide_password=False)


def get_settings() -> Settings:
    return Settings()
