"""Application configuration module.

This module contains settings for the link shortener application,
loaded from environment variables with appropriate defaults.
"""

from __future__ import annotations

import string
from typing import List, Union
from enum import Enum
from pathlib import Path
import logging

from pydantic import field_validator, computed_field, ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict

# Set up basic logger for config module
logger = logging.getLogger(__name__)

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent.parent.parent

DEFAULT_JWT_SECRET_KEY = "change_this_to_a_secure_random_string_in_production"


class EnvironmentType(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """Application settings loaded from environment variables with defaults.

    Settings are loaded from environment variables, with fallback to
    values in .env file if present, and finally to the default values
    specified here.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment setting
    ENVIRONMENT: EnvironmentType = EnvironmentType.DEVELOPMENT

    # App Information
    APP_NAME: str = "Link Shortener"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "Short links with owner accounts and deferred click counting"

    # API Configuration
    BASE_URL: str = "http://localhost:8000/link"  # short_url = BASE_URL + "/" + hash
    API_PREFIX: str = ""
    DEBUG: bool = False

    # CORS settings
    CORS_ORIGINS: Union[List[str], str] = ["*"]

    # Link hash generation
    LINK_HASH_LENGTH: int = 6
    LINK_HASH_ALPHABET: str = string.ascii_letters + string.digits + "_-"
    LINK_HASH_MAX_ATTEMPTS: int = 100

    # PostgreSQL settings
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "link_shortener"
    DATABASE_URL: str = ""  # Overrides the URI built from the components above

    # PostgreSQL pool settings
    POSTGRES_POOL_SIZE: int = 20
    POSTGRES_POOL_MAX_OVERFLOW: int = 10
    POSTGRES_POOL_TIMEOUT: int = 30
    POSTGRES_POOL_RECYCLE: int = 300
    DB_COMMAND_TIMEOUT: float = 5.0  # Seconds before a statement is abandoned
    DB_ECHO: bool = False
    DB_CREATE_TABLES: bool = False

    # Redis settings
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: str = ""
    REDIS_DB: int = 0
    REDIS_URL: str = ""  # Overrides the URI built from the components above
    REDIS_MAX_CONNECTIONS: int = 20
    REDIS_SOCKET_TIMEOUT: float = 2.0  # Seconds before a command is abandoned

    # Click accounting
    CLICK_KEY_PREFIX: str = "link-"
    CLICK_FLUSH_INTERVAL_SECONDS: int = 60

    # Scheduler settings
    SCHEDULER_ENABLED: bool = True
    SCHEDULER_JOBSTORE_URL: str = ""  # Empty keeps jobs in memory
    SCHEDULER_JOB_COALESCE: bool = True  # Combine multiple pending executions of a job into a single execution
    SCHEDULER_JOB_MAX_INSTANCES: int = 1  # Maximum instances of the same job to run concurrently
    SCHEDULER_MISFIRE_GRACE_TIME: int = 30  # Seconds to still run misfired job after scheduled time

    # Security
    JWT_SECRET_KEY: str = DEFAULT_JWT_SECRET_KEY
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    BCRYPT_SALT_ROUNDS: int = 10

    # Logging configuration
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_FILENAME: str = "app.log"
    LOG_ACCESS_FILENAME: str = "link_access.log"
    LOG_ROTATION: str = "10 MB"
    LOG_RETENTION: str = "7 days"
    LOG_FORMAT: str = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {message}"
    LOG_JSON: bool = True
    LOG_TO_FILE: bool = True
    REQUEST_LOGGING_ENABLED: bool = True

    # Validators
    @field_validator("JWT_SECRET_KEY")
    def validate_secret_key(cls, v: str, info: ValidationInfo) -> str:
        env_value = info.data.get('ENVIRONMENT', EnvironmentType.DEVELOPMENT)

        if v == DEFAULT_JWT_SECRET_KEY and env_value == EnvironmentType.PRODUCTION:
            logger.warning("Using default JWT_SECRET_KEY in production environment! This is a security risk.")
        return v

    @field_validator("CORS_ORIGINS")
    def validate_list_or_string(cls, v: Union[List[str], str]) -> List[str]:
        """Convert comma-separated string to list if needed."""
        if isinstance(v, str):
            if not v.strip():
                return []
            if v == "*":
                return ["*"]
            return [item.strip() for item in v.split(",")]
        return v

    @field_validator("LINK_HASH_LENGTH")
    def validate_hash_length(cls, v: int) -> int:
        # links.hash is varchar(6)
        if v != 6:
            raise ValueError("LINK_HASH_LENGTH must be 6")
        return v

    @field_validator("LINK_HASH_ALPHABET")
    def validate_alphabet(cls, v: str) -> str:
        if len(set(v)) < 2:
            raise ValueError("LINK_HASH_ALPHABET needs at least two distinct characters")
        return v

    # Computed fields
    @computed_field
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """Construct the SQLAlchemy database URI from settings or use override."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @computed_field
    def REDIS_URI(self) -> str:
        """Construct the Redis URI from settings or use override."""
        if self.REDIS_URL:
            return self.REDIS_URL
        password_part = f":{self.REDIS_PASSWORD}@" if self.REDIS_PASSWORD else ""
        return f"redis://{password_part}{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"


# Create a singleton instance of the settings
settings = Settings()
