"""
Configuration settings for Blog Service
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "Blog Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # JSON file storage
    DATA_DIR: str = "./data"
    STORAGE_RETRY_ATTEMPTS: int = 3
    STORAGE_RETRY_DELAY: float = 0.05  # seconds, doubled per attempt

    # JWT Settings
    JWT_SECRET_KEY: str = "your-secret-key-change-this-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Password Settings
    PASSWORD_HASH_SCHEMES: List[str] = ["bcrypt"]

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100
    DEFAULT_COMMENT_PAGE_SIZE: int = 20

    # Posts
    DEFAULT_CATEGORY: str = "General"

    # CORS
    CORS_ORIGINS: List[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: List[str] = ["*"]
    CORS_ALLOW_HEADERS: List[str] = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
