from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # API Configuration
    app_name: str = "Test Manager API"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_prefix: str = "/api/v1"
    cors_origins: List[str] = ["*"]

    # Database Configuration
    database_url: str = "sqlite:///./data/testmanager.db"

    # Security
    # Bearer tokens are only verified when a secret key is configured
    secret_key: Optional[str] = None
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    # Release gate
    gate_min_coverage: float = 80.0

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
