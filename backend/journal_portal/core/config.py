"""
Application configuration settings.
"""
from typing import List, Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # MongoDB Configuration
    mongodb_host: str = "localhost"
    mongodb_port: int = 27017
    mongodb_database: str = "journal_portal"
    mongodb_username: Optional[str] = None
    mongodb_password: Optional[str] = None
    # Full connection string; wins over the host/credential fields when set
    mongodb_uri: Optional[str] = None

    # JWT Configuration
    secret_key: str = "your-secret-key-here-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    access_token_cookie_name: str = "access_token"

    # AWS S3 Configuration (Role-based access)
    aws_region: str = "us-east-1"
    s3_bucket_name: str = "journal-portal-bucket"
    s3_public_base_url: Optional[str] = None
    max_upload_size_mb: int = 50

    # Application Configuration
    environment: str = "development"
    debug: bool = True
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Logging
    log_dir: str = "logs"
    log_level: str = "INFO"

    @property
    def mongodb_url(self) -> str:
        """Construct MongoDB connection string."""
        if self.mongodb_uri:
            return self.mongodb_uri
        if self.mongodb_username and self.mongodb_password:
            # MongoDB Atlas connection string
            return f"mongodb+srv://{self.mongodb_username}:{self.mongodb_password}@{self.mongodb_host}/{self.mongodb_database}?retryWrites=true&w=majority"
        else:
            # Local MongoDB connection string
            return f"mongodb://{self.mongodb_host}:{self.mongodb_port}"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
