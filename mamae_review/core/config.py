"""
Core configuration and settings for the Mamãe Review service
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Service information
    service_name: str = Field(default="mamae-review")
    service_version: str = Field(default="1.0.0")
    environment: str = Field(default="development")

    # Server configuration
    port: int = Field(default=8003)
    host: str = Field(default="0.0.0.0")  # nosec B104

    # Document store: "mongodb" or "memory"
    store_backend: str = Field(default="mongodb")

    # Database configuration
    mongodb_host: str = Field(default="localhost")
    mongodb_port: int = Field(default=27017)
    mongodb_username: Optional[str] = Field(default=None)
    mongodb_password: Optional[str] = Field(default=None)
    mongodb_auth_source: str = Field(default="admin")
    mongodb_database: str = Field(default="mamae_review")
    mongodb_unique_reviews: bool = Field(default=False)

    products_collection: str = Field(default="products")
    reviews_collection: str = Field(default="reviews")

    @property
    def mongodb_url(self) -> str:
        """Construct MongoDB connection URL"""
        if self.mongodb_username and self.mongodb_password:
            return (
                f"mongodb://{self.mongodb_username}:{self.mongodb_password}"
                f"@{self.mongodb_host}:{self.mongodb_port}/{self.mongodb_database}"
                f"?authSource={self.mongodb_auth_source}"
            )
        return f"mongodb://{self.mongodb_host}:{self.mongodb_port}/{self.mongodb_database}"

    # Logging configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")
    log_to_file: bool = Field(default=False)
    log_to_console: bool = Field(default=True)
    log_file_path: str = Field(default="logs/mamae-review.log")

    correlation_id_header: str = Field(default="X-Correlation-ID")

    # JWT Authentication configuration
    jwt_secret: str = Field(default="change-me-in-production-mamae-review-jwt")
    jwt_algorithm: str = Field(default="HS256")

    # Rate limit applied to review submission
    review_rate_limit: str = Field(default="5/minute")


# Global config instance
config = Config()
