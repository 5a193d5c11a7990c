"""Configuration management using pydantic-settings"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    database_path: str = Field(default="./data/leasedocs.db", description="Path to SQLite database")
    storage_path: str = Field(default="./data/uploads", description="Directory for uploaded files")
    log_level: str = Field(default="INFO", description="Logging level")

    # Uploads
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, description="Max size of an uploaded file")
    upload_initial_status: str = Field(
        default="active",
        description="Status given to directly uploaded documents: 'active' or 'draft'",
    )

    # Contract generation
    default_currency_symbol: str = Field(
        default="₦",
        description="Symbol used when a property's currency is unset or unknown",
    )
    owner_placeholder: str = Field(
        default="[Property Owner]",
        description="Owner name printed in the parties block of generated contracts",
    )

    # Auth: comma separated 'user_id:token' pairs accepted by the HTTP API
    api_keys: str = Field(default="", description="Accepted bearer tokens as user_id:token pairs")

    # HTTP client
    api_base_url: str = Field(default="http://localhost:8000", description="Base URL of the leasedocs API")
    request_timeout: float = Field(default=30.0, description="Client request timeout in seconds")
    api_token: Optional[str] = Field(default=None, description="Bearer token used by the CLI client")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    def token_map(self) -> dict[str, str]:
        """Parse api_keys into {token: user_id}."""
        tokens = {}
        for pair in self.api_keys.split(","):
            pair = pair.strip()
            if not pair or ":" not in pair:
                continue
            user_id, token = pair.split(":", 1)
            tokens[token.strip()] = user_id.strip()
        return tokens


def get_settings() -> Settings:
    """Get application settings"""
    return Settings()
