"""Configuration for Reviewer Assigner."""

from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # App
    environment: str = Field(default="development", env="ENVIRONMENT")
    debug: bool = Field(default=True, env="DEBUG")
    host: str = Field(default="0.0.0.0", env="HOST")
    port: int = Field(default=8080, env="PORT")

    # GitHub token authentication (Actions token or PAT)
    github_token: Optional[str] = Field(default=None, env="GITHUB_TOKEN")

    # GitHub App Authentication
    github_app_id: Optional[str] = Field(default=None, env="GITHUB_APP_ID")
    github_private_key: Optional[str] = Field(default=None, env="GITHUB_PRIVATE_KEY")
    github_installation_id: Optional[str] = Field(default=None, env="GITHUB_INSTALLATION_ID")
    github_webhook_secret: Optional[str] = Field(default=None, env="GITHUB_WEBHOOK_SECRET")

    # Reviewer policy location
    reviewer_config_path: str = Field(
        default=".github/auto_request_review.yml", env="REVIEWER_CONFIG_PATH"
    )
    use_local_config: bool = Field(default=False, env="USE_LOCAL_CONFIG")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


settings = Settings()
