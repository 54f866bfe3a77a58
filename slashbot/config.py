"""
Application configuration management.
"""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # GitHub App
    github_app_id: Optional[int] = None
    github_private_key: Optional[str] = None
    github_private_key_path: Optional[str] = None
    github_api_url: str = "https://api.github.com"

    # Webhook
    webhook_secret: Optional[str] = None  # Signature check is skipped when unset

    # Bot behaviour manifest; defaults to the bundled bot_config.yaml
    bot_config_path: Optional[str] = None

    # Application
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False

    def load_private_key(self) -> str:
        """
        Return the GitHub App private key in PEM form.

        Raises:
            ConfigurationError: If neither the key nor a key path is configured
        """
        if self.github_private_key:
            # Keys passed through env files often carry escaped newlines
            return self.github_private_key.replace("\\n", "\n")
        if self.github_private_key_path:
            return Path(self.github_private_key_path).read_text()
        raise ConfigurationError(
            "GitHub App private key is not configured "
            "(set GITHUB_PRIVATE_KEY or GITHUB_PRIVATE_KEY_PATH)"
        )


# Global settings instance
settings = Settings()
