"""Triage configuration using pydantic-settings.

This module defines the TriageSettings class that reads configuration from
environment variables and an optional ``.env`` file. The settings object is
built once at process start and handed to every component constructor.

Only ``OPENAI_API_KEY`` is required. Without ``GITHUB_TOKEN`` the search API
still works, at the lower anonymous rate limit.
"""

from typing import Optional

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.component_triage.errors import ConfigurationError


class TriageSettings(BaseSettings):
    """Triage configuration from environment variables.

    Required fields (must be set via environment variables or ``.env``):
    - openai_api_key: API key for the classification backend
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Classification backend
    # -------------------------------------------------------------------------
    openai_api_key: str

    openai_model: str = "gpt-4-turbo-preview"

    # OpenAI-compatible endpoint override (e.g. a vLLM server)
    openai_base_url: Optional[str] = None

    # -------------------------------------------------------------------------
    # Issue search backend
    # -------------------------------------------------------------------------
    github_token: Optional[str] = None

    github_base_url: str = "https://api.github.com"

    github_repo_owner: str = "shadcn-ui"

    github_repo_name: str = "ui"

    # Remaining search quota below which a warning is logged
    rate_limit_warning_threshold: int = 10

    # -------------------------------------------------------------------------
    # Batching
    # -------------------------------------------------------------------------
    batch_size: int = 5

    batch_delay_seconds: float = 1.0

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------
    output_dir: str = "./reports"

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("openai_api_key")
    @classmethod
    def validate_openai_api_key(cls, v: str) -> str:
        """Validate that the OpenAI API key is not empty."""
        if not v or not v.strip():
            raise ValueError("OPENAI_API_KEY environment variable is required")
        return v

    @field_validator("github_token")
    @classmethod
    def normalize_github_token(cls, v: Optional[str]) -> Optional[str]:
        """Treat a blank GitHub token as unset."""
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("github_base_url", "openai_base_url")
    @classmethod
    def validate_base_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate that endpoint URLs use http or https."""
        if v is None:
            return v
        if not v.startswith(("http://", "https://")):
            raise ValueError("base URL must start with http:// or https://")
        return v

    @field_validator("batch_size")
    @classmethod
    def validate_batch_size(cls, v: int) -> int:
        """Validate that the batch size is positive."""
        if v < 1:
            raise ValueError("batch_size must be at least 1")
        return v

    @field_validator("batch_delay_seconds")
    @classmethod
    def validate_batch_delay(cls, v: float) -> float:
        """Validate that the inter-batch delay is not negative."""
        if v < 0:
            raise ValueError("batch_delay_seconds cannot be negative")
        return v

    @property
    def repository(self) -> str:
        """Full ``owner/name`` of the repository issues are searched in."""
        return f"{self.github_repo_owner}/{self.github_repo_name}"


def load_settings(**overrides) -> TriageSettings:
    """Create and return a TriageSettings instance.

    Args:
        **overrides: Field values taking precedence over the environment.

    Returns:
        TriageSettings: Configured settings instance.

    Raises:
        ConfigurationError: If required fields are missing or invalid.
    """
    try:
        return TriageSettings(**overrides)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'settings'}: {error['msg']}"
            for error in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {problems}", cause=e)


def redact_secret(value: Optional[str], visible_chars: int = 4) -> str:
    """Redact a secret value, showing only the first few characters.

    Args:
        value: The secret value to redact.
        visible_chars: Number of characters to show at the start.

    Returns:
        Redacted string with asterisks replacing hidden characters.
    """
    if not value:
        return "<not set>"
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)
