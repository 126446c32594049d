"""Issue agent configuration using pydantic-settings.

This module defines the AgentSettings class that reads configuration from
environment variables (and an optional .env file). The GitHub App identity,
private key path and webhook secret must be set for the service to start.
"""

from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_LOCAL_NETWORK_URL = "http://localhost:8000"


class AgentSettings(BaseSettings):
    """Issue agent configuration from environment variables.

    Required fields (must be set via environment variables):
    - app_id: GitHub App identifier
    - private_key_path: Path to the GitHub App private key (PEM)
    - webhook_secret: Shared secret used to sign webhook deliveries
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # GitHub App Configuration
    # -------------------------------------------------------------------------
    app_id: str

    private_key_path: str

    webhook_secret: str

    # GitHub Enterprise Server hostname, e.g. "ghe.example.com"
    enterprise_hostname: Optional[str] = None

    # Token used for GraphQL queries; falls back to the installation token
    github_token_classic: Optional[str] = None

    # -------------------------------------------------------------------------
    # Agent Network Configuration
    # -------------------------------------------------------------------------
    # Agent base URL for enterprise deployments, preferred when set
    github_enterprise_url: str = ""

    # Agent base URL for local development
    local_network_url: str = DEFAULT_LOCAL_NETWORK_URL

    agent_timeout_seconds: float = 120.0

    # -------------------------------------------------------------------------
    # Server Configuration
    # -------------------------------------------------------------------------
    host: str = "0.0.0.0"

    port: int = 3000

    log_level: str = "INFO"

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("app_id")
    @classmethod
    def validate_app_id(cls, v: str) -> str:
        """Validate that the app id is a non-empty numeric string."""
        v = v.strip()
        if not v:
            raise ValueError("app_id cannot be empty")
        if not v.isdigit():
            raise ValueError("app_id must be numeric")
        return v

    @field_validator("private_key_path")
    @classmethod
    def validate_private_key_path(cls, v: str) -> str:
        """Validate that the private key path is not empty."""
        if not v or not v.strip():
            raise ValueError("private_key_path cannot be empty")
        return v.strip()

    @field_validator("webhook_secret")
    @classmethod
    def validate_webhook_secret(cls, v: str) -> str:
        """Validate that webhook secret is not empty."""
        if not v or not v.strip():
            raise ValueError("webhook_secret cannot be empty")
        return v

    @field_validator("enterprise_hostname", "github_token_classic")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("agent_timeout_seconds")
    @classmethod
    def validate_agent_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("agent_timeout_seconds must be positive")
        return v

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate that port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError("port must be between 1 and 65535")
        return v

    @property
    def github_api_url(self) -> str:
        """REST API base URL, honoring the enterprise host override."""
        if self.enterprise_hostname:
            return f"https://{self.enterprise_hostname}/api/v3"
        return "https://api.github.com"

    @property
    def github_graphql_url(self) -> str:
        """GraphQL endpoint URL, honoring the enterprise host override."""
        if self.enterprise_hostname:
            return f"https://{self.enterprise_hostname}/api/graphql"
        return "https://api.github.com/graphql"

    def read_private_key(self) -> str:
        """Read the GitHub App private key from disk.

        Raises:
            OSError: If the key file cannot be read.
        """
        return Path(self.private_key_path).read_text(encoding="utf-8")


def get_settings() -> AgentSettings:
    """Create and return AgentSettings instance.

    Raises:
        pydantic.ValidationError: If required fields are missing or invalid.
    """
    return AgentSettings()
