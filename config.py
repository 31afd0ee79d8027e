"""Configuration management for the Nomad MCP Server.

Loads configuration from environment variables (and an optional .env file)
with sensible defaults. The Nomad ACL token is never logged or exposed in
responses.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Nomad MCP Server configuration settings.

    All settings can be overridden via environment variables.
    Prefix: None (uses exact variable names, e.g. NOMAD_ADDR).
    """

    # Server settings
    mcp_server_port: int = Field(default=8080, description="Port for the HTTP front end")
    mcp_server_host: str = Field(default="0.0.0.0", description="Host to bind to")
    mcp_log_level: str = Field(default="INFO", description="Logging level")

    # Nomad settings
    nomad_addr: str = Field(
        default="http://localhost:4646",
        description="Nomad HTTP API address (e.g., http://10.0.0.5:4646)"
    )
    nomad_token: Optional[str] = Field(
        default=None,
        description="Nomad ACL token sent as X-Nomad-Token (never logged)"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore unknown environment variables
    }

    def get_safe_dict(self) -> dict:
        """Return config as dict with secrets masked.

        Use this for logging or debugging - never exposes secrets.
        """
        data = self.model_dump()
        if data.get("nomad_token"):
            data["nomad_token"] = "***MASKED***"
        return data


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance.

    Creates the instance on first call, then returns cached version.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Force reload settings from the environment.

    Useful for testing or after environment changes.
    """
    global _settings
    _settings = None
    return get_settings()
