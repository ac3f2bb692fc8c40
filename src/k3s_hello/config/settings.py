"""
Configuration management using Pydantic Settings.

Loads configuration from environment variables with K3S_HELLO_ prefix.
The defaults reproduce the fixed ":8080" listen address.
"""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="K3S_HELLO_",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Configuration
    server_name: str = "k3s-hello"
    host: str = ""
    port: int = 8080

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Exit with a non-zero status when the listener fails
    exit_on_error: bool = False

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of {valid_levels}")
        return v_upper

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port is in valid range (0 asks the OS for a free one)."""
        if not 0 <= v <= 65535:
            raise ValueError("Port must be between 0 and 65535")
        return v

    @property
    def listen_address(self) -> str:
        """Address in host:port form, ":8080" when listening on all interfaces."""
        return f"{self.host}:{self.port}"


# Singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create settings singleton instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached singleton so the next call re-reads the environment."""
    global _settings
    _settings = None
