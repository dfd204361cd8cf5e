"""Configuration loading from environment and YAML files."""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

# Providers bundled with the server, in registration order
DEFAULT_PROVIDERS = ["basic", "clock", "geocode", "weather", "image", "server", "review"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Hugging Face inference (image generation)
    hf_token: str = ""
    hf_inference_url: str = "https://router.huggingface.co/hf-inference/models"
    image_model: str = "black-forest-labs/FLUX.1-schnell"
    image_inference_steps: int = 5

    # Upstream APIs
    nominatim_url: str = "https://nominatim.openstreetmap.org/search"
    open_meteo_url: str = "https://api.open-meteo.com/v1/forecast"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    # Outbound HTTP policy
    default_timeout: int = 30
    image_timeout: int = 120
    http_retry_attempts: int = 3

    # Server info
    server_name: str = "capability-mcp-server"
    server_version: str = "1.0.0"

    # Host and port
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def image_generation_enabled(self) -> bool:
        """Check if a Hugging Face token is configured."""
        return bool(self.hf_token)

    @property
    def user_agent(self) -> str:
        return f"{self.server_name}/{self.server_version}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def load_provider_config(config_path: str | Path | None = None) -> dict[str, Any]:
    """
    Load provider configuration from YAML file.

    Args:
        config_path: Path to the config file. If None, uses default location.

    Returns:
        Dictionary with configuration data. Falls back to every bundled
        provider when no file is found.
    """
    if config_path is None:
        possible_paths = [
            Path("config/providers.yaml"),
            Path(__file__).parent.parent.parent / "config" / "providers.yaml",
        ]
        for path in possible_paths:
            if path.exists():
                config_path = path
                break
        else:
            return {"enabled_providers": list(DEFAULT_PROVIDERS)}

    config_path = Path(config_path)
    if not config_path.exists():
        return {"enabled_providers": list(DEFAULT_PROVIDERS)}

    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    return config


def get_enabled_providers(config: dict[str, Any] | None = None) -> list[str]:
    """Get list of enabled provider names."""
    if config is None:
        config = load_provider_config()
    return config.get("enabled_providers", list(DEFAULT_PROVIDERS))
