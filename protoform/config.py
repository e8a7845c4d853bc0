import os
import re
from functools import lru_cache
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env early so env vars are available for YAML interpolation
_env_file = Path.cwd() / ".env"
load_dotenv(_env_file)

# Pattern to match $VAR_NAME environment variable references
ENV_VAR_PATTERN = re.compile(r"\$([A-Z_][A-Z0-9_]*)")


def interpolate_env_vars(value):
    """Recursively replace $VAR_NAME with os.environ values."""
    if isinstance(value, str):

        def replace(match):
            var = match.group(1)
            val = os.environ.get(var)
            if val is None:
                raise ValueError(f"Environment variable ${var} not set")
            return val

        return ENV_VAR_PATTERN.sub(replace, value)
    elif isinstance(value, dict):
        return {k: interpolate_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [interpolate_env_vars(item) for item in value]
    return value


def load_app_config() -> dict:
    """Load and parse app.yaml with environment variable interpolation."""
    config_path = Path.cwd() / "app.yaml"

    if not config_path.exists():
        raise FileNotFoundError(f"app.yaml not found at {config_path}")

    with open(config_path, "r") as f:
        config = yaml.safe_load(f) or {}

    return interpolate_env_vars(config)


class FormsConfig(BaseModel):
    """Form rendering configuration."""

    # "<Extension>.<Plugin>" -> namespace, overrides the derived tx_ namespace
    plugin_namespaces: dict[str, str] = {}
    hmac_algorithm: str = "sha256"


class LogfireConfig(BaseModel):
    """Pydantic Logfire observability configuration."""

    enabled: bool = False
    service_name: str = "protoform"
    environment: str | None = None
    sample_rate: float = 1.0
    console: bool = False


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    debug: bool = False
    # Key for every HMAC appended to hidden form fields
    secret_key: str

    forms: FormsConfig = FormsConfig()
    logfire: LogfireConfig = LogfireConfig()


@lru_cache
def get_settings() -> Settings:
    """Load settings from .env and app.yaml."""
    base_settings = Settings()

    try:
        app_config = load_app_config()
    except FileNotFoundError:
        return base_settings

    updates = {}

    if "forms" in app_config:
        updates["forms"] = FormsConfig(**app_config["forms"])

    if "logfire" in app_config:
        updates["logfire"] = LogfireConfig(**app_config["logfire"])

    if updates:
        return base_settings.model_copy(update=updates)

    return base_settings
