import os
import re
from functools import lru_cache
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file early so env vars are available for YAML interpolation
_env_file = Path.cwd() / ".env"
load_dotenv(_env_file)

# Pattern to match $VAR_NAME environment variable references
ENV_VAR_PATTERN = re.compile(r"\$([A-Z_][A-Z0-9_]*)")

CONFIG_PATH_ENV = "STOREGATE_CONFIG"


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


def get_config_path() -> Path:
    """Return the app.yaml path, honouring STOREGATE_CONFIG when set."""
    override = os.environ.get(CONFIG_PATH_ENV)
    if override:
        return Path(override)
    return Path.cwd() / "app.yaml"


def load_app_config() -> dict:
    """Load and parse app.yaml with environment variable interpolation."""
    config_path = get_config_path()

    if not config_path.exists():
        raise FileNotFoundError(f"app.yaml not found at {config_path}")

    with open(config_path, "r") as f:
        config = yaml.safe_load(f)

    return interpolate_env_vars(config or {})


class StorageConfig(BaseModel):
    """Storage gateway configuration."""

    root: Path = Path("./storage")
    mount_prefix: str = "/storage/"
    cache_ttl: float = Field(default=10.0, gt=0)
    sweep_interval: float = Field(default=10.0, gt=0)
    sweep_probability: float = Field(default=0.1, ge=0, le=1)
    image_max_age: int = 86400
    user_photo_namespace: str = "user_dp"
    default_asset: str = "default_DP.png"
    default_asset_content_type: str = "image/png"
    default_max_age: int = 3600


class LogfireConfig(BaseModel):
    """Pydantic Logfire observability configuration."""

    enabled: bool = False
    service_name: str = "storegate"
    environment: str | None = None
    sample_rate: float = 1.0
    console: bool = False


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Application
    debug: bool = False
    log_level: str = "info"

    # Storage config (loaded from app.yaml)
    storage: StorageConfig = StorageConfig()

    # Observability config (loaded from app.yaml)
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

    if "debug" in app_config:
        updates["debug"] = bool(app_config["debug"])

    if "log_level" in app_config:
        updates["log_level"] = str(app_config["log_level"])

    if "storage" in app_config:
        updates["storage"] = StorageConfig(**app_config["storage"])

    if "logfire" in app_config:
        updates["logfire"] = LogfireConfig(**app_config["logfire"])

    if updates:
        return base_settings.model_copy(update=updates)

    return base_settings
