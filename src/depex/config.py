"""
Configuration for depex.

Settings are read from `.depex/config.yaml` when present and then overlaid
with environment variables, which always win:

    DEPEX_API_URL       Base URL of the Depex API
    DEPEX_API_TOKEN     Bearer token sent with every request
    DEPEX_TIMEOUT       Request timeout in seconds
    DEPEX_MAX_RETRIES   Attempts for retryable failures (timeouts, 429, 5xx)
    DEPEX_MAX_NODES     Soft limit on visible nodes

Example config.yaml:

    api:
      url: https://depex.example.org/api
      timeout: 20
    graph:
      max_nodes: 300
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import BaseModel, Field, SecretStr, ValidationError

from .core.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(".depex/config.yaml")

ENV_VARS = {
    "DEPEX_API_URL": "api_url",
    "DEPEX_API_TOKEN": "api_token",
    "DEPEX_TIMEOUT": "timeout",
    "DEPEX_MAX_RETRIES": "max_retries",
    "DEPEX_MAX_NODES": "max_nodes",
}


class Settings(BaseModel):
    api_url: str = "http://localhost:8000/api"
    api_token: SecretStr | None = None
    timeout: float = Field(default=30.0, gt=0)
    max_retries: int = Field(default=3, ge=1)
    backoff_base: float = Field(default=0.5, ge=0)
    max_nodes: int = Field(default=200, ge=1)


def _from_yaml(data: Dict[str, Any]) -> Dict[str, Any]:
    api = data.get("api") or {}
    graph = data.get("graph") or {}
    values = {
        "api_url": api.get("url"),
        "api_token": api.get("token"),
        "timeout": api.get("timeout"),
        "max_retries": api.get("max_retries"),
        "backoff_base": api.get("backoff_base"),
        "max_nodes": graph.get("max_nodes"),
    }
    return {k: v for k, v in values.items() if v is not None}


def load_settings(path: Path | None = None, environ: Dict[str, str] | None = None) -> Settings:
    """
    Load settings from YAML and the environment.

    Args:
        path: Config file to read. Defaults to .depex/config.yaml; a missing
            file simply means defaults.
        environ: Environment mapping, os.environ when omitted.

    Raises:
        ConfigError: If the file is not valid YAML or a value is invalid.
    """
    config_path = path or DEFAULT_CONFIG_PATH
    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    if config_path.exists():
        try:
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{config_path} must contain a mapping")
        values.update(_from_yaml(data))
        logger.debug(f"Loaded settings from {config_path}")

    for env_name, field_name in ENV_VARS.items():
        if environ.get(env_name):
            values[field_name] = environ[env_name]

    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
