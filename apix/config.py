"""Runtime settings and logging setup."""

from __future__ import annotations

import logging
import os
import sys
import tomllib
from typing import Literal

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_PATH = "~/.config/apix/config.toml"
DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-20250514"


class Settings(BaseModel):
    network: Literal["testnet", "mainnet", "previewnet"] = "testnet"
    default_wallet_provider: str = "hashpack"
    log_level: str = "WARNING"
    run_type_check: bool = True
    type_check_timeout: int = Field(default=120, ge=1)
    claude_model: str = DEFAULT_CLAUDE_MODEL
    anthropic_api_key: str = Field(default="", repr=False)


def _read_config_file(path: str) -> dict:
    config_path = os.path.expanduser(path)
    if not os.path.exists(config_path):
        return {}
    try:
        with open(config_path, "rb") as f:
            config = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Ignoring unreadable config file {config_path}: {e}")
        return {}

    values = dict(config.get("defaults", {}))
    api_key = config.get("api_keys", {}).get("anthropic", "")
    if api_key:
        values["anthropic_api_key"] = api_key
    return values


def load_settings(config_path: str = CONFIG_PATH, **overrides) -> Settings:
    """Build settings from defaults, the config file, the environment and overrides."""
    values = _read_config_file(config_path)

    env_map = {
        "APIX_NETWORK": "network",
        "APIX_WALLET_PROVIDER": "default_wallet_provider",
        "APIX_LOG_LEVEL": "log_level",
        "APIX_TYPE_CHECK_TIMEOUT": "type_check_timeout",
        "APIX_CLAUDE_MODEL": "claude_model",
        "ANTHROPIC_API_KEY": "anthropic_api_key",
    }
    for env_name, field in env_map.items():
        value = os.environ.get(env_name)
        if value:
            values[field] = value

    type_check = os.environ.get("APIX_TYPE_CHECK")
    if type_check is not None:
        values["run_type_check"] = type_check.strip().lower() not in ("0", "false", "no", "off")

    values.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**values)


def setup_logging(log_level: str = "INFO", stream=None) -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(stream or sys.stdout)],
        force=True,
    )
    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
