"""Configuration loading utilities for YAML-based SDK settings."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from .logging_config import get_logger


logger = get_logger(__name__)
_BASE_DIR = Path(__file__).resolve().parent.parent.parent
_CONFIG_PATH = _BASE_DIR / "config.yml"

DEFAULT_RPC_URL = "http://127.0.0.1:8545"


@dataclass(frozen=True)
class RbankSettings:
    """SDK settings loaded from the `rbank` section of a YAML file."""

    rpc_url: str = DEFAULT_RPC_URL
    request_timeout_sec: int = 10
    controller_address: Optional[str] = None
    default_account: Optional[str] = None
    artifacts_dir: Optional[str] = None
    event_poll_interval_sec: float = 2.0
    log_level: str = "INFO"


def _to_int(value: Any, default: int) -> int:
    """Convert value to int with a default fallback."""
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Invalid integer value '%s'. Using default=%s", value, default)
        return default


def _to_float(value: Any, default: float) -> float:
    """Convert value to float with a default fallback."""
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid float value '%s'. Using default=%s", value, default)
        return default


def _to_optional_str(value: Any) -> Optional[str]:
    """Return a stripped string or None for blank values."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _read_config(path: Optional[Union[str, Path]] = None) -> dict:
    """Read and parse YAML configuration."""
    config_path = Path(path) if path is not None else _CONFIG_PATH
    try:
        with config_path.open("r", encoding="utf-8") as config_file:
            config_data = yaml.safe_load(config_file) or {}
        logger.info("Configuration loaded from %s", config_path)
        if not isinstance(config_data, dict):
            logger.warning("Config file %s is not a mapping. Falling back to defaults.", config_path)
            return {}
        return config_data
    except FileNotFoundError:
        logger.warning("Config file not found at %s. Falling back to defaults.", config_path)
        return {}
    except Exception:
        logger.exception("Failed to load config file from %s", config_path)
        return {}


def get_setting(
    key: str,
    default: Optional[str] = None,
    path: Optional[Union[str, Path]] = None,
) -> Optional[str]:
    """Read a single setting using dot-notation keys, e.g. `rbank.rpc_url`."""
    try:
        current: Any = _read_config(path)
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        if current is None:
            return default
        return str(current)
    except Exception:
        logger.exception("Failed to read config key '%s'.", key)
        return default


def load_settings(path: Optional[Union[str, Path]] = None) -> RbankSettings:
    """Load SDK settings from `config.yml` (or the given path)."""
    config = _read_config(path)
    rbank_cfg = config.get("rbank", {}) or {}

    rpc_url = str(rbank_cfg.get("rpc_url") or DEFAULT_RPC_URL)
    request_timeout_sec = _to_int(rbank_cfg.get("request_timeout_sec", 10), 10)
    controller_address = _to_optional_str(rbank_cfg.get("controller_address"))
    default_account = _to_optional_str(rbank_cfg.get("default_account"))
    artifacts_dir = _to_optional_str(rbank_cfg.get("artifacts_dir"))
    event_poll_interval_sec = _to_float(rbank_cfg.get("event_poll_interval_sec", 2.0), 2.0)
    log_level = str(rbank_cfg.get("log_level", "INFO")).strip().upper() or "INFO"

    return RbankSettings(
        rpc_url=rpc_url,
        request_timeout_sec=request_timeout_sec,
        controller_address=controller_address,
        default_account=default_account,
        artifacts_dir=artifacts_dir,
        event_poll_interval_sec=event_poll_interval_sec,
        log_level=log_level,
    )
