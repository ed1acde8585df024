"""Core utilities for configuration, logging and chain access."""

from .chain_client import ChainClient
from .config import RbankSettings, get_setting, load_settings
from .logging_config import get_logger, setup_logging

__all__ = [
    "ChainClient",
    "RbankSettings",
    "get_setting",
    "load_settings",
    "get_logger",
    "setup_logging",
]
