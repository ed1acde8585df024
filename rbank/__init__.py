"""Python client SDK for the rbank lending contracts."""

from .core import ChainClient, RbankSettings, load_settings, setup_logging
from .models import Err, ErrorKind, InvalidArgumentError, NotFoundError, Ok, Period, RbankError
from .services import Controller, Market, Rbank, Token

__version__ = "0.1.0"

__all__ = [
    "ChainClient",
    "RbankSettings",
    "load_settings",
    "setup_logging",
    "Err",
    "ErrorKind",
    "InvalidArgumentError",
    "NotFoundError",
    "Ok",
    "Period",
    "RbankError",
    "Controller",
    "Market",
    "Rbank",
    "Token",
]
