"""Contract handler exports."""

from .controller import Controller
from .handler import ContractHandler
from .market import MARKET_EVENTS, Market
from .rbank import Rbank
from .token import Token

__all__ = [
    "ContractHandler",
    "Controller",
    "MARKET_EVENTS",
    "Market",
    "Rbank",
    "Token",
]
