"""Domain model exports."""

from .chain import AccountValues, BalancePoint, EventRecord, MarketBalancePoint, TxResult
from .enums import ErrorKind, Period, StringEnum
from .exceptions import ConfigurationError, InvalidArgumentError, NotFoundError, RbankError
from .results import Err, Ok, Result

__all__ = [
    "AccountValues",
    "BalancePoint",
    "EventRecord",
    "MarketBalancePoint",
    "TxResult",
    "ErrorKind",
    "Period",
    "StringEnum",
    "ConfigurationError",
    "InvalidArgumentError",
    "NotFoundError",
    "RbankError",
    "Err",
    "Ok",
    "Result",
]
