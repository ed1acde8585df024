"""Custom exceptions raised by the rbank handlers."""


class RbankError(Exception):
    """Base class for SDK failures."""


class InvalidArgumentError(RbankError, ValueError):
    """Raised when an address or creation parameter is malformed or missing."""


class NotFoundError(RbankError, LookupError):
    """Raised when a requested market or registry entry does not exist."""


class ConfigurationError(RbankError):
    """Raised when local configuration cannot satisfy an operation."""
