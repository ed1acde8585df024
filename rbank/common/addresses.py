"""Address validation helpers."""

import re
from typing import Any

from web3 import Web3

from ..models.exceptions import InvalidArgumentError


ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")
ZERO_ADDRESS = "0x" + "0" * 40


def is_valid_address(value: Any) -> bool:
    """Return whether *value* is a `0x`-prefixed 40 hex digit string."""
    return isinstance(value, str) and ADDRESS_PATTERN.match(value.strip()) is not None


def require_address(value: Any, label: str = "address") -> str:
    """Return the lower-cased address or raise `InvalidArgumentError`."""
    if not is_valid_address(value):
        raise InvalidArgumentError("Missing or malformed {0}: {1!r}".format(label, value))
    return value.strip().lower()


def to_checksum(value: str) -> str:
    """Return the EIP-55 checksum form of a well-formed address."""
    return Web3.to_checksum_address(require_address(value))


def is_zero_address(value: Any) -> bool:
    return is_valid_address(value) and value.strip().lower() == ZERO_ADDRESS
