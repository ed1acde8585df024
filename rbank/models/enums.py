"""Reusable enums for rbank handlers."""

from enum import Enum


class StringEnum(str, Enum):
    """Base enum class with string behavior for JSON serialization."""


class Period(StringEnum):
    """Sampling granularity for historical balance queries."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class ErrorKind(StringEnum):
    """Failure categories carried by `Err` results."""

    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    NOT_FOUND = "NOT_FOUND"
