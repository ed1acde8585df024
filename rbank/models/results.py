"""Tagged result values returned by fallible handler factories."""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from .enums import ErrorKind


T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome wrapping the created entity."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying the error category and a readable message."""

    kind: ErrorKind
    message: str = ""

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise ValueError("Called unwrap on Err({0}): {1}".format(self.kind.value, self.message))


Result = Union[Ok[T], Err]
