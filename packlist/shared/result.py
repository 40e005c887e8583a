"""
Explicit lookup result types.

Every lookup against a reference table or the completion service returns
one of three outcomes so that callers handle the "no data" path explicitly:

- Ok(value): data was found
- Empty(): the source answered, but nothing matched
- Unavailable(reason): the source could not be reached or parsed
"""

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """A lookup that produced a value."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def value_or(self, default: T) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> "Ok[U]":
        return Ok(fn(self.value))


@dataclass(frozen=True)
class Empty:
    """A lookup that succeeded but matched nothing."""

    @property
    def is_ok(self) -> bool:
        return False

    def value_or(self, default):
        return default

    def map(self, fn) -> "Empty":
        return self


@dataclass(frozen=True)
class Unavailable:
    """A lookup whose source could not be used."""

    reason: str = "unavailable"

    @property
    def is_ok(self) -> bool:
        return False

    def value_or(self, default):
        return default

    def map(self, fn) -> "Unavailable":
        return self


LookupResult = Union[Ok[T], Empty, Unavailable]
