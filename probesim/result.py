"""Result type for commands and loaders that must not raise.

Commands issued from outside the simulation (launch, mine, replicate, ...)
and snapshot loading report their outcome as a value instead of raising.
The caller gets either ``Ok(value)`` or ``Err(message)`` and decides what to
do with it; nothing propagates out of the command surface.

Usage:
------
    result = engine.commands.launch("probe-0", "sys-neighbor-1")
    if result.is_err():
        print(result.error)

    match engine.load_snapshot(data):
        case Ok(world):
            ...
        case Err(message):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")  # Success value type
E = TypeVar("E")  # Error type


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Return the success value."""
        return self.value

    @property
    def error(self) -> None:
        """Ok has no error."""
        return None

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True)
class Err(Generic[E]):
    """Failed outcome carrying an error description."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise, since a rejected command has no value.

        Check ``is_ok()`` first.
        """
        raise ValueError(f"Called unwrap on Err: {self.error}")

    @property
    def value(self) -> None:
        """Err has no value."""
        return None

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Union[Ok[T], Err[E]]
