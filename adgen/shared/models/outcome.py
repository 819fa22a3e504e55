"""
Structured outcomes for best-effort operations.

A generation step that may fall back still tells the caller what happened:
Ok when the primary path worked, Degraded when a usable substitute is
returned together with the reason, Failed when nothing usable exists.
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Degraded(Generic[T]):
    value: T
    reason: str


@dataclass(frozen=True)
class Failed:
    reason: str
    error_type: str = "GenerationError"


Outcome = Union[Ok[T], Degraded[T], Failed]


def outcome_value(outcome: "Outcome[T]") -> Optional[T]:
    """Return the usable value of an outcome, or None when it failed."""
    if isinstance(outcome, (Ok, Degraded)):
        return outcome.value
    return None
