"""
Result entities - Tagged success/failure values for expected failure paths.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from cryptoscope.domain.errors import SourceError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying the source error that caused it."""

    error: SourceError

    @property
    def is_ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]


@dataclass(frozen=True)
class SourceResult(Generic[T]):
    """
    Data returned by the failover orchestrator together with its provenance.

    Attributes:
        data: Canonical data produced by the winning source
        source: Name of the source that answered
        attempts: Number of sources tried, including the winner
    """

    data: T
    source: str
    attempts: int = 1
