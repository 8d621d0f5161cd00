"""Exceptions raised by tour construction and refinement."""
from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from .problem import Location


class TourError(Exception):
    """Base class for all tour errors."""


class InvalidInput(TourError, ValueError):
    """Raised when a tour request is malformed.

    Attributes:
        issues: Every problem found while validating the request
    """

    def __init__(self, issues: Sequence[str]):
        self.issues = list(issues)
        super().__init__("; ".join(self.issues) or "invalid tour input")


class NoFeasibleTour(TourError):
    """Raised when no stop can be reached without crossing a forbidden location.

    Attributes:
        origin: Location the search was standing on when it got stuck
        unreachable: Stops (or the start, for the closing leg) with no path
    """

    def __init__(self, origin: Location, unreachable: Sequence[Location]):
        self.origin = origin
        self.unreachable = tuple(unreachable)
        targets = ", ".join(str(loc) for loc in self.unreachable)
        super().__init__(f"No feasible path from {origin} to any of: {targets}")


class TourCancelled(TourError):
    """Raised when the caller's cancellation event is set between phases."""
