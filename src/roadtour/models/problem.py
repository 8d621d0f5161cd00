"""Core value types for tour problems.

This module defines the coordinate type used as graph node key and
the instance record describing a single tour request.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Mapping
import numpy as np

if TYPE_CHECKING:
    from .graph import MapGraph

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True, slots=True, order=True)
class Location:
    """Immutable 2D coordinate.

    Equality and hashing compare the exact bits of both coordinates, so
    0.0 and -0.0 are different locations and a NaN coordinate equals
    itself. A Location can be used as a graph node, a dict key and a set
    member.

    Attributes:
        x: First coordinate (latitude for map data)
        y: Second coordinate (longitude for map data)
    """
    x: float
    y: float

    def _key(self) -> tuple[str, str]:
        return float(self.x).hex(), float(self.y).hex()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Location):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def distance_to(self, other: Location) -> float:
        """Calculate planar Euclidean distance to another location."""
        return float(np.hypot(self.x - other.x, self.y - other.y))

    def haversine_to(self, other: Location) -> float:
        """Great-circle distance in kilometers, treating (x, y) as (lat, lon)."""
        lat1, lon1, lat2, lon2 = np.radians([self.x, self.y, other.x, other.y])
        a = (
            np.sin((lat2 - lat1) / 2) ** 2
            + np.cos(lat1) * np.cos(lat2) * np.sin((lon2 - lon1) / 2) ** 2
        )
        return float(2 * EARTH_RADIUS_KM * np.arcsin(np.sqrt(a)))

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


def as_location(value: Location | tuple[float, float]) -> Location:
    """Coerce an (x, y) pair into a Location."""
    if isinstance(value, Location):
        return value
    x, y = value
    return Location(float(x), float(y))


def forbidden_from_off_limits(off_limits: Mapping[float, Mapping[float, object]]) -> frozenset[Location]:
    """Flatten a nested {x: {y: ...}} off-limits mapping into a set."""
    return frozenset(
        Location(float(x), float(y))
        for x, inner in off_limits.items()
        for y in inner
    )


def as_forbidden_set(
    forbidden: Iterable[Location | tuple[float, float]] | Mapping[float, Mapping[float, object]] | None,
) -> frozenset[Location]:
    """Normalize any accepted forbidden-location representation.

    Accepts None, an iterable of Locations or (x, y) pairs, or the nested
    mapping form keyed first by x and then by y.
    """
    if forbidden is None:
        return frozenset()
    if isinstance(forbidden, Mapping):
        return forbidden_from_off_limits(forbidden)
    return frozenset(as_location(loc) for loc in forbidden)


@dataclass(frozen=True)
class TourInstance:
    """A single tour request.

    Attributes:
        start: Location the tour leaves from and returns to
        stops: Locations to visit exactly once (input order is the tie-break order)
        forbidden: Locations no leg may pass through
        name: Optional label used in logs and results
    """
    start: Location
    stops: tuple[Location, ...] = ()
    forbidden: frozenset[Location] = field(default_factory=frozenset)
    name: str = "tour"

    @classmethod
    def create(
        cls,
        start: Location | tuple[float, float],
        stops: Iterable[Location | tuple[float, float]] = (),
        forbidden=None,
        name: str = "tour",
    ) -> TourInstance:
        """Build an instance from loosely typed inputs."""
        return cls(
            start=as_location(start) if start is not None else None,
            stops=tuple(as_location(s) if s is not None else None for s in stops),
            forbidden=as_forbidden_set(forbidden),
            name=name,
        )

    @property
    def n_stops(self) -> int:
        """Number of stops."""
        return len(self.stops)

    @property
    def all_nodes(self) -> list[Location]:
        """Start at index 0, then stops in input order."""
        return [self.start] + list(self.stops)

    def validate(self, graph: MapGraph | None = None) -> list[str]:
        """Validate instance consistency, return list of issues."""
        issues = []

        if self.start is None:
            issues.append("A start location is required")
            return issues

        if self.start in self.forbidden:
            issues.append(f"Start {self.start} is a forbidden location")

        seen = set()
        for stop in self.stops:
            if stop is None:
                issues.append("Stops may not contain None")
                continue
            if stop == self.start:
                issues.append(f"Stop {stop} is the start location")
            if stop in seen:
                issues.append(f"Stop {stop} appears more than once")
            seen.add(stop)
            if stop in self.forbidden:
                issues.append(f"Stop {stop} is a forbidden location")

        if graph is not None:
            for loc in [self.start] + [s for s in self.stops if s is not None]:
                if not graph.has_location(loc):
                    issues.append(f"Location {loc} is not in the graph")

        return issues

    def summary(self) -> str:
        """Return a summary string of the instance."""
        return (
            f"TourInstance '{self.name}': start={self.start}, "
            f"{self.n_stops} stops, {len(self.forbidden)} forbidden"
        )
