"""Tour representation.

This module defines the Leg and Tour classes for representing a closed
cycle of road-level sub-paths with cost tracking and validation.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Iterator

if TYPE_CHECKING:
    from .problem import Location


@dataclass(frozen=True, slots=True)
class Leg:
    """Shortest road path between two consecutive stops.

    Attributes:
        origin: First location of the leg
        destination: Last location of the leg
        path: Every location along the roads, origin and destination included
        cost: Total traversal cost of the path
    """
    origin: Location
    destination: Location
    path: tuple[Location, ...]
    cost: float

    @classmethod
    def trivial(cls, location: Location) -> Leg:
        """Zero-cost leg that stays on one location."""
        return cls(origin=location, destination=location, path=(location,), cost=0.0)

    def __len__(self) -> int:
        """Number of locations on the path."""
        return len(self.path)

    def __repr__(self) -> str:
        return f"Leg({self.origin} -> {self.destination}, hops={len(self.path) - 1}, cost={self.cost:.3f})"


@dataclass
class Tour:
    """Closed tour start -> stop_1 -> ... -> stop_n -> start.

    A tour is a sequence of legs; the destination of each leg is the
    origin of the next and the last leg returns to the start.

    Attributes:
        start: Location the tour begins and ends at
        legs: Legs in visitation order
        total_cost: Sum of leg costs
    """
    start: Location
    legs: list[Leg] = field(default_factory=list)
    total_cost: float = 0.0

    def __post_init__(self):
        self.total_cost = self.compute_cost()

    @classmethod
    def trivial(cls, start: Location) -> Tour:
        """Tour with no stops: a single zero-cost start -> start leg."""
        return cls(start=start, legs=[Leg.trivial(start)])

    def __len__(self) -> int:
        """Number of legs."""
        return len(self.legs)

    def __iter__(self) -> Iterator[Leg]:
        """Iterate over legs."""
        return iter(self.legs)

    def __getitem__(self, index: int) -> Leg:
        """Get leg by index."""
        return self.legs[index]

    def compute_cost(self) -> float:
        """Compute total cost as the sum of leg costs."""
        return float(sum(leg.cost for leg in self.legs))

    def stop_order(self) -> list[Location]:
        """Stops in visitation order, start excluded."""
        return [leg.destination for leg in self.legs[:-1]]

    def meta_path(self) -> list[Location]:
        """Start, each stop in visitation order, start again."""
        if not self.legs:
            return []
        return [leg.origin for leg in self.legs] + [self.legs[-1].destination]

    def full_path(self) -> list[Location]:
        """Concatenated road-level path with each seam location appearing once."""
        path: list[Location] = []
        for leg in self.legs:
            if path and path[-1] == leg.path[0]:
                path.extend(leg.path[1:])
            else:
                path.extend(leg.path)
        return path

    def same_order(self, other: Tour) -> bool:
        """Check whether two tours visit stops in the same order."""
        return self.meta_path() == other.meta_path()

    def validate(
        self,
        stops: Iterable[Location],
        forbidden: Iterable[Location] = (),
    ) -> tuple[bool, list[str]]:
        """Check tour invariants.

        Returns:
            Tuple of (is_valid, list of violation messages)
        """
        violations = []
        stops = list(stops)
        forbidden = frozenset(forbidden)

        if not self.legs:
            return False, ["Tour has no legs"]

        if self.legs[0].origin != self.start:
            violations.append(f"Tour starts at {self.legs[0].origin}, expected {self.start}")
        if self.legs[-1].destination != self.start:
            violations.append(f"Tour ends at {self.legs[-1].destination}, expected {self.start}")

        for prev, nxt in zip(self.legs, self.legs[1:]):
            if prev.destination != nxt.origin:
                violations.append(f"Leg ending at {prev.destination} is followed by leg from {nxt.origin}")

        for leg in self.legs:
            if leg.path[0] != leg.origin or leg.path[-1] != leg.destination:
                violations.append(f"{leg!r} path endpoints do not match the leg")

        visited: dict[Location, int] = {}
        for loc in self.stop_order():
            visited[loc] = visited.get(loc, 0) + 1
        for stop in stops:
            count = visited.pop(stop, 0)
            if count == 0:
                violations.append(f"Stop {stop} not visited")
            elif count > 1:
                violations.append(f"Stop {stop} visited {count} times")
        for extra in visited:
            violations.append(f"Tour visits {extra}, which is not a stop")

        for loc in self.full_path():
            if loc in forbidden:
                violations.append(f"Tour passes through forbidden location {loc}")

        if abs(self.total_cost - self.compute_cost()) > 1e-9:
            violations.append("Cached total cost does not match leg costs")

        return len(violations) == 0, violations

    def summary(self) -> str:
        """Return summary string of the tour."""
        return f"Tour: {len(self.legs)} legs, cost={self.total_cost:.3f}"

    def to_dict(self) -> dict:
        """Convert tour to dictionary for serialization."""
        return {
            "start": [self.start.x, self.start.y],
            "total_cost": self.total_cost,
            "meta_path": [[loc.x, loc.y] for loc in self.meta_path()],
            "legs": [
                {
                    "origin": [leg.origin.x, leg.origin.y],
                    "destination": [leg.destination.x, leg.destination.y],
                    "path": [[loc.x, loc.y] for loc in leg.path],
                    "cost": leg.cost,
                }
                for leg in self.legs
            ],
        }

    def __repr__(self) -> str:
        stops = " -> ".join(map(str, self.meta_path()[:6]))
        if len(self.legs) > 5:
            stops += f" ... ({len(self.legs)} legs)"
        return f"Tour({stops}, cost={self.total_cost:.3f})"
