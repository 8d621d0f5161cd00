"""Road-network graph with forbidden-aware shortest paths.

Nodes are Locations and edges are directed road segments. Two-way
roads are stored as two edges. Shortest paths use Dijkstra over
edge costs, where the cost of a segment depends on its length and,
when weighting by travel time, on its road classification.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional
import logging

import networkx as nx
import numpy as np

from .problem import Location
from .tour import Leg

logger = logging.getLogger(__name__)


def default_speed_limits() -> dict[str, float]:
    """Typical speed limits per road classification."""
    return {
        "motorway": 65.0,
        "motorway_link": 45.0,
        "trunk": 55.0,
        "trunk_link": 40.0,
        "primary": 45.0,
        "primary_link": 35.0,
        "secondary": 35.0,
        "secondary_link": 30.0,
        "tertiary": 30.0,
        "tertiary_link": 25.0,
        "unclassified": 25.0,
        "residential": 25.0,
        "living_street": 15.0,
    }


@dataclass
class GraphConfig:
    """Configuration for edge cost computation.

    Attributes:
        metric: How segment length is measured when not given explicitly,
                'euclidean' (planar) or 'haversine' (kilometers on (lat, lon))
        weight_by: 'distance' makes cost equal length, 'time' divides length
                   by the speed limit of the road type
        speed_limits: Speed per road type, used when weight_by='time'
        default_speed: Speed for road types missing from speed_limits
    """
    metric: str = "euclidean"
    weight_by: str = "distance"
    speed_limits: dict[str, float] = field(default_factory=default_speed_limits)
    default_speed: float = 25.0

    def __post_init__(self):
        if self.metric not in ("euclidean", "haversine"):
            raise ValueError(f"Unknown metric '{self.metric}'")
        if self.weight_by not in ("distance", "time"):
            raise ValueError(f"Unknown weight_by '{self.weight_by}'")

    def speed_for(self, road_type: str) -> float:
        """Speed limit for a road type."""
        return self.speed_limits.get(road_type, self.default_speed)


@dataclass(frozen=True, slots=True)
class RoadSegment:
    """Directed road segment between two locations.

    Attributes:
        start: Segment origin
        end: Segment destination
        road_name: Street name
        road_type: Road classification (residential, primary, ...)
        length: Physical length of the segment
        cost: Traversal cost used for shortest paths
    """
    start: Location
    end: Location
    road_name: str
    road_type: str
    length: float
    cost: float


class MapGraph:
    """Directed road network over Locations."""

    def __init__(self, config: Optional[GraphConfig] = None):
        self.config = config or GraphConfig()
        self._graph = nx.DiGraph()

    @property
    def num_vertices(self) -> int:
        """Number of locations in the graph."""
        return self._graph.number_of_nodes()

    @property
    def num_edges(self) -> int:
        """Number of directed road segments."""
        return self._graph.number_of_edges()

    @property
    def locations(self) -> list[Location]:
        """All locations in insertion order."""
        return list(self._graph.nodes)

    def has_location(self, location: Location) -> bool:
        """Check if location is a vertex."""
        return location in self._graph

    def add_vertex(self, location: Location) -> bool:
        """Add a location. Returns False if it was already present."""
        if location is None:
            raise ValueError("Cannot add a None location")
        if location in self._graph:
            return False
        self._graph.add_node(location)
        return True

    def add_edge(
        self,
        start: Location,
        end: Location,
        road_name: str = "",
        road_type: str = "residential",
        length: Optional[float] = None,
    ) -> RoadSegment:
        """Add a directed segment between two existing vertices.

        Args:
            start: Segment origin (must already be a vertex)
            end: Segment destination (must already be a vertex)
            road_name: Street name
            road_type: Road classification
            length: Segment length; measured with config.metric if None

        Raises:
            ValueError: If either endpoint is missing or length is negative
        """
        for loc in (start, end):
            if loc not in self._graph:
                raise ValueError(f"Location {loc} is not a vertex")
        if length is None:
            length = self.measure(start, end)
        if length < 0:
            raise ValueError(f"Negative length {length} for segment {start} -> {end}")

        cost = self._segment_cost(length, road_type)
        self._graph.add_edge(
            start, end,
            road_name=road_name,
            road_type=road_type,
            length=float(length),
            cost=cost,
        )
        return RoadSegment(start, end, road_name, road_type, float(length), cost)

    def add_road(
        self,
        start: Location,
        end: Location,
        road_name: str = "",
        road_type: str = "residential",
        length: Optional[float] = None,
        two_way: bool = True,
    ) -> None:
        """Add vertices as needed and one or two segments between them."""
        self.add_vertex(start)
        self.add_vertex(end)
        self.add_edge(start, end, road_name, road_type, length)
        if two_way:
            self.add_edge(end, start, road_name, road_type, length)

    def measure(self, start: Location, end: Location) -> float:
        """Straight-line length between two locations under config.metric."""
        if self.config.metric == "haversine":
            return start.haversine_to(end)
        return start.distance_to(end)

    def _segment_cost(self, length: float, road_type: str) -> float:
        if self.config.weight_by == "time":
            return float(length) / self.config.speed_for(road_type)
        return float(length)

    def edge(self, start: Location, end: Location) -> Optional[RoadSegment]:
        """Get the segment start -> end, or None."""
        data = self._graph.get_edge_data(start, end)
        if data is None:
            return None
        return RoadSegment(start, end, data["road_name"], data["road_type"], data["length"], data["cost"])

    def neighbors(self, location: Location) -> list[Location]:
        """Locations reachable by a single segment."""
        return list(self._graph.successors(location))

    def segments(self) -> Iterator[RoadSegment]:
        """Iterate over all directed segments."""
        for u, v, data in self._graph.edges(data=True):
            yield RoadSegment(u, v, data["road_name"], data["road_type"], data["length"], data["cost"])

    def shortest_path(
        self,
        origin: Location,
        destination: Location,
        forbidden: Iterable[Location] = frozenset(),
    ) -> Optional[Leg]:
        """Find the cheapest road path that avoids forbidden locations.

        Args:
            origin: Path start
            destination: Path end
            forbidden: Locations the path may not touch, endpoints included

        Returns:
            Leg with the full path and its cost, or None if no such path exists
            (unknown endpoint, forbidden endpoint, or disconnected)
        """
        if not isinstance(forbidden, (set, frozenset)):
            forbidden = frozenset(forbidden)
        if origin not in self._graph or destination not in self._graph:
            return None
        if origin in forbidden or destination in forbidden:
            return None
        if origin == destination:
            return Leg.trivial(origin)

        def weight(u, v, data):
            # None hides the edge from Dijkstra
            if v in forbidden:
                return None
            return data["cost"]

        try:
            cost, path = nx.single_source_dijkstra(self._graph, origin, destination, weight=weight)
        except nx.NetworkXNoPath:
            logger.debug(f"No path {origin} -> {destination} avoiding {len(forbidden)} forbidden")
            return None

        return Leg(origin=origin, destination=destination, path=tuple(path), cost=float(cost))

    @classmethod
    def create_grid(
        cls,
        rows: int,
        cols: int,
        spacing: float = 1.0,
        drop_fraction: float = 0.0,
        seed: int | None = None,
        config: Optional[GraphConfig] = None,
    ) -> MapGraph:
        """Create a random grid road network for testing.

        Args:
            rows: Number of grid rows
            cols: Number of grid columns
            spacing: Distance between neighboring intersections
            drop_fraction: Fraction of roads to leave out (may disconnect the grid)
            seed: Random seed for reproducibility
            config: Graph configuration

        Returns:
            MapGraph with two-way roads of random classification
        """
        rng = np.random.default_rng(seed)
        graph = cls(config)
        road_types = sorted(graph.config.speed_limits)

        for r in range(rows):
            for c in range(cols):
                graph.add_vertex(Location(r * spacing, c * spacing))

        for r in range(rows):
            for c in range(cols):
                here = Location(r * spacing, c * spacing)
                for dr, dc in ((0, 1), (1, 0)):
                    if r + dr >= rows or c + dc >= cols:
                        continue
                    if rng.random() < drop_fraction:
                        continue
                    there = Location((r + dr) * spacing, (c + dc) * spacing)
                    road_type = road_types[int(rng.integers(len(road_types)))]
                    graph.add_road(here, there, road_name=f"road_{r}_{c}_{dr}{dc}", road_type=road_type)

        return graph

    def summary(self) -> str:
        """Return a summary string of the graph."""
        return (
            f"MapGraph: {self.num_vertices} vertices, {self.num_edges} segments, "
            f"metric={self.config.metric}, weight_by={self.config.weight_by}"
        )

    def __repr__(self) -> str:
        return f"MapGraph(vertices={self.num_vertices}, edges={self.num_edges})"
