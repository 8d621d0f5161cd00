"""Data models for road-network tour problems."""

from .problem import (
    Location,
    TourInstance,
    as_location,
    as_forbidden_set,
    forbidden_from_off_limits,
)
from .errors import TourError, InvalidInput, NoFeasibleTour, TourCancelled
from .tour import Leg, Tour
from .graph import GraphConfig, RoadSegment, MapGraph, default_speed_limits
from .parsers import (
    parse_road_map,
    parse_locations,
    parse_answer,
    write_locations,
)

__all__ = [
    # Problem classes
    "Location",
    "TourInstance",
    "as_location",
    "as_forbidden_set",
    "forbidden_from_off_limits",
    # Errors
    "TourError",
    "InvalidInput",
    "NoFeasibleTour",
    "TourCancelled",
    # Tour classes
    "Leg",
    "Tour",
    # Graph
    "GraphConfig",
    "RoadSegment",
    "MapGraph",
    "default_speed_limits",
    # Parsers
    "parse_road_map",
    "parse_locations",
    "parse_answer",
    "write_locations",
]
