"""Parsers for road-map and answer fixture files.

Supports:
- Road-map format: one directed segment per line
- Answer format: one location per line (expected meta path)
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional
import shlex

from .graph import GraphConfig, MapGraph
from .problem import Location


def parse_road_map(filepath: str | Path, config: Optional[GraphConfig] = None) -> MapGraph:
    """Parse a road-map file into a MapGraph.

    Format:
    - One directed segment per line: x1 y1 x2 y2 "Road Name" road_type
    - Two-way roads appear twice, once per direction
    - Blank lines and lines starting with '#' are ignored

    Args:
        filepath: Path to road-map file
        config: Graph configuration (edge costs, distance metric)

    Returns:
        Parsed MapGraph

    Example file:
        0 0 1 1 "Main Street" residential
        1 1 0 0 "Main Street" residential
    """
    filepath = Path(filepath)
    graph = MapGraph(config)

    with open(filepath, 'r') as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue

            parts = shlex.split(line)
            if len(parts) < 4:
                raise ValueError(f"{filepath}:{line_no}: expected at least 4 fields, got {len(parts)}")
            try:
                x1, y1, x2, y2 = (float(p) for p in parts[:4])
            except ValueError as e:
                raise ValueError(f"{filepath}:{line_no}: bad coordinate ({e})") from e

            road_name = parts[4] if len(parts) > 4 else ""
            road_type = parts[5] if len(parts) > 5 else "residential"

            start, end = Location(x1, y1), Location(x2, y2)
            graph.add_vertex(start)
            graph.add_vertex(end)
            graph.add_edge(start, end, road_name=road_name, road_type=road_type)

    if graph.num_vertices == 0:
        raise ValueError(f"No road segments found in {filepath}")

    return graph


def parse_locations(filepath: str | Path) -> list[Location]:
    """Parse a file with one 'x y' location per line.

    Blank lines and lines starting with '#' are ignored. Used for
    answer files (expected meta path) and stop lists.
    """
    filepath = Path(filepath)
    locations = []

    with open(filepath, 'r') as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            parts = line.replace(',', ' ').split()
            if len(parts) != 2:
                raise ValueError(f"{filepath}:{line_no}: expected 'x y', got {line!r}")
            locations.append(Location(float(parts[0]), float(parts[1])))

    return locations


def parse_answer(filepath: str | Path) -> Optional[list[Location]]:
    """Parse an answer file.

    Returns None when the file holds no locations, which marks a case
    where no feasible tour is expected.
    """
    locations = parse_locations(filepath)
    return locations or None


def write_locations(locations: list[Location], filepath: str | Path) -> None:
    """Write locations in the format read by parse_locations."""
    filepath = Path(filepath)
    with open(filepath, 'w') as f:
        for loc in locations:
            f.write(f"{loc.x!r} {loc.y!r}\n")
