"""Expand a tour into its road-level path and its meta path."""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models.problem import Location
    from ..models.tour import Tour


def materialize(tour: Tour) -> tuple[list[Location], list[Location]]:
    """Return (full_path, meta_path) for a tour.

    full_path concatenates every leg's road path in tour order; the
    location shared by two consecutive legs appears once. meta_path is
    the start, each stop in visitation order, and the start again.
    """
    return tour.full_path(), tour.meta_path()


def construct_meta_path(tour: Tour) -> list[Location]:
    """Stop-only visitation order, start at both ends."""
    return tour.meta_path()
