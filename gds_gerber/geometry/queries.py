# gds_gerber/geometry/queries.py

from __future__ import annotations

from typing import List, Optional

from shapely.geometry import Polygon as ShapelyPolygon
from shapely.ops import unary_union

from .primitives import Bounds, Pattern, Region


def get_pattern_bounds(pattern: Pattern) -> Optional[Bounds]:
    """
    Bounds of all regions in database units, or None for an empty pattern.
    """
    it = iter(pattern.regions)
    first = next(it, None)
    if first is None:
        return None
    b = first.bounds()
    for region in it:
        b.include_bounds(region.bounds())
    return b


def region_to_polygon(region: Region) -> Optional[ShapelyPolygon]:
    """
    Shapely polygon for one region, repaired if self-intersecting.

    Regions with fewer than three points enclose nothing and yield None.
    """
    coords = [(p.x, p.y) for p in region.points]
    if len(coords) < 3:
        return None
    poly = ShapelyPolygon(coords)
    if not poly.is_valid:
        poly = poly.buffer(0)
    if poly.is_empty:
        return None
    return poly


def get_pattern_area(pattern: Pattern) -> float:
    """
    Filled area of the pattern in square database units.

    Overlapping regions plot as one dark area, so they are merged before
    measuring.
    """
    polys: List[ShapelyPolygon] = []
    for region in pattern.regions:
        poly = region_to_polygon(region)
        if poly is not None:
            polys.append(poly)
    if not polys:
        return 0.0
    return float(unary_union(polys).area)
