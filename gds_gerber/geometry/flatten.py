# gds_gerber/geometry/flatten.py

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from ..errors import (
    CoordinateRangeError,
    ReferenceCycleError,
    StructureNotFoundError,
    UnsupportedElementError,
)
from ..library.models import (
    Boundary,
    Library,
    Structure,
    StructRef,
    Text,
)
from .cache import PatternCache
from .primitives import Pattern, Point, Region

logger = logging.getLogger(__name__)


def flatten(
    library: Library,
    structure_name: str,
    layer: int,
    *,
    cache: Optional[PatternCache] = None,
) -> Pattern:
    """
    Flatten one structure of the library into absolute regions on one layer.

    - Boundaries on `layer` become one Region each, vertices verbatim.
    - Structure references are flattened recursively for the same layer and
      shifted by the reference origin; nested offsets add up.
    - Text is skipped.
    - Any other element kind raises UnsupportedElementError.

    Raises StructureNotFoundError when `structure_name` (or any structure
    it references) is absent, and ReferenceCycleError when a structure
    ends up instantiating itself.
    """
    return _flatten(library, structure_name, layer, cache, chain=(), referenced_from=None)


def _flatten(
    library: Library,
    name: str,
    layer: int,
    cache: Optional[PatternCache],
    chain: Tuple[str, ...],
    referenced_from: Optional[str],
) -> Pattern:
    if name in chain:
        raise ReferenceCycleError(chain + (name,))

    if cache is not None:
        cached = cache.get(name, layer)
        if cached is not None:
            return cached

    struc = library.get_structure(name)
    if struc is None:
        raise StructureNotFoundError(name, referenced_from)

    pattern = _flatten_structure(library, struc, layer, cache, chain + (name,))
    if cache is not None:
        pattern = cache.set(name, layer, pattern)
    return pattern


def _flatten_structure(
    library: Library,
    struc: Structure,
    layer: int,
    cache: Optional[PatternCache],
    chain: Tuple[str, ...],
) -> Pattern:
    logger.debug("flattening %s on layer %d (depth %d)", struc.name, layer, len(chain))

    regions: List[Region] = []
    for elem in struc.elements:
        if isinstance(elem, Boundary):
            if elem.layer == layer:
                regions.append(Region.from_xy(elem.points))
            continue

        if isinstance(elem, StructRef):
            if not elem.is_translation_only:
                raise UnsupportedElementError(
                    struc.name,
                    elem,
                    f"reference to {elem.name!r} has rotation {elem.rotation}, "
                    f"magnification {elem.magnification}, reflection {elem.x_reflection}",
                )
            child = _flatten(library, elem.name, layer, cache, chain, referenced_from=struc.name)
            offset = Point.from_xy(elem.origin)
            regions.extend(_translate(child, offset, struc.name).regions)
            continue

        if isinstance(elem, Text):
            continue

        raise UnsupportedElementError(struc.name, elem)

    return Pattern(tuple(regions))


def _translate(pattern: Pattern, offset: Point, structure: str) -> Pattern:
    moved = pattern.translated(offset)
    for p in moved.iter_points():
        if not p.in_db_range():
            raise CoordinateRangeError(
                f"Offset ({offset.x}, {offset.y}) in structure {structure!r} moves "
                f"point to ({p.x}, {p.y}), outside the 32 bit coordinate range"
            )
    return moved
