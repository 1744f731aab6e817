# gds_gerber/geometry/primitives.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Tuple

# GDSII coordinates are signed 32 bit integers
DB_COORD_MIN = -(2 ** 31)
DB_COORD_MAX = 2 ** 31 - 1


@dataclass(frozen=True)
class Point:
    x: int
    y: int

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def in_db_range(self) -> bool:
        return (
            DB_COORD_MIN <= self.x <= DB_COORD_MAX
            and DB_COORD_MIN <= self.y <= DB_COORD_MAX
        )

    @classmethod
    def from_xy(cls, xy: Tuple[int, int]) -> "Point":
        x, y = xy
        return cls(int(x), int(y))


@dataclass
class Bounds:
    """
    Axis aligned bounding box, in whatever unit the points carry.
    """
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    def include_bounds(self, other: "Bounds") -> None:
        self.min_x = min(self.min_x, other.min_x)
        self.min_y = min(self.min_y, other.min_y)
        self.max_x = max(self.max_x, other.max_x)
        self.max_y = max(self.max_y, other.max_y)

    def scaled(self, factor: float) -> "Bounds":
        return Bounds(
            self.min_x * factor,
            self.min_y * factor,
            self.max_x * factor,
            self.max_y * factor,
        )

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> "Bounds":
        pts = list(points)
        if not pts:
            raise ValueError("Cannot compute bounds from empty point list")
        xs = [p.x for p in pts]
        ys = [p.y for p in pts]
        return cls(min(xs), min(ys), max(xs), max(ys))


@dataclass(frozen=True)
class Region:
    """
    One closed polygon outline in absolute database units.

    The point sequence is taken as given: no closing vertex is added and
    duplicates are kept.
    """
    points: Tuple[Point, ...]

    def __post_init__(self) -> None:
        if not self.points:
            raise ValueError("Region needs at least one point")

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self.points)

    @property
    def first(self) -> Point:
        return self.points[0]

    def translated(self, offset: Point) -> "Region":
        return Region(tuple(p + offset for p in self.points))

    def bounds(self) -> Bounds:
        return Bounds.from_points(self.points)

    @classmethod
    def from_xy(cls, xys: Iterable[Tuple[int, int]]) -> "Region":
        return cls(tuple(Point.from_xy(xy) for xy in xys))


@dataclass(frozen=True)
class Pattern:
    """
    Flattened result of one (structure, layer) query: regions in discovery order.
    """
    regions: Tuple[Region, ...] = ()

    def __len__(self) -> int:
        return len(self.regions)

    def __iter__(self) -> Iterator[Region]:
        return iter(self.regions)

    def __add__(self, other: "Pattern") -> "Pattern":
        return Pattern(self.regions + other.regions)

    def translated(self, offset: Point) -> "Pattern":
        if offset.x == 0 and offset.y == 0:
            return self
        return Pattern(tuple(r.translated(offset) for r in self.regions))

    def point_count(self) -> int:
        return sum(len(r) for r in self.regions)

    def iter_points(self) -> Iterator[Point]:
        for r in self.regions:
            yield from r.points
