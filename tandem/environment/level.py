"""Level geometry consumed by the simulation.

A level is produced elsewhere (hand-authored or generated) and handed to the
core as plain data. Geometry is immutable for the lifetime of a level:

- Wall polylines: ordered, open chains of at least two points
- Landing pads: axis-aligned rectangles craft can rest on
- Extraction zone: the single rectangle the payload must be delivered to

Coordinates are screen-style: +x right, +y down. A rectangle's ``y`` is its
top edge, which is the landing surface of a pad.

Example:
    >>> from tandem.environment.level import LevelSpec
    >>>
    >>> spec = LevelSpec.from_dict({
    ...     "name": "Shaft",
    ...     "playerStart": {"x": 100, "y": 400},
    ...     "bombStart": {"x": 100, "y": 100},
    ...     "objects": [
    ...         {"type": "cave_wall", "points": [{"x": 0, "y": 500}, {"x": 300, "y": 500}]},
    ...         {"type": "extraction_zone", "x": 0, "y": 0, "width": 50, "height": 50},
    ...     ],
    ... })
    >>> len(spec.geometry.walls)
    1
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

# Object type tags used by the level data format
WALL_TYPE = "cave_wall"
PAD_TYPE = "landing_pad"
EXTRACTION_TYPE = "extraction_zone"


# =============================================================================
# Primitives
# =============================================================================


@beartype
@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle.

    Attributes:
        x: Left edge
        y: Top edge
        width: Extent along +x
        height: Extent along +y (downward)
    """
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(
                f"Rectangle extents must be non-negative, got {self.width}x{self.height}"
            )

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Rect":
        """Build from a ``{"x", "y", "width", "height"}`` mapping."""
        try:
            return cls(
                x=float(data["x"]),
                y=float(data["y"]),
                width=float(data["width"]),
                height=float(data["height"]),
            )
        except KeyError as e:
            raise ValueError(f"Rectangle is missing field {e.args[0]!r}") from e

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@beartype
@dataclass(frozen=True, eq=False)
class WallPolyline:
    """Open chain of wall segments.

    Attributes:
        points: (N, 2) array of vertices, N >= 2. Stored read-only.
    """
    points: NDArray[np.float64]

    def __post_init__(self) -> None:
        points = np.array(self.points, dtype=np.float64)
        if points.ndim != 2 or points.shape[1] != 2:
            raise ValueError(f"Wall points must be shape (N, 2), got {points.shape}")
        if points.shape[0] < 2:
            raise ValueError(f"A wall needs at least 2 points, got {points.shape[0]}")
        points.setflags(write=False)
        object.__setattr__(self, "points", points)

    @classmethod
    def from_points(cls, points: Sequence[Sequence[float]]) -> "WallPolyline":
        """Build from a sequence of ``(x, y)`` pairs."""
        return cls(points=np.asarray(points, dtype=np.float64))

    @property
    def segment_count(self) -> int:
        return int(self.points.shape[0] - 1)

    def segments(self) -> Iterator[tuple[float, float, float, float]]:
        """Yield ``(ax, ay, bx, by)`` for each segment in order."""
        pts = self.points
        for i in range(self.segment_count):
            yield (
                float(pts[i, 0]), float(pts[i, 1]),
                float(pts[i + 1, 0]), float(pts[i + 1, 1]),
            )


# =============================================================================
# Level
# =============================================================================


@beartype
@dataclass(frozen=True, eq=False)
class LevelGeometry:
    """Static collision geometry of one level."""
    walls: tuple[WallPolyline, ...]
    landing_pads: tuple[Rect, ...]
    extraction_zone: Rect

    @classmethod
    def from_objects(cls, objects: Sequence[dict[str, Any]]) -> "LevelGeometry":
        """Build from a list of typed level objects.

        Raises:
            ValueError: On unknown object types, malformed objects, or when
                the level does not contain exactly one extraction zone.
        """
        walls: list[WallPolyline] = []
        pads: list[Rect] = []
        zones: list[Rect] = []

        for obj in objects:
            kind = obj.get("type")
            if kind == WALL_TYPE:
                try:
                    points = [(float(p["x"]), float(p["y"])) for p in obj["points"]]
                except KeyError as e:
                    raise ValueError(f"Wall object is missing field {e.args[0]!r}") from e
                walls.append(WallPolyline.from_points(points))
            elif kind == PAD_TYPE:
                pads.append(Rect.from_dict(obj))
            elif kind == EXTRACTION_TYPE:
                zones.append(Rect.from_dict(obj))
            else:
                raise ValueError(f"Unknown level object type: {kind!r}")

        if len(zones) != 1:
            raise ValueError(f"A level needs exactly one extraction zone, got {len(zones)}")

        return cls(walls=tuple(walls), landing_pads=tuple(pads), extraction_zone=zones[0])

    def to_objects(self) -> list[dict[str, Any]]:
        """Inverse of :meth:`from_objects`."""
        objects: list[dict[str, Any]] = []
        for wall in self.walls:
            objects.append({
                "type": WALL_TYPE,
                "points": [{"x": float(x), "y": float(y)} for x, y in wall.points],
            })
        for pad in self.landing_pads:
            objects.append({"type": PAD_TYPE, **pad.to_dict()})
        objects.append({"type": EXTRACTION_TYPE, **self.extraction_zone.to_dict()})
        return objects


@beartype
@dataclass(frozen=True, eq=False)
class LevelSpec:
    """A playable level: geometry plus spawn points.

    Attributes:
        name: Display name
        geometry: Collision geometry
        craft_start: Spawn point of the first craft
        payload_start: Resting point of the payload on its pedestal
    """
    name: str
    geometry: LevelGeometry
    craft_start: tuple[float, float]
    payload_start: tuple[float, float]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LevelSpec":
        """Parse the level interchange format.

        The format carries ``name``, ``playerStart``, ``bombStart`` and an
        ``objects`` list of walls, landing pads and one extraction zone.
        """
        try:
            player = data["playerStart"]
            bomb = data["bombStart"]
            objects = data["objects"]
        except KeyError as e:
            raise ValueError(f"Level is missing field {e.args[0]!r}") from e

        return cls(
            name=str(data.get("name", "")),
            geometry=LevelGeometry.from_objects(objects),
            craft_start=(float(player["x"]), float(player["y"])),
            payload_start=(float(bomb["x"]), float(bomb["y"])),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "playerStart": {"x": self.craft_start[0], "y": self.craft_start[1]},
            "bombStart": {"x": self.payload_start[0], "y": self.payload_start[1]},
            "objects": self.geometry.to_objects(),
        }
