"""Environment module: static level geometry.

The simulation never generates or mutates geometry; it consumes a
``LevelGeometry`` for the duration of a level.

Example:
    >>> from tandem.environment import get_level
    >>>
    >>> spec = get_level("the_descent")
    >>> pads = spec.geometry.landing_pads
"""

from tandem.environment.level import (
    LevelGeometry,
    LevelSpec,
    Rect,
    WallPolyline,
)
from tandem.environment.levels import get_level, list_levels

__all__ = [
    "LevelGeometry",
    "LevelSpec",
    "Rect",
    "WallPolyline",
    "get_level",
    "list_levels",
]
