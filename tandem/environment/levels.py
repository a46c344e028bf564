"""Built-in hand-authored levels.

Example:
    >>> from tandem.environment.levels import get_level, list_levels
    >>>
    >>> list_levels()
    ['test_level', 'the_descent']
    >>> spec = get_level("test_level")
    >>> spec.name
    'Test Level'
"""

from typing import Any

from beartype import beartype

from tandem.environment.level import LevelSpec


def _wall(*points: tuple[int, int]) -> dict[str, Any]:
    return {"type": "cave_wall", "points": [{"x": x, "y": y} for x, y in points]}


def _rect(kind: str, x: int, y: int, width: int, height: int) -> dict[str, Any]:
    return {"type": kind, "x": x, "y": y, "width": width, "height": height}


# =============================================================================
# Level Data
# =============================================================================

LEVEL_DATA: dict[str, dict[str, Any]] = {
    "test_level": {
        "name": "Test Level",
        "playerStart": {"x": 500, "y": 1900},
        "bombStart": {"x": 500, "y": 1500},
        "objects": [
            _wall(
                (0, 2000), (0, 0), (1000, 0), (1000, 2000), (800, 2000),
                (800, 200), (200, 200), (200, 2000), (0, 2000),
            ),
            _wall((350, 1200), (650, 1200)),
            _rect("landing_pad", 450, 1950, 100, 10),
            _rect("landing_pad", 450, 1150, 100, 10),
            _rect("extraction_zone", 400, 50, 200, 100),
        ],
    },
    "the_descent": {
        "name": "The Descent",
        "playerStart": {"x": 250, "y": 300},
        "bombStart": {"x": 1250, "y": 2400},
        "objects": [
            _wall(
                (0, 2500), (0, 250), (500, 250), (600, 350), (1500, 350),
                (1600, 250), (2000, 250), (2000, 2500), (0, 2500),
            ),
            _wall(
                (200, 500), (400, 650), (600, 600), (800, 900), (700, 1200),
                (900, 1500), (1300, 1600), (1600, 1400), (1800, 1700),
                (1700, 2000), (1400, 2200), (1100, 2100), (800, 2300),
                (1000, 2500), (1500, 2500), (1700, 2300),
            ),
            _rect("landing_pad", 200, 450, 100, 10),
            _rect("landing_pad", 850, 1490, 100, 10),
            _rect("landing_pad", 1200, 2450, 100, 10),
            _rect("extraction_zone", 1700, 300, 200, 50),
        ],
    },
}


def list_levels() -> list[str]:
    """List available built-in level keys."""
    return list(LEVEL_DATA.keys())


@beartype
def get_level(name: str) -> LevelSpec:
    """Parse a built-in level by key."""
    if name not in LEVEL_DATA:
        available = ", ".join(list_levels())
        raise ValueError(f"Unknown level: {name}. Available: {available}")
    return LevelSpec.from_dict(LEVEL_DATA[name])
