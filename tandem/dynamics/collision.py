"""Collision detection and response.

Two primitive tests:
- Circle vs polyline: every segment of every wall is tested against a circle
  of radius ``entity.radius + wall_half_thickness``. On contact the entity
  is pushed out along the contact normal and the normal velocity component
  is reflected with restitution 1.8 (cancel plus rebound). Impacts faster
  than 50 units/s deal 25 x multiplier damage.
- Circle vs axis-aligned rectangle: closest-point-on-box test, used for
  landing pads and the extraction zone.

Only one wall contact is resolved per entity per tick. Which one depends on
the :class:`~tandem.config.CollisionPolicy`: the first overlapping segment in
iteration order (walls in level order, segments in chain order), or the
deepest overlapping segment.

Degenerate geometry is tolerated: zero-length segments are skipped and a
zero contact distance falls back to 1 instead of dividing by zero.
"""

import math
from typing import NamedTuple

import numpy as np
from beartype import beartype
from numba import njit
from numpy.typing import NDArray

from tandem.config import CollisionPolicy, SimConfig
from tandem.environment.level import LevelGeometry, Rect

# Velocity reflection factor along the contact normal
RESTITUTION = 1.8

# Impacts above this speed cause damage [units/s]
DAMAGE_SPEED_THRESHOLD = 50.0

# Damage per impact before the multiplier
BASE_DAMAGE = 25.0

# Substitute for a zero distance in normal computations
SAFE_DISTANCE = 1.0


# =============================================================================
# Numba Kernels
# =============================================================================


@njit(cache=True)
def safe_distance(dx: float, dy: float) -> float:
    """Length of (dx, dy), or ``SAFE_DISTANCE`` when it is zero."""
    dist = math.sqrt(dx * dx + dy * dy)
    if dist == 0.0:
        return SAFE_DISTANCE
    return dist


@njit(cache=True)
def _closest_point_on_segment(
    px: float, py: float,
    ax: float, ay: float,
    bx: float, by: float,
) -> tuple[float, float, float]:
    """Closest point on segment AB to P and its squared distance.

    Returns a negative squared distance for a zero-length segment.
    """
    lx = bx - ax
    ly = by - ay
    len_sq = lx * lx + ly * ly
    if len_sq == 0.0:
        return 0.0, 0.0, -1.0

    t = ((px - ax) * lx + (py - ay) * ly) / len_sq
    if t < 0.0:
        t = 0.0
    elif t > 1.0:
        t = 1.0

    cx = ax + t * lx
    cy = ay + t * ly
    dx = px - cx
    dy = py - cy
    return cx, cy, dx * dx + dy * dy


# =============================================================================
# Results
# =============================================================================


class WallContact(NamedTuple):
    """Overlap between a circle and one wall segment."""
    closest_x: float
    closest_y: float
    distance_sq: float
    wall_index: int
    segment_index: int


class WallImpact(NamedTuple):
    """Outcome of a resolved wall contact.

    Provided to the caller, which applies the damage to health or stability.
    """
    impact_speed: float          # Speed before resolution
    damage: float                # Damage to apply (0 below the threshold)
    position: tuple[float, float]  # Entity position after push-out
    contact: WallContact

    @property
    def is_damaging(self) -> bool:
        """Fast enough to hurt, whatever the damage multiplier."""
        return self.impact_speed > DAMAGE_SPEED_THRESHOLD


# =============================================================================
# Circle vs Polyline
# =============================================================================


@beartype
def find_wall_contact(
    x: float,
    y: float,
    effective_radius: float,
    level: LevelGeometry,
    policy: CollisionPolicy = CollisionPolicy.FIRST_HIT,
) -> WallContact | None:
    """Select the wall segment to resolve against, if any overlaps.

    Args:
        x, y: Circle center
        effective_radius: Circle radius plus wall half-thickness
        level: Level geometry
        policy: FIRST_HIT returns the first overlap in iteration order,
            NEAREST the overlap with the smallest distance

    Returns:
        The selected contact, or None when nothing overlaps
    """
    limit_sq = effective_radius * effective_radius
    best: WallContact | None = None

    for wall_index, wall in enumerate(level.walls):
        for segment_index, (ax, ay, bx, by) in enumerate(wall.segments()):
            cx, cy, dist_sq = _closest_point_on_segment(x, y, ax, ay, bx, by)
            if dist_sq < 0.0 or dist_sq >= limit_sq:
                continue

            contact = WallContact(cx, cy, dist_sq, wall_index, segment_index)
            if policy is CollisionPolicy.FIRST_HIT:
                return contact
            if best is None or dist_sq < best.distance_sq:
                best = contact

    return best


@beartype
def impact_damage(impact_speed: float, multiplier: float = 1.0) -> float:
    """Damage dealt by an impact at ``impact_speed``."""
    if impact_speed > DAMAGE_SPEED_THRESHOLD:
        return BASE_DAMAGE * multiplier
    return 0.0


@beartype
def resolve_wall_collision(
    position: NDArray[np.float64],
    velocity: NDArray[np.float64],
    radius: float,
    level: LevelGeometry,
    config: SimConfig,
) -> WallImpact | None:
    """Detect and resolve one wall contact for a circular entity.

    ``position`` and ``velocity`` are modified in place: the entity is pushed
    out by the penetration depth along the contact normal and the normal
    velocity component is reflected.

    Returns:
        The impact, or None when the entity touches no wall
    """
    effective_radius = radius + config.wall_half_thickness
    px, py = float(position[0]), float(position[1])

    contact = find_wall_contact(px, py, effective_radius, level, config.collision_policy)
    if contact is None:
        return None

    vx, vy = float(velocity[0]), float(velocity[1])
    impact_speed = math.hypot(vx, vy)

    dist = math.sqrt(contact.distance_sq) or SAFE_DISTANCE
    penetration = effective_radius - dist
    nx = (px - contact.closest_x) / dist
    ny = (py - contact.closest_y) / dist

    position[0] = px + nx * penetration
    position[1] = py + ny * penetration

    dot = vx * nx + vy * ny
    velocity[0] = vx - RESTITUTION * dot * nx
    velocity[1] = vy - RESTITUTION * dot * ny

    return WallImpact(
        impact_speed=impact_speed,
        damage=impact_damage(impact_speed, config.damage_multiplier),
        position=(float(position[0]), float(position[1])),
        contact=contact,
    )


# =============================================================================
# Circle vs Rectangle
# =============================================================================


@beartype
def circle_overlaps_rect(x: float, y: float, radius: float, rect: Rect) -> bool:
    """Closest-point-on-box overlap test."""
    closest_x = max(rect.x, min(x, rect.right))
    closest_y = max(rect.y, min(y, rect.bottom))
    dx = x - closest_x
    dy = y - closest_y
    return bool(dx * dx + dy * dy < radius * radius)
