"""Spring-damper tether between the payload and an attached craft.

The tether is a one-sided Kelvin-Voigt element: slack up to the rest
length, then

    F = k * (L - L0) + c * v_rel

along the unit vector from the body toward the other end, where ``v_rel`` is
the other end's velocity relative to the body projected on that vector.

Each body evaluates the pull from its own perspective, in its own update:
the craft in its locomotion step (against the payload's previous state),
the payload in its own step (against the craft's post-move state). The two
pulls are therefore not an exactly equal-and-opposite impulse pair.
"""

import numpy as np
from beartype import beartype
from numba import njit
from numpy.typing import NDArray

from tandem.dynamics.collision import safe_distance

# Slack length of the tether
REST_LENGTH = 100.0

# Spring stiffness k
STIFFNESS = 120.0

# Damping coefficient c
DAMPING = 8.0

# Extra reach beyond the rest length within which a tether can be kept
ATTACH_MARGIN = 40.0
ATTACH_RANGE = REST_LENGTH + ATTACH_MARGIN


@njit(cache=True)
def _tether_pull(
    bx: float, by: float, bvx: float, bvy: float,
    ox: float, oy: float, ovx: float, ovy: float,
) -> tuple[float, float]:
    """Tether force on body B from the far end O."""
    dx = ox - bx
    dy = oy - by
    dist = safe_distance(dx, dy)
    if dist <= REST_LENGTH:
        return 0.0, 0.0

    stretch = dist - REST_LENGTH
    nx = dx / dist
    ny = dy / dist
    v_along = (ovx - bvx) * nx + (ovy - bvy) * ny
    force = STIFFNESS * stretch + DAMPING * v_along
    return nx * force, ny * force


@beartype
def tether_force(
    body_position: NDArray[np.float64],
    body_velocity: NDArray[np.float64],
    other_position: NDArray[np.float64],
    other_velocity: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Force vector the tether exerts on a body.

    Args:
        body_position, body_velocity: State of the body being pulled
        other_position, other_velocity: State of the far end

    Returns:
        Force [fx, fy]; zero while the tether is slack
    """
    fx, fy = _tether_pull(
        float(body_position[0]), float(body_position[1]),
        float(body_velocity[0]), float(body_velocity[1]),
        float(other_position[0]), float(other_position[1]),
        float(other_velocity[0]), float(other_velocity[1]),
    )
    return np.array([fx, fy])


@beartype
def apply_tether_pull(
    body_position: NDArray[np.float64],
    body_velocity: NDArray[np.float64],
    body_mass: float,
    other_position: NDArray[np.float64],
    other_velocity: NDArray[np.float64],
    dt: float,
) -> None:
    """Add ``F / m * dt`` to ``body_velocity`` in place."""
    force = tether_force(body_position, body_velocity, other_position, other_velocity)
    body_velocity += force / body_mass * dt


@beartype
def within_attach_range(
    craft_position: NDArray[np.float64],
    payload_position: NDArray[np.float64],
) -> bool:
    """True when a craft is close enough to hold a tether."""
    distance = float(np.hypot(*(craft_position - payload_position)))
    return distance < ATTACH_RANGE
