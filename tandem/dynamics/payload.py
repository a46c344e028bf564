"""Payload state machine.

Phases:
    ON_PEDESTAL - at rest where the level placed it; not integrated, no
                  wall contact
    RELEASED    - entered on the first successful attachment and never left;
                  the payload falls under gravity, is pulled by every attached
                  tether, loses 1% of its velocity per tick, and collides with
                  walls (impacts cost stability instead of health)

Arming is derived: the payload is armed exactly while two craft are
attached. While armed, harmony is re-evaluated each tick from the facing
difference of the two craft and drives stability up (+3/s) or down (-5/s).

Attachment rules, evaluated per craft after all motion:
    attach  - tether intent set, within rest length + 40, not yet attached
    detach  - attached and (intent cleared or out of range); leaving range
              also clears the intent
An inert craft (no health) is dropped from the attached set.
"""

import logging
from collections.abc import Sequence

import numpy as np
from beartype import beartype

from tandem.config import SimConfig
from tandem.dynamics.collision import resolve_wall_collision
from tandem.dynamics.craft import GRAVITY
from tandem.dynamics.state import PAYLOAD_ID, Craft, Payload, wrap_angle
from tandem.dynamics.tether import tether_force, within_attach_range
from tandem.environment.level import LevelGeometry
from tandem.events import CollisionOccurred, EventOutbox, TetherAttached, TetherDetached

logger = logging.getLogger(__name__)

# Velocity factor applied each released tick
PAYLOAD_DAMPING = 0.99

# Largest facing difference of the two craft that counts as harmony [rad]
HARMONY_THRESHOLD = 0.4

# Stability change per second in and out of harmony
STABILITY_REGEN = 3.0
STABILITY_DRAIN = 5.0


# =============================================================================
# Harmony
# =============================================================================


def facing_difference(angle_a: float, angle_b: float) -> float:
    """Absolute wrapped difference between two facings, in [0, pi]."""
    return abs(wrap_angle(angle_a - angle_b))


def in_harmony(angle_a: float, angle_b: float) -> bool:
    return facing_difference(angle_a, angle_b) < HARMONY_THRESHOLD


@beartype
def update_harmony(payload: Payload, attached: Sequence[Craft], dt: float) -> None:
    """Recompute harmony and integrate stability while armed.

    Unarmed payloads hold their stability and are never in harmony.
    """
    if not payload.armed:
        payload.harmony = False
        return

    first, second = attached[0], attached[1]
    payload.harmony = in_harmony(first.angle, second.angle)
    rate = STABILITY_REGEN if payload.harmony else -STABILITY_DRAIN
    payload.stability = payload.stability + rate * dt
    payload.clamp_resources()


# =============================================================================
# Dynamics
# =============================================================================


@beartype
def update_payload(
    payload: Payload,
    attached: Sequence[Craft],
    level: LevelGeometry,
    config: SimConfig,
    dt: float,
    outbox: EventOutbox,
) -> None:
    """Advance the payload by ``dt``.

    Args:
        payload: Payload to update in place
        attached: Craft currently in the attached set, in attachment order,
            already moved this tick
        level: Wall geometry
        config: Damage multiplier, wall thickness, contact policy
        dt: Clamped time step
        outbox: Receives collision events
    """
    if payload.on_pedestal:
        return

    force = np.zeros(2)
    for craft in attached:
        force += tether_force(payload.position, payload.velocity, craft.position, craft.velocity)
    force[1] += GRAVITY * payload.mass

    payload.velocity += force / payload.mass * dt
    payload.velocity *= PAYLOAD_DAMPING
    payload.position += payload.velocity * dt

    impact = resolve_wall_collision(payload.position, payload.velocity, payload.radius, level, config)
    if impact is not None and impact.is_damaging:
        payload.stability = payload.stability - impact.damage
        outbox.emit(CollisionOccurred(PAYLOAD_ID, impact.position, impact.impact_speed))
    payload.clamp_resources()

    update_harmony(payload, attached, dt)


# =============================================================================
# Attachment
# =============================================================================


@beartype
def update_attachment(craft: Craft, payload: Payload, outbox: EventOutbox) -> None:
    """Apply the attach/detach rules for one craft."""
    attached = payload.is_attached(craft.craft_id)

    if craft.is_disabled:
        if attached:
            payload.detach(craft.craft_id)
            outbox.emit(TetherDetached(craft.craft_id))
            logger.debug("Craft %d disabled, tether dropped", craft.craft_id)
        return

    in_range = within_attach_range(craft.position, payload.position)

    if craft.tether_intent and in_range and not attached:
        if not payload.has_room:
            return
        payload.attach(craft.craft_id)
        outbox.emit(TetherAttached(craft.craft_id))
        logger.debug("Craft %d attached (%d tethers)", craft.craft_id, len(payload.attached))
    elif attached and (not craft.tether_intent or not in_range):
        payload.detach(craft.craft_id)
        outbox.emit(TetherDetached(craft.craft_id))
        if not in_range:
            craft.tether_intent = False
        logger.debug(
            "Craft %d detached (%s)", craft.craft_id,
            "out of range" if not in_range else "released",
        )
