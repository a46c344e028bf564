"""Craft locomotion state machine.

States:
    FREE   - rotate and thrust under player control, fall under gravity,
             feel the tether when attached, collide with walls
    LANDED - resting on a pad: facing relaxes to upright, horizontal drift
             decays, fuel and health regenerate

Transitions:
    LANDED -> FREE:   thrust held; upward velocity kick, then a FREE update
                      in the same tick
    FREE -> LANDED:   moving downward while overlapping a landing pad
                      (see :func:`settle_on_pads`)

A craft with no health left is inert: it is skipped entirely.

All integration is semi-implicit Euler: velocity first, then position.
"""

import logging
import math

from beartype import beartype

from tandem.config import SimConfig
from tandem.dynamics.collision import circle_overlaps_rect, resolve_wall_collision
from tandem.dynamics.state import UPRIGHT_ANGLE, Craft, ControlInput, Payload, lerp_angle
from tandem.dynamics.tether import apply_tether_pull
from tandem.environment.level import LevelGeometry
from tandem.events import CollisionOccurred, CraftLanded, EventOutbox

logger = logging.getLogger(__name__)

# Downward acceleration [units/s^2]
GRAVITY = 80.0

# Acceleration along the facing while thrusting [units/s^2]
THRUST_ACCEL = 400.0

# Turn rate under left/right input [rad/s]
ROTATION_SPEED = 4.5

# Fuel burned per second of thrust, before the fuel cost multiplier
FUEL_CONSUMPTION = 15.0

# Fuel and health regained per second while landed
REGEN_RATE = 20.0

# Upward velocity given on lift-off [units/s]
LIFTOFF_IMPULSE = 80.0

# Fraction of the facing error removed per second while landed
UPRIGHT_RELAX_RATE = 6.0

# Horizontal velocity factor applied each landed tick
LANDED_DAMPING = 0.9


def _update_landed(craft: Craft, dt: float) -> None:
    craft.angle = lerp_angle(craft.angle, UPRIGHT_ANGLE, UPRIGHT_RELAX_RATE * dt)
    craft.velocity[0] *= LANDED_DAMPING
    craft.velocity[1] = 0.0
    craft.fuel = craft.fuel + REGEN_RATE * dt
    craft.health = craft.health + REGEN_RATE * dt
    craft.thrusting = False
    craft.clamp_resources()


def _apply_controls(craft: Craft, controls: ControlInput, dt: float, fuel_cost: float) -> None:
    if controls.rotate_left:
        craft.angle -= ROTATION_SPEED * dt
    if controls.rotate_right:
        craft.angle += ROTATION_SPEED * dt

    craft.thrusting = controls.thrust and craft.fuel > 0.0
    if craft.thrusting:
        craft.velocity[0] += math.cos(craft.angle) * THRUST_ACCEL * dt
        craft.velocity[1] += math.sin(craft.angle) * THRUST_ACCEL * dt
        craft.fuel = craft.fuel - FUEL_CONSUMPTION * fuel_cost * dt


@beartype
def update_craft(
    craft: Craft,
    controls: ControlInput,
    payload: Payload,
    level: LevelGeometry,
    config: SimConfig,
    dt: float,
    outbox: EventOutbox,
) -> None:
    """Advance one craft by ``dt``.

    Args:
        craft: Craft to update in place
        controls: Held controls for this tick
        payload: Payload, read for the tether pull when the craft is attached
        level: Wall geometry
        config: Damage and fuel multipliers, wall thickness, contact policy
        dt: Clamped time step
        outbox: Receives collision events
    """
    craft.controls = controls
    if craft.is_disabled:
        craft.thrusting = False
        return

    if craft.is_landed:
        if not controls.thrust:
            _update_landed(craft, dt)
            return
        craft.lift_off(LIFTOFF_IMPULSE)
        logger.debug("Craft %d lifted off", craft.craft_id)

    _apply_controls(craft, controls, dt, config.fuel_cost_multiplier)
    craft.velocity[1] += GRAVITY * dt

    if payload.is_attached(craft.craft_id):
        apply_tether_pull(
            craft.position, craft.velocity, craft.mass,
            payload.position, payload.velocity, dt,
        )

    craft.position += craft.velocity * dt

    impact = resolve_wall_collision(craft.position, craft.velocity, craft.radius, level, config)
    if impact is not None and impact.is_damaging:
        craft.health = craft.health - impact.damage
        outbox.emit(CollisionOccurred(craft.craft_id, impact.position, impact.impact_speed))

    craft.clamp_resources()


@beartype
def settle_on_pads(craft: Craft, level: LevelGeometry, outbox: EventOutbox) -> bool:
    """Land a descending FREE craft that overlaps a landing pad.

    The craft snaps onto the pad's top surface.

    Returns:
        True when the craft landed this call
    """
    if craft.is_disabled or craft.is_landed or craft.velocity[1] <= 0.0:
        return False

    for pad in level.landing_pads:
        if circle_overlaps_rect(craft.x, craft.y, craft.radius, pad):
            craft.land(pad.y)
            outbox.emit(CraftLanded(craft.craft_id))
            logger.debug("Craft %d landed on pad at (%.1f, %.1f)", craft.craft_id, pad.x, pad.y)
            return True
    return False
