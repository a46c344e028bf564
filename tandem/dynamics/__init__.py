"""Dynamics module for craft, payload and tether simulation.

This module provides the entity state, the per-entity state machines and
the collision and tether primitives they share.

Example:
    >>> from tandem.dynamics import Craft, ControlInput, Payload, update_craft
    >>> from tandem.config import SimConfig
    >>> from tandem.environment import get_level
    >>> from tandem.events import EventOutbox
    >>>
    >>> spec = get_level("test_level")
    >>> craft = Craft.create(0, 500.0, 1800.0)
    >>> payload = Payload.create(500.0, 1500.0)
    >>> outbox = EventOutbox()
    >>> update_craft(craft, ControlInput(thrust=True), payload,
    ...              spec.geometry, SimConfig(), 0.05, outbox)
"""

from tandem.dynamics.state import (
    MAX_ATTACHED,
    PAYLOAD_ID,
    RESOURCE_MAX,
    UPRIGHT_ANGLE,
    ControlInput,
    Craft,
    Locomotion,
    Payload,
    PayloadMode,
    PayloadPhase,
    World,
    clamp_resource,
    lerp_angle,
    toggle_tether_intent,
    wrap_angle,
)
from tandem.dynamics.collision import (
    WallContact,
    WallImpact,
    circle_overlaps_rect,
    find_wall_contact,
    impact_damage,
    resolve_wall_collision,
)
from tandem.dynamics.tether import (
    ATTACH_RANGE,
    REST_LENGTH,
    apply_tether_pull,
    tether_force,
    within_attach_range,
)
from tandem.dynamics.craft import (
    GRAVITY,
    settle_on_pads,
    update_craft,
)
from tandem.dynamics.payload import (
    HARMONY_THRESHOLD,
    in_harmony,
    update_attachment,
    update_harmony,
    update_payload,
)

__all__ = [
    # State
    "Craft",
    "Payload",
    "World",
    "ControlInput",
    "Locomotion",
    "PayloadPhase",
    "PayloadMode",
    "MAX_ATTACHED",
    "PAYLOAD_ID",
    "RESOURCE_MAX",
    "UPRIGHT_ANGLE",
    "toggle_tether_intent",
    # Angle and range utilities
    "wrap_angle",
    "lerp_angle",
    "clamp_resource",
    # Collision
    "WallContact",
    "WallImpact",
    "find_wall_contact",
    "resolve_wall_collision",
    "impact_damage",
    "circle_overlaps_rect",
    # Tether
    "REST_LENGTH",
    "ATTACH_RANGE",
    "tether_force",
    "apply_tether_pull",
    "within_attach_range",
    # Craft
    "GRAVITY",
    "update_craft",
    "settle_on_pads",
    # Payload
    "HARMONY_THRESHOLD",
    "in_harmony",
    "update_payload",
    "update_harmony",
    "update_attachment",
]
