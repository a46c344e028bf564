"""Whole-world conversion to and from plain data.

A snapshot is built only from dicts, lists, floats, ints, strings, bools and
None, so a host can store it with any serializer it likes or send it over
the wire. The core itself never touches files.

Example:
    >>> from tandem.snapshot import world_to_json, world_from_json
    >>> from tandem.simulation import Simulator
    >>> from tandem.environment import get_level
    >>>
    >>> sim = Simulator.from_level(get_level("test_level"))
    >>> sim.step(dt=0.05)
    >>> saved = world_to_json(sim.world)
    >>> restored = world_from_json(saved)
    >>> restored.tick
    1
"""

import json
from enum import Enum
from typing import Any

import numpy as np
from beartype import beartype

from tandem.dynamics.state import (
    ControlInput,
    Craft,
    Locomotion,
    Payload,
    PayloadPhase,
    World,
)
from tandem.environment.level import LevelGeometry, LevelSpec
from tandem.events import Outcome

SNAPSHOT_VERSION = 1

# =============================================================================
# Serialization Helpers
# =============================================================================


def _serialize_value(value: Any) -> Any:
    """Serialize a value to JSON-compatible format."""
    if isinstance(value, Enum):
        return value.value
    elif isinstance(value, np.ndarray):
        return [float(v) for v in value]
    elif isinstance(value, np.generic):
        return value.item()
    elif isinstance(value, dict):
        return {k: _serialize_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [_serialize_value(v) for v in value]
    else:
        return value


def _require(data: dict[str, Any], key: str, what: str) -> Any:
    try:
        return data[key]
    except KeyError as e:
        raise ValueError(f"{what} snapshot is missing field {key!r}") from e


def _vector(data: dict[str, Any], key: str, what: str) -> np.ndarray:
    return np.array(_require(data, key, what), dtype=np.float64)


# =============================================================================
# Levels
# =============================================================================


@beartype
def level_to_dict(level: LevelSpec) -> dict[str, Any]:
    """Convert a level to the level interchange format."""
    return level.to_dict()


@beartype
def level_from_dict(data: dict[str, Any]) -> LevelSpec:
    """Parse a level from the level interchange format."""
    return LevelSpec.from_dict(data)


# =============================================================================
# Entities
# =============================================================================


def _craft_to_dict(craft: Craft) -> dict[str, Any]:
    return _serialize_value({
        "craft_id": craft.craft_id,
        "position": craft.position,
        "velocity": craft.velocity,
        "angle": craft.angle,
        "radius": craft.radius,
        "mass": craft.mass,
        "fuel": craft.fuel,
        "health": craft.health,
        "locomotion": craft.locomotion,
        "tether_intent": craft.tether_intent,
        "thrusting": craft.thrusting,
        "controls": {
            "thrust": craft.controls.thrust,
            "rotate_left": craft.controls.rotate_left,
            "rotate_right": craft.controls.rotate_right,
        },
    })


def _craft_from_dict(data: dict[str, Any]) -> Craft:
    controls = data.get("controls", {})
    return Craft(
        craft_id=int(_require(data, "craft_id", "Craft")),
        position=_vector(data, "position", "Craft"),
        velocity=_vector(data, "velocity", "Craft"),
        angle=float(_require(data, "angle", "Craft")),
        radius=float(data.get("radius", 20.0)),
        mass=float(data.get("mass", 1.0)),
        fuel=float(_require(data, "fuel", "Craft")),
        health=float(_require(data, "health", "Craft")),
        locomotion=Locomotion(data.get("locomotion", Locomotion.FREE.value)),
        tether_intent=bool(data.get("tether_intent", False)),
        thrusting=bool(data.get("thrusting", False)),
        controls=ControlInput(
            thrust=bool(controls.get("thrust", False)),
            rotate_left=bool(controls.get("rotate_left", False)),
            rotate_right=bool(controls.get("rotate_right", False)),
        ),
    )


def _payload_to_dict(payload: Payload) -> dict[str, Any]:
    return _serialize_value({
        "position": payload.position,
        "velocity": payload.velocity,
        "radius": payload.radius,
        "mass": payload.mass,
        "stability": payload.stability,
        "harmony": payload.harmony,
        "phase": payload.phase,
        "attached": payload.attached,
    })


def _payload_from_dict(data: dict[str, Any]) -> Payload:
    return Payload(
        position=_vector(data, "position", "Payload"),
        velocity=_vector(data, "velocity", "Payload"),
        radius=float(data.get("radius", 30.0)),
        mass=float(data.get("mass", 5.0)),
        stability=float(_require(data, "stability", "Payload")),
        harmony=bool(data.get("harmony", False)),
        phase=PayloadPhase(data.get("phase", PayloadPhase.ON_PEDESTAL.value)),
        attached=[int(i) for i in data.get("attached", [])],
    )


# =============================================================================
# World
# =============================================================================


@beartype
def world_to_dict(world: World) -> dict[str, Any]:
    """Convert a world, including its level geometry, to plain data."""
    return {
        "version": SNAPSHOT_VERSION,
        "time": world.time,
        "tick": world.tick,
        "outcome": _serialize_value(world.outcome),
        "crafts": [_craft_to_dict(c) for c in world.crafts],
        "payload": _payload_to_dict(world.payload),
        "level": {"objects": world.level.to_objects()},
    }


@beartype
def world_from_dict(data: dict[str, Any]) -> World:
    """Rebuild a world from :func:`world_to_dict` output.

    Raises:
        ValueError: On an unsupported version or malformed data
    """
    version = data.get("version", SNAPSHOT_VERSION)
    if version != SNAPSHOT_VERSION:
        raise ValueError(f"Unsupported snapshot version: {version}")

    level = _require(data, "level", "World")
    outcome = data.get("outcome")
    return World(
        crafts=[_craft_from_dict(c) for c in _require(data, "crafts", "World")],
        payload=_payload_from_dict(_require(data, "payload", "World")),
        level=LevelGeometry.from_objects(_require(level, "objects", "Level")),
        outcome=Outcome(outcome) if outcome is not None else None,
        time=float(data.get("time", 0.0)),
        tick=int(data.get("tick", 0)),
    )


def world_to_json(world: World) -> str:
    """Serialize a world to a JSON string."""
    return json.dumps(world_to_dict(world), indent=2)


def world_from_json(json_str: str) -> World:
    """Deserialize a world from a JSON string."""
    return world_from_dict(json.loads(json_str))
