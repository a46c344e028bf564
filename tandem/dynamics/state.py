"""Entity state for the tethered-payload simulation.

The world holds:
- Craft (2): position, velocity, facing, fuel, health, locomotion state
- Payload (1): position, velocity, stability, harmony, attached-craft set
- Level geometry: read-only walls, landing pads, extraction zone

Coordinate frame:
- Screen-style 2D: +x right, +y down
- Facing angle in radians, 0 = +x, increasing clockwise on screen
- Upright facing is -pi/2 (nose toward -y)

Locomotion and payload phase are tagged variants (enums) with explicit
transition methods, so that combinations like "landed while thrusting" or
"armed on the pedestal" cannot be represented.

All entities are plain data: the payload refers to craft by id, never by
object reference, so a world can be copied or serialized as a whole.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from tandem.environment.level import LevelGeometry
from tandem.events import Outcome

TWO_PI = 2.0 * math.pi

# Facing of a craft resting on a pad (nose up, screen coordinates)
UPRIGHT_ANGLE = -math.pi / 2

# Upper bound of fuel, health and stability
RESOURCE_MAX = 100.0

# The payload carries at most one tether per craft of a two-player team
MAX_ATTACHED = 2

# Entity id used for the payload in events
PAYLOAD_ID = "payload"

# =============================================================================
# Angle and Range Utilities
# =============================================================================


def wrap_angle(angle: float) -> float:
    """Wrap an angle to the interval (-pi, pi]."""
    wrapped = math.fmod(angle + math.pi, TWO_PI)
    if wrapped <= 0.0:
        wrapped += TWO_PI
    return wrapped - math.pi


def lerp_angle(start: float, end: float, amount: float) -> float:
    """Move ``start`` toward ``end`` along the shorter arc by ``amount`` (0-1)."""
    return start + wrap_angle(end - start) * amount


def clamp_resource(value: float) -> float:
    """Clamp a fuel/health/stability value to [0, 100]."""
    return max(0.0, min(RESOURCE_MAX, float(value)))


def _as_vector(value: Sequence[float] | NDArray[np.float64], name: str) -> NDArray[np.float64]:
    vec = np.array(value, dtype=np.float64)
    if vec.shape != (2,):
        raise ValueError(f"{name} must be shape (2,), got {vec.shape}")
    return vec


# =============================================================================
# Tagged States
# =============================================================================


class Locomotion(Enum):
    """Craft locomotion state."""
    FREE = "free"      # Flying: controls, thrust, gravity, tether pull
    LANDED = "landed"  # Resting on a pad: upright relax and regeneration


class PayloadPhase(Enum):
    """Payload life-cycle phase."""
    ON_PEDESTAL = "on_pedestal"  # At rest, not integrated
    RELEASED = "released"        # Free body under gravity and tether pull


class PayloadMode(Enum):
    """Combined phase/arming view of the payload."""
    ON_PEDESTAL = "on_pedestal"
    UNARMED = "unarmed"
    ARMED = "armed"


# =============================================================================
# Entities
# =============================================================================


@beartype
@dataclass(frozen=True)
class ControlInput:
    """Held controls of one craft for one tick."""
    thrust: bool = False
    rotate_left: bool = False
    rotate_right: bool = False


@beartype
@dataclass
class Craft:
    """Player craft.

    Attributes:
        craft_id: Unique id within the world
        position: [x, y] position
        velocity: [vx, vy] velocity
        angle: Facing angle [rad]
        radius: Collision radius
        mass: Mass used for tether response
        fuel: Thruster fuel [0, 100]
        health: Hull health [0, 100]; at 0 the craft is inert
        locomotion: FREE or LANDED
        tether_intent: Player wants to be tethered (edge-toggled by the host)
        thrusting: Thrust was applied during the last tick
        controls: Control snapshot of the current tick
    """
    craft_id: int
    position: NDArray[np.float64]
    velocity: NDArray[np.float64]
    angle: float = UPRIGHT_ANGLE
    radius: float = 20.0
    mass: float = 1.0
    fuel: float = RESOURCE_MAX
    health: float = RESOURCE_MAX
    locomotion: Locomotion = Locomotion.FREE
    tether_intent: bool = False
    thrusting: bool = False
    controls: ControlInput = field(default_factory=ControlInput)

    def __post_init__(self) -> None:
        self.position = _as_vector(self.position, "Position")
        self.velocity = _as_vector(self.velocity, "Velocity")
        if self.radius <= 0:
            raise ValueError(f"Craft radius must be positive, got {self.radius}")
        if self.mass <= 0:
            raise ValueError(f"Craft mass must be positive, got {self.mass}")
        self.fuel = clamp_resource(self.fuel)
        self.health = clamp_resource(self.health)

    @classmethod
    def create(
        cls,
        craft_id: int,
        x: float,
        y: float,
        vx: float = 0.0,
        vy: float = 0.0,
        **kwargs,
    ) -> "Craft":
        """Create a craft at rest (or moving) at ``(x, y)``."""
        return cls(
            craft_id=craft_id,
            position=np.array([x, y], dtype=np.float64),
            velocity=np.array([vx, vy], dtype=np.float64),
            **kwargs,
        )

    @property
    def x(self) -> float:
        return float(self.position[0])

    @property
    def y(self) -> float:
        return float(self.position[1])

    @property
    def speed(self) -> float:
        return float(np.hypot(self.velocity[0], self.velocity[1]))

    @property
    def is_disabled(self) -> bool:
        """True when health is exhausted and the craft no longer acts."""
        return bool(self.health <= 0.0)

    @property
    def is_landed(self) -> bool:
        return self.locomotion is Locomotion.LANDED

    def land(self, surface_y: float) -> None:
        """FREE -> LANDED: rest the hull on a surface at ``surface_y``."""
        self.locomotion = Locomotion.LANDED
        self.position[1] = surface_y - self.radius
        self.velocity[1] = 0.0
        self.thrusting = False

    def lift_off(self, impulse: float) -> None:
        """LANDED -> FREE with an upward velocity kick."""
        self.locomotion = Locomotion.FREE
        self.velocity[1] -= impulse

    def clamp_resources(self) -> None:
        self.fuel = clamp_resource(self.fuel)
        self.health = clamp_resource(self.health)

    def copy(self) -> "Craft":
        """Create a copy of this craft."""
        return Craft(
            craft_id=self.craft_id,
            position=self.position.copy(),
            velocity=self.velocity.copy(),
            angle=self.angle,
            radius=self.radius,
            mass=self.mass,
            fuel=self.fuel,
            health=self.health,
            locomotion=self.locomotion,
            tether_intent=self.tether_intent,
            thrusting=self.thrusting,
            controls=self.controls,
        )


@beartype
@dataclass
class Payload:
    """The payload the team must stabilize and deliver.

    Attributes:
        position: [x, y] position
        velocity: [vx, vy] velocity
        radius: Collision radius
        mass: Mass used for tether response
        stability: Stability [0, 100]; at 0 the level fails
        harmony: Attached craft are aligned (meaningful only while armed)
        phase: ON_PEDESTAL until the first tether attaches, then RELEASED
        attached: Ids of tethered craft, in attachment order
    """
    position: NDArray[np.float64]
    velocity: NDArray[np.float64]
    radius: float = 30.0
    mass: float = 5.0
    stability: float = RESOURCE_MAX
    harmony: bool = False
    phase: PayloadPhase = PayloadPhase.ON_PEDESTAL
    attached: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.position = _as_vector(self.position, "Position")
        self.velocity = _as_vector(self.velocity, "Velocity")
        if self.radius <= 0:
            raise ValueError(f"Payload radius must be positive, got {self.radius}")
        if self.mass <= 0:
            raise ValueError(f"Payload mass must be positive, got {self.mass}")
        if len(set(self.attached)) != len(self.attached):
            raise ValueError(f"Attached craft ids must be unique, got {self.attached}")
        if len(self.attached) > MAX_ATTACHED:
            raise ValueError(
                f"At most {MAX_ATTACHED} craft can be attached, got {len(self.attached)}"
            )
        if self.attached and self.phase is PayloadPhase.ON_PEDESTAL:
            raise ValueError("A payload with attached craft cannot be on its pedestal")
        self.stability = clamp_resource(self.stability)

    @classmethod
    def create(cls, x: float, y: float, **kwargs) -> "Payload":
        """Create a payload resting on its pedestal at ``(x, y)``."""
        return cls(
            position=np.array([x, y], dtype=np.float64),
            velocity=np.zeros(2),
            **kwargs,
        )

    @property
    def x(self) -> float:
        return float(self.position[0])

    @property
    def y(self) -> float:
        return float(self.position[1])

    @property
    def armed(self) -> bool:
        """Exactly two craft are tethered."""
        return len(self.attached) == MAX_ATTACHED

    @property
    def on_pedestal(self) -> bool:
        return self.phase is PayloadPhase.ON_PEDESTAL

    @property
    def mode(self) -> PayloadMode:
        if self.phase is PayloadPhase.ON_PEDESTAL:
            return PayloadMode.ON_PEDESTAL
        return PayloadMode.ARMED if self.armed else PayloadMode.UNARMED

    def is_attached(self, craft_id: int) -> bool:
        return craft_id in self.attached

    @property
    def has_room(self) -> bool:
        return len(self.attached) < MAX_ATTACHED

    def release(self) -> None:
        """ON_PEDESTAL -> RELEASED. Releasing twice is a no-op."""
        self.phase = PayloadPhase.RELEASED

    def attach(self, craft_id: int) -> None:
        """Add a tether; the first attachment releases the payload."""
        if craft_id in self.attached:
            raise ValueError(f"Craft {craft_id} is already attached")
        if not self.has_room:
            raise ValueError(f"Payload already has {MAX_ATTACHED} tethers")
        self.attached.append(craft_id)
        self.release()

    def detach(self, craft_id: int) -> None:
        self.attached.remove(craft_id)
        if not self.armed:
            self.harmony = False

    def clamp_resources(self) -> None:
        self.stability = clamp_resource(self.stability)

    def copy(self) -> "Payload":
        """Create a copy of this payload."""
        return Payload(
            position=self.position.copy(),
            velocity=self.velocity.copy(),
            radius=self.radius,
            mass=self.mass,
            stability=self.stability,
            harmony=self.harmony,
            phase=self.phase,
            attached=list(self.attached),
        )


# =============================================================================
# World
# =============================================================================


@beartype
@dataclass
class World:
    """Everything a tick reads and writes.

    Attributes:
        crafts: Player craft, in input order
        payload: The payload
        level: Read-only level geometry (shared, never copied)
        outcome: Terminal outcome once signalled, else None
        time: Accumulated simulation time
        tick: Number of completed ticks
    """
    crafts: list[Craft]
    payload: Payload
    level: LevelGeometry
    outcome: Outcome | None = None
    time: float = 0.0
    tick: int = 0

    def __post_init__(self) -> None:
        ids = [c.craft_id for c in self.crafts]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Craft ids must be unique, got {ids}")
        unknown = [i for i in self.payload.attached if i not in ids]
        if unknown:
            raise ValueError(f"Payload is attached to unknown craft {unknown}")

    def craft(self, craft_id: int) -> Craft:
        """Look up a craft by id."""
        for c in self.crafts:
            if c.craft_id == craft_id:
                return c
        raise KeyError(f"No craft with id {craft_id}")

    def attached_crafts(self) -> list[Craft]:
        """Tethered craft, in attachment order."""
        return [self.craft(i) for i in self.payload.attached]

    def copy(self) -> "World":
        """Copy all mutable state; the level geometry is shared."""
        return World(
            crafts=[c.copy() for c in self.crafts],
            payload=self.payload.copy(),
            level=self.level,
            outcome=self.outcome,
            time=self.time,
            tick=self.tick,
        )


@beartype
def toggle_tether_intent(world: World, craft_id: int) -> bool:
    """Flip a craft's tether intent between ticks. Returns the new value."""
    craft = world.craft(craft_id)
    craft.tether_intent = not craft.tether_intent
    return craft.tether_intent
