"""Simulation configuration.

Holds the per-session knobs the host may tune without touching the physics
constants: the time-step ceiling, damage and fuel multipliers for assisted
or invulnerable play, the world-space wall thickness, and the wall contact
policy.

Example:
    >>> from tandem.config import SimConfig, CollisionPolicy
    >>>
    >>> config = SimConfig(damage_multiplier=0.5)
    >>> relaxed = SimConfig.dev_mode()
    >>> strict = SimConfig(collision_policy=CollisionPolicy.NEAREST)
"""

from dataclasses import dataclass
from enum import Enum

from beartype import beartype

# Largest elapsed time a single tick may integrate
MAX_DT = 0.05

# Half of the drawn wall stroke, in world units
WALL_HALF_THICKNESS = 7.5


class CollisionPolicy(Enum):
    """Which wall contact is resolved when several segments overlap an entity."""
    FIRST_HIT = "first_hit"  # First overlapping segment in iteration order
    NEAREST = "nearest"      # Deepest overlapping segment


@beartype
@dataclass
class SimConfig:
    """Simulation configuration.

    Attributes:
        max_dt: Ceiling applied to the raw elapsed time of every tick
        damage_multiplier: Scale on wall impact damage (1 = normal, 0 = invulnerable)
        fuel_cost_multiplier: Scale on thrust fuel consumption (0 = free fuel)
        wall_half_thickness: Added to an entity radius for wall contact
        collision_policy: Wall contact selection policy
    """
    max_dt: float = MAX_DT
    damage_multiplier: float = 1.0
    fuel_cost_multiplier: float = 1.0
    wall_half_thickness: float = WALL_HALF_THICKNESS
    collision_policy: CollisionPolicy = CollisionPolicy.FIRST_HIT

    def __post_init__(self) -> None:
        if self.max_dt <= 0:
            raise ValueError(f"max_dt must be positive, got {self.max_dt}")
        if self.damage_multiplier < 0:
            raise ValueError(f"damage_multiplier must be >= 0, got {self.damage_multiplier}")
        if self.fuel_cost_multiplier < 0:
            raise ValueError(
                f"fuel_cost_multiplier must be >= 0, got {self.fuel_cost_multiplier}"
            )
        if self.wall_half_thickness < 0:
            raise ValueError(
                f"wall_half_thickness must be >= 0, got {self.wall_half_thickness}"
            )

    @classmethod
    def dev_mode(cls) -> "SimConfig":
        """Reduced damage and free thrust, for level testing."""
        return cls(damage_multiplier=0.25, fuel_cost_multiplier=0.0)

    @classmethod
    def invulnerable(cls) -> "SimConfig":
        """Wall impacts never cost health or stability."""
        return cls(damage_multiplier=0.0)
