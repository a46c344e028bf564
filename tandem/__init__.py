"""Tandem - Cooperative tethered-payload flight simulation.

This package provides the real-time physics and game-state core of a
two-player game: thruster-driven craft tether to a payload, fly in
harmony to keep it stable, and deliver it to an extraction zone.

Example:
    >>> from tandem import ControlInput, Simulator, get_level
    >>>
    >>> sim = Simulator.from_level(get_level("the_descent"))
    >>> sim.toggle_tether_intent(0)
    >>> events = sim.step([ControlInput(thrust=True), ControlInput()], dt=0.016)
    >>> print(f"Craft 0 fuel: {sim.world.crafts[0].fuel:.1f}")
"""

__version__ = "0.1.0"

# Configuration
from tandem.config import CollisionPolicy, SimConfig

# Entity state
from tandem.dynamics import (
    ControlInput,
    Craft,
    Locomotion,
    Payload,
    PayloadMode,
    PayloadPhase,
    World,
    toggle_tether_intent,
)

# Level geometry
from tandem.environment import (
    LevelGeometry,
    LevelSpec,
    Rect,
    WallPolyline,
    get_level,
    list_levels,
)

# Events
from tandem.events import (
    CollisionOccurred,
    CraftLanded,
    Event,
    EventOutbox,
    LevelFailed,
    LevelSucceeded,
    Outcome,
    PayloadArmed,
    TetherAttached,
    TetherDetached,
)

# Simulation
from tandem.simulation import (
    SimulationResult,
    Simulator,
    advance,
    build_world,
    evaluate,
)

# Snapshots
from tandem.snapshot import (
    level_from_dict,
    level_to_dict,
    world_from_dict,
    world_from_json,
    world_to_dict,
    world_to_json,
)

__all__ = [
    "__version__",
    # Configuration
    "CollisionPolicy",
    "SimConfig",
    # Entity state
    "ControlInput",
    "Craft",
    "Locomotion",
    "Payload",
    "PayloadMode",
    "PayloadPhase",
    "World",
    "toggle_tether_intent",
    # Level geometry
    "LevelGeometry",
    "LevelSpec",
    "Rect",
    "WallPolyline",
    "get_level",
    "list_levels",
    # Events
    "CollisionOccurred",
    "CraftLanded",
    "Event",
    "EventOutbox",
    "LevelFailed",
    "LevelSucceeded",
    "Outcome",
    "PayloadArmed",
    "TetherAttached",
    "TetherDetached",
    # Simulation
    "SimulationResult",
    "Simulator",
    "advance",
    "build_world",
    "evaluate",
    # Snapshots
    "level_from_dict",
    "level_to_dict",
    "world_from_dict",
    "world_from_json",
    "world_to_dict",
    "world_to_json",
]
