"""Step-driven simulation of a tethered-payload level.

Provides a clean simulation interface where the host controls the loop.
The simulator owns the world and advances it in response to the players'
held controls and the elapsed wall-clock time.

Architecture:
    The host owns the frame loop and calls:
    - sim.toggle_tether_intent(craft_id) -> on a tether key press
    - sim.step(inputs, dt) -> advance one tick
    - sim.drain_events() -> collisions, landings, tethers, outcome
    - sim.get_state() -> copy of the world for presentation

Tick order:
    1. Clamp the elapsed time to [0, max_dt]
    2. Craft locomotion, each craft in order
    3. Payload dynamics, including harmony and stability
    4. Pad landing and tether attachment, each craft in order
    5. Arming change notification
    6. Objective evaluation

Example:
    >>> from tandem.simulation import Simulator
    >>> from tandem.dynamics import ControlInput
    >>> from tandem.environment import get_level
    >>>
    >>> sim = Simulator.from_level(get_level("test_level"))
    >>> sim.toggle_tether_intent(0)
    >>> for _ in range(100):
    ...     sim.step([ControlInput(thrust=True), ControlInput()], dt=0.016)
    ...     for event in sim.drain_events():
    ...         print(event)
"""

import logging
import math
import threading
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from tandem.config import MAX_DT, SimConfig
from tandem.dynamics.craft import settle_on_pads, update_craft
from tandem.dynamics.payload import update_attachment, update_payload
from tandem.dynamics.state import (
    MAX_ATTACHED,
    ControlInput,
    Craft,
    Payload,
    World,
    toggle_tether_intent,
)
from tandem.environment.level import LevelSpec
from tandem.events import Event, EventOutbox, Outcome, PayloadArmed
from tandem.simulation.objective import check_objectives

logger = logging.getLogger(__name__)

# Horizontal offset of each additional craft from the level's start point
PLAYER_SPACING = 80.0

NO_INPUT = ControlInput()

Inputs = Sequence[ControlInput] | Mapping[int, ControlInput]


# =============================================================================
# World Construction
# =============================================================================


@beartype
def build_world(level: LevelSpec, players: int = 2) -> World:
    """Place the craft and the payload at a level's start points.

    Args:
        level: Level to load
        players: Number of craft (1 or 2); craft ``i`` starts ``80 * i``
            units right of the level's craft start

    Returns:
        A fresh world with full resources and the payload on its pedestal
    """
    if not 1 <= players <= MAX_ATTACHED:
        raise ValueError(f"players must be between 1 and {MAX_ATTACHED}, got {players}")

    start_x, start_y = level.craft_start
    crafts = [
        Craft.create(i, start_x + PLAYER_SPACING * i, start_y)
        for i in range(players)
    ]
    payload = Payload.create(*level.payload_start)

    logger.info("Loaded level %r with %d craft", level.name, players)
    return World(crafts=crafts, payload=payload, level=level.geometry)


# =============================================================================
# Tick
# =============================================================================


def clamp_dt(raw_dt: float | int, max_dt: float = MAX_DT) -> float:
    """Clamp an elapsed time to [0, max_dt]; NaN counts as no time."""
    if math.isnan(raw_dt):
        return 0.0
    return min(max(float(raw_dt), 0.0), max_dt)


def _resolve_inputs(world: World, inputs: Inputs | None) -> dict[int, ControlInput]:
    if inputs is None:
        return {c.craft_id: NO_INPUT for c in world.crafts}

    if isinstance(inputs, Mapping):
        known = {c.craft_id for c in world.crafts}
        unknown = sorted(set(inputs) - known)
        if unknown:
            raise ValueError(f"Inputs given for unknown craft {unknown}")
        return {c.craft_id: inputs.get(c.craft_id, NO_INPUT) for c in world.crafts}

    if len(inputs) != len(world.crafts):
        raise ValueError(
            f"Expected {len(world.crafts)} control inputs, got {len(inputs)}"
        )
    return {c.craft_id: ctrl for c, ctrl in zip(world.crafts, inputs)}


@beartype
def advance(
    world: World,
    raw_dt: float | int,
    inputs: Inputs | None = None,
    config: SimConfig | None = None,
) -> list[Event]:
    """Advance the world by one tick.

    Args:
        world: World to update in place
        raw_dt: Elapsed time since the previous tick [s]; clamped first
        inputs: One ControlInput per craft in ``world.crafts`` order, or a
            mapping from craft id to ControlInput (absent ids hold nothing)
        config: Simulation configuration (defaults to ``SimConfig()``)

    Returns:
        Events produced during the tick, in production order
    """
    config = config or SimConfig()
    dt = clamp_dt(raw_dt, config.max_dt)
    controls = _resolve_inputs(world, inputs)
    outbox = EventOutbox()
    payload = world.payload
    was_armed = payload.armed

    for craft in world.crafts:
        update_craft(craft, controls[craft.craft_id], payload, world.level, config, dt, outbox)

    update_payload(payload, world.attached_crafts(), world.level, config, dt, outbox)

    for craft in world.crafts:
        settle_on_pads(craft, world.level, outbox)
        update_attachment(craft, payload, outbox)

    if payload.armed != was_armed:
        outbox.emit(PayloadArmed(payload.armed))

    check_objectives(world, outbox)

    world.time += dt
    world.tick += 1
    return outbox.drain()


# =============================================================================
# Simulator
# =============================================================================


@beartype
@dataclass
class Simulator:
    """Step-driven level simulator.

    Owns the world and advances it one tick per ``step``. Ticks, intent
    toggles, state reads and history access are serialized by a lock so a
    host may drive input and presentation from different threads.

    With ``record_history`` on, every step keeps a full copy of the world.
    Unless ``history_limit`` is set the history grows for as long as the
    simulator runs; per-frame hosts should set a limit, call
    ``clear_history`` periodically, or turn recording off.

    Example:
        >>> sim = Simulator.from_level(get_level("the_descent"))
        >>>
        >>> while sim.outcome is None:
        ...     inputs = read_controls()
        ...     sim.step(inputs, dt=frame_time)
        ...     handle(sim.drain_events())
    """
    world: World
    config: SimConfig = field(default_factory=SimConfig)
    record_history: bool = True
    history_limit: int | None = None

    # Internal
    _history: list[World] = field(default_factory=list, init=False, repr=False)
    _pending: list = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.history_limit is not None and self.history_limit < 1:
            raise ValueError(f"history_limit must be at least 1, got {self.history_limit}")
        self._lock = threading.Lock()
        if self.record_history:
            self._history = [self.world.copy()]

    @classmethod
    def from_level(
        cls,
        level: LevelSpec,
        players: int = 2,
        config: SimConfig | None = None,
        record_history: bool = True,
        history_limit: int | None = None,
    ) -> "Simulator":
        """Create a simulator at the start of a level.

        Args:
            level: Level to load
            players: Number of craft (1 or 2)
            config: Simulation configuration
            record_history: Keep a copy of the world after every tick
            history_limit: Keep only this many most recent worlds (None = all)
        """
        return cls(
            world=build_world(level, players),
            config=config or SimConfig(),
            record_history=record_history,
            history_limit=history_limit,
        )

    def step(self, inputs: Inputs | None = None, dt: float | int = MAX_DT) -> list[Event]:
        """Advance one tick.

        Args:
            inputs: Held controls, per craft
            dt: Elapsed time since the previous step [s]

        Returns:
            Events of this tick; they are also queued for ``drain_events``
        """
        with self._lock:
            events = advance(self.world, dt, inputs, self.config)
            self._pending.extend(events)
            if self.record_history:
                self._history.append(self.world.copy())
                if self.history_limit is not None:
                    del self._history[:-self.history_limit]
        return events

    def drain_events(self) -> list[Event]:
        """Return the events queued since the last drain, oldest first."""
        with self._lock:
            events, self._pending = self._pending, []
        return events

    def toggle_tether_intent(self, craft_id: int) -> bool:
        """Flip a craft's tether intent; takes effect on the next tick."""
        with self._lock:
            return toggle_tether_intent(self.world, craft_id)

    def get_state(self) -> World:
        """Get the current world.

        Returns a copy to prevent external modification.
        """
        with self._lock:
            return self.world.copy()

    def get_history(self) -> list[World]:
        """Get recorded world history."""
        with self._lock:
            return self._history.copy()

    def clear_history(self) -> None:
        """Clear recorded world history."""
        with self._lock:
            self._history = [self.world.copy()]

    @property
    def time(self) -> float:
        """Current simulation time [s]."""
        return self.world.time

    @property
    def tick(self) -> int:
        return self.world.tick

    @property
    def outcome(self) -> Outcome | None:
        return self.world.outcome

    @property
    def is_finished(self) -> bool:
        return self.world.outcome is not None


# =============================================================================
# Results and Analysis
# =============================================================================


@beartype
@dataclass
class SimulationResult:
    """Results from a completed simulation.

    Provides convenient access to per-tick payload and craft histories.
    """
    worlds: list[World]

    @property
    def craft_ids(self) -> list[int]:
        if not self.worlds:
            return []
        return [c.craft_id for c in self.worlds[0].crafts]

    @property
    def time(self) -> NDArray[np.float64]:
        """Time array [s]."""
        return np.array([w.time for w in self.worlds], dtype=np.float64)

    @property
    def tick(self) -> NDArray[np.int64]:
        return np.array([w.tick for w in self.worlds], dtype=np.int64)

    @property
    def payload_position(self) -> NDArray[np.float64]:
        """Payload position history, shape (N, 2)."""
        return np.array([w.payload.position for w in self.worlds], dtype=np.float64).reshape(-1, 2)

    @property
    def payload_velocity(self) -> NDArray[np.float64]:
        """Payload velocity history, shape (N, 2)."""
        return np.array([w.payload.velocity for w in self.worlds], dtype=np.float64).reshape(-1, 2)

    @property
    def stability(self) -> NDArray[np.float64]:
        return np.array([w.payload.stability for w in self.worlds], dtype=np.float64)

    @property
    def harmony(self) -> NDArray[np.bool_]:
        return np.array([w.payload.harmony for w in self.worlds], dtype=np.bool_)

    @property
    def attached_count(self) -> NDArray[np.int64]:
        return np.array([len(w.payload.attached) for w in self.worlds], dtype=np.int64)

    def craft_position(self, craft_id: int) -> NDArray[np.float64]:
        """Position history of one craft, shape (N, 2)."""
        return np.array(
            [w.craft(craft_id).position for w in self.worlds], dtype=np.float64
        ).reshape(-1, 2)

    def craft_fuel(self, craft_id: int) -> NDArray[np.float64]:
        return np.array([w.craft(craft_id).fuel for w in self.worlds], dtype=np.float64)

    def craft_health(self, craft_id: int) -> NDArray[np.float64]:
        return np.array([w.craft(craft_id).health for w in self.worlds], dtype=np.float64)

    @property
    def outcome(self) -> Outcome | None:
        """Final outcome, if one was reached."""
        if not self.worlds:
            return None
        return self.worlds[-1].outcome

    @classmethod
    def from_simulator(cls, sim: Simulator) -> "SimulationResult":
        """Create result from simulator history."""
        return cls(worlds=sim.get_history())

    def to_dataframe(self):
        """Convert to Polars DataFrame, one row per recorded tick."""
        import polars as pl

        payload_position = self.payload_position
        payload_velocity = self.payload_velocity
        columns = {
            "time": self.time,
            "tick": self.tick,
            "payload_x": payload_position[:, 0],
            "payload_y": payload_position[:, 1],
            "payload_vx": payload_velocity[:, 0],
            "payload_vy": payload_velocity[:, 1],
            "stability": self.stability,
            "harmony": self.harmony,
            "attached": self.attached_count,
        }
        for craft_id in self.craft_ids:
            position = self.craft_position(craft_id)
            columns[f"craft{craft_id}_x"] = position[:, 0]
            columns[f"craft{craft_id}_y"] = position[:, 1]
            columns[f"craft{craft_id}_fuel"] = self.craft_fuel(craft_id)
            columns[f"craft{craft_id}_health"] = self.craft_health(craft_id)
            columns[f"craft{craft_id}_landed"] = np.array(
                [w.craft(craft_id).is_landed for w in self.worlds], dtype=np.bool_
            )
        return pl.DataFrame(columns)
