"""Simulation module for tethered-payload levels.

Provides the tick orchestrator, the objective evaluator and the
step-driven simulation interface where the host controls the loop.

Example:
    >>> from tandem.simulation import Simulator
    >>> from tandem.environment import get_level
    >>>
    >>> sim = Simulator.from_level(get_level("test_level"), players=2)
    >>> events = sim.step(dt=0.016)
"""

from tandem.simulation.objective import check_objectives, evaluate
from tandem.simulation.simulator import (
    SimulationResult,
    Simulator,
    advance,
    build_world,
    clamp_dt,
)

__all__ = [
    "SimulationResult",
    "Simulator",
    "advance",
    "build_world",
    "check_objectives",
    "clamp_dt",
    "evaluate",
]
