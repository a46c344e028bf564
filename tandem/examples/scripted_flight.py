#!/usr/bin/env python
"""Headless scripted flight example.

This example drives the simulation without a renderer:
1. Load a built-in level
2. Fly both craft up to the payload with a simple hover controller
3. Tether both craft and hold them in harmony
4. Summarize events and per-tick history

Useful as a template for bots, replays and regression runs.
"""

import logging
from collections import Counter

from tandem.dynamics import UPRIGHT_ANGLE, ControlInput, Craft, wrap_angle
from tandem.environment import get_level, list_levels
from tandem.simulation import SimulationResult, Simulator

logger = logging.getLogger(__name__)

FRAME_TIME = 1.0 / 60.0
DURATION = 12.0


def hover_controls(craft: Craft, target_y: float) -> ControlInput:
    """Stay upright and climb until ``target_y`` is reached."""
    error = wrap_angle(UPRIGHT_ANGLE - craft.angle)
    return ControlInput(
        thrust=bool(craft.y > target_y and craft.velocity[1] > -60.0),
        rotate_left=bool(error < -0.05),
        rotate_right=bool(error > 0.05),
    )


def main() -> None:
    """Run the scripted flight example."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("TANDEM SCRIPTED FLIGHT")
    print("=" * 60)

    # =========================================================================
    # 1. Load the level
    # =========================================================================
    print(f"\n1. Available levels: {', '.join(list_levels())}")

    level = get_level("test_level")
    sim = Simulator.from_level(level, players=2)
    print(f"   Level:   {level.name}")
    print(f"   Payload: ({level.payload_start[0]:.0f}, {level.payload_start[1]:.0f})")

    # =========================================================================
    # 2. Fly
    # =========================================================================
    print("\n2. Flying...")

    for craft in sim.world.crafts:
        sim.toggle_tether_intent(craft.craft_id)

    counts: Counter[str] = Counter()
    steps = int(DURATION / FRAME_TIME)
    for _ in range(steps):
        payload = sim.world.payload
        target_y = payload.y + 90.0
        inputs = [hover_controls(c, target_y) for c in sim.world.crafts]
        sim.step(inputs, dt=FRAME_TIME)

        for event in sim.drain_events():
            counts[type(event).__name__] += 1
            logger.debug("t=%.2f %s", sim.time, event)

        if sim.is_finished:
            break

    # =========================================================================
    # 3. Summarize
    # =========================================================================
    print("\n3. Summary")

    state = sim.get_state()
    print(f"   Ticks:     {state.tick}")
    print(f"   Time:      {state.time:.2f} s")
    print(f"   Outcome:   {state.outcome.value if state.outcome else 'in progress'}")
    print(f"   Stability: {state.payload.stability:.1f}")
    print(f"   Tethers:   {len(state.payload.attached)}")
    for craft in state.crafts:
        print(
            f"   Craft {craft.craft_id}:   fuel {craft.fuel:5.1f}  health {craft.health:5.1f}"
            f"  at ({craft.x:.0f}, {craft.y:.0f})"
        )

    print("\n   Events:")
    for name, count in sorted(counts.items()):
        print(f"     {name:<18} {count}")

    result = SimulationResult.from_simulator(sim)
    df = result.to_dataframe()
    print(f"\n   History: {df.height} rows x {df.width} columns")
    print(df.select(["time", "payload_y", "stability", "attached"]).tail(5))


if __name__ == "__main__":
    main()
