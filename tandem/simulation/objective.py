"""Win/fail evaluation.

Checked once per tick after all motion and attachment changes. Failure
outranks success when both hold in the same tick:

    1. PAYLOAD_DESTABILIZED  - payload stability has reached 0
    2. ALL_CRAFT_DISABLED    - there is at least one craft and none has health
    3. SUCCEEDED             - payload overlaps the extraction zone while at
                               least one craft is tethered to it

The outcome is signalled once; later ticks never re-signal or change it.
"""

import logging

from beartype import beartype

from tandem.dynamics.collision import circle_overlaps_rect
from tandem.dynamics.state import World
from tandem.events import EventOutbox, LevelFailed, LevelSucceeded, Outcome

logger = logging.getLogger(__name__)


@beartype
def payload_in_extraction_zone(world: World) -> bool:
    payload = world.payload
    return circle_overlaps_rect(
        payload.x, payload.y, payload.radius, world.level.extraction_zone
    )


@beartype
def evaluate(world: World) -> Outcome | None:
    """Outcome implied by the current world, ignoring any earlier outcome."""
    if world.payload.stability <= 0.0:
        return Outcome.PAYLOAD_DESTABILIZED
    if world.crafts and all(c.is_disabled for c in world.crafts):
        return Outcome.ALL_CRAFT_DISABLED
    if world.payload.attached and payload_in_extraction_zone(world):
        return Outcome.SUCCEEDED
    return None


@beartype
def check_objectives(world: World, outbox: EventOutbox) -> Outcome | None:
    """Record and signal a newly reached outcome.

    Returns:
        The outcome reached this call, or None when nothing new happened
    """
    if world.outcome is not None:
        return None

    outcome = evaluate(world)
    if outcome is None:
        return None

    world.outcome = outcome
    if outcome is Outcome.SUCCEEDED:
        outbox.emit(LevelSucceeded())
        logger.info("Level succeeded at t=%.2f", world.time)
    else:
        outbox.emit(LevelFailed(outcome))
        logger.info("Level failed at t=%.2f: %s", world.time, outcome.value)
    return outcome
