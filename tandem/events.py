"""Domain events produced by the simulation.

The core never calls into presentation, audio or UI code. Instead every
sub-system emits events into an :class:`EventOutbox` during a tick; the
orchestrator drains the outbox after the tick completes and hands the
events to the host, in production order.

Example:
    >>> from tandem.events import EventOutbox, CraftLanded
    >>>
    >>> outbox = EventOutbox()
    >>> outbox.emit(CraftLanded(craft_id=0))
    >>> outbox.drain()
    [CraftLanded(craft_id=0)]
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from beartype import beartype


class Outcome(Enum):
    """Terminal level outcome."""
    SUCCEEDED = "succeeded"
    PAYLOAD_DESTABILIZED = "payload_destabilized"
    ALL_CRAFT_DISABLED = "all_craft_disabled"

    @property
    def is_failure(self) -> bool:
        return self is not Outcome.SUCCEEDED


# =============================================================================
# Events
# =============================================================================


@beartype
@dataclass(frozen=True)
class CollisionOccurred:
    """A damaging wall impact.

    Attributes:
        entity_id: Craft id, or "payload"
        position: Entity position after the push-out
        impact_speed: Speed before the impact was resolved
    """
    entity_id: int | str
    position: tuple[float, float]
    impact_speed: float


@beartype
@dataclass(frozen=True)
class CraftLanded:
    craft_id: int


@beartype
@dataclass(frozen=True)
class TetherAttached:
    craft_id: int


@beartype
@dataclass(frozen=True)
class TetherDetached:
    craft_id: int


@beartype
@dataclass(frozen=True)
class PayloadArmed:
    """The payload became armed (True) or disarmed (False)."""
    armed: bool


@beartype
@dataclass(frozen=True)
class LevelFailed:
    reason: Outcome


@beartype
@dataclass(frozen=True)
class LevelSucceeded:
    """The payload reached the extraction zone while tethered."""


Event = Union[
    CollisionOccurred,
    CraftLanded,
    TetherAttached,
    TetherDetached,
    PayloadArmed,
    LevelFailed,
    LevelSucceeded,
]


# =============================================================================
# Outbox
# =============================================================================


class EventOutbox:
    """Ordered buffer of events produced during a tick."""

    def __init__(self) -> None:
        self._events: list[Event] = []

    def emit(self, event: Event) -> None:
        self._events.append(event)

    def drain(self) -> list[Event]:
        """Return all buffered events and empty the buffer."""
        events, self._events = self._events, []
        return events

    def __len__(self) -> int:
        return len(self._events)
