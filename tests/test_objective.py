"""Tests for win/fail evaluation."""

from tandem.dynamics.state import Craft, Payload, PayloadPhase, World
from tandem.environment.level import LevelGeometry, Rect
from tandem.events import EventOutbox, LevelFailed, LevelSucceeded, Outcome
from tandem.simulation.objective import check_objectives, evaluate

ZONE = Rect(-100.0, -100.0, 200.0, 200.0)


def make_world(crafts=None, payload_at=(0.0, 0.0), **payload_kwargs) -> World:
    level = LevelGeometry(walls=(), landing_pads=(), extraction_zone=ZONE)
    if crafts is None:
        crafts = [Craft.create(0, 0.0, -50.0), Craft.create(1, 50.0, -50.0)]
    return World(
        crafts=crafts,
        payload=Payload.create(*payload_at, **payload_kwargs),
        level=level,
    )


class TestEvaluate:
    """Test outcome priority."""

    def test_nothing_yet(self):
        """Test no outcome mid-flight."""
        assert evaluate(make_world(payload_at=(1000.0, 1000.0))) is None

    def test_pedestal_in_zone_is_not_success(self):
        """Delivery needs at least one tether."""
        assert evaluate(make_world()) is None

    def test_released_without_tether_is_not_success(self):
        """An untethered payload in the zone should not succeed."""
        assert evaluate(make_world(phase=PayloadPhase.RELEASED)) is None

    def test_one_tether_succeeds(self):
        """One tether is enough to deliver the payload."""
        world = make_world(phase=PayloadPhase.RELEASED, attached=[0])
        assert evaluate(world) is Outcome.SUCCEEDED

    def test_zone_edge_overlap_counts(self):
        """Test that partial overlap with the zone counts."""
        # Center 120 right of the zone's left edge + width, radius 30 reaches in
        world = make_world(payload_at=(125.0, 0.0), phase=PayloadPhase.RELEASED, attached=[0])
        assert evaluate(world) is Outcome.SUCCEEDED

    def test_destabilized(self):
        """Test failure at zero stability."""
        world = make_world(payload_at=(1000.0, 0.0), stability=0.0)
        assert evaluate(world) is Outcome.PAYLOAD_DESTABILIZED

    def test_all_disabled(self):
        """Test failure when every craft is disabled."""
        crafts = [Craft.create(0, 0.0, 0.0, health=0.0), Craft.create(1, 1.0, 0.0, health=0.0)]
        world = make_world(crafts=crafts, payload_at=(1000.0, 0.0))
        assert evaluate(world) is Outcome.ALL_CRAFT_DISABLED

    def test_one_disabled_is_not_failure(self):
        """One disabled craft should not fail the level."""
        crafts = [Craft.create(0, 0.0, 0.0, health=0.0), Craft.create(1, 1.0, 0.0)]
        world = make_world(crafts=crafts, payload_at=(1000.0, 0.0))
        assert evaluate(world) is None

    def test_no_craft_is_not_all_disabled(self):
        """An empty fleet should not count as all disabled."""
        world = make_world(crafts=[], payload_at=(1000.0, 0.0))
        assert evaluate(world) is None

    def test_destabilized_outranks_disabled(self):
        """Test that destabilization wins over disabled craft."""
        crafts = [Craft.create(0, 0.0, 0.0, health=0.0)]
        world = make_world(crafts=crafts, payload_at=(1000.0, 0.0), stability=0.0)
        assert evaluate(world) is Outcome.PAYLOAD_DESTABILIZED

    def test_failure_outranks_success(self):
        """Test that failure wins over a delivery in the same tick."""
        world = make_world(phase=PayloadPhase.RELEASED, attached=[0], stability=0.0)
        assert evaluate(world) is Outcome.PAYLOAD_DESTABILIZED


class TestCheckObjectives:
    """Test single-fire signalling."""

    def test_success_signalled_once(self):
        """Success should be signalled exactly once."""
        world = make_world(phase=PayloadPhase.RELEASED, attached=[0])
        outbox = EventOutbox()

        assert check_objectives(world, outbox) is Outcome.SUCCEEDED
        assert check_objectives(world, outbox) is None

        assert world.outcome is Outcome.SUCCEEDED
        assert outbox.drain() == [LevelSucceeded()]

    def test_failure_event_carries_reason(self):
        """Test that the failure event names its reason."""
        world = make_world(payload_at=(1000.0, 0.0), stability=0.0)
        outbox = EventOutbox()

        check_objectives(world, outbox)

        assert outbox.drain() == [LevelFailed(reason=Outcome.PAYLOAD_DESTABILIZED)]
        assert world.outcome.is_failure

    def test_outcome_is_final(self):
        """A recorded outcome should never change."""
        world = make_world(payload_at=(1000.0, 0.0), stability=0.0)
        check_objectives(world, EventOutbox())

        # Conditions change, the recorded outcome does not
        world.payload.stability = 100.0
        world.payload.release()
        world.payload.attach(0)
        world.payload.position[:] = [0.0, 0.0]
        outbox = EventOutbox()

        assert check_objectives(world, outbox) is None
        assert world.outcome is Outcome.PAYLOAD_DESTABILIZED
        assert len(outbox) == 0

    def test_no_outcome_no_event(self):
        """Test no event while the level is undecided."""
        world = make_world(payload_at=(1000.0, 0.0))
        outbox = EventOutbox()
        assert check_objectives(world, outbox) is None
        assert world.outcome is None
        assert len(outbox) == 0
