"""Tests for the craft locomotion state machine.

Tests free flight (controls, gravity, tether pull, walls), the landed state
and the transitions between them.
"""

import math

import numpy as np
import pytest
from numpy.testing import assert_allclose

from tandem.config import SimConfig
from tandem.dynamics.craft import (
    FUEL_CONSUMPTION,
    GRAVITY,
    LIFTOFF_IMPULSE,
    ROTATION_SPEED,
    THRUST_ACCEL,
    settle_on_pads,
    update_craft,
)
from tandem.dynamics.state import (
    UPRIGHT_ANGLE,
    ControlInput,
    Craft,
    Locomotion,
    Payload,
    PayloadPhase,
)
from tandem.environment.level import LevelGeometry, Rect, WallPolyline
from tandem.events import CollisionOccurred, CraftLanded, EventOutbox

DT = 0.05
IDLE = ControlInput()
THRUST = ControlInput(thrust=True)


def make_level(*walls, pads=()) -> LevelGeometry:
    return LevelGeometry(
        walls=tuple(WallPolyline.from_points(w) for w in walls),
        landing_pads=tuple(pads),
        extraction_zone=Rect(5000.0, 5000.0, 10.0, 10.0),
    )


def far_payload() -> Payload:
    return Payload.create(0.0, 10000.0)


def step(craft, controls=IDLE, level=None, config=None, payload=None, outbox=None):
    update_craft(
        craft,
        controls,
        payload if payload is not None else far_payload(),
        level if level is not None else make_level(),
        config if config is not None else SimConfig(),
        DT,
        outbox if outbox is not None else EventOutbox(),
    )


# =============================================================================
# Free Flight Tests
# =============================================================================


class TestFreeFlight:
    """Test the FREE state."""

    def test_free_fall_velocity(self):
        """Falling for 1 s in 0.05 s ticks reaches vy = 80."""
        craft = Craft.create(0, 0.0, 0.0)
        for _ in range(20):
            step(craft)

        assert_allclose(craft.velocity[1], 80.0, rtol=1e-12)
        assert craft.velocity[0] == 0.0

    def test_free_fall_position(self):
        """Position should use the already-updated velocity."""
        craft = Craft.create(0, 0.0, 0.0)
        step(craft)
        # Semi-implicit Euler: velocity first, then position
        assert craft.y == pytest.approx(GRAVITY * DT * DT)

    def test_upright_thrust(self):
        """Test upward thrust and fuel burn for an upright craft."""
        craft = Craft.create(0, 0.0, 0.0)
        step(craft, THRUST)

        assert craft.thrusting
        assert craft.velocity[0] == pytest.approx(0.0, abs=1e-9)
        assert craft.velocity[1] == pytest.approx(-THRUST_ACCEL * DT + GRAVITY * DT)
        assert craft.fuel == pytest.approx(100.0 - FUEL_CONSUMPTION * DT)

    def test_thrust_follows_facing(self):
        """Thrust should act along the facing direction."""
        craft = Craft.create(0, 0.0, 0.0, angle=0.0)
        step(craft, THRUST)
        assert craft.velocity[0] == pytest.approx(THRUST_ACCEL * DT)

    def test_free_fuel_in_dev_mode(self):
        """Developer mode should thrust without burning fuel."""
        craft = Craft.create(0, 0.0, 0.0)
        step(craft, THRUST, config=SimConfig.dev_mode())

        assert craft.thrusting
        assert craft.fuel == 100.0

    def test_no_thrust_without_fuel(self):
        """An empty tank should give no thrust."""
        craft = Craft.create(0, 0.0, 0.0, fuel=0.0)
        step(craft, THRUST)

        assert not craft.thrusting
        assert craft.velocity[1] == pytest.approx(GRAVITY * DT)

    def test_fuel_never_negative(self):
        """Test that fuel clamps at zero."""
        craft = Craft.create(0, 0.0, 0.0, fuel=0.1)
        step(craft, THRUST)
        assert craft.fuel == 0.0

    def test_rotation(self):
        """Test rotation in both directions."""
        craft = Craft.create(0, 0.0, 0.0)
        step(craft, ControlInput(rotate_left=True))
        assert craft.angle == pytest.approx(UPRIGHT_ANGLE - ROTATION_SPEED * DT)

        step(craft, ControlInput(rotate_right=True))
        assert craft.angle == pytest.approx(UPRIGHT_ANGLE)

    def test_controls_recorded(self):
        """Test that the held controls are stored on the craft."""
        craft = Craft.create(0, 0.0, 0.0)
        controls = ControlInput(thrust=True, rotate_left=True)
        step(craft, controls)
        assert craft.controls == controls


class TestWallImpact:
    """Test wall collisions during free flight."""

    FLOOR = [(0.0, 100.0), (200.0, 100.0)]

    def test_fast_impact_costs_health(self):
        """A fast wall hit should cost health and emit a collision event."""
        craft = Craft.create(0, 100.0, 75.0, vy=100.0)
        outbox = EventOutbox()
        step(craft, level=make_level(self.FLOOR), outbox=outbox)

        assert craft.health == pytest.approx(75.0)
        assert craft.y == pytest.approx(72.5)
        assert craft.velocity[1] == pytest.approx(104.0 - 1.8 * 104.0)

        events = outbox.drain()
        assert len(events) == 1
        assert isinstance(events[0], CollisionOccurred)
        assert events[0].entity_id == 0
        assert events[0].impact_speed == pytest.approx(104.0)

    def test_gentle_contact_is_silent(self):
        """A slow wall contact should cost nothing and emit nothing."""
        craft = Craft.create(0, 100.0, 75.0, vy=10.0)
        outbox = EventOutbox()
        step(craft, level=make_level(self.FLOOR), outbox=outbox)

        assert craft.health == 100.0
        assert len(outbox) == 0

    def test_invulnerable(self):
        """Test that the invulnerable preset ignores damage."""
        craft = Craft.create(0, 100.0, 75.0, vy=100.0)
        step(craft, level=make_level(self.FLOOR), config=SimConfig.invulnerable())
        assert craft.health == 100.0


class TestTetherPull:
    """Test the tether pull on an attached craft."""

    def test_attached_craft_pulled(self):
        """A taut tether should pull the craft toward the payload."""
        craft = Craft.create(0, 0.0, 0.0)
        payload = Payload.create(0.0, 150.0)
        payload.attach(0)

        step(craft, payload=payload)

        # Gravity is applied first, so the damping term sees the craft falling
        vy_before = GRAVITY * DT
        pull = 120.0 * 50.0 + 8.0 * (0.0 - vy_before)
        assert craft.velocity[1] == pytest.approx(vy_before + pull * DT)

    def test_unattached_craft_not_pulled(self):
        """Test that only attached craft feel the tether."""
        craft = Craft.create(0, 0.0, 0.0)
        payload = Payload.create(0.0, 150.0, phase=PayloadPhase.RELEASED)

        step(craft, payload=payload)

        assert craft.velocity[1] == pytest.approx(GRAVITY * DT)


# =============================================================================
# Landed Tests
# =============================================================================


class TestLanded:
    """Test the LANDED state."""

    def landed_craft(self, **kwargs) -> Craft:
        return Craft.create(0, 50.0, 80.0, locomotion=Locomotion.LANDED, **kwargs)

    def test_regeneration(self):
        """Landed craft should regenerate fuel and health."""
        craft = self.landed_craft(fuel=50.0, health=50.0)
        step(craft)

        assert craft.fuel == pytest.approx(51.0)
        assert craft.health == pytest.approx(51.0)

    def test_regeneration_capped(self):
        """Test that regeneration stops at the maximum."""
        craft = self.landed_craft(fuel=99.9, health=99.9)
        step(craft)

        assert craft.fuel == 100.0
        assert craft.health == 100.0

    def test_relaxes_upright(self):
        """Landed craft should rotate back toward upright."""
        craft = self.landed_craft(angle=0.0)
        step(craft)
        assert craft.angle == pytest.approx(-math.pi / 2 * 6.0 * DT)

    def test_relaxes_along_shorter_arc(self):
        """Test that upright relaxation takes the shorter way round."""
        craft = self.landed_craft(angle=3.0)
        step(craft)
        # From 3.0 the short way to -pi/2 goes up through pi
        assert craft.angle > 3.0

    def test_drift_decays_and_position_holds(self):
        """Landed craft should ignore rotation and hold position."""
        craft = self.landed_craft(vx=10.0)
        step(craft, ControlInput(rotate_left=True))

        assert craft.velocity[0] == pytest.approx(9.0)
        assert craft.velocity[1] == 0.0
        assert_allclose(craft.position, [50.0, 80.0])
        assert craft.is_landed
        assert not craft.thrusting

    def test_lift_off(self):
        """Thrust should lift a landed craft off with an impulse."""
        craft = self.landed_craft()
        step(craft, THRUST)

        assert craft.locomotion is Locomotion.FREE
        assert craft.thrusting
        assert craft.velocity[1] == pytest.approx(
            -LIFTOFF_IMPULSE - THRUST_ACCEL * DT + GRAVITY * DT
        )


class TestDisabled:
    """Test that a craft without health is inert."""

    def test_no_integration(self):
        """A disabled craft should not move or burn fuel."""
        craft = Craft.create(0, 10.0, 20.0, vx=5.0, vy=5.0, health=0.0)
        step(craft, THRUST)

        assert_allclose(craft.position, [10.0, 20.0])
        assert_allclose(craft.velocity, [5.0, 5.0])
        assert craft.fuel == 100.0
        assert not craft.thrusting

    def test_no_landing(self):
        """A disabled craft should not land."""
        craft = Craft.create(0, 50.0, 85.0, vy=10.0, health=0.0)
        pad = Rect(0.0, 100.0, 100.0, 10.0)
        assert not settle_on_pads(craft, make_level(pads=[pad]), EventOutbox())


# =============================================================================
# Pad Tests
# =============================================================================


class TestSettleOnPads:
    """Test the FREE -> LANDED transition."""

    PAD = Rect(0.0, 100.0, 100.0, 10.0)

    def test_descending_craft_lands(self):
        """Test landing on a pad while descending."""
        craft = Craft.create(0, 50.0, 85.0, vx=3.0, vy=10.0)
        outbox = EventOutbox()

        assert settle_on_pads(craft, make_level(pads=[self.PAD]), outbox)
        assert craft.is_landed
        assert craft.y == pytest.approx(80.0)
        assert craft.velocity[1] == 0.0
        assert outbox.drain() == [CraftLanded(craft_id=0)]

    def test_rising_craft_does_not_land(self):
        """A rising craft should pass through a pad."""
        craft = Craft.create(0, 50.0, 85.0, vy=-10.0)
        assert not settle_on_pads(craft, make_level(pads=[self.PAD]), EventOutbox())
        assert not craft.is_landed

    def test_away_from_pad(self):
        """Test no landing away from any pad."""
        craft = Craft.create(0, 300.0, 85.0, vy=10.0)
        assert not settle_on_pads(craft, make_level(pads=[self.PAD]), EventOutbox())

    def test_landed_craft_not_relanded(self):
        """A landed craft should not land again."""
        craft = Craft.create(0, 50.0, 80.0, vy=10.0, locomotion=Locomotion.LANDED)
        outbox = EventOutbox()
        assert not settle_on_pads(craft, make_level(pads=[self.PAD]), outbox)
        assert len(outbox) == 0

    def test_landing_then_regenerating(self):
        """Test a descent onto a pad followed by regeneration."""
        craft = Craft.create(0, 50.0, 70.0, vy=60.0, fuel=10.0)
        level = make_level(pads=[self.PAD])
        outbox = EventOutbox()

        for _ in range(10):
            step(craft, level=level, outbox=outbox)
            settle_on_pads(craft, level, outbox)

        assert craft.is_landed
        assert craft.fuel > 10.0
        assert np.isclose(craft.y, 80.0)
