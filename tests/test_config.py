"""Tests for simulation configuration."""

import pytest

from tandem.config import MAX_DT, WALL_HALF_THICKNESS, CollisionPolicy, SimConfig


class TestSimConfig:
    """Test defaults, presets and validation."""

    def test_defaults(self):
        """Test default configuration values."""
        config = SimConfig()

        assert config.max_dt == MAX_DT == 0.05
        assert config.damage_multiplier == 1.0
        assert config.fuel_cost_multiplier == 1.0
        assert config.wall_half_thickness == WALL_HALF_THICKNESS == 7.5
        assert config.collision_policy is CollisionPolicy.FIRST_HIT

    def test_dev_mode(self):
        """Test the developer mode preset."""
        config = SimConfig.dev_mode()
        assert config.damage_multiplier == 0.25
        assert config.fuel_cost_multiplier == 0.0

    def test_invulnerable(self):
        """Test the invulnerable preset."""
        assert SimConfig.invulnerable().damage_multiplier == 0.0

    @pytest.mark.parametrize("kwargs, match", [
        ({"max_dt": 0.0}, "max_dt"),
        ({"max_dt": -0.1}, "max_dt"),
        ({"damage_multiplier": -1.0}, "damage_multiplier"),
        ({"fuel_cost_multiplier": -0.5}, "fuel_cost_multiplier"),
        ({"wall_half_thickness": -7.5}, "wall_half_thickness"),
    ])
    def test_invalid_values(self, kwargs, match):
        """Out-of-range values should raise ValueError."""
        with pytest.raises(ValueError, match=match):
            SimConfig(**kwargs)
