"""Tests for equipment classification and eco kill/death multipliers."""

import pytest

from ecorating.economy import (
    EconomyCategory,
    classify_equipment,
    eco_death_penalty,
    eco_kill_value,
    equipment_ratio,
    is_anti_eco_kill,
    is_eco_kill,
    team_economy,
)


class TestClassifyEquipment:
    """Tests for the five equipment tiers."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (0, EconomyCategory.STARTER_PISTOL),
            (999, EconomyCategory.STARTER_PISTOL),
            (1000, EconomyCategory.UPGRADED_PISTOL),
            (1999, EconomyCategory.UPGRADED_PISTOL),
            (2000, EconomyCategory.SMG),
            (3500, EconomyCategory.RIFLE),
            (4749, EconomyCategory.RIFLE),
            (4750, EconomyCategory.AWP),
            (9000, EconomyCategory.AWP),
        ],
    )
    def test_thresholds(self, value, expected):
        """Each tier starts at its lower bound."""
        assert classify_equipment(value) == expected

    def test_missing_and_negative_values(self):
        """None and negative values are treated as zero."""
        assert classify_equipment(None) == EconomyCategory.STARTER_PISTOL
        assert classify_equipment(-300) == EconomyCategory.STARTER_PISTOL

    def test_tiers_are_ordered(self):
        """Tier differences are meaningful integers."""
        assert int(EconomyCategory.AWP) - int(EconomyCategory.STARTER_PISTOL) == 4
        assert EconomyCategory.RIFLE > EconomyCategory.SMG

    def test_label_round_trip(self):
        """Labels match the duel table keys."""
        assert EconomyCategory.UPGRADED_PISTOL.label == "upgraded_pistol"
        assert EconomyCategory.from_label("awp") == EconomyCategory.AWP

    def test_team_economy_uses_average(self):
        """A side is classified by its average equipment value."""
        assert team_economy([4000, 5000]) == EconomyCategory.RIFLE
        assert team_economy([800, 800, 5000]) == EconomyCategory.SMG
        assert team_economy([]) == EconomyCategory.STARTER_PISTOL


class TestEcoMultipliers:
    """Tests for ratio-banded kill value and death penalty."""

    def test_equipment_ratio_floors_denominator(self):
        """The denominator never drops below 100."""
        assert equipment_ratio(500, 0) == pytest.approx(5.0)
        assert equipment_ratio(500, 250) == pytest.approx(2.0)

    def test_pistol_killing_rifle(self):
        """A starter pistol killing a rifle is worth the top band."""
        assert eco_kill_value(800, 4700) == pytest.approx(1.80)
        assert eco_death_penalty(4700, 800) == pytest.approx(1.60)

    def test_rifle_killing_pistol(self):
        """A rifle killing a pistol is worth the floor."""
        assert eco_kill_value(4700, 800) == pytest.approx(0.70)
        assert eco_death_penalty(800, 4700) == pytest.approx(0.70)

    def test_equal_equipment(self):
        """Equal loadouts score 1.0 both ways."""
        assert eco_kill_value(4000, 4000) == pytest.approx(1.0)
        assert eco_death_penalty(4000, 4000) == pytest.approx(1.0)

    def test_band_boundaries_are_strict(self):
        """A ratio exactly on a bound falls into the band below it."""
        # ratio 4.0 is not > 4, so it lands in the > 2 band
        assert eco_kill_value(1000, 4000) == pytest.approx(1.50)
        # ratio 2.0 is not > 2, so it lands in the > 1.3 band
        assert eco_kill_value(2000, 4000) == pytest.approx(1.25)

    def test_middle_bands(self):
        """Slight advantages and disadvantages."""
        assert eco_kill_value(4000, 4600) == pytest.approx(1.10)  # 1.15
        assert eco_kill_value(4000, 3200) == pytest.approx(0.95)  # 0.80
        assert eco_kill_value(4000, 2400) == pytest.approx(0.85)  # 0.60


class TestEcoFlags:
    """Tests for eco / anti-eco kill flags."""

    def test_eco_kill(self):
        """Killing someone with more than twice the equipment is an eco kill."""
        assert is_eco_kill(800, 4700)
        assert not is_eco_kill(4000, 4000)

    def test_eco_flag_floor(self):
        """Attacker equipment is floored at 500 for the flags."""
        # 900 / max(200, 500) = 1.8
        assert not is_eco_kill(200, 900)

    def test_anti_eco_kill(self):
        """Killing someone with less than half the equipment is an anti-eco kill."""
        assert is_anti_eco_kill(4700, 800)
        assert not is_anti_eco_kill(800, 4700)
