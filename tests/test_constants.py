"""Tests for sides, round structure and map names."""

import pytest

from ecorating.core.constants import Team, is_pistol_round, normalize_map_name, ticks_to_seconds


class TestTeam:
    """Tests for side parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [(2, Team.TERRORIST), (3, Team.CT), ("T", Team.TERRORIST), ("ct", Team.CT), ("Terrorist", Team.TERRORIST)],
    )
    def test_from_value(self, value, expected):
        assert Team.from_value(value) == expected

    def test_unknown_label(self):
        assert Team.from_value("spectator") == Team.UNASSIGNED

    def test_opponent(self):
        assert Team.TERRORIST.opponent == Team.CT
        assert Team.CT.opponent == Team.TERRORIST
        assert Team.SPECTATOR.opponent == Team.UNASSIGNED


class TestRoundStructure:
    """Tests for pistol round detection."""

    @pytest.mark.parametrize("round_number", [1, 13, 25, 31, 37])
    def test_pistol_rounds(self, round_number):
        assert is_pistol_round(round_number)

    @pytest.mark.parametrize("round_number", [2, 12, 14, 24, 26, 30])
    def test_other_rounds(self, round_number):
        assert not is_pistol_round(round_number)

    def test_ticks_to_seconds(self):
        assert ticks_to_seconds(320) == pytest.approx(5.0)
        assert ticks_to_seconds(100, tick_rate=0) == 0.0


class TestMapNames:
    """Tests for map name normalization."""

    @pytest.mark.parametrize(
        "name,expected",
        [("mirage", "de_mirage"), ("DE_Nuke", "de_nuke"), ("maps/de_inferno", "de_inferno"), ("", ""), (None, "")],
    )
    def test_normalize(self, name, expected):
        assert normalize_map_name(name) == expected
