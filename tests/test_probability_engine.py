"""Tests for RoundState and the win-probability engine."""

import pytest

from ecorating.core.constants import Team
from ecorating.economy import EconomyCategory
from ecorating.probability.engine import ProbabilityEngine, kill_value_multiplier, victim_penalty_multiplier
from ecorating.probability.state import RoundState


class TestRoundState:
    """Tests for the per-round state snapshot."""

    def test_negative_alive_count_rejected(self):
        with pytest.raises(ValueError):
            RoundState(t_alive=-1, ct_alive=5)

    def test_new_round_caps_roster(self):
        """Alive counts never exceed five."""
        state = RoundState.new_round(7, 5, "mirage")
        assert state.t_alive == 5
        assert state.map_name == "de_mirage"

    def test_record_death_floors_at_zero(self):
        state = RoundState.new_round(1, 1)
        state.record_death(Team.TERRORIST)
        state.record_death(Team.TERRORIST)
        assert state.t_alive == 0
        assert state.is_round_over

    def test_plant_starts_bomb_timer(self):
        """Planting sets 40 seconds; a second plant changes nothing."""
        state = RoundState.new_round(5, 5)
        state.set_bomb_planted()
        assert state.bomb_planted
        assert state.time_remaining == 40.0
        state.advance_clock(12.0)
        state.set_bomb_planted()
        assert state.time_remaining == 12.0

    def test_clock_never_runs_backwards(self):
        state = RoundState.new_round(5, 5)
        state.advance_clock(80.0)
        state.advance_clock(100.0)
        assert state.time_remaining == 80.0

    def test_state_key(self):
        state = RoundState.new_round(4, 3)
        assert state.state_key == "4v3_none"
        state.set_bomb_planted()
        assert state.state_key == "4v3_planted"

    def test_clone_is_independent(self):
        state = RoundState.new_round(5, 5)
        copy = state.clone()
        copy.record_death(Team.CT)
        assert state.ct_alive == 5


class TestWinProbability:
    """Tests for the adjustment pipeline."""

    @pytest.fixture
    def engine(self):
        return ProbabilityEngine()

    def test_even_state(self, engine):
        """5v5 mirror economies on no map is the table value."""
        state = RoundState.new_round(5, 5)
        assert engine.win_probability(state, Team.TERRORIST) == pytest.approx(0.494)
        assert engine.win_probability(state, Team.CT) == pytest.approx(0.506)

    def test_sides_sum_to_one(self, engine):
        state = RoundState.new_round(3, 2, "de_nuke", EconomyCategory.SMG, EconomyCategory.AWP)
        total = engine.win_probability(state, Team.TERRORIST) + engine.win_probability(state, Team.CT)
        assert total == pytest.approx(1.0)

    def test_economy_adjustment(self, engine):
        """AWP T side against starter pistols gets the full 1.20 multiplier."""
        state = RoundState.new_round(5, 5, t_economy=EconomyCategory.AWP, ct_economy=EconomyCategory.STARTER_PISTOL)
        assert engine.win_probability(state, Team.TERRORIST) == pytest.approx(0.494 * 1.20)
        assert engine.economy_multiplier(state) == pytest.approx(1.20)

    def test_map_adjustment(self, engine):
        """T-sided maps scale T probability by rate / 0.5."""
        state = RoundState.new_round(5, 5, "de_anubis")
        assert engine.win_probability(state, Team.TERRORIST) == pytest.approx(0.494 * 0.551 / 0.5)

    def test_bomb_time_adjustment(self, engine):
        """Little time left on the bomb favours T."""
        state = RoundState.new_round(5, 5)
        state.set_bomb_planted()
        assert engine.win_probability(state, Team.TERRORIST) == pytest.approx(0.806)
        state.advance_clock(15.0)
        assert engine.win_probability(state, Team.TERRORIST) == pytest.approx(0.806 * 1.03)
        state.advance_clock(4.0)
        assert engine.win_probability(state, Team.TERRORIST) == pytest.approx(0.806 * 1.15)

    def test_clamped_after_adjustments(self, engine):
        """Adjusted values are clamped into [0.01, 0.99]."""
        state = RoundState.new_round(5, 1)
        state.set_bomb_planted()
        state.advance_clock(3.0)
        assert engine.win_probability(state, Team.TERRORIST) == pytest.approx(0.99)

    def test_defuse_and_explosion_decide_round(self, engine):
        """A defuse is a CT win and an explosion a T win, within the clamp."""
        defused = RoundState.new_round(5, 1)
        defused.set_bomb_planted()
        defused.set_bomb_defused()
        assert engine.win_probability(defused, Team.CT) == pytest.approx(0.99)

        exploded = RoundState.new_round(1, 5)
        exploded.set_bomb_planted()
        exploded.set_bomb_exploded()
        assert engine.win_probability(exploded, Team.TERRORIST) == pytest.approx(0.99)


class TestSwingHelpers:
    """Tests for kill, plant and defuse deltas."""

    @pytest.fixture
    def engine(self):
        return ProbabilityEngine()

    def test_kill_swing_for_t(self, engine):
        """T killing a CT at 5v5 moves T from 0.494 to 0.712."""
        state = RoundState.new_round(5, 5)
        assert engine.kill_swing(state, Team.CT) == pytest.approx(0.712 - 0.494)
        assert state.ct_alive == 5

    def test_kill_swing_for_ct(self, engine):
        """CT killing a T at 5v5 moves CT from 0.506 to 0.698."""
        state = RoundState.new_round(5, 5)
        assert engine.kill_swing(state, Team.TERRORIST) == pytest.approx(0.698 - 0.506)

    def test_kill_swing_never_negative(self, engine):
        """A table dip after a kill is suppressed to zero."""
        state = RoundState.new_round(5, 1)
        assert engine.kill_swing(state, Team.CT) == 0.0

    def test_plant_swing(self, engine):
        state = RoundState.new_round(5, 5)
        assert engine.bomb_plant_swing(state) == pytest.approx(0.806 - 0.494)

    def test_defuse_swing(self, engine):
        """Defusing a 2v2 plant takes CT from 0.371 to 0.99."""
        state = RoundState.new_round(2, 2)
        state.set_bomb_planted()
        assert engine.bomb_defuse_swing(state) == pytest.approx(0.99 - 0.371)


class TestDuelMultipliers:
    """Tests for economy kill value and victim penalty scaling."""

    def test_even_duel(self):
        engine = ProbabilityEngine()
        assert engine.economy_adjusted_kill_value(4000, 4000) == pytest.approx(1.0)

    def test_underdog_kill(self):
        """A starter pistol beating a rifle is worth 0.5 / 0.252."""
        engine = ProbabilityEngine()
        assert engine.economy_adjusted_kill_value(500, 4000) == pytest.approx(0.5 / 0.252)

    def test_kill_value_cap(self):
        assert kill_value_multiplier(0.005) == 2.0
        assert kill_value_multiplier(0.25) == pytest.approx(2.0)

    def test_victim_penalty(self):
        """Dying in a duel you were favoured to win costs more."""
        assert victim_penalty_multiplier(0.5) == pytest.approx(1.0)
        assert victim_penalty_multiplier(0.252) == pytest.approx(1.496)
        assert victim_penalty_multiplier(0.748) == pytest.approx(0.504)
        assert victim_penalty_multiplier(0.0) == 2.0
