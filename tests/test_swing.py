"""Tests for the swing calculator and the live swing orchestrator."""

import pytest

from ecorating.core.constants import Team
from ecorating.swing.calculator import SwingCalculator, bomb_time_left
from ecorating.swing.events import BombPlantEvent, KillEvent, RoundResult
from ecorating.swing.orchestrator import ClutchOutcome, SwingOrchestrator
from ecorating.probability.state import RoundState


def rifle_kill(killer_id=1, victim_id=6, killer_side=Team.TERRORIST, victim_side=Team.CT, **kwargs) -> KillEvent:
    return KillEvent(
        time=kwargs.pop("time", 10.0),
        killer_id=killer_id,
        victim_id=victim_id,
        killer_side=killer_side,
        victim_side=victim_side,
        killer_equip=kwargs.pop("killer_equip", 4000),
        victim_equip=kwargs.pop("victim_equip", 4000),
        **kwargs,
    )


class TestSwingCalculator:
    """Tests for single-event swing."""

    @pytest.fixture
    def calculator(self):
        return SwingCalculator()

    def test_even_kill(self, calculator):
        """Rifle vs rifle at 5v5 is worth the raw table delta."""
        result = calculator.kill_swing(RoundState.new_round(5, 5), rifle_kill())
        assert result.raw_swing == pytest.approx(0.218)
        assert result.eco_multiplier == pytest.approx(1.0)
        assert result.killer_swing == pytest.approx(0.218)
        assert result.victim_swing == pytest.approx(0.218)

    def test_underdog_kill(self, calculator):
        """A pistol beating a rifle is boosted; the rifle victim pays more."""
        result = calculator.kill_swing(RoundState.new_round(5, 5), rifle_kill(killer_equip=500))
        assert result.duel_win_rate == pytest.approx(0.252)
        assert result.eco_multiplier == pytest.approx(0.5 / 0.252)
        assert result.killer_swing == pytest.approx(0.218 * 0.5 / 0.252)
        assert result.victim_swing == pytest.approx(0.218 * 1.496)

    def test_state_not_modified(self, calculator):
        state = RoundState.new_round(5, 5)
        calculator.kill_swing(state, rifle_kill())
        assert state.ct_alive == 5

    def test_plant_and_defuse_credit(self, calculator):
        delta, credit = calculator.bomb_plant_swing(RoundState.new_round(5, 5))
        assert delta == pytest.approx(0.312)
        assert credit == pytest.approx(0.15)

        planted = RoundState.new_round(2, 2)
        planted.set_bomb_planted()
        delta, credit = calculator.bomb_defuse_swing(planted)
        assert delta == pytest.approx(0.619)
        assert credit == pytest.approx(0.619 * 0.8)

    def test_save_penalties(self, calculator):
        """Only survivors of the losing side are penalised."""
        result = RoundResult(
            winner=Team.TERRORIST,
            survivors=(1, 6, 7),
            survivor_sides={1: Team.TERRORIST, 6: Team.CT, 7: Team.CT},
        )
        assert calculator.save_penalties(result) == {6: 0.02, 7: 0.02}
        assert calculator.save_penalties(None) == {}

    def test_replay_rejects_unknown_events(self, calculator):
        with pytest.raises(TypeError):
            calculator.calculate_round_swing([object()], RoundState.new_round(5, 5))

    def test_replay_does_not_touch_initial_state(self, calculator):
        initial = RoundState.new_round(5, 5)
        calculator.calculate_round_swing([rifle_kill(), BombPlantEvent(time=20.0, planter_id=2)], initial)
        assert initial.ct_alive == 5
        assert not initial.bomb_planted

    def test_replay_side_totals(self, calculator):
        events = [
            rifle_kill(time=10.0),
            rifle_kill(killer_id=7, victim_id=2, killer_side=Team.CT, victim_side=Team.TERRORIST, time=15.0),
        ]
        result = calculator.calculate_round_swing(events, RoundState.new_round(5, 5))
        assert result.player_swings[1] == pytest.approx(0.218)
        assert result.player_swings[6] == pytest.approx(-0.218)
        total = sum(result.player_swings.values())
        assert result.total_t_swing + result.total_ct_swing == pytest.approx(total)

    def test_bomb_time_left(self):
        assert bomb_time_left(10.0, 25.0) == pytest.approx(25.0)
        assert bomb_time_left(10.0, 80.0) == 0.0
        assert bomb_time_left(10.0, 5.0) == pytest.approx(40.0)


class TestSwingOrchestrator:
    """Tests for live, event-at-a-time tracking."""

    @pytest.fixture
    def orch(self):
        orch = SwingOrchestrator()
        orch.start_round(5, 5, "de_mirage", t_equipment=4000, ct_equipment=4000)
        return orch

    def test_events_require_a_round(self):
        orch = SwingOrchestrator()
        with pytest.raises(RuntimeError):
            orch.record_kill(1, 6, Team.TERRORIST, Team.CT, 4000, 4000, time=10.0)
        with pytest.raises(RuntimeError):
            orch.record_damage(1, 6, 50, time=5.0)

    def test_kill_updates_state(self, orch):
        orch.record_kill(1, 6, Team.TERRORIST, Team.CT, 4000, 4000, time=10.0)
        assert orch.state.ct_alive == 4
        assert orch.player_swing[1] == pytest.approx(0.218)
        assert orch.player_swing[6] == pytest.approx(-0.218)

    def test_damage_assist_conserves_swing(self, orch):
        """Killer and assister together receive exactly the kill's delta."""
        orch.record_damage(2, 6, 100, time=8.0)
        orch.record_kill(1, 6, Team.TERRORIST, Team.CT, 4000, 4000, time=10.0)
        assert orch.player_swing[2] == pytest.approx(0.218 * 0.25)
        assert orch.player_swing[1] + orch.player_swing[2] == pytest.approx(0.218)

    def test_victim_contributions_cleared(self, orch):
        orch.record_damage(2, 6, 50, time=8.0)
        orch.record_kill(1, 6, Team.TERRORIST, Team.CT, 4000, 4000, time=10.0)
        assert orch.tracker.total_damage(6) == 0

    def test_duplicate_plant_ignored(self, orch):
        first = orch.record_bomb_plant(3, time=30.0)
        assert first == pytest.approx(0.15)
        assert orch.record_bomb_plant(3, time=31.0) == 0.0
        assert orch.player_swing[3] == pytest.approx(0.15)

    def test_bomb_clock_follows_plant(self, orch):
        """Forty seconds from the plant at 30 s leaves 15 s at 55 s."""
        orch.record_bomb_plant(3, time=30.0)
        orch.record_kill(6, 1, Team.CT, Team.TERRORIST, 4000, 4000, time=55.0)
        assert orch.state.time_remaining == pytest.approx(15.0)

    def test_end_round_penalties_and_clutch(self, orch):
        orch.record_kill(1, 6, Team.TERRORIST, Team.CT, 4000, 4000, time=10.0)
        result = RoundResult(
            winner=Team.TERRORIST,
            survivors=(1, 7),
            survivor_sides={1: Team.TERRORIST, 7: Team.CT},
        )
        summary = orch.end_round(
            result,
            clutches=[ClutchOutcome(player_id=1, clutch_size=2, won=True), ClutchOutcome(9, 1, False)],
        )

        assert summary.save_penalties == {7: 0.02}
        assert summary.clutch_bonuses == {1: pytest.approx(0.10)}
        assert not orch.in_round
        assert orch.total_swing(1) == pytest.approx(0.218 + 0.10)
        assert orch.total_swing(7) == pytest.approx(-0.02)

    def test_summary_keeps_events_and_initial_state(self, orch):
        orch.record_kill(1, 6, Team.TERRORIST, Team.CT, 4000, 4000, time=10.0)
        orch.record_bomb_plant(2, time=30.0)
        summary = orch.end_round(RoundResult(winner=Team.TERRORIST))

        assert len(summary.events) == 2
        assert orch.initial_state.ct_alive == 5
        assert orch.round_number == 1

    def test_replay_matches_live(self, orch):
        """Replaying the recorded events reproduces the live per-player swing."""
        orch.record_damage(2, 6, 60, time=5.0)
        orch.record_flash(3, 6, 2.0)
        orch.record_kill(1, 6, Team.TERRORIST, Team.CT, 4000, 4000, time=8.0)
        orch.record_kill(7, 1, Team.CT, Team.TERRORIST, 4000, 4000, time=12.0, is_trade=True, traded_player_id=6)
        orch.record_bomb_plant(2, time=40.0)
        orch.record_damage(2, 7, 100, time=50.0)
        orch.record_kill(2, 7, Team.TERRORIST, Team.CT, 4000, 4000, time=50.0)
        orch.record_bomb_defuse(8, time=70.0)
        summary = orch.end_round(RoundResult(winner=Team.CT))

        replay = orch.calculator.calculate_round_swing(summary.events, orch.initial_state)
        assert replay.player_swings.keys() == summary.player_swings.keys()
        for player_id, amount in summary.player_swings.items():
            assert replay.player_swings[player_id] == pytest.approx(amount)

    def test_out_of_order_times_clamped(self, orch):
        orch.record_kill(1, 6, Team.TERRORIST, Team.CT, 4000, 4000, time=20.0)
        orch.record_kill(2, 7, Team.TERRORIST, Team.CT, 4000, 4000, time=15.0)
        assert orch.round_events[1].time == 20.0

    def test_start_round_resets(self, orch):
        orch.record_damage(2, 6, 60, time=5.0)
        orch.end_round(RoundResult(winner=Team.CT))
        orch.start_round(5, 5)
        assert orch.tracker.total_damage(6) == 0
        assert orch.round_number == 2
