"""
Tests for the streaming combat detectors.

Tests:
- Trade detection within and outside the window
- Clutch detection and settlement
"""

import pytest

from ecorating.core.constants import Team
from ecorating.domains.combat import (
    ClutchResult,
    ClutchTracker,
    TradeDetector,
)

T = Team.TERRORIST
CT = Team.CT


class TestTradeDetector:
    """Tests for trade kill detection."""

    def test_trade_within_window(self):
        """Killing your teammate's killer within 5s is a trade."""
        detector = TradeDetector()
        detector.reset(3)
        assert detector.record_kill(6, CT, 1, T, time=10.0) is None
        trade = detector.record_kill(2, T, 6, CT, time=15.0)

        assert trade is not None
        assert trade.trader_id == 2
        assert trade.traded_player_id == 1
        assert trade.original_attacker_id == 6
        assert trade.trade_speed == pytest.approx(5.0)
        assert trade.round_num == 3
        assert detector.trades == [trade]

    def test_outside_window(self):
        detector = TradeDetector()
        detector.record_kill(6, CT, 1, T, time=10.0)
        assert detector.record_kill(2, T, 6, CT, time=15.1) is None

    def test_trade_requires_avenging_a_teammate(self):
        """Only a kill that avenges a teammate is a trade."""
        detector = TradeDetector()
        detector.record_kill(1, T, 6, CT, time=10.0)
        assert detector.record_kill(7, CT, 1, T, time=11.0) is not None
        detector.reset()
        detector.record_kill(6, CT, 1, T, time=10.0)
        assert detector.record_kill(7, CT, 6, CT, time=11.0) is None

    def test_reset_forgets_recent_kills(self):
        detector = TradeDetector()
        detector.record_kill(6, CT, 1, T, time=10.0)
        detector.reset(2)
        assert detector.record_kill(2, T, 6, CT, time=11.0) is None

    def test_only_latest_kill_counts(self):
        """A player's earlier kill is replaced by their latest one."""
        detector = TradeDetector()
        detector.record_kill(6, CT, 1, T, time=10.0)
        detector.record_kill(6, CT, 2, T, time=12.0)
        trade = detector.record_kill(3, T, 6, CT, time=13.0)
        assert trade.traded_player_id == 2


class TestClutchTracker:
    """Tests for 1vX detection."""

    @pytest.fixture
    def tracker(self):
        tracker = ClutchTracker()
        tracker.reset(5, {1, 2, 3, 4, 5}, {6, 7, 8, 9, 10})
        return tracker

    def test_clutch_size_when_last_alive(self, tracker):
        """The clutch size is the enemy count when the player is left alone."""
        for victim in (1, 2, 3, 4):
            tracker.record_kill(6, victim, T, time=float(victim))
        tracker.record_kill(5, 6, CT, time=20.0)

        [clutch] = tracker.finish_round(T)
        assert clutch.clutcher_id == 5
        assert clutch.scenario == "1v5"
        assert clutch.enemies_alive == 5
        assert clutch.result == ClutchResult.WON
        assert clutch.won

    def test_lost_clutch(self, tracker):
        for victim in (1, 2, 3, 4):
            tracker.record_kill(6, victim, T, time=float(victim))
        for victim in (6, 7, 8):
            tracker.record_kill(5, victim, CT, time=10.0 + victim)
        [clutch] = tracker.finish_round(CT)
        assert clutch.enemies_alive == 5
        assert clutch.result == ClutchResult.LOST

    def test_both_sides_can_clutch(self, tracker):
        """A 1v1 gives both remaining players an attempt."""
        for victim in (1, 2, 3, 4):
            tracker.record_kill(6, victim, T, time=float(victim))
        for victim in (6, 7, 8, 9):
            tracker.record_kill(5, victim, CT, time=10.0 + victim)

        clutches = {c.clutcher_id: c for c in tracker.finish_round(T)}
        assert clutches[5].enemies_alive == 5
        assert clutches[10].enemies_alive == 1
        assert clutches[5].won
        assert not clutches[10].won

    def test_smaller_roster(self, tracker):
        tracker.reset(1, {1, 2}, {6, 7})
        tracker.record_kill(6, 1, T, time=1.0)
        [clutch] = tracker.finish_round(CT)
        assert clutch.clutcher_id == 2
        assert clutch.scenario == "1v2"
        assert not clutch.won

    def test_finish_round_clears(self, tracker):
        tracker.finish_round(T)
        assert tracker.finish_round(CT) == []
        assert tracker.alive(T) == {1, 2, 3, 4, 5}
