"""Tests for damage and flash bookkeeping."""

import pytest

from ecorating.swing.events import DamageContribution, FlashContribution
from ecorating.swing.tracker import ContributionTracker


class TestDamageTracking:
    """Tests for cumulative damage per attacker and victim."""

    def test_accumulates_damage(self):
        tracker = ContributionTracker()
        tracker.record_damage(1, 6, 40, 10.0)
        tracker.record_damage(1, 6, 27, 11.0)
        tracker.record_damage(2, 6, 33, 11.5)

        assert tracker.damage_by(1, 6) == 67
        assert tracker.damage_by(2, 6) == 33
        assert tracker.total_damage(6) == 100

    def test_ignores_self_and_zero_damage(self):
        tracker = ContributionTracker()
        tracker.record_damage(6, 6, 30, 10.0)
        tracker.record_damage(1, 6, 0, 10.0)
        assert tracker.total_damage(6) == 0
        assert tracker.damage_contributors(6) == ()

    def test_unknown_victim(self):
        tracker = ContributionTracker()
        assert tracker.total_damage(99) == 0
        assert tracker.damage_by(1, 99) == 0

    def test_contributor_order(self):
        """Most damage first, ties broken by ascending player id."""
        tracker = ContributionTracker()
        tracker.record_damage(3, 6, 20, 10.0)
        tracker.record_damage(2, 6, 50, 10.0)
        tracker.record_damage(1, 6, 20, 10.0)

        assert tracker.damage_contributors(6) == (
            DamageContribution(2, 50),
            DamageContribution(1, 20),
            DamageContribution(3, 20),
        )

    def test_cleared_victim_is_forgotten(self):
        tracker = ContributionTracker()
        tracker.record_damage(1, 6, 40, 10.0)
        tracker.record_flash(2, 6, 2.0)
        tracker.clear_victim(6)
        assert tracker.total_damage(6) == 0
        assert tracker.flash_contributors(6) == ()

    def test_reset(self):
        tracker = ContributionTracker()
        tracker.record_damage(1, 6, 40, 10.0)
        tracker.reset()
        assert tracker.total_damage(6) == 0


class TestFlashTracking:
    """Tests for flash assist eligibility."""

    def test_short_flashes_ignored(self):
        """Flashes under half a second never earn credit."""
        tracker = ContributionTracker()
        tracker.record_flash(1, 6, 0.4)
        assert tracker.flash_contributors(6) == ()

    def test_longest_flash_per_thrower(self):
        tracker = ContributionTracker()
        tracker.record_flash(1, 6, 1.0)
        tracker.record_flash(1, 6, 2.5)
        tracker.record_flash(2, 6, 2.5)
        tracker.record_flash(3, 6, 3.0)

        assert tracker.flash_contributors(6) == (
            FlashContribution(3, 3.0),
            FlashContribution(1, 2.5),
            FlashContribution(2, 2.5),
        )

    def test_self_flash_ignored(self):
        tracker = ContributionTracker()
        tracker.record_flash(6, 6, 3.0)
        assert tracker.flash_contributors(6) == ()


class TestTimeToKill:
    """Tests for engagement timing."""

    def test_time_from_first_damage(self):
        tracker = ContributionTracker()
        tracker.record_damage(1, 6, 30, 10.0)
        tracker.record_damage(1, 6, 30, 12.0)
        assert tracker.time_to_kill(1, 6, 13.0) == pytest.approx(3.0)

    def test_engagement_reanchors_after_timeout(self):
        """A gap longer than the timeout starts a new engagement."""
        tracker = ContributionTracker()
        tracker.record_damage(1, 6, 30, 10.0)
        tracker.record_damage(1, 6, 30, 20.0)
        assert tracker.time_to_kill(1, 6, 21.0) == pytest.approx(1.0)
        # cumulative damage is kept for credit splitting
        assert tracker.damage_by(1, 6) == 60

    def test_stale_engagement(self):
        tracker = ContributionTracker()
        tracker.record_damage(1, 6, 30, 10.0)
        assert tracker.time_to_kill(1, 6, 30.0) is None

    def test_no_damage(self):
        tracker = ContributionTracker()
        assert tracker.time_to_kill(1, 6, 30.0) is None
