"""Tests for probability data collection and table rebuilding."""

import threading

import pytest

from ecorating.core.config import ProbabilityConfig
from ecorating.core.constants import Team
from ecorating.probability.collector import ProbabilityDataCollector, load_tables


def _record_rounds(collector, count, winner=Team.TERRORIST, map_name="de_mirage"):
    for _ in range(count):
        collector.record_round_start()
        collector.record_state_snapshot(5, 5, False)
        collector.record_round_end(5, 4, False, winner, map_name)


class TestRecording:
    """Tests for recording outcomes."""

    def test_states_credited_to_winner(self):
        """Every state seen in a round is credited to the round winner."""
        collector = ProbabilityDataCollector()
        collector.record_round_start()
        collector.record_state_snapshot(5, 5, False)
        collector.record_state_snapshot(5, 4, False)
        collector.record_state_snapshot(5, 4, True)
        collector.record_round_end(5, 4, True, Team.TERRORIST, "mirage")

        data = collector.snapshot()
        assert data.total_rounds == 1
        assert data.state_outcomes["5v5_none"].t_wins == 1
        assert data.state_outcomes["5v4_planted"].t_wins == 1
        assert data.map_outcomes["de_mirage"].t_wins == 1

    def test_unfinished_round_dropped(self):
        """States of a round that never ended are discarded at the next start."""
        collector = ProbabilityDataCollector()
        collector.record_round_start()
        collector.record_state_snapshot(3, 3, False)
        collector.record_round_start()
        collector.record_state_snapshot(5, 5, False)
        collector.record_round_end(5, 5, False, Team.CT, "de_nuke")

        data = collector.snapshot()
        assert "3v3_none" not in data.state_outcomes
        assert data.state_outcomes["5v5_none"].ct_wins == 1

    def test_interleaved_sources_keep_their_states(self):
        """Two matches feeding one collector each credit only their own states."""
        collector = ProbabilityDataCollector()
        collector.record_round_start(source="a")
        collector.record_state_snapshot(5, 5, False, source="a")
        collector.record_round_start(source="b")
        collector.record_state_snapshot(4, 5, False, source="b")

        collector.record_round_end(5, 5, False, Team.TERRORIST, "de_mirage", source="a")
        data = collector.snapshot()
        assert data.state_outcomes["5v5_none"].t_wins == 1
        assert "4v5_none" not in data.state_outcomes

        collector.record_round_end(4, 5, False, Team.CT, "de_mirage", source="b")
        data = collector.snapshot()
        assert data.state_outcomes["4v5_none"].ct_wins == 1
        assert data.state_outcomes["5v5_none"].ct_wins == 0

    def test_kill_records_both_directions(self):
        """A kill is an attacker win forward and a defender win in reverse."""
        collector = ProbabilityDataCollector()
        collector.record_kill(4000, 800)

        data = collector.snapshot()
        assert data.total_kills == 1
        assert data.duel_outcomes["rifle_vs_starter_pistol"].attacker_wins == 1
        assert data.duel_outcomes["starter_pistol_vs_rifle"].defender_wins == 1

    def test_mirror_kill_recorded_once(self):
        collector = ProbabilityDataCollector()
        collector.record_kill(4000, 4000)

        data = collector.snapshot()
        assert data.duel_outcomes["rifle_vs_rifle"].attacker_wins == 1
        assert data.duel_outcomes["rifle_vs_rifle"].defender_wins == 0

    def test_stats(self):
        collector = ProbabilityDataCollector()
        _record_rounds(collector, 3)
        collector.record_kill(4000, 4000)
        assert collector.stats == (3, 1)

    def test_concurrent_updates(self):
        """Updates from several threads are all counted."""
        collector = ProbabilityDataCollector()

        def work():
            for _ in range(250):
                collector.record_kill(4000, 2500)

        threads = [threading.Thread(target=work) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert collector.stats[1] == 2000


class TestBuildTables:
    """Tests for rebuilding tables from observations."""

    def test_entries_above_floor_replace_defaults(self):
        collector = ProbabilityDataCollector()
        _record_rounds(collector, 10)

        tables = collector.build_tables(min_state_samples=10, min_map_samples=10)
        assert tables.base_win_probability(5, 5, False) == pytest.approx(1.0)
        assert tables.map_t_win_rate("de_mirage") == pytest.approx(1.0)

    def test_entries_below_floor_keep_defaults(self):
        collector = ProbabilityDataCollector()
        _record_rounds(collector, 9)

        tables = collector.build_tables(min_state_samples=10)
        assert tables.base_win_probability(5, 5, False) == pytest.approx(0.494)
        assert tables.map_t_win_rate("de_mirage") == pytest.approx(0.500)

    def test_duel_rates(self):
        """Duel rates are attacker wins over all observations of the matchup."""
        collector = ProbabilityDataCollector()
        for _ in range(3):
            collector.record_kill(4000, 2500)  # rifle beats smg
        collector.record_kill(2500, 4000)  # smg beats rifle

        tables = collector.build_tables(min_duel_samples=1)
        assert tables.duel_win_rates["rifle_vs_smg"] == pytest.approx(0.75)
        assert tables.duel_win_rates["smg_vs_rifle"] == pytest.approx(0.25)

    def test_mirror_duels_stay_even(self):
        collector = ProbabilityDataCollector()
        for _ in range(20):
            collector.record_kill(4000, 4000)

        tables = collector.build_tables(min_duel_samples=1)
        assert tables.duel_win_rates["rifle_vs_rifle"] == 0.5


class TestPersistence:
    """Tests for merging, saving and loading."""

    def test_merge(self):
        a = ProbabilityDataCollector()
        b = ProbabilityDataCollector()
        _record_rounds(a, 2, Team.TERRORIST)
        _record_rounds(b, 3, Team.CT)
        b.record_kill(4000, 800)

        a.merge(b)
        data = a.snapshot()
        assert data.total_rounds == 5
        assert data.total_kills == 1
        assert data.state_outcomes["5v5_none"].t_wins == 2
        assert data.state_outcomes["5v5_none"].ct_wins == 3

    def test_merge_with_self_is_noop(self):
        collector = ProbabilityDataCollector()
        _record_rounds(collector, 2)
        collector.merge(collector)
        assert collector.stats == (2, 0)

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "observations.json"
        collector = ProbabilityDataCollector()
        _record_rounds(collector, 4)
        collector.record_kill(800, 4000)
        collector.save(path)

        loaded = ProbabilityDataCollector()
        assert loaded.load(path)
        assert loaded.snapshot() == collector.snapshot()

    def test_load_missing_file(self, tmp_path):
        collector = ProbabilityDataCollector()
        assert collector.load(tmp_path / "missing.json") is False
        assert collector.stats == (0, 0)

    def test_to_dataframe(self):
        collector = ProbabilityDataCollector()
        _record_rounds(collector, 2)
        df = collector.to_dataframe()
        assert list(df.columns) == ["state", "t_wins", "ct_wins", "samples", "t_win_rate"]
        row = df[df["state"] == "5v5_none"].iloc[0]
        assert row["samples"] == 2
        assert row["t_win_rate"] == pytest.approx(1.0)


class TestLoadTables:
    """Tests for building tables from a probability config."""

    def test_no_file_configured(self):
        assert load_tables(ProbabilityConfig()) is None

    def test_missing_file(self, tmp_path):
        assert load_tables(ProbabilityConfig(tables_file=str(tmp_path / "nope.json"))) is None

    def test_builds_with_configured_floors(self, tmp_path):
        path = tmp_path / "observations.json"
        collector = ProbabilityDataCollector()
        _record_rounds(collector, 3, Team.CT)
        collector.save(path)

        tables = load_tables(ProbabilityConfig(tables_file=str(path), min_state_samples=3))
        assert tables is not None
        assert tables.base_win_probability(5, 5, False) == pytest.approx(0.0)
