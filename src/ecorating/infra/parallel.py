"""
Parallel Processing Module for Batch Match Scoring

Implements:
- Scoring many independent matches simultaneously (process or thread pool)
- Per-match failure isolation and progress tracking
- Single-threaded reduction of per-match results into multi-match totals
- Leaderboard export via pandas

Each worker builds its own MatchProcessor; nothing is shared between
matches while they are scored. Observations for table rebuilding are
returned by the workers as snapshots and merged afterwards.
"""

from __future__ import annotations

import hashlib
import logging
import os
import threading
import time
from collections.abc import Callable, Iterable
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

from ecorating.analysis.models import MatchResult, PlayerMatchStats
from ecorating.core.config import EcoRatingConfig, get_config
from ecorating.probability.collector import CollectedData, ProbabilityDataCollector
from ecorating.probability.tables import ProbabilityTables
from ecorating.rating.composer import RatingComposer

logger = logging.getLogger(__name__)

# Default to CPU count - 1, minimum 1
DEFAULT_WORKERS = max(1, (os.cpu_count() or 4) - 1)
MAX_WORKERS = os.cpu_count() or 8


@dataclass
class MatchScoringTask:
    """A single match scoring task."""

    match_path: Path
    task_id: str = ""
    collect: bool = False  # also return probability observations

    def __post_init__(self):
        if not self.task_id:
            self.task_id = hashlib.md5(str(self.match_path).encode(), usedforsecurity=False).hexdigest()[:12]


@dataclass
class MatchScoringResult:
    """Result of a single match scoring."""

    task_id: str
    match_path: str
    success: bool
    duration_seconds: float
    error_message: str | None = None
    match: MatchResult | None = None
    observations: CollectedData | None = None

    def to_dict(self, include_rounds: bool = False) -> dict[str, Any]:
        return {
            "task_id": self.task_id,
            "match_path": self.match_path,
            "success": self.success,
            "duration_seconds": round(self.duration_seconds, 3),
            "error_message": self.error_message,
            "match": self.match.to_dict(include_rounds=include_rounds) if self.match is not None else None,
        }


@dataclass
class BatchProgress:
    """Progress tracking for batch scoring."""

    total_tasks: int
    completed_tasks: int = 0
    failed_tasks: int = 0
    current_task: str = ""
    start_time: float = field(default_factory=time.time)

    @property
    def progress_percent(self) -> float:
        if self.total_tasks == 0:
            return 100.0
        return round((self.completed_tasks / self.total_tasks) * 100, 1)

    @property
    def elapsed_seconds(self) -> float:
        return time.time() - self.start_time

    @property
    def estimated_remaining_seconds(self) -> float:
        if self.completed_tasks == 0:
            return 0.0
        avg_time_per_task = self.elapsed_seconds / self.completed_tasks
        remaining_tasks = self.total_tasks - self.completed_tasks
        return avg_time_per_task * remaining_tasks


@dataclass
class BatchScoringResult:
    """Result of batch scoring."""

    total_matches: int
    successful: int
    failed: int
    total_duration_seconds: float
    results: list[MatchScoringResult] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        if self.total_matches == 0:
            return 0.0
        return round((self.successful / self.total_matches) * 100, 1)

    @property
    def matches(self) -> list[MatchResult]:
        """Successful match results, in task order."""
        return [r.match for r in self.results if r.success and r.match is not None]

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_matches": self.total_matches,
            "successful": self.successful,
            "failed": self.failed,
            "success_rate": self.success_rate,
            "total_duration_seconds": round(self.total_duration_seconds, 2),
            "results": [r.to_dict() for r in self.results],
        }


def _score_single_match(
    task: MatchScoringTask,
    config: EcoRatingConfig,
    tables: ProbabilityTables | None,
) -> MatchScoringResult:
    """
    Worker function to score a single match.
    This may run in a separate process.
    """
    start_time = time.time()

    try:
        # Import here to keep the worker entry point light for pickling
        from ecorating.pipeline.orchestrator import score_match_file

        collector = ProbabilityDataCollector() if task.collect else None
        match = score_match_file(task.match_path, config=config, tables=tables, collector=collector)

        return MatchScoringResult(
            task_id=task.task_id,
            match_path=str(task.match_path),
            success=True,
            duration_seconds=time.time() - start_time,
            match=match,
            observations=collector.snapshot() if collector is not None else None,
        )

    except Exception as e:
        logger.error(f"Failed to score {task.match_path}: {e}")
        return MatchScoringResult(
            task_id=task.task_id,
            match_path=str(task.match_path),
            success=False,
            duration_seconds=time.time() - start_time,
            error_message=str(e),
        )


class ParallelMatchScorer:
    """
    Parallel match scorer.

    Usage:
        scorer = ParallelMatchScorer(workers=4)
        batch = scorer.score_batch([Path("match1.json"), Path("match2.json")])
    """

    def __init__(
        self,
        workers: int = DEFAULT_WORKERS,
        use_processes: bool = False,
        progress_callback: Callable[[BatchProgress], None] | None = None,
        config: EcoRatingConfig | None = None,
        tables: ProbabilityTables | None = None,
        collector: ProbabilityDataCollector | None = None,
    ):
        """
        Initialize the parallel scorer.

        Args:
            workers: Number of worker processes/threads
            use_processes: If True, use ProcessPoolExecutor; if False, use ThreadPoolExecutor
            progress_callback: Optional callback for progress updates
            config: Scoring configuration (global config when omitted)
            tables: Probability tables (defaults when omitted)
            collector: Optional collector that receives every match's observations
        """
        self.workers = max(1, min(workers, MAX_WORKERS))
        self.use_processes = use_processes
        self.progress_callback = progress_callback
        self.config = config or get_config()
        self.tables = tables
        self.collector = collector

        logger.info(f"ParallelMatchScorer initialized with {self.workers} workers")

    @classmethod
    def from_config(
        cls,
        config: EcoRatingConfig,
        tables: ProbabilityTables | None = None,
        collector: ProbabilityDataCollector | None = None,
        progress_callback: Callable[[BatchProgress], None] | None = None,
    ) -> ParallelMatchScorer:
        workers = config.batch.workers if config.batch.workers > 0 else DEFAULT_WORKERS
        return cls(
            workers=workers,
            use_processes=config.batch.use_processes,
            progress_callback=progress_callback,
            config=config,
            tables=tables,
            collector=collector,
        )

    def score_batch(self, match_paths: list[Path], timeout_per_match: int = 300) -> BatchScoringResult:
        """
        Score multiple matches in parallel.

        Args:
            match_paths: List of paths to match event files
            timeout_per_match: Timeout in seconds per match

        Returns:
            BatchScoringResult with all results, in input order
        """
        if not match_paths:
            return BatchScoringResult(total_matches=0, successful=0, failed=0, total_duration_seconds=0.0)

        collect = self.collector is not None
        tasks = [MatchScoringTask(match_path=Path(path), collect=collect) for path in match_paths]

        progress = BatchProgress(total_tasks=len(tasks))
        start_time = time.time()
        results: dict[str, MatchScoringResult] = {}

        ExecutorClass = ProcessPoolExecutor if self.use_processes else ThreadPoolExecutor

        logger.info(f"Starting batch scoring of {len(tasks)} matches with {self.workers} workers")

        with ExecutorClass(max_workers=self.workers) as executor:
            future_to_task = {
                executor.submit(_score_single_match, task, self.config, self.tables): task for task in tasks
            }

            for future in as_completed(future_to_task, timeout=timeout_per_match * len(tasks)):
                task = future_to_task[future]
                progress.current_task = str(task.match_path)

                try:
                    result = future.result(timeout=timeout_per_match)
                except Exception as e:
                    logger.error(f"Task {task.task_id} failed: {e}")
                    result = MatchScoringResult(
                        task_id=task.task_id,
                        match_path=str(task.match_path),
                        success=False,
                        duration_seconds=0.0,
                        error_message=str(e),
                    )

                results[task.task_id] = result
                progress.completed_tasks += 1
                if not result.success:
                    progress.failed_tasks += 1

                if self.progress_callback:
                    self.progress_callback(progress)

        # Single-threaded reduction, in input order so totals are reproducible
        ordered = [results[task.task_id] for task in tasks]
        if self.collector is not None:
            for result in ordered:
                if result.observations is not None:
                    self.collector.merge_data(result.observations)

        total_duration = time.time() - start_time
        successful = sum(1 for r in ordered if r.success)

        logger.info(f"Batch scoring complete: {successful}/{len(ordered)} successful in {total_duration:.1f}s")

        return BatchScoringResult(
            total_matches=len(ordered),
            successful=successful,
            failed=len(ordered) - successful,
            total_duration_seconds=total_duration,
            results=ordered,
        )

    def score_directory(self, directory: Path, recursive: bool = True, pattern: str = "*.json") -> BatchScoringResult:
        """
        Score all match files in a directory.

        Args:
            directory: Directory to scan for match event files
            recursive: Whether to scan subdirectories
            pattern: File name pattern

        Returns:
            BatchScoringResult with all results
        """
        glob_pattern = f"**/{pattern}" if recursive else pattern
        match_paths = sorted(Path(directory).glob(glob_pattern))

        logger.info(f"Found {len(match_paths)} match files in {directory}")

        return self.score_batch(match_paths)


class MatchAggregator:
    """
    Multi-match player totals.

    Every update takes the aggregator's lock, so results may be added from
    worker callbacks; adding them after the batch completes, in a fixed
    order, gives reproducible totals.
    """

    def __init__(self, composer: RatingComposer | None = None):
        self.composer = composer if composer is not None else RatingComposer()
        self._lock = threading.Lock()
        self._players: dict[int, PlayerMatchStats] = {}
        self._matches = 0

    def add(self, match: MatchResult) -> None:
        with self._lock:
            self._matches += 1
            for player_id, stats in match.players.items():
                total = self._players.get(player_id)
                if total is None:
                    total = PlayerMatchStats(player_id=player_id, name=stats.name, team=stats.team)
                    self._players[player_id] = total
                total.merge(stats)

    def add_all(self, matches: Iterable[MatchResult]) -> None:
        for match in matches:
            self.add(match)

    @property
    def match_count(self) -> int:
        with self._lock:
            return self._matches

    def players(self) -> dict[int, PlayerMatchStats]:
        """Multi-match totals, re-rated over all rounds."""
        with self._lock:
            for stats in self._players.values():
                self.composer.rate_player(stats)
            return dict(self._players)

    def to_dataframe(self) -> pd.DataFrame:
        """Leaderboard of multi-match totals, best rating first."""
        rows = [
            {
                "player_id": p.player_id,
                "name": p.name,
                "rounds": p.rounds_played,
                "rating": round(p.final_rating, 3),
                "swing_rating": round(p.swing_rating, 3),
                "hltv_rating": round(p.hltv_rating, 3),
                "kills": p.kills,
                "deaths": p.deaths,
                "adr": round(p.adr, 1),
                "kast": round(p.kast, 3),
                "swing_per_round": round(p.swing_per_round, 4),
            }
            for p in self.players().values()
        ]
        columns = [
            "player_id",
            "name",
            "rounds",
            "rating",
            "swing_rating",
            "hltv_rating",
            "kills",
            "deaths",
            "adr",
            "kast",
            "swing_per_round",
        ]
        df = pd.DataFrame(rows, columns=columns)
        if not df.empty:
            df = df.sort_values(["rating", "player_id"], ascending=[False, True]).reset_index(drop=True)
        return df


# Convenience functions


def score_matches_parallel(
    match_paths: list[Path],
    workers: int = DEFAULT_WORKERS,
    config: EcoRatingConfig | None = None,
) -> BatchScoringResult:
    """
    Convenience function to score multiple matches in parallel.

    Args:
        match_paths: List of match event files
        workers: Number of parallel workers
        config: Scoring configuration

    Returns:
        BatchScoringResult
    """
    scorer = ParallelMatchScorer(workers=workers, config=config)
    return scorer.score_batch(match_paths)
