"""
EcoRating CLI - Command Line Interface

Provides commands for:
- Rating a single match from its event file
- Rating a directory of matches and aggregating players across them
- Rebuilding probability tables from collected observations
- Writing a default configuration file
"""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from ecorating import __version__
from ecorating.analysis.hltv_rating import get_rating_tier
from ecorating.analysis.models import MatchResult
from ecorating.core.config import EcoRatingConfig, generate_default_config, load_config, set_config, setup_logging
from ecorating.infra.parallel import BatchProgress, MatchAggregator, ParallelMatchScorer
from ecorating.pipeline.orchestrator import score_match_file
from ecorating.probability.collector import ProbabilityDataCollector, load_tables
from ecorating.probability.tables import ProbabilityTables
from ecorating.rating.composer import RatingComposer

app = typer.Typer(
    name="ecorating",
    help="Economy-aware probabilistic impact rating for CS2 matches",
    add_completion=False,
)
console = Console()
logger = logging.getLogger(__name__)

_state: dict[str, EcoRatingConfig] = {}


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]EcoRating[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose output"),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (.yaml, .toml or .json)",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """EcoRating - probabilistic impact attribution for CS2"""
    config = load_config(config_file)
    if verbose:
        config.logging.level = "DEBUG"
    setup_logging(config.logging)
    set_config(config)
    _state["config"] = config


def _config() -> EcoRatingConfig:
    return _state.get("config") or load_config()


def _tables(config: EcoRatingConfig, observations: Optional[Path]) -> Optional[ProbabilityTables]:
    if observations is not None:
        config.probability.tables_file = str(observations)
    return load_tables(config.probability)


def _leaderboard_table(title: str, players) -> Table:
    table = Table(title=title)
    table.add_column("Player", style="cyan")
    table.add_column("Rating", justify="right", style="bold green")
    table.add_column("Swing", justify="right")
    table.add_column("HLTV", justify="right")
    table.add_column("K", justify="right")
    table.add_column("D", justify="right")
    table.add_column("ADR", justify="right")
    table.add_column("KAST", justify="right")
    table.add_column("Swing/Rnd", justify="right")
    table.add_column("Tier", style="magenta")

    for p in players:
        table.add_row(
            p.name or str(p.player_id),
            f"{p.final_rating:.2f}",
            f"{p.swing_rating:.2f}",
            f"{p.hltv_rating:.2f}",
            str(p.kills),
            str(p.deaths),
            f"{p.adr:.1f}",
            f"{p.kast * 100:.0f}%",
            f"{p.swing_per_round * 100:+.1f}%",
            get_rating_tier(p.final_rating),
        )
    return table


def _write_json(path: Path, payload: dict, indent: int) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=indent)
    console.print(f"\n[green]Results exported to:[/green] {path}")


@app.command()
def rate(
    events_path: Path = typer.Argument(
        ...,
        help="Match event file (.json)",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the scored match as JSON"),
    observations: Optional[Path] = typer.Option(
        None, "--tables", "-t", help="Collected observations to rebuild probability tables from"
    ),
    collect: Optional[Path] = typer.Option(
        None, "--collect", help="Add this match's observations to a collector file"
    ),
    rounds: bool = typer.Option(False, "--rounds", help="Show the per-round swing breakdown"),
) -> None:
    """
    Score a single match and display the leaderboard.
    """
    config = _config()
    tables = _tables(config, observations)
    collector = ProbabilityDataCollector.from_file(collect) if collect else None

    try:
        result = score_match_file(events_path, config=config, tables=tables, collector=collector)
    except Exception as e:
        console.print(f"[red]Error scoring match:[/red] {e}")
        raise typer.Exit(1)

    _display_match(result, show_rounds=rounds)

    if collector is not None and collect is not None:
        collector.save(collect)
    if output:
        _write_json(
            output,
            result.to_dict(include_rounds=config.export.include_round_breakdowns),
            config.export.json_indent,
        )


def _display_match(result: MatchResult, show_rounds: bool = False) -> None:
    info_table = Table(title="Match Information", show_header=False)
    info_table.add_column("Property", style="cyan")
    info_table.add_column("Value", style="green")
    info_table.add_row("Match", result.match_id or "-")
    info_table.add_row("Map", result.map_name or "-")
    info_table.add_row("Rounds", str(result.rounds_played))
    info_table.add_row("Skipped", str(result.skipped_rounds))
    info_table.add_row("Score (T-CT)", f"{result.t_rounds_won}-{result.ct_rounds_won}")
    console.print(info_table)
    console.print()

    console.print(_leaderboard_table("Leaderboard", result.leaderboard()))

    if not show_rounds:
        return
    for player in result.leaderboard():
        table = Table(title=f"Rounds - {player.name or player.player_id}")
        table.add_column("Round", justify="right")
        table.add_column("Side")
        table.add_column("Swing", justify="right")
        table.add_column("Impact")
        for breakdown in player.round_breakdowns:
            table.add_row(
                str(breakdown.round_number),
                breakdown.player_side,
                f"{breakdown.probability_swing * 100:+.1f}%",
                ", ".join(breakdown.impact_factors),
            )
        console.print(table)


@app.command()
def batch(
    directory: Path = typer.Argument(
        ...,
        help="Directory of match event files",
        exists=True,
        file_okay=False,
        resolve_path=True,
    ),
    pattern: str = typer.Option("*.json", "--pattern", "-p", help="Match file pattern"),
    recursive: bool = typer.Option(True, "--recursive/--no-recursive", help="Scan subdirectories"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", help="Number of parallel workers"),
    processes: bool = typer.Option(False, "--processes", help="Use a process pool instead of threads"),
    observations: Optional[Path] = typer.Option(
        None, "--tables", "-t", help="Collected observations to rebuild probability tables from"
    ),
    collect: Optional[Path] = typer.Option(
        None, "--collect", help="Write the batch's observations to a collector file"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the aggregated leaderboard (.csv or .json)"
    ),
) -> None:
    """
    Score every match in a directory and aggregate players across matches.
    """
    config = _config()
    if workers is not None:
        config.batch.workers = workers
    if processes:
        config.batch.use_processes = True

    tables = _tables(config, observations)
    collector = ProbabilityDataCollector.from_file(collect) if collect else None

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        console=console,
    ) as progress:
        task = progress.add_task("Scoring matches...", total=None)

        def on_progress(state: BatchProgress) -> None:
            progress.update(task, total=state.total_tasks, completed=state.completed_tasks)

        scorer = ParallelMatchScorer.from_config(
            config, tables=tables, collector=collector, progress_callback=on_progress
        )
        batch_result = scorer.score_directory(directory, recursive=recursive, pattern=pattern)

    console.print(
        f"Scored [green]{batch_result.successful}[/green] of {batch_result.total_matches} matches "
        f"in {batch_result.total_duration_seconds:.1f}s"
    )
    for failed in (r for r in batch_result.results if not r.success):
        console.print(f"[red]Failed:[/red] {failed.match_path} - {failed.error_message}")

    if batch_result.successful == 0:
        raise typer.Exit(1)

    aggregator = MatchAggregator(RatingComposer.from_config(config.rating))
    aggregator.add_all(batch_result.matches)
    players = sorted(aggregator.players().values(), key=lambda p: (-p.final_rating, p.player_id))
    console.print(_leaderboard_table(f"Leaderboard ({aggregator.match_count} matches)", players))

    if collector is not None and collect is not None:
        collector.save(collect)

    if output:
        df = aggregator.to_dataframe()
        if output.suffix.lower() == ".csv":
            df.to_csv(output, index=False)
            console.print(f"\n[green]Leaderboard exported to:[/green] {output}")
        else:
            _write_json(output, {"players": df.to_dict(orient="records")}, config.export.json_indent)


@app.command("build-tables")
def build_tables(
    data_path: Path = typer.Argument(
        ...,
        help="Collected observations file (.json)",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the built tables as JSON"),
    show_states: bool = typer.Option(False, "--states", help="Show observed state outcomes"),
) -> None:
    """
    Rebuild probability tables from collected observations.
    """
    config = _config()
    collector = ProbabilityDataCollector.from_file(data_path)
    total_rounds, total_kills = collector.stats

    tables = collector.build_tables(
        min_state_samples=config.probability.min_state_samples,
        min_duel_samples=config.probability.min_duel_samples,
        min_map_samples=config.probability.min_map_samples,
    )
    payload = tables.to_dict()

    panel = Panel(
        f"[cyan]Rounds observed:[/cyan] {total_rounds}\n"
        f"[cyan]Kills observed:[/cyan] {total_kills}\n"
        f"[cyan]State entries:[/cyan] {len(payload['state_win_rates'])}\n"
        f"[cyan]Duel entries:[/cyan] {len(payload['duel_win_rates'])}\n"
        f"[cyan]Map entries:[/cyan] {len(payload['map_t_win_rates'])}",
        title="[bold blue]Probability Tables[/bold blue]",
        expand=False,
    )
    console.print(panel)

    if show_states:
        df = collector.to_dataframe()
        table = Table(title="State Outcomes")
        for column in df.columns:
            table.add_column(column, justify="right" if column != "state" else "left")
        for row in df.itertuples(index=False):
            table.add_row(*(str(value) for value in row))
        console.print(table)

    if output:
        _write_json(output, payload, config.export.json_indent)


@app.command("init-config")
def init_config(
    path: Path = typer.Argument(Path("ecorating.yaml"), help="Where to write the config (.yaml or .json)"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
) -> None:
    """
    Write a default configuration file.
    """
    if path.exists() and not force:
        console.print(f"[red]Error:[/red] {path} already exists (use --force to overwrite)")
        raise typer.Exit(1)
    try:
        generate_default_config(path)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    console.print(f"[green]Wrote default config to:[/green] {path}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
