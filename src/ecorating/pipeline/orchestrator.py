"""
Match Processor - the pipeline from a decoded event stream to ratings.

Consumes validated event records (see pipeline.contract) one at a time, in
order, and maintains everything needed to score the match:
- the live swing orchestrator (round state, contributions, credit)
- trade and clutch detection, multi-kill rounds from per-round kill counts
- per-player and per-round accumulators
- optional feeding of a ProbabilityDataCollector

Knife and warm-up rounds (first participant with no money and nothing
spent) are skipped entirely. Suicides and team kills are discarded before
any scoring.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

import numpy as np

from ecorating.analysis.models import (
    MatchResult,
    PlayerMatchStats,
    RoundStats,
    RoundSwingBreakdown,
    SwingContribution,
)
from ecorating.core.config import EcoRatingConfig, get_config
from ecorating.core.constants import PLAYING_TEAMS, Team, is_pistol_round, normalize_map_name
from ecorating.domains.combat import ClutchTracker, TradeDetector
from ecorating.economy import eco_death_penalty, eco_kill_value, is_anti_eco_kill, is_eco_kill
from ecorating.pipeline.contract import (
    BombDefusedRecord,
    BombExplodedRecord,
    BombPlantedRecord,
    DamageRecord,
    EventRecord,
    FlashRecord,
    FreezeEndRecord,
    KillRecord,
    MatchLog,
    MatchStartRecord,
    PlayerSnapshot,
    RoundEndRecord,
    RoundStartRecord,
    load_match,
)
from ecorating.probability.collector import ProbabilityDataCollector
from ecorating.probability.engine import ProbabilityEngine
from ecorating.probability.tables import ProbabilityTables
from ecorating.rating.composer import RatingComposer
from ecorating.swing.attribution import CreditAttributor
from ecorating.swing.events import RoundResult
from ecorating.swing.orchestrator import ClutchOutcome, SwingOrchestrator
from ecorating.swing.tracker import ContributionTracker

logger = logging.getLogger(__name__)


class MatchProcessor:
    """
    Scores one match from its event stream.

    Usage:
        processor = MatchProcessor(map_name="de_mirage")
        result = processor.process(events)
        for player in result.leaderboard():
            print(player.name, player.final_rating)

    A processor owns all of its state and must not be shared between
    matches or threads.
    """

    def __init__(
        self,
        engine: ProbabilityEngine | None = None,
        attributor: CreditAttributor | None = None,
        composer: RatingComposer | None = None,
        collector: ProbabilityDataCollector | None = None,
        map_name: str = "",
        match_id: str = "",
    ):
        self.engine = engine if engine is not None else ProbabilityEngine()
        self.attributor = attributor if attributor is not None else CreditAttributor()
        self.composer = composer if composer is not None else RatingComposer()
        self.collector = collector
        self.map_name = normalize_map_name(map_name)
        self.match_id = match_id
        self._reset_match()

    @classmethod
    def from_config(
        cls,
        config: EcoRatingConfig | None = None,
        tables: ProbabilityTables | None = None,
        collector: ProbabilityDataCollector | None = None,
        map_name: str = "",
        match_id: str = "",
    ) -> MatchProcessor:
        config = config or get_config()
        return cls(
            engine=ProbabilityEngine(tables),
            attributor=CreditAttributor.from_config(config.attribution),
            composer=RatingComposer.from_config(config.rating),
            collector=collector,
            map_name=map_name,
            match_id=match_id,
        )

    def _reset_match(self) -> None:
        self.orchestrator = SwingOrchestrator(self.engine, self.attributor, ContributionTracker())
        self.trades = TradeDetector()
        self.clutches = ClutchTracker()
        self.players: dict[int, PlayerMatchStats] = {}

        self._scored_rounds = 0
        self._skipped_rounds = 0
        self._t_rounds_won = 0
        self._ct_rounds_won = 0

        self._roster: dict[int, PlayerSnapshot] = {}
        self._pending_roster: list[PlayerSnapshot] | None = None
        self._round_active = False
        self._knife_round = False
        self._round_has_kill = False
        self._alive: set[int] = set()
        self._round_stats: dict[int, RoundStats] = {}

    # =========================================================================
    # Driving
    # =========================================================================

    def process(self, events: Iterable[EventRecord]) -> MatchResult:
        """Feed every event in order and return the scored match."""
        for event in events:
            self.handle(event)
        return self.result()

    def handle(self, event: EventRecord) -> None:
        """Dispatch one event record to its handler."""
        if isinstance(event, KillRecord):
            self.on_kill(event)
        elif isinstance(event, DamageRecord):
            self.on_damage(event)
        elif isinstance(event, FlashRecord):
            self.on_flash(event)
        elif isinstance(event, BombPlantedRecord):
            self.on_bomb_planted(event)
        elif isinstance(event, BombDefusedRecord):
            self.on_bomb_defused(event)
        elif isinstance(event, BombExplodedRecord):
            self.on_bomb_exploded(event)
        elif isinstance(event, RoundStartRecord):
            self.on_round_start(event)
        elif isinstance(event, FreezeEndRecord):
            self.on_freeze_end(event)
        elif isinstance(event, RoundEndRecord):
            self.on_round_end(event)
        elif isinstance(event, MatchStartRecord):
            self.on_match_start(event)
        else:
            raise TypeError(f"Unknown event record: {type(event).__name__}")

    def result(self) -> MatchResult:
        """Rate every player and return the match result."""
        if self._round_active:
            logger.debug(f"Discarding unfinished round {self._scored_rounds + 1}")

        for player in self.players.values():
            self.composer.rate_player(player)

        logger.info(
            f"Match {self.match_id or '?'} scored: {self._scored_rounds} rounds, "
            f"{len(self.players)} players, {self._skipped_rounds} skipped"
        )
        return MatchResult(
            match_id=self.match_id,
            map_name=self.map_name,
            rounds_played=self._scored_rounds,
            skipped_rounds=self._skipped_rounds,
            t_rounds_won=self._t_rounds_won,
            ct_rounds_won=self._ct_rounds_won,
            players=dict(self.players),
        )

    # =========================================================================
    # Match and round boundaries
    # =========================================================================

    def on_match_start(self, event: MatchStartRecord) -> None:
        """A (re)started match drops everything recorded before it."""
        if event.map_name:
            self.map_name = normalize_map_name(event.map_name)
        if event.match_id:
            self.match_id = event.match_id
        if self.players or self._scored_rounds:
            logger.info("Match restarted, dropping warm-up statistics")
        self._reset_match()

    def on_round_start(self, event: RoundStartRecord) -> None:
        if self._round_active:
            logger.debug(f"Round {self._scored_rounds + 1} started again before it ended")
            self._round_active = False
        self._knife_round = False
        if event.players:
            self._pending_roster = list(event.players)
        else:
            self._pending_roster = list(self._roster.values()) or None

    def on_freeze_end(self, event: FreezeEndRecord) -> None:
        players = list(event.players) or self._pending_roster or list(self._roster.values())
        self._begin_round(players)

    def _ensure_round(self) -> bool:
        """True when a scored round is in progress, starting it lazily if needed."""
        if self._knife_round:
            return False
        if not self._round_active and self._pending_roster:
            self._begin_round(self._pending_roster)
        return self._round_active

    def _begin_round(self, players: list[PlayerSnapshot]) -> None:
        self._pending_roster = None
        self._round_active = False
        self._knife_round = False

        participants = [p for p in players if p.team in PLAYING_TEAMS]
        if not participants:
            logger.warning("Round start without any T/CT players, round not scored")
            return

        first = participants[0]
        if first.money + first.money_spent == 0:
            logger.info("Knife/warm-up round detected, skipping")
            self._knife_round = True
            return

        self._roster = {p.id: p for p in participants}
        t_players = {p.id for p in participants if p.team == Team.TERRORIST}
        ct_players = {p.id for p in participants if p.team == Team.CT}
        round_number = self._scored_rounds + 1
        pistol = is_pistol_round(round_number)

        self.orchestrator.start_round(
            len(t_players),
            len(ct_players),
            self.map_name,
            t_equipment=_average(p.equipment_value for p in participants if p.team == Team.TERRORIST),
            ct_equipment=_average(p.equipment_value for p in participants if p.team == Team.CT),
        )
        self.trades.reset(round_number)
        self.clutches.reset(round_number, t_players, ct_players)
        if self.collector is not None:
            self.collector.record_round_start(source=self)
            self.collector.record_state_snapshot(len(t_players), len(ct_players), False, source=self)

        self._alive = t_players | ct_players
        self._round_has_kill = False
        self._round_stats = {}
        for p in participants:
            player = self.players.get(p.id)
            if player is None:
                player = PlayerMatchStats(player_id=p.id, name=p.name, team=p.team)
                self.players[p.id] = player
            elif p.name:
                player.name = p.name
            self._round_stats[p.id] = RoundStats(
                round_number=round_number,
                side=p.team,
                is_pistol_round=pistol,
                equipment_value=p.equipment_value,
            )

        self._round_active = True

    def on_round_end(self, event: RoundEndRecord) -> None:
        if self._knife_round:
            self._knife_round = False
            self._skipped_rounds += 1
            return
        if not self._ensure_round():
            logger.warning("Round end without a round in progress, ignored")
            return

        winner = event.winner
        state = self.orchestrator.state
        round_number = self._scored_rounds + 1

        clutches = self.clutches.finish_round(winner)
        survivors = tuple(sorted(self._alive))
        result = RoundResult(
            winner=winner,
            survivors=survivors,
            survivor_sides={pid: self._roster[pid].team for pid in survivors},
        )
        summary = self.orchestrator.end_round(
            result,
            [ClutchOutcome(c.clutcher_id, c.enemies_alive, c.won) for c in clutches],
        )
        clutch_by_player = {c.clutcher_id: c for c in clutches}

        for pid, rs in self._round_stats.items():
            player = self.players[pid]
            side = player.side_stats(rs.side)
            rs.team_won = rs.side == winner

            penalty = summary.save_penalties.get(pid, 0.0)
            if penalty:
                rs.add_contribution(SwingContribution("save", -penalty, event.time, notes="survived a lost round"))
            clutch = clutch_by_player.get(pid)
            if clutch is not None:
                rs.clutch_attempt = True
                rs.clutch_won = clutch.won
                rs.clutch_size = clutch.enemies_alive
            bonus = summary.clutch_bonuses.get(pid, 0.0)
            if bonus:
                rs.add_contribution(SwingContribution("clutch", bonus, event.time, notes=f"won {clutch.scenario}"))

            swing = summary.player_swings.get(pid, 0.0)
            for totals in (player, side):
                totals.rounds_played += 1
                totals.rounds_won += int(rs.team_won)
                totals.kast_rounds += int(rs.kast)
                totals.survivals += int(rs.survived)
                totals.clutch_attempts += int(rs.clutch_attempt)
                totals.clutch_wins += int(rs.clutch_won)
                totals.probability_swing += swing
                totals.save_penalty += penalty
                totals.clutch_bonus += bonus
                if rs.kills > 0:
                    totals.multi_kills[min(rs.kills, 5)] += 1

            if rs.is_pistol_round:
                player.pistol_rounds_played += 1
                player.pistol_kills += rs.kills
                player.pistol_deaths += int(not rs.survived)
                player.pistol_survivals += int(rs.survived)
                player.pistol_multi_kills += int(rs.kills >= 2)

            player.round_breakdowns.append(RoundSwingBreakdown.from_round_stats(rs))

        if self.collector is not None:
            self.collector.record_round_end(
                state.t_alive, state.ct_alive, state.bomb_planted, winner, self.map_name, source=self
            )

        if winner == Team.TERRORIST:
            self._t_rounds_won += 1
        else:
            self._ct_rounds_won += 1
        self._scored_rounds += 1
        self._round_active = False

        logger.debug(
            f"Round {round_number} won by {winner.short_name}: "
            f"{len(survivors)} survivors, {len(clutches)} clutch situation(s)"
        )

    # =========================================================================
    # In-round events
    # =========================================================================

    def _team(self, player_id: int) -> Team | None:
        snapshot = self._roster.get(player_id)
        return snapshot.team if snapshot is not None else None

    def _equipment(self, player_id: int) -> float:
        snapshot = self._roster.get(player_id)
        return snapshot.equipment_value if snapshot is not None else 0.0

    def _event_team(self, player_id: int, reported: Team) -> Team | None:
        """Roster side of a player, else the side the event reports for them."""
        team = self._team(player_id)
        if team is None and reported in PLAYING_TEAMS:
            return reported
        return team

    def on_damage(self, event: DamageRecord) -> None:
        if not self._ensure_round():
            return
        attacker_team = self._event_team(event.attacker, event.attacker_team)
        victim_team = self._event_team(event.victim, event.victim_team)
        if attacker_team is None or victim_team is None:
            logger.debug(f"Damage involving unknown player {event.attacker}->{event.victim}, ignored")
            return
        if event.attacker == event.victim or attacker_team == victim_team:
            return

        self.orchestrator.record_damage(event.attacker, event.victim, event.damage, event.time)
        # Off-roster attackers still count towards the victim's damage taken
        round_stats = self._round_stats.get(event.attacker)
        if round_stats is None:
            return
        player = self.players[event.attacker]
        player.damage += event.damage
        player.side_stats(attacker_team).damage += event.damage
        round_stats.damage += event.damage

    def on_flash(self, event: FlashRecord) -> None:
        if not self._ensure_round():
            return
        attacker_team = self._event_team(event.attacker, event.attacker_team)
        victim_team = self._event_team(event.victim, event.victim_team)
        if attacker_team is None or victim_team is None or attacker_team == victim_team:
            return
        self.orchestrator.record_flash(event.attacker, event.victim, event.duration)

    def on_kill(self, event: KillRecord) -> None:
        if not self._ensure_round():
            return
        if event.is_suicide:
            logger.debug(f"Suicide of {event.victim} discarded")
            return

        attacker_id, victim_id = event.attacker, event.victim
        attacker_team = self._team(attacker_id)
        victim_team = self._team(victim_id)
        if attacker_team is None or victim_team is None:
            logger.warning(f"Kill involving a player not on the roster ({attacker_id}->{victim_id}), ignored")
            return
        if attacker_team == victim_team:
            logger.debug(f"Team kill {attacker_id}->{victim_id} discarded")
            return
        if victim_id not in self._alive:
            logger.warning(f"Kill of already dead player {victim_id}, ignored")
            return

        attacker_equip = self._equipment(attacker_id)
        victim_equip = self._equipment(victim_id)

        trade = self.trades.record_kill(attacker_id, attacker_team, victim_id, victim_team, event.time)
        swing = self.orchestrator.record_kill(
            attacker_id,
            victim_id,
            attacker_team,
            victim_team,
            attacker_equip,
            victim_equip,
            event.time,
            is_trade=trade is not None,
            traded_player_id=trade.traded_player_id if trade is not None else None,
            is_headshot=event.headshot,
        )
        self.clutches.record_kill(attacker_id, victim_id, victim_team, event.time)
        self._alive.discard(victim_id)

        if self.collector is not None:
            state = self.orchestrator.state
            self.collector.record_kill(attacker_equip, victim_equip)
            self.collector.record_state_snapshot(state.t_alive, state.ct_alive, state.bomb_planted, source=self)

        attacker = self.players[attacker_id]
        victim = self.players[victim_id]
        attacker_round = self._round_stats[attacker_id]
        victim_round = self._round_stats[victim_id]

        kill_value = eco_kill_value(attacker_equip, victim_equip)
        death_penalty = eco_death_penalty(victim_equip, attacker_equip)

        attacker.kills += 1
        attacker.headshots += int(event.headshot)
        attacker.eco_kill_value += kill_value
        attacker_side = attacker.side_stats(attacker_team)
        attacker_side.kills += 1
        attacker_side.eco_kill_value += kill_value
        attacker_round.kills += 1

        victim.deaths += 1
        victim.eco_death_penalty += death_penalty
        victim_side = victim.side_stats(victim_team)
        victim_side.deaths += 1
        victim_side.eco_death_penalty += death_penalty
        victim_round.survived = False

        if is_eco_kill(attacker_equip, victim_equip):
            attacker.eco_kills += 1
            attacker_round.eco_kill = True
        if is_anti_eco_kill(attacker_equip, victim_equip):
            attacker.anti_eco_kills += 1
            attacker_round.anti_eco_kill = True

        if not self._round_has_kill:
            self._round_has_kill = True
            attacker.opening_kills += 1
            attacker_round.opening_kill = True
            # Entry frags are opening kills by the attacking side
            attacker_round.entry_fragger = attacker_team == Team.TERRORIST
            victim.opening_deaths += 1
            victim_round.opening_death = True

        if trade is not None:
            attacker.trade_kills += 1
            attacker_round.trade_kill = True
            attacker_round.trade_speed = trade.trade_speed
            traded_round = self._round_stats.get(trade.traded_player_id)
            if traded_round is not None and not traded_round.traded:
                traded_round.traded = True
                traded_round.trade_death = True
                self.players[trade.traded_player_id].traded_deaths += 1

        if event.assister is not None and event.assister != attacker_id and self._team(event.assister) == attacker_team:
            assister = self.players[event.assister]
            assister.assists += 1
            self._round_stats[event.assister].assists += 1
            if event.flash_assist:
                assister.flash_assists += 1
                self._round_stats[event.assister].flash_assists += 1

        attacker_round.add_contribution(
            SwingContribution(
                "kill",
                swing.killer_swing,
                event.time,
                opponent_id=victim_id,
                weapon=event.weapon,
                is_trade=trade is not None,
                is_headshot=event.headshot,
                eco_multiplier=swing.eco_multiplier,
                time_to_kill=swing.time_to_kill,
            )
        )
        if swing.time_to_kill is not None:
            attacker.ttk_values.append(swing.time_to_kill)
        victim_round.add_contribution(
            SwingContribution(
                "death",
                -swing.victim_swing,
                event.time,
                opponent_id=attacker_id,
                weapon=event.weapon,
                eco_multiplier=swing.eco_multiplier,
            )
        )
        for contributor_id, amount in swing.contributor_swings.items():
            contributor_round = self._round_stats.get(contributor_id)
            if contributor_round is None:
                continue
            note = "traded teammate" if trade is not None and contributor_id == trade.traded_player_id else "assist"
            contributor_round.add_contribution(
                SwingContribution("assist", amount, event.time, opponent_id=victim_id, notes=note)
            )

    def on_bomb_planted(self, event: BombPlantedRecord) -> None:
        if not self._ensure_round():
            return
        if self.orchestrator.state.bomb_planted:
            return
        credit = self.orchestrator.record_bomb_plant(event.player, event.time)
        round_stats = self._round_stats.get(event.player)
        if round_stats is not None:
            round_stats.planted_bomb = True
            round_stats.add_contribution(SwingContribution("plant", credit, event.time))
        if self.collector is not None:
            state = self.orchestrator.state
            self.collector.record_state_snapshot(state.t_alive, state.ct_alive, True, source=self)

    def on_bomb_defused(self, event: BombDefusedRecord) -> None:
        if not self._ensure_round():
            return
        credit = self.orchestrator.record_bomb_defuse(event.player, event.time)
        round_stats = self._round_stats.get(event.player)
        if round_stats is not None:
            round_stats.defused_bomb = True
            round_stats.add_contribution(SwingContribution("defuse", credit, event.time))

    def on_bomb_exploded(self, event: BombExplodedRecord) -> None:
        if not self._ensure_round():
            return
        self.orchestrator.record_bomb_explode(event.time)


def _average(values: Iterable[float]) -> float | None:
    values = list(values)
    return float(np.mean(values)) if values else None


def score_match(
    log: MatchLog,
    config: EcoRatingConfig | None = None,
    tables: ProbabilityTables | None = None,
    collector: ProbabilityDataCollector | None = None,
) -> MatchResult:
    """Score a validated match log."""
    processor = MatchProcessor.from_config(
        config, tables=tables, collector=collector, map_name=log.map_name, match_id=log.match_id
    )
    return processor.process(log.events)


def score_match_file(
    path: Path,
    config: EcoRatingConfig | None = None,
    tables: ProbabilityTables | None = None,
    collector: ProbabilityDataCollector | None = None,
) -> MatchResult:
    """Load, validate and score a match file."""
    return score_match(load_match(path), config=config, tables=tables, collector=collector)
