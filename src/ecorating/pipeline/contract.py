"""
EcoRating Input Contract - the decoded event stream a match is scored from.

Defines the exact shape of every event record the match driver consumes.
Records are validated here, at the boundary; the scoring core only ever
sees well-formed, typed records.

Rules:
  1. Every record carries a "type" tag selecting its model.
  2. Sides are accepted as 2/3 or "T"/"CT" and normalized to Team.
  3. Times are seconds since the round's freeze time ended.
  4. A kill with no victim, no attacker, or attacker == victim is a suicide.

A match file is either a bare JSON list of records or an object with
"match_id", "map_name" and "events".
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, TypeAdapter, field_validator

from ecorating.core.constants import PLAYING_TEAMS, Team

logger = logging.getLogger(__name__)

Side = Annotated[Team, BeforeValidator(Team.from_value)]


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class PlayerSnapshot(_Record):
    """A roster entry at round start / freeze end."""

    id: int = Field(..., description="Player id (e.g. SteamID64)")
    name: str = Field(default="", description="Display name")
    team: Side = Field(..., description="Side this round")
    money: int = Field(default=0, ge=0, description="Money in the bank")
    money_spent: int = Field(default=0, ge=0, description="Money spent this round")
    equipment_value: float = Field(default=0.0, ge=0, description="Value of carried equipment")


class MatchStartRecord(_Record):
    type: Literal["match_start"] = "match_start"
    match_id: str = ""
    map_name: str = ""


class RoundStartRecord(_Record):
    type: Literal["round_start"] = "round_start"
    round: int | None = Field(default=None, ge=1, description="Round number as reported by the source")
    players: list[PlayerSnapshot] = Field(default_factory=list)


class FreezeEndRecord(_Record):
    type: Literal["freeze_end"] = "freeze_end"
    players: list[PlayerSnapshot] = Field(default_factory=list)


class KillRecord(_Record):
    type: Literal["kill"] = "kill"
    time: float = Field(..., ge=0)
    attacker: int | None = Field(default=None, description="Killer id, None for world kills")
    victim: int | None = Field(default=None, description="Victim id, None for suicides")
    headshot: bool = False
    assister: int | None = None
    flash_assist: bool = False
    weapon: str = ""

    @property
    def is_suicide(self) -> bool:
        return self.victim is None or self.attacker is None or self.attacker == self.victim


class DamageRecord(_Record):
    type: Literal["damage"] = "damage"
    time: float = Field(..., ge=0)
    attacker: int
    victim: int
    damage: int = Field(..., ge=0, description="Health damage actually taken")
    attacker_team: Side = Team.UNASSIGNED
    victim_team: Side = Team.UNASSIGNED


class FlashRecord(_Record):
    type: Literal["flash"] = "flash"
    time: float = Field(default=0.0, ge=0)
    attacker: int
    victim: int
    duration: float = Field(..., ge=0, description="Seconds the victim is blind")
    attacker_team: Side = Team.UNASSIGNED
    victim_team: Side = Team.UNASSIGNED


class BombPlantedRecord(_Record):
    type: Literal["bomb_planted"] = "bomb_planted"
    time: float = Field(..., ge=0)
    player: int


class BombDefusedRecord(_Record):
    type: Literal["bomb_defused"] = "bomb_defused"
    time: float = Field(..., ge=0)
    player: int


class BombExplodedRecord(_Record):
    type: Literal["bomb_exploded"] = "bomb_exploded"
    time: float = Field(..., ge=0)


class RoundEndRecord(_Record):
    type: Literal["round_end"] = "round_end"
    time: float = Field(default=0.0, ge=0)
    winner: Side

    @field_validator("winner")
    @classmethod
    def _playing_side(cls, value: Team) -> Team:
        if value not in PLAYING_TEAMS:
            raise ValueError("winner must be T or CT")
        return value


EventRecord = Annotated[
    MatchStartRecord
    | RoundStartRecord
    | FreezeEndRecord
    | KillRecord
    | DamageRecord
    | FlashRecord
    | BombPlantedRecord
    | BombDefusedRecord
    | BombExplodedRecord
    | RoundEndRecord,
    Field(discriminator="type"),
]

_EVENTS_ADAPTER = TypeAdapter(list[EventRecord])


class MatchLog(BaseModel):
    """A whole match: identity plus its ordered event records."""

    match_id: str = ""
    map_name: str = ""
    events: list[EventRecord] = Field(default_factory=list)


def parse_events(records: list[dict[str, Any]]) -> list[EventRecord]:
    """Validate raw records; raises pydantic.ValidationError on bad input."""
    return _EVENTS_ADAPTER.validate_python(records)


def parse_match(data: Any, match_id: str = "") -> MatchLog:
    """Validate a decoded match document (list of records or match object)."""
    if isinstance(data, list):
        data = {"events": data}
    log = MatchLog.model_validate(data)
    if match_id and not log.match_id:
        log.match_id = match_id
    return log


def load_match(path: Path) -> MatchLog:
    """Read and validate a match file; the file stem is the default match id."""
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    log = parse_match(data, match_id=path.stem)
    logger.debug(f"Loaded {len(log.events)} events from {path}")
    return log


def load_events(path: Path) -> list[EventRecord]:
    return load_match(path).events
