"""
Round events consumed by the swing calculator.

A closed set of immutable event kinds. Handlers match on these classes
exhaustively; a new kind is added here and to every handler, never by
dynamic dispatch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from ecorating.core.constants import Team


class EventType(StrEnum):
    KILL = "kill"
    BOMB_PLANT = "bomb_plant"
    BOMB_DEFUSE = "bomb_defuse"
    BOMB_EXPLODE = "bomb_explode"


@dataclass(frozen=True)
class DamageContribution:
    """Damage one attacker dealt to the victim before the kill."""

    player_id: int
    damage: int


@dataclass(frozen=True)
class FlashContribution:
    """A flash on the victim eligible for assist credit."""

    player_id: int
    duration: float  # seconds the victim was blind


@dataclass(frozen=True)
class KillEvent:
    """A kill, with the contributions tracked up to (not including) it."""

    time: float
    killer_id: int
    victim_id: int
    killer_side: Team
    victim_side: Team
    killer_equip: float = 0.0
    victim_equip: float = 0.0
    is_trade: bool = False
    # Teammate of the killer whose death this kill avenged (trade kills only)
    traded_player_id: int | None = None
    is_headshot: bool = False
    total_damage_to_victim: int = 0
    killer_damage: int = 0
    damage_contributors: tuple[DamageContribution, ...] = ()
    flash_contributors: tuple[FlashContribution, ...] = ()
    # Seconds from the killer's first damage in this engagement, None without one
    time_to_kill: float | None = None

    @property
    def event_type(self) -> EventType:
        return EventType.KILL


@dataclass(frozen=True)
class BombPlantEvent:
    time: float
    planter_id: int

    @property
    def event_type(self) -> EventType:
        return EventType.BOMB_PLANT


@dataclass(frozen=True)
class BombDefuseEvent:
    time: float
    defuser_id: int

    @property
    def event_type(self) -> EventType:
        return EventType.BOMB_DEFUSE


@dataclass(frozen=True)
class BombExplodeEvent:
    time: float

    @property
    def event_type(self) -> EventType:
        return EventType.BOMB_EXPLODE


RoundEvent = KillEvent | BombPlantEvent | BombDefuseEvent | BombExplodeEvent


@dataclass(frozen=True)
class RoundResult:
    """How a round ended and who was still alive."""

    winner: Team
    survivors: tuple[int, ...] = ()
    # Side of each survivor; survivors on the losing side take the save penalty
    survivor_sides: dict[int, Team] = field(default_factory=dict, hash=False)

    def losing_survivors(self) -> list[int]:
        return [pid for pid in self.survivors if self.survivor_sides.get(pid) not in (None, self.winner)]
