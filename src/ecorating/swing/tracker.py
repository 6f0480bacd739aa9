"""
Contribution Tracker

Per round, tracks for every potential victim:
- cumulative damage received from each attacker
- first/last damage time of the current engagement with each attacker
- flashes received (attacker, blind duration)

An engagement re-anchors its first-damage time when more than the timeout
passes between two damage instances from the same attacker. That only
affects time-to-kill; cumulative damage used for credit splitting is kept.
Everything tracked for a victim is dropped as soon as the victim dies.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ecorating.core.constants import ENGAGEMENT_TIMEOUT_SECONDS, FLASH_ASSIST_MIN_DURATION
from ecorating.swing.events import DamageContribution, FlashContribution

logger = logging.getLogger(__name__)


@dataclass
class EngagementRecord:
    """Damage one attacker has dealt to one victim this round."""

    total_damage: int = 0
    first_damage_time: float = 0.0
    last_damage_time: float = 0.0


@dataclass
class VictimRecord:
    damage_by_attacker: dict[int, EngagementRecord] = field(default_factory=dict)
    flashes: list[FlashContribution] = field(default_factory=list)


class ContributionTracker:
    """Damage and flash bookkeeping used to split kill credit."""

    def __init__(
        self,
        engagement_timeout: float = ENGAGEMENT_TIMEOUT_SECONDS,
        flash_min_duration: float = FLASH_ASSIST_MIN_DURATION,
    ):
        self.engagement_timeout = engagement_timeout
        self.flash_min_duration = flash_min_duration
        self._victims: dict[int, VictimRecord] = {}

    def reset(self) -> None:
        """Forget everything; called at round start."""
        self._victims = {}

    def record_damage(self, attacker_id: int, victim_id: int, damage: int, time: float) -> None:
        if damage <= 0 or attacker_id == victim_id:
            return
        victim = self._victims.setdefault(victim_id, VictimRecord())
        record = victim.damage_by_attacker.get(attacker_id)
        if record is None:
            victim.damage_by_attacker[attacker_id] = EngagementRecord(
                total_damage=damage,
                first_damage_time=time,
                last_damage_time=time,
            )
            return

        if time - record.last_damage_time > self.engagement_timeout:
            record.first_damage_time = time
        record.total_damage += damage
        record.last_damage_time = time

    def record_flash(self, attacker_id: int, victim_id: int, duration: float) -> None:
        if attacker_id == victim_id or duration <= 0:
            return
        victim = self._victims.setdefault(victim_id, VictimRecord())
        victim.flashes.append(FlashContribution(player_id=attacker_id, duration=duration))

    def total_damage(self, victim_id: int) -> int:
        victim = self._victims.get(victim_id)
        if victim is None:
            return 0
        return sum(r.total_damage for r in victim.damage_by_attacker.values())

    def damage_by(self, attacker_id: int, victim_id: int) -> int:
        victim = self._victims.get(victim_id)
        if victim is None or attacker_id not in victim.damage_by_attacker:
            return 0
        return victim.damage_by_attacker[attacker_id].total_damage

    def damage_contributors(self, victim_id: int) -> tuple[DamageContribution, ...]:
        """All attackers that damaged the victim, most damage first, ties by player id."""
        victim = self._victims.get(victim_id)
        if victim is None:
            return ()
        contributors = [
            DamageContribution(player_id=attacker_id, damage=record.total_damage)
            for attacker_id, record in victim.damage_by_attacker.items()
        ]
        contributors.sort(key=lambda c: (-c.damage, c.player_id))
        return tuple(contributors)

    def flash_contributors(self, victim_id: int) -> tuple[FlashContribution, ...]:
        """
        Flash assisters eligible for credit, longest flash first, ties by player id.

        Short flashes are ignored and each thrower counts once, with their
        longest flash on the victim.
        """
        victim = self._victims.get(victim_id)
        if victim is None:
            return ()
        longest: dict[int, float] = {}
        for flash in victim.flashes:
            if flash.duration < self.flash_min_duration:
                continue
            longest[flash.player_id] = max(longest.get(flash.player_id, 0.0), flash.duration)
        contributors = [FlashContribution(player_id=pid, duration=d) for pid, d in longest.items()]
        contributors.sort(key=lambda c: (-c.duration, c.player_id))
        return tuple(contributors)

    def time_to_kill(self, attacker_id: int, victim_id: int, time: float) -> float | None:
        """Seconds from the first damage of the current engagement to time."""
        victim = self._victims.get(victim_id)
        if victim is None:
            return None
        record = victim.damage_by_attacker.get(attacker_id)
        if record is None:
            return None
        if time - record.last_damage_time > self.engagement_timeout:
            return None
        return max(0.0, time - record.first_damage_time)

    def clear_victim(self, victim_id: int) -> None:
        self._victims.pop(victim_id, None)
