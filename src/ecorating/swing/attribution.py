"""
Credit Attribution

Splits a probability delta between the players who caused it.

Kills: the killer's fraction is a base credit plus a bonus proportional to
their share of the damage dealt to the victim. The rest of the delta is a
shareable pool paid out, in a fixed order, to damage contributors and then
flash assisters, each capped by what is left of the pool. Whatever the pool
does not pay out goes back to the killer. A trade kill cuts the killer's
fraction; the cut goes to the avenged teammate, or stays unassigned when
that teammate is unknown. The allocations always add up to the delta.

Bomb events: a fixed share of the delta goes to the planter/defuser, the
plant share additionally capped in magnitude.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ecorating.core.config import AttributionConfig
from ecorating.swing.events import KillEvent

logger = logging.getLogger(__name__)

# Flat bonus on top of swing for a won clutch, by number of opponents
CLUTCH_WIN_BONUS = {
    1: 0.06,
    2: 0.10,
    3: 0.15,
    4: 0.20,
    5: 0.25,
}
MAX_CLUTCH_SIZE = max(CLUTCH_WIN_BONUS)

# Pool leftovers below this are float noise, not credit
CREDIT_EPSILON = 1e-12


@dataclass
class KillCredit:
    """How one kill's delta was split."""

    killer_id: int
    total: float
    killer_credit: float = 0.0
    killer_fraction: float = 0.0
    contributor_credits: dict[int, float] = field(default_factory=dict)
    # Trade penalty share with no known avenged teammate
    unassigned_trade_credit: float = 0.0

    @property
    def allocated(self) -> float:
        return self.killer_credit + sum(self.contributor_credits.values()) + self.unassigned_trade_credit


def clutch_bonus(clutch_size: int) -> float:
    """Bonus for winning a 1vN clutch; sizes above 5 use the 1v5 value."""
    if clutch_size <= 0:
        return 0.0
    return CLUTCH_WIN_BONUS[min(clutch_size, MAX_CLUTCH_SIZE)]


class CreditAttributor:
    """Conserving split of kill, plant and defuse swing."""

    def __init__(
        self,
        killer_base_credit: float = 0.60,
        damage_share_credit: float = 0.25,
        flash_assist_max_credit: float = 0.15,
        flash_full_credit_seconds: float = 3.0,
        trade_kill_penalty: float = 0.30,
        plant_credit_share: float = 0.60,
        defuse_credit_share: float = 0.80,
        max_plant_swing: float = 0.15,
        save_penalty: float = 0.02,
    ):
        self.killer_base_credit = killer_base_credit
        self.damage_share_credit = damage_share_credit
        self.flash_assist_max_credit = flash_assist_max_credit
        self.flash_full_credit_seconds = flash_full_credit_seconds
        self.trade_kill_penalty = trade_kill_penalty
        self.plant_credit_share = plant_credit_share
        self.defuse_credit_share = defuse_credit_share
        self.max_plant_swing = max_plant_swing
        self.save_penalty = save_penalty

    @classmethod
    def from_config(cls, config: AttributionConfig) -> CreditAttributor:
        return cls(
            killer_base_credit=config.killer_base_credit,
            damage_share_credit=config.damage_share_credit,
            flash_assist_max_credit=config.flash_assist_max_credit,
            flash_full_credit_seconds=config.flash_full_credit_seconds,
            trade_kill_penalty=config.trade_kill_penalty,
            plant_credit_share=config.plant_credit_share,
            defuse_credit_share=config.defuse_credit_share,
            max_plant_swing=config.max_plant_swing,
            save_penalty=config.save_penalty,
        )

    # ------------------------------------------------------------------
    # Kills
    # ------------------------------------------------------------------

    def base_killer_fraction(self, kill: KillEvent) -> float:
        """Killer fraction from base credit and damage share, before any trade penalty."""
        fraction = self.killer_base_credit
        total_damage = self._total_damage(kill)
        if total_damage > 0 and kill.killer_damage > 0:
            fraction += self.damage_share_credit * (kill.killer_damage / total_damage)
        return max(0.0, min(1.0, fraction))

    def killer_fraction(self, kill: KillEvent) -> float:
        """Fraction of the delta reserved for the killer, trade penalty applied."""
        fraction = self.base_killer_fraction(kill)
        if kill.is_trade:
            fraction *= 1.0 - self.trade_kill_penalty
        return max(0.0, min(1.0, fraction))

    def attribute_kill(self, kill: KillEvent, delta: float) -> KillCredit:
        """
        Split delta between the killer and the kill's contributors.

        The sum of all allocations equals delta; no allocation is negative.
        The part of a trade killer's fraction lost to the trade penalty never
        returns to the killer: it goes to the avenged teammate when known and
        is otherwise held as ``unassigned_trade_credit``.
        """
        credit = KillCredit(killer_id=kill.killer_id, total=delta)
        if delta <= 0:
            # Nothing to share; a zero or negative delta stays with the killer
            credit.killer_credit = delta
            credit.killer_fraction = 1.0
            return credit

        base_fraction = self.base_killer_fraction(kill)
        credit.killer_fraction = self.killer_fraction(kill)
        remaining = delta * (1.0 - base_fraction)

        trade_share = delta * (base_fraction - credit.killer_fraction)
        if trade_share > CREDIT_EPSILON:
            traded_id = kill.traded_player_id
            if traded_id is not None and traded_id != kill.killer_id:
                self._pay(credit, traded_id, trade_share, trade_share)
            else:
                credit.unassigned_trade_credit = trade_share

        total_damage = self._total_damage(kill)

        if total_damage > 0:
            damage_order = sorted(kill.damage_contributors, key=lambda c: (-c.damage, c.player_id))
            for contributor in damage_order:
                if remaining <= CREDIT_EPSILON:
                    break
                if contributor.player_id == kill.killer_id or contributor.damage <= 0:
                    continue
                claim = delta * self.damage_share_credit * (contributor.damage / total_damage)
                remaining -= self._pay(credit, contributor.player_id, claim, remaining)

        flash_order = sorted(kill.flash_contributors, key=lambda c: (-c.duration, c.player_id))
        for flash in flash_order:
            if remaining <= CREDIT_EPSILON:
                break
            if flash.player_id == kill.killer_id:
                continue
            strength = min(flash.duration / self.flash_full_credit_seconds, 1.0)
            claim = delta * strength * self.flash_assist_max_credit
            remaining -= self._pay(credit, flash.player_id, claim, remaining)

        # Unclaimed pool reverts to the killer; the trade share does not
        credit.killer_credit = delta - sum(credit.contributor_credits.values()) - credit.unassigned_trade_credit

        logger.debug(
            f"Kill credit {kill.killer_id}->{kill.victim_id}: delta={delta:.4f} "
            f"killer={credit.killer_credit:.4f} contributors={len(credit.contributor_credits)} "
            f"unassigned={credit.unassigned_trade_credit:.4f}"
        )
        return credit

    @staticmethod
    def _pay(credit: KillCredit, player_id: int, claim: float, remaining: float) -> float:
        amount = max(0.0, min(claim, remaining))
        if amount <= CREDIT_EPSILON:
            return 0.0
        credit.contributor_credits[player_id] = credit.contributor_credits.get(player_id, 0.0) + amount
        return amount

    @staticmethod
    def _total_damage(kill: KillEvent) -> int:
        if kill.total_damage_to_victim > 0:
            return kill.total_damage_to_victim
        return sum(max(c.damage, 0) for c in kill.damage_contributors)

    # ------------------------------------------------------------------
    # Bomb events and round end
    # ------------------------------------------------------------------

    def plant_credit(self, delta: float) -> float:
        credit = delta * self.plant_credit_share
        return max(-self.max_plant_swing, min(self.max_plant_swing, credit))

    def defuse_credit(self, delta: float) -> float:
        return delta * self.defuse_credit_share
