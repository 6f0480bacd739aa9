"""Shared fixtures and event builders for the test suite."""

import pytest

from ecorating.core.config import reset_config

T_IDS = [1, 2, 3, 4, 5]
CT_IDS = [6, 7, 8, 9, 10]


def roster(
    t_equipment: float = 4500.0,
    ct_equipment: float = 4500.0,
    money: int = 800,
    money_spent: int = 4000,
) -> list[dict]:
    """Five T (ids 1-5) and five CT (ids 6-10) player snapshots."""
    players = []
    for pid in T_IDS:
        players.append(
            {
                "id": pid,
                "name": f"t{pid}",
                "team": "T",
                "money": money,
                "money_spent": money_spent,
                "equipment_value": t_equipment,
            }
        )
    for pid in CT_IDS:
        players.append(
            {
                "id": pid,
                "name": f"ct{pid}",
                "team": "CT",
                "money": money,
                "money_spent": money_spent,
                "equipment_value": ct_equipment,
            }
        )
    return players


def round_records(events: list[dict], winner: str, end_time: float = 60.0, **roster_kwargs) -> list[dict]:
    """A whole round: round_start, freeze_end, the given events, round_end."""
    return [
        {"type": "round_start", "players": roster(**roster_kwargs)},
        {"type": "freeze_end"},
        *events,
        {"type": "round_end", "time": end_time, "winner": winner},
    ]


def kill(time: float, attacker: int | None, victim: int | None, **extra) -> dict:
    return {"type": "kill", "time": time, "attacker": attacker, "victim": victim, **extra}


def damage(time: float, attacker: int, victim: int, amount: int) -> dict:
    return {"type": "damage", "time": time, "attacker": attacker, "victim": victim, "damage": amount}


@pytest.fixture(autouse=True)
def _fresh_global_config():
    """Keep the global config from leaking between tests."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def simple_match() -> list[dict]:
    """Two rounds: a T opening kill and T win, then a CT defuse win."""
    return [
        {"type": "match_start", "match_id": "m1", "map_name": "de_mirage"},
        *round_records(
            [
                damage(9.0, 1, 6, 60),
                damage(9.5, 2, 6, 40),
                kill(10.0, 1, 6, headshot=True, weapon="ak47"),
                kill(20.0, 2, 7, weapon="ak47"),
            ],
            winner="T",
        ),
        *round_records(
            [
                {"type": "bomb_planted", "time": 30.0, "player": 3},
                kill(35.0, 8, 3, weapon="m4a1"),
                {"type": "bomb_defused", "time": 50.0, "player": 6},
            ],
            winner="CT",
        ),
    ]
