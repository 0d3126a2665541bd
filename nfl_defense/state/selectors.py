"""Derived views of DashboardState.

Each public selector reads the fields it needs from the state and hands them
to an ``lru_cache``d projection, so a view is recomputed only when the
records or the relevant selection actually change. Records and states are
frozen pydantic models and hash by value.

Returned views are shared between callers and must not be mutated.
"""

import math
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from nfl_defense.models.enums import Metric
from nfl_defense.models.record import TeamDefenseRecord
from .dashboard_state import DashboardState

Records = Tuple[TeamDefenseRecord, ...]

# (label, record field, lower is better)
RADAR_AXES = (
    ("Points Allowed", "pointsAllowed", True),
    ("Yards Allowed", "yardsAllowed", True),
    ("Sacks", "sacks", False),
    ("Interceptions", "interceptions", False),
    ("Forced Fumbles", "fumbles", False),
)
RADAR_FULL_MARK = 100

_CACHE_SIZE = 32


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@lru_cache(maxsize=_CACHE_SIZE)
def _sorted_data(data: Records, metric: Metric) -> Records:
    # Best first; ties broken alphabetically by team
    sign = 1 if metric.lower_is_better else -1
    return tuple(sorted(data, key=lambda r: (sign * r.metric(metric.value), r.team)))


@lru_cache(maxsize=_CACHE_SIZE)
def _logo_map(data: Records) -> Mapping[str, str]:
    return MappingProxyType({r.team: r.logo for r in data})


@lru_cache(maxsize=_CACHE_SIZE)
def _radar_data(data: Records, team1: str, team2: str) -> Tuple[Mapping, ...]:
    by_team = {r.team: r for r in data}
    first, second = by_team.get(team1), by_team.get(team2)
    if first is None or second is None:
        return ()

    rows = []
    for label, key, lower_is_better in RADAR_AXES:
        ceiling = max(r.metric(key) for r in data) or 1

        def scale(record: TeamDefenseRecord) -> int:
            value = record.metric(key)
            if lower_is_better:
                return _round_half_up((ceiling - value) / ceiling * 100)
            return _round_half_up(value / ceiling * 100)

        rows.append(
            MappingProxyType(
                {
                    "stat": label,
                    team1: scale(first),
                    team2: scale(second),
                    "fullMark": RADAR_FULL_MARK,
                }
            )
        )
    return tuple(rows)


@lru_cache(maxsize=_CACHE_SIZE)
def _table_data(data: Records) -> Records:
    return tuple(sorted(data, key=lambda r: r.points_allowed))


@lru_cache(maxsize=_CACHE_SIZE)
def _team_full_name(data: Records, abbreviation: str) -> Optional[str]:
    for record in data:
        if record.team == abbreviation:
            return record.full_name
    return None


def select_sorted_data(state: DashboardState) -> Records:
    """Records ordered for the bar chart by the selected metric."""
    return _sorted_data(state.defense_data, state.selected_metric)


def select_logo_map(state: DashboardState) -> Mapping[str, str]:
    return _logo_map(state.defense_data)


def select_radar_data(state: DashboardState) -> Tuple[Mapping, ...]:
    """Head-to-head rows for team1 vs team2, each axis scaled 0-100 (higher is better)."""
    return _radar_data(state.defense_data, state.team1, state.team2)


def select_table_data(state: DashboardState) -> Records:
    return _table_data(state.defense_data)


def select_team_full_name(state: DashboardState, abbreviation: str) -> Optional[str]:
    return _team_full_name(state.defense_data, abbreviation)


def clear_selector_caches() -> None:
    for projection in (_sorted_data, _logo_map, _radar_data, _table_data, _team_full_name):
        projection.cache_clear()
