from typing import Iterable, Optional, Tuple, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict

from nfl_defense.models.enums import Metric
from nfl_defense.models.envelope import ErrorEnvelope, StatsEnvelope
from nfl_defense.models.record import TeamDefenseRecord

UNKNOWN_ERROR = "An unknown error occurred"
NO_DATA_ERROR = "No data received from API"


class DashboardState(BaseModel):
    """Everything the dashboard knows: fetched records plus the user's selections.

    Immutable; every reducer below returns a new state.
    """

    model_config = ConfigDict(frozen=True)

    defense_data: Tuple[TeamDefenseRecord, ...] = ()
    loading: bool = False
    error: Optional[str] = None
    selected_metric: Metric = Metric.POINTS_ALLOWED
    team1: str = "PHI"
    team2: str = "DAL"


def fetch_started(state: DashboardState) -> DashboardState:
    return state.model_copy(update={"loading": True, "error": None})


def fetch_succeeded(
    state: DashboardState, records: Iterable[TeamDefenseRecord]
) -> DashboardState:
    """Stores the records; the first two teams become the radar pair."""
    records = tuple(records)
    update = {"loading": False, "defense_data": records}
    if len(records) >= 2:
        update["team1"] = records[0].team
        update["team2"] = records[1].team
    return state.model_copy(update=update)


def fetch_failed(state: DashboardState, message: Optional[str] = None) -> DashboardState:
    return state.model_copy(update={"loading": False, "error": message or UNKNOWN_ERROR})


def receive_envelope(
    state: DashboardState, envelope: Union[StatsEnvelope, ErrorEnvelope]
) -> DashboardState:
    """Applies a pipeline result: an error or an empty stats list is a failure."""
    if isinstance(envelope, ErrorEnvelope):
        return fetch_failed(state, envelope.error)
    if not envelope.stats:
        logger.warning(NO_DATA_ERROR)
        return fetch_failed(state, NO_DATA_ERROR)
    return fetch_succeeded(state, envelope.stats)


def set_selected_metric(
    state: DashboardState, metric: Union[Metric, str]
) -> DashboardState:
    return state.model_copy(update={"selected_metric": Metric(metric)})


def set_team1(state: DashboardState, team: str) -> DashboardState:
    return state.model_copy(update={"team1": team})


def set_team2(state: DashboardState, team: str) -> DashboardState:
    return state.model_copy(update={"team2": team})
