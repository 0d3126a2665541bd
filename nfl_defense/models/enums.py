from enum import Enum


class DocumentKind(str, Enum):
    STANDINGS = "STANDINGS"
    TEAM_STATISTICS = "TEAM_STATISTICS"
    SCOREBOARD = "SCOREBOARD"
    TEAM_DIRECTORY = "TEAM_DIRECTORY"
    UNKNOWN = "UNKNOWN"


class StatGroup(str, Enum):
    """Which side of a team statistics document a category belongs to."""

    OPPONENT = "opponent"  # What the defense allowed
    TEAM = "team"  # What the team produced


class StatBasis(str, Enum):
    SEASON_TOTAL = "SEASON_TOTAL"
    PER_GAME = "PER_GAME"


class Metric(str, Enum):
    """Record fields the dashboard can rank teams by."""

    POINTS_ALLOWED = "pointsAllowed"
    YARDS_ALLOWED = "yardsAllowed"
    SACKS = "sacks"
    INTERCEPTIONS = "interceptions"
    DVOA = "dvoa"

    @property
    def lower_is_better(self) -> bool:
        return self in (Metric.POINTS_ALLOWED, Metric.YARDS_ALLOWED)
