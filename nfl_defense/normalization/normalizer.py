from typing import NamedTuple, Optional, Sequence, Tuple

from loguru import logger
from pydantic import BaseModel

from nfl_defense.models.documents import ExtractedTeam, ExtractionResult, RawStatTable
from nfl_defense.models.enums import StatBasis, StatGroup
from nfl_defense.models.record import TeamDefenseRecord
from nfl_defense.models.team import TeamIdentity
from nfl_defense.utils.misc_utils import per_game, round_one

# Regular season length used when wins + losses is unavailable
DEFAULT_GAMES_PLAYED = 17


class StatSource(NamedTuple):
    """One acceptable upstream location for a target field.

    ``names`` are candidate keys tried in order. ``category`` is None for the
    flat standings array, otherwise the statistics category to search in
    ``group``.
    """

    names: Tuple[str, ...]
    basis: StatBasis = StatBasis.SEASON_TOTAL
    category: Optional[str] = None
    group: StatGroup = StatGroup.OPPONENT


WINS_KEYS = ("wins", "W")
LOSSES_KEYS = ("losses", "L")

POINTS_ALLOWED_SOURCES = (
    StatSource(("totalPointsAgainst", "pointsAllowed", "pointsAgainst", "PA")),
    StatSource(("avgPointsAgainst",), StatBasis.PER_GAME),
)

YARDS_ALLOWED_SOURCES = (
    StatSource(("totalYards",), category="rushing"),
    StatSource(("totalYards",), category="passing"),
    StatSource(("totalYards",), category="general"),
    StatSource(
        ("yardsAgainstPerGame",),
        StatBasis.PER_GAME,
        category="defensive",
        group=StatGroup.TEAM,
    ),
)

PASS_YARDS_ALLOWED_SOURCES = (
    StatSource(("netPassingYards", "passingYards"), category="passing"),
    StatSource(
        ("passingYardsAgainstPerGame",),
        StatBasis.PER_GAME,
        category="defensive",
        group=StatGroup.TEAM,
    ),
)

RUSH_YARDS_ALLOWED_SOURCES = (
    StatSource(("rushingYards",), category="rushing"),
    StatSource(
        ("rushingYardsAgainstPerGame",),
        StatBasis.PER_GAME,
        category="defensive",
        group=StatGroup.TEAM,
    ),
)

SACKS_SOURCES = (StatSource(("sacks",), category="defensive", group=StatGroup.TEAM),)

INTERCEPTIONS_SOURCES = (
    StatSource(
        ("interceptions",), category="defensiveInterceptions", group=StatGroup.TEAM
    ),
    StatSource(("interceptions",), category="defensive", group=StatGroup.TEAM),
)

FUMBLES_SOURCES = (
    StatSource(("fumblesForced",), category="general", group=StatGroup.TEAM),
    StatSource(("fumblesForced",), category="defensive", group=StatGroup.TEAM),
    StatSource(("fumblesRecovered",), category="general", group=StatGroup.TEAM),
)


class StandingsLine(BaseModel):
    """A record seeded from standings, plus what later merges need to know."""

    identity: TeamIdentity
    record: TeamDefenseRecord
    games_played: float


class StatNormalizer:
    """Maps raw upstream counters onto the fixed TeamDefenseRecord vocabulary."""

    def games_played(self, standings_stats: RawStatTable) -> float:
        played = standings_stats.get_stat(WINS_KEYS) + standings_stats.get_stat(
            LOSSES_KEYS
        )
        return played if played > 0 else DEFAULT_GAMES_PLAYED

    def from_standings(self, team: ExtractedTeam) -> StandingsLine:
        """Identity and per-game points allowed from a standings entry."""
        games = self.games_played(team.stats)
        points = self._resolve(
            POINTS_ALLOWED_SOURCES,
            games,
            lambda source: team.stats,
            field="pointsAllowed",
            team=team.identity.abbreviation,
        )
        return StandingsLine(
            identity=team.identity,
            record=TeamDefenseRecord.from_identity(team.identity, points),
            games_played=games,
        )

    def merge_team_statistics(
        self,
        record: TeamDefenseRecord,
        statistics: ExtractionResult,
        games_played: float,
    ) -> TeamDefenseRecord:
        """Returns a copy of ``record`` with yardage, sacks and turnovers filled in.

        Identity and points allowed are left as the standings set them.
        """

        def table_for(source: StatSource) -> Optional[RawStatTable]:
            return statistics.category(source.group, source.category or "")

        def resolve(sources: Sequence[StatSource], field: str) -> float:
            return self._resolve(
                sources, games_played, table_for, field=field, team=record.team
            )

        return record.model_copy(
            update={
                "yards_allowed": resolve(YARDS_ALLOWED_SOURCES, "yardsAllowed"),
                "pass_yards_allowed": resolve(
                    PASS_YARDS_ALLOWED_SOURCES, "passYardsAllowed"
                ),
                "rush_yards_allowed": resolve(
                    RUSH_YARDS_ALLOWED_SOURCES, "rushYardsAllowed"
                ),
                "sacks": resolve(SACKS_SOURCES, "sacks"),
                "interceptions": resolve(INTERCEPTIONS_SOURCES, "interceptions"),
                "fumbles": resolve(FUMBLES_SOURCES, "fumbles"),
            }
        )

    def _resolve(
        self,
        sources: Sequence[StatSource],
        games_played: float,
        table_for,
        field: str,
        team: str,
    ) -> float:
        """First present source wins; totals are averaged only when per-game is wanted.

        Count fields (sacks, interceptions, fumbles) only ever have season
        total sources and are returned as-is.
        """
        for source in sources:
            table = table_for(source)
            if table is None:
                continue
            value = table.find(source.names)
            if value is None:
                continue
            if value < 0:
                logger.warning(f"Negative {field} ({value}) for {team}, using 0")
                return 0.0
            if field in _PER_GAME_FIELDS and source.basis == StatBasis.SEASON_TOTAL:
                return per_game(value, games_played)
            if field in _PER_GAME_FIELDS:
                return round_one(value)
            return value

        logger.debug(f"No source found for {field} on {team}, using 0")
        return 0.0


_PER_GAME_FIELDS = {"pointsAllowed", "yardsAllowed", "passYardsAllowed", "rushYardsAllowed"}
