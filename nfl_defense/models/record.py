from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .team import TeamIdentity


class TeamDefenseRecord(BaseModel):
    """One team's defensive line for the season.

    Yardage and points are per-game averages; sacks, interceptions and
    fumbles are season totals. ``dvoa`` is the composite efficiency rating
    and stays 0 until the whole batch has been scored.
    """

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    team: str
    full_name: str = ""
    logo: str = ""
    points_allowed: float = Field(0.0, ge=0)
    yards_allowed: float = Field(0.0, ge=0)
    pass_yards_allowed: float = Field(0.0, ge=0)
    rush_yards_allowed: float = Field(0.0, ge=0)
    sacks: float = Field(0.0, ge=0)
    interceptions: float = Field(0.0, ge=0)
    fumbles: float = Field(0.0, ge=0)
    dvoa: float = Field(0.0, ge=0, le=100)

    @classmethod
    def from_identity(
        cls, identity: TeamIdentity, points_allowed: float = 0.0
    ) -> "TeamDefenseRecord":
        return cls(
            team=identity.abbreviation,
            full_name=identity.display_name,
            logo=identity.logo,
            points_allowed=points_allowed,
        )

    def metric(self, key: str) -> float:
        """Looks up a numeric field by its serialized (camelCase) name."""
        return getattr(self, _CAMEL_TO_FIELD[key])


_CAMEL_TO_FIELD = {
    to_camel(name): name for name in TeamDefenseRecord.model_fields if name != "team"
}
