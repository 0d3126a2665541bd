from pydantic import BaseModel, ConfigDict


class TeamIdentity(BaseModel):
    """Who a team is, as reported by the upstream document."""

    model_config = ConfigDict(frozen=True)

    team_id: str = ""  # ESPN numeric id, needed for per-team requests
    abbreviation: str
    display_name: str = ""
    logo: str = ""
