from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from .record import TeamDefenseRecord


class StatsEnvelope(BaseModel):
    """Successful response handed to the presentation layer."""

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    stats: List[TeamDefenseRecord]
    last_updated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    source: str

    @field_serializer("last_updated")
    def _serialize_last_updated(self, value: datetime) -> str:
        # Millisecond precision with a Z suffix, e.g. 2024-11-03T18:22:01.512Z
        return (
            value.astimezone(timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z")
        )

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ErrorEnvelope(BaseModel):
    """Returned with a non-2xx status when the primary source fails."""

    error: str
    stats: List[TeamDefenseRecord] = Field(default_factory=list)

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
