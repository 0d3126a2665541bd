from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from .enums import DocumentKind, StatGroup
from .team import TeamIdentity
from nfl_defense.utils.misc_utils import to_number


class UpstreamDocument(BaseModel):
    """A parsed upstream JSON document tagged with the shape it was fetched as."""

    kind: DocumentKind
    payload: Any = None
    url: Optional[str] = None


class RawStatTable(BaseModel):
    """Name -> value lookup over one flat array of upstream stat entries.

    Entries are matched against their ``name``, ``abbreviation`` and ``type``
    fields. Standings arrays match exactly; statistics categories are matched
    case-insensitively since ESPN capitalizes them inconsistently.
    """

    category: str = ""
    entries: List[Dict[str, Any]] = Field(default_factory=list)
    case_sensitive: bool = True

    def _matches(self, entry: Dict[str, Any], candidate: str) -> bool:
        for field in ("name", "abbreviation", "type"):
            label = entry.get(field)
            if not isinstance(label, str):
                continue
            if self.case_sensitive:
                if label == candidate:
                    return True
            elif label.lower() == candidate.lower():
                return True
        return False

    def find(self, names: Sequence[str]) -> Optional[float]:
        """Returns the value of the first entry matching any candidate, in order.

        None means no candidate matched at all; a matching entry with no
        parseable value yields 0.0.
        """
        for candidate in names:
            for entry in self.entries:
                if self._matches(entry, candidate):
                    return (
                        to_number(entry.get("value"))
                        or to_number(entry.get("displayValue"))
                        or 0.0
                    )
        return None

    def get_stat(self, names: Sequence[str]) -> float:
        value = self.find(names)
        return value if value is not None else 0.0


class ExtractedTeam(BaseModel):
    identity: TeamIdentity
    stats: RawStatTable = Field(default_factory=RawStatTable)


class ExtractionResult(BaseModel):
    """What the extractor found in one document. Empty for unknown shapes."""

    kind: DocumentKind = DocumentKind.UNKNOWN
    teams: List[ExtractedTeam] = Field(default_factory=list)
    categories: Dict[StatGroup, Dict[str, RawStatTable]] = Field(default_factory=dict)

    def category(self, group: StatGroup, name: str) -> Optional[RawStatTable]:
        return self.categories.get(group, {}).get(name.lower())

    @property
    def is_empty(self) -> bool:
        return not self.teams and not any(self.categories.values())
