from typing import Any, Dict, List, Optional

from loguru import logger

from nfl_defense.models.documents import (
    ExtractedTeam,
    ExtractionResult,
    RawStatTable,
    UpstreamDocument,
)
from nfl_defense.models.enums import DocumentKind, StatGroup
from nfl_defense.models.team import TeamIdentity


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


class SchemaExtractor:
    """Pulls team identity and raw counters out of upstream documents.

    Pure: never fetches and never raises on malformed payloads. Anything it
    cannot make sense of is skipped, and an unrecognized document kind gives
    an empty result.
    """

    def extract(self, document: UpstreamDocument) -> ExtractionResult:
        if document.kind == DocumentKind.STANDINGS:
            result = self._extract_standings(document.payload)
        elif document.kind == DocumentKind.TEAM_STATISTICS:
            result = self._extract_team_statistics(document.payload)
        elif document.kind == DocumentKind.SCOREBOARD:
            result = self._extract_scoreboard(document.payload)
        elif document.kind == DocumentKind.TEAM_DIRECTORY:
            result = self._extract_team_directory(document.payload)
        else:
            logger.warning(f"No extractor for document kind {document.kind.value}")
            return ExtractionResult()

        logger.debug(
            f"Extracted {len(result.teams)} teams and "
            f"{sum(len(c) for c in result.categories.values())} categories "
            f"from {document.kind.value} document"
        )
        return result

    def _extract_standings(self, payload: Any) -> ExtractionResult:
        """children[] (conferences) -> standings.entries[] -> team + stats[]."""
        teams: List[ExtractedTeam] = []
        for conference in _as_list(_as_dict(payload).get("children")):
            entries = _as_list(
                _as_dict(_as_dict(conference).get("standings")).get("entries")
            )
            for entry in entries:
                entry = _as_dict(entry)
                identity = self._identity_from(entry.get("team"))
                if identity is None:
                    continue
                stats = [s for s in _as_list(entry.get("stats")) if isinstance(s, dict)]
                teams.append(
                    ExtractedTeam(identity=identity, stats=RawStatTable(entries=stats))
                )
        return ExtractionResult(kind=DocumentKind.STANDINGS, teams=teams)

    def _extract_team_statistics(self, payload: Any) -> ExtractionResult:
        """Opponent categories (allowed) and team categories (produced).

        ESPN nests these under ``results`` on some endpoint versions, and the
        team side is either a bare list or ``{"categories": [...]}``.
        """
        payload = _as_dict(payload)
        results = _as_dict(payload.get("results")) or payload

        categories = {
            StatGroup.OPPONENT: self._categories_from(results.get("opponent")),
            StatGroup.TEAM: self._categories_from(results.get("stats")),
        }
        return ExtractionResult(
            kind=DocumentKind.TEAM_STATISTICS, categories=categories
        )

    def _extract_scoreboard(self, payload: Any) -> ExtractionResult:
        """Identity only: events[] -> competitions[] -> competitors[] -> team."""
        teams: List[ExtractedTeam] = []
        seen = set()
        for event in _as_list(_as_dict(payload).get("events")):
            for competition in _as_list(_as_dict(event).get("competitions")):
                for competitor in _as_list(_as_dict(competition).get("competitors")):
                    identity = self._identity_from(_as_dict(competitor).get("team"))
                    if identity is None or identity.abbreviation in seen:
                        continue
                    seen.add(identity.abbreviation)
                    teams.append(ExtractedTeam(identity=identity))
        return ExtractionResult(kind=DocumentKind.SCOREBOARD, teams=teams)

    def _extract_team_directory(self, payload: Any) -> ExtractionResult:
        """Identity only: sports[0].leagues[0].teams[].team."""
        sports = _as_list(_as_dict(payload).get("sports"))
        leagues = _as_list(_as_dict(sports[0]).get("leagues")) if sports else []
        team_items = _as_list(_as_dict(leagues[0]).get("teams")) if leagues else []

        teams: List[ExtractedTeam] = []
        for item in team_items:
            identity = self._identity_from(_as_dict(item).get("team"))
            if identity is not None:
                teams.append(ExtractedTeam(identity=identity))
        return ExtractionResult(kind=DocumentKind.TEAM_DIRECTORY, teams=teams)

    def _categories_from(self, raw: Any) -> Dict[str, RawStatTable]:
        if isinstance(raw, dict):
            raw = raw.get("categories")
        tables: Dict[str, RawStatTable] = {}
        for category in _as_list(raw):
            category = _as_dict(category)
            name = category.get("name")
            if not isinstance(name, str) or not name:
                continue
            key = name.lower()
            if key in tables:
                continue
            stats = [s for s in _as_list(category.get("stats")) if isinstance(s, dict)]
            tables[key] = RawStatTable(
                category=name, entries=stats, case_sensitive=False
            )
        return tables

    def _identity_from(self, raw_team: Any) -> Optional[TeamIdentity]:
        team = _as_dict(raw_team)
        abbreviation = team.get("abbreviation")
        if not isinstance(abbreviation, str) or not abbreviation.strip():
            logger.warning(f"Skipping team without abbreviation: {team.get('id', '?')}")
            return None

        logos = _as_list(team.get("logos"))
        logo = _as_dict(logos[0]).get("href") if logos else None
        if not isinstance(logo, str):
            logo = team.get("logo") if isinstance(team.get("logo"), str) else ""

        team_id = team.get("id")
        display_name = team.get("displayName")
        return TeamIdentity(
            team_id=str(team_id) if team_id is not None else "",
            abbreviation=abbreviation.strip(),
            display_name=display_name if isinstance(display_name, str) else "",
            logo=logo,
        )
