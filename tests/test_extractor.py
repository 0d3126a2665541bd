import pytest

from nfl_defense.extraction.extractor import SchemaExtractor
from nfl_defense.models.documents import RawStatTable, UpstreamDocument
from nfl_defense.models.enums import DocumentKind, StatGroup

from conftest import (
    directory_payload,
    standings_entry,
    standings_payload,
    stat,
    statistics_payload,
)


@pytest.fixture
def extractor():
    return SchemaExtractor()


def doc(kind, payload):
    return UpstreamDocument(kind=kind, payload=payload)


class TestRawStatTable:
    def test_fallback_to_later_candidate(self):
        table = RawStatTable(entries=[stat("pointsAgainst", 310)])
        assert table.get_stat(["totalPointsAgainst", "pointsAgainst"]) == 310

    def test_first_candidate_wins(self):
        table = RawStatTable(
            entries=[stat("pointsAgainst", 310), stat("totalPointsAgainst", 355)]
        )
        assert table.get_stat(["totalPointsAgainst", "pointsAgainst"]) == 355

    def test_matches_abbreviation_and_type(self):
        table = RawStatTable(
            entries=[
                {"name": "wins", "abbreviation": "W", "value": 11},
                {"type": "losses", "value": 6},
            ]
        )
        assert table.get_stat(["W"]) == 11
        assert table.get_stat(["losses"]) == 6

    def test_display_value_used_when_value_missing(self):
        table = RawStatTable(entries=[{"name": "sacks", "displayValue": "41.5"}])
        assert table.get_stat(["sacks"]) == 41.5

    def test_oversized_integer_is_zero(self):
        table = RawStatTable(entries=[stat("pointsAgainst", 10**400)])
        assert table.get_stat(["pointsAgainst"]) == 0.0

    def test_no_match_is_zero(self):
        table = RawStatTable(entries=[stat("pointsFor", 400)])
        assert table.find(["pointsAgainst"]) is None
        assert table.get_stat(["pointsAgainst"]) == 0.0

    def test_case_insensitive_tables(self):
        table = RawStatTable(
            entries=[stat("fumblesForced", 9)], case_sensitive=False
        )
        assert table.get_stat(["FUMBLESFORCED"]) == 9


class TestStandings:
    def test_identity_and_stats_from_both_conferences(self, extractor):
        payload = standings_payload(
            [
                standings_entry("21", "PHI", "Philadelphia Eagles"),
                standings_entry("6", "DAL", "Dallas Cowboys", logo=None),
                standings_entry("12", "KC", "Kansas City Chiefs"),
            ]
        )

        result = extractor.extract(doc(DocumentKind.STANDINGS, payload))

        assert [t.identity.abbreviation for t in result.teams] == ["PHI", "DAL", "KC"]
        phi = result.teams[0]
        assert phi.identity.team_id == "21"
        assert phi.identity.display_name == "Philadelphia Eagles"
        assert phi.identity.logo.endswith("/phi.png")
        assert phi.stats.get_stat(["pointsAgainst"]) == 340
        assert result.teams[1].identity.logo == ""

    def test_entry_without_abbreviation_is_skipped(self, extractor):
        payload = standings_payload(
            [
                standings_entry("21", "PHI", "Philadelphia Eagles"),
                {"team": {"id": "99", "displayName": "Mystery"}, "stats": []},
            ]
        )
        result = extractor.extract(doc(DocumentKind.STANDINGS, payload))
        assert [t.identity.abbreviation for t in result.teams] == ["PHI"]

    def test_missing_stats_keeps_team(self, extractor):
        entry = standings_entry("21", "PHI", "Philadelphia Eagles")
        del entry["stats"]
        result = extractor.extract(
            doc(DocumentKind.STANDINGS, standings_payload([entry]))
        )
        assert len(result.teams) == 1
        assert result.teams[0].stats.entries == []

    @pytest.mark.parametrize("payload", [None, [], {"children": "nope"}, {}])
    def test_malformed_payload_is_empty(self, extractor, payload):
        result = extractor.extract(doc(DocumentKind.STANDINGS, payload))
        assert result.teams == []


class TestTeamStatistics:
    def test_opponent_and_team_categories(self, extractor):
        result = extractor.extract(
            doc(DocumentKind.TEAM_STATISTICS, statistics_payload(sacks=44))
        )

        rushing = result.category(StatGroup.OPPONENT, "rushing")
        assert rushing.get_stat(["rushingYards"]) == 1700
        defensive = result.category(StatGroup.TEAM, "Defensive")
        assert defensive.get_stat(["sacks"]) == 44
        assert result.category(StatGroup.TEAM, "kicking") is None

    def test_unwrapped_document_with_list_stats(self, extractor):
        payload = statistics_payload()["results"]
        payload["stats"] = payload["stats"]["categories"]

        result = extractor.extract(doc(DocumentKind.TEAM_STATISTICS, payload))

        assert result.category(StatGroup.OPPONENT, "passing") is not None
        assert result.category(StatGroup.TEAM, "general").get_stat(["fumblesForced"]) == 10

    def test_no_categories_is_empty(self, extractor):
        result = extractor.extract(doc(DocumentKind.TEAM_STATISTICS, {"results": {}}))
        assert result.is_empty


class TestIdentityOnlyShapes:
    def test_scoreboard_deduplicates_competitors(self, extractor):
        phi = {"id": "21", "abbreviation": "PHI", "displayName": "Philadelphia Eagles"}
        dal = {"id": "6", "abbreviation": "DAL", "displayName": "Dallas Cowboys"}
        payload = {
            "events": [
                {"competitions": [{"competitors": [{"team": phi}, {"team": dal}]}]},
                {"competitions": [{"competitors": [{"team": dal}]}]},
            ]
        }

        result = extractor.extract(doc(DocumentKind.SCOREBOARD, payload))

        assert [t.identity.abbreviation for t in result.teams] == ["PHI", "DAL"]
        assert result.teams[0].stats.entries == []

    def test_team_directory(self, extractor):
        payload = directory_payload(
            [
                {
                    "id": "33",
                    "abbreviation": "BAL",
                    "displayName": "Baltimore Ravens",
                    "logos": [{"href": "https://example.test/bal.png"}],
                }
            ]
        )
        result = extractor.extract(doc(DocumentKind.TEAM_DIRECTORY, payload))
        assert result.teams[0].identity.logo == "https://example.test/bal.png"

    def test_empty_directory(self, extractor):
        result = extractor.extract(doc(DocumentKind.TEAM_DIRECTORY, {"sports": []}))
        assert result.teams == []


def test_unknown_kind_is_empty(extractor):
    result = extractor.extract(
        doc(DocumentKind.UNKNOWN, standings_payload([standings_entry("1", "A", "A")]))
    )
    assert result.kind == DocumentKind.UNKNOWN
    assert result.is_empty
