"""
Pytest configuration and ESPN-shaped payload builders.

HTTP never leaves the process: fetchers are built on ``httpx.MockTransport``
with a handler that routes by URL path.
"""

import asyncio
from typing import Callable, Dict, List, Optional

import httpx
import pytest

from nfl_defense.fetchers.espn_fetcher import EspnFetcher
from nfl_defense.state.selectors import clear_selector_caches

Handler = Callable[[httpx.Request], httpx.Response]


def run(coro):
    """Drives a coroutine to completion from a plain test function."""
    return asyncio.run(coro)


def stat(name: str, value, abbreviation: Optional[str] = None, display=None) -> Dict:
    entry = {"name": name, "value": value}
    if abbreviation:
        entry["abbreviation"] = abbreviation
    entry["displayValue"] = display if display is not None else str(value)
    return entry


def standings_entry(
    team_id: str,
    abbreviation: str,
    display_name: str,
    wins: float = 10,
    losses: float = 7,
    points_against: float = 340,
    logo: Optional[str] = "default",
) -> Dict:
    team = {"id": team_id, "abbreviation": abbreviation, "displayName": display_name}
    if logo:
        href = (
            f"https://a.espncdn.com/i/teamlogos/nfl/500/{abbreviation.lower()}.png"
            if logo == "default"
            else logo
        )
        team["logos"] = [{"href": href}]
    return {
        "team": team,
        "stats": [
            stat("wins", wins, "W"),
            stat("losses", losses, "L"),
            stat("pointsFor", 400, "PF"),
            stat("pointsAgainst", points_against, "PA"),
        ],
    }


def standings_payload(entries: List[Dict]) -> Dict:
    """Splits entries across two conference groups like ESPN does."""
    half = (len(entries) + 1) // 2
    return {
        "children": [
            {"name": "American Football Conference", "standings": {"entries": entries[:half]}},
            {"name": "National Football Conference", "standings": {"entries": entries[half:]}},
        ]
    }


def statistics_payload(
    total_yards: float = 5440,
    pass_yards: float = 3740,
    rush_yards: float = 1700,
    sacks: float = 40,
    interceptions: float = 12,
    fumbles_forced: float = 10,
) -> Dict:
    return {
        "results": {
            "opponent": [
                {
                    "name": "passing",
                    "stats": [
                        stat("netPassingYards", pass_yards),
                        stat("totalYards", total_yards),
                    ],
                },
                {
                    "name": "rushing",
                    "stats": [
                        stat("rushingYards", rush_yards),
                        stat("totalYards", total_yards),
                    ],
                },
            ],
            "stats": {
                "categories": [
                    {"name": "defensive", "stats": [stat("sacks", sacks)]},
                    {
                        "name": "defensiveInterceptions",
                        "stats": [stat("interceptions", interceptions)],
                    },
                    {"name": "general", "stats": [stat("fumblesForced", fumbles_forced)]},
                ]
            },
        }
    }


def directory_payload(teams: List[Dict]) -> Dict:
    return {"sports": [{"leagues": [{"teams": [{"team": t} for t in teams]}]}]}


def league(size: int = 32) -> List[Dict]:
    """Standings entries T01..Tnn with ESPN ids "1".."n" and rising points allowed."""
    return [
        standings_entry(str(i), f"T{i:02d}", f"Team {i}", points_against=300 + i * 2)
        for i in range(1, size + 1)
    ]


def league_statistics(team_id: str) -> Dict:
    i = int(team_id)
    return statistics_payload(
        total_yards=5000 + i * 17,
        pass_yards=3400 + i * 17,
        rush_yards=1600,
        sacks=20 + i,
        interceptions=i % 9,
        fumbles_forced=i % 5,
    )


def espn_router(
    standings: Optional[Dict] = None,
    statistics: Optional[Callable[[str], Dict]] = None,
    directory: Optional[Dict] = None,
    fail_team_ids=(),
    standings_status: int = 200,
    calls: Optional[List[str]] = None,
) -> Handler:
    """Builds a MockTransport handler serving the three ESPN document families."""

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if calls is not None:
            calls.append(path)
        if path.endswith("/standings"):
            if standings_status != 200:
                return httpx.Response(standings_status, json={"error": "unavailable"})
            return httpx.Response(200, json=standings if standings is not None else {})
        if path.endswith("/statistics"):
            team_id = path.rstrip("/").split("/")[-2]
            if team_id in fail_team_ids:
                raise httpx.ConnectError("connection refused", request=request)
            if statistics is None:
                return httpx.Response(404, json={})
            return httpx.Response(200, json=statistics(team_id))
        if path.endswith("/teams"):
            if directory is None:
                return httpx.Response(503, json={})
            return httpx.Response(200, json=directory)
        return httpx.Response(404, json={})

    return handler


def make_fetcher(handler: Handler, attempts: int = 1) -> EspnFetcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return EspnFetcher(client=client, season=2024, attempts=attempts)


@pytest.fixture(autouse=True)
def _fresh_selector_caches():
    clear_selector_caches()
    yield
    clear_selector_caches()
