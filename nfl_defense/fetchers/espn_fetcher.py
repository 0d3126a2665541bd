# nfl_defense/fetchers/espn_fetcher.py

from typing import Optional

from loguru import logger

from nfl_defense.config.settings import settings
from nfl_defense.models.documents import UpstreamDocument
from nfl_defense.models.enums import DocumentKind
from .base_fetcher import BaseFetcher


class EspnFetcher(BaseFetcher):
    """Fetches the three ESPN document families the pipeline consumes."""

    def __init__(self, *args, season: Optional[int] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.season = season or settings.season
        self.site_api_base = settings.espn_site_api_base.rstrip("/")
        self.web_api_base = settings.espn_web_api_base.rstrip("/")

    def standings_url(self) -> str:
        return f"{self.web_api_base}/standings?season={self.season}&type=1"

    def team_statistics_url(self, team_id: str) -> str:
        return f"{self.site_api_base}/teams/{team_id}/statistics?season={self.season}"

    def team_directory_url(self) -> str:
        return f"{self.site_api_base}/teams"

    async def fetch_standings(self) -> UpstreamDocument:
        url = self.standings_url()
        logger.info(f"Fetching standings for season {self.season}")
        payload = await self.fetch_json(url)
        return UpstreamDocument(kind=DocumentKind.STANDINGS, payload=payload, url=url)

    async def fetch_team_statistics(self, team_id: str) -> UpstreamDocument:
        url = self.team_statistics_url(team_id)
        payload = await self.fetch_json(url)
        return UpstreamDocument(
            kind=DocumentKind.TEAM_STATISTICS, payload=payload, url=url
        )

    async def fetch_team_directory(self) -> UpstreamDocument:
        url = self.team_directory_url()
        logger.info("Fetching team directory")
        payload = await self.fetch_json(url)
        return UpstreamDocument(
            kind=DocumentKind.TEAM_DIRECTORY, payload=payload, url=url
        )
