import asyncio
from typing import Dict, List, Optional, Union

from loguru import logger

from nfl_defense.calculation.efficiency import compute_efficiency_ratings
from nfl_defense.config.settings import settings
from nfl_defense.extraction.extractor import SchemaExtractor
from nfl_defense.fetchers.base_fetcher import FetchError, PrimarySourceError
from nfl_defense.fetchers.espn_fetcher import EspnFetcher
from nfl_defense.models.envelope import ErrorEnvelope, StatsEnvelope
from nfl_defense.models.record import TeamDefenseRecord
from nfl_defense.models.team import TeamIdentity
from nfl_defense.normalization.normalizer import StandingsLine, StatNormalizer


class DefensePipeline:
    """Standings -> per-team statistics (fan-out) -> efficiency scoring."""

    def __init__(
        self,
        fetcher: EspnFetcher,
        extractor: Optional[SchemaExtractor] = None,
        normalizer: Optional[StatNormalizer] = None,
        max_concurrency: Optional[int] = None,
        enrich_identity: Optional[bool] = None,
    ):
        self.fetcher = fetcher
        self.extractor = extractor or SchemaExtractor()
        self.normalizer = normalizer or StatNormalizer()
        self.max_concurrency = max_concurrency or settings.max_concurrent_requests
        self.enrich_identity = (
            settings.enrich_identity if enrich_identity is None else enrich_identity
        )

    async def run(self) -> StatsEnvelope:
        """Builds the full envelope.

        Raises:
            PrimarySourceError: standings could not be fetched or held no teams.
        """
        lines = await self._standings_lines()

        if self.enrich_identity:
            lines = await self._enrich_identities(lines)

        semaphore = asyncio.Semaphore(self.max_concurrency)
        logger.info(f"Fetching detailed statistics for {len(lines)} teams...")
        records = await asyncio.gather(
            *(self._detailed_record(line, semaphore) for line in lines)
        )

        scored = compute_efficiency_ratings(records)
        return StatsEnvelope(
            stats=scored, source=f"ESPN API - {self.fetcher.season} Season"
        )

    async def _standings_lines(self) -> List[StandingsLine]:
        try:
            document = await self.fetcher.fetch_standings()
        except FetchError as e:
            logger.error(f"Standings fetch failed: {e}")
            raise PrimarySourceError("Failed to fetch standings") from e

        extracted = self.extractor.extract(document)
        lines: List[StandingsLine] = []
        seen = set()
        for team in extracted.teams:
            if team.identity.abbreviation in seen:
                logger.warning(
                    f"Duplicate standings entry for {team.identity.abbreviation}, keeping the first"
                )
                continue
            seen.add(team.identity.abbreviation)
            lines.append(self.normalizer.from_standings(team))

        if not lines:
            raise PrimarySourceError("No teams found in standings")

        logger.info(f"Standings yielded {len(lines)} teams.")
        return lines

    async def _detailed_record(
        self, line: StandingsLine, semaphore: asyncio.Semaphore
    ) -> TeamDefenseRecord:
        """Merges per-team statistics into the standings record.

        Never raises: any failure leaves the standings-only record in place.
        """
        if not line.identity.team_id:
            logger.warning(f"No ESPN id for {line.record.team}; skipping statistics")
            return line.record

        async with semaphore:
            try:
                document = await self.fetcher.fetch_team_statistics(
                    line.identity.team_id
                )
                statistics = self.extractor.extract(document)
                record = self.normalizer.merge_team_statistics(
                    line.record, statistics, line.games_played
                )
                logger.debug(f"Merged statistics for {record.team}")
                return record
            except FetchError as e:
                logger.error(f"Failed to fetch stats for {line.record.team}: {e}")
            except Exception as e:
                logger.exception(
                    f"Unexpected error processing stats for {line.record.team}: {e}"
                )
        return line.record

    async def _enrich_identities(
        self, lines: List[StandingsLine]
    ) -> List[StandingsLine]:
        """Fills blank names/logos from the team directory; a failure changes nothing."""
        try:
            document = await self.fetcher.fetch_team_directory()
        except FetchError as e:
            logger.warning(f"Team directory unavailable, keeping standings identity: {e}")
            return lines

        directory: Dict[str, TeamIdentity] = {
            team.identity.abbreviation: team.identity
            for team in self.extractor.extract(document).teams
        }

        enriched: List[StandingsLine] = []
        for line in lines:
            known = directory.get(line.identity.abbreviation)
            if known is None:
                enriched.append(line)
                continue
            record = line.record.model_copy(
                update={
                    "full_name": line.record.full_name or known.display_name,
                    "logo": line.record.logo or known.logo,
                }
            )
            enriched.append(line.model_copy(update={"record": record}))
        return enriched


async def run_defense_cycle(
    fetcher: Optional[EspnFetcher] = None,
) -> Union[StatsEnvelope, ErrorEnvelope]:
    """Runs one pipeline cycle and always returns an envelope, never raises.

    A fetcher passed in is left open for the caller; one created here is closed.
    """
    owns_fetcher = fetcher is None
    fetcher = fetcher or EspnFetcher()
    try:
        envelope = await DefensePipeline(fetcher).run()
        logger.success(f"Pipeline produced {len(envelope.stats)} team records.")
        return envelope
    except PrimarySourceError as e:
        logger.error(f"Primary source failure: {e}")
        return ErrorEnvelope(error=str(e))
    except Exception as e:
        logger.exception(f"Error in NFL stats pipeline: {e}")
        return ErrorEnvelope(error="Failed to fetch NFL statistics")
    finally:
        if owns_fetcher:
            await fetcher.close()
