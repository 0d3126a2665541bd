import sys
import asyncio
import json

from nfl_defense.logging.setup import setup_logging
from nfl_defense.config.settings import settings

setup_logging()

from loguru import logger

from nfl_defense.models.envelope import ErrorEnvelope, StatsEnvelope
from nfl_defense.pipeline.defense_pipeline import run_defense_cycle
from nfl_defense.state.dashboard_state import (
    DashboardState,
    fetch_started,
    receive_envelope,
    set_selected_metric,
)
from nfl_defense.state.selectors import select_sorted_data
from nfl_defense.models.enums import Metric

from rich import print
from rich.panel import Panel
from rich.table import Table


def render_summary(envelope: StatsEnvelope) -> None:
    """Prints teams ranked by efficiency rating."""
    state = receive_envelope(fetch_started(DashboardState()), envelope)
    state = set_selected_metric(state, Metric.DVOA)

    table = Table(title=envelope.source)
    table.add_column("#", justify="right")
    table.add_column("Team")
    table.add_column("Pts/G", justify="right")
    table.add_column("Yds/G", justify="right")
    table.add_column("Pass/G", justify="right")
    table.add_column("Rush/G", justify="right")
    table.add_column("Sacks", justify="right")
    table.add_column("INT", justify="right")
    table.add_column("FF", justify="right")
    table.add_column("Rating", justify="right", style="bold yellow")

    for rank, record in enumerate(select_sorted_data(state), start=1):
        table.add_row(
            str(rank),
            f"{record.team} {record.full_name}",
            f"{record.points_allowed:.1f}",
            f"{record.yards_allowed:.1f}",
            f"{record.pass_yards_allowed:.1f}",
            f"{record.rush_yards_allowed:.1f}",
            f"{record.sacks:g}",
            f"{record.interceptions:g}",
            f"{record.fumbles:g}",
            f"{record.dvoa:.1f}",
        )
    print(table)


async def main() -> int:
    """Runs one pipeline cycle, saves the envelope and prints a summary."""
    logger.info(f"Starting NFL defense stats cycle for season {settings.season}")

    envelope = await run_defense_cycle()

    if isinstance(envelope, ErrorEnvelope):
        print(Panel(envelope.error, title="NFL stats unavailable", style="red"))
        return 1

    output_filename = settings.output_file
    try:
        with open(output_filename, "w", encoding="utf-8") as f:
            json.dump(envelope.to_payload(), f, indent=2, ensure_ascii=False)
        logger.success(f"Saved stats envelope to {output_filename}")
    except IOError as e:
        logger.error(f"Failed to write stats envelope to {output_filename}: {e}")

    render_summary(envelope)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Unhandled exception in main execution: {e}")
        sys.exit(1)
