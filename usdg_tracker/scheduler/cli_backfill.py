import asyncio
import logging

import typer

from usdg_tracker.config.settings import METRICS_LOG_FILE
from usdg_tracker.metrics.backfill import backfill
from usdg_tracker.sources.exchanges.registry import build_clients
from usdg_tracker.sources.orchestrator import fetch_aggregated_volume
from usdg_tracker.storage.history_log import HistoryLog

log = logging.getLogger(__name__)

app = typer.Typer(help="Backfill daily metrics snapshots into the history log")


@app.command("run")
def runner(
    weeks: int = typer.Option(4, help="How many weeks of daily snapshots to back-fill"),
    log_file: str = typer.Option(METRICS_LOG_FILE, help="Path of the JSONL history log"),
):
    """
    Recompute one snapshot per day for the last `weeks * 7` days and append
    those whose date is not logged yet.
    """
    log.info(f"[cli] Backfilling metrics for the past {weeks} weeks")
    aggregated = asyncio.run(fetch_aggregated_volume(build_clients()))
    log.info(f"[cli] Fetched {len(aggregated.daily_volume)} days of historical data")

    report = backfill(HistoryLog(log_file), aggregated, weeks=weeks)
    typer.echo(
        f"Backfill complete: {report.added} entries added, "
        f"{report.skipped} skipped (already existed), {report.missing} without data"
    )


def main():
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(name)s: %(message)s")
    app()


if __name__ == "__main__":
    main()
