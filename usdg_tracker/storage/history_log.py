import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

from usdg_tracker.utils.types import LogEntry, MetricsSnapshot

log = logging.getLogger(__name__)


class DecimalEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, Decimal):
            return int(obj) if obj == obj.to_integral_value() else float(obj)
        return super().default(obj)


def _reject_constant(token):
    # NaN / Infinity are not JSON
    raise ValueError(f"non-finite value in log line: {token}")


class HistoryLog:
    """
    Append-only JSONL store of daily metrics snapshots.

    One `{"timestamp": ..., "metrics": {...}}` object per line. Lines that
    don't parse (e.g. a half-written tail after a crash) are ignored on read.
    """

    def __init__(self, path):
        self.path = Path(path)

    def append(self, metrics: MetricsSnapshot, timestamp: datetime | None = None) -> LogEntry:
        entry = LogEntry(timestamp or datetime.now(timezone.utc), metrics)
        line = json.dumps(entry.to_dict(), cls=DecimalEncoder)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as fh:
            fh.write(line + "\n")

        log.info(f"📝 Logged metrics at {entry.to_dict()['timestamp']}")
        return entry

    def _iter_lines(self):
        if not self.path.exists():
            return
        with self.path.open("r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if line:
                    yield line

    def read_all(self) -> list[LogEntry]:
        entries = []
        for line in self._iter_lines():
            try:
                raw = json.loads(line, parse_float=Decimal, parse_constant=_reject_constant)
                entries.append(LogEntry.from_dict(raw))
            except (ValueError, KeyError, TypeError, ArithmeticError, AttributeError):
                continue
        entries.sort(key=lambda e: e.timestamp)
        return entries

    def logged_dates(self) -> set[str]:
        """UTC calendar dates (YYYY-MM-DD) that already have an entry."""
        return {e.timestamp.date().isoformat() for e in self.read_all()}
