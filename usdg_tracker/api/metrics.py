from fastapi import APIRouter, Depends

from usdg_tracker.api.deps import get_history_log
from usdg_tracker.metrics.summarizer import group_by_month, group_by_week, summarize
from usdg_tracker.storage.history_log import HistoryLog

router = APIRouter()


def _as_dict(summary):
    return summary.to_dict() if summary is not None else None


@router.get("")
def all_metrics(history_log: HistoryLog = Depends(get_history_log)):
    entries = history_log.read_all()
    return {"entries": [e.to_dict() for e in entries], "count": len(entries)}


@router.get("/weekly")
def weekly_metrics(history_log: HistoryLog = Depends(get_history_log)):
    summary = summarize(group_by_week(history_log.read_all()))
    return {
        "weekly": [w.to_dict() for w in summary["periods"]],
        "currentWeek": _as_dict(summary["current"]),
        "previousWeek": _as_dict(summary["previous"]),
        "changes": summary["changes"],
    }


@router.get("/monthly")
def monthly_metrics(history_log: HistoryLog = Depends(get_history_log)):
    # Month in progress is dropped on every read
    summary = summarize(group_by_month(history_log.read_all()))
    return {
        "monthly": [m.to_dict() for m in summary["periods"]],
        "currentMonth": _as_dict(summary["current"]),
        "previousMonth": _as_dict(summary["previous"]),
        "changes": summary["changes"],
    }
