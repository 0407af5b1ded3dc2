# celery_app.py  ─────────────────────────────────────────────────────────
from celery import Celery
from celery.schedules import crontab
import logging
import logging.config

from usdg_tracker.config.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    DAILY_METRICS_HOUR,
    DAILY_METRICS_MINUTE,
)

# ── 1.  Broker / backend  ────────────────────────────────────
celery_app = Celery(
    "usdg_tasks",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# ── 2.  Core config Beat ─────────────────────────────────────
celery_app.conf.update(
    task_serializer       ='json',
    result_serializer     ='json',
    accept_content        =['json'],
    timezone              ='UTC',
    enable_utc            =True,

    # --- use RedBeat for persistent schedules
    beat_scheduler        ="redbeat.RedBeatScheduler",
    redbeat_redis_url     =CELERY_BROKER_URL,

    worker_max_tasks_per_child = 20,
)

# ── 3.  Beat schedule – daily metrics snapshot, 23:59 UTC ────
celery_app.conf.beat_schedule = {
    "daily-metrics": {
        "task": "log_daily_metrics",
        "schedule": crontab(hour=DAILY_METRICS_HOUR, minute=DAILY_METRICS_MINUTE),
    }
}

# ── 4.  Logging ──────────────────────────────────────────────
LOGGING_CONFIG = {
    "version": 1,
    "formatters": {
        "custom": {
            "format": "[%(asctime)s] [%(levelname)s] %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        }
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "custom"},
    },
    "root": {"level": "INFO", "handlers": ["console"]},
}
celery_app.conf.worker_hijack_root_logger = False
logging.config.dictConfig(LOGGING_CONFIG)

# ── 5.  Task modules so Celery registers them ────────────────
import usdg_tracker.scheduler.daily_metrics
