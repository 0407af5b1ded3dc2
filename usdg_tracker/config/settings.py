import os
import pathlib
from dotenv import load_dotenv

load_dotenv(dotenv_path=pathlib.Path(__file__).parent.parent.parent / ".env")

METRICS_LOG_FILE = os.getenv("METRICS_LOG_FILE", "logs/weekly-metrics.jsonl")

CACHE_TTL_SECONDS = float(os.getenv("CACHE_TTL_SECONDS", "300"))  # 5 minutes
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))

CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://redis:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://redis:6379/0")
REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")

DAILY_METRICS_HOUR = int(os.getenv("DAILY_METRICS_HOUR", "23"))
DAILY_METRICS_MINUTE = int(os.getenv("DAILY_METRICS_MINUTE", "59"))
