import os
from pathlib import Path

from celery import Celery
from celery.signals import after_setup_logger

from tubequiz.core.celery_settings import is_test_env

# Load .env for BOTH API + Celery worker (worker often runs without `source .env`)
try:
    from dotenv import load_dotenv

    # tubequiz/worker/celery_app.py -> parents[2] is the project root
    env_path = Path(__file__).resolve().parents[2] / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=False)
except Exception:
    # Don't crash if dotenv isn't installed in some env
    pass


def _env(name: str, default: str | None = None) -> str | None:
    v = os.getenv(name)
    return v if v and v.strip() else default


BROKER_URL = (
    _env("CELERY_BROKER_URL")
    or _env("REDIS_URL")
    or "redis://localhost:6379/0"
)

RESULT_BACKEND = _env("CELERY_RESULT_BACKEND") or BROKER_URL

# IMPORTANT: the variable name MUST be `celery_app`
celery_app = Celery(
    "tubequiz",
    broker=BROKER_URL,
    backend=RESULT_BACKEND,
)

# Ensure tasks are discovered
celery_app.autodiscover_tasks(["tubequiz.worker"])

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    task_track_started=True,
    result_extended=True,
    enable_utc=True,
    timezone="UTC",
    # at-least-once: ack after the task body returns, requeue if the worker dies
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    # ENV=test runs tasks inline so API tests can observe the final state
    task_always_eager=is_test_env(),
)


@after_setup_logger.connect
def _configure_worker_logging(logger, *args, **kwargs):
    from tubequiz.core.config import settings
    from tubequiz.core.log_config import configure_worker_logger

    configure_worker_logger(logger, settings.log_level)


__all__ = ["celery_app"]
