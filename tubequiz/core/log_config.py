import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Install the process-wide log format. Safe to call more than once."""
    logging.basicConfig(
        level=getattr(logging, (level or "INFO").upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    # httpx logs every request line at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def configure_worker_logger(logger: logging.Logger, level: str = "INFO") -> None:
    """
    Celery installs its own handlers on the worker; keep them, apply our
    format and level on top.
    """
    logger.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))
    for handler in logger.handlers:
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.getLogger("httpx").setLevel(logging.WARNING)
