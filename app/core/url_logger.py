"""Link access logging using Loguru's built-in async features."""

import os
from datetime import datetime, timezone

from loguru import logger

from app.core.config import settings

# Bound logger used for redirect events; None until setup_access_logging runs
access_logger = None
_sink_ids = []


def _is_access_event(record) -> bool:
    return record["extra"].get("event_type") == "link_access"


def setup_access_logging():
    """Configure the link access logger with queued (non-blocking) sinks."""
    global access_logger

    access_logger = logger.bind(event_type="link_access")

    if not settings.LOG_TO_FILE or _sink_ids:
        return access_logger

    os.makedirs(settings.LOG_DIR, exist_ok=True)

    _sink_ids.append(logger.add(
        os.path.join(settings.LOG_DIR, settings.LOG_ACCESS_FILENAME),
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | IP:{extra[ip]} | Hash:{extra[hash]} | {message}",
        rotation=settings.LOG_ROTATION,
        retention=settings.LOG_RETENTION,
        enqueue=True,  # Loguru's internal queue keeps disk I/O off the request path
        level="INFO",
        backtrace=False,
        diagnose=False,
        filter=_is_access_event,
    ))

    return access_logger


def shutdown_access_logging() -> None:
    """Remove the access log sinks, draining their queues."""
    while _sink_ids:
        logger.remove(_sink_ids.pop())


def log_link_access(hash: str, ip_address: str, user_agent: str = "") -> None:
    """
    Log a redirect using Loguru's non-blocking logging.

    Args:
        hash: The link hash that was accessed
        ip_address: The client's IP address
        user_agent: Optional user agent string
    """
    if access_logger is None:
        setup_access_logging()

    access_logger.bind(
        ip=ip_address,
        hash=hash,
        user_agent=user_agent,
        timestamp=datetime.now(timezone.utc).isoformat()
    ).info(f"Link accessed: {hash}")
