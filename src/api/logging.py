"""SQLite request logging for API."""

import sqlite3
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from core.config import DB_PATH


@dataclass
class RequestLog:
    """Captured request/response data for logging."""

    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    endpoint: str = ""
    method: str = ""
    client_ip: str | None = None
    query_text: str | None = None
    city: str | None = None
    time_min: str | None = None
    time_max: str | None = None
    status_code: int = 0
    error_code: str | None = None
    error_message: str | None = None
    processing_time_ms: int = 0
    feeds_queried: int | None = None
    feeds_failed: int | None = None
    events_returned: int | None = None
    details: list[tuple[str, str]] = field(default_factory=list)  # (type, message)


def log_request(log: RequestLog, db_path: Path | None = None) -> None:
    """Write request log to SQLite database."""
    conn = sqlite3.connect(db_path or DB_PATH)
    try:
        cursor = conn.cursor()

        cursor.execute(
            """
            INSERT INTO api_requests (
                request_id, timestamp, endpoint, method, client_ip,
                query_text, city, time_min, time_max,
                status_code, error_code, error_message, processing_time_ms,
                feeds_queried, feeds_failed, events_returned
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
            (
                log.request_id,
                log.timestamp,
                log.endpoint,
                log.method,
                log.client_ip,
                log.query_text,
                log.city,
                log.time_min,
                log.time_max,
                log.status_code,
                log.error_code,
                log.error_message,
                log.processing_time_ms,
                log.feeds_queried,
                log.feeds_failed,
                log.events_returned,
            ),
        )

        for detail_type, message in log.details:
            cursor.execute(
                """
                INSERT INTO api_request_details (request_id, detail_type, message)
                VALUES (?, ?, ?)
            """,
                (log.request_id, detail_type, message),
            )

        conn.commit()
    finally:
        conn.close()


def finish_log(request_log: RequestLog, start_time: float) -> None:
    """Stamp processing time and write the log; never fails the request."""
    request_log.processing_time_ms = int((time.time() - start_time) * 1000)
    if not request_log.status_code:
        # Unhandled error, answered by the global exception handler
        request_log.status_code = 500
        request_log.error_code = "INTERNAL_ERROR"
    try:
        log_request(request_log)
    except Exception as e:
        # Don't fail the request if logging fails
        print(f"Request log not written: {e}")
