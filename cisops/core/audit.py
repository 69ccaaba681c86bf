"""Audit trail for compliance-relevant actions.

Logins, subcontractor and invoice changes, and return submissions are written
as one JSON object per line to ``AUDIT_LOG_FILE`` (``storage/audit.log`` by
default) through the ``audit`` logger, which also propagates to the
application log.
"""
from __future__ import annotations

import datetime as dt
import json
import logging
import os
from pathlib import Path
from typing import Any

_AUDIT_LOG_PATH = Path(os.getenv("AUDIT_LOG_FILE", "storage/audit.log"))
_logger = logging.getLogger("audit")
_file_handler: logging.Handler | None = None


def _attach_file_handler() -> None:
    global _file_handler
    if _file_handler is not None:
        return
    try:
        _AUDIT_LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(_AUDIT_LOG_PATH, encoding="utf-8")
    except OSError as exc:
        _logger.debug("Audit file %s unavailable, logging only: %s", _AUDIT_LOG_PATH, exc)
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    _logger.addHandler(handler)
    _logger.setLevel(logging.INFO)
    _file_handler = handler


def log_audit_event(action: str, user_id: int | None = None, status: str = "success", **metadata: Any) -> None:
    """Record an audit event.

    Parameters:
        action: Dotted action key, e.g. 'subcontractor.create' or 'submission.delete'.
        user_id: The acting user's ID (if known).
        status: 'success' | 'failure' | 'denied'.
        **metadata: Related ids and context (subcontractor_id, period, ...).
    """
    _attach_file_handler()
    event = {
        "at": dt.datetime.now(dt.timezone.utc).isoformat(timespec="seconds"),
        "action": action,
        "user_id": user_id,
        "status": status,
        **metadata,
    }
    _logger.info(json.dumps(event, separators=(",", ":"), default=str))


def log_denied(action: str, user_id: int | None = None, reason: str | None = None, **extra: Any) -> None:
    log_audit_event(action, user_id=user_id, status="denied", reason=reason, **extra)


def log_failure(action: str, user_id: int | None = None, error: str | None = None, **extra: Any) -> None:
    log_audit_event(action, user_id=user_id, status="failure", error=error, **extra)
