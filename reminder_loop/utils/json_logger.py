import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

logger = logging.getLogger("json_logger")


def _ensure_dir(path: str) -> None:
    directory = os.path.dirname(path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory, exist_ok=True)


def get_notification_log_path() -> Optional[str]:
    """Resolve the JSONL path for notification lifecycle events. Empty string disables it."""
    path = os.getenv("NOTIFICATION_EVENT_LOG", os.path.join("logs", "notification_events.jsonl"))
    return path or None


def json_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def safe_json_dump(obj: Any) -> str:
    """Serialize to JSON with sane defaults for non-serializable objects."""
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"), default=str)


def _summarize_request(request: Any) -> Dict[str, Any]:
    content = getattr(request, "content", None)
    trigger = getattr(request, "trigger", None)
    return {
        "id": getattr(request, "identifier", None),
        "category": getattr(content, "category_identifier", None),
        "payload": getattr(content, "user_info", None),
        "fire_delay": getattr(trigger, "time_interval", None),
        "repeats": getattr(trigger, "repeats", None),
    }


def log_notification_event(event: str, request: Any = None, **extra: Any) -> None:
    """Append one notification lifecycle event (scheduled, delivered, dropped, cancelled) as a JSON line.

    Best-effort: an unwritable log path is reported on the module logger and ignored.
    """
    log_path = get_notification_log_path()
    if not log_path:
        return

    record: Dict[str, Any] = {"ts": json_now(), "event": event}
    if request is not None:
        record["request"] = _summarize_request(request)
    if extra:
        record.update(extra)

    try:
        _ensure_dir(log_path)
        with open(log_path, "a", encoding="utf-8") as f:
            f.write(safe_json_dump(record))
            f.write("\n")
    except OSError as e:
        logger.warning("Failed to write notification event log: %s", e)
