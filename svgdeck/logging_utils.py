"""Run log helpers.

Export runs append one JSON object per line to ``export_log.jsonl`` in the
project directory; library modules use ordinary ``logging`` loggers for
diagnostics.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def log_event(
    log_path: Optional[Path], event_type: str, payload: Dict[str, Any]
) -> Dict[str, Any]:
    """Append an event to the run log and return the written record.

    A ``None`` path disables writing; the record is still returned so callers
    can reuse it for console output.
    """
    record = {
        "timestamp": _utc_timestamp(),
        "event_type": event_type,
        "payload": payload,
    }
    if log_path is None:
        return record
    log_path.parent.mkdir(parents=True, exist_ok=True)
    with log_path.open("a", encoding="utf-8") as handle:
        handle.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")
    return record


def read_events(log_path: Path) -> List[Dict[str, Any]]:
    """Read back every event of a run log, skipping blank lines."""
    if not log_path.exists():
        return []
    events: List[Dict[str, Any]] = []
    with log_path.open("r", encoding="utf-8") as handle:
        for line in handle:
            line = line.strip()
            if line:
                events.append(json.loads(line))
    return events
