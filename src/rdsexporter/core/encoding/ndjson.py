"""NDJSON encoders for log entries and raw monitoring messages."""

import json
from collections.abc import Iterable, Mapping

from rdsexporter.core.models import LogEntry


def _join(lines: list[str]) -> str:
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def encode_logs(entries: Iterable[LogEntry]) -> str:
    """Encode log entries to newline-delimited JSON.

    Args:
        entries: An iterable of LogEntry objects.

    Returns:
        NDJSON string with one JSON object per line.
        Empty string if no entries.
    """
    lines = []
    for entry in entries:
        obj = {
            "timestamp": entry.timestamp,
            "level": entry.level,
            "message": entry.message,
            "attributes": entry.attributes,
        }
        lines.append(json.dumps(obj))
    return _join(lines)


def encode_messages(messages: Mapping[str, str]) -> str:
    """Encode the last raw message of each resource id to NDJSON.

    Lines are ordered by resource id so the output is stable.
    """
    lines = [
        json.dumps({"resource_id": resource_id, "message": messages[resource_id]})
        for resource_id in sorted(messages)
    ]
    return _join(lines)
