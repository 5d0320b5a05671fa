from __future__ import annotations

import json
from datetime import datetime
from typing import Any


class _Encoder(json.JSONEncoder):
    def default(self, o: object) -> Any:
        if isinstance(o, datetime):
            return o.isoformat()
        return super().default(o)


def serialize_event(event: dict[str, Any]) -> str:
    return json.dumps(event, cls=_Encoder, separators=(",", ":"))


def encode_sse_frame(event: dict[str, Any]) -> str:
    """One server-sent event frame: ``data: <json>`` plus the blank-line terminator."""
    return f"data: {serialize_event(event)}\n\n"


def deserialize_event(raw: str | bytes) -> dict[str, Any]:
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("event payload must be a JSON object")
    return data
