"""Cursor-based pagination helpers.

Cursor format: base64("<iso-timestamp>|<id>"), padding stripped.
"""
from __future__ import annotations

import base64
import binascii
from datetime import datetime

from support_chat.application.exceptions import ValidationError


def encode_cursor(ts: datetime, row_id: str) -> str:
    raw = f"{ts.isoformat()}|{row_id}"
    return base64.urlsafe_b64encode(raw.encode()).decode().rstrip("=")


def decode_cursor(cursor: str) -> tuple[datetime, str]:
    cursor += "=" * ((4 - len(cursor) % 4) % 4)
    try:
        raw = base64.urlsafe_b64decode(cursor.encode()).decode()
        ts_str, row_id = raw.split("|", 1)
        return datetime.fromisoformat(ts_str), row_id
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        raise ValidationError("Invalid cursor") from exc
