"""Naming for conflict copies produced when two devices edit the same file."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import Union

CONFLICT_STAMP_FORMAT = "%Y%m%dT%H%M%SZ"


def conflict_copy_path(
    original_path: Union[str, os.PathLike],
    conflict_at: datetime,
    actor_id: str = "",
) -> str:
    """Sibling path for a conflicting copy of ``original_path``.

    ``notes/entry.txt`` at 2024-05-06 07:08:09 UTC by ``device-01`` becomes
    ``notes/entry.txt.conflict-20240506T070809Z-device-01``. Naive datetimes
    are taken as UTC; an empty actor is written as ``unknown``.
    """
    actor_id = actor_id or "unknown"
    if conflict_at.tzinfo is not None:
        conflict_at = conflict_at.astimezone(timezone.utc)
    stamp = conflict_at.strftime(CONFLICT_STAMP_FORMAT)

    original = os.fspath(original_path)
    filename = f"{os.path.basename(original)}.conflict-{stamp}-{actor_id}"
    return os.path.join(os.path.dirname(original), filename)
