"""Export the plain-text journal as NDJSON.

Each non-blank line becomes ``{"id", "text", "created_at"?, "source"}``
where ``id`` is 128 random bits in hex and ``source`` points back at the
journal line it came from.
"""

from __future__ import annotations

import json
import re
import secrets
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, Optional

from loguru import logger

from .errors import MigrationError
from .journal import JournalStore
from .models import TIMESTAMP_FORMAT

_LINE = re.compile(r"^\[(\d{4}-\d{2}-\d{2} \d{2}:\d{2})\]\s*(.*)$", re.ASCII)


def new_id() -> str:
    return secrets.token_hex(16)


def line_to_record(line: str, line_number: int, journal_name: str) -> dict[str, Any]:
    """Convert one journal line to an NDJSON record.

    The stamp is read as local time and emitted as RFC-3339 with offset.
    Lines without a valid stamp keep their raw text and omit created_at.
    """
    text = line
    created_at: Optional[str] = None

    match = _LINE.match(line)
    if match:
        try:
            parsed = datetime.strptime(match.group(1), TIMESTAMP_FORMAT)
        except ValueError:
            parsed = None
        if parsed is not None:
            created_at = parsed.astimezone().isoformat(timespec="seconds")
            text = match.group(2)

    record: dict[str, Any] = {"id": new_id(), "text": text}
    if created_at is not None:
        record["created_at"] = created_at
    record["source"] = {"journal": journal_name, "line": line_number}
    return record


def iter_records(journal_path: Path) -> Iterator[dict[str, Any]]:
    store = JournalStore(journal_path)
    for line_number, line in store.iter_lines():
        if not line.strip():
            continue
        yield line_to_record(line, line_number, journal_path.name)


def migrate_to_ndjson(journal_path: Path, output_path: Path, force: bool = False) -> int:
    """Write the NDJSON export.

    Args:
        journal_path: Source journal (must exist)
        output_path: Destination file
        force: Overwrite an existing destination

    Returns:
        Number of records written

    Raises:
        MigrationError: If the output exists and ``force`` is False
        OSError: If the journal can't be read or the output written
    """
    if not force and output_path.exists():
        raise MigrationError(f"output file exists: {output_path} (use --force to overwrite)")
    if not journal_path.exists():
        raise FileNotFoundError(f"journal not found: {journal_path}")

    count = 0
    with open(output_path, "w", encoding="utf-8", newline="\n") as out:
        for record in iter_records(journal_path):
            out.write(json.dumps(record, ensure_ascii=False) + "\n")
            count += 1

    logger.debug("migrated {} entries from {} to {}", count, journal_path, output_path)
    return count
