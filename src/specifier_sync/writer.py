"""Filesystem writes and the final write policy."""

from __future__ import annotations

import asyncio
import inspect
import logging
import os
import sys
import tempfile
import time
from pathlib import Path
from typing import Callable

from specifier_sync.dataclasses import FileRecord, WriteFailure

logger = logging.getLogger(__name__)

Writer = Callable[[dict[str, FileRecord]], object]

_WIN32 = sys.platform == "win32"
_ATOMIC_RETRIES = 5 if _WIN32 else 0
_ATOMIC_RETRY_DELAY = 0.1  # seconds


def write_text_atomic(file_path: Path, content: str) -> None:
    """Write content to file via temp file + rename.

    Binary mode keeps the bundler's line endings intact. On Windows the
    rename is retried while the target is briefly locked. The temp file is
    always cleaned up on failure.
    """
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="wb", dir=file_path.parent,
        suffix=".tmp", delete=False,
    ) as tmp:
        tmp.write(content.encode("utf-8"))
        tmp_path = Path(tmp.name)

    try:
        last_err: OSError | None = None
        for attempt in range(_ATOMIC_RETRIES + 1):
            try:
                tmp_path.replace(file_path)
                return
            except PermissionError as e:
                last_err = e
                if attempt < _ATOMIC_RETRIES:
                    time.sleep(_ATOMIC_RETRY_DELAY)
        raise last_err  # type: ignore[misc]
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError as cleanup_err:
            logger.warning("Failed to clean up temp file %s: %s", tmp_path, cleanup_err)
        raise


def remove_file(file_path: Path) -> None:
    """Delete a file; a missing file is not an error."""
    file_path.unlink(missing_ok=True)


def write_outputs(record: FileRecord) -> list[WriteFailure]:
    """Write a record's code to its output path and any extra outputs."""
    failures: list[WriteFailure] = []
    outputs = {record.output_path: record.code, **record.extra_outputs}
    for path, code in outputs.items():
        try:
            write_text_atomic(path, code)
        except OSError as e:
            logger.debug("Write failed for %s: %s", path, e)
            failures.append(WriteFailure(filename=path, message=f"write failed: {e}"))
    return failures


async def _wait(awaitable):
    return await awaitable


def resolve_writer(records: dict[str, FileRecord], writer) -> list[WriteFailure]:
    """Apply the final write policy to the settled records.

    ``True`` persists every successful record to its own output path. A
    callable receives the whole mapping (errors included) exactly once; an
    awaitable result is run to completion before returning, and exceptions
    propagate. Anything else writes nothing.
    """
    if writer is True:
        failures: list[WriteFailure] = []
        written = 0
        for record in records.values():
            if not record.ok:
                continue
            record_failures = write_outputs(record)
            failures.extend(record_failures)
            if not record_failures:
                written += 1
        logger.info("Default writer persisted %d file(s)", written)
        return failures

    if callable(writer):
        logger.debug("Handing %d record(s) to custom writer", len(records))
        result = writer(records)
        if inspect.isawaitable(result):
            asyncio.run(_wait(result))
        return []

    return []
