"""Second rewrite pass: exact-match specifier substitution."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping

from specifier_sync.classifier import classify
from specifier_sync.dataclasses import FileRecord, WriteFailure
from specifier_sync.ext_map import ExtensionMap, renamed_path
from specifier_sync.matcher import Matcher, literal_matcher
from specifier_sync.parsers.specifier_parser import update_src
from specifier_sync.writer import write_outputs

logger = logging.getLogger(__name__)


def _remap(code: str, matcher: Matcher, path: Path) -> tuple[str | None, str | None]:
    """Return (code, error) for one output of a record."""
    file_class = classify(path.name)
    result = update_src(
        code,
        matcher,
        dialect=file_class.dialect,
        is_declaration=file_class.is_declaration,
    )
    if result.error is not None:
        return None, result.error
    return result.code, None


def apply_literal_map(
    records: dict[str, FileRecord],
    literal_map: Mapping[str, str],
    ext_map: ExtensionMap | None = None,
) -> list[WriteFailure]:
    """Substitute exact specifier values in already-rewritten code and write it.

    When an extension map is active the output goes to the renamed path,
    since the rename pass has already moved the file.
    """
    matcher = literal_matcher(literal_map)
    failures: list[WriteFailure] = []
    remapped = 0

    for record in records.values():
        if not record.ok:
            continue

        output_path = renamed_path(record.filename, ext_map)
        code, error = _remap(record.code, matcher, output_path)
        if error is not None:
            logger.warning("Literal remap failed for %s: %s", record.filename, error)
            record.fail(error)
            continue

        extra: dict[Path, str] = {}
        for extra_path, extra_code in record.extra_outputs.items():
            new_extra, error = _remap(extra_code, matcher, extra_path)
            if error is not None:
                break
            extra[extra_path] = new_extra
        if error is not None:
            logger.warning("Literal remap failed for %s: %s", record.filename, error)
            record.fail(error)
            continue

        record.code = code
        record.output_path = output_path
        record.extra_outputs = extra
        failures.extend(write_outputs(record))
        remapped += 1

    logger.info("Applied literal specifier map to %d file(s)", remapped)
    return failures
