"""Rewrite orchestrator: candidate discovery and the first rewrite pass."""

import logging
from pathlib import Path
from typing import Iterable

from specifier_sync.classifier import classify
from specifier_sync.constants import SCRIPT_EXTENSIONS
from specifier_sync.dataclasses import CandidateFile, FileRecord
from specifier_sync.matcher import Matcher
from specifier_sync.parsers.specifier_parser import update_src
from specifier_sync.scanner import scan_declarations

logger = logging.getLogger(__name__)


def _is_script(filename: str) -> bool:
    name = filename.lower()
    return any(name.endswith(ext.value) for ext in SCRIPT_EXTENSIONS)


def collect_candidates(out_dir: Path, manifest: Iterable[str]) -> list[CandidateFile]:
    """Union the manifest's script files with declaration files found on disk.

    Manifest entries keep their order and come first; scanned declarations
    follow in sorted order. Duplicates are dropped by resolved path.
    """
    out_dir = out_dir.resolve()
    paths: list[Path] = [
        (out_dir / name).resolve() for name in manifest if _is_script(name)
    ]
    # Bundlers do not reliably report .d.ts files, so look for them after the write
    paths.extend(scan_declarations(out_dir))

    seen: set[Path] = set()
    candidates: list[CandidateFile] = []
    for path in paths:
        if path in seen:
            continue
        seen.add(path)
        candidates.append(CandidateFile(path=path, file_class=classify(path.name)))
    logger.debug("Collected %d candidate file(s) under %s", len(candidates), out_dir)
    return candidates


def rewrite_file(candidate: CandidateFile, matcher: Matcher) -> FileRecord:
    """Run the rewrite service on one file; failures become error records."""
    record = FileRecord(filename=candidate.path)
    try:
        source = candidate.path.read_text(encoding="utf-8")
        result = update_src(
            source,
            matcher,
            dialect=candidate.dialect,
            is_declaration=candidate.is_declaration,
        )
    except Exception as e:
        # Includes exceptions raised by user handlers
        logger.warning("Rewrite failed for %s: %s", candidate.path, e)
        record.fail(f"{type(e).__name__}: {e}")
        return record

    if result.error is not None:
        logger.warning("Rewrite failed for %s: %s", candidate.path, result.error)
        record.fail(result.error)
        return record

    record.code = result.code
    if result.changed:
        logger.debug("Rewrote %d specifier(s) in %s", len(result.edits), candidate.path)
    return record


def rewrite_all(candidates: list[CandidateFile], matcher: Matcher) -> dict[str, FileRecord]:
    """First pass: one rewrite per candidate, in candidate order. Never aborts."""
    records: dict[str, FileRecord] = {}
    for candidate in candidates:
        records[str(candidate.path)] = rewrite_file(candidate, matcher)
    failed = sum(1 for r in records.values() if not r.ok)
    logger.info("Rewrote %d file(s), %d failed", len(records) - failed, failed)
    return records
