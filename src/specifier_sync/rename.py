"""Extension renaming, including dual emission of declaration files."""

from __future__ import annotations

import logging
from pathlib import Path

from specifier_sync.classifier import classify
from specifier_sync.constants import DUAL, Ext, ModuleSystem, declaration_ext_for
from specifier_sync.dataclasses import FileRecord, WriteFailure
from specifier_sync.ext_map import (
    ExtensionMap,
    declaration_specifier_rule,
    declaration_target,
    relative_suffix_rule,
    replace_suffix,
)
from specifier_sync.matcher import SpecifierRule, rules_matcher
from specifier_sync.parsers.specifier_parser import update_src
from specifier_sync.writer import remove_file, write_text_atomic

logger = logging.getLogger(__name__)


def _retarget(code: str, rule: SpecifierRule, filename: Path) -> str:
    """Second, narrower rewrite of relative specifier suffixes.

    Raises ValueError when the code no longer parses.
    """
    file_class = classify(filename.name)
    result = update_src(
        code,
        rules_matcher([rule]),
        dialect=file_class.dialect,
        is_declaration=file_class.is_declaration,
    )
    if result.error is not None:
        raise ValueError(result.error)
    return result.code


def _replace_file(
    original: Path, outputs: dict[Path, str],
) -> list[WriteFailure]:
    """Write every output, then delete the original if it was not overwritten."""
    failures: list[WriteFailure] = []
    for path, code in outputs.items():
        try:
            write_text_atomic(path, code)
        except OSError as e:
            failures.append(WriteFailure(filename=path, message=f"write failed: {e}"))
    if failures:
        # Keep the original so the build output still has a usable file
        return failures
    if original not in outputs:
        try:
            remove_file(original)
        except OSError as e:
            failures.append(WriteFailure(filename=original, message=f"delete failed: {e}"))
    return failures


def _rename_concrete(
    record: FileRecord, source: Ext, target: Ext,
) -> list[WriteFailure]:
    if source.is_declaration:
        new_ext = declaration_target(source, target)
        # Declaration specifiers point at runtime siblings (usually ".js")
        rule = None
        if new_ext.module_system is not ModuleSystem.NEUTRAL:
            rule = declaration_specifier_rule(new_ext.module_system)
    else:
        new_ext = target
        rule = relative_suffix_rule(source, target)

    code = _retarget(record.code, rule, record.filename) if rule else record.code
    new_path = replace_suffix(record.filename, source, new_ext)
    failures = _replace_file(record.filename, {new_path: code})
    if not failures:
        record.code = code
        record.output_path = new_path
        logger.debug("Renamed %s -> %s", record.filename.name, new_path.name)
    return failures


def _emit_dual(record: FileRecord, source: Ext, ext_map: ExtensionMap) -> list[WriteFailure]:
    primary = ext_map.primary_system()
    other = primary.other()

    other_code = _retarget(record.code, declaration_specifier_rule(other), record.filename)
    primary_path = replace_suffix(record.filename, source, declaration_ext_for(primary))
    other_path = replace_suffix(record.filename, source, declaration_ext_for(other))

    failures = _replace_file(record.filename, {primary_path: record.code, other_path: other_code})
    if not failures:
        record.output_path = primary_path
        record.extra_outputs = {other_path: other_code}
        logger.debug(
            "Dual-emitted %s -> %s, %s",
            record.filename.name, primary_path.name, other_path.name,
        )
    return failures


def apply_extension_map(
    records: dict[str, FileRecord], ext_map: ExtensionMap,
) -> list[WriteFailure]:
    """Rename every successful record whose extension is mapped.

    Failures for one record never stop the others: rewrite failures land
    in the record's ``error``, write/delete failures are returned.
    """
    failures: list[WriteFailure] = []
    renamed = 0
    for record in records.values():
        if not record.ok:
            continue
        source = Ext.from_filename(record.filename.name)
        target = ext_map.target_for(source)
        if target is None:
            continue

        try:
            if target == DUAL:
                record_failures = _emit_dual(record, source, ext_map)
            else:
                record_failures = _rename_concrete(record, source, target)
        except ValueError as e:
            logger.warning("Extension rewrite failed for %s: %s", record.filename, e)
            record.fail(str(e))
            continue

        failures.extend(record_failures)
        if not record_failures:
            renamed += 1
    logger.info("Renamed %d file(s) via extension map", renamed)
    return failures
