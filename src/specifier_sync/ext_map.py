"""Extension map validation and compilation into specifier rules."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from specifier_sync.config import ConfigurationError
from specifier_sync.constants import (
    DUAL,
    RUNTIME_SCRIPT_EXTENSIONS,
    Ext,
    ModuleSystem,
    declaration_ext_for,
    script_ext_for,
)
from specifier_sync.matcher import SpecifierRule, compile_rule


@dataclass(frozen=True)
class ExtensionMap:
    """Validated ``Ext -> Ext | "dual"`` mapping.

    Only ``.d.ts`` may map to ``dual``; script suffixes map to script
    suffixes; declaration suffixes map to a declaration suffix or to a script
    suffix whose module system qualifies the new declaration suffix.
    """

    entries: dict[Ext, "Ext | str"]

    @classmethod
    def from_dict(cls, raw: Mapping[str, str]) -> "ExtensionMap":
        entries: dict[Ext, Ext | str] = {}
        for key, value in raw.items():
            try:
                source = Ext.parse(key)
            except ValueError as e:
                raise ConfigurationError(f"ext_map key: {e}") from e

            if value == DUAL:
                if source is not Ext.DTS:
                    raise ConfigurationError(
                        f"ext_map maps {key!r} to 'dual', but only '{Ext.DTS.value}' "
                        f"can be dual-emitted"
                    )
                entries[source] = DUAL
                continue

            try:
                target = Ext.parse(value)
            except ValueError as e:
                raise ConfigurationError(f"ext_map value for {key!r}: {e}") from e
            if target.is_declaration and not source.is_declaration:
                raise ConfigurationError(
                    f"ext_map maps script extension {key!r} to declaration extension {value!r}"
                )
            entries[source] = target

        # A file renamed onto another mapped suffix would overwrite a file
        # that has not been renamed yet
        for source, target in entries.items():
            for output in _output_exts(source, target):
                if output is not source and output in entries:
                    raise ConfigurationError(
                        f"ext_map renames {source.value!r} files to {output.value!r}, "
                        f"which is itself mapped; chained or swapped extensions are not supported"
                    )

        ext_map = cls(entries=entries)
        if ext_map.is_dual:
            # Fail now rather than guess which sibling is primary
            ext_map.primary_system()
        return ext_map

    def __bool__(self) -> bool:
        return bool(self.entries)

    def target_for(self, ext: Ext | None) -> "Ext | str | None":
        if ext is None:
            return None
        return self.entries.get(ext)

    @property
    def is_dual(self) -> bool:
        return self.entries.get(Ext.DTS) == DUAL

    def script_entries(self) -> dict[Ext, Ext]:
        return {
            source: target
            for source, target in self.entries.items()
            if not source.is_declaration and isinstance(target, Ext)
        }

    def primary_system(self) -> ModuleSystem:
        """Module system of the script build that dual emission treats as primary.

        Derived from the script entries whose targets are explicitly ESM or
        CJS. Raises ConfigurationError when there is none or they disagree.
        """
        systems = {
            target.module_system
            for target in self.script_entries().values()
            if target.module_system is not ModuleSystem.NEUTRAL
        }
        if not systems:
            raise ConfigurationError(
                "ext_map uses 'dual' for '.d.ts' but no script extension maps to an "
                "explicit module system ('.mjs', '.cjs', '.mts' or '.cts'); "
                "cannot tell which declaration sibling is primary"
            )
        if len(systems) > 1:
            raise ConfigurationError(
                "ext_map uses 'dual' for '.d.ts' but script extensions map to both "
                "ESM and CJS targets; cannot tell which declaration sibling is primary"
            )
        return systems.pop()


def declaration_target(source: Ext, target: Ext) -> Ext:
    """New declaration suffix for a declaration file mapped to target."""
    if target.is_declaration:
        return target
    return declaration_ext_for(target.module_system)


def _output_exts(source: Ext, target: "Ext | str") -> tuple[Ext, ...]:
    """Suffixes a file with the source suffix is written under."""
    if target == DUAL:
        return (Ext.D_MTS, Ext.D_CTS)
    if source.is_declaration:
        return (declaration_target(source, target),)
    return (target,)


def relative_suffix_rule(sources: tuple[Ext, ...] | Ext, target: Ext) -> SpecifierRule:
    """Rule rewriting relative specifiers ending in any of sources to target."""
    if isinstance(sources, Ext):
        sources = (sources,)
    alternatives = "|".join(re.escape(ext.value) for ext in sources)
    return compile_rule(rf"^(\.\.?/)(.+)(?:{alternatives})$", rf"\g<1>\g<2>{target.value}")


def compile_rules(ext_map: ExtensionMap) -> list[SpecifierRule]:
    """One relative-specifier rule per script entry; declaration keys excluded."""
    return [
        relative_suffix_rule(source, target)
        for source, target in ext_map.script_entries().items()
    ]


def declaration_specifier_rule(system: ModuleSystem) -> SpecifierRule:
    """Rule pointing runtime script specifiers of a declaration file at one module system."""
    return relative_suffix_rule(RUNTIME_SCRIPT_EXTENSIONS, script_ext_for(system))


def replace_suffix(path: Path, old: Ext, new: Ext) -> Path:
    """Swap a recognized suffix on path; ``old`` must be the suffix it ends with."""
    name = path.name
    return path.with_name(name[: len(name) - len(old.value)] + new.value)


def renamed_path(path: Path, ext_map: ExtensionMap | None) -> Path:
    """Output path of a file after the extension map has been applied.

    Dual-emitted declarations report their primary sibling.
    """
    if not ext_map:
        return path
    source = Ext.from_filename(path.name)
    target = ext_map.target_for(source)
    if target is None:
        return path
    if target == DUAL:
        return replace_suffix(path, source, declaration_ext_for(ext_map.primary_system()))
    if source.is_declaration:
        return replace_suffix(path, source, declaration_target(source, target))
    return replace_suffix(path, source, target)
