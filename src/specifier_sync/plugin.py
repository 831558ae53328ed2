"""Host hooks: option resolution, ``transform`` and ``write_bundle``."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Mapping

from specifier_sync.classifier import classify
from specifier_sync.config import ConfigurationError
from specifier_sync.constants import DEFAULT_OUT_DIR
from specifier_sync.dataclasses import BuildReport, FileRecord
from specifier_sync.ext_map import ExtensionMap, compile_rules
from specifier_sync.literal import apply_literal_map
from specifier_sync.matcher import Matcher, literal_matcher, normalize_updater, rules_matcher
from specifier_sync.orchestrator import collect_candidates, rewrite_all
from specifier_sync.parsers.specifier_parser import SpecifierEdit, update_src
from specifier_sync.rename import apply_extension_map
from specifier_sync.writer import resolve_writer

logger = logging.getLogger(__name__)

HOOKS = ("writeBundle", "transform")


@dataclass
class SpecifierOptions:
    """User-facing options.

    ``ext_map`` supersedes ``handler`` for the first rewrite pass. ``writer``
    is ``True`` for the default in-place writer or a callable receiving
    ``{filename: FileRecord}`` once per build.
    """

    map: Mapping[str, str] | None = None
    ext_map: Mapping[str, str] | None = None
    handler: Callable | Mapping[str, str] | None = None
    writer: bool | Callable[[dict[str, FileRecord]], object] = False
    hook: str = "writeBundle"
    out_dir: str | Path | None = None

    def resolve(self, cwd: Path | None = None) -> "ResolvedOptions":
        """Validate everything up front; raises ConfigurationError."""
        if self.hook not in HOOKS:
            raise ConfigurationError(
                f"Unknown hook {self.hook!r}. Valid options: {', '.join(HOOKS)}"
            )
        if not (isinstance(self.writer, bool) or callable(self.writer)):
            raise ConfigurationError(
                f"writer must be a boolean or a callable, got {type(self.writer).__name__}"
            )

        ext_map = ExtensionMap.from_dict(self.ext_map) if self.ext_map else None
        if ext_map:
            matcher = rules_matcher(compile_rules(ext_map))
        else:
            matcher = normalize_updater(self.handler)

        literal = None
        if self.map:
            if not all(isinstance(k, str) and isinstance(v, str) for k, v in self.map.items()):
                raise ConfigurationError("map keys and values must be strings")
            literal = dict(self.map)

        base = cwd or Path.cwd()
        out_dir = Path(self.out_dir) if self.out_dir is not None else base / DEFAULT_OUT_DIR
        if not out_dir.is_absolute():
            out_dir = base / out_dir

        return ResolvedOptions(
            matcher=matcher,
            ext_map=ext_map,
            literal_map=literal,
            writer=self.writer,
            hook=self.hook,
            out_dir=out_dir.resolve(),
        )


@dataclass(frozen=True)
class ResolvedOptions:
    matcher: Matcher
    ext_map: ExtensionMap | None
    literal_map: dict[str, str] | None
    writer: bool | Callable
    hook: str
    out_dir: Path


@dataclass
class TransformResult:
    code: str
    edits: list[SpecifierEdit] | None = field(default=None)


class SpecifierPlugin:
    """Rewrites specifiers at the host's transform or post-write lifecycle point."""

    name = "specifier"
    enforce = "post"

    def __init__(self, options: SpecifierOptions | None = None, *, cwd: Path | None = None):
        self.options = options or SpecifierOptions()
        self.resolved = self.options.resolve(cwd)

    def transform(self, code: str, file_id: str) -> TransformResult:
        """Rewrite one module's source in memory.

        Returns the original code with no edits when this hook is inactive or
        the source cannot be rewritten.
        """
        if self.resolved.hook != "transform":
            return TransformResult(code=code)

        file_class = classify(file_id)
        matchers = [self.resolved.matcher]
        if self.resolved.literal_map:
            matchers.append(literal_matcher(self.resolved.literal_map))

        current = code
        edits: list[SpecifierEdit] = []
        for matcher in matchers:
            try:
                result = update_src(
                    current,
                    matcher,
                    dialect=file_class.dialect,
                    is_declaration=file_class.is_declaration,
                )
            except Exception as e:
                logger.warning("Transform failed for %s: %s", file_id, e)
                return TransformResult(code=code)
            if result.error is not None:
                logger.warning("Transform failed for %s: %s", file_id, result.error)
                return TransformResult(code=code)
            current = result.code
            edits.extend(result.edits)
        return TransformResult(code=current, edits=edits)

    def write_bundle(
        self, out_dir: str | Path | None = None, manifest: Iterable[str] = (),
    ) -> BuildReport:
        """Rewrite the files a finished bundle wrote to out_dir.

        Pipeline:
        1. Collect manifest scripts plus declarations found on disk
        2. First rewrite pass (extension rules or handler)
        3. Extension rename / dual emission
        4. Literal specifier pass
        5. Write policy
        """
        if self.resolved.hook != "writeBundle":
            return BuildReport()

        start = time.monotonic()
        target_dir = Path(out_dir).resolve() if out_dir is not None else self.resolved.out_dir

        candidates = collect_candidates(target_dir, manifest)
        records = rewrite_all(candidates, self.resolved.matcher)
        report = BuildReport(files_processed=len(candidates), records=records)

        if self.resolved.ext_map:
            report.write_failures.extend(apply_extension_map(records, self.resolved.ext_map))

        if self.resolved.literal_map:
            report.write_failures.extend(
                apply_literal_map(records, self.resolved.literal_map, self.resolved.ext_map)
            )

        report.write_failures.extend(resolve_writer(records, self.resolved.writer))

        report.rewrite_errors = sum(1 for r in records.values() if not r.ok)
        report.files_rewritten = len(records) - report.rewrite_errors
        report.files_renamed = sum(
            1 for r in records.values() if r.ok and r.output_path != r.filename
        )
        report.duration_ms = int((time.monotonic() - start) * 1000)

        if report.write_failures:
            logger.warning(
                "Failed to write %d file(s):\n%s",
                len(report.write_failures),
                "\n".join(f"  {f}" for f in report.write_failures),
            )
        return report


def build_plugin(options: SpecifierOptions | None = None, **kwargs) -> SpecifierPlugin:
    """Create a plugin from options or from keyword arguments."""
    if options is None:
        options = SpecifierOptions(**kwargs)
    elif kwargs:
        raise TypeError("Pass either a SpecifierOptions instance or keyword arguments, not both")
    return SpecifierPlugin(options)
