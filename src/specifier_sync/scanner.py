"""Scan a bundle output directory for declaration and script files."""

import logging
from pathlib import Path

import pathspec

logger = logging.getLogger(__name__)

SKIP_DIRS: set[str] = {
    "node_modules",
    "__pycache__",
}

DECLARATION_PATTERNS: tuple[str, ...] = ("**/*.d.ts", "**/*.d.mts", "**/*.d.cts")

SCRIPT_PATTERNS: tuple[str, ...] = (
    "**/*.js",
    "**/*.mjs",
    "**/*.cjs",
    "**/*.jsx",
    "**/*.ts",
    "**/*.mts",
    "**/*.cts",
    "**/*.tsx",
    # Declarations are discovered separately
    "!**/*.d.ts",
    "!**/*.d.mts",
    "!**/*.d.cts",
)


def _should_skip_dir(name: str) -> bool:
    return name in SKIP_DIRS or name.startswith(".")


def _walk(root: Path):
    """Yield (relative_posix_path, abs_path) for every file under root, sorted."""
    stack: list[Path] = [root]
    found: list[tuple[str, Path]] = []
    while stack:
        current = stack.pop()
        try:
            entries = sorted(current.iterdir(), key=lambda p: p.name)
        except PermissionError as e:
            raise PermissionError(f"Cannot read directory {current}: {e}") from e

        for entry in entries:
            if entry.is_dir():
                if not _should_skip_dir(entry.name):
                    stack.append(entry)
            elif entry.is_file():
                found.append((entry.relative_to(root).as_posix(), entry))
    found.sort(key=lambda item: item[0])
    yield from found


def scan(out_dir: Path, patterns: tuple[str, ...]) -> list[Path]:
    """Return absolute paths under out_dir matching gitignore-style patterns."""
    out_dir = out_dir.resolve()
    if not out_dir.is_dir():
        logger.warning("Output directory does not exist: %s", out_dir)
        return []
    spec = pathspec.PathSpec.from_lines("gitignore", patterns)
    return [abs_path for rel, abs_path in _walk(out_dir) if spec.match_file(rel)]


def scan_declarations(out_dir: Path) -> list[Path]:
    """Find .d.ts / .d.mts / .d.cts files the bundle manifest may not report."""
    results = scan(out_dir, DECLARATION_PATTERNS)
    logger.debug("Found %d declaration file(s) under %s", len(results), out_dir)
    return results


def scan_scripts(out_dir: Path) -> list[Path]:
    """Find emitted script files, excluding declarations."""
    results = scan(out_dir, SCRIPT_PATTERNS)
    logger.debug("Found %d script file(s) under %s", len(results), out_dir)
    return results
