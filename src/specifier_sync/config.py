"""TOML config loader and validation."""

import tomllib
from pathlib import Path

from specifier_sync.constants import CONFIG_FILENAME

_VALID_HOOKS = ("writeBundle", "transform")


class ConfigurationError(ValueError):
    """Invalid options detected before any file is processed."""


def load_config(project_path: Path) -> dict | None:
    """Load specifier.toml. Returns None if the file doesn't exist."""
    config_file = project_path / CONFIG_FILENAME
    if not config_file.exists():
        return None
    with open(config_file, "rb") as f:
        return tomllib.load(f)


def require_specifier_section(config: dict | None) -> dict:
    """Extract the [specifier] section or raise a hard error."""
    if config is None:
        raise ConfigurationError(
            f"No config file found. Run 'specifier-sync init' to create {CONFIG_FILENAME}"
        )
    section = config.get("specifier")
    if section is None:
        raise ConfigurationError(
            f"Missing [specifier] section in {CONFIG_FILENAME}. "
            f"Run 'specifier-sync init' to create a default config."
        )
    if not isinstance(section, dict):
        raise ConfigurationError(
            f"[specifier] in {CONFIG_FILENAME} must be a table, got {type(section).__name__}"
        )
    return section


def _string_table(section: dict, key: str) -> dict[str, str] | None:
    table = section.get(key)
    if table is None:
        return None
    if not isinstance(table, dict):
        raise ConfigurationError(
            f"[specifier.{key}] must be a table, got {type(table).__name__}"
        )
    for k, v in table.items():
        if not isinstance(v, str):
            raise ConfigurationError(
                f"[specifier.{key}] value for {k!r} must be a string, got {type(v).__name__}"
            )
    return dict(table)


def options_from_config(config: dict | None) -> dict:
    """Translate the [specifier] section into SpecifierOptions keyword arguments.

    Only keys present in the file are returned, so callers can layer CLI
    flags on top. Callables cannot be expressed in TOML, so ``handler`` is
    always a pattern table and ``writer`` is always a boolean here.
    """
    if config is None:
        return {}
    section = require_specifier_section(config)
    options: dict = {}

    hook = section.get("hook")
    if hook is not None:
        if hook not in _VALID_HOOKS:
            raise ConfigurationError(
                f"Unknown hook {hook!r} in [specifier]. Valid options: {', '.join(_VALID_HOOKS)}"
            )
        options["hook"] = hook

    writer = section.get("writer")
    if writer is not None:
        if not isinstance(writer, bool):
            raise ConfigurationError(
                f"[specifier] writer must be true or false, got {type(writer).__name__}"
            )
        options["writer"] = writer

    out_dir = section.get("out_dir")
    if out_dir is not None:
        if not isinstance(out_dir, str):
            raise ConfigurationError(
                f"[specifier] out_dir must be a string, got {type(out_dir).__name__}"
            )
        options["out_dir"] = out_dir

    for key in ("map", "ext_map", "handler"):
        table = _string_table(section, key)
        if table is not None:
            options[key] = table

    return options


def create_default_config(project_path: Path) -> Path:
    """Create a default specifier.toml. Returns the path."""
    config_path = project_path / CONFIG_FILENAME
    if config_path.exists():
        raise FileExistsError(f"Config already exists: {config_path}")
    config_path.write_text(
        '[specifier]\n'
        '# Lifecycle point: "writeBundle" rewrites files on disk, "transform" rewrites sources in memory\n'
        'hook = "writeBundle"\n'
        '# Bundle output directory, relative to the project root\n'
        'out_dir = "dist"\n'
        '# Rewrite files in place after the handler pass\n'
        'writer = false\n'
        '\n'
        '# Rename extensions in relative specifiers and emitted filenames.\n'
        '# ".d.ts" may map to "dual" to emit both .d.mts and .d.cts siblings.\n'
        '[specifier.ext_map]\n'
        '# ".js" = ".mjs"\n'
        '# ".d.ts" = "dual"\n'
        '\n'
        '# Exact specifier substitutions, applied after extension mapping\n'
        '[specifier.map]\n'
        '# "./foo.js" = "./baz.mjs"\n'
        '\n'
        '# Regex -> replacement pairs, first match wins (ignored when ext_map is set)\n'
        '[specifier.handler]\n'
        '# "^lodash$" = "lodash-es"\n'
    )
    return config_path
