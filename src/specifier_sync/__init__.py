"""Rewrite module specifiers and file extensions in bundler output."""

from specifier_sync.config import ConfigurationError
from specifier_sync.dataclasses import BuildReport, FileRecord
from specifier_sync.parsers.specifier_parser import Spec
from specifier_sync.plugin import SpecifierOptions, SpecifierPlugin, build_plugin

__all__ = [
    "BuildReport",
    "ConfigurationError",
    "FileRecord",
    "Spec",
    "SpecifierOptions",
    "SpecifierPlugin",
    "build_plugin",
]
