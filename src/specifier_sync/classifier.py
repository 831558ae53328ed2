"""Filename -> parser dialect classification."""

import re
from dataclasses import dataclass

from specifier_sync.constants import Ext

DECLARATION_RE = re.compile(r"\.d\.[mc]?ts$", re.IGNORECASE)

DIALECT_MAP: dict[Ext, str] = {
    Ext.DTS: "typescript",
    Ext.D_MTS: "typescript",
    Ext.D_CTS: "typescript",
    Ext.TS: "typescript",
    Ext.MTS: "typescript",
    Ext.CTS: "typescript",
    Ext.TSX: "tsx",
    Ext.JSX: "jsx",
}


@dataclass(frozen=True)
class FileClass:
    dialect: str  # "typescript", "tsx", "jsx", "javascript"
    is_declaration: bool


def is_declaration_file(filename: str) -> bool:
    """True for .d.ts / .d.mts / .d.cts files."""
    return DECLARATION_RE.search(filename) is not None


def classify(filename: str) -> FileClass:
    """Pick the grammar a file must be parsed with."""
    ext = Ext.from_filename(filename)
    dialect = DIALECT_MAP.get(ext, "javascript") if ext is not None else "javascript"
    return FileClass(dialect=dialect, is_declaration=is_declaration_file(filename))
