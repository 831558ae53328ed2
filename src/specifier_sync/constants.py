"""Centralized extension / module-system constants."""

from __future__ import annotations

import enum

DEFAULT_OUT_DIR = "dist"
CONFIG_FILENAME = "specifier.toml"

# Extension-map target meaning "emit one declaration file per module system"
DUAL = "dual"


class ModuleSystem(str, enum.Enum):
    NEUTRAL = "neutral"
    ESM = "esm"
    CJS = "cjs"

    def other(self) -> "ModuleSystem":
        """Return the opposite explicit module system."""
        if self is ModuleSystem.ESM:
            return ModuleSystem.CJS
        if self is ModuleSystem.CJS:
            return ModuleSystem.ESM
        raise ValueError("The neutral module system has no opposite")


class Ext(str, enum.Enum):
    """Every file suffix the engine knows how to classify or rename."""

    JS = ".js"
    MJS = ".mjs"
    CJS = ".cjs"
    JSX = ".jsx"
    TS = ".ts"
    MTS = ".mts"
    CTS = ".cts"
    TSX = ".tsx"
    DTS = ".d.ts"
    D_MTS = ".d.mts"
    D_CTS = ".d.cts"

    @property
    def is_declaration(self) -> bool:
        return self in DECLARATION_EXTENSIONS

    @property
    def module_system(self) -> ModuleSystem:
        return _MODULE_SYSTEMS[self]

    @classmethod
    def parse(cls, token: str) -> "Ext":
        """Return the member for a literal suffix such as ``".mjs"``."""
        try:
            return cls(token)
        except ValueError:
            valid = ", ".join(e.value for e in cls)
            raise ValueError(f"Unknown extension {token!r}. Valid extensions: {valid}") from None

    @classmethod
    def from_filename(cls, filename: str) -> "Ext | None":
        """Map a filename to its suffix token, or None if unsupported.

        Declaration suffixes are checked first so ``index.d.ts`` is never
        mistaken for a plain ``.ts`` file.
        """
        name = filename.lower()
        for ext in DECLARATION_EXTENSIONS:
            if name.endswith(ext.value):
                return ext
        for ext in SCRIPT_EXTENSIONS:
            if name.endswith(ext.value):
                return ext
        return None


_MODULE_SYSTEMS: dict[Ext, ModuleSystem] = {
    Ext.JS: ModuleSystem.NEUTRAL,
    Ext.MJS: ModuleSystem.ESM,
    Ext.CJS: ModuleSystem.CJS,
    Ext.JSX: ModuleSystem.NEUTRAL,
    Ext.TS: ModuleSystem.NEUTRAL,
    Ext.MTS: ModuleSystem.ESM,
    Ext.CTS: ModuleSystem.CJS,
    Ext.TSX: ModuleSystem.NEUTRAL,
    Ext.DTS: ModuleSystem.NEUTRAL,
    Ext.D_MTS: ModuleSystem.ESM,
    Ext.D_CTS: ModuleSystem.CJS,
}

DECLARATION_EXTENSIONS: tuple[Ext, ...] = (Ext.D_MTS, Ext.D_CTS, Ext.DTS)

SCRIPT_EXTENSIONS: tuple[Ext, ...] = (
    Ext.JS, Ext.MJS, Ext.CJS, Ext.JSX, Ext.TS, Ext.MTS, Ext.CTS, Ext.TSX,
)

# Suffixes a specifier inside a declaration file uses to point at runtime code
RUNTIME_SCRIPT_EXTENSIONS: tuple[Ext, ...] = (Ext.JS, Ext.MJS, Ext.CJS)

_SCRIPT_FOR_SYSTEM: dict[ModuleSystem, Ext] = {
    ModuleSystem.NEUTRAL: Ext.JS,
    ModuleSystem.ESM: Ext.MJS,
    ModuleSystem.CJS: Ext.CJS,
}

_DECLARATION_FOR_SYSTEM: dict[ModuleSystem, Ext] = {
    ModuleSystem.NEUTRAL: Ext.DTS,
    ModuleSystem.ESM: Ext.D_MTS,
    ModuleSystem.CJS: Ext.D_CTS,
}


def script_ext_for(system: ModuleSystem) -> Ext:
    """Runtime script suffix for a module system (esm -> .mjs, cjs -> .cjs)."""
    return _SCRIPT_FOR_SYSTEM[system]


def declaration_ext_for(system: ModuleSystem) -> Ext:
    """Declaration suffix for a module system (esm -> .d.mts, cjs -> .d.cts)."""
    return _DECLARATION_FOR_SYSTEM[system]
