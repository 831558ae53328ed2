"""Tests for constants.py."""

import pytest

from specifier_sync.constants import (
    Ext,
    ModuleSystem,
    declaration_ext_for,
    script_ext_for,
)


class TestExtFromFilename:
    @pytest.mark.parametrize("name,expected", [
        ("index.js", Ext.JS),
        ("index.mjs", Ext.MJS),
        ("index.cjs", Ext.CJS),
        ("App.jsx", Ext.JSX),
        ("App.tsx", Ext.TSX),
        ("lib.ts", Ext.TS),
        ("index.d.ts", Ext.DTS),
        ("index.d.mts", Ext.D_MTS),
        ("index.d.cts", Ext.D_CTS),
        ("INDEX.D.TS", Ext.DTS),
    ])
    def test_known(self, name, expected):
        assert Ext.from_filename(name) is expected

    def test_unknown(self):
        assert Ext.from_filename("style.css") is None
        assert Ext.from_filename("file.js.map") is None


class TestExt:
    def test_parse_rejects_unknown(self):
        with pytest.raises(ValueError, match="Unknown extension '.py'"):
            Ext.parse(".py")

    def test_declaration_flag(self):
        assert Ext.DTS.is_declaration
        assert Ext.D_CTS.is_declaration
        assert not Ext.TS.is_declaration

    def test_module_systems(self):
        assert Ext.MJS.module_system is ModuleSystem.ESM
        assert Ext.CTS.module_system is ModuleSystem.CJS
        assert Ext.JS.module_system is ModuleSystem.NEUTRAL
        assert Ext.D_MTS.module_system is ModuleSystem.ESM


class TestModuleSystem:
    def test_other(self):
        assert ModuleSystem.ESM.other() is ModuleSystem.CJS
        assert ModuleSystem.CJS.other() is ModuleSystem.ESM

    def test_neutral_has_no_other(self):
        with pytest.raises(ValueError):
            ModuleSystem.NEUTRAL.other()

    def test_suffix_lookups(self):
        assert script_ext_for(ModuleSystem.ESM) is Ext.MJS
        assert script_ext_for(ModuleSystem.CJS) is Ext.CJS
        assert declaration_ext_for(ModuleSystem.ESM) is Ext.D_MTS
        assert declaration_ext_for(ModuleSystem.NEUTRAL) is Ext.DTS
