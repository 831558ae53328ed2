"""Tests for rename.py."""

from specifier_sync.ext_map import ExtensionMap, compile_rules
from specifier_sync.matcher import rules_matcher
from specifier_sync.orchestrator import collect_candidates, rewrite_all
from specifier_sync.rename import apply_extension_map

MANIFEST = ["file.js", "foo.js", "bar.js"]


def _first_pass(out_dir, raw_map):
    ext_map = ExtensionMap.from_dict(raw_map)
    candidates = collect_candidates(out_dir, MANIFEST)
    records = rewrite_all(candidates, rules_matcher(compile_rules(ext_map)))
    return records, ext_map


def _read(path):
    return path.read_text(encoding="utf-8")


class TestScriptRename:
    def test_renames_and_rewrites(self, bundle):
        records, ext_map = _first_pass(bundle, {".js": ".mjs"})
        failures = apply_extension_map(records, ext_map)
        assert failures == []
        assert not (bundle / "file.js").exists()
        file_mjs = _read(bundle / "file.mjs")
        assert "'./foo.mjs'" in file_mjs
        assert "'./bar.mjs'" in file_mjs
        assert "'./bar.mjs'" in _read(bundle / "foo.mjs")
        assert (bundle / "bar.mjs").exists()

    def test_record_tracks_output_path(self, bundle):
        records, ext_map = _first_pass(bundle, {".js": ".cjs"})
        apply_extension_map(records, ext_map)
        record = records[str(bundle / "file.js")]
        assert record.output_path == bundle / "file.cjs"
        assert record.filename == bundle / "file.js"

    def test_unmapped_declaration_left_in_place(self, bundle):
        records, ext_map = _first_pass(bundle, {".js": ".mjs"})
        apply_extension_map(records, ext_map)
        assert (bundle / "index.d.ts").exists()
        assert records[str(bundle / "index.d.ts")].output_path == bundle / "index.d.ts"

    def test_error_records_skipped(self, bundle):
        (bundle / "foo.js").write_text("import { from './bar.js'\n", encoding="utf-8")
        records, ext_map = _first_pass(bundle, {".js": ".mjs"})
        apply_extension_map(records, ext_map)
        assert (bundle / "foo.js").exists()
        assert not (bundle / "foo.mjs").exists()
        assert (bundle / "file.mjs").exists()


class TestDeclarationRename:
    def test_concrete_declaration_target(self, bundle):
        records, ext_map = _first_pass(bundle, {".d.ts": ".d.cts"})
        apply_extension_map(records, ext_map)
        assert not (bundle / "index.d.ts").exists()
        dcts = _read(bundle / "index.d.cts")
        assert "'./foo.cjs'" in dcts
        assert "'./bar.cjs'" in dcts
        # Scripts are not mapped, so they stay put
        assert (bundle / "file.js").exists()

    def test_script_target_qualifies_declaration(self, bundle):
        records, ext_map = _first_pass(bundle, {".js": ".mjs", ".d.ts": ".mjs"})
        apply_extension_map(records, ext_map)
        dmts = _read(bundle / "index.d.mts")
        assert "'./foo.mjs'" in dmts
        assert records[str(bundle / "index.d.ts")].code == dmts


class TestDualEmission:
    def test_esm_primary(self, bundle):
        records, ext_map = _first_pass(bundle, {".js": ".mjs", ".d.ts": "dual"})
        failures = apply_extension_map(records, ext_map)
        assert failures == []
        assert not (bundle / "index.d.ts").exists()

        dmts = _read(bundle / "index.d.mts")
        dcts = _read(bundle / "index.d.cts")
        assert "'./foo.mjs'" in dmts and "'./bar.mjs'" in dmts
        assert "'./foo.cjs'" in dcts and "'./bar.cjs'" in dcts
        assert ".js'" not in dmts
        assert ".js'" not in dcts

    def test_cjs_primary(self, bundle):
        records, ext_map = _first_pass(bundle, {".js": ".cjs", ".d.ts": "dual"})
        apply_extension_map(records, ext_map)
        record = records[str(bundle / "index.d.ts")]
        assert record.output_path == bundle / "index.d.cts"
        assert list(record.extra_outputs) == [bundle / "index.d.mts"]
        assert "'./foo.cjs'" in _read(bundle / "index.d.cts")
        assert "'./foo.mjs'" in _read(bundle / "index.d.mts")

    def test_exactly_two_siblings(self, bundle):
        records, ext_map = _first_pass(bundle, {".js": ".mjs", ".d.ts": "dual"})
        apply_extension_map(records, ext_map)
        declarations = sorted(p.name for p in bundle.iterdir() if ".d." in p.name)
        assert declarations == ["index.d.cts", "index.d.mts"]


class TestWriteFailures:
    def test_failure_does_not_stop_other_records(self, bundle):
        # A directory in the way makes the rename target unwritable
        (bundle / "foo.mjs").mkdir()
        records, ext_map = _first_pass(bundle, {".js": ".mjs"})
        failures = apply_extension_map(records, ext_map)

        assert [f.filename.name for f in failures] == ["foo.mjs"]
        assert "write failed" in failures[0].message
        # Original kept when its replacement could not be written
        assert (bundle / "foo.js").exists()
        assert (bundle / "file.mjs").exists()
        assert (bundle / "bar.mjs").exists()
        assert not list(bundle.glob("*.tmp"))
