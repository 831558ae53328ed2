"""Tests for literal.py."""

from specifier_sync.ext_map import ExtensionMap, compile_rules
from specifier_sync.literal import apply_literal_map
from specifier_sync.matcher import normalize_updater, rules_matcher
from specifier_sync.orchestrator import collect_candidates, rewrite_all
from specifier_sync.rename import apply_extension_map

MANIFEST = ["file.js", "foo.js", "bar.js"]


def _read(path):
    return path.read_text(encoding="utf-8")


class TestApplyLiteralMap:
    def test_exact_specifiers_replaced_and_written(self, bundle):
        records = rewrite_all(collect_candidates(bundle, MANIFEST), normalize_updater(None))
        failures = apply_literal_map(records, {"./foo.js": "./baz.mjs", "./bar.js": "./qux.cjs"})
        assert failures == []
        file_js = _read(bundle / "file.js")
        assert "'./baz.mjs'" in file_js
        assert "'./qux.cjs'" in file_js
        assert "'./qux.cjs'" in _read(bundle / "foo.js")

    def test_other_specifiers_untouched(self, bundle):
        records = rewrite_all(collect_candidates(bundle, MANIFEST), normalize_updater(None))
        apply_literal_map(records, {"./foo.js": "./baz.mjs"})
        file_js = _read(bundle / "file.js")
        assert "'./bar.js'" in file_js
        assert "'./foo.js'" not in file_js

    def test_uses_renamed_path_when_extension_map_active(self, bundle):
        ext_map = ExtensionMap.from_dict({".js": ".mjs"})
        records = rewrite_all(
            collect_candidates(bundle, MANIFEST), rules_matcher(compile_rules(ext_map)),
        )
        apply_extension_map(records, ext_map)
        # Keys match the already-rewritten specifiers
        apply_literal_map(records, {"./foo.mjs": "./baz.mjs"}, ext_map)

        assert not (bundle / "file.js").exists()
        file_mjs = _read(bundle / "file.mjs")
        assert "'./baz.mjs'" in file_mjs
        assert "'./bar.mjs'" in file_mjs

    def test_dual_outputs_both_remapped(self, bundle):
        ext_map = ExtensionMap.from_dict({".js": ".mjs", ".d.ts": "dual"})
        records = rewrite_all(
            collect_candidates(bundle, MANIFEST), rules_matcher(compile_rules(ext_map)),
        )
        apply_extension_map(records, ext_map)
        apply_literal_map(
            records, {"./bar.mjs": "./shared.mjs", "./bar.cjs": "./shared.cjs"}, ext_map,
        )
        assert "'./shared.mjs'" in _read(bundle / "index.d.mts")
        assert "'./shared.cjs'" in _read(bundle / "index.d.cts")

    def test_error_records_skipped(self, bundle):
        (bundle / "foo.js").write_text("import { from './bar.js'\n", encoding="utf-8")
        records = rewrite_all(collect_candidates(bundle, MANIFEST), normalize_updater(None))
        apply_literal_map(records, {"./bar.js": "./qux.cjs"})
        assert _read(bundle / "foo.js") == "import { from './bar.js'\n"
        assert "'./qux.cjs'" in _read(bundle / "file.js")
        assert records[str(bundle / "foo.js")].error is not None
