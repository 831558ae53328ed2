"""Tests for scanner.py."""

import logging

from specifier_sync.scanner import scan_declarations, scan_scripts


def _write(path, content=""):
    """Helper: write a file, creating parent dirs as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


class TestScanDeclarations:
    def test_finds_nested_declarations(self, out_dir):
        _write(out_dir / "index.d.ts")
        _write(out_dir / "cjs" / "index.d.cts")
        _write(out_dir / "esm" / "deep" / "util.d.mts")
        _write(out_dir / "index.js")
        result = scan_declarations(out_dir)
        rel = [p.relative_to(out_dir.resolve()).as_posix() for p in result]
        assert rel == ["cjs/index.d.cts", "esm/deep/util.d.mts", "index.d.ts"]

    def test_returns_absolute_paths(self, out_dir):
        _write(out_dir / "index.d.ts")
        result = scan_declarations(out_dir)
        assert result[0].is_absolute()

    def test_skips_node_modules_and_dot_dirs(self, out_dir):
        _write(out_dir / "node_modules" / "pkg" / "index.d.ts")
        _write(out_dir / ".cache" / "index.d.ts")
        _write(out_dir / "real.d.ts")
        result = scan_declarations(out_dir)
        assert [p.name for p in result] == ["real.d.ts"]

    def test_missing_directory(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            assert scan_declarations(tmp_path / "nope") == []
        assert "does not exist" in caplog.text


class TestScanScripts:
    def test_excludes_declarations_and_other_files(self, out_dir):
        _write(out_dir / "index.js")
        _write(out_dir / "index.js.map")
        _write(out_dir / "index.d.ts")
        _write(out_dir / "style.css")
        _write(out_dir / "cjs" / "index.cjs")
        _write(out_dir / "App.tsx")
        result = scan_scripts(out_dir)
        rel = [p.relative_to(out_dir.resolve()).as_posix() for p in result]
        assert rel == ["App.tsx", "cjs/index.cjs", "index.js"]
