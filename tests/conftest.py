"""Shared test fixtures."""

from pathlib import Path

import pytest

FILE_JS = (
    "import { foo } from './foo.js'\n"
    "import { bar } from './bar.js'\n"
    "export const x = foo + bar\n"
)
FOO_JS = "import { bar } from './bar.js'\nexport const foo = bar\n"
BAR_JS = "export const bar = 1\n"
INDEX_DTS = (
    "import type { Foo } from './foo.js'\n"
    "export { bar } from './bar.js'\n"
    "export interface Baz {\n"
    "  foo: Foo\n"
    "}\n"
)

BUNDLE_MANIFEST = ["file.js", "foo.js", "bar.js"]


def write(path: Path, content: str = "") -> Path:
    """Helper: write a file, creating parent dirs as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


@pytest.fixture
def out_dir(tmp_path):
    """An empty bundle output directory."""
    d = tmp_path / "dist"
    d.mkdir()
    return d.resolve()


@pytest.fixture
def bundle(out_dir):
    """Output directory holding three ES modules and one declaration file."""
    write(out_dir / "file.js", FILE_JS)
    write(out_dir / "foo.js", FOO_JS)
    write(out_dir / "bar.js", BAR_JS)
    write(out_dir / "index.d.ts", INDEX_DTS)
    return out_dir
