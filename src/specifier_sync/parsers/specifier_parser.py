"""Tree-sitter specifier discovery and rewriting for JavaScript and TypeScript."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

import tree_sitter_javascript as tsjs
import tree_sitter_typescript as tsts
from tree_sitter import Language, Parser

from specifier_sync.classifier import classify

logger = logging.getLogger(__name__)

TS_LANGUAGE = Language(tsts.language_typescript())
TSX_LANGUAGE = Language(tsts.language_tsx())
JS_LANGUAGE = Language(tsjs.language())

DIALECTS = ("javascript", "jsx", "typescript", "tsx")

_STATEMENT_KINDS = {
    "import_statement": "import",
    "export_statement": "export",
    "import_require_clause": "import-equals",
}


@dataclass(frozen=True)
class Spec:
    """One specifier string literal found in a module."""

    value: str
    kind: str  # "import", "export", "dynamic", "require", "import-equals"
    start: int  # byte offset of the first character inside the quotes
    end: int  # byte offset just past the last character inside the quotes
    line: int  # 1-based
    column: int  # 0-based byte column of the first character inside the quotes


Updater = Callable[[Spec], "str | None"]


@dataclass(frozen=True)
class SpecifierEdit:
    start: int
    end: int
    original: str
    replacement: str


@dataclass
class UpdateResult:
    code: str
    error: str | None = None
    edits: list[SpecifierEdit] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.edits)


class SpecifierParser:
    """Finds and rewrites module specifiers for one grammar dialect."""

    def __init__(self, dialect: str):
        if dialect not in DIALECTS:
            raise ValueError(f"Unsupported dialect: {dialect}")
        self._dialect = dialect

    @property
    def dialect(self) -> str:
        return self._dialect

    def _get_parser(self) -> Parser:
        if self._dialect == "typescript":
            return Parser(TS_LANGUAGE)
        if self._dialect == "tsx":
            return Parser(TSX_LANGUAGE)
        # tree-sitter-javascript parses JSX natively
        return Parser(JS_LANGUAGE)

    def _parse(self, source: bytes):
        tree = self._get_parser().parse(source)
        return tree.root_node

    def find_specifiers(self, source: bytes) -> list[Spec]:
        """Return every specifier literal in source order.

        Raises SyntaxError when the source does not parse cleanly.
        """
        root = self._parse(source)
        if root.has_error:
            line = _first_error_line(root)
            raise SyntaxError(f"Could not parse source as {self._dialect} (line {line})")
        specs: list[Spec] = []
        for node in _iter_tree(root):
            if node.type in _STATEMENT_KINDS:
                string_node = _find_child(node, "string")
                if string_node is not None:
                    specs.append(_make_spec(string_node, _STATEMENT_KINDS[node.type]))
            elif node.type == "call_expression":
                spec = self._parse_call(node)
                if spec is not None:
                    specs.append(spec)
        specs.sort(key=lambda s: s.start)
        return specs

    def _parse_call(self, node) -> Spec | None:
        """Handle ``import()`` and ``require()`` whose first argument has a fixed value."""
        func = node.child_by_field_name("function")
        if func is None:
            return None
        if func.type == "import":
            kind = "dynamic"
        elif func.type == "identifier" and func.text == b"require":
            kind = "require"
        else:
            return None
        args = node.child_by_field_name("arguments")
        if args is None:
            return None
        first = next((c for c in args.named_children if c.type != "comment"), None)
        if first is None:
            return None
        if first.type == "template_string":
            # Only plain template literals have a fixed value
            if _find_child(first, "template_substitution") is not None:
                return None
        elif first.type != "string":
            return None
        return _make_spec(first, kind)

    def update(self, source: bytes, updater: Updater) -> UpdateResult:
        """Apply updater to every specifier and return the rewritten code."""
        try:
            specs = self.find_specifiers(source)
        except SyntaxError as e:
            return UpdateResult(code="", error=str(e))

        edits: list[SpecifierEdit] = []
        for spec in specs:
            replacement = updater(spec)
            if replacement is None or replacement == spec.value:
                continue
            edits.append(SpecifierEdit(spec.start, spec.end, spec.value, replacement))

        # Apply back to front so earlier offsets stay valid
        out = source
        for edit in reversed(edits):
            out = out[:edit.start] + edit.replacement.encode("utf-8") + out[edit.end:]
        return UpdateResult(code=out.decode("utf-8"), edits=edits)


_PARSERS: dict[str, SpecifierParser] = {}


def get_parser(dialect: str) -> SpecifierParser:
    """Get or create a parser for the given dialect."""
    if dialect not in _PARSERS:
        _PARSERS[dialect] = SpecifierParser(dialect)
    return _PARSERS[dialect]


def update_src(
    source: str,
    updater: Updater,
    *,
    dialect: str = "javascript",
    is_declaration: bool = False,
) -> UpdateResult:
    """Rewrite the specifiers of in-memory source text.

    Declaration files are always parsed with the TypeScript grammar.
    """
    if is_declaration:
        dialect = "typescript"
    return get_parser(dialect).update(source.encode("utf-8"), updater)


def update(path: Path, updater: Updater) -> UpdateResult:
    """Rewrite the specifiers of a file on disk without writing it back.

    I/O errors propagate to the caller.
    """
    file_class = classify(path.name)
    source = path.read_text(encoding="utf-8")
    logger.debug("Updating %s as %s", path, file_class.dialect)
    return update_src(
        source,
        updater,
        dialect=file_class.dialect,
        is_declaration=file_class.is_declaration,
    )


def _make_spec(string_node, kind: str) -> Spec:
    # String and template nodes include their quotes or backticks
    start = string_node.start_byte + 1
    end = string_node.end_byte - 1
    value = string_node.text[1:-1].decode("utf-8")
    return Spec(
        value=value,
        kind=kind,
        start=start,
        end=end,
        line=string_node.start_point[0] + 1,
        column=string_node.start_point[1] + 1,
    )


def _find_child(node, child_type: str):
    """Find the first child of a given type."""
    for child in node.children:
        if child.type == child_type:
            return child
    return None


def _iter_tree(node):
    """Iterate all nodes in the tree depth-first."""
    yield node
    for child in node.children:
        yield from _iter_tree(child)


def _first_error_line(root) -> int:
    for node in _iter_tree(root):
        if node.type == "ERROR" or node.is_missing:
            return node.start_point[0] + 1
    return root.start_point[0] + 1
