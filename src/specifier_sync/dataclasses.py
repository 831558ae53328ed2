"""Per-build record types shared by the rewrite passes."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from specifier_sync.classifier import FileClass


@dataclass(frozen=True)
class CandidateFile:
    path: Path  # absolute
    file_class: FileClass

    @property
    def dialect(self) -> str:
        return self.file_class.dialect

    @property
    def is_declaration(self) -> bool:
        return self.file_class.is_declaration


@dataclass
class FileRecord:
    """Outcome of the rewrite passes for one candidate file.

    ``code`` is empty whenever ``error`` is set. ``output_path`` starts as
    ``filename`` and moves when the extension map renames the file;
    ``extra_outputs`` holds the secondary sibling of a dual-emitted
    declaration.
    """

    filename: Path
    code: str = ""
    error: str | None = None
    output_path: Path | None = None
    extra_outputs: dict[Path, str] = field(default_factory=dict)

    def __post_init__(self):
        if self.output_path is None:
            self.output_path = self.filename

    @property
    def ok(self) -> bool:
        return self.error is None

    def fail(self, message: str) -> None:
        self.error = message
        self.code = ""


@dataclass(frozen=True)
class WriteFailure:
    filename: Path
    message: str

    def __str__(self) -> str:
        return f"{self.filename}: {self.message}"


@dataclass
class BuildReport:
    files_processed: int = 0
    files_rewritten: int = 0
    rewrite_errors: int = 0
    files_renamed: int = 0
    write_failures: list[WriteFailure] = field(default_factory=list)
    duration_ms: int = 0
    records: dict[str, FileRecord] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.rewrite_errors == 0 and not self.write_failures

    def failed_files(self) -> list[str]:
        """One line per file that failed to rewrite or write."""
        lines = [
            f"{name}: {record.error}"
            for name, record in self.records.items()
            if record.error is not None
        ]
        lines.extend(str(f) for f in self.write_failures)
        return lines
