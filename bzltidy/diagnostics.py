"""Diagnostics collected while formatting and linting files."""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field


@dataclass(frozen=True)
class Position:
    """A line and column in a source file."""

    line: int
    column: int


@dataclass(frozen=True)
class Finding:
    """A lint finding as reported by the linter."""

    start: Position
    end: Position
    category: str
    message: str
    url: str = ""
    actionable: bool = True


@dataclass
class DiagnosticWarning:
    """A warning as it appears in the diagnostics output."""

    start: Position
    end: Position
    category: str
    actionable: bool
    message: str
    url: str


@dataclass
class FileDiagnostics:
    """Diagnostics for a single file."""

    filename: str
    formatted: bool = True
    valid: bool = True
    warnings: list[DiagnosticWarning] = field(default_factory=list)


_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _escape_html(text: str) -> str:
    return "".join(_HTML_ESCAPES.get(ch, ch) for ch in text)


@dataclass
class Diagnostics:
    """Diagnostics for a whole run."""

    success: bool = True
    files: list[FileDiagnostics] = field(default_factory=list)

    def format(self, format: str, verbose: bool) -> str:
        """Render as plain text (``"text"`` or ``""``) or as ``"json"``.

        Any other format renders as the empty string.
        """
        if format in ("text", ""):
            lines = []
            for f in self.files:
                for w in f.warnings:
                    link = f"({w.url})" if w.actionable else f"[{w.url}]"
                    lines.append(
                        f"{f.filename}:{w.start.line}: {w.category}: {w.message} {link}\n"
                    )
                if not f.formatted:
                    lines.append(f"{f.filename} # reformat\n")
            return "".join(lines)
        if format == "json":
            data = asdict(self)
            if verbose:
                text = json.dumps(data, indent=4, ensure_ascii=False)
            else:
                text = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
            return _escape_html(text) + "\n"
        return ""


def new_diagnostics(*args: FileDiagnostics) -> Diagnostics:
    """Combine per-file diagnostics; success only if all are clean."""
    files = list(args)
    success = all(f.formatted and not f.warnings for f in files)
    return Diagnostics(success=success, files=files)


def new_file_diagnostics(
    filename: str, findings: Iterable[Finding] | None
) -> FileDiagnostics:
    """Build diagnostics for a file that parsed, from its lint findings."""
    warnings = [
        DiagnosticWarning(
            start=Position(f.start.line, f.start.column),
            end=Position(f.end.line, f.end.column),
            category=f.category,
            actionable=f.actionable,
            message=f.message,
            url=f.url,
        )
        for f in findings or ()
    ]
    return FileDiagnostics(filename=filename, warnings=warnings)


def invalid_file_diagnostics(filename: str) -> FileDiagnostics:
    """Build diagnostics for a file that could not be parsed."""
    return FileDiagnostics(
        filename=filename or "<stdin>", formatted=False, valid=False
    )