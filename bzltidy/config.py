"""Formatter configuration: defaults, command-line flags and JSON files."""

from __future__ import annotations

import json
import os
import stat
from collections import deque
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, IO

from .validation import (
    ConfigError,
    validate_format,
    validate_input_type,
    validate_modes,
    validate_warnings,
)

CONFIG_FILENAME = ".buildifier.json"

ALL_WARNINGS: tuple[str, ...] = (
    "attr-applicable_licenses",
    "attr-cfg",
    "attr-license",
    "attr-licenses",
    "attr-non-empty",
    "attr-output-default",
    "attr-single-file",
    "build-args-kwargs",
    "bzl-visibility",
    "confusing-name",
    "constant-glob",
    "ctx-actions",
    "ctx-args",
    "deprecated-function",
    "depset-items",
    "depset-iteration",
    "depset-union",
    "dict-concatenation",
    "dict-method-named-arg",
    "duplicated-name",
    "filetype",
    "function-docstring",
    "function-docstring-args",
    "function-docstring-header",
    "function-docstring-return",
    "git-repository",
    "http-archive",
    "integer-division",
    "keyword-positional-params",
    "list-append",
    "load",
    "load-on-top",
    "module-docstring",
    "name-conventions",
    "native-android",
    "native-build",
    "native-cc",
    "native-java",
    "native-package",
    "native-proto",
    "native-py",
    "no-effect",
    "out-of-order-load",
    "output-group",
    "overly-nested-depset",
    "package-name",
    "package-on-top",
    "positional-args",
    "print",
    "provider-params",
    "redefined-variable",
    "repository-name",
    "return-value",
    "rule-impl-return",
    "same-origin-load",
    "skylark-comment",
    "skylark-docstring",
    "string-iteration",
    "uninitialized",
    "unnamed-macro",
    "unreachable",
    "unsorted-dict-items",
    "unused-variable",
)

_NOT_DEFAULT = frozenset(
    {
        "native-android",
        "native-cc",
        "native-java",
        "native-proto",
        "native-py",
        "unsorted-dict-items",
    }
)

DEFAULT_WARNINGS: tuple[str, ...] = tuple(
    w for w in ALL_WARNINGS if w not in _NOT_DEFAULT
)


class FlagKind(Enum):
    """How a flag takes its value."""

    BOOL = "bool"
    STRING = "string"
    LIST = "list"


@dataclass(frozen=True)
class Flag:
    """A command-line flag that overrides a configuration field."""

    name: str
    usage: str
    default: str
    attr: str
    kind: FlagKind


# (flag name, attribute, kind, usage); defaults come from the current config
# except for help, version and config, which always start empty.
_FLAG_SPECS: tuple[tuple[str, str, FlagKind, str], ...] = (
    ("help", "help", FlagKind.BOOL, "print usage information"),
    ("version", "version", FlagKind.BOOL, "print the version of buildifier"),
    ("v", "verbose", FlagKind.BOOL, "print verbose information to standard error"),
    ("d", "diff_mode", FlagKind.BOOL, "alias for -mode=diff"),
    ("r", "recursive", FlagKind.BOOL, "find starlark files recursively"),
    (
        "multi_diff",
        "multi_diff",
        FlagKind.BOOL,
        "the command specified by the -diff_command flag can diff multiple files "
        "in the style of tkdiff (default false)",
    ),
    ("mode", "mode", FlagKind.STRING, "formatting mode: check, diff, or fix (default fix)"),
    ("format", "format", FlagKind.STRING, "diagnostics format: text or json (default text)"),
    (
        "diff_command",
        "diff_command",
        FlagKind.STRING,
        "command to run when the formatting mode is diff (default uses the "
        "BUILDIFIER_DIFF, BUILDIFIER_MULTIDIFF, and DISPLAY environment variables "
        "to create the diff command)",
    ),
    ("lint", "lint", FlagKind.STRING, "lint mode: off, warn, or fix (default off)"),
    (
        "warnings",
        "warnings",
        FlagKind.STRING,
        'comma-separated warnings used in the lint mode or "all"',
    ),
    (
        "path",
        "workspace_relative_path",
        FlagKind.STRING,
        "assume BUILD file has this path relative to the workspace directory",
    ),
    (
        "tables",
        "tables_path",
        FlagKind.STRING,
        "path to JSON file with custom table definitions which will replace the "
        "built-in tables",
    ),
    (
        "add_tables",
        "add_tables_path",
        FlagKind.STRING,
        "path to JSON file with custom table definitions which will be merged "
        "with the built-in tables",
    ),
    (
        "type",
        "input_type",
        FlagKind.STRING,
        "Input file type: build (for BUILD files), bzl (for .bzl files), "
        "workspace (for WORKSPACE files), module (for MODULE.bazel files), "
        "default (for generic Starlark files) or auto (default, based on the filename)",
    ),
    ("config", "config_path", FlagKind.STRING, "path to .buildifier.json config file"),
    ("allowsort", "allow_sort", FlagKind.LIST, "additional sort contexts to treat as safe"),
    (
        "buildifier_disable",
        "disable_rewrites",
        FlagKind.LIST,
        "list of buildifier rewrites to disable",
    ),
)

_FIXED_DEFAULTS = {"help": "false", "version": "false", "config": ""}

# (attribute, JSON key, kind) in output order.
_JSON_FIELDS: tuple[tuple[str, str, FlagKind], ...] = (
    ("input_type", "type", FlagKind.STRING),
    ("format", "format", FlagKind.STRING),
    ("mode", "mode", FlagKind.STRING),
    ("diff_mode", "diffMode", FlagKind.BOOL),
    ("lint", "lint", FlagKind.STRING),
    ("warnings", "warnings", FlagKind.STRING),
    ("warnings_list", "warningsList", FlagKind.LIST),
    ("recursive", "recursive", FlagKind.BOOL),
    ("verbose", "verbose", FlagKind.BOOL),
    ("diff_command", "diffCommand", FlagKind.STRING),
    ("multi_diff", "multiDiff", FlagKind.BOOL),
    ("tables_path", "tables", FlagKind.STRING),
    ("add_tables_path", "addTables", FlagKind.STRING),
    ("workspace_relative_path", "path", FlagKind.STRING),
    ("disable_rewrites", "buildifier_disable", FlagKind.LIST),
    ("allow_sort", "allowsort", FlagKind.LIST),
)

_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _parse_bool(text: str, name: str) -> bool:
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise ConfigError(f'invalid boolean value "{text}" for -{name}: parse error')


def _read_tables(path: str, option: str) -> Any:
    try:
        with open(path, encoding="utf-8") as fh:
            return json.load(fh)
    except (OSError, ValueError) as err:
        raise ConfigError(f"failed to parse {path} for -{option}: {err}") from err


@dataclass
class Config:
    """Formatter settings, loaded from a JSON file and overridden by flags."""

    input_type: str = "auto"
    format: str = ""
    mode: str = ""
    diff_mode: bool = False
    lint: str = ""
    warnings: str = ""
    warnings_list: list[str] = field(default_factory=list)
    recursive: bool = False
    verbose: bool = False
    diff_command: str = ""
    multi_diff: bool = False
    tables_path: str = ""
    add_tables_path: str = ""
    workspace_relative_path: str = ""
    disable_rewrites: list[str] = field(default_factory=list)
    allow_sort: list[str] = field(default_factory=list)

    help: bool = False
    version: bool = False
    config_path: str = ""
    lint_warnings: list[str] = field(default_factory=list)
    table_definitions: Any = None
    added_table_definitions: Any = None

    def flags(self) -> list[Flag]:
        """Describe every flag, sorted by name, with defaults from this config."""
        result = []
        for name, attr, kind, usage in _FLAG_SPECS:
            if name in _FIXED_DEFAULTS:
                default = _FIXED_DEFAULTS[name]
            else:
                value = getattr(self, attr)
                if kind is FlagKind.BOOL:
                    default = "true" if value else "false"
                elif kind is FlagKind.LIST:
                    default = ",".join(value)
                else:
                    default = value
            result.append(Flag(name, usage, default, attr, kind))
        return sorted(result, key=lambda f: f.name)

    def parse_flags(self, argv: Iterable[str]) -> list[str]:
        """Apply command-line flags to this config and return the other arguments.

        Parsing stops at the first argument that is not a flag, or after ``--``.
        """
        self.help = False
        self.version = False
        self.config_path = ""
        by_name = {f.name: f for f in self.flags()}
        remaining = deque(argv)
        while remaining:
            arg = remaining[0]
            if len(arg) < 2 or not arg.startswith("-"):
                break
            remaining.popleft()
            if arg == "--":
                break
            name = arg[2:] if arg.startswith("--") else arg[1:]
            if not name or name.startswith(("-", "=")):
                raise ConfigError(f"bad flag syntax: {arg}")
            name, has_value, value = name.partition("=")
            flag = by_name.get(name)
            if flag is None:
                if name == "h":
                    self.help = True
                    continue
                raise ConfigError(f"flag provided but not defined: -{name}")
            if flag.kind is FlagKind.BOOL:
                setattr(self, flag.attr, _parse_bool(value, name) if has_value else True)
                continue
            if not has_value:
                if not remaining:
                    raise ConfigError(f"flag needs an argument: -{name}")
                value = remaining.popleft()
            if flag.kind is FlagKind.LIST:
                getattr(self, flag.attr).append(value)
            else:
                setattr(self, flag.attr, value)
        return list(remaining)

    def load_file(self) -> None:
        """Load JSON settings from the file named by ``config_path``."""
        with open(self.config_path, "rb") as fh:
            self.load_reader(fh)

    def load_reader(self, stream: IO[Any]) -> None:
        """Load JSON settings from a readable stream; unknown keys are ignored."""
        try:
            raw = stream.read()
        except OSError as err:
            raise ConfigError(f"reading config: {err}") from err
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            data = json.loads(raw)
        except ValueError as err:
            raise ConfigError(str(err)) from err
        if data is None:
            return
        if not isinstance(data, dict):
            raise ConfigError(
                f"json: cannot unmarshal {type(data).__name__} into config object"
            )
        for key, value in data.items():
            spec = self._json_field(key)
            if spec is None or value is None:
                continue
            attr, json_name, kind = spec
            setattr(self, attr, self._check_json_value(json_name, kind, value))

    @staticmethod
    def _json_field(key: str) -> tuple[str, str, FlagKind] | None:
        for spec in _JSON_FIELDS:
            if spec[1] == key:
                return spec
        folded = key.casefold()
        for spec in _JSON_FIELDS:
            if spec[1].casefold() == folded:
                return spec
        return None

    @staticmethod
    def _check_json_value(key: str, kind: FlagKind, value: Any) -> Any:
        if kind is FlagKind.BOOL and isinstance(value, bool):
            return value
        if kind is FlagKind.STRING and isinstance(value, str):
            return value
        if (
            kind is FlagKind.LIST
            and isinstance(value, list)
            and all(isinstance(item, str) for item in value)
        ):
            return list(value)
        raise ConfigError(
            f"json: cannot unmarshal {type(value).__name__} into field {key} "
            f"of type {kind.value}"
        )

    def validate(self, args: Sequence[str]) -> None:
        """Check the settings, fill in defaults and compute ``lint_warnings``.

        Tables files named by the config are read as a side effect.
        """
        validate_input_type(self.input_type)
        validate_format(self.format, self.mode)
        self.mode, self.lint = validate_modes(self.mode, self.lint, self.diff_mode)

        # A workspace-relative path only makes sense for a single file.
        if (self.workspace_relative_path or self.mode == "print_if_changed") and len(
            args
        ) > 1:
            raise ConfigError(
                "can only format one file when using -path flag or "
                "-mode=print_if_changed"
            )

        if self.tables_path:
            self.table_definitions = _read_tables(self.tables_path, "tables")
        if self.add_tables_path:
            self.added_table_definitions = _read_tables(
                self.add_tables_path, "add_tables"
            )

        warnings_list = list(self.warnings_list)
        if self.warnings:
            warnings_list.append(self.warnings)
        self.lint_warnings = validate_warnings(
            ",".join(warnings_list), ALL_WARNINGS, DEFAULT_WARNINGS
        )

    def to_json(self) -> str:
        """Render the file-backed settings as indented JSON, omitting empty ones."""
        data = {
            json_name: list(value) if kind is FlagKind.LIST else value
            for attr, json_name, kind in _JSON_FIELDS
            if (value := getattr(self, attr))
        }
        text = json.dumps(data, indent=2, ensure_ascii=False)
        return "".join(_HTML_ESCAPES.get(ch, ch) for ch in text)

    def __str__(self) -> str:
        return self.to_json()


def example() -> Config:
    """A sample configuration, as printed by ``-config=example``."""
    return Config(
        input_type="auto",
        mode="fix",
        lint="fix",
        warnings_list=list(ALL_WARNINGS),
    )


def _is_regular_file(path: str) -> bool:
    try:
        return stat.S_ISREG(os.stat(path).st_mode)
    except OSError:
        return False


def find_config_path(root_dir: str) -> str:
    """Locate the nearest configuration file.

    ``BUILDIFIER_CONFIG`` wins when set. Otherwise the search starts at
    ``root_dir`` (or the working directory) and walks up the tree. Returns
    an empty string when nothing is found.
    """
    env_value = os.environ.get("BUILDIFIER_CONFIG")
    if env_value is not None:
        return env_value
    if not root_dir:
        try:
            root_dir = os.getcwd()
        except OSError:
            return ""
    directory = os.path.abspath(root_dir)
    while True:
        candidate = os.path.join(directory, CONFIG_FILENAME)
        if _is_regular_file(candidate):
            return candidate
        parent = os.path.dirname(directory)
        if parent == directory:
            return ""
        directory = parent