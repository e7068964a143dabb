"""Checks for the values of formatter command-line options."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

INPUT_TYPES = ("build", "bzl", "workspace", "default", "module", "auto")
FORMATS = ("text", "json")
BASE_MODES = ("check", "diff", "fix", "print_if_changed")


class ConfigError(ValueError):
    """Raised when an option has a value that is not accepted."""


def validate_input_type(input_type: str) -> None:
    """Check the value of the ``--type`` option."""
    if input_type not in INPUT_TYPES:
        raise ConfigError(
            f"unrecognized input type {input_type}; "
            "valid types are build, bzl, workspace, default, module, auto"
        )


def validate_format(format: str, mode: str) -> None:
    """Check the value of ``--format``, which needs ``--mode=check``."""
    if format == "":
        return
    if format not in FORMATS:
        raise ConfigError(
            f"unrecognized format {format}; valid types are text, json"
        )
    if mode != "check":
        raise ConfigError("cannot specify --format without --mode=check")


def validate_modes(
    mode: str, lint: str, diff_mode: bool, *args: str
) -> tuple[str, str]:
    """Check ``--mode``, ``--lint`` and ``-d`` together.

    Extra positional arguments name further accepted modes. Returns the
    effective ``(mode, lint)`` pair with defaults filled in.
    """
    if diff_mode:
        if mode != "":
            raise ConfigError("cannot specify both -d and -mode flags")
        mode = "diff"

    valid_modes = [*BASE_MODES, *args]
    if mode == "":
        mode = "fix"
    elif mode not in valid_modes:
        raise ConfigError(
            f"unrecognized mode {mode}; valid modes are {', '.join(valid_modes)}"
        )

    if lint == "":
        lint = "off"
    elif lint in ("off", "warn"):
        pass
    elif lint == "fix":
        if mode != "fix":
            raise ConfigError("--lint=fix is only compatible with --mode=fix")
    else:
        raise ConfigError(
            f"unrecognized lint mode {lint}; valid modes are warn and fix"
        )
    return mode, lint


def validate_warnings(
    warnings: str,
    all_warnings: Sequence[str],
    default_warnings: Sequence[str],
) -> list[str]:
    """Resolve the ``--warnings`` value into the list of warnings to use.

    Either every entry carries a ``+``/``-`` modifier (meaning the default
    set plus or minus some warnings) or none does.
    """
    if warnings in ("", "default"):
        return list(default_warnings)
    if warnings == "all":
        return list(all_warnings)

    plus: dict[str, None] = {}
    minus: set[str] = set()
    raw: list[str] = []
    for warning in warnings.split(","):
        if warning.startswith("+"):
            plus[warning[1:]] = None
        elif warning.startswith("-"):
            minus.add(warning[1:])
        else:
            raw.append(warning)

    if raw and (plus or minus):
        raise ConfigError(
            'warning categories with modifiers ("+" or "-") '
            "can't be mixed with raw warning categories"
        )
    if raw:
        return raw
    result = [w for w in default_warnings if w not in minus]
    result.extend(_iter_keys(plus))
    return result


def _iter_keys(mapping: dict[str, None]) -> Iterable[str]:
    return iter(mapping)