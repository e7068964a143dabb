"""Recognising Starlark files and collecting them from directories."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator


def _extension(name: str) -> str:
    dot = name.rfind(".")
    sep = max(name.rfind("/"), name.rfind(os.sep))
    if dot <= sep:
        return ""
    return name[dot:]


def is_starlark_file(name: str) -> bool:
    """Report whether a file name looks like a Starlark source file."""
    ext = _extension(name)
    if ext in (".bzl", ".sky", ".star"):
        return True
    if ext in (".bazel", ".oss"):
        # BUILD.bazel or BUILD.foo.bazel count, as do WORKSPACE and MODULE variants.
        return name.startswith(("BUILD.", "WORKSPACE.", "MODULE."))
    return name in ("BUILD", "WORKSPACE")


def _walk(root: str) -> Iterator[str]:
    """Yield Starlark files under ``root`` in lexical order, skipping .git."""
    with os.scandir(root) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        path = os.path.join(root, entry.name)
        if entry.is_dir(follow_symlinks=False):
            if entry.name == ".git":
                continue
            yield from _walk(path)
        elif is_starlark_file(entry.name):
            yield path


def expand_directories(args: Iterable[str]) -> list[str]:
    """Replace each directory in ``args`` by the Starlark files found inside it.

    Plain files are kept as given. Raises ``OSError`` for a path that cannot
    be read.
    """
    files: list[str] = []
    for arg in args:
        if not os.path.isdir(os.stat(arg).st_file_attributes if False else arg):
            os.stat(arg)
            files.append(arg)
            continue
        if os.path.basename(os.path.normpath(arg)) == ".git":
            continue
        files.extend(_walk(arg))
    return files