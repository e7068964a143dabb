"""Choosing and running an external diff program."""

from __future__ import annotations

import os
import stat
import subprocess
import sys
from dataclasses import dataclass, field


class DiffError(Exception):
    """Raised when the diff program cannot be started or reports failure."""


def isatty(fd: int) -> bool:
    """Report whether ``fd`` is a character device, which is close enough to a tty."""
    if sys.platform == "win32":
        return False
    try:
        st = os.fstat(fd)
    except OSError:
        return False
    return stat.S_ISCHR(st.st_mode)


@dataclass
class Differ:
    """How to invoke diff, and the pairs queued for a multi-pair diff program."""

    cmd: str = ""
    multi_diff: bool = False
    args: list[str] = field(default_factory=list)

    def _invoke(self, command: str, *args: str) -> None:
        # The special diff command ":" means don't run anything.
        if self.cmd == ":":
            return
        if command == "FC":
            argv = [command, "/T", *args]
        else:
            # Arguments go through "$@" so that they never reach the shell as code.
            argv = ["/usr/bin/env", "bash", "-c", command + ' "$@"', "--", *args]
        try:
            completed = subprocess.run(argv, check=False)
        except OSError as err:
            raise DiffError(f"buildifier: {command}: {err}") from err
        code = completed.returncode
        if code > 0:
            raise DiffError(f"exit status {code}")
        if code < 0:
            raise DiffError(f"signal: {-code}")

    def show(self, old: str, new: str) -> None:
        """Diff ``old`` against ``new``, or queue the pair for a multi-pair program."""
        if not self.multi_diff:
            self._invoke(self.cmd, old, new)
            return
        self.args.extend([":", old, new])

    def run(self) -> None:
        """Run any diffs queued by :meth:`show`; a no-op for single-pair programs."""
        if not self.multi_diff or not self.args:
            return
        self._invoke(self.cmd, *self.args)


def find() -> tuple[Differ, bool]:
    """Pick a differ from the environment.

    Returns the differ and whether a deprecated environment-based selection
    was used.
    """
    differ = Differ()
    deprecation_warning = False

    cmd = os.environ.get("BUILDIFIER_DIFF", "")
    if cmd:
        deprecation_warning = True
        differ.cmd = cmd

    know_multi_diff = False
    md = os.environ.get("BUILDIFIER_MULTIDIFF", "")
    if md in ("0", "1"):
        deprecation_warning = True
        differ.multi_diff = md == "1"
        know_multi_diff = True

    has_display = os.environ.get("DISPLAY", "") != ""

    if differ.cmd:
        if not know_multi_diff:
            differ.multi_diff = (
                "tkdiff" in differ.cmd.lower() and isatty(1) and has_display
            )
    else:
        if not know_multi_diff:
            differ.multi_diff = isatty(1) and has_display
            if differ.multi_diff:
                deprecation_warning = True
        if differ.multi_diff:
            differ.cmd = "tkdiff"
        elif sys.platform == "win32":
            deprecation_warning = True
            differ.cmd = "FC"
        else:
            differ.cmd = "diff --unified"
    return differ, deprecation_warning