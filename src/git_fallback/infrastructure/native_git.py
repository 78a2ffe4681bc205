"""Native fast path: runs the locally installed ``git`` executable."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from git_fallback.domain.exceptions import NativeGitError

logger = logging.getLogger(__name__)


class NativeGit:
    """Thin wrapper around ``git`` invoked inside a working directory.

    Every method returns the command's stdout or raises
    :class:`NativeGitError`; callers treat the error as "use the API instead".
    """

    def __init__(self, workdir: Path, binary: str = "git") -> None:
        self._workdir = workdir
        self._binary = binary

    def run(self, *args: str) -> str:
        cmd = [self._binary, *args]
        try:
            result = subprocess.run(  # noqa: S603
                cmd,
                cwd=self._workdir,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise NativeGitError(f"{' '.join(cmd)}: {exc}") from exc

        if result.returncode != 0:
            raise NativeGitError(
                f"{' '.join(cmd)} exited with {result.returncode}: {result.stderr.strip()}"
            )
        return result.stdout

    def reset_hard(self, commit: str) -> str:
        return self.run("reset", "--hard", commit)

    def fetch_checkout(self, commit: str) -> str:
        self.run("fetch", "origin", commit)
        return self.run("checkout", commit)

    def diff_numstat(self, base: str, commit: str) -> str:
        return self.run("diff", "--numstat", base, commit)

    def show_date(self, commit: str) -> str:
        return self.run("show", "-s", "--format=%ai", commit)

    def log(self, commit: str, max_count: int = 100) -> str:
        return self.run("log", "--format=%H", f"-{max_count}", commit)

    def rev_parse(self, rev: str) -> str:
        return self.run("rev-parse", rev)

    def tracked_files(self, ref: str) -> list[str]:
        return [line for line in self.run("ls-tree", "-r", "--full-tree", "--name-only", ref).splitlines() if line]
