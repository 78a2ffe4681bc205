"""Tree materializer: rebuilds a working directory from a remote tree listing.

The recursive listing already flattens sub-trees into file entries, so only
``blob`` entries are written.  Entries are processed in listing order and the
first failure aborts the whole run; files written before the failure stay on
disk.
"""

from __future__ import annotations

import logging
import shutil
import stat
from pathlib import Path

from git_fallback.domain.entities import TreeEntry
from git_fallback.domain.exceptions import FileNotInTreeError, MaterializationError
from git_fallback.domain.ports.object_client import RemoteObjectClient

logger = logging.getLogger(__name__)


class TreeMaterializer:
    """Writes the files of a commit, fetched blob by blob, under a root directory."""

    def __init__(self, client: RemoteObjectClient) -> None:
        self._client = client

    async def materialize(self, commit: str, root: Path) -> int:
        """Write every file of *commit* below *root*; return the number written."""
        entries = await self._client.get_tree(commit)
        root = root.resolve()
        written = 0
        for entry in entries:
            if not entry.is_file:
                continue
            blob = await self._client.get_blob(entry.sha)
            write_entry(root, entry, blob.decode())
            written += 1
        logger.info("Materialized %d files from %s into %s", written, commit, root)
        return written

    async def read_file(self, commit: str, path: str) -> bytes:
        """Return the decoded content of *path* as of *commit*."""
        wanted = path.strip("/")
        for entry in await self._client.get_tree(commit):
            if entry.is_file and entry.path == wanted:
                blob = await self._client.get_blob(entry.sha)
                return blob.decode()
        raise FileNotInTreeError(f"{path}: not found in tree of {commit}")


def write_entry(root: Path, entry: TreeEntry, data: bytes) -> Path:
    """Write *data* to ``root / entry.path``, replacing whatever is there."""
    candidate = root / entry.path
    # Resolve only the parent so an existing symlink at the target is replaced, not followed.
    target = candidate.parent.resolve() / candidate.name
    if candidate.name in ("", ".", "..") or not target.parent.is_relative_to(root):
        raise MaterializationError(f"{entry.path}: path escapes {root}")

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        if target.is_symlink():
            target.unlink()
        elif target.is_dir():
            # A file now lives where a directory used to be.
            shutil.rmtree(target)
        target.write_bytes(data)
        if entry.is_executable:
            mode = target.stat().st_mode
            target.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    except OSError as exc:
        raise MaterializationError(f"{entry.path}: cannot write file: {exc}") from exc
    return target
