"""Per-path accumulation of line additions/deletions across commits."""

from __future__ import annotations

from typing import Iterable, Iterator

from git_fallback.domain.entities import CommitDetail, FileChange, FileStat


class NumstatAggregator:
    """Running ``path → FileStat`` map fed one commit at a time.

    Merging is plain addition, so the result does not depend on the order
    commits are added in.
    """

    def __init__(self) -> None:
        self._stats: dict[str, FileStat] = {}

    def add_change(self, change: FileChange) -> None:
        current = self._stats.get(change.path) or FileStat(path=change.path)
        self._stats[change.path] = current.merge(change)

    def add_commit(self, commit: CommitDetail) -> None:
        """Merge every file change of *commit*; usable as a walker visitor."""
        self.add_changes(commit.files)

    def add_changes(self, changes: Iterable[FileChange]) -> None:
        for change in changes:
            self.add_change(change)

    def stats(self) -> list[FileStat]:
        """Accumulated records sorted by path."""
        return [self._stats[path] for path in sorted(self._stats)]

    def render(self) -> Iterator[str]:
        for stat in self.stats():
            yield stat.render()

    def __len__(self) -> int:
        return len(self._stats)
