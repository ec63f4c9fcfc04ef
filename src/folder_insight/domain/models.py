# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from __future__ import annotations

import os
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional

from .errors import ConfigurationError

NO_EXTENSION = "(no-ext)"

DEFAULT_IGNORE_NAMES: FrozenSet[str] = frozenset({"node_modules", ".git"})


def extension_of(path: str) -> str:
    """
    Return the lowercased extension of `path` with a leading dot, or NO_EXTENSION.

    Only the basename is inspected, so dots in parent directory names never
    leak into the result. `archive.tar.gz` -> `.gz`; `README` and `.gitignore`
    -> `(no-ext)`.

    A trailing dot (`notes.`) also yields `(no-ext)` rather than a bare `.`:
    an empty last segment is treated as no extension at all.
    """
    _, ext = os.path.splitext(os.path.basename(path))
    if ext in ("", "."):
        return NO_EXTENSION
    return ext.lower()


@dataclass(frozen=True)
class FileRecord:
    """One regular file discovered during a scan."""

    path: str
    size: int
    extension: str

    @classmethod
    def from_stat(cls, path: str, st: os.stat_result) -> "FileRecord":
        return cls(path=path, size=st.st_size, extension=extension_of(path))


@dataclass(frozen=True)
class TraversalPolicy:
    """
    Immutable configuration for one scan.

    max_depth=None means unbounded; the root itself is depth 0.
    """

    max_depth: Optional[int] = None
    ignore_names: FrozenSet[str] = DEFAULT_IGNORE_NAMES
    follow_symlinks: bool = False
    include_hidden: bool = False

    def __post_init__(self) -> None:
        if self.max_depth is not None and self.max_depth < 0:
            raise ConfigurationError(
                f"max_depth must be >= 0 or None, got {self.max_depth}"
            )
        # Accept any iterable of names from callers; store it frozen.
        object.__setattr__(self, "ignore_names", frozenset(self.ignore_names))

    def allows_depth(self, depth: int) -> bool:
        return self.max_depth is None or depth <= self.max_depth

    def skip_reason_for_name(self, name: str) -> Optional["SkipReason"]:
        """Name-only filtering, applied before an entry's type is inspected."""
        if name in ("", ".", ".."):
            return SkipReason.DOT_ENTRY
        if name in self.ignore_names:
            return SkipReason.IGNORED
        if not self.include_hidden and name.startswith("."):
            return SkipReason.HIDDEN
        return None


class SkipReason(str, Enum):
    DOT_ENTRY = "dot_entry"
    HIDDEN = "hidden"
    IGNORED = "ignored"
    DEPTH_EXCEEDED = "depth_exceeded"
    UNREADABLE_DIR = "unreadable_dir"
    STAT_FAILED = "stat_failed"
    SYMLINK_NOT_FOLLOWED = "symlink_not_followed"
    BROKEN_SYMLINK = "broken_symlink"
    ALREADY_VISITED = "already_visited"
    UNSUPPORTED_TYPE = "unsupported_type"


@dataclass
class ScanOutcome:
    """Records emitted by one scan plus a tally of everything it skipped."""

    records: List[FileRecord] = field(default_factory=list)
    skipped: Counter = field(default_factory=Counter)

    def skip(self, reason: SkipReason) -> None:
        self.skipped[reason] += 1


@dataclass(frozen=True)
class ExtensionTotal:
    ext: str
    bytes: int
    files: int


@dataclass(frozen=True)
class ScanStats:
    total_files: int
    total_bytes: int
    by_extension: List[ExtensionTotal]
    top_files: List[FileRecord]


def total_bytes(records: Iterable[FileRecord]) -> int:
    return sum(r.size for r in records)
