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

import logging
import os
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple, Union

from ..domain.errors import ScanRootError
from ..domain.models import FileRecord, ScanOutcome, SkipReason, TraversalPolicy
from ..ports.filesystem import FilesystemPort

logger = logging.getLogger(__name__)


@dataclass
class _Descend:
    """Classification result: the entry is a directory to enter."""

    path: str


@dataclass
class _ScanContext:
    """
    State owned by a single scan() call.

    Only consulted when following symlinks: `visited_files` holds the real
    path of every file emitted, `entered_dirs` maps the real path of every
    directory entered to the shallowest depth it was entered at.
    """

    policy: TraversalPolicy
    outcome: ScanOutcome = field(default_factory=ScanOutcome)
    visited_files: Set[str] = field(default_factory=set)
    entered_dirs: Dict[str, int] = field(default_factory=dict)
    stack: List[Tuple[str, int]] = field(default_factory=list)


_Classified = Union[FileRecord, _Descend, SkipReason]


class ScanService:
    """
    Walks a directory tree and produces a flat list of FileRecords:
      - depth-limited (root is depth 0)
      - ignore-list and hidden-name filtering at every level
      - optional symlink following with a per-scan cycle/duplicate guard
      - tolerant of per-entry and per-directory failures

    Only an unusable root raises (ScanRootError). Everything below the root
    that cannot be read is skipped and tallied in ScanOutcome.skipped.
    """

    def __init__(self, fs: FilesystemPort) -> None:
        self._fs = fs

    async def scan(
        self, root: Union[str, Path], policy: Optional[TraversalPolicy] = None
    ) -> List[FileRecord]:
        outcome = await self.scan_detailed(root, policy)
        return outcome.records

    async def scan_detailed(
        self, root: Union[str, Path], policy: Optional[TraversalPolicy] = None
    ) -> ScanOutcome:
        """
        Scan `root` and return the emitted records plus skip tallies.

        Raises:
            ScanRootError: if `root` cannot be stat'ed or is not a directory.
        """
        ctx = _ScanContext(policy=policy or TraversalPolicy())
        top = await self._check_root(root)

        if ctx.policy.follow_symlinks:
            try:
                ctx.entered_dirs[await self._fs.realpath(top)] = 0
            except OSError as e:
                raise ScanRootError(f'Unable to access "{top}": {e}') from e

        ctx.stack.append((top, 0))
        while ctx.stack:
            directory, depth = ctx.stack.pop()
            await self._walk_dir(ctx, directory, depth)

        logger.debug(
            "scan of %s: %d files, skipped %s",
            top,
            len(ctx.outcome.records),
            dict(ctx.outcome.skipped),
        )
        return ctx.outcome

    async def _check_root(self, root: Union[str, Path]) -> str:
        try:
            top = os.path.abspath(os.fspath(root))
        except (TypeError, ValueError) as e:
            raise ScanRootError(f"Invalid scan root {root!r}: {e}") from e
        try:
            st = await self._fs.stat(top)
        except (OSError, ValueError) as e:
            raise ScanRootError(f'Unable to access "{top}": {e}') from e
        if not stat.S_ISDIR(st.st_mode):
            raise ScanRootError(f'Unable to access "{top}": Not a directory: {top}')
        return top

    async def _walk_dir(self, ctx: _ScanContext, directory: str, depth: int) -> None:
        try:
            names = await self._fs.list_dir(directory)
        except OSError as e:
            # permission denied, vanished, or not a directory after all
            logger.debug("ScanService: cannot list %s: %s", directory, e)
            ctx.outcome.skip(SkipReason.UNREADABLE_DIR)
            return

        child_depth = depth + 1
        subdirs: List[str] = []
        for name in names:
            result = await self._classify(ctx, directory, name, child_depth)
            if isinstance(result, FileRecord):
                ctx.outcome.records.append(result)
            elif isinstance(result, _Descend):
                subdirs.append(result.path)
            else:
                ctx.outcome.skip(result)

        # Reversed so the stack pops subdirectories in listing order.
        for sub in reversed(subdirs):
            ctx.stack.append((sub, child_depth))

    async def _classify(
        self, ctx: _ScanContext, directory: str, name: str, child_depth: int
    ) -> _Classified:
        policy = ctx.policy
        reason = policy.skip_reason_for_name(name)
        if reason is not None:
            return reason

        full = os.path.join(directory, name)
        try:
            lst = await self._fs.lstat(full)
        except OSError as e:
            logger.debug("ScanService: lstat failed for %s: %s", full, e)
            return SkipReason.STAT_FAILED

        if stat.S_ISLNK(lst.st_mode):
            if not policy.follow_symlinks:
                return SkipReason.SYMLINK_NOT_FOLLOWED
            return await self._classify_link(ctx, full, child_depth)

        if stat.S_ISDIR(lst.st_mode):
            # Children past max_depth are never listed, nor recorded as entered.
            if not policy.allows_depth(child_depth):
                return SkipReason.DEPTH_EXCEEDED
            if policy.follow_symlinks:
                return await self._claim_dir(ctx, full, child_depth)
            return _Descend(full)

        if stat.S_ISREG(lst.st_mode):
            if policy.follow_symlinks:
                try:
                    real = await self._fs.realpath(full)
                except OSError as e:
                    logger.debug("ScanService: realpath failed for %s: %s", full, e)
                    return SkipReason.STAT_FAILED
                if real in ctx.visited_files:
                    return SkipReason.ALREADY_VISITED
                ctx.visited_files.add(real)
            return FileRecord.from_stat(full, lst)

        return SkipReason.UNSUPPORTED_TYPE

    async def _classify_link(
        self, ctx: _ScanContext, link: str, child_depth: int
    ) -> _Classified:
        try:
            real = await self._fs.realpath(link)
        except OSError as e:
            logger.debug("ScanService: broken symlink %s: %s", link, e)
            return SkipReason.BROKEN_SYMLINK
        if real in ctx.visited_files:
            return SkipReason.ALREADY_VISITED

        try:
            st = await self._fs.stat(real)
        except OSError as e:
            logger.debug("ScanService: stat failed for %s -> %s: %s", link, real, e)
            return SkipReason.BROKEN_SYMLINK

        if stat.S_ISDIR(st.st_mode):
            if not ctx.policy.allows_depth(child_depth):
                return SkipReason.DEPTH_EXCEEDED
            return self._claim_real_dir(ctx, real, child_depth)
        if stat.S_ISREG(st.st_mode):
            ctx.visited_files.add(real)
            return FileRecord.from_stat(real, st)
        return SkipReason.UNSUPPORTED_TYPE

    async def _claim_dir(
        self, ctx: _ScanContext, path: str, depth: int
    ) -> _Classified:
        try:
            real = await self._fs.realpath(path)
        except OSError as e:
            logger.debug("ScanService: realpath failed for %s: %s", path, e)
            return SkipReason.STAT_FAILED
        claimed = self._claim_real_dir(ctx, real, depth)
        # A plain directory keeps its discovered path for its descendants.
        return _Descend(path) if isinstance(claimed, _Descend) else claimed

    def _claim_real_dir(self, ctx: _ScanContext, real: str, depth: int) -> _Classified:
        """
        Enter `real` unless it was already entered at the same or a shallower
        depth. Re-entering from a shallower depth reaches entries the deeper
        visit cut off at max_depth; files already emitted stay deduplicated
        through `visited_files`, and depth strictly decreases, so cycles end.
        """
        entered_at = ctx.entered_dirs.get(real)
        if entered_at is not None and entered_at <= depth:
            return SkipReason.ALREADY_VISITED
        ctx.entered_dirs[real] = depth
        return _Descend(real)
