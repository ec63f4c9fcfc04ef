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
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..domain.models import TraversalPolicy
from ..ports.filesystem import FilesystemPort

logger = logging.getLogger(__name__)

DEFAULT_TREE_DEPTH = 3


@dataclass(frozen=True)
class TreeLine:
    """One rendered row of the tree view."""

    prefix: str
    name: str
    is_dir: bool = False

    @property
    def text(self) -> str:
        return self.prefix + self.name


class TreeService:
    """
    Renders a directory tree (directories first, then files by name).

    This walk is independent of ScanService: symlinks are shown as leaves and
    never descended, and an unreadable directory simply renders no children.
    """

    def __init__(self, fs: FilesystemPort) -> None:
        self._fs = fs

    async def render(
        self,
        root: Union[str, Path],
        policy: Optional[TraversalPolicy] = None,
        max_depth: int = DEFAULT_TREE_DEPTH,
    ) -> List[TreeLine]:
        """
        Return the tree rows for `root`; the first row is the root path itself.

        `max_depth` counts levels below the root, so 1 lists only the root's
        direct entries.
        """
        policy = policy or TraversalPolicy()
        top = os.path.abspath(os.fspath(root))
        lines = [TreeLine(prefix="", name=top, is_dir=True)]
        await self._walk(top, 1, "", policy, max_depth, lines)
        return lines

    async def _entries(
        self, directory: str, policy: TraversalPolicy
    ) -> List[Tuple[str, bool]]:
        try:
            names = await self._fs.list_dir(directory)
        except OSError as e:
            logger.debug("TreeService: cannot list %s: %s", directory, e)
            return []

        entries: List[Tuple[str, bool]] = []
        for name in names:
            if policy.skip_reason_for_name(name) is not None:
                continue
            try:
                st = await self._fs.lstat(os.path.join(directory, name))
            except OSError:
                continue
            entries.append((name, stat.S_ISDIR(st.st_mode)))

        entries.sort(key=lambda e: (not e[1], e[0].lower(), e[0]))
        return entries

    async def _walk(
        self,
        directory: str,
        depth: int,
        prefix: str,
        policy: TraversalPolicy,
        max_depth: int,
        lines: List[TreeLine],
    ) -> None:
        if depth > max_depth:
            return
        entries = await self._entries(directory, policy)
        last = len(entries) - 1
        for i, (name, is_dir) in enumerate(entries):
            connector = "└── " if i == last else "├── "
            lines.append(TreeLine(prefix=prefix + connector, name=name, is_dir=is_dir))
            if is_dir:
                child_prefix = prefix + ("    " if i == last else "│   ")
                await self._walk(
                    os.path.join(directory, name),
                    depth + 1,
                    child_prefix,
                    policy,
                    max_depth,
                    lines,
                )
