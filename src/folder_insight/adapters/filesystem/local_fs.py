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

import asyncio
import os
from typing import List

from ...ports.filesystem import FilesystemPort


class LocalFS(FilesystemPort):
    """
    Local filesystem adapter.

    Each call runs the blocking os function in the default thread pool, so a
    scan awaits one I/O operation at a time without blocking the event loop.
    """

    async def list_dir(self, path: str) -> List[str]:
        # Sorted so repeated scans of the same tree produce the same order.
        names = await asyncio.to_thread(os.listdir, path)
        return sorted(names)

    async def lstat(self, path: str) -> os.stat_result:
        return await asyncio.to_thread(os.lstat, path)

    async def stat(self, path: str) -> os.stat_result:
        return await asyncio.to_thread(os.stat, path)

    async def realpath(self, path: str) -> str:
        # strict=True turns a broken link chain into an OSError instead of a
        # best-effort path that points nowhere.
        return await asyncio.to_thread(os.path.realpath, path, strict=True)
