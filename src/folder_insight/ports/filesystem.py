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
from abc import ABC, abstractmethod
from typing import List


class FilesystemPort(ABC):
    """
    Abstract, non-blocking interface for the filesystem calls a scan needs.

    Every method raises OSError (or a subclass) when the target is unreadable,
    missing or broken; callers decide whether that is fatal.
    """

    @abstractmethod
    async def list_dir(self, path: str) -> List[str]:
        """Return the entry names of a directory, in a stable order."""
        raise NotImplementedError

    @abstractmethod
    async def lstat(self, path: str) -> os.stat_result:
        """Stat without following a final symlink."""
        raise NotImplementedError

    @abstractmethod
    async def stat(self, path: str) -> os.stat_result:
        """Stat the fully resolved target."""
        raise NotImplementedError

    @abstractmethod
    async def realpath(self, path: str) -> str:
        """Return the canonical absolute path, resolving every symlink strictly."""
        raise NotImplementedError
