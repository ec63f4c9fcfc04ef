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

import os
from typing import FrozenSet, Optional

from .domain.models import DEFAULT_IGNORE_NAMES

DEFAULT_TOP = 10
DEFAULT_EXTENSION_ROWS = 10
REPORT_FORMATS: set[str] = {"json", "ndjson", "csv"}

IGNORE_ENV_VAR = "FI_IGNORE"


def parse_ignore(value: Optional[str]) -> FrozenSet[str]:
    """
    Parse a comma-separated ignore list ("node_modules, .git") into a set of names.

    None falls back to FI_IGNORE from the environment, then to the built-in
    defaults. An explicit empty string means "ignore nothing".
    """
    if value is None:
        value = os.getenv(IGNORE_ENV_VAR)
    if value is None:
        return DEFAULT_IGNORE_NAMES
    return frozenset(p.strip() for p in value.split(",") if p.strip())
