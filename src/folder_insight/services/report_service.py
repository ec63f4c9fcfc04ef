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

import csv
import json
from collections import defaultdict
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from ..config import REPORT_FORMATS
from ..domain.models import ExtensionTotal, FileRecord, ScanStats, total_bytes

_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_bytes(n: int) -> str:
    """Human-friendly size using 1024-based units, e.g. 1536 -> '1.50 KB'."""
    if n <= 0:
        return "0 B"
    i = 0
    value = float(n)
    while value >= 1024 and i < len(_UNITS) - 1:
        value /= 1024
        i += 1
    return f"{value:.0f} {_UNITS[i]}" if i == 0 else f"{value:.2f} {_UNITS[i]}"


def percent(part: int, whole: int) -> str:
    if not whole:
        return "0%"
    return f"{part / whole * 100:.1f}%"


class ReportService:
    """
    Aggregates scan records and writes machine-readable reports (JSON/NDJSON/CSV).

    Notes:
      - JSON (default): one object with totals, per-extension breakdown and the
        largest files.
      - NDJSON: one file record per line, largest first.
      - CSV: largest-files rows with a rank column; stable column order.
    """

    def summarize(self, records: Iterable[FileRecord]) -> ScanStats:
        files = list(records)
        by_ext_bytes: Dict[str, int] = defaultdict(int)
        by_ext_files: Dict[str, int] = defaultdict(int)
        for rec in files:
            by_ext_bytes[rec.extension] += rec.size
            by_ext_files[rec.extension] += 1

        by_extension = sorted(
            (
                ExtensionTotal(ext=ext, bytes=size, files=by_ext_files[ext])
                for ext, size in by_ext_bytes.items()
            ),
            key=lambda t: (-t.bytes, t.ext),
        )
        top_files = sorted(files, key=lambda r: (-r.size, r.path))

        return ScanStats(
            total_files=len(files),
            total_bytes=total_bytes(files),
            by_extension=by_extension,
            top_files=top_files,
        )

    def to_dict(
        self, stats: ScanStats, root: Optional[str] = None, top: Optional[int] = None
    ) -> dict[str, Any]:
        files = stats.top_files if top is None else stats.top_files[:top]
        return {
            "root": root,
            "total_files": stats.total_files,
            "total_bytes": stats.total_bytes,
            "by_extension": [asdict(t) for t in stats.by_extension],
            "top_files": [asdict(r) for r in files],
        }

    def write_report(
        self,
        stats: ScanStats,
        out: Path,
        fmt: str = "json",
        *,
        root: Optional[str] = None,
        top: Optional[int] = None,
    ) -> Path:
        """
        Write a report for `stats` to `out` in the specified format.

        Returns:
            The path written.

        Raises:
            ValueError: if an unsupported format is requested.
        """
        fmt = (fmt or "json").lower()
        if fmt not in REPORT_FORMATS:
            raise ValueError(f"Unsupported format: {fmt}")

        out = Path(out)
        out.parent.mkdir(parents=True, exist_ok=True)
        files: List[FileRecord] = (
            stats.top_files if top is None else stats.top_files[:top]
        )

        if fmt == "json":
            payload = self.to_dict(stats, root=root, top=top)
            out.write_text(
                json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8"
            )
            return out

        if fmt == "ndjson":
            lines = (json.dumps(asdict(r), ensure_ascii=False) for r in files)
            text = "\n".join(lines)
            out.write_text(text + ("\n" if text else ""), encoding="utf-8")
            return out

        fieldnames = ["rank", "path", "size", "extension"]
        with open(out, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            for rank, rec in enumerate(files, start=1):
                writer.writerow(
                    {
                        "rank": rank,
                        "path": rec.path,
                        "size": rec.size,
                        "extension": rec.extension,
                    }
                )
        return out
