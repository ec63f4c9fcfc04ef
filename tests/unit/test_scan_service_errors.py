import os
import stat as stat_mod
from pathlib import Path

import pytest

from folder_insight.adapters.filesystem.local_fs import LocalFS
from folder_insight.domain import ScanRootError, SkipReason, TraversalPolicy
from folder_insight.services.scan_service import ScanService


class FSWithFailures(LocalFS):
    """Real local FS that fails on demand for chosen basenames."""

    def __init__(self, unlistable=(), bad_lstat=(), bad_realpath=()):
        self.unlistable = set(unlistable)
        self.bad_lstat = set(bad_lstat)
        self.bad_realpath = set(bad_realpath)

    async def list_dir(self, path: str):
        if os.path.basename(path) in self.unlistable:
            raise PermissionError("permission denied")
        return await super().list_dir(path)

    async def lstat(self, path: str):
        if os.path.basename(path) in self.bad_lstat:
            # simulate an entry vanishing between listing and stat
            raise FileNotFoundError(path)
        return await super().lstat(path)

    async def realpath(self, path: str):
        if os.path.basename(path) in self.bad_realpath:
            raise PermissionError("permission denied")
        return await super().realpath(path)


class FSWithFifo(LocalFS):
    """Reports one entry as a FIFO without needing mkfifo support."""

    async def lstat(self, path: str):
        st = await super().lstat(path)
        if os.path.basename(path) == "pipe":
            fields = list(st)
            fields[0] = stat_mod.S_IFIFO | 0o644
            return os.stat_result(fields)
        return st


def _names(records):
    return sorted(os.path.basename(r.path) for r in records)


@pytest.mark.asyncio
async def test_unreadable_directory_is_treated_as_empty(tmp_path: Path):
    (tmp_path / "ok.txt").write_text("hello")
    locked = tmp_path / "locked"
    locked.mkdir()
    (locked / "secret.txt").write_text("secret")

    svc = ScanService(FSWithFailures(unlistable={"locked"}))
    outcome = await svc.scan_detailed(tmp_path)

    assert _names(outcome.records) == ["ok.txt"]
    assert outcome.skipped[SkipReason.UNREADABLE_DIR] == 1


@pytest.mark.asyncio
async def test_failed_lstat_skips_only_that_entry(tmp_path: Path):
    (tmp_path / "ok.txt").write_text("hello")
    (tmp_path / "bad.txt").write_text("gone")

    svc = ScanService(FSWithFailures(bad_lstat={"bad.txt"}))
    outcome = await svc.scan_detailed(tmp_path)

    assert _names(outcome.records) == ["ok.txt"]
    assert outcome.skipped[SkipReason.STAT_FAILED] == 1


@pytest.mark.asyncio
async def test_unresolvable_symlink_is_skipped(tmp_path: Path, symlink):
    target = tmp_path / "real.txt"
    target.write_text("x")
    symlink(tmp_path / "link.txt", target)

    svc = ScanService(FSWithFailures(bad_realpath={"link.txt"}))
    outcome = await svc.scan_detailed(tmp_path, TraversalPolicy(follow_symlinks=True))

    assert _names(outcome.records) == ["real.txt"]
    assert outcome.skipped[SkipReason.BROKEN_SYMLINK] == 1


@pytest.mark.asyncio
async def test_other_entry_types_are_ignored(tmp_path: Path):
    (tmp_path / "pipe").write_text("")
    (tmp_path / "ok.txt").write_text("x")

    outcome = await ScanService(FSWithFifo()).scan_detailed(tmp_path)

    assert _names(outcome.records) == ["ok.txt"]
    assert outcome.skipped[SkipReason.UNSUPPORTED_TYPE] == 1


@pytest.mark.asyncio
async def test_missing_root_raises(tmp_path: Path):
    with pytest.raises(ScanRootError) as excinfo:
        await ScanService(LocalFS()).scan(tmp_path / "nope")
    assert "Unable to access" in str(excinfo.value)


@pytest.mark.asyncio
async def test_file_root_raises(tmp_path: Path):
    f = tmp_path / "file.txt"
    f.write_text("x")
    with pytest.raises(ScanRootError) as excinfo:
        await ScanService(LocalFS()).scan(f)
    assert "Not a directory" in str(excinfo.value)


@pytest.mark.asyncio
async def test_unlistable_root_is_empty_not_fatal(tmp_path: Path):
    root = tmp_path / "root"
    root.mkdir()
    (root / "a.txt").write_text("x")

    svc = ScanService(FSWithFailures(unlistable={"root"}))
    assert await svc.scan(root) == []
