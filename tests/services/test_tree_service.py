# tests/services/test_tree_service.py
from pathlib import Path

import pytest

from folder_insight.adapters.filesystem.local_fs import LocalFS
from folder_insight.domain import TraversalPolicy
from folder_insight.services.tree_service import TreeService


class FSWithLockedDir(LocalFS):
    async def list_dir(self, path: str):
        if path.endswith("locked"):
            raise PermissionError("permission denied")
        return await super().list_dir(path)


@pytest.fixture
def tree_root(tmp_path: Path, write_file) -> Path:
    root = tmp_path / "proj"
    write_file(root / "b_dir" / "x.txt", b"x")
    write_file(root / "b_dir" / "deeper" / "y.txt", b"y")
    write_file(root / "a.txt", b"a")
    write_file(root / "node_modules" / "m.js", b"m")
    write_file(root / ".hidden", b"h")
    return root


@pytest.mark.asyncio
async def test_directories_first_and_filters_applied(tree_root: Path):
    lines = await TreeService(LocalFS()).render(tree_root)

    assert [line.text for line in lines] == [
        str(tree_root),
        "├── b_dir",
        "│   ├── deeper",
        "│   │   └── y.txt",
        "│   └── x.txt",
        "└── a.txt",
    ]
    assert [line.is_dir for line in lines] == [True, True, True, False, False, False]


@pytest.mark.asyncio
async def test_depth_limit(tree_root: Path):
    lines = await TreeService(LocalFS()).render(tree_root, max_depth=1)
    assert [line.text for line in lines] == [str(tree_root), "├── b_dir", "└── a.txt"]


@pytest.mark.asyncio
async def test_zero_depth_renders_only_root(tree_root: Path):
    lines = await TreeService(LocalFS()).render(tree_root, max_depth=0)
    assert [line.text for line in lines] == [str(tree_root)]


@pytest.mark.asyncio
async def test_policy_controls_ignore_and_hidden(tree_root: Path):
    policy = TraversalPolicy(ignore_names={"b_dir"}, include_hidden=True)
    lines = await TreeService(LocalFS()).render(tree_root, policy, max_depth=1)
    assert [line.text for line in lines] == [
        str(tree_root),
        "├── node_modules",
        "├── .hidden",
        "└── a.txt",
    ]


@pytest.mark.asyncio
async def test_unreadable_directory_renders_nothing_below(tmp_path: Path, write_file):
    root = tmp_path / "r"
    write_file(root / "locked" / "secret.txt", b"s")
    write_file(root / "z.txt", b"z")

    lines = await TreeService(FSWithLockedDir()).render(root)
    assert [line.text for line in lines] == [str(root), "├── locked", "└── z.txt"]


@pytest.mark.asyncio
async def test_symlinked_directory_is_a_leaf(tmp_path: Path, write_file, symlink):
    root = tmp_path / "r"
    write_file(tmp_path / "other" / "inside.txt", b"i")
    root.mkdir()
    symlink(root / "link", tmp_path / "other", target_is_directory=True)

    lines = await TreeService(LocalFS()).render(root)
    assert [line.text for line in lines] == [str(root), "└── link"]
    assert lines[1].is_dir is False
