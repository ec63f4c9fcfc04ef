import os
from pathlib import Path

import pytest


@pytest.fixture
def symlink():
    """Create a symlink, skipping the test where the platform refuses."""

    def _make(link: Path, target: Path, target_is_directory: bool = False) -> Path:
        try:
            os.symlink(target, link, target_is_directory=target_is_directory)
        except (OSError, NotImplementedError) as e:
            pytest.skip(f"symlinks unavailable: {e}")
        return link

    return _make


@pytest.fixture
def write_file():
    def _write(p: Path, data: bytes) -> Path:
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(data)
        return p

    return _write
