"""Shared pytest fixtures."""

from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from hashets.fs import DirFS

ASSETS = {
    "bee movie.txt": b"According to all known laws of aviation,\n",
    "cheesy_fur.ext1.ext2": b"cheddar, gouda, brie\n",
    "foo": b"foo\n",
    "folder/maja.webp": bytes(range(256)) * 4,
}


def sha256_name(path: str, content: bytes) -> str:
    """Return the expected hashed path of `path` with the default options."""
    head, _, name = path.rpartition("/")
    stem, dot, rest = name.partition(".")
    digest = hashlib.sha256(content).hexdigest()
    hashed = f"{stem}_{digest}.{rest}" if dot else f"{stem}_{digest}"
    return f"{head}/{hashed}" if head else hashed


class FailingFS(DirFS):
    """A DirFS that fails to open one particular file."""

    def __init__(self, root, failing: str):
        super().__init__(root)
        self.failing = failing
        self.opened: list[str] = []

    async def open(self, name: str):
        self.opened.append(name)
        if name == self.failing:
            raise PermissionError(13, "Permission denied", name)
        return await super().open(name)


class TrackingFS(DirFS):
    """A DirFS that keeps every file it opens."""

    def __init__(self, root):
        super().__init__(root)
        self.files = []

    async def open(self, name: str):
        file = await super().open(name)
        self.files.append(file)
        return file


class RaisingHasher:
    def update(self, data: bytes) -> None:
        raise RuntimeError("digest failed")

    def digest(self) -> bytes:
        return b""


@pytest.fixture
def tracking_fs() -> type[TrackingFS]:
    return TrackingFS


@pytest.fixture
def raising_hasher() -> type[RaisingHasher]:
    return RaisingHasher


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def assets() -> dict[str, bytes]:
    return dict(ASSETS)


@pytest.fixture
def failing_fs() -> type[FailingFS]:
    return FailingFS


@pytest.fixture
def asset_dir(tmp_path: Path) -> Path:
    """Return a directory populated with `ASSETS`."""
    root = tmp_path / "in"
    for path, content in ASSETS.items():
        file_path = root / path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(content)
        file_path.chmod(0o644)
    return root


@pytest.fixture
def expect_map() -> dict[str, str]:
    return {path: sha256_name(path, content) for path, content in ASSETS.items()}
