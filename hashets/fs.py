from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

import anyio

if TYPE_CHECKING:
    from hashets.hashets import AssetMap

PathLikeArg = str | os.PathLike[str]


@dataclass(frozen=True)
class DirEntry:
    """A single entry of a directory listing.

    Attributes:
        name: Base name of the entry.
        is_dir: Whether the entry is a directory.
    """

    name: str
    is_dir: bool


class ReadableFS(ABC):
    """A read-only filesystem that can open files by name.

    Names are slash-separated paths relative to the filesystem root.
    """

    @abstractmethod
    async def open(self, name: str) -> anyio.AsyncFile[bytes]:
        """Open `name` for binary reading.

        The caller is responsible for closing the returned file, preferably
        with `async with`.
        """

    async def read_bytes(self, name: str) -> bytes:
        """Return the full contents of `name`."""
        async with await self.open(name) as file:
            return await file.read()


class FS(ReadableFS):
    """A hierarchical file store that can also be listed and stat'ed.

    `.` names the root directory.
    """

    @abstractmethod
    async def scandir(self, name: str) -> list[DirEntry]:
        """Return the entries of directory `name`, sorted by name."""

    @abstractmethod
    async def stat(self, name: str) -> os.stat_result:
        pass


class DirFS(FS):
    """An [`FS`][hashets.fs.FS] backed by a directory on the local filesystem.

    Parameters:
        root: Directory used as root of the filesystem.
    """

    def __init__(self, root: PathLikeArg):
        self._root = anyio.Path(root)

    @property
    def root(self) -> str:
        """The directory this filesystem reads from"""
        return str(self._root)

    def _path(self, name: str) -> anyio.Path:
        if name in ("", "."):
            return self._root

        parts = name.split("/")
        if name.startswith("/") or ".." in parts or "" in parts:
            raise ValueError(f"invalid path {name!r}: must be relative and clean")

        return self._root.joinpath(*parts)

    async def open(self, name: str) -> anyio.AsyncFile[bytes]:
        return await self._path(name).open("rb")

    async def read_bytes(self, name: str) -> bytes:
        return await self._path(name).read_bytes()

    async def scandir(self, name: str) -> list[DirEntry]:
        entries = [
            DirEntry(child.name, await child.is_dir())
            async for child in self._path(name).iterdir()
        ]
        return sorted(entries, key=lambda entry: entry.name)

    async def stat(self, name: str) -> os.stat_result:
        return await self._path(name).stat()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.root!r})"


class HashedFS(ReadableFS):
    """Serves the files of `filesys` under their hashed names, so that a request
    for `foo_1234.txt` returns the contents of `foo.txt`.

    Names that aren't hashed names are passed through as they are, so files that
    were ignored while hashing stay reachable by their original names.

    The reverse mapping is built once, on construction. If two original paths
    map to the same hashed path, only the last one is reachable.

    Parameters:
        filesys: The filesystem `asset_map` was built from.
        asset_map: Mapping of original to hashed paths.
    """

    def __init__(self, filesys: ReadableFS, asset_map: AssetMap):
        self._filesys = filesys
        self._reverse_map = asset_map.inverse()

    def original_name(self, name: str) -> str:
        """Return the original path for the hashed path `name`, or `name` itself
        if it isn't a hashed path.
        """
        return self._reverse_map.get(name, name)

    async def open(self, name: str) -> anyio.AsyncFile[bytes]:
        return await self._filesys.open(self.original_name(name))

    async def read_bytes(self, name: str) -> bytes:
        return await self._filesys.read_bytes(self.original_name(name))
