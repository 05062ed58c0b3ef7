from __future__ import annotations

import contextlib
import os
from typing import AsyncGenerator

import anyio

from hashets.fs import FS


def join(dir_path: str, name: str) -> str:
    if dir_path in ("", "."):
        return name
    return f"{dir_path}/{name}"


def split(path: str) -> tuple[str, str]:
    """Split a slash-separated path into its directory prefix, trailing slash
    included, and its base name.
    """
    head, _, tail = path.rpartition("/")
    return (f"{head}/" if head else "", tail)


def chunk_size(file_stat: os.stat_result | None) -> int:
    blksize = 4096
    file_size = None

    if file_stat is not None:
        blksize = getattr(file_stat, "st_blksize", 0) or 4096
        file_size = file_stat.st_size

    if not file_size or file_size > 1.5 * 1024 * 1024:  # > 1.5 MiB
        # block-aligned size closest to 32MiB, a benchmark sweet-spot
        return (32 * 1024 * 1024 // blksize) * blksize
    return blksize


class FileReader:
    """Reads a file of an [`FS`][hashets.fs.FS] in chunks.

    The file is opened when iteration starts and closed when it ends, whether
    it ends normally or by an exception.
    """

    def __init__(self, filesys: FS, path: str) -> None:
        self._filesys = filesys
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    async def stat(self) -> os.stat_result:
        return await self._filesys.stat(self._path)

    async def read(self, size: int = -1) -> AsyncGenerator[bytes, None]:
        async with await self._filesys.open(self._path) as file:
            while True:
                data = await file.read(size)
                if not data:
                    break
                yield data


class TeeFileReader(FileReader):
    """A [`FileReader`][hashets._utils.FileReader] that writes every chunk it
    reads to `dest_path`, truncating it first.
    """

    def __init__(self, source: FileReader, dest_path: anyio.Path):
        super().__init__(source._filesys, source.path)
        self._destination_path = dest_path

    @property
    def destination_path(self) -> anyio.Path:
        return self._destination_path

    async def read(self, size: int = -1) -> AsyncGenerator[bytes, None]:
        async with await anyio.open_file(self._destination_path, "wb") as dest:
            async with contextlib.aclosing(super().read(size)) as chunks:
                async for data in chunks:
                    await dest.write(data)
                    yield data
