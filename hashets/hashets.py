from __future__ import annotations

import contextlib
import logging
import os
import shutil
import tempfile
from collections.abc import Iterator, Mapping
from typing import AsyncGenerator, AsyncIterator, Callable
from uuid import uuid4

import anyio

from hashets.fs import FS, DirFS, HashedFS, PathLikeArg
from hashets.options import Hasher, Options

from ._utils import FileReader, TeeFileReader, chunk_size, join, split

logger = logging.getLogger(__name__)

# Read and execute bits only; hashed copies are never writable.
HASHED_FILE_MODE_MASK = 0o555
HASHED_DIR_MODE = 0o755


class AssetMap(Mapping[str, str]):
    """Maps original file paths to the same paths with the file name replaced by
    the hashed file name.

    For example, for a file `foo.txt` with the hash `1234`, `asset_map["foo.txt"]`
    is `"foo_1234.txt"`.

    An `AssetMap` created without entries (`AssetMap()`) is *unconfigured*:
    [`get()`][hashets.hashets.AssetMap.get] then returns every path unchanged.
    That is useful when files are hashed in production but left unhashed in
    development. `AssetMap({})` on the other hand is a configured map that
    happens to be empty.

    Iteration is in sorted key order.

    Parameters:
        entries: Original path to hashed path entries, or `None` for an
            unconfigured map.
    """

    def __init__(self, entries: Mapping[str, str] | None = None):
        self._entries: dict[str, str] | None = None
        if entries is not None:
            self._entries = dict(sorted(entries.items()))

    @property
    def is_configured(self) -> bool:
        """`False` if this map was created without entries"""
        return self._entries is not None

    def get(self, key: str, default: str = "") -> str:  # type: ignore[override]
        """Return the hashed path for the original path `key`.

        If the map is unconfigured, `key` is returned as is. Otherwise, unknown
        paths return `default`.
        """
        if self._entries is None:
            return key
        return self._entries.get(key, default)

    def inverse(self) -> dict[str, str]:
        """Return a new dict mapping hashed paths back to original paths."""
        return {hashed: original for original, hashed in self.items()}

    def __getitem__(self, key: str) -> str:
        if self._entries is None:
            raise KeyError(key)
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries or {})

    def __len__(self) -> int:
        return len(self._entries or {})

    def __eq__(self, other: object) -> bool:
        if isinstance(other, AssetMap):
            return self._entries == other._entries
        return super().__eq__(other)

    def __repr__(self) -> str:
        if self._entries is None:
            return f"{type(self).__name__}()"
        return f"{type(self).__name__}({self._entries!r})"


async def compute_digest(reader: FileReader, hasher: Hasher) -> bytes:
    """Stream all bytes of `reader` through `hasher` and return the raw digest.

    Parameters:
        reader: File to digest
        hasher: A *fresh* digest object
    """
    file_stat = None
    try:
        file_stat = await reader.stat()
    except OSError:
        # if stat fails we just try to move on with file access
        # using the default values for block, file size
        pass

    async with contextlib.aclosing(reader.read(chunk_size(file_stat))) as chunks:
        async for data in chunks:
            hasher.update(data)

    return hasher.digest()


def hashed_path(path: str, digest: bytes, options: Options) -> str:
    """Return `path` with its file name replaced by the hashed file name."""
    dir_prefix, name = split(path)
    return dir_prefix + options.naming_func(name, options.hash_to_text(digest))


async def walk(
    filesys: FS, ignore: Callable[[str], bool]
) -> AsyncGenerator[tuple[str, bool], None]:
    """Walk `filesys` depth-first, in sorted order, yielding `(path, is_dir)`
    for every entry that isn't ignored.

    A directory is yielded before its contents. Ignored directories are not
    descended into. The root itself is never passed to `ignore` nor yielded.
    """
    for entry in await filesys.scandir("."):
        async for item in _walk_entry(filesys, ignore, ".", entry.name, entry.is_dir):
            yield item


async def _walk_entry(
    filesys: FS,
    ignore: Callable[[str], bool],
    dir_path: str,
    name: str,
    is_dir: bool,
) -> AsyncGenerator[tuple[str, bool], None]:
    path = join(dir_path, name).removeprefix("./")
    if ignore(path):
        return

    yield path, is_dir

    if is_dir:
        for entry in await filesys.scandir(path):
            async for item in _walk_entry(
                filesys, ignore, path, entry.name, entry.is_dir
            ):
                yield item


async def hash_fs(filesys: FS, options: Options | None = None) -> AssetMap:
    """Hash all files in `filesys` and return an
    [`AssetMap`][hashets.hashets.AssetMap] of their hashed paths.

    Nothing is written anywhere. Any error reading a file aborts the whole
    operation.

    Parameters:
        filesys: Files to hash.
        options: Hashing options. Defaults to `Options()`.
    """
    options = options or Options()

    entries: dict[str, str] = {}
    async with contextlib.aclosing(walk(filesys, options.ignore)) as entries_walk:
        async for path, is_dir in entries_walk:
            if is_dir:
                continue

            digest = await compute_digest(
                FileReader(filesys, path), options.new_hasher()
            )
            entries[path] = hashed_path(path, digest, options)
            logger.debug("hashed %s -> %s", path, entries[path])

    return AssetMap(entries)


async def hash_to_dir(
    filesys: FS, out_path: PathLikeArg, options: Options | None = None
) -> AssetMap:
    """Hash all files in `filesys` and write copies under their hashed names to
    `out_path`, mirroring the directory structure.

    It is explicitly allowed for `out_path` to be the directory `filesys`
    reads from. Source files are never modified.

    Copies get the source file's read and execute permission bits, and no
    write bits. Existing files at a hashed path are replaced.

    The first error aborts the operation. Files written up to that point are
    left in place.

    Parameters:
        filesys: Files to hash.
        out_path: Directory to write the hashed copies to. Created if missing.
        options: Hashing options. Defaults to `Options()`.

    Returns:
        AssetMap: Original path to hashed path for every copied file.
    """
    options = options or Options()
    out_root = anyio.Path(out_path)
    await out_root.mkdir(mode=HASHED_DIR_MODE, parents=True, exist_ok=True)

    entries: dict[str, str] = {}
    async with contextlib.aclosing(walk(filesys, options.ignore)) as entries_walk:
        async for path, is_dir in entries_walk:
            if is_dir:
                await out_root.joinpath(path).mkdir(
                    mode=HASHED_DIR_MODE, exist_ok=True
                )
                logger.debug("created directory %s", path)
                continue

            entries[path] = await _write_hashed(filesys, path, out_root, options)
            logger.debug("hashed %s -> %s", path, entries[path])

    return AssetMap(entries)


async def _write_hashed(
    filesys: FS, path: str, out_root: anyio.Path, options: Options
) -> str:
    """Copy `path` to a scratch file next to its destination while hashing it,
    then move the scratch file to the hashed path.
    """
    dir_prefix, name = split(path)
    scratch_path = out_root.joinpath(dir_prefix, f".{uuid4().hex}_{name}")

    try:
        reader = TeeFileReader(FileReader(filesys, path), dest_path=scratch_path)
        digest = await compute_digest(reader, options.new_hasher())
        new_path = hashed_path(path, digest, options)

        file_stat = await filesys.stat(path)
        os.chmod(scratch_path, file_stat.st_mode & HASHED_FILE_MODE_MASK)
        os.replace(scratch_path, out_root.joinpath(new_path))
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(scratch_path)
        raise

    return new_path


@contextlib.asynccontextmanager
async def hashed_temp_dir(
    filesys: FS, options: Options | None = None
) -> AsyncIterator[tuple[DirFS, AssetMap]]:
    """Hash all files in `filesys` into a new temporary directory.

    Yields a [`DirFS`][hashets.fs.DirFS] of the temporary directory together
    with the [`AssetMap`][hashets.hashets.AssetMap]. The directory is removed
    on exit, or immediately if hashing fails.

    Example:
        ```python
        async with hashed_temp_dir(DirFS("static")) as (hashed, asset_map):
            ...
        ```
    """
    temp_path = tempfile.mkdtemp(prefix="hashets")
    try:
        asset_map = await hash_to_dir(filesys, temp_path, options)
        yield DirFS(temp_path), asset_map
    finally:
        shutil.rmtree(temp_path)


async def wrap_fs(
    filesys: FS, options: Options | None = None
) -> tuple[HashedFS, AssetMap]:
    """Hash the files of `filesys` and return a
    [`HashedFS`][hashets.fs.HashedFS] that serves each file under its hashed
    name, along with the [`AssetMap`][hashets.hashets.AssetMap].

    Ignored files are left unhashed and stay reachable by their original names.
    """
    asset_map = await hash_fs(filesys, options)
    return HashedFS(filesys, asset_map), asset_map
