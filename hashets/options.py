from __future__ import annotations

import fnmatch
import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Protocol

from blake3 import blake3


class Hasher(Protocol):
    def update(self, data: bytes, /) -> object:
        ...

    def digest(self) -> bytes:
        ...


HashFactory = Callable[[], Hasher]
NamingFunc = Callable[[str, str], str]
HashToText = Callable[[bytes], str]
IgnoreFunc = Callable[[str], bool]


class HashAlgorithm(str, Enum):
    """Digest algorithms selectable by name, e.g. from the command line.

    Every member is also a [`HashFactory`][hashets.options.HashFactory]: calling
    [`new()`][hashets.options.HashAlgorithm.new] returns a fresh digest object.
    """

    SHA256 = "sha256"
    SHA512 = "sha512"
    MD5 = "md5"
    BLAKE3 = "blake3"

    def new(self) -> Hasher:
        # Ruff doesn't support match
        # https://github.com/charliermarsh/ruff/issues/282
        match self:  # noqa: E999
            case HashAlgorithm.SHA256:
                return hashlib.sha256()
            case HashAlgorithm.SHA512:
                return hashlib.sha512()
            case HashAlgorithm.MD5:
                return hashlib.md5(usedforsecurity=False)
            case HashAlgorithm.BLAKE3:
                return blake3(max_threads=blake3.AUTO)

    @classmethod
    def parse(cls, name: str) -> HashAlgorithm:
        """Return the algorithm called `name`.

        Raises:
            ValueError: If `name` is not one of the supported algorithms.
        """
        try:
            return cls(name.lower())
        except ValueError:
            choices = ", ".join(member.value for member in cls)
            raise ValueError(
                f"invalid hashing algorithm: {name} (choose from {choices})"
            ) from None


def default_naming_func(name: str, hash_text: str) -> str:
    """Generate names like `foo_1234.txt` for a file `foo.txt` with the hash
    `1234`.

    The name is split at its *first* dot, so `archive.tar.gz` becomes
    `archive_1234.tar.gz`. Names without a dot get the hash appended.
    """
    stem, dot, rest = name.partition(".")
    if dot:
        return f"{stem}_{hash_text}.{rest}"
    return f"{stem}_{hash_text}"


def hex_encode(digest: bytes) -> str:
    return digest.hex()


def ignore_nothing(path: str) -> bool:
    return False


def ignore_prefix(*prefixes: str) -> IgnoreFunc:
    """Return an ignore function that ignores all paths starting with one of
    `prefixes`.
    """

    def ignore(path: str) -> bool:
        return any(path.startswith(prefix) for prefix in prefixes)

    return ignore


def _globstar_variants(pattern: str) -> set[str]:
    """Return `pattern` plus every variant with `**` segments matching zero
    directories.
    """
    variants = {pattern}
    pending = [pattern]
    while pending:
        current = pending.pop()
        alternatives = []
        if current.startswith("**/"):
            alternatives.append(current[3:])
        if current.endswith("/**"):
            alternatives.append(current[:-3])

        index = current.find("/**/")
        while index != -1:
            alternatives.append(current[:index] + current[index + 3 :])
            index = current.find("/**/", index + 1)

        for alternative in alternatives:
            if alternative and alternative not in variants:
                variants.add(alternative)
                pending.append(alternative)

    return variants


def _expand_globstars(patterns: Iterable[str]) -> tuple[str, ...]:
    expanded: list[str] = []
    for pattern in patterns:
        expanded.extend(sorted(_globstar_variants(pattern)))
    return tuple(expanded)


def ignore_globs(
    ignore: Iterable[str] = (), include: Iterable[str] = ()
) -> IgnoreFunc:
    """Return an ignore function built from glob patterns.

    A path is ignored if it matches any pattern in `ignore`, or if `include` is
    non-empty and the path matches none of its patterns. Patterns follow
    `fnmatch` rules, where `*` also matches `/`. A `**` path segment also
    matches zero directories, so `**/*.map` matches `app.js.map` and
    `js/app.js.map`.

    Note that directories are checked too: an `include` list that doesn't
    match a directory prunes everything below it.
    """
    ignore_patterns = _expand_globstars(ignore)
    include_patterns = _expand_globstars(include)

    def ignore_func(path: str) -> bool:
        if any(fnmatch.fnmatchcase(path, pattern) for pattern in ignore_patterns):
            return True

        if not include_patterns:
            return False

        return not any(
            fnmatch.fnmatchcase(path, pattern) for pattern in include_patterns
        )

    return ignore_func


@dataclass(frozen=True)
class Options:
    """Configuration for hashing.

    Attributes:
        hash: The digest algorithm. Either a
            [`HashAlgorithm`][hashets.options.HashAlgorithm] or any callable
            returning a new object with `update()` and `digest()`, such as
            `hashlib.sha256`. A fresh digest object is created for every file.
            Defaults to SHA-256.
        naming_func: Called with the original file name (not path) and the hash
            text of each file; returns the hashed file name. Defaults to
            [`default_naming_func`][hashets.options.default_naming_func].
        hash_to_text: Converts the raw digest to text. Defaults to lowercase hex.
        ignore: Called for each relative path, directories included. If it
            returns `True` the file is not hashed, or the directory and
            everything below it is skipped. Defaults to ignoring nothing.
    """

    hash: HashAlgorithm | HashFactory = HashAlgorithm.SHA256
    naming_func: NamingFunc = default_naming_func
    hash_to_text: HashToText = hex_encode
    ignore: IgnoreFunc = ignore_nothing

    def new_hasher(self) -> Hasher:
        if isinstance(self.hash, HashAlgorithm):
            return self.hash.new()
        return self.hash()
