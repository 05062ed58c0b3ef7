# -*- coding: utf-8 -*-
"""hashets provides hash-based cache busting for directories of static assets.

Every file gets a copy whose name embeds a hash of its content, e.g.
`foo_1234.txt` for `foo.txt`. An [`AssetMap`][hashets.hashets.AssetMap] maps
the original paths to the hashed ones, and a
[`HashedFS`][hashets.fs.HashedFS] serves the original files under their
hashed names without writing anything to disk.

Typical use cases:

- Serving static files with far-future cache headers.
- Hashing in production while leaving files unhashed in development.
"""

from .fs import FS, DirEntry, DirFS, HashedFS, ReadableFS
from .hashets import (
    AssetMap,
    compute_digest,
    hash_fs,
    hash_to_dir,
    hashed_temp_dir,
    walk,
    wrap_fs,
)
from .options import (
    HashAlgorithm,
    Options,
    default_naming_func,
    ignore_globs,
    ignore_prefix,
)

__all__ = (
    "AssetMap",
    "DirEntry",
    "DirFS",
    "FS",
    "HashAlgorithm",
    "HashedFS",
    "Options",
    "ReadableFS",
    "compute_digest",
    "default_naming_func",
    "hash_fs",
    "hash_to_dir",
    "hashed_temp_dir",
    "ignore_globs",
    "ignore_prefix",
    "walk",
    "wrap_fs",
)
