"""Command line interface.

Hashes all files in DIR and writes copies with hashed names to the output
directory, together with a `hashets_map.py` module declaring an `AssetMap` of
original to hashed file names.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Sequence

import anyio

from hashets.__meta__ import __url__, __version__
from hashets.codegen import (
    DEFAULT_VAR_NAME,
    MAP_MODULE_NAME,
    check_var_name,
    write_map_module,
)
from hashets.fs import DirFS
from hashets.hashets import AssetMap, hash_to_dir
from hashets.options import HashAlgorithm, IgnoreFunc, Options, ignore_globs

logger = logging.getLogger("hashets")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hashets",
        description=(
            "Generate hashes for all files in DIR, and create a clone of DIR's "
            "contents in -o with the file names including the hashes. "
            f"Additionally, places a file named {MAP_MODULE_NAME} in -o that "
            "declares a single AssetMap mapping the original file names to the "
            "hashed file names."
        ),
        epilog=__url__,
    )
    parser.add_argument("dir", metavar="DIR", help="directory to hash")
    parser.add_argument(
        "--hash",
        default=HashAlgorithm.SHA256.value,
        choices=[algorithm.value for algorithm in HashAlgorithm],
        help="hashing algorithm to use (default: %(default)s)",
    )
    parser.add_argument(
        "--ignore",
        action="append",
        default=[],
        metavar="GLOB",
        help="ignore paths that match the glob; supports ** globs",
    )
    parser.add_argument(
        "--include",
        action="append",
        default=[],
        metavar="GLOB",
        help=(
            "include only paths that match the glob; if both --include and "
            "--ignore are set, a file must be included and not ignored to be "
            "hashed; supports ** globs"
        ),
    )
    parser.add_argument(
        "--replace",
        action="store_true",
        help="delete the original files after hashing",
    )
    parser.add_argument(
        "-o",
        dest="out",
        metavar="OUT",
        help="output directory (default: DIR)",
    )
    parser.add_argument(
        "--var",
        default=DEFAULT_VAR_NAME,
        help=f"name of the variable in {MAP_MODULE_NAME} (default: %(default)s)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="log more, repeat for debug output",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG

    logging.basicConfig(
        stream=sys.stderr, level=level, format="%(levelname)s %(name)s: %(message)s"
    )


def build_ignore(
    ignore: Sequence[str], include: Sequence[str], out_dir: str | None = None
) -> IgnoreFunc:
    """Return the ignore function for the given glob patterns. The generated map
    module is always ignored, and so is `out_dir`, the output directory relative
    to DIR, when it lies inside DIR.
    """
    globs = ignore_globs(ignore, include)

    def ignore_func(path: str) -> bool:
        if out_dir and (path == out_dir or path.startswith(f"{out_dir}/")):
            return True
        return path == MAP_MODULE_NAME or globs(path)

    return ignore_func


def nested_out_dir(in_path: str, out_path: str) -> str | None:
    """Return `out_path` relative to `in_path` as a slash-separated path if it
    lies strictly inside `in_path`.
    """
    in_abs = os.path.abspath(in_path)
    out_abs = os.path.abspath(out_path)
    if out_abs == in_abs or os.path.commonpath([in_abs, out_abs]) != in_abs:
        return None
    return os.path.relpath(out_abs, in_abs).replace(os.sep, "/")


async def run(
    in_path: str,
    out_path: str,
    options: Options,
    replace: bool = False,
    var_name: str = DEFAULT_VAR_NAME,
) -> AssetMap:
    """Hash `in_path` into `out_path`, optionally delete the originals, and
    write the map module.
    """
    asset_map = await hash_to_dir(DirFS(in_path), out_path, options)

    if replace:
        out_root = anyio.Path(out_path)
        for original in asset_map:
            await out_root.joinpath(original).unlink()
            logger.debug("removed original %s", original)

    module_path = await write_map_module(out_path, asset_map, var_name)
    logger.info("hashed %d files, wrote %s", len(asset_map), module_path)
    return asset_map


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    in_path = os.path.normpath(args.dir)
    out_path = os.path.normpath(args.out) if args.out else in_path

    if args.replace and os.path.abspath(out_path) != os.path.abspath(in_path):
        parser.error("--replace can only be used when hashing DIR in place")

    try:
        check_var_name(args.var)
    except ValueError as exc:
        parser.error(f"--var: {exc}")

    if not os.path.isdir(in_path):
        parser.error(f"{in_path} is not a directory")

    options = Options(
        hash=HashAlgorithm.parse(args.hash),
        ignore=build_ignore(
            args.ignore, args.include, nested_out_dir(in_path, out_path)
        ),
    )

    try:
        anyio.run(run, in_path, out_path, options, args.replace, args.var)
    except OSError as exc:
        logger.error("failed to hash files: %s", exc)
        return 1

    return 0
