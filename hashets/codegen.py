# -*- coding: utf-8 -*-

import keyword

import anyio

from hashets.fs import PathLikeArg
from hashets.hashets import AssetMap

MAP_MODULE_NAME = "hashets_map.py"
DEFAULT_VAR_NAME = "FILE_NAMES"

GENERATED_HEADER = "# Code generated by hashets. DO NOT EDIT."


def check_var_name(var_name: str) -> None:
    if not var_name.isidentifier() or keyword.iskeyword(var_name):
        raise ValueError(f"{var_name!r} is not a valid Python identifier")


def render_map_module(asset_map: AssetMap, var_name: str = DEFAULT_VAR_NAME) -> str:
    """Return the source of a Python module declaring `var_name` as an
    `AssetMap` holding the entries of `asset_map`, sorted by original path so
    that identical inputs produce identical output.
    """
    check_var_name(var_name)

    lines = [
        GENERATED_HEADER,
        "",
        "from hashets import AssetMap",
        "",
        f"{var_name} = AssetMap(",
        "    {",
    ]
    for original in sorted(asset_map):
        lines.append(f"        {original!r}: {asset_map[original]!r},")
    lines += ["    }", ")", ""]

    return "\n".join(lines)


async def write_map_module(
    out_path: PathLikeArg, asset_map: AssetMap, var_name: str = DEFAULT_VAR_NAME
) -> anyio.Path:
    """Write the module rendered by
    [`render_map_module()`][hashets.codegen.render_map_module] to
    `out_path/hashets_map.py` and return its path.
    """
    module_path = anyio.Path(out_path).joinpath(MAP_MODULE_NAME)
    await module_path.write_text(
        render_map_module(asset_map, var_name), encoding="utf-8"
    )
    return module_path
