# Copyright Dario Mylonopoulos
# SPDX-License-Identifier: MIT

"""Print the interface of a SPIR-V shader module."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import ReflectConfig
from .errors import ReflectionError
from .glsl import format_type
from .reflection import Reflection


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="spvreflect", description=__doc__)
    parser.add_argument("file", type=Path, help="SPIR-V module (.spv)")
    parser.add_argument(
        "--big-endian",
        action="store_true",
        help="Read the module as big endian (a byte-swapped magic number still flips the order)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def print_reflection(refl: Reflection) -> None:
    ep = refl.entry_point
    print(f"Entry point: {ep.name} ({ep.execution_model.name})")
    if ep.local_size is not None:
        print(f"    local size: {ep.local_size[0]} x {ep.local_size[1]} x {ep.local_size[2]}")

    print("Inputs")
    for i in refl.inputs:
        print(f"    {i.location:3d} | {i.name or ''}: {format_type(i.type)}")
    print("Outputs")
    for o in refl.outputs:
        print(f"    {o.location:3d} | {o.name or ''}: {format_type(o.type)}")
    print("Uniforms")
    for u in refl.uniforms:
        print(f"    ({u.binding}, {u.set}) | {u.name or ''}: {format_type(u.type)}")
    print("Uniform Blocks")
    for b in refl.uniform_blocks:
        print(f"    ({b.binding}, {b.set}) | {b.name or ''}: {b.size} bytes")


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.file.exists():
        print(f"missing input file: {args.file}", file=sys.stderr)
        return 1

    config = ReflectConfig(byteorder="big" if args.big_endian else "little")
    try:
        refl = Reflection.from_file(args.file, config)
    except ReflectionError as e:
        print(f"{args.file}: {e}", file=sys.stderr)
        return 1

    print_reflection(refl)
    return 0


if __name__ == "__main__":
    sys.exit(main())
