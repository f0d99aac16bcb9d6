# Copyright Dario Mylonopoulos
# SPDX-License-Identifier: MIT

from typing import Optional


class ReflectionError(Exception):
    pass


class MalformedModuleError(ReflectionError, ValueError):
    pass


class UnsupportedFeatureError(ReflectionError):
    pass


class UnsupportedTypeError(ReflectionError, TypeError):
    pass


class UnresolvedSizeError(ReflectionError):
    def __init__(self, block_id: int, name: Optional[str]):
        self.block_id = block_id
        self.name = name

    def __str__(self) -> str:
        return f"Uniform block {self.name or '<unnamed>'} (id {self.block_id}) references an unresolved member type"


class TypeRecursionError(ReflectionError):
    def __init__(self, max_depth: int):
        self.max_depth = max_depth

    def __str__(self) -> str:
        return f"Type graph deeper than {self.max_depth} levels (cyclic type?)"
