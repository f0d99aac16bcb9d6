# Copyright Dario Mylonopoulos
# SPDX-License-Identifier: MIT

from .config import ReflectConfig
from .enums import AccessQualifier, DecorationKind, Dim, ExecutionModel, ImageFormat, StorageClass
from .errors import (
    MalformedModuleError,
    ReflectionError,
    TypeRecursionError,
    UnresolvedSizeError,
    UnsupportedFeatureError,
    UnsupportedTypeError,
)
from .glsl import GLSLArrayType, GLSLBaseType, GLSLType, format_type, to_dtype
from .ids import EntryPoint, Header
from .reflection import (
    DescriptorInfo,
    DescriptorType,
    Input,
    Output,
    Reflection,
    Uniform,
    UniformBlock,
    input_dtype,
)

__all__ = [
    "AccessQualifier",
    "DecorationKind",
    "DescriptorInfo",
    "DescriptorType",
    "Dim",
    "EntryPoint",
    "ExecutionModel",
    "GLSLArrayType",
    "GLSLBaseType",
    "GLSLType",
    "Header",
    "ImageFormat",
    "Input",
    "MalformedModuleError",
    "Output",
    "ReflectConfig",
    "Reflection",
    "ReflectionError",
    "StorageClass",
    "TypeRecursionError",
    "Uniform",
    "UniformBlock",
    "UnresolvedSizeError",
    "UnsupportedFeatureError",
    "UnsupportedTypeError",
    "format_type",
    "input_dtype",
    "to_dtype",
]
