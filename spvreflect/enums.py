# Copyright Dario Mylonopoulos
# SPDX-License-Identifier: MIT

import logging
from enum import Enum
from typing import Dict, Type, TypeVar

from .errors import UnsupportedFeatureError

logger = logging.getLogger(__name__)


class ExecutionModel(Enum):
    VERTEX = 0
    TESSELLATION_CONTROL = 1
    TESSELLATION_EVALUATION = 2
    GEOMETRY = 3
    FRAGMENT = 4
    COMPUTE = 5
    UNKNOWN = -1


class StorageClass(Enum):
    UNIFORM_CONSTANT = 0
    INPUT = 1
    UNIFORM = 2
    OUTPUT = 3
    WORKGROUP = 4
    CROSS_WORKGROUP = 5
    PRIVATE = 6
    FUNCTION = 7
    GENERIC = 8
    PUSH_CONSTANT = 9
    ATOMIC_COUNTER = 10
    IMAGE = 11
    STORAGE_BUFFER = 12
    UNKNOWN = -1


class DecorationKind(Enum):
    RELAXED_PRECISION = 0
    SPEC_ID = 1
    BLOCK = 2
    BUFFER_BLOCK = 3
    ROW_MAJOR = 4
    COL_MAJOR = 5
    ARRAY_STRIDE = 6
    MATRIX_STRIDE = 7
    GLSL_SHARED = 8
    GLSL_PACKED = 9
    C_PACKED = 10
    BUILTIN = 11
    NO_PERSPECTIVE = 13
    FLAT = 14
    PATCH = 15
    CENTROID = 16
    SAMPLE = 17
    INVARIANT = 18
    RESTRICT = 19
    ALIASED = 20
    VOLATILE = 21
    CONSTANT = 22
    COHERENT = 23
    NON_WRITABLE = 24
    NON_READABLE = 25
    UNIFORM = 26
    STREAM = 29
    LOCATION = 30
    COMPONENT = 31
    INDEX = 32
    BINDING = 33
    DESCRIPTOR_SET = 34
    OFFSET = 35
    XFB_BUFFER = 36
    XFB_STRIDE = 37
    NO_CONTRACTION = 42
    INPUT_ATTACHMENT_INDEX = 43
    ALIGNMENT = 44
    UNKNOWN = -1


class Dim(Enum):
    DIM_1D = 0
    DIM_2D = 1
    DIM_3D = 2
    CUBE = 3
    RECT = 4
    BUFFER = 5
    SUBPASS_DATA = 6


class ImageFormat(Enum):
    UNKNOWN = 0
    RGBA32F = 1
    RGBA16F = 2
    R32F = 3
    RGBA8 = 4
    RGBA8_SNORM = 5
    RG32F = 6
    RG16F = 7
    R11F_G11F_B10F = 8
    R16F = 9
    RGBA16 = 10
    RGB10_A2 = 11
    RG16 = 12
    RG8 = 13
    R16 = 14
    R8 = 15
    RGBA16_SNORM = 16
    RG16_SNORM = 17
    RG8_SNORM = 18
    R16_SNORM = 19
    R8_SNORM = 20
    RGBA32I = 21
    RGBA16I = 22
    RGBA8I = 23
    R32I = 24
    RG32I = 25
    RG16I = 26
    RG8I = 27
    R16I = 28
    R8I = 29
    RGBA32UI = 30
    RGBA16UI = 31
    RGBA8UI = 32
    R32UI = 33
    RGB10A2UI = 34
    RG32UI = 35
    RG16UI = 36
    RG8UI = 37
    R16UI = 38
    R8UI = 39
    R64UI = 40
    R64I = 41


class AccessQualifier(Enum):
    READ_ONLY = 0
    WRITE_ONLY = 1
    READ_WRITE = 2


E = TypeVar("E", bound=Enum)


def _table(cls: Type[E]) -> Dict[int, E]:
    return {m.value: m for m in cls if m.value >= 0}


_execution_models = _table(ExecutionModel)
_storage_classes = _table(StorageClass)
_decoration_kinds = _table(DecorationKind)
_dims = _table(Dim)
_image_formats = _table(ImageFormat)
_access_qualifiers = _table(AccessQualifier)


# Soft enums: values outside the table decode to UNKNOWN.


def decode_execution_model(value: int) -> ExecutionModel:
    model = _execution_models.get(value)
    if model is None:
        logger.debug("Unknown execution model %d", value)
        return ExecutionModel.UNKNOWN
    return model


def decode_storage_class(value: int) -> StorageClass:
    storage_class = _storage_classes.get(value)
    if storage_class is None:
        logger.debug("Unknown storage class %d", value)
        return StorageClass.UNKNOWN
    return storage_class


def decode_decoration_kind(value: int) -> DecorationKind:
    kind = _decoration_kinds.get(value)
    if kind is None:
        logger.debug("Unknown decoration %d", value)
        return DecorationKind.UNKNOWN
    return kind


# Hard enums: values outside the table are fatal.


def decode_dim(value: int) -> Dim:
    try:
        return _dims[value]
    except KeyError:
        raise UnsupportedFeatureError(f"Unsupported image dimensionality: {value}") from None


def decode_image_format(value: int) -> ImageFormat:
    try:
        return _image_formats[value]
    except KeyError:
        raise UnsupportedFeatureError(f"Unsupported image format: {value}") from None


def decode_access_qualifier(value: int) -> AccessQualifier:
    try:
        return _access_qualifiers[value]
    except KeyError:
        raise UnsupportedFeatureError(f"Unsupported access qualifier: {value}") from None
