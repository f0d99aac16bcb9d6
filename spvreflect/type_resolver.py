# Copyright Dario Mylonopoulos
# SPDX-License-Identifier: MIT

"""Size inference and shader type mapping over a decoded id table.

Both walks are read only and recurse through type ids. Neither is memoized,
the depth of the walk is capped so that a cyclic type graph fails cleanly.
"""

from typing import Dict, Tuple

import numpy as np

from .enums import Dim
from .errors import TypeRecursionError, UnsupportedTypeError
from .glsl import GLSLArrayType, GLSLBaseType, GLSLType
from .ids import (
    IdTable,
    Type,
    TypeArray,
    TypeBool,
    TypeFloat,
    TypeImage,
    TypeInt,
    TypeMatrix,
    TypePointer,
    TypeSampledImage,
    TypeSampler,
    TypeStruct,
    TypeVector,
)

UNRESOLVED_SIZE = -1

DEFAULT_MAX_DEPTH = 64

# 3 component vectors occupy a full 4 component slot.
_vector_sizes = {2: 8, 3: 16, 4: 16}

# Columns are always padded to 4 rows.
_matrix_sizes = {2: 32, 3: 48, 4: 64}

# (dim, arrayed, multisampled)
_image_types: Dict[Tuple[Dim, bool, bool], GLSLBaseType] = {
    (Dim.DIM_1D, False, False): GLSLBaseType.IMAGE_1D,
    (Dim.DIM_1D, True, False): GLSLBaseType.IMAGE_1D_ARRAY,
    (Dim.DIM_2D, False, False): GLSLBaseType.IMAGE_2D,
    (Dim.DIM_2D, True, False): GLSLBaseType.IMAGE_2D_ARRAY,
    (Dim.DIM_2D, False, True): GLSLBaseType.IMAGE_2D_MS,
    (Dim.DIM_2D, True, True): GLSLBaseType.IMAGE_2D_MS_ARRAY,
    (Dim.DIM_3D, False, False): GLSLBaseType.IMAGE_3D,
    (Dim.CUBE, False, False): GLSLBaseType.IMAGE_CUBE,
    (Dim.CUBE, True, False): GLSLBaseType.IMAGE_CUBE_ARRAY,
    (Dim.RECT, False, False): GLSLBaseType.IMAGE_2D_RECT,
    (Dim.BUFFER, False, False): GLSLBaseType.IMAGE_BUFFER,
}

# (dim, depth, arrayed, multisampled)
_sampler_types: Dict[Tuple[Dim, bool, bool, bool], GLSLBaseType] = {
    (Dim.DIM_1D, False, False, False): GLSLBaseType.SAMPLER_1D,
    (Dim.DIM_1D, True, False, False): GLSLBaseType.SAMPLER_1D_SHADOW,
    (Dim.DIM_1D, False, True, False): GLSLBaseType.SAMPLER_1D_ARRAY,
    (Dim.DIM_1D, True, True, False): GLSLBaseType.SAMPLER_1D_ARRAY_SHADOW,
    (Dim.DIM_2D, False, False, False): GLSLBaseType.SAMPLER_2D,
    (Dim.DIM_2D, True, False, False): GLSLBaseType.SAMPLER_2D_SHADOW,
    (Dim.DIM_2D, False, True, False): GLSLBaseType.SAMPLER_2D_ARRAY,
    (Dim.DIM_2D, True, True, False): GLSLBaseType.SAMPLER_2D_ARRAY_SHADOW,
    (Dim.DIM_2D, False, False, True): GLSLBaseType.SAMPLER_2D_MS,
    (Dim.DIM_2D, False, True, True): GLSLBaseType.SAMPLER_2D_MS_ARRAY,
    (Dim.DIM_3D, False, False, False): GLSLBaseType.SAMPLER_3D,
    (Dim.CUBE, False, False, False): GLSLBaseType.SAMPLER_CUBE,
    (Dim.CUBE, True, False, False): GLSLBaseType.SAMPLER_CUBE_SHADOW,
    (Dim.CUBE, False, True, False): GLSLBaseType.SAMPLER_CUBE_ARRAY,
    (Dim.CUBE, True, True, False): GLSLBaseType.SAMPLER_CUBE_ARRAY_SHADOW,
    (Dim.RECT, False, False, False): GLSLBaseType.SAMPLER_2D_RECT,
    (Dim.RECT, True, False, False): GLSLBaseType.SAMPLER_2D_RECT_SHADOW,
    (Dim.BUFFER, False, False, False): GLSLBaseType.SAMPLER_BUFFER,
}

_float_dtypes: Dict[int, np.dtype] = {
    16: np.dtype(np.float16),
    32: np.dtype(np.float32),
    64: np.dtype(np.float64),
}

# (scalar category, component count)
_vector_types: Dict[Tuple[GLSLBaseType, int], GLSLBaseType] = {
    (GLSLBaseType.BOOL, 2): GLSLBaseType.BVEC2,
    (GLSLBaseType.BOOL, 3): GLSLBaseType.BVEC3,
    (GLSLBaseType.BOOL, 4): GLSLBaseType.BVEC4,
    (GLSLBaseType.INT, 2): GLSLBaseType.IVEC2,
    (GLSLBaseType.INT, 3): GLSLBaseType.IVEC3,
    (GLSLBaseType.INT, 4): GLSLBaseType.IVEC4,
    (GLSLBaseType.UINT, 2): GLSLBaseType.UVEC2,
    (GLSLBaseType.UINT, 3): GLSLBaseType.UVEC3,
    (GLSLBaseType.UINT, 4): GLSLBaseType.UVEC4,
    (GLSLBaseType.FLOAT, 2): GLSLBaseType.VEC2,
    (GLSLBaseType.FLOAT, 3): GLSLBaseType.VEC3,
    (GLSLBaseType.FLOAT, 4): GLSLBaseType.VEC4,
    (GLSLBaseType.DOUBLE, 2): GLSLBaseType.DVEC2,
    (GLSLBaseType.DOUBLE, 3): GLSLBaseType.DVEC3,
    (GLSLBaseType.DOUBLE, 4): GLSLBaseType.DVEC4,
}


def _check_depth(depth: int, max_depth: int) -> None:
    if depth > max_depth:
        raise TypeRecursionError(max_depth)


def array_length(typ: TypeArray, ids: IdTable) -> int:
    return ids.constant_of(typ.length_id).values[0]


def size_of(typ: Type, ids: IdTable, max_depth: int = DEFAULT_MAX_DEPTH, _depth: int = 0) -> int:
    """Aggregate byte size of a type.

    Returns UNRESOLVED_SIZE if a struct anywhere below refers to a member id
    that has no type. Callers must check for it.
    """
    _check_depth(_depth, max_depth)

    if isinstance(typ, TypeArray):
        element_size = size_of(ids.type_of(typ.element_type_id), ids, max_depth, _depth + 1)
        if element_size == UNRESOLVED_SIZE:
            return UNRESOLVED_SIZE
        return array_length(typ, ids) * element_size
    elif isinstance(typ, TypePointer):
        return size_of(ids.type_of(typ.type_id), ids, max_depth, _depth + 1)
    elif isinstance(typ, TypeStruct):
        if any(ids[m].type is None for m in typ.member_type_ids):
            return UNRESOLVED_SIZE
        total = 0
        for m in typ.member_type_ids:
            member_size = size_of(ids.type_of(m), ids, max_depth, _depth + 1)
            if member_size == UNRESOLVED_SIZE:
                return UNRESOLVED_SIZE
            total += member_size
        return total
    elif isinstance(typ, TypeMatrix):
        if typ.column_count not in _matrix_sizes:
            raise UnsupportedTypeError(f"Matrix must have 2, 3 or 4 columns, got {typ.column_count}")
        return _matrix_sizes[typ.column_count]
    elif isinstance(typ, TypeVector):
        if typ.count not in _vector_sizes:
            raise UnsupportedTypeError(f"Vector must have 2, 3 or 4 components, got {typ.count}")
        return _vector_sizes[typ.count]
    else:
        raise UnsupportedTypeError(f"Size inference requires padding to vec4, got {typ}")


def _scalar_type(typ: Type) -> GLSLBaseType:
    if isinstance(typ, TypeBool):
        return GLSLBaseType.BOOL
    elif isinstance(typ, TypeFloat):
        if typ.width in (16, 32):
            return GLSLBaseType.FLOAT
        elif typ.width == 64:
            return GLSLBaseType.DOUBLE
        raise UnsupportedTypeError(f"Unsupported float width: {typ.width}")
    elif isinstance(typ, TypeInt):
        return GLSLBaseType.INT if typ.signed else GLSLBaseType.UINT
    else:
        raise UnsupportedTypeError(f"Unsupported type: {typ}")


def to_glsl_type(typ: Type, ids: IdTable, max_depth: int = DEFAULT_MAX_DEPTH, _depth: int = 0) -> GLSLType:
    _check_depth(_depth, max_depth)

    if isinstance(typ, TypeArray):
        element = to_glsl_type(ids.type_of(typ.element_type_id), ids, max_depth, _depth + 1)
        return GLSLArrayType(element, array_length(typ, ids))
    elif isinstance(typ, TypePointer):
        return to_glsl_type(ids.type_of(typ.type_id), ids, max_depth, _depth + 1)
    elif isinstance(typ, TypeImage):
        key = (typ.dim, typ.arrayed, typ.multisampled)
        if key not in _image_types:
            raise UnsupportedTypeError(f"Unsupported image type: {typ}")
        return _image_types[key]
    elif isinstance(typ, TypeSampledImage):
        image = ids.type_of(typ.image_type_id)
        if not isinstance(image, TypeImage) or not image.sampled:
            raise UnsupportedTypeError(f"Unsupported sampled image type: {image}")
        sampler_key = (image.dim, image.depth, image.arrayed, image.multisampled)
        if sampler_key not in _sampler_types:
            raise UnsupportedTypeError(f"Unsupported sampled image type: {image}")
        return _sampler_types[sampler_key]
    elif isinstance(typ, TypeSampler):
        raise UnsupportedTypeError("Separate sampler objects are not supported, only combined image samplers")
    elif isinstance(typ, (TypeBool, TypeFloat, TypeInt)):
        return _scalar_type(typ)
    elif isinstance(typ, TypeVector):
        component = _scalar_type(ids.type_of(typ.component_type_id))
        vector_key = (component, typ.count)
        if vector_key not in _vector_types:
            raise UnsupportedTypeError(f"Unsupported vector type: {component.value} x {typ.count}")
        return _vector_types[vector_key]
    else:
        raise UnsupportedTypeError(f"Unsupported type: {typ}")


def to_np_dtype(typ: Type, ids: IdTable, max_depth: int = DEFAULT_MAX_DEPTH, _depth: int = 0) -> np.dtype:
    """numpy dtype of a scalar, vector, matrix or array type.

    Unlike the shader type mapping this keeps the declared scalar widths, a
    16 bit float vector maps to float16 components.
    """
    _check_depth(_depth, max_depth)

    if isinstance(typ, TypeArray):
        element = to_np_dtype(ids.type_of(typ.element_type_id), ids, max_depth, _depth + 1)
        return np.dtype((element.base, (array_length(typ, ids),) + element.shape))
    elif isinstance(typ, TypePointer):
        return to_np_dtype(ids.type_of(typ.type_id), ids, max_depth, _depth + 1)
    elif isinstance(typ, TypeMatrix):
        column = to_np_dtype(ids.type_of(typ.column_type_id), ids, max_depth, _depth + 1)
        return np.dtype((column.base, (typ.column_count,) + column.shape))
    elif isinstance(typ, TypeVector):
        component = to_np_dtype(ids.type_of(typ.component_type_id), ids, max_depth, _depth + 1)
        return np.dtype((component, (typ.count,)))
    elif isinstance(typ, TypeBool):
        return np.dtype(bool)
    elif isinstance(typ, TypeFloat):
        if typ.width not in _float_dtypes:
            raise UnsupportedTypeError(f"Unsupported float width: {typ.width}")
        return _float_dtypes[typ.width]
    elif isinstance(typ, TypeInt):
        if typ.width not in (8, 16, 32, 64):
            raise UnsupportedTypeError(f"Unsupported int width: {typ.width}")
        return np.dtype(f"{'i' if typ.signed else 'u'}{typ.width // 8}")
    else:
        raise UnsupportedTypeError(f"No dtype for type: {typ}")
