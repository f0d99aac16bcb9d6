# Copyright Dario Mylonopoulos
# SPDX-License-Identifier: MIT

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple, Union

import numpy as np

from .errors import UnsupportedTypeError


class GLSLBaseType(Enum):
    BOOL = "bool"
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    DOUBLE = "double"

    BVEC2 = "bvec2"
    BVEC3 = "bvec3"
    BVEC4 = "bvec4"
    IVEC2 = "ivec2"
    IVEC3 = "ivec3"
    IVEC4 = "ivec4"
    UVEC2 = "uvec2"
    UVEC3 = "uvec3"
    UVEC4 = "uvec4"
    VEC2 = "vec2"
    VEC3 = "vec3"
    VEC4 = "vec4"
    DVEC2 = "dvec2"
    DVEC3 = "dvec3"
    DVEC4 = "dvec4"

    IMAGE_1D = "image1D"
    IMAGE_1D_ARRAY = "image1DArray"
    IMAGE_2D = "image2D"
    IMAGE_2D_ARRAY = "image2DArray"
    IMAGE_2D_MS = "image2DMS"
    IMAGE_2D_MS_ARRAY = "image2DMSArray"
    IMAGE_3D = "image3D"
    IMAGE_CUBE = "imageCube"
    IMAGE_CUBE_ARRAY = "imageCubeArray"
    IMAGE_2D_RECT = "image2DRect"
    IMAGE_BUFFER = "imageBuffer"

    SAMPLER_1D = "sampler1D"
    SAMPLER_1D_SHADOW = "sampler1DShadow"
    SAMPLER_1D_ARRAY = "sampler1DArray"
    SAMPLER_1D_ARRAY_SHADOW = "sampler1DArrayShadow"
    SAMPLER_2D = "sampler2D"
    SAMPLER_2D_SHADOW = "sampler2DShadow"
    SAMPLER_2D_ARRAY = "sampler2DArray"
    SAMPLER_2D_ARRAY_SHADOW = "sampler2DArrayShadow"
    SAMPLER_2D_MS = "sampler2DMS"
    SAMPLER_2D_MS_ARRAY = "sampler2DMSArray"
    SAMPLER_3D = "sampler3D"
    SAMPLER_CUBE = "samplerCube"
    SAMPLER_CUBE_SHADOW = "samplerCubeShadow"
    SAMPLER_CUBE_ARRAY = "samplerCubeArray"
    SAMPLER_CUBE_ARRAY_SHADOW = "samplerCubeArrayShadow"
    SAMPLER_2D_RECT = "sampler2DRect"
    SAMPLER_2D_RECT_SHADOW = "sampler2DRectShadow"
    SAMPLER_BUFFER = "samplerBuffer"

    @property
    def is_sampler(self) -> bool:
        return self.value.startswith("sampler")

    @property
    def is_image(self) -> bool:
        return self.value.startswith("image")


@dataclass(frozen=True)
class GLSLArrayType:
    element: "GLSLType"
    length: int


GLSLType = Union[GLSLBaseType, GLSLArrayType]


_base_to_np: Dict[GLSLBaseType, Tuple[np.dtype, int]] = {
    GLSLBaseType.BOOL: (np.dtype(bool), 1),
    GLSLBaseType.INT: (np.dtype(np.int32), 1),
    GLSLBaseType.UINT: (np.dtype(np.uint32), 1),
    GLSLBaseType.FLOAT: (np.dtype(np.float32), 1),
    GLSLBaseType.DOUBLE: (np.dtype(np.float64), 1),
    GLSLBaseType.BVEC2: (np.dtype(bool), 2),
    GLSLBaseType.BVEC3: (np.dtype(bool), 3),
    GLSLBaseType.BVEC4: (np.dtype(bool), 4),
    GLSLBaseType.IVEC2: (np.dtype(np.int32), 2),
    GLSLBaseType.IVEC3: (np.dtype(np.int32), 3),
    GLSLBaseType.IVEC4: (np.dtype(np.int32), 4),
    GLSLBaseType.UVEC2: (np.dtype(np.uint32), 2),
    GLSLBaseType.UVEC3: (np.dtype(np.uint32), 3),
    GLSLBaseType.UVEC4: (np.dtype(np.uint32), 4),
    GLSLBaseType.VEC2: (np.dtype(np.float32), 2),
    GLSLBaseType.VEC3: (np.dtype(np.float32), 3),
    GLSLBaseType.VEC4: (np.dtype(np.float32), 4),
    GLSLBaseType.DVEC2: (np.dtype(np.float64), 2),
    GLSLBaseType.DVEC3: (np.dtype(np.float64), 3),
    GLSLBaseType.DVEC4: (np.dtype(np.float64), 4),
}


def to_dtype(typ: GLSLType) -> np.dtype:
    if isinstance(typ, GLSLArrayType):
        # Nested arrays are flattened into a single multidimensional subarray.
        inner = to_dtype(typ.element)
        return np.dtype((inner.base, (typ.length,) + inner.shape))
    elif typ in _base_to_np:
        base, count = _base_to_np[typ]
        if count == 1:
            return base
        return np.dtype((base, (count,)))
    else:
        raise UnsupportedTypeError(f"No dtype for opaque type: {typ.value}")


def format_type(typ: GLSLType) -> str:
    # Outermost array length comes first, as in vec2[2][3].
    lengths = ""
    while isinstance(typ, GLSLArrayType):
        lengths += f"[{typ.length}]"
        typ = typ.element
    return typ.value + lengths
