import numpy as np
import pytest

from spvreflect import GLSLArrayType, GLSLBaseType, UnsupportedTypeError, format_type, to_dtype


@pytest.mark.parametrize(
    "typ, expected",
    [
        (GLSLBaseType.FLOAT, np.dtype(np.float32)),
        (GLSLBaseType.UINT, np.dtype(np.uint32)),
        (GLSLBaseType.DOUBLE, np.dtype(np.float64)),
        (GLSLBaseType.IVEC2, np.dtype((np.int32, (2,)))),
        (GLSLBaseType.VEC4, np.dtype((np.float32, (4,)))),
    ],
)
def test_to_dtype(typ, expected) -> None:
    assert to_dtype(typ) == expected


def test_array_dtype() -> None:
    dt = to_dtype(GLSLArrayType(GLSLBaseType.VEC3, 4))
    assert dt.shape == (4, 3)
    assert dt.base == np.dtype(np.float32)
    assert dt.itemsize == 48


def test_nested_array_dtype() -> None:
    dt = to_dtype(GLSLArrayType(GLSLArrayType(GLSLBaseType.UINT, 3), 2))
    assert dt.shape == (2, 3)
    assert dt.itemsize == 24


def test_opaque_types_have_no_dtype() -> None:
    with pytest.raises(UnsupportedTypeError):
        to_dtype(GLSLBaseType.SAMPLER_2D)


def test_format_type() -> None:
    assert format_type(GLSLBaseType.SAMPLER_2D_ARRAY_SHADOW) == "sampler2DArrayShadow"
    assert format_type(GLSLArrayType(GLSLArrayType(GLSLBaseType.VEC2, 3), 2)) == "vec2[2][3]"


def test_opaque_categories() -> None:
    assert GLSLBaseType.SAMPLER_BUFFER.is_sampler
    assert GLSLBaseType.IMAGE_CUBE.is_image
    assert not GLSLBaseType.VEC4.is_sampler
    assert not GLSLBaseType.VEC4.is_image
