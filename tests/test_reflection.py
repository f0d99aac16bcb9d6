import logging

import numpy as np
import pytest

from spvreflect import (
    DecorationKind,
    DescriptorInfo,
    DescriptorType,
    Dim,
    ExecutionModel,
    GLSLArrayType,
    GLSLBaseType,
    Input,
    MalformedModuleError,
    ReflectConfig,
    Reflection,
    StorageClass,
    Uniform,
    UniformBlock,
    UnresolvedSizeError,
    UnsupportedTypeError,
    input_dtype,
)
from spvreflect.reflection import find_inputs, find_outputs, find_uniform_blocks, find_uniforms

D = DecorationKind


def _params_block(m) -> None:
    m.type_struct(10, 5, 5)
    m.name(10, "Params")
    m.member_name(10, 0, "color")
    m.member_name(10, 1, "scale")
    m.type_pointer(11, StorageClass.UNIFORM, 10)
    m.variable(11, 12, StorageClass.UNIFORM)
    m.decorate(12, D.BINDING, 3)
    m.decorate(12, D.DESCRIPTOR_SET, 0)


def _vertex_interface(m) -> None:
    m.type_pointer(13, StorageClass.INPUT, 4)
    m.variable(13, 14, StorageClass.INPUT)
    m.name(14, "position")
    m.decorate(14, D.LOCATION, 0)
    m.type_pointer(15, StorageClass.INPUT, 3)
    m.variable(15, 16, StorageClass.INPUT)
    m.name(16, "uv")
    m.decorate(16, D.LOCATION, 2)
    m.decorate(16, D.LOCATION, 5)
    m.variable(15, 17, StorageClass.INPUT)
    m.name(17, "builtin")
    m.type_pointer(18, StorageClass.OUTPUT, 5)
    m.variable(18, 19, StorageClass.OUTPUT)
    m.decorate(19, D.LOCATION, 1)


def test_uniform_block(vertex_module) -> None:
    _params_block(vertex_module)
    refl = Reflection(vertex_module.to_bytes())

    assert refl.uniform_blocks == (UniformBlock(ExecutionModel.VERTEX, 3, 0, "Params", 32),)


def test_inputs_and_outputs(vertex_module) -> None:
    _vertex_interface(vertex_module)
    refl = Reflection(vertex_module.to_bytes())

    assert refl.inputs == (
        Input(ExecutionModel.VERTEX, 0, "position", GLSLBaseType.VEC3),
        Input(ExecutionModel.VERTEX, 2, "uv", GLSLBaseType.VEC2),
    )
    assert len(refl.outputs) == 1
    assert refl.outputs[0].location == 1
    assert refl.outputs[0].name is None
    assert refl.outputs[0].type == GLSLBaseType.VEC4


def test_uniforms(vertex_module) -> None:
    m = vertex_module
    m.type_image(20, 2, Dim.DIM_2D, arrayed=True, ms=True)
    m.type_sampled_image(21, 20)
    m.type_pointer(22, StorageClass.UNIFORM_CONSTANT, 21)
    m.variable(22, 23, StorageClass.UNIFORM_CONSTANT)
    m.name(23, "tex")
    m.decorate(23, D.DESCRIPTOR_SET, 1)
    m.decorate(23, D.BINDING, 4)
    m.decorate(23, D.BINDING, 9)
    m.variable(22, 24, StorageClass.UNIFORM_CONSTANT)
    m.decorate(24, D.BINDING, 0)
    refl = Reflection(m.to_bytes())

    assert refl.uniforms == (Uniform(ExecutionModel.VERTEX, 4, 1, "tex", GLSLBaseType.SAMPLER_2D_MS_ARRAY),)


def test_block_without_binding_is_excluded(vertex_module) -> None:
    m = vertex_module
    m.type_struct(10, 5)
    m.type_pointer(11, StorageClass.UNIFORM, 10)
    m.variable(11, 12, StorageClass.UNIFORM)
    m.decorate(12, D.DESCRIPTOR_SET, 0)
    assert Reflection(m.to_bytes()).uniform_blocks == ()


def test_block_with_unresolved_member(vertex_module) -> None:
    m = vertex_module
    m.type_struct(10, 5, 30)
    m.type_pointer(11, StorageClass.UNIFORM, 10)
    m.variable(11, 12, StorageClass.UNIFORM)
    m.decorate(12, D.BINDING, 0)
    m.decorate(12, D.DESCRIPTOR_SET, 0)
    with pytest.raises(UnresolvedSizeError):
        Reflection(m.to_bytes())


def test_location_without_value(vertex_module) -> None:
    m = vertex_module
    m.type_pointer(13, StorageClass.INPUT, 4)
    m.variable(13, 14, StorageClass.INPUT)
    m.decorate(14, D.LOCATION)
    with pytest.raises(MalformedModuleError):
        Reflection(m.to_bytes())


def test_compute_entry_point(module) -> None:
    module.entry_point(5, 1, "main")
    assert Reflection(module.to_bytes()).stage == ExecutionModel.COMPUTE


def test_unknown_entry_point_model(module) -> None:
    module.entry_point(1000, 1, "main")
    assert Reflection(module.to_bytes()).stage == ExecutionModel.UNKNOWN


def test_invalid_module_has_no_partial_result(vertex_module) -> None:
    data = bytearray(vertex_module.to_bytes())
    data[0] = 0
    with pytest.raises(MalformedModuleError):
        Reflection(bytes(data))


def test_byte_swapped_module(vertex_module) -> None:
    _params_block(vertex_module)
    _vertex_interface(vertex_module)
    native = Reflection(vertex_module.to_bytes("little"))
    swapped = Reflection(vertex_module.to_bytes("big"))

    assert swapped.header == native.header
    assert swapped.entry_point == native.entry_point
    assert swapped.inputs == native.inputs
    assert swapped.outputs == native.outputs
    assert swapped.uniforms == native.uniforms
    assert swapped.uniform_blocks == native.uniform_blocks


def test_scans_are_repeatable(vertex_module) -> None:
    _params_block(vertex_module)
    _vertex_interface(vertex_module)
    refl = Reflection(vertex_module.words())
    model = refl.stage

    assert tuple(find_inputs(model, refl.ids)) == tuple(find_inputs(model, refl.ids)) == refl.inputs
    assert tuple(find_outputs(model, refl.ids)) == refl.outputs
    assert tuple(find_uniforms(model, refl.ids)) == refl.uniforms
    assert tuple(find_uniform_blocks(model, refl.ids)) == refl.uniform_blocks


def test_descriptor_sets(vertex_module) -> None:
    m = vertex_module
    m.bound = 40
    _params_block(m)
    m.type_image(20, 2, Dim.DIM_2D)
    m.type_sampled_image(21, 20)
    m.type_int(25, 32, False)
    m.constant(25, 26, 4)
    m.type_array(27, 21, 26)
    m.type_pointer(22, StorageClass.UNIFORM_CONSTANT, 27)
    m.variable(22, 23, StorageClass.UNIFORM_CONSTANT)
    m.name(23, "textures")
    m.decorate(23, D.BINDING, 1)
    m.decorate(23, D.DESCRIPTOR_SET, 0)
    m.type_image(28, 2, Dim.DIM_2D, sampled=False)
    m.type_pointer(29, StorageClass.UNIFORM_CONSTANT, 28)
    m.variable(29, 30, StorageClass.UNIFORM_CONSTANT)
    m.name(30, "target")
    m.decorate(30, D.BINDING, 0)
    m.decorate(30, D.DESCRIPTOR_SET, 1)
    m.type_image(31, 2, Dim.BUFFER)
    m.type_sampled_image(32, 31)
    m.type_pointer(33, StorageClass.UNIFORM_CONSTANT, 32)
    m.variable(33, 34, StorageClass.UNIFORM_CONSTANT)
    m.name(34, "texels")
    m.decorate(34, D.BINDING, 2)
    m.decorate(34, D.DESCRIPTOR_SET, 0)
    m.type_image(35, 2, Dim.BUFFER, sampled=False)
    m.type_pointer(36, StorageClass.UNIFORM_CONSTANT, 35)
    m.variable(36, 37, StorageClass.UNIFORM_CONSTANT)
    m.name(37, "storage_texels")
    m.decorate(37, D.BINDING, 1)
    m.decorate(37, D.DESCRIPTOR_SET, 1)
    refl = Reflection(m.to_bytes())

    assert refl.uniforms[0].type == GLSLArrayType(GLSLBaseType.SAMPLER_2D, 4)
    assert refl.sets == {
        0: [
            DescriptorInfo("textures", 1, 0, DescriptorType.COMBINED_IMAGE_SAMPLER, 4),
            DescriptorInfo("texels", 2, 0, DescriptorType.UNIFORM_TEXEL_BUFFER),
            DescriptorInfo("Params", 3, 0, DescriptorType.UNIFORM_BUFFER),
        ],
        1: [
            DescriptorInfo("target", 0, 1, DescriptorType.STORAGE_IMAGE),
            DescriptorInfo("storage_texels", 1, 1, DescriptorType.STORAGE_TEXEL_BUFFER),
        ],
    }
    assert refl.descriptors["Params"].binding == 3


def test_input_dtype(vertex_module) -> None:
    _vertex_interface(vertex_module)
    refl = Reflection(vertex_module.to_bytes())
    dt = input_dtype(refl.ids)

    assert dt.names == ("position", "uv")
    assert dt.itemsize == 20
    assert dt.fields["uv"][1] == 12
    assert dt["position"] == np.dtype((np.float32, (3,)))


def test_input_dtype_keeps_scalar_widths(vertex_module) -> None:
    m = vertex_module
    m.type_float(20, 16)
    m.type_vector(21, 20, 4)
    m.type_pointer(22, StorageClass.INPUT, 21)
    m.variable(22, 23, StorageClass.INPUT)
    m.name(23, "color")
    m.decorate(23, D.LOCATION, 1)
    m.type_int(24, 32, True)
    m.type_pointer(25, StorageClass.INPUT, 24)
    m.variable(25, 26, StorageClass.INPUT)
    m.decorate(26, D.LOCATION, 0)
    refl = Reflection(m.to_bytes())
    dt = input_dtype(refl.ids)

    assert refl.inputs[0].type == GLSLBaseType.VEC4
    assert dt.names == ("location0", "color")
    assert dt["color"] == np.dtype((np.float16, (4,)))
    assert dt.fields["color"][1] == 4
    assert dt.itemsize == 12


def test_from_file(tmp_path, vertex_module) -> None:
    _params_block(vertex_module)
    path = tmp_path / "shader.vert.spv"
    path.write_bytes(vertex_module.to_bytes("big"))

    refl = Reflection.from_file(path, ReflectConfig(byteorder="big"))
    assert refl.uniform_blocks[0].name == "Params"
    assert refl.entry_point.name == "main"


def test_config_log_level(vertex_module) -> None:
    logger = logging.getLogger("spvreflect")
    old_level = logger.level
    try:
        Reflection(vertex_module.to_bytes(), ReflectConfig(log_level=logging.ERROR))
        assert logger.level == logging.ERROR
    finally:
        logger.setLevel(old_level)


def test_plain_uniform_is_not_a_descriptor(vertex_module) -> None:
    m = vertex_module
    m.type_pointer(20, StorageClass.UNIFORM_CONSTANT, 2)
    m.variable(20, 21, StorageClass.UNIFORM_CONSTANT)
    m.name(21, "exposure")
    m.decorate(21, D.BINDING, 0)
    m.decorate(21, D.DESCRIPTOR_SET, 0)
    refl = Reflection(m.to_bytes())

    assert refl.uniforms == (Uniform(ExecutionModel.VERTEX, 0, 0, "exposure", GLSLBaseType.FLOAT),)
    assert refl.sets == {}
    assert refl.descriptors == {}


def test_separate_sampler_uniform(vertex_module) -> None:
    m = vertex_module
    m.type_sampler(20)
    m.type_pointer(21, StorageClass.UNIFORM_CONSTANT, 20)
    m.variable(21, 22, StorageClass.UNIFORM_CONSTANT)
    m.name(22, "linear")
    m.decorate(22, D.BINDING, 0)
    m.decorate(22, D.DESCRIPTOR_SET, 0)
    with pytest.raises(UnsupportedTypeError, match="sampler"):
        Reflection(m.to_bytes())
