from typing import List, Optional, Sequence, Union

import pytest

from spvreflect import spirv_constants as spv
from spvreflect.decoder import DecodedModule, decode_module
from spvreflect.enums import DecorationKind, Dim, ExecutionModel, ImageFormat, StorageClass
from spvreflect.header import load_words

Operand = Union[int, Sequence[int]]


def encode_string(s: str) -> List[int]:
    data = s.encode() + b"\0"
    data += b"\0" * (-len(data) % 4)
    return [int.from_bytes(data[i : i + 4], "little") for i in range(0, len(data), 4)]


class ModuleBuilder:
    """Assembles a SPIR-V module one instruction at a time."""

    def __init__(self, bound: int = 32):
        self.bound = bound
        self.instructions: List[int] = []

    def op(self, opcode: int, *operands: Operand) -> "ModuleBuilder":
        words: List[int] = []
        for o in operands:
            if isinstance(o, int):
                words.append(o)
            else:
                words.extend(o)
        self.instructions.append(((len(words) + 1) << 16) | opcode)
        self.instructions.extend(words)
        return self

    def raw(self, *words: int) -> "ModuleBuilder":
        self.instructions.extend(words)
        return self

    def entry_point(self, model: int, function: int, name: str, *interface: int) -> "ModuleBuilder":
        return self.op(spv.OpEntryPoint, model, function, encode_string(name), *interface)

    def name(self, target: int, name: str) -> "ModuleBuilder":
        return self.op(spv.OpName, target, encode_string(name))

    def member_name(self, target: int, member: int, name: str) -> "ModuleBuilder":
        return self.op(spv.OpMemberName, target, member, encode_string(name))

    def decorate(self, target: int, kind: DecorationKind, *literals: int) -> "ModuleBuilder":
        return self.op(spv.OpDecorate, target, kind.value, *literals)

    def member_decorate(self, target: int, member: int, kind: DecorationKind, *literals: int) -> "ModuleBuilder":
        return self.op(spv.OpMemberDecorate, target, member, kind.value, *literals)

    def type_void(self, target: int) -> "ModuleBuilder":
        return self.op(spv.OpTypeVoid, target)

    def type_bool(self, target: int) -> "ModuleBuilder":
        return self.op(spv.OpTypeBool, target)

    def type_int(self, target: int, width: int, signed: bool) -> "ModuleBuilder":
        return self.op(spv.OpTypeInt, target, width, int(signed))

    def type_float(self, target: int, width: int = 32) -> "ModuleBuilder":
        return self.op(spv.OpTypeFloat, target, width)

    def type_vector(self, target: int, component: int, count: int) -> "ModuleBuilder":
        return self.op(spv.OpTypeVector, target, component, count)

    def type_matrix(self, target: int, column: int, count: int) -> "ModuleBuilder":
        return self.op(spv.OpTypeMatrix, target, column, count)

    def type_image(
        self,
        target: int,
        sampled_type: int,
        dim: Dim,
        depth: bool = False,
        arrayed: bool = False,
        ms: bool = False,
        sampled: bool = True,
        format: ImageFormat = ImageFormat.UNKNOWN,
        access: Optional[int] = None,
    ) -> "ModuleBuilder":
        operands = [target, sampled_type, dim.value, int(depth), int(arrayed), int(ms), int(sampled), format.value]
        if access is not None:
            operands.append(access)
        return self.op(spv.OpTypeImage, *operands)

    def type_sampler(self, target: int) -> "ModuleBuilder":
        return self.op(spv.OpTypeSampler, target)

    def type_sampled_image(self, target: int, image: int) -> "ModuleBuilder":
        return self.op(spv.OpTypeSampledImage, target, image)

    def type_array(self, target: int, element: int, length: int) -> "ModuleBuilder":
        return self.op(spv.OpTypeArray, target, element, length)

    def type_struct(self, target: int, *members: int) -> "ModuleBuilder":
        return self.op(spv.OpTypeStruct, target, *members)

    def type_pointer(self, target: int, storage_class: StorageClass, typ: int) -> "ModuleBuilder":
        return self.op(spv.OpTypePointer, target, storage_class.value, typ)

    def variable(self, typ: int, target: int, storage_class: StorageClass) -> "ModuleBuilder":
        return self.op(spv.OpVariable, typ, target, storage_class.value)

    def constant(self, typ: int, target: int, *values: int) -> "ModuleBuilder":
        return self.op(spv.OpConstant, typ, target, *values)

    def words(self) -> List[int]:
        return [spv.MagicNumber, 0x00010000, 0, self.bound, 0] + self.instructions

    def to_bytes(self, byteorder: str = "little") -> bytes:
        return b"".join(w.to_bytes(4, byteorder) for w in self.words())

    def decode(self) -> DecodedModule:
        return decode_module(load_words(self.to_bytes()))


@pytest.fixture
def module() -> ModuleBuilder:
    return ModuleBuilder()


@pytest.fixture
def vertex_module() -> ModuleBuilder:
    """Vertex shader skeleton: float (2), vec2 (3), vec3 (4), vec4 (5), entry function 1."""
    m = ModuleBuilder()
    m.entry_point(ExecutionModel.VERTEX.value, 1, "main")
    m.type_float(2, 32)
    m.type_vector(3, 2, 2)
    m.type_vector(4, 2, 3)
    m.type_vector(5, 2, 4)
    return m
