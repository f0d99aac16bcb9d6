# Copyright Dario Mylonopoulos
# SPDX-License-Identifier: MIT

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple

from . import spirv_constants as spv
from .enums import (
    decode_access_qualifier,
    decode_decoration_kind,
    decode_dim,
    decode_execution_model,
    decode_image_format,
    decode_storage_class,
)
from .errors import MalformedModuleError
from .header import Words, read_header
from .ids import (
    Constant,
    Decoration,
    EntryPoint,
    Header,
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
    TypeVoid,
    Variable,
)

logger = logging.getLogger(__name__)


class InstructionReader:
    """Sequential operand reader over the words of a single instruction.

    The view is bounded by the instruction word count, reads past the end
    raise instead of spilling into the next instruction.
    """

    def __init__(self, words: Words, bound: int):
        self.words = words
        self.bound = bound
        self.opcode = int(words[0]) & 0xFFFF
        self.pos = 1

    def _opname(self) -> str:
        return spv.opcode_to_string.get(self.opcode, f"Op{self.opcode}")

    def has_remaining(self) -> bool:
        return self.pos < len(self.words)

    def word(self) -> int:
        if self.pos >= len(self.words):
            raise MalformedModuleError(f"{self._opname()}: operand read past end of instruction")
        w = int(self.words[self.pos])
        self.pos += 1
        return w

    def flag(self) -> bool:
        return self.word() == 1

    def id(self) -> int:
        id = self.word()
        if id >= self.bound:
            raise MalformedModuleError(f"{self._opname()}: id {id} out of bounds ({self.bound})")
        return id

    def member(self) -> int:
        index = self.word()
        if index >= spv.MaxStructMembers:
            raise MalformedModuleError(f"{self._opname()}: member index {index} out of range")
        return index

    def ids(self) -> Tuple[int, ...]:
        result = []
        while self.has_remaining():
            result.append(self.id())
        return tuple(result)

    def literals(self) -> Tuple[int, ...]:
        result = []
        while self.has_remaining():
            result.append(self.word())
        return tuple(result)

    def string(self) -> str:
        # Characters are packed low byte first in each word.
        data = self.words[self.pos :].astype("<u4").tobytes()
        end = data.find(b"\0")
        if end < 0:
            end = len(data)
            self.pos = len(self.words)
        else:
            self.pos += end // 4 + 1
        return data[:end].decode("utf-8", errors="replace")


@dataclass
class DecodedModule:
    header: Header
    ids: IdTable
    entry_point: EntryPoint = field(default_factory=EntryPoint)
    has_entry_point: bool = False
    local_sizes: Dict[int, Tuple[int, int, int]] = field(default_factory=dict)


def _set_type(module: DecodedModule, target: int, typ: Type) -> None:
    entry = module.ids[target]
    if entry.type is not None:
        logger.warning("Id %d redefined as %s (was %s)", target, typ, entry.type)
    entry.type = typ


def _op_entry_point(module: DecodedModule, inst: InstructionReader) -> None:
    model = decode_execution_model(inst.word())
    function_id = inst.id()
    name = inst.string()
    interface_ids = inst.ids()
    if module.has_entry_point:
        logger.debug("Multiple entry points, using %s", name)
    module.entry_point = EntryPoint(model, function_id, name, interface_ids)
    module.has_entry_point = True


def _op_execution_mode(module: DecodedModule, inst: InstructionReader) -> None:
    function_id = inst.id()
    mode = inst.word()
    if mode == spv.ExecutionModeLocalSize:
        module.local_sizes[function_id] = (inst.word(), inst.word(), inst.word())


def _op_name(module: DecodedModule, inst: InstructionReader) -> None:
    target = inst.id()
    module.ids[target].name = inst.string()


def _op_member_name(module: DecodedModule, inst: InstructionReader) -> None:
    target = inst.id()
    member = inst.member()
    module.ids[target].member(member).name = inst.string()


def _op_decorate(module: DecodedModule, inst: InstructionReader) -> None:
    target = inst.id()
    kind = decode_decoration_kind(inst.word())
    module.ids[target].decorations.append(Decoration(kind, list(inst.literals())))


def _op_member_decorate(module: DecodedModule, inst: InstructionReader) -> None:
    target = inst.id()
    member = inst.member()
    kind = decode_decoration_kind(inst.word())
    module.ids[target].member(member).decorations.append(Decoration(kind, list(inst.literals())))


def _op_type_void(module: DecodedModule, inst: InstructionReader) -> None:
    _set_type(module, inst.id(), TypeVoid())


def _op_type_bool(module: DecodedModule, inst: InstructionReader) -> None:
    _set_type(module, inst.id(), TypeBool())


def _op_type_int(module: DecodedModule, inst: InstructionReader) -> None:
    target = inst.id()
    width = inst.word()
    signed = inst.flag()
    _set_type(module, target, TypeInt(width, signed))


def _op_type_float(module: DecodedModule, inst: InstructionReader) -> None:
    target = inst.id()
    _set_type(module, target, TypeFloat(inst.word()))


def _op_type_vector(module: DecodedModule, inst: InstructionReader) -> None:
    target = inst.id()
    component_type = inst.id()
    count = inst.word()
    _set_type(module, target, TypeVector(component_type, count))


def _op_type_matrix(module: DecodedModule, inst: InstructionReader) -> None:
    target = inst.id()
    column_type = inst.id()
    column_count = inst.word()
    _set_type(module, target, TypeMatrix(column_type, column_count))


def _op_type_image(module: DecodedModule, inst: InstructionReader) -> None:
    target = inst.id()
    sampled_type = inst.id()
    dim = decode_dim(inst.word())
    depth = inst.flag()
    arrayed = inst.flag()
    ms = inst.flag()
    sampled = inst.flag()
    format = decode_image_format(inst.word())
    access = decode_access_qualifier(inst.word()) if inst.has_remaining() else None
    _set_type(module, target, TypeImage(sampled_type, dim, depth, arrayed, ms, sampled, format, access))


def _op_type_sampler(module: DecodedModule, inst: InstructionReader) -> None:
    _set_type(module, inst.id(), TypeSampler())


def _op_type_sampled_image(module: DecodedModule, inst: InstructionReader) -> None:
    target = inst.id()
    _set_type(module, target, TypeSampledImage(inst.id()))


def _op_type_array(module: DecodedModule, inst: InstructionReader) -> None:
    target = inst.id()
    element_type = inst.id()
    length = inst.id()
    _set_type(module, target, TypeArray(element_type, length))


def _op_type_struct(module: DecodedModule, inst: InstructionReader) -> None:
    target = inst.id()
    _set_type(module, target, TypeStruct(inst.ids()))


def _op_type_pointer(module: DecodedModule, inst: InstructionReader) -> None:
    target = inst.id()
    storage_class = decode_storage_class(inst.word())
    _set_type(module, target, TypePointer(storage_class, inst.id()))


def _op_variable(module: DecodedModule, inst: InstructionReader) -> None:
    type_id = inst.id()
    target = inst.id()
    storage_class = decode_storage_class(inst.word())
    initializer = inst.ids()

    entry = module.ids[target]
    if entry.variable is not None:
        logger.warning("Id %d redefined as variable", target)
    entry.variable = Variable(type_id, storage_class, initializer)


def _op_constant(module: DecodedModule, inst: InstructionReader) -> None:
    type_id = inst.id()
    target = inst.id()
    values = inst.literals()

    entry = module.ids[target]
    if entry.constant is not None:
        logger.warning("Id %d redefined as constant", target)
    entry.constant = Constant(type_id, values)


_handlers: Dict[int, Callable[[DecodedModule, InstructionReader], None]] = {
    spv.OpEntryPoint: _op_entry_point,
    spv.OpExecutionMode: _op_execution_mode,
    spv.OpName: _op_name,
    spv.OpMemberName: _op_member_name,
    spv.OpDecorate: _op_decorate,
    spv.OpMemberDecorate: _op_member_decorate,
    spv.OpTypeVoid: _op_type_void,
    spv.OpTypeBool: _op_type_bool,
    spv.OpTypeInt: _op_type_int,
    spv.OpTypeFloat: _op_type_float,
    spv.OpTypeVector: _op_type_vector,
    spv.OpTypeMatrix: _op_type_matrix,
    spv.OpTypeImage: _op_type_image,
    spv.OpTypeSampler: _op_type_sampler,
    spv.OpTypeSampledImage: _op_type_sampled_image,
    spv.OpTypeArray: _op_type_array,
    spv.OpTypeStruct: _op_type_struct,
    spv.OpTypePointer: _op_type_pointer,
    spv.OpVariable: _op_variable,
    spv.OpConstant: _op_constant,
    spv.OpConstantComposite: _op_constant,
}


def decode_module(words: Words) -> DecodedModule:
    """Decode a whole module, header included, in a single forward pass.

    Only the opcodes needed for interface reflection are interpreted, every
    other instruction is framed and skipped.
    """
    header, words = read_header(words)
    module = DecodedModule(header, IdTable(header.bound))

    decoded = 0
    skipped = 0
    n = len(words)
    i = spv.HeaderWordCount
    while i < n:
        w = int(words[i])
        opcode = w & 0xFFFF
        word_count = (w >> 16) & 0xFFFF

        if word_count == 0:
            raise MalformedModuleError(f"Instruction at word {i} has a word count of 0")
        if i + word_count > n:
            raise MalformedModuleError(f"Instruction at word {i} runs past the end of the module ({word_count} words)")

        handler = _handlers.get(opcode)
        if handler is not None:
            handler(module, InstructionReader(words[i : i + word_count], header.bound))
            decoded += 1
        else:
            skipped += 1
        i += word_count

    logger.debug("Decoded %d instructions, skipped %d", decoded, skipped)

    if not module.has_entry_point:
        logger.warning("Module has no entry point")

    local_size: Optional[Tuple[int, int, int]] = module.local_sizes.get(module.entry_point.function_id)
    if local_size is not None:
        module.entry_point.local_size = local_size

    return module
