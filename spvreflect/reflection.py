# Copyright Dario Mylonopoulos
# SPDX-License-Identifier: MIT

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from .config import ReflectConfig
from .decoder import decode_module
from .enums import DecorationKind, ExecutionModel, StorageClass
from .errors import MalformedModuleError, UnresolvedSizeError, UnsupportedTypeError
from .glsl import GLSLArrayType, GLSLBaseType, GLSLType
from .header import ModuleData, load_words
from .ids import EntryPoint, Header, Id, IdTable, TypePointer, TypeStruct, Variable
from .type_resolver import DEFAULT_MAX_DEPTH, UNRESOLVED_SIZE, size_of, to_glsl_type, to_np_dtype

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Input:
    model: ExecutionModel
    location: int
    name: Optional[str]
    type: GLSLType


@dataclass(frozen=True)
class Output:
    model: ExecutionModel
    location: int
    name: Optional[str]
    type: GLSLType


@dataclass(frozen=True)
class Uniform:
    model: ExecutionModel
    binding: int
    set: int
    name: Optional[str]
    type: GLSLType


@dataclass(frozen=True)
class UniformBlock:
    model: ExecutionModel
    binding: int
    set: int
    name: Optional[str]
    size: int


def _first_literal(id: Id, kind: DecorationKind) -> Optional[int]:
    decoration = id.find_decoration(kind)
    if decoration is None:
        return None
    if not decoration.literals:
        raise MalformedModuleError(f"{kind.name} decoration without a value")
    return decoration.literals[0]


def _located_variables(ids: IdTable, storage_class: StorageClass) -> List[Tuple[int, Id, Variable]]:
    result = []
    for i, id in enumerate(ids):
        var = id.variable
        if var is None or var.storage_class != storage_class:
            continue
        location = _first_literal(id, DecorationKind.LOCATION)
        if location is None:
            logger.debug("Skipping %s variable %d without location", storage_class.name, i)
            continue
        result.append((location, id, var))
    return result


def _find_located(
    ids: IdTable, storage_class: StorageClass, max_depth: int
) -> List[Tuple[int, Optional[str], GLSLType]]:
    return [
        (location, id.name, to_glsl_type(ids.type_of(var.type_id), ids, max_depth))
        for location, id, var in _located_variables(ids, storage_class)
    ]


def find_inputs(model: ExecutionModel, ids: IdTable, max_depth: int = DEFAULT_MAX_DEPTH) -> List[Input]:
    return [Input(model, loc, name, typ) for loc, name, typ in _find_located(ids, StorageClass.INPUT, max_depth)]


def find_outputs(model: ExecutionModel, ids: IdTable, max_depth: int = DEFAULT_MAX_DEPTH) -> List[Output]:
    return [
        Output(model, loc, name, typ) for loc, name, typ in _find_located(ids, StorageClass.OUTPUT, max_depth)
    ]


def _binding_and_set(i: int, id: Id) -> Optional[Tuple[int, int]]:
    binding = _first_literal(id, DecorationKind.BINDING)
    descriptor_set = _first_literal(id, DecorationKind.DESCRIPTOR_SET)
    if binding is None or descriptor_set is None:
        logger.debug("Skipping variable %d without binding and descriptor set", i)
        return None
    return binding, descriptor_set


def find_uniforms(model: ExecutionModel, ids: IdTable, max_depth: int = DEFAULT_MAX_DEPTH) -> List[Uniform]:
    result = []
    for i, id in enumerate(ids):
        var = id.variable
        if var is None or var.storage_class != StorageClass.UNIFORM_CONSTANT:
            continue
        binding_and_set = _binding_and_set(i, id)
        if binding_and_set is None:
            continue
        typ = to_glsl_type(ids.type_of(var.type_id), ids, max_depth)
        result.append(Uniform(model, binding_and_set[0], binding_and_set[1], id.name, typ))
    return result


def find_uniform_blocks(
    model: ExecutionModel, ids: IdTable, max_depth: int = DEFAULT_MAX_DEPTH
) -> List[UniformBlock]:
    result = []
    for i, id in enumerate(ids):
        var = id.variable
        if var is None or var.storage_class != StorageClass.UNIFORM:
            continue
        binding_and_set = _binding_and_set(i, id)
        if binding_and_set is None:
            continue

        ptr = ids.type_of(var.type_id)
        if not isinstance(ptr, TypePointer):
            raise MalformedModuleError(f"Variable {i} does not have a pointer type")
        block = ids[ptr.type_id]
        struct = ids.type_of(ptr.type_id)
        if not isinstance(struct, TypeStruct):
            raise UnsupportedTypeError(f"Uniform block {i} is not a struct: {struct}")

        size = size_of(struct, ids, max_depth)
        if size == UNRESOLVED_SIZE:
            raise UnresolvedSizeError(ptr.type_id, block.name)
        result.append(UniformBlock(model, binding_and_set[0], binding_and_set[1], block.name, size))
    return result


class DescriptorType(Enum):
    UNIFORM_BUFFER = 0
    COMBINED_IMAGE_SAMPLER = 1
    STORAGE_IMAGE = 2
    UNIFORM_TEXEL_BUFFER = 3
    STORAGE_TEXEL_BUFFER = 4


@dataclass(frozen=True)
class DescriptorInfo:
    name: Optional[str]
    binding: int
    set: int
    type: DescriptorType
    count: int = 1  # 1 for single element, array length otherwise


def to_descriptor_type(typ: GLSLBaseType) -> DescriptorType:
    if typ == GLSLBaseType.SAMPLER_BUFFER:
        return DescriptorType.UNIFORM_TEXEL_BUFFER
    elif typ == GLSLBaseType.IMAGE_BUFFER:
        return DescriptorType.STORAGE_TEXEL_BUFFER
    elif typ.is_sampler:
        return DescriptorType.COMBINED_IMAGE_SAMPLER
    elif typ.is_image:
        return DescriptorType.STORAGE_IMAGE
    else:
        raise UnsupportedTypeError(f"Not a descriptor type: {typ.value}")


def to_descriptor_info(resource: Union[Uniform, UniformBlock]) -> Optional[DescriptorInfo]:
    if isinstance(resource, UniformBlock):
        return DescriptorInfo(resource.name, resource.binding, resource.set, DescriptorType.UNIFORM_BUFFER)

    typ = resource.type
    count = 1
    while isinstance(typ, GLSLArrayType):
        count *= typ.length
        typ = typ.element
    if not (typ.is_sampler or typ.is_image):
        return None
    return DescriptorInfo(resource.name, resource.binding, resource.set, to_descriptor_type(typ), count)


def input_dtype(ids: IdTable, max_depth: int = DEFAULT_MAX_DEPTH) -> np.dtype:
    """Packed structured dtype of the input variables, ordered by location.

    Field types keep the declared scalar widths of the variables.
    """
    d = {}
    offset = 0
    for location, id, var in sorted(_located_variables(ids, StorageClass.INPUT), key=lambda v: v[0]):
        dt = to_np_dtype(ids.type_of(var.type_id), ids, max_depth)
        d[id.name or f"location{location}"] = (dt, offset)
        offset += dt.itemsize
    return np.dtype(d)  # type: ignore


class Reflection:
    """Interface of a shader module: entry point, interface variables and resources.

    All results are computed in the constructor. Any error aborts the whole
    reflection, there are no partial results.
    """

    def __init__(self, data: ModuleData, config: Optional[ReflectConfig] = None):
        config = config or ReflectConfig()
        if config.log_level is not None:
            logging.getLogger("spvreflect").setLevel(config.log_level)

        module = decode_module(load_words(data, config.byteorder))
        self.header: Header = module.header
        self.ids: IdTable = module.ids
        self.entry_point: EntryPoint = module.entry_point

        model = self.entry_point.execution_model
        depth = config.max_type_depth
        self.inputs: Tuple[Input, ...] = tuple(find_inputs(model, self.ids, depth))
        self.outputs: Tuple[Output, ...] = tuple(find_outputs(model, self.ids, depth))
        self.uniforms: Tuple[Uniform, ...] = tuple(find_uniforms(model, self.ids, depth))
        self.uniform_blocks: Tuple[UniformBlock, ...] = tuple(find_uniform_blocks(model, self.ids, depth))

        self.sets: Dict[int, List[DescriptorInfo]] = {}
        for r in (*self.uniforms, *self.uniform_blocks):
            info = to_descriptor_info(r)
            if info is None:
                logger.debug("Uniform %s is not an opaque resource, not a descriptor", r.name)
                continue
            self.sets.setdefault(r.set, []).append(info)
        for s in self.sets.values():
            s.sort(key=lambda d: d.binding)

        self.descriptors: Dict[str, DescriptorInfo] = {}
        for s in self.sets.values():
            for d in s:
                if d.name:
                    self.descriptors[d.name] = d

        logger.info(
            "Reflected %s entry point %s: %d inputs, %d outputs, %d uniforms, %d uniform blocks",
            model.name,
            self.entry_point.name,
            len(self.inputs),
            len(self.outputs),
            len(self.uniforms),
            len(self.uniform_blocks),
        )

    @classmethod
    def from_file(cls, path: Union[Path, str], config: Optional[ReflectConfig] = None) -> "Reflection":
        return cls(Path(path).read_bytes(), config)

    @property
    def stage(self) -> ExecutionModel:
        return self.entry_point.execution_model
