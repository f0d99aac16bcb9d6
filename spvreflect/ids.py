# Copyright Dario Mylonopoulos
# SPDX-License-Identifier: MIT

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Union

from .enums import AccessQualifier, DecorationKind, Dim, ExecutionModel, ImageFormat, StorageClass
from .errors import MalformedModuleError


@dataclass(frozen=True)
class Header:
    magic: int
    version: int
    generator: int
    bound: int
    schema: int

    @property
    def version_tuple(self) -> Tuple[int, int]:
        return ((self.version >> 16) & 0xFF, (self.version >> 8) & 0xFF)


@dataclass
class Decoration:
    kind: DecorationKind
    literals: List[int] = field(default_factory=list)


@dataclass
class Member:
    name: Optional[str] = None
    decorations: List[Decoration] = field(default_factory=list)


# Low level types. Every variant refers to other types by id.


@dataclass(frozen=True)
class TypeVoid:
    pass


@dataclass(frozen=True)
class TypeBool:
    pass


@dataclass(frozen=True)
class TypeInt:
    width: int
    signed: bool


@dataclass(frozen=True)
class TypeFloat:
    width: int


@dataclass(frozen=True)
class TypeVector:
    component_type_id: int
    count: int


@dataclass(frozen=True)
class TypeMatrix:
    column_type_id: int
    column_count: int


@dataclass(frozen=True)
class TypeImage:
    sampled_type_id: int
    dim: Dim
    depth: bool
    arrayed: bool
    multisampled: bool
    sampled: bool
    format: ImageFormat
    access_qualifier: Optional[AccessQualifier] = None


@dataclass(frozen=True)
class TypeSampler:
    pass


@dataclass(frozen=True)
class TypeSampledImage:
    image_type_id: int


@dataclass(frozen=True)
class TypeArray:
    element_type_id: int
    length_id: int


@dataclass(frozen=True)
class TypeStruct:
    member_type_ids: Tuple[int, ...]


@dataclass(frozen=True)
class TypePointer:
    storage_class: StorageClass
    type_id: int


Type = Union[
    TypeVoid,
    TypeBool,
    TypeInt,
    TypeFloat,
    TypeVector,
    TypeMatrix,
    TypeImage,
    TypeSampler,
    TypeSampledImage,
    TypeArray,
    TypeStruct,
    TypePointer,
]


@dataclass(frozen=True)
class Variable:
    type_id: int
    storage_class: StorageClass
    initializer: Tuple[int, ...] = ()


@dataclass(frozen=True)
class Constant:
    type_id: int
    values: Tuple[int, ...]


@dataclass
class EntryPoint:
    execution_model: ExecutionModel = ExecutionModel.UNKNOWN
    function_id: int = 0
    name: str = "main"
    interface_ids: Tuple[int, ...] = ()
    local_size: Optional[Tuple[int, int, int]] = None


@dataclass
class Id:
    name: Optional[str] = None
    decorations: List[Decoration] = field(default_factory=list)
    members: List[Member] = field(default_factory=list)
    type: Optional[Type] = None
    variable: Optional[Variable] = None
    constant: Optional[Constant] = None

    def find_decoration(self, kind: DecorationKind) -> Optional[Decoration]:
        for d in self.decorations:
            if d.kind == kind:
                return d
        return None

    def member(self, index: int) -> Member:
        while len(self.members) <= index:
            self.members.append(Member())
        return self.members[index]


class IdTable:
    """Flat table of ids, allocated once from the header bound.

    All cross references between entries are plain integer ids, so forward
    references resolve as long as the table is complete when it is queried.
    """

    def __init__(self, bound: int):
        self._ids = [Id() for _ in range(bound)]

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[Id]:
        return iter(self._ids)

    def __getitem__(self, id: int) -> Id:
        if id < 0 or id >= len(self._ids):
            raise MalformedModuleError(f"Id {id} out of bounds ({len(self._ids)})")
        return self._ids[id]

    def type_of(self, id: int) -> Type:
        typ = self[id].type
        if typ is None:
            raise MalformedModuleError(f"Id {id} is not a type")
        return typ

    def constant_of(self, id: int) -> Constant:
        constant = self[id].constant
        if constant is None or not constant.values:
            raise MalformedModuleError(f"Id {id} is not a constant")
        return constant
