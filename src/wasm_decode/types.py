"""WebAssembly module data model.

Every value here is created once by the decoder and never mutated, so all
dataclasses are frozen and sequences are tuples.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Union

from .eval import evaluate


class SectionID(IntEnum):
    """Section ids of the WebAssembly binary format."""

    CUSTOM = 0
    TYPE = 1
    IMPORT = 2
    FUNCTION = 3
    TABLE = 4
    MEMORY = 5
    GLOBAL = 6
    EXPORT = 7
    START = 8
    ELEMENT = 9
    CODE = 10
    DATA = 11


class ExternalKind(IntEnum):
    """Kind of an import or export."""

    FUNCTION = 0
    TABLE = 1
    MEMORY = 2
    GLOBAL = 3


# Value type constants
VALTYPE_I32 = "i32"
VALTYPE_I64 = "i64"
VALTYPE_F32 = "f32"
VALTYPE_F64 = "f64"
VALTYPE_V128 = "v128"
VALTYPE_FUNCREF = "funcref"  # "anyfunc" in the MVP
VALTYPE_EXTERNREF = "externref"

# Binary encoding of value types
VALTYPE_ENCODING = {
    0x7F: VALTYPE_I32,
    0x7E: VALTYPE_I64,
    0x7D: VALTYPE_F32,
    0x7C: VALTYPE_F64,
    0x7B: VALTYPE_V128,
    0x70: VALTYPE_FUNCREF,
    0x6F: VALTYPE_EXTERNREF,
}

# Reverse mapping
VALTYPE_TO_BYTE = {v: k for k, v in VALTYPE_ENCODING.items()}

ValType = str  # One of the VALTYPE_* constants

# Type constructor for function signatures, 0x60 read as a signed 7-bit value
FORM_FUNC = -0x20


@dataclass(frozen=True)
class FuncType:
    """WebAssembly function type (signature)."""

    form: int
    params: tuple[ValType, ...]
    results: tuple[ValType, ...]

    def __repr__(self) -> str:
        params = ", ".join(self.params)
        results = ", ".join(self.results)
        return f"({params}) -> ({results})"


@dataclass(frozen=True)
class ResizableLimits:
    """Memory or table limits."""

    initial: int
    maximum: int | None = None


@dataclass(frozen=True)
class MemoryType:
    """Memory type with limits."""

    limits: ResizableLimits


@dataclass(frozen=True)
class TableType:
    """Table type with element type and limits."""

    element_type: ValType
    limits: ResizableLimits


@dataclass(frozen=True)
class GlobalType:
    """Global type with value type and mutability."""

    content_type: ValType
    mutable: bool


ImportDesc = Union[int, TableType, MemoryType, GlobalType, None]


@dataclass(frozen=True)
class ImportEntry:
    """An import entry.

    ``desc`` is a type index for functions, or the table, memory or global
    type. It is ``None`` only when ``kind`` is not a known ExternalKind.
    """

    module: str
    field: str
    kind: ExternalKind | int
    desc: ImportDesc


@dataclass(frozen=True)
class GlobalVariable:
    """Global variable declaration."""

    type: GlobalType
    init: bytes  # raw constant expression, including the end opcode


@dataclass(frozen=True)
class ExportEntry:
    """An export entry."""

    field: str
    kind: ExternalKind
    index: int


def _single_value(expr: bytes) -> int:
    stack = evaluate(expr)
    if len(stack) != 1:
        raise ValueError(f"offset expression left {len(stack)} values on the stack")
    return stack[0]


@dataclass(frozen=True)
class ElementSegment:
    """Element segment for table initialization."""

    index: int
    offset: bytes
    elems: tuple[int, ...]  # Function indices

    def offset_value(self) -> int:
        """Evaluate the offset expression."""
        return _single_value(self.offset)


@dataclass(frozen=True)
class DataSegment:
    """Data segment for memory initialization."""

    index: int
    offset: bytes
    data: bytes

    def offset_value(self) -> int:
        """Evaluate the offset expression."""
        return _single_value(self.offset)


@dataclass(frozen=True)
class LocalEntry:
    """A run of ``count`` locals of the same type."""

    count: int
    type: ValType


@dataclass(frozen=True)
class FunctionBody:
    """Local declarations and raw bytecode of one function."""

    locals: tuple[LocalEntry, ...]
    code: bytes

    def local_types(self) -> tuple[ValType, ...]:
        types: list[ValType] = []
        for entry in self.locals:
            types.extend([entry.type] * entry.count)
        return tuple(types)


@dataclass(frozen=True)
class Naming:
    index: int
    name: str


@dataclass(frozen=True)
class NameMap:
    names: tuple[Naming, ...] = ()

    def get(self, index: int) -> str | None:
        for naming in self.names:
            if naming.index == index:
                return naming.name
        return None


@dataclass(frozen=True)
class LocalNames:
    """Names of the locals of one function."""

    index: int
    local_map: NameMap


# Sections


@dataclass(frozen=True)
class CustomSection:
    """A custom section the decoder does not interpret."""

    id: ClassVar[SectionID] = SectionID.CUSTOM

    name: str
    payload: bytes


@dataclass(frozen=True)
class NameSection:
    """The ``name`` custom section with debug names."""

    id: ClassVar[SectionID] = SectionID.CUSTOM

    name: str = "name"
    module: str | None = None
    functions: NameMap | None = None
    locals: tuple[LocalNames, ...] | None = None


@dataclass(frozen=True)
class TypeSection:
    id: ClassVar[SectionID] = SectionID.TYPE

    entries: tuple[FuncType, ...]


@dataclass(frozen=True)
class ImportSection:
    id: ClassVar[SectionID] = SectionID.IMPORT

    entries: tuple[ImportEntry, ...]


@dataclass(frozen=True)
class FunctionSection:
    """Type indices of the functions defined in the module."""

    id: ClassVar[SectionID] = SectionID.FUNCTION

    types: tuple[int, ...]


@dataclass(frozen=True)
class TableSection:
    id: ClassVar[SectionID] = SectionID.TABLE

    entries: tuple[TableType, ...]


@dataclass(frozen=True)
class MemorySection:
    id: ClassVar[SectionID] = SectionID.MEMORY

    entries: tuple[MemoryType, ...]


@dataclass(frozen=True)
class GlobalSection:
    id: ClassVar[SectionID] = SectionID.GLOBAL

    globals: tuple[GlobalVariable, ...]


@dataclass(frozen=True)
class ExportSection:
    id: ClassVar[SectionID] = SectionID.EXPORT

    entries: tuple[ExportEntry, ...]


@dataclass(frozen=True)
class StartSection:
    """Index of the function run on instantiation."""

    id: ClassVar[SectionID] = SectionID.START

    index: int


@dataclass(frozen=True)
class ElementSection:
    id: ClassVar[SectionID] = SectionID.ELEMENT

    entries: tuple[ElementSegment, ...]


@dataclass(frozen=True)
class CodeSection:
    id: ClassVar[SectionID] = SectionID.CODE

    bodies: tuple[FunctionBody, ...]


@dataclass(frozen=True)
class DataSection:
    id: ClassVar[SectionID] = SectionID.DATA

    entries: tuple[DataSegment, ...]


Section = Union[
    CustomSection,
    NameSection,
    TypeSection,
    ImportSection,
    FunctionSection,
    TableSection,
    MemorySection,
    GlobalSection,
    ExportSection,
    StartSection,
    ElementSection,
    CodeSection,
    DataSection,
]


@dataclass(frozen=True)
class Module:
    """A decoded WebAssembly module.

    ``sections`` holds the known sections in the order they appear in the
    file. Sections of unknown kinds are skipped by the decoder.
    """

    version: int
    sections: tuple[Section, ...] = ()

    def find(self, section_id: SectionID) -> list[Section]:
        """Return all sections with the given id, in file order."""
        return [s for s in self.sections if s.id == section_id]

    def section(self, section_id: SectionID) -> Section | None:
        """Return the first section with the given id, if any."""
        for s in self.sections:
            if s.id == section_id:
                return s
        return None
