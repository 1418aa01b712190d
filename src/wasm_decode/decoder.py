"""WebAssembly binary format decoder."""

import logging
from pathlib import Path
from typing import BinaryIO, Callable, TypeVar

from .errors import (
    BadMagicError,
    CorruptionError,
    DecodeError,
    SectionLengthMismatchError,
    UnknownNameDiscriminantError,
    UnsupportedVersionError,
    context,
)
from .eval import read_const_expr
from .leb128 import (
    decode_varint7,
    decode_varuint1,
    decode_varuint7,
    decode_varuint32,
)
from .reader import BinaryReader
from .types import (
    FORM_FUNC,
    VALTYPE_ENCODING,
    CodeSection,
    CustomSection,
    DataSection,
    DataSegment,
    ElementSection,
    ElementSegment,
    ExportEntry,
    ExportSection,
    ExternalKind,
    FuncType,
    FunctionBody,
    FunctionSection,
    GlobalSection,
    GlobalType,
    GlobalVariable,
    ImportEntry,
    ImportSection,
    LocalEntry,
    LocalNames,
    MemorySection,
    MemoryType,
    Module,
    NameMap,
    NameSection,
    Naming,
    ResizableLimits,
    Section,
    SectionID,
    StartSection,
    TableSection,
    TableType,
    TypeSection,
    ValType,
)

log = logging.getLogger(__name__)

T = TypeVar("T")

# WASM magic number and version
WASM_MAGIC = b"\x00asm"
WASM_VERSION = 1

# Custom section holding debug names
NAME_SECTION = "name"

# Name subsection types
NAME_TYPE_MODULE = 0x00
NAME_TYPE_FUNCTION = 0x01
NAME_TYPE_LOCAL = 0x02


def decode_vector(reader: BinaryReader, decode_entry: Callable[[BinaryReader], T]) -> tuple[T, ...]:
    """Decode a count-prefixed vector of entries."""
    with context("read count"):
        count = decode_varuint32(reader)
    entries = []
    for i in range(count):
        with context(f"entry {i}"):
            entries.append(decode_entry(reader))
    return tuple(entries)


def decode_name(reader: BinaryReader) -> str:
    """Decode a UTF-8 name (length-prefixed byte vector)."""
    with context("read name length"):
        length = decode_varuint32(reader)
    offset = reader.position
    data = reader.read_bytes(length)
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"invalid UTF-8 in name: {e}", offset) from e


def _lookup_valtype(encoding: int, offset: int) -> ValType:
    if encoding not in VALTYPE_ENCODING:
        raise DecodeError(f"unknown value type 0x{encoding:02x}", offset)
    return VALTYPE_ENCODING[encoding]


def decode_valtype(reader: BinaryReader) -> ValType:
    """Decode a value type stored as a varint7."""
    offset = reader.position
    return _lookup_valtype(decode_varint7(reader) & 0x7F, offset)


def decode_raw_valtype(reader: BinaryReader) -> ValType:
    """Decode a value type stored as a plain byte."""
    offset = reader.position
    return _lookup_valtype(reader.read_byte(), offset)


def decode_limits(reader: BinaryReader) -> ResizableLimits:
    """Decode resizable limits (initial, optional maximum)."""
    with context("flags"):
        has_max = decode_varuint1(reader)
    with context("initial"):
        initial = decode_varuint32(reader)
    if has_max == 0:
        return ResizableLimits(initial)
    with context("maximum"):
        maximum = decode_varuint32(reader)
    return ResizableLimits(initial, maximum)


def decode_func_type(reader: BinaryReader) -> FuncType:
    """Decode a function type."""
    offset = reader.position
    with context("read form"):
        form = decode_varint7(reader)
    if form != FORM_FUNC:
        raise DecodeError(
            f"expected function type form 0x60, got 0x{form & 0x7F:02x}", offset
        )

    with context("read function param types"):
        params = decode_vector(reader, decode_valtype)

    offset = reader.position
    with context("read number of returns from function"):
        result_count = decode_varuint1(reader)
    if result_count > 1:
        raise DecodeError(f"function has {result_count} results, at most 1 is supported", offset)
    with context("read function return type"):
        results = tuple(decode_valtype(reader) for _ in range(result_count))

    return FuncType(form, params, results)


def decode_type_section(reader: BinaryReader, size: int) -> TypeSection:
    """Decode the type section."""
    return TypeSection(decode_vector(reader, decode_func_type))


def decode_import_entry(reader: BinaryReader) -> ImportEntry:
    with context("read module name"):
        module = decode_name(reader)
    with context("read field name"):
        field = decode_name(reader)
    with context("read kind"):
        kind = reader.read_byte()

    if kind == ExternalKind.FUNCTION:
        with context("read function type index"):
            type_idx = decode_varuint32(reader)
        return ImportEntry(module, field, ExternalKind.FUNCTION, type_idx)

    if kind == ExternalKind.TABLE:
        with context("read table element type"):
            elem_type = decode_valtype(reader)
        with context("read table resizable limits"):
            limits = decode_limits(reader)
        return ImportEntry(module, field, ExternalKind.TABLE, TableType(elem_type, limits))

    if kind == ExternalKind.MEMORY:
        with context("read memory resizable limits"):
            limits = decode_limits(reader)
        return ImportEntry(module, field, ExternalKind.MEMORY, MemoryType(limits))

    if kind == ExternalKind.GLOBAL:
        with context("read global content type"):
            content_type = decode_valtype(reader)
        with context("read global mutability"):
            mutable = decode_varuint1(reader) == 1
        return ImportEntry(
            module, field, ExternalKind.GLOBAL, GlobalType(content_type, mutable)
        )

    # Unknown kinds carry no descriptor we could read; keep the entry as is
    log.debug("import %s.%s has unknown kind 0x%02x", module, field, kind)
    return ImportEntry(module, field, kind, None)


def decode_import_section(reader: BinaryReader, size: int) -> ImportSection:
    """Decode the import section."""
    return ImportSection(decode_vector(reader, decode_import_entry))


def decode_function_section(reader: BinaryReader, size: int) -> FunctionSection:
    """Decode the function section (just type indices)."""
    return FunctionSection(decode_vector(reader, decode_varuint32))


def decode_table_type(reader: BinaryReader) -> TableType:
    with context("read table element type"):
        elem_type = decode_raw_valtype(reader)
    with context("read table resizable limits"):
        limits = decode_limits(reader)
    return TableType(elem_type, limits)


def decode_table_section(reader: BinaryReader, size: int) -> TableSection:
    """Decode the table section."""
    return TableSection(decode_vector(reader, decode_table_type))


def decode_memory_type(reader: BinaryReader) -> MemoryType:
    with context("read memory resizable limits"):
        return MemoryType(decode_limits(reader))


def decode_memory_section(reader: BinaryReader, size: int) -> MemorySection:
    """Decode the memory section."""
    return MemorySection(decode_vector(reader, decode_memory_type))


def decode_global_variable(reader: BinaryReader) -> GlobalVariable:
    with context("read global content type"):
        content_type = decode_valtype(reader)
    with context("read global mutability"):
        mutable = reader.read_byte() != 0
    with context("read global init expression"):
        init = read_const_expr(reader)
    return GlobalVariable(GlobalType(content_type, mutable), init)


def decode_global_section(reader: BinaryReader, size: int) -> GlobalSection:
    """Decode the global section."""
    return GlobalSection(decode_vector(reader, decode_global_variable))


def decode_export_entry(reader: BinaryReader) -> ExportEntry:
    with context("read field"):
        field = decode_name(reader)
    offset = reader.position
    with context("read kind"):
        kind = decode_varuint7(reader)
    if kind > ExternalKind.GLOBAL:
        raise DecodeError(f"unknown export kind 0x{kind:02x}", offset)
    with context("read index"):
        index = decode_varuint32(reader)
    return ExportEntry(field, ExternalKind(kind), index)


def decode_export_section(reader: BinaryReader, size: int) -> ExportSection:
    """Decode the export section."""
    return ExportSection(decode_vector(reader, decode_export_entry))


def decode_start_section(reader: BinaryReader, size: int) -> StartSection:
    """Decode the start section."""
    with context("read start index"):
        return StartSection(decode_varuint32(reader))


def decode_element_segment(reader: BinaryReader) -> ElementSegment:
    with context("read element index"):
        index = decode_varuint32(reader)
    with context("read offset expression"):
        offset = read_const_expr(reader)
    with context("read element function indices"):
        elems = decode_vector(reader, decode_varuint32)
    return ElementSegment(index, offset, elems)


def decode_element_section(reader: BinaryReader, size: int) -> ElementSection:
    """Decode the element section."""
    return ElementSection(decode_vector(reader, decode_element_segment))


def decode_local_entry(reader: BinaryReader) -> LocalEntry:
    with context("read local entry count"):
        count = decode_varuint32(reader)
    with context("read local entry value type"):
        valtype = decode_raw_valtype(reader)
    return LocalEntry(count, valtype)


def decode_function_body(reader: BinaryReader) -> FunctionBody:
    """Decode one function body.

    The bytecode runs from the end of the local declarations up to the end
    offset given by the body size, measured on the cursor.
    """
    with context("read body size"):
        body_size = decode_varuint32(reader)
    end = reader.position + body_size

    with context("read locals"):
        locals_ = decode_vector(reader, decode_local_entry)

    if reader.position > end:
        raise DecodeError(
            f"local declarations overrun function body by {reader.position - end} bytes",
            reader.position,
        )
    with context("read function bytecode"):
        code = reader.read_bytes(end - reader.position)

    return FunctionBody(locals_, code)


def decode_code_section(reader: BinaryReader, size: int) -> CodeSection:
    """Decode the code section."""
    return CodeSection(decode_vector(reader, decode_function_body))


def decode_data_segment(reader: BinaryReader) -> DataSegment:
    with context("read data segment index"):
        index = decode_varuint32(reader)
    with context("read data section offset initializer"):
        offset = read_const_expr(reader)
    with context("read data section size"):
        length = decode_varuint32(reader)
    with context("read data section data"):
        data = reader.read_bytes(length)
    return DataSegment(index, offset, data)


def decode_data_section(reader: BinaryReader, size: int) -> DataSection:
    """Decode the data section."""
    return DataSection(decode_vector(reader, decode_data_segment))


def decode_naming(reader: BinaryReader) -> Naming:
    with context("read naming index"):
        index = decode_varuint32(reader)
    with context("read name"):
        name = decode_name(reader)
    return Naming(index, name)


def decode_name_map(reader: BinaryReader) -> NameMap:
    return NameMap(decode_vector(reader, decode_naming))


def decode_local_names(reader: BinaryReader) -> LocalNames:
    with context("read local func index"):
        index = decode_varuint32(reader)
    with context("read local name map"):
        local_map = decode_name_map(reader)
    return LocalNames(index, local_map)


def decode_name_section(reader: BinaryReader, size: int) -> NameSection:
    """Decode the subsections of a ``name`` custom section.

    ``size`` is what is left of the section after its name. Subsections are
    read until it is used up; their own length fields are informational.
    """
    end = reader.position + size
    module = None
    functions = None
    locals_ = None

    while reader.position < end:
        offset = reader.position
        with context("read name type"):
            name_type = reader.read_byte()
        with context("read payload length"):
            decode_varuint32(reader)

        if name_type == NAME_TYPE_MODULE:
            with context("read module name"):
                module = decode_name(reader)
        elif name_type == NAME_TYPE_FUNCTION:
            with context("read function name map"):
                functions = decode_name_map(reader)
        elif name_type == NAME_TYPE_LOCAL:
            with context("read local names"):
                locals_ = decode_vector(reader, decode_local_names)
        else:
            raise UnknownNameDiscriminantError(name_type, offset)

    return NameSection(NAME_SECTION, module, functions, locals_)


def decode_custom_section(reader: BinaryReader, size: int) -> CustomSection | NameSection:
    """Decode a custom section, or the name section."""
    start = reader.position
    with context("read section name length"):
        name_length = decode_varuint32(reader)
    with context("read section name"):
        raw_name = reader.read_bytes(name_length)

    # Length prefix plus name, as encoded; a padded prefix counts in full
    consumed = reader.position - start
    if consumed > size:
        raise SectionLengthMismatchError(size, consumed, reader.position)
    remaining = size - consumed

    try:
        name = raw_name.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"invalid UTF-8 in section name: {e}", reader.position) from e

    if name == NAME_SECTION:
        return decode_name_section(reader, remaining)

    with context("read custom section payload"):
        payload = reader.read_bytes(remaining)
    return CustomSection(name, payload)


SECTION_DECODERS: dict[SectionID, Callable[[BinaryReader, int], Section]] = {
    SectionID.CUSTOM: decode_custom_section,
    SectionID.TYPE: decode_type_section,
    SectionID.IMPORT: decode_import_section,
    SectionID.FUNCTION: decode_function_section,
    SectionID.TABLE: decode_table_section,
    SectionID.MEMORY: decode_memory_section,
    SectionID.GLOBAL: decode_global_section,
    SectionID.EXPORT: decode_export_section,
    SectionID.START: decode_start_section,
    SectionID.ELEMENT: decode_element_section,
    SectionID.CODE: decode_code_section,
    SectionID.DATA: decode_data_section,
}


def decode_section(reader: BinaryReader, after_known: bool = False) -> Section | None:
    """Decode a single section.

    Returns None for a skipped section of unknown kind. ``after_known`` says
    whether a known section was decoded before this one; an id past the last
    known kind is then taken as a sign that the cursor is out of sync.
    """
    header_offset = reader.position
    with context("read section id"):
        section_id = decode_varuint7(reader)
    with context("read section payload length"):
        size = decode_varuint32(reader)

    if section_id not in SECTION_DECODERS:
        log.debug(
            "skipping section 0x%02x of %d bytes at 0x%06x",
            section_id,
            size,
            header_offset,
        )
        with context(f"discard section payload, {size} bytes"):
            reader.skip(size)
        if after_known and section_id > SectionID.DATA:
            raise CorruptionError(
                f"data corrupted; section id 0x{section_id:02x} not valid",
                header_offset,
            )
        return None

    kind = SectionID(section_id)
    log.debug(
        "section %s of %d bytes at 0x%06x", kind.name.lower(), size, header_offset
    )
    start = reader.position
    with context(f"{kind.name.lower()} section"):
        section = SECTION_DECODERS[kind](reader, size)
        consumed = reader.position - start
        if consumed != size:
            raise SectionLengthMismatchError(size, consumed, reader.position)
    return section


def decode_preamble(reader: BinaryReader) -> int:
    """Check the magic number and version, returning the version."""
    with context("read file header"):
        magic = reader.read_bytes(4)
    if magic != WASM_MAGIC:
        raise BadMagicError(
            f"not a wasm file: invalid magic number {magic!r}, expected {WASM_MAGIC!r}",
            0,
        )

    with context("read version"):
        version = int.from_bytes(reader.read_bytes(4), "little")
    if version != WASM_VERSION:
        raise UnsupportedVersionError(f"unsupported version {version}", 4)
    return version


def decode_module(
    source: bytes | bytearray | memoryview | BinaryIO | Path,
    *,
    max_varint_bytes: int | None = None,
) -> Module:
    """Decode a WebAssembly module from binary format.

    Args:
        source: WASM bytes, file-like object, or path to .wasm file
        max_varint_bytes: Reject LEB128 integers longer than this. The
            default accepts any length.

    Returns:
        Decoded Module object

    Raises:
        DecodeError: If the binary format is invalid
    """
    # Handle different source types
    if isinstance(source, Path):
        data = source.read_bytes()
    elif isinstance(source, (bytes, bytearray, memoryview)):
        data = bytes(source)
    else:
        # Assume file-like object
        data = source.read()

    reader = BinaryReader(data, max_varint_bytes=max_varint_bytes)
    version = decode_preamble(reader)
    log.debug("decoding wasm module version %d, %d bytes", version, len(data))

    sections: list[Section] = []
    while not reader.eof():
        with context("parse section"):
            section = decode_section(reader, after_known=bool(sections))
        if section is not None:
            sections.append(section)

    return Module(version, tuple(sections))
