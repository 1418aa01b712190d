"""WebAssembly opcodes that can appear in constant expressions."""

END = 0x0B
GLOBAL_GET = 0x23
I32_CONST = 0x41
I64_CONST = 0x42
F32_CONST = 0x43
F64_CONST = 0x44
I32_ADD = 0x6A
I32_SUB = 0x6B
I32_MUL = 0x6C
I64_ADD = 0x7C
I64_SUB = 0x7D
I64_MUL = 0x7E
REF_NULL = 0xD0
REF_FUNC = 0xD2

# Opcode to name mapping
OPCODE_NAMES = {
    END: "end",
    GLOBAL_GET: "global.get",
    I32_CONST: "i32.const",
    I64_CONST: "i64.const",
    F32_CONST: "f32.const",
    F64_CONST: "f64.const",
    I32_ADD: "i32.add",
    I32_SUB: "i32.sub",
    I32_MUL: "i32.mul",
    I64_ADD: "i64.add",
    I64_SUB: "i64.sub",
    I64_MUL: "i64.mul",
    REF_NULL: "ref.null",
    REF_FUNC: "ref.func",
}

# Extended constant expressions, no immediate
NO_IMMEDIATE = {
    I32_ADD,
    I32_SUB,
    I32_MUL,
    I64_ADD,
    I64_SUB,
    I64_MUL,
}

# Opcodes whose immediate is a single LEB128 integer
LEB128_IMMEDIATE = {
    GLOBAL_GET,
    I32_CONST,
    I64_CONST,
    REF_FUNC,
}

# Opcodes with a fixed-width immediate, mapped to its size in bytes
FIXED_IMMEDIATE = {
    F32_CONST: 4,
    F64_CONST: 8,
    REF_NULL: 1,  # reference type
}
