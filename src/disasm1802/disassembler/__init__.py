"""
DISASM1802 Disassembler Module
==============================

The decode-and-label engine for RCA CDP1802 machine code:

- **opcodes**: the instruction set and its 256-entry decode table
- **memory**: the 64 KiB memory image
- **symbols**: address-to-label mapping
- **areas**: CODE/DATA areas and the forward-only area cursor
- **engine**: the two-pass (discover, emit) disassembler

Usage:
    from disasm1802.disassembler import CDP1802Disassembler, DisassemblyContext

    context = DisassemblyContext.create(image, defs.areas, defs.symbols)
    lines = CDP1802Disassembler(context).disassemble()
"""

from .opcodes import (
    INSTRUCTION_SET,
    InstructionDescriptor,
    OpcodeTable,
    OperandShape,
    claimed_codes,
)
from .memory import MEMORY_SIZE, MemoryImage
from .symbols import SymbolTable
from .areas import AreaCursor, AreaKind, AreaStep, MemoryArea, sort_areas
from .engine import (
    CDP1802Disassembler,
    DecodedInstruction,
    DisassemblyContext,
    PassMode,
    decode_one,
)

__all__ = [
    "INSTRUCTION_SET",
    "InstructionDescriptor",
    "OpcodeTable",
    "OperandShape",
    "claimed_codes",
    "MEMORY_SIZE",
    "MemoryImage",
    "SymbolTable",
    "AreaCursor",
    "AreaKind",
    "AreaStep",
    "MemoryArea",
    "sort_areas",
    "CDP1802Disassembler",
    "DecodedInstruction",
    "DisassemblyContext",
    "PassMode",
    "decode_one",
]
