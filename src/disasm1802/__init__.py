"""
DISASM1802 - Disassembler for the RCA CDP1802
=============================================

This package turns CDP1802 machine code into an assembly listing.

The program image is read from an Intel HEX file. An optional
definition file marks address ranges as CODE or DATA and gives names
to addresses. The disassembler then walks the image twice: the first
walk names every branch target, the second writes the listing with
labels, mnemonics, operands and inline data.

Main Components
---------------
- **disassembler**: opcode table, symbol table, areas, two-pass engine
- **loaders**: Intel HEX and definition file readers
- **cli**: the ``disasm1802`` command

Quick Start
-----------
    >>> from disasm1802 import (
    ...     CDP1802Disassembler, DisassemblyContext,
    ...     load_hex_file, load_optional_definitions,
    ... )
    >>> image = load_hex_file("monitor.hex")
    >>> defs = load_optional_definitions("monitor.def", image)
    >>> context = DisassemblyContext.create(image, defs.areas, defs.symbols)
    >>> for line in CDP1802Disassembler(context).disassemble():
    ...     print(line)

Or from the command line:
    $ disasm1802 monitor
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from disasm1802.config import DisassemblerConfig
from disasm1802.errors import (
    Disasm1802Error,
    SourceLocation,
    LoadError,
    HexFormatError,
    DefinitionFormatError,
    DisassemblyError,
    OpcodeTableError,
    DuplicateSymbolError,
)
from disasm1802.disassembler import (
    INSTRUCTION_SET,
    InstructionDescriptor,
    OpcodeTable,
    OperandShape,
    MemoryImage,
    SymbolTable,
    AreaKind,
    MemoryArea,
    CDP1802Disassembler,
    DecodedInstruction,
    DisassemblyContext,
    PassMode,
    decode_one,
)
from disasm1802.loaders import (
    Definitions,
    load_hex_file,
    parse_hex,
    load_definitions,
    load_optional_definitions,
    parse_definitions,
    default_definitions,
)

__all__ = [
    "__version__",
    # Configuration
    "DisassemblerConfig",
    # Exception hierarchy
    "Disasm1802Error",
    "SourceLocation",
    "LoadError",
    "HexFormatError",
    "DefinitionFormatError",
    "DisassemblyError",
    "OpcodeTableError",
    "DuplicateSymbolError",
    # Disassembler
    "INSTRUCTION_SET",
    "InstructionDescriptor",
    "OpcodeTable",
    "OperandShape",
    "MemoryImage",
    "SymbolTable",
    "AreaKind",
    "MemoryArea",
    "CDP1802Disassembler",
    "DecodedInstruction",
    "DisassemblyContext",
    "PassMode",
    "decode_one",
    # Loaders
    "Definitions",
    "load_hex_file",
    "parse_hex",
    "load_definitions",
    "load_optional_definitions",
    "parse_definitions",
    "default_definitions",
]
