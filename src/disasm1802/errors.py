"""
DISASM1802 Error Hierarchy
==========================

This module defines the exception hierarchy for the whole package.
All exceptions inherit from Disasm1802Error, allowing callers to catch
every disassembler-related error with a single except clause.

Exception Hierarchy
-------------------
Disasm1802Error (base)
├── LoadError (reading input files)
│   ├── HexFormatError - malformed Intel HEX record
│   └── DefinitionFormatError - malformed definition file line
└── DisassemblyError (internal contract violations)
    ├── OpcodeTableError - two descriptors claim the same opcode
    └── DuplicateSymbolError - address already has a name

Design Philosophy
-----------------
Load errors are problems with user input and carry the location of the
offending line so the message points straight at it:

    program.hex:12:1: error: checksum mismatch (expected 3A, got 3B)
    hint: pass --no-checksum to load the file anyway

Disassembly errors indicate a defect in the program itself rather than
bad input: the engine is written so they never occur for a correctly
built opcode table and a correctly sequenced pair of passes.
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class Disasm1802Error(Exception):
    """
    Base exception for all DISASM1802 errors.

        try:
            image = load_hex_file("monitor.hex")
        except Disasm1802Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in an input file for error reporting.

    Attributes:
        filename: Name of the input file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int = 1

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Load Exceptions
# =============================================================================

class LoadError(Disasm1802Error):
    """
    Base exception for errors reading the image or definition files.

    Attributes:
        message: The error description
        location: Where in the file the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class HexFormatError(LoadError):
    """
    Invalid Intel HEX record.

    Raised when the image file contains:
    - A line that does not start with ':'
    - Non-hexadecimal digits or an odd number of digits
    - A byte count that disagrees with the record length
    - A checksum that does not match the record contents
    - Data that runs past address $FFFF
    """
    pass


class DefinitionFormatError(LoadError):
    """
    Invalid line in a definition file.

    Raised for unknown area keywords, lines with a single field,
    and addresses that are not valid hexadecimal numbers.
    """
    pass


# =============================================================================
# Disassembly Exceptions
# =============================================================================

class DisassemblyError(Disasm1802Error):
    """Base exception for contract violations inside the disassembler."""
    pass


class OpcodeTableError(DisassemblyError):
    """
    The instruction set claims an opcode more than once.

    The CDP1802 table is hand-verified, so this only fires if someone
    edits the instruction list and introduces an overlapping range.
    """

    def __init__(self, code: int, existing: str, incoming: str):
        self.code = code
        self.existing = existing
        self.incoming = incoming
        super().__init__(
            f"opcode ${code:02X} claimed by both '{existing}' and '{incoming}'"
        )


class DuplicateSymbolError(DisassemblyError):
    """
    An address already has a name bound to it.

    Callers must check SymbolTable.has_name() before adding. The
    definition loader relies on that check to let the first name
    loaded for an address win.
    """

    def __init__(self, address: int, existing: str, incoming: str):
        self.address = address
        self.existing = existing
        self.incoming = incoming
        super().__init__(
            f"address ${address:04X} is already named '{existing}' "
            f"(cannot rebind to '{incoming}')"
        )
