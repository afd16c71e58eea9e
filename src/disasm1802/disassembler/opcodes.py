"""
CDP1802 Instruction Set Definition
==================================

This module defines the RCA CDP1802 instruction set and builds the
256-entry decode table used by the disassembler.

The CDP1802 has sixteen 16-bit registers (R0-RF) and a single 8-bit
accumulator (D). Most instructions are a single byte; several of them
carry a register or I/O device number in the low bits of the opcode.

Operand Shapes
--------------
1. **NONE**: Single byte, nothing embedded (e.g., IDL, SEQ, ADD)
2. **REG_DEST**: Register in the low nibble, R0-RF (e.g., INC R3 -> $13)
3. **REG_SRC_NONZERO**: Register in the low nibble, R1-RF only.
   LDN R0 would be $00, which is IDL instead.
4. **DEVICE**: Device in the low three bits, 1-7 (e.g., OUT 4 -> $64).
   Device 0 encodes IRX ($60) and the unused $68.
5. **IMMEDIATE8**: One byte of immediate data (e.g., LDI #05 -> $F8 $05)
6. **SHORT_ADDR8**: One byte, the low half of a target in the same page
   (e.g., BR -> $30 $xx)
7. **LONG_ADDR16**: Two bytes, a full 16-bit target, high byte first
   (e.g., LBR $1234 -> $C0 $12 $34)

Reference
---------
- RCA CDP1802 User Manual (MPM-201)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional, Sequence

from disasm1802.errors import OpcodeTableError


# =============================================================================
# Operand Shape Enumeration
# =============================================================================

class OperandShape(Enum):
    """
    What follows the opcode byte and which opcode bits are an operand.
    """
    NONE = auto()
    REG_DEST = auto()
    REG_SRC_NONZERO = auto()
    DEVICE = auto()
    IMMEDIATE8 = auto()
    SHORT_ADDR8 = auto()
    LONG_ADDR16 = auto()

    @property
    def operand_size(self) -> int:
        """Number of bytes that follow the opcode."""
        if self in (OperandShape.IMMEDIATE8, OperandShape.SHORT_ADDR8):
            return 1
        if self is OperandShape.LONG_ADDR16:
            return 2
        return 0

    @property
    def is_branch(self) -> bool:
        """True for shapes whose operand is a target address."""
        return self in (OperandShape.SHORT_ADDR8, OperandShape.LONG_ADDR16)


# =============================================================================
# Instruction Descriptor
# =============================================================================

@dataclass(frozen=True)
class InstructionDescriptor:
    """
    One entry of the instruction set.

    Attributes:
        mnemonic: The instruction mnemonic (e.g., "LDI", "BNZ")
        base_code: The lowest opcode of the range this entry claims
        shape: How the operand is encoded
    """
    mnemonic: str
    base_code: int
    shape: OperandShape

    def __repr__(self) -> str:
        return f"InstructionDescriptor({self.mnemonic}, ${self.base_code:02X}, {self.shape.name})"


ILLEGAL_MNEMONIC = "???"


def claimed_codes(descriptor: InstructionDescriptor) -> range:
    """
    Return the opcodes a descriptor occupies in the decode table.

    REG_DEST claims base+0..15, REG_SRC_NONZERO base+1..15, DEVICE
    base+1..7; every other shape claims only the base code.
    """
    base = descriptor.base_code
    if descriptor.shape is OperandShape.REG_DEST:
        return range(base, base + 16)
    if descriptor.shape is OperandShape.REG_SRC_NONZERO:
        return range(base + 1, base + 16)
    if descriptor.shape is OperandShape.DEVICE:
        return range(base + 1, base + 8)
    return range(base, base + 1)


def _op(mnemonic: str, base_code: int, shape: OperandShape = OperandShape.NONE) -> InstructionDescriptor:
    return InstructionDescriptor(mnemonic, base_code, shape)


_REG = OperandShape.REG_DEST
_REG1 = OperandShape.REG_SRC_NONZERO
_DEV = OperandShape.DEVICE
_IMM = OperandShape.IMMEDIATE8
_SHORT = OperandShape.SHORT_ADDR8
_LONG = OperandShape.LONG_ADDR16


# =============================================================================
# Instruction Set
# =============================================================================
# Grouped as in the RCA user manual. Order matters only for readability:
# construction rejects any code claimed twice, so IDL ($00) and LDN
# ($01-$0F), or IRX ($60) and OUT ($61-$67), can appear in any order.
# =============================================================================

INSTRUCTION_SET: List[InstructionDescriptor] = [
    # Control
    _op("IDL", 0x00),
    _op("NOP", 0xC4),
    _op("SEP", 0xD0, _REG),
    _op("SEX", 0xE0, _REG),
    _op("SEQ", 0x7B),
    _op("REQ", 0x7A),
    _op("SAV", 0x78),
    _op("MARK", 0x79),
    _op("RET", 0x70),
    _op("DIS", 0x71),

    # Memory reference
    _op("LDN", 0x00, _REG1),
    _op("LDA", 0x40, _REG),
    _op("LDX", 0xF0),
    _op("LDXA", 0x72),
    _op("LDI", 0xF8, _IMM),
    _op("STR", 0x50, _REG),
    _op("STXD", 0x73),

    # Register operations
    _op("INC", 0x10, _REG),
    _op("DEC", 0x20, _REG),
    _op("IRX", 0x60),
    _op("GLO", 0x80, _REG),
    _op("PLO", 0xA0, _REG),
    _op("GHI", 0x90, _REG),
    _op("PHI", 0xB0, _REG),

    # Logic operations
    _op("OR", 0xF1),
    _op("ORI", 0xF9, _IMM),
    _op("XOR", 0xF3),
    _op("XRI", 0xFB, _IMM),
    _op("AND", 0xF2),
    _op("ANI", 0xFA, _IMM),
    _op("SHR", 0xF6),
    _op("SHRC", 0x76),
    _op("SHL", 0xFE),
    _op("SHLC", 0x7E),

    # Arithmetic operations
    _op("ADD", 0xF4),
    _op("ADI", 0xFC, _IMM),
    _op("ADC", 0x74),
    _op("ADCI", 0x7C, _IMM),
    _op("SD", 0xF5),
    _op("SDI", 0xFD, _IMM),
    _op("SDB", 0x75),
    _op("SDBI", 0x7D, _IMM),
    _op("SM", 0xF7),
    _op("SMI", 0xFF, _IMM),
    _op("SMB", 0x77),
    _op("SMBI", 0x7F, _IMM),

    # Short branch (target in the current page)
    _op("BR", 0x30, _SHORT),
    _op("BZ", 0x32, _SHORT),
    _op("BNZ", 0x3A, _SHORT),
    _op("BDF", 0x33, _SHORT),
    _op("BNF", 0x3B, _SHORT),
    _op("BQ", 0x31, _SHORT),
    _op("BNQ", 0x39, _SHORT),
    _op("B1", 0x34, _SHORT),
    _op("BN1", 0x3C, _SHORT),
    _op("B2", 0x35, _SHORT),
    _op("BN2", 0x3D, _SHORT),
    _op("B3", 0x36, _SHORT),
    _op("BN3", 0x3E, _SHORT),
    _op("B4", 0x37, _SHORT),
    _op("BN4", 0x3F, _SHORT),

    # Long branch
    _op("LBR", 0xC0, _LONG),
    _op("LBZ", 0xC2, _LONG),
    _op("LBNZ", 0xCA, _LONG),
    _op("LBDF", 0xC3, _LONG),
    _op("LBNF", 0xCB, _LONG),
    _op("LBQ", 0xC1, _LONG),
    _op("LBNQ", 0xC9, _LONG),

    # Skip
    _op("SKP", 0x38),
    _op("LSKP", 0xC8),
    _op("LSZ", 0xCE),
    _op("LSNZ", 0xC6),
    _op("LSDF", 0xCF),
    _op("LSNF", 0xC7),
    _op("LSQ", 0xCD),
    _op("LSNQ", 0xC5),
    _op("LSIE", 0xCC),

    # Input-output
    _op("OUT", 0x60, _DEV),
    _op("INP", 0x68, _DEV),
]


# =============================================================================
# Decode Table
# =============================================================================

class OpcodeTable:
    """
    256-entry decode table mapping an opcode byte to its descriptor.

    The table is built once from a declarative instruction list by
    expanding each descriptor over the codes it claims. Codes nobody
    claims decode to a placeholder with the "???" mnemonic, so lookup
    never fails.

    Attributes:
        descriptors: The instruction list the table was built from
    """

    def __init__(self, descriptors: Optional[Sequence[InstructionDescriptor]] = None):
        """
        Build the decode table.

        Args:
            descriptors: Instruction list to expand (default: INSTRUCTION_SET)

        Raises:
            OpcodeTableError: If two descriptors claim the same code
        """
        self.descriptors = tuple(INSTRUCTION_SET if descriptors is None else descriptors)
        self._codes: List[Optional[InstructionDescriptor]] = [None] * 256

        for descriptor in self.descriptors:
            for code in claimed_codes(descriptor):
                existing = self._codes[code]
                if existing is not None:
                    raise OpcodeTableError(code, existing.mnemonic, descriptor.mnemonic)
                self._codes[code] = descriptor

        self._illegal = tuple(
            InstructionDescriptor(ILLEGAL_MNEMONIC, code, OperandShape.NONE)
            for code in range(256)
        )

    def lookup(self, code: int) -> InstructionDescriptor:
        """
        Find the descriptor for an opcode byte.

        Args:
            code: Opcode byte (0-255)

        Returns:
            The claiming descriptor, or the illegal-opcode placeholder.
        """
        descriptor = self._codes[code & 0xFF]
        if descriptor is None:
            return self._illegal[code & 0xFF]
        return descriptor

    def is_legal(self, code: int) -> bool:
        """Return True if some instruction claims this opcode."""
        return self._codes[code & 0xFF] is not None

    def illegal_codes(self) -> List[int]:
        """Return the opcodes no instruction claims, in ascending order."""
        return [code for code in range(256) if self._codes[code] is None]

    def validate(self) -> None:
        """
        Check every one of the 256 slots.

        Each slot must hold either a descriptor whose claimed range
        contains the slot's code, or nothing (decoded as illegal).

        Raises:
            OpcodeTableError: If a slot holds a descriptor that does not
                claim it
        """
        for code, descriptor in enumerate(self._codes):
            if descriptor is not None and code not in claimed_codes(descriptor):
                raise OpcodeTableError(code, descriptor.mnemonic, ILLEGAL_MNEMONIC)

    def dump(self) -> List[str]:
        """
        Render the table as a 16x16 grid of mnemonics.

        Rows are the low nibble, columns the high nibble, so a column
        lists one block of sixteen opcodes ($x0-$xF).
        """
        lines = []
        for lo in range(16):
            row = "".join(self.lookup(hi * 16 + lo).mnemonic.ljust(5) for hi in range(16))
            lines.append(row.rstrip())
        return lines
