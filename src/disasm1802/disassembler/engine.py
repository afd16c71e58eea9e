"""
CDP1802 Disassembler
====================

Turns a loaded memory image into an assembly listing.

The disassembler makes two identical walks over the image, from the
lowest to the highest loaded address:

1. **DISCOVER**: decode every CODE byte and give a name to each branch
   target that doesn't have one yet. Nothing is printed.
2. **EMIT**: repeat the walk, this time producing the listing. Because
   every target was named in the first walk, a label line can be
   written before the instruction it names, even for forward branches.

Both walks advance the address the same way, so the second walk never
meets a target the first one missed.

Listing Format
--------------
    RESET:
        LDI  #05
        PLO  R2
    L0004:
        BNZ  L0004
        #48, #45, #4C, #4C, #4F
        END

Usage:
    context = DisassemblyContext.create(image, defs.areas, defs.symbols)
    for line in CDP1802Disassembler(context).disassemble():
        print(line)
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, List, Optional, Sequence
import logging

from disasm1802.config import DisassemblerConfig
from disasm1802.disassembler.areas import AreaCursor, AreaKind, MemoryArea
from disasm1802.disassembler.opcodes import (
    InstructionDescriptor,
    OpcodeTable,
    OperandShape,
)
from disasm1802.disassembler.memory import MemoryImage
from disasm1802.disassembler.symbols import SymbolTable

# Logger for this module
logger = logging.getLogger(__name__)


LineSink = Callable[[str], None]


class PassMode(Enum):
    """Which of the two walks is running."""
    DISCOVER = auto()
    EMIT = auto()


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class DecodedInstruction:
    """
    Represents a single decoded CDP1802 instruction.

    Attributes:
        address: Memory address of the opcode byte
        opcode: The opcode byte
        descriptor: Instruction set entry the opcode belongs to
        operand: Register, device, immediate value or target address
            (None for shape NONE)
        raw_bytes: Opcode followed by any operand bytes
    """
    address: int
    opcode: int
    descriptor: InstructionDescriptor
    operand: Optional[int] = None
    raw_bytes: bytes = b""

    @property
    def mnemonic(self) -> str:
        return self.descriptor.mnemonic

    @property
    def shape(self) -> OperandShape:
        return self.descriptor.shape

    @property
    def size(self) -> int:
        return len(self.raw_bytes)

    @property
    def target(self) -> Optional[int]:
        """Branch target address, or None for non-branch instructions."""
        if self.shape.is_branch:
            return self.operand
        return None

    def operand_text(self, symbols: Optional[SymbolTable] = None) -> str:
        """
        Format the operand as it appears in the listing.

        Branch targets use the symbol table name when one is given,
        otherwise the address as four hex digits.
        """
        shape = self.shape
        if shape in (OperandShape.REG_DEST, OperandShape.REG_SRC_NONZERO):
            return f"R{self.operand}"
        if shape is OperandShape.DEVICE:
            return str(self.operand)
        if shape is OperandShape.IMMEDIATE8:
            return f"#{self.operand:02X}"
        if shape.is_branch:
            if symbols is not None:
                return symbols.get_name(self.operand)
            return f"{self.operand:04X}"
        return ""

    def format(self, symbols: Optional[SymbolTable] = None, mnemonic_width: int = 5) -> str:
        """Format as 'MNEMONIC operand' without indentation."""
        operand = self.operand_text(symbols)
        if not operand:
            return self.mnemonic
        return self.mnemonic.ljust(mnemonic_width) + operand

    def __str__(self) -> str:
        hex_bytes = " ".join(f"{b:02X}" for b in self.raw_bytes).ljust(8)
        return f"{self.address:04X}: {hex_bytes}  {self.format()}"


@dataclass
class DisassemblyContext:
    """
    Everything both walks need, passed around explicitly.

    Attributes:
        image: The loaded bytes and their extent
        areas: CODE/DATA areas ordered by start address
        symbols: User names, grown with generated names during DISCOVER
        opcodes: The decode table
        config: Listing layout settings
    """
    image: MemoryImage
    areas: List[MemoryArea]
    symbols: SymbolTable
    opcodes: OpcodeTable = field(default_factory=OpcodeTable)
    config: DisassemblerConfig = field(default_factory=DisassemblerConfig)

    @classmethod
    def create(
        cls,
        image: MemoryImage,
        areas: Sequence[MemoryArea],
        symbols: SymbolTable,
        config: Optional[DisassemblerConfig] = None,
        opcodes: Optional[OpcodeTable] = None,
    ) -> "DisassemblyContext":
        """Build a context, filling in the default table and config."""
        return cls(
            image=image,
            areas=list(areas),
            symbols=symbols,
            opcodes=opcodes or OpcodeTable(),
            config=config or DisassemblerConfig(),
        )


# =============================================================================
# Decoding
# =============================================================================

def decode_one(context: DisassemblyContext, address: int) -> DecodedInstruction:
    """
    Decode the instruction at an address.

    Operand bytes are read from memory following the opcode. Register
    and device numbers come from the opcode itself. Short branch
    targets stay in the page of the instruction; long branch targets
    are the two following bytes, high byte first.

    Unknown opcodes decode as "???" with no operand.
    """
    memory = context.image
    opcode = memory[address]
    descriptor = context.opcodes.lookup(opcode)
    shape = descriptor.shape
    raw = bytes(memory[address + i] for i in range(1 + shape.operand_size))

    operand: Optional[int] = None
    if shape in (OperandShape.REG_DEST, OperandShape.REG_SRC_NONZERO):
        operand = opcode & 0x0F
    elif shape is OperandShape.DEVICE:
        operand = opcode & 0x07
    elif shape is OperandShape.IMMEDIATE8:
        operand = raw[1]
    elif shape is OperandShape.SHORT_ADDR8:
        operand = (address & 0xFF00) | raw[1]
    elif shape is OperandShape.LONG_ADDR16:
        operand = (raw[1] << 8) | raw[2]

    return DecodedInstruction(
        address=address,
        opcode=opcode,
        descriptor=descriptor,
        operand=operand,
        raw_bytes=raw,
    )


# =============================================================================
# Two-Pass Disassembler
# =============================================================================

class CDP1802Disassembler:
    """
    Two-pass disassembler over a DisassemblyContext.

    discover() names branch targets, emit() produces the listing, and
    disassemble() runs both in order. emit() on its own is safe to call
    again: it never adds names that discover() didn't.
    """

    def __init__(self, context: DisassemblyContext):
        self.context = context

    def discover(self) -> None:
        """Walk the image once, naming every branch target found in code."""
        before = len(self.context.symbols)
        self.run_pass(PassMode.DISCOVER)
        logger.debug(f"discovered {len(self.context.symbols) - before} labels")

    def emit(self, sink: Optional[LineSink] = None) -> List[str]:
        """
        Walk the image again and produce the listing.

        Args:
            sink: Optional callable receiving each line as it is produced

        Returns:
            The listing lines
        """
        lines: List[str] = []

        def collect(line: str) -> None:
            lines.append(line)
            if sink is not None:
                sink(line)

        self.run_pass(PassMode.EMIT, collect)
        return lines

    def disassemble(self, sink: Optional[LineSink] = None) -> List[str]:
        """Run DISCOVER then EMIT and return the listing lines."""
        self.discover()
        return self.emit(sink)

    def run_pass(self, mode: PassMode, sink: Optional[LineSink] = None) -> None:
        """
        Walk the image from start to end.

        Args:
            mode: DISCOVER or EMIT
            sink: Receives listing lines; ignored in DISCOVER
        """
        context = self.context
        config = context.config
        symbols = context.symbols
        image = context.image
        indent = config.indent
        emit = mode is PassMode.EMIT

        def write(line: str) -> None:
            if emit and sink is not None:
                sink(line)

        cursor = AreaCursor(context.areas)
        data = ""

        def flush() -> None:
            nonlocal data
            if data:
                write(indent + data)
                data = ""

        addr = image.start
        while addr < image.end:
            if emit and symbols.has_name(addr):
                flush()
                write(f"{symbols.get_name(addr)}:")

            kind, changed = cursor.advance(addr)
            if changed:
                flush()

            if kind is AreaKind.CODE:
                instr = decode_one(context, addr)
                if not emit and instr.address + instr.size > image.end:
                    logger.warning(
                        f"{instr.mnemonic} at ${addr:04X} reads past end of image "
                        f"(${image.end:04X})"
                    )
                target = instr.target
                if target is not None and not symbols.has_name(target):
                    if emit:
                        logger.warning(f"label for ${target:04X} first seen in emit pass")
                    symbols.bind_target(target)
                write(indent + instr.format(symbols, config.mnemonic_width))
                addr += instr.size
            else:
                if data:
                    data += ", "
                data += f"#{image[addr]:02X}"
                if len(data) > config.data_line_width:
                    flush()
                addr += 1

        flush()
        write(indent + "END")
