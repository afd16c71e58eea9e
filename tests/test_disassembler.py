"""
Unit Tests for the Two-Pass Disassembler
========================================

This module tests the decode-and-label engine.

Test coverage includes:
- Every operand shape (register, device, immediate, short and long branch)
- Label discovery, including forward references and user-supplied names
- CODE/DATA alternation and data-line wrapping
- Data runs split at area boundaries and labels
- Determinism and label stability across passes
- Edge cases (illegal opcodes, operands past the end of the image)
"""

import logging

import pytest

from disasm1802.config import DisassemblerConfig
from disasm1802.disassembler import (
    AreaKind,
    CDP1802Disassembler,
    DisassemblyContext,
    MemoryArea,
    MemoryImage,
    OperandShape,
    PassMode,
    SymbolTable,
    decode_one,
)


CODE = AreaKind.CODE
DATA = AreaKind.DATA


def make_context(code, start=0x0000, areas=None, symbols=None, config=None):
    """Build a context for bytes at an address (all code unless areas given)."""
    image = MemoryImage.from_bytes(bytes(code), start)
    if areas is None:
        areas = [MemoryArea(CODE, image.start, image.end)]
    return DisassemblyContext.create(
        image,
        areas,
        symbols if symbols is not None else SymbolTable(),
        config,
    )


def listing(code, **kwargs):
    return CDP1802Disassembler(make_context(code, **kwargs)).disassemble()


# =============================================================================
# Single Instruction Decoding
# =============================================================================

class TestDecodeOne:
    """Tests for decode_one() across operand shapes."""

    def test_none_shape(self):
        instr = decode_one(make_context([0xC4]), 0x0000)

        assert instr.mnemonic == "NOP"
        assert instr.operand is None
        assert instr.size == 1
        assert instr.format() == "NOP"

    def test_register_dest(self):
        """$85 is GLO R5."""
        instr = decode_one(make_context([0x85]), 0x0000)

        assert instr.mnemonic == "GLO"
        assert instr.operand == 5
        assert instr.size == 1
        assert instr.format() == "GLO  R5"

    def test_register_src_nonzero(self):
        instr = decode_one(make_context([0x0F]), 0x0000)

        assert instr.mnemonic == "LDN"
        assert instr.shape is OperandShape.REG_SRC_NONZERO
        assert instr.format() == "LDN  R15"

    def test_device_output(self):
        instr = decode_one(make_context([0x64]), 0x0000)

        assert instr.mnemonic == "OUT"
        assert instr.operand == 4
        assert instr.format() == "OUT  4"

    def test_device_input(self):
        instr = decode_one(make_context([0x6F]), 0x0000)

        assert instr.mnemonic == "INP"
        assert instr.operand == 7

    def test_immediate(self):
        instr = decode_one(make_context([0xF8, 0x05]), 0x0000)

        assert instr.mnemonic == "LDI"
        assert instr.operand == 0x05
        assert instr.size == 2
        assert instr.raw_bytes == bytes([0xF8, 0x05])
        assert instr.format() == "LDI  #05"

    def test_short_branch_stays_in_page(self):
        """The target takes its high byte from the instruction address."""
        context = make_context([0x30, 0x40], start=0x0120)
        instr = decode_one(context, 0x0120)

        assert instr.mnemonic == "BR"
        assert instr.target == 0x0140
        assert instr.size == 2

    def test_short_branch_backward_in_page(self):
        context = make_context([0x3A, 0x00], start=0x05F0)
        assert decode_one(context, 0x05F0).target == 0x0500

    def test_long_branch_target_is_big_endian(self):
        """C0 12 34 at $2000 branches to $1234: high byte first."""
        context = make_context([0xC0, 0x12, 0x34], start=0x2000)
        instr = decode_one(context, 0x2000)

        assert instr.mnemonic == "LBR"
        assert instr.target == 0x1234
        assert instr.size == 3
        assert instr.format() == "LBR  1234"

    def test_long_branch_uses_both_bytes(self):
        """Not just the low byte substituted into the current address."""
        context = make_context([0xCA, 0x00, 0xFF], start=0x8000)
        assert decode_one(context, 0x8000).target == 0x00FF

    def test_target_uses_symbol_name(self):
        symbols = SymbolTable()
        symbols.add("MAIN", 0x1234)
        context = make_context([0xC0, 0x12, 0x34], symbols=symbols)

        assert decode_one(context, 0x0000).format(symbols) == "LBR  MAIN"

    def test_illegal_opcode(self):
        """$68 decodes as ??? and consumes only itself."""
        instr = decode_one(make_context([0x68, 0xF8]), 0x0000)

        assert instr.mnemonic == "???"
        assert instr.size == 1
        assert instr.format() == "???"

    def test_non_branch_has_no_target(self):
        assert decode_one(make_context([0xF8, 0x12]), 0x0000).target is None

    def test_str_includes_address_and_bytes(self):
        instr = decode_one(make_context([0xF8, 0x05], start=0x0100), 0x0100)
        assert str(instr).startswith("0100: F8 05")
        assert str(instr).endswith("LDI  #05")


# =============================================================================
# Listing Output
# =============================================================================

class TestListing:
    """Tests for the complete two-pass listing."""

    def test_trivial_program(self):
        """F8 05 3A 00 at $0000: LDI then a branch back to a generated label."""
        assert listing([0xF8, 0x05, 0x3A, 0x00]) == [
            "L0000:",
            "    LDI  #05",
            "    BNZ  L0000",
            "    END",
        ]

    def test_long_branch_listing(self):
        """A target outside the image is named but has no label line."""
        context = make_context([0xC0, 0x12, 0x34], start=0x2000)
        lines = CDP1802Disassembler(context).disassemble()

        assert lines == ["    LBR  L1234", "    END"]
        assert context.symbols.get_name(0x1234) == "L1234"
        assert context.symbols.has_name(0x1234)

    def test_forward_reference(self):
        """A label for a later address is printed before its instruction."""
        assert listing([0x30, 0x03, 0xC4, 0xC4]) == [
            "    BR   L0003",
            "    NOP",
            "L0003:",
            "    NOP",
            "    END",
        ]

    def test_user_name_wins(self):
        symbols = SymbolTable()
        symbols.add("LOOP", 0x0003, user=True)

        assert listing([0x30, 0x03, 0xC4, 0xC4], symbols=symbols) == [
            "    BR   LOOP",
            "    NOP",
            "LOOP:",
            "    NOP",
            "    END",
        ]

    def test_unreferenced_user_name_still_labels(self):
        symbols = SymbolTable()
        symbols.add("START", 0x0000, user=True)

        assert listing([0xC4], symbols=symbols) == ["START:", "    NOP", "    END"]

    def test_register_and_device_lines(self):
        assert listing([0x85, 0x61, 0xD3]) == [
            "    GLO  R5",
            "    OUT  1",
            "    SEP  R3",
            "    END",
        ]

    def test_illegal_opcode_line(self):
        assert listing([0x68, 0xC4]) == ["    ???", "    NOP", "    END"]

    def test_code_then_data(self):
        areas = [MemoryArea(CODE, 0x0000, 0x0002), MemoryArea(DATA, 0x0002, 0x0005)]

        assert listing([0xF8, 0xAA, 0x48, 0x49, 0x00], areas=areas) == [
            "    LDI  #AA",
            "    #48, #49, #00",
            "    END",
        ]

    def test_data_then_code(self):
        areas = [MemoryArea(DATA, 0x0000, 0x0002), MemoryArea(CODE, 0x0002, 0x0003)]

        assert listing([0x01, 0x02, 0xC4], areas=areas) == [
            "    #01, #02",
            "    NOP",
            "    END",
        ]

    def test_no_areas_means_data(self):
        assert listing([0xF8, 0x05], areas=[]) == ["    #F8, #05", "    END"]

    def test_start_address_honoured(self):
        """The walk covers [start, end) of the image, not address zero."""
        lines = listing([0x30, 0x02, 0xC4], start=0x4000)
        assert lines == ["    BR   L4002", "L4002:", "    NOP", "    END"]

    def test_sink_receives_lines(self):
        received = []
        context = make_context([0xF8, 0x05, 0x3A, 0x00])
        lines = CDP1802Disassembler(context).disassemble(sink=received.append)

        assert received == lines


# =============================================================================
# Data Runs
# =============================================================================

class TestDataRuns:
    """Inline data formatting, wrapping and splitting."""

    def test_data_line_wraps(self):
        """Each data line stops at the first item that pushes it past 60 chars."""
        lines = listing(range(30), areas=[MemoryArea(DATA, 0, 30)])
        data_lines = lines[:-1]

        assert len(data_lines) == 3
        assert data_lines[0] == "    " + ", ".join(f"#{b:02X}" for b in range(13))
        assert data_lines[1] == "    " + ", ".join(f"#{b:02X}" for b in range(13, 26))
        assert data_lines[2] == "    " + ", ".join(f"#{b:02X}" for b in range(26, 30))
        assert lines[-1] == "    END"

    def test_custom_width(self):
        config = DisassemblerConfig(data_line_width=10)
        lines = listing(range(6), areas=[MemoryArea(DATA, 0, 6)], config=config)

        # "#00, #01, #02" is 13 characters, the first run longer than 10
        assert lines == ["    #00, #01, #02", "    #03, #04, #05", "    END"]

    def test_split_between_data_areas(self):
        """A run never spans two areas, even of the same kind."""
        areas = [MemoryArea(DATA, 0, 4), MemoryArea(DATA, 4, 8)]

        assert listing(range(8), areas=areas) == [
            "    #00, #01, #02, #03",
            "    #04, #05, #06, #07",
            "    END",
        ]

    def test_split_when_leaving_area(self):
        """Bytes past the last area are data, but start a new run."""
        areas = [MemoryArea(DATA, 0, 3)]

        assert listing(range(5), areas=areas) == [
            "    #00, #01, #02",
            "    #03, #04",
            "    END",
        ]

    def test_label_splits_run(self):
        symbols = SymbolTable()
        symbols.add("TABLE", 0x0003, user=True)

        assert listing(range(6), areas=[MemoryArea(DATA, 0, 6)], symbols=symbols) == [
            "    #00, #01, #02",
            "TABLE:",
            "    #03, #04, #05",
            "    END",
        ]

    def test_branch_into_data_labels_data(self):
        areas = [MemoryArea(CODE, 0, 2), MemoryArea(DATA, 2, 4)]

        assert listing([0x30, 0x03, 0xAA, 0xBB], areas=areas) == [
            "    BR   L0003",
            "    #AA",
            "L0003:",
            "    #BB",
            "    END",
        ]

    def test_data_bytes_do_not_create_labels(self):
        """Branch opcodes inside DATA areas are not decoded."""
        context = make_context([0x30, 0x10], areas=[MemoryArea(DATA, 0, 2)])
        CDP1802Disassembler(context).disassemble()

        assert len(context.symbols) == 0


# =============================================================================
# Pass Behaviour
# =============================================================================

class TestPasses:
    """Determinism and label stability between DISCOVER and EMIT."""

    PROGRAM = [
        0xF8, 0x10,        # 0000 LDI  #10
        0xA2,              # 0002 PLO  R2
        0x22,              # 0003 DEC  R2
        0x82,              # 0004 GLO  R2
        0x3A, 0x03,        # 0005 BNZ  L0003
        0xC0, 0x00, 0x0C,  # 0007 LBR  L000C
        0x48, 0x49,        # 000A data
        0x30, 0x00,        # 000C BR   L0000
    ]
    AREAS = [
        MemoryArea(CODE, 0x0000, 0x000A),
        MemoryArea(DATA, 0x000A, 0x000C),
        MemoryArea(CODE, 0x000C, 0x000E),
    ]

    def make(self):
        return make_context(self.PROGRAM, areas=self.AREAS)

    def test_program_listing(self):
        assert CDP1802Disassembler(self.make()).disassemble() == [
            "L0000:",
            "    LDI  #10",
            "    PLO  R2",
            "L0003:",
            "    DEC  R2",
            "    GLO  R2",
            "    BNZ  L0003",
            "    LBR  L000C",
            "    #48, #49",
            "L000C:",
            "    BR   L0000",
            "    END",
        ]

    def test_deterministic_across_runs(self):
        first = CDP1802Disassembler(self.make()).disassemble()
        second = CDP1802Disassembler(self.make()).disassemble()
        assert first == second

    def test_emit_twice_is_identical(self):
        disasm = CDP1802Disassembler(self.make())
        disasm.discover()
        assert disasm.emit() == disasm.emit()

    def test_emit_adds_no_labels(self):
        """Everything EMIT names was already named by DISCOVER."""
        context = self.make()
        disasm = CDP1802Disassembler(context)
        disasm.discover()
        discovered = list(context.symbols.items())

        disasm.emit()

        assert list(context.symbols.items()) == discovered
        assert [address for address, _ in discovered] == [0x0000, 0x0003, 0x000C]

    def test_discover_produces_no_output(self):
        received = []
        disasm = CDP1802Disassembler(self.make())
        disasm.run_pass(PassMode.DISCOVER, received.append)

        assert received == []

    def test_emit_without_discover_warns(self, caplog):
        """Skipping DISCOVER is a sequencing defect and is logged."""
        disasm = CDP1802Disassembler(self.make())

        with caplog.at_level(logging.WARNING, logger="disasm1802.disassembler.engine"):
            lines = disasm.emit()

        assert "first seen in emit pass" in caplog.text
        # the backward branch target at $0000 was passed before it got a name
        assert "L0000:" not in lines


# =============================================================================
# Edge Cases
# =============================================================================

class TestEdgeCases:
    """Operands running past the loaded extent."""

    def test_long_branch_overruns_end(self, caplog):
        """Missing operand bytes read as zero and the walk stops at end."""
        with caplog.at_level(logging.WARNING, logger="disasm1802.disassembler.engine"):
            lines = listing([0xC0, 0x12])

        assert lines == ["    LBR  L1200", "    END"]
        assert "reads past end of image" in caplog.text

    def test_immediate_at_top_of_memory_wraps(self):
        """An operand past $FFFF is read from $0000 (zero)."""
        assert listing([0xF8], start=0xFFFF) == ["    LDI  #00", "    END"]

    def test_single_byte_image(self):
        assert listing([0x00]) == ["    IDL", "    END"]
