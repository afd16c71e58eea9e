"""
DISASM1802 Command-Line Interface
=================================

- **disasm1802**: disassemble an Intel HEX image into a listing

The tool is a Click application; errors are reported through the
shared handler in ``disasm1802.cli.errors``.
"""

__all__ = ["disasm1802"]
