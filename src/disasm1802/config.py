"""
DISASM1802 Configuration
========================

Listing layout and loader settings. Configuration can come from:
- Default values (defined here)
- Environment variables
- Command-line options (applied by the CLI on top of the above)

The defaults reproduce the classic DISASM1802 listing layout: four
spaces of indentation, mnemonics padded to five columns, and inline
data lines wrapped once they grow past sixty characters.
"""

from dataclasses import dataclass
import os


_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass
class DisassemblerConfig:
    """
    Settings shared by the loaders and the disassembly engine.

    Attributes:
        data_line_width: A pending data line is flushed once its text is
            longer than this many characters (default: 60)
        mnemonic_width: Column width the mnemonic is padded to before the
            operand (default: 5)
        indent: Prefix for instruction, data and END lines (default: 4 spaces)
        label_prefix: Prefix for generated labels, followed by the address
            as four uppercase hex digits (default: "L")
        verify_checksums: Reject Intel HEX records whose checksum does not
            match (default: True)
    """

    data_line_width: int = 60
    mnemonic_width: int = 5
    indent: str = "    "
    label_prefix: str = "L"
    verify_checksums: bool = True

    @classmethod
    def from_env(cls) -> "DisassemblerConfig":
        """
        Create a DisassemblerConfig from environment variables.

        Environment variables (all optional):
            DISASM1802_DATA_WIDTH: Data line width threshold (positive integer)
            DISASM1802_LABEL_PREFIX: Prefix for generated labels
            DISASM1802_VERIFY_CHECKSUMS: "0"/"false"/"no"/"off" to disable

        Invalid values are ignored and the default is kept.
        """
        config = cls()

        if width := os.environ.get("DISASM1802_DATA_WIDTH"):
            try:
                value = int(width)
            except ValueError:
                value = 0
            if value > 0:
                config.data_line_width = value

        if prefix := os.environ.get("DISASM1802_LABEL_PREFIX"):
            if prefix.isidentifier():
                config.label_prefix = prefix

        if verify := os.environ.get("DISASM1802_VERIFY_CHECKSUMS"):
            verify = verify.strip().lower()
            if verify in _TRUE_VALUES:
                config.verify_checksums = True
            elif verify in _FALSE_VALUES:
                config.verify_checksums = False

        return config
