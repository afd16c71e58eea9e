"""
Intel HEX Image Loader
======================

Reads an Intel HEX file into a 64 KiB address-indexed memory image.

Record Format
-------------
Each record is one line:

    :LLAAAATTDD...DDCC

- LL: number of data bytes
- AAAA: load address of the first data byte (big-endian)
- TT: record type (00 = data, 01 = end of file)
- DD: data bytes
- CC: checksum, the two's complement of the sum of all preceding bytes

Only data and end-of-file records matter to a 16-bit machine; extended
address records (types 02-05) are skipped.

The lowest loaded address becomes the image start and the address just
past the highest loaded byte becomes the image end. Bytes in between
that no record touched read as zero.
"""

from pathlib import Path
from typing import Optional, Union
import logging

from disasm1802.config import DisassemblerConfig
from disasm1802.disassembler.memory import MEMORY_SIZE, MemoryImage
from disasm1802.errors import HexFormatError, SourceLocation

# Logger for this module
logger = logging.getLogger(__name__)


RECORD_DATA = 0x00
RECORD_EOF = 0x01


# =============================================================================
# Parsing
# =============================================================================

def _parse_record(line: str, location: SourceLocation) -> bytes:
    """Decode one record line into its raw bytes (count through checksum)."""
    if not line.startswith(":"):
        raise HexFormatError("record does not start with ':'", location)

    digits = line[1:]
    if len(digits) % 2 != 0:
        raise HexFormatError("odd number of hex digits in record", location)

    try:
        raw = bytes.fromhex(digits)
    except ValueError:
        raise HexFormatError(
            "invalid hexadecimal digit in record",
            location,
        ) from None

    # count + address(2) + type + checksum
    if len(raw) < 5:
        raise HexFormatError("record too short", location)

    count = raw[0]
    if len(raw) != count + 5:
        raise HexFormatError(
            f"byte count {count} does not match record length {len(raw) - 5}",
            location,
        )

    return raw


def record_checksum(body: bytes) -> int:
    """Two's complement of the byte sum, as stored in the last record byte."""
    return (-sum(body)) & 0xFF


def parse_hex(
    text: str,
    filename: str = "<input>",
    config: Optional[DisassemblerConfig] = None,
) -> MemoryImage:
    """
    Parse Intel HEX text into a memory image.

    Args:
        text: The file contents
        filename: Name used in error messages
        config: Settings (only verify_checksums is used)

    Returns:
        MemoryImage with start/end set from the data records

    Raises:
        HexFormatError: On a malformed record, a checksum mismatch, or a
            file without any data
    """
    config = config or DisassemblerConfig()
    image = MemoryImage()
    start = MEMORY_SIZE
    end = 0

    for line_number, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue

        location = SourceLocation(filename, line_number)
        raw = _parse_record(line, location)
        count = raw[0]
        address = (raw[1] << 8) | raw[2]
        record_type = raw[3]

        expected = record_checksum(raw[:-1])
        if raw[-1] != expected:
            if config.verify_checksums:
                raise HexFormatError(
                    f"checksum mismatch (expected {expected:02X}, got {raw[-1]:02X})",
                    location,
                    hint="pass --no-checksum to load the file anyway",
                )
            logger.warning(f"{location}: checksum mismatch ignored")

        if record_type == RECORD_EOF:
            logger.debug(f"{location}: end of file record")
            break

        if record_type != RECORD_DATA:
            logger.debug(f"{location}: skipping record type {record_type:02X}")
            continue

        if address + count > MEMORY_SIZE:
            raise HexFormatError(
                f"{count} bytes at ${address:04X} run past $FFFF",
                location,
            )

        image.data[address:address + count] = raw[4:4 + count]
        if count:
            start = min(start, address)
            end = max(end, address + count)

    if end == 0:
        raise HexFormatError("no data records", SourceLocation(filename, 1))

    image.start = start
    image.end = end
    return image


def load_hex_file(
    filepath: Union[str, Path],
    config: Optional[DisassemblerConfig] = None,
) -> MemoryImage:
    """
    Read and parse an Intel HEX file from disk.

    Raises:
        FileNotFoundError: If the file doesn't exist
        HexFormatError: If the file is malformed
    """
    filepath = Path(filepath)
    image = parse_hex(filepath.read_text(encoding="ascii", errors="replace"), str(filepath), config)
    logger.info(f"{filepath} loaded: start=0x{image.start:04X}, end=0x{image.end:04X}")
    return image
