"""
Definition File Loader
======================

A definition file tells the disassembler which parts of the image are
code, which are data, and what to call specific addresses. All numbers
are hexadecimal without a prefix:

    ; monitor ROM
    CODE 0000 0100
    DATA 0100 0140
    0000 RESET
    0042 PRINT

Area ends are exclusive. Lines starting with ';' are comments. When the
same address is named twice the first name wins.

Without a definition file (or with one that defines no areas) the
whole image is treated as a single CODE area.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union
import logging

from disasm1802.disassembler.areas import AreaKind, MemoryArea, sort_areas
from disasm1802.disassembler.memory import MemoryImage
from disasm1802.disassembler.symbols import SymbolTable
from disasm1802.errors import DefinitionFormatError, SourceLocation

# Logger for this module
logger = logging.getLogger(__name__)


@dataclass
class Definitions:
    """
    Areas and user symbols for one image.

    Attributes:
        areas: Areas ordered by start address
        symbols: Symbol table holding the user-supplied names
    """
    areas: List[MemoryArea] = field(default_factory=list)
    symbols: SymbolTable = field(default_factory=SymbolTable)


def default_definitions(image: MemoryImage, label_prefix: str = "L") -> Definitions:
    """Treat the whole image as code, with no names."""
    return Definitions(
        areas=[MemoryArea(AreaKind.CODE, image.start, image.end)],
        symbols=SymbolTable(label_prefix),
    )


def _parse_address(text: str, location: SourceLocation) -> int:
    try:
        value = int(text, 16)
    except ValueError:
        raise DefinitionFormatError(f"invalid hex address '{text}'", location) from None
    if not 0 <= value <= 0x10000:
        raise DefinitionFormatError(f"address '{text}' out of range", location)
    return value


def parse_definitions(
    text: str,
    image: MemoryImage,
    filename: str = "<input>",
    label_prefix: str = "L",
) -> Definitions:
    """
    Parse definition file text.

    Args:
        text: The file contents
        image: The loaded image (used when no areas are defined)
        filename: Name used in error messages
        label_prefix: Prefix for names the disassembler will generate

    Returns:
        Definitions with sorted areas and the user symbol table

    Raises:
        DefinitionFormatError: On an unknown keyword, a line with a single
            field, or an invalid address
    """
    areas: List[MemoryArea] = []
    symbols = SymbolTable(label_prefix)

    for line_number, line in enumerate(text.splitlines(), start=1):
        fields = line.split()
        if not fields or fields[0].startswith(";"):
            continue

        location = SourceLocation(filename, line_number)

        if len(fields) > 2:
            keyword = fields[0].upper()
            if keyword not in AreaKind.__members__:
                raise DefinitionFormatError(
                    f"unknown area type '{fields[0]}'",
                    location,
                    hint="area lines are 'CODE start end' or 'DATA start end'",
                )
            start = _parse_address(fields[1], location)
            end = _parse_address(fields[2], location)
            areas.append(MemoryArea(AreaKind[keyword], start, end))
            logger.debug(f"{location}: {areas[-1]}")

        elif len(fields) == 2:
            # "CODE" and "DATA" are also valid hex numbers
            if fields[0].upper() in AreaKind.__members__:
                raise DefinitionFormatError(
                    f"{fields[0].upper()} area needs a start and an end address",
                    location,
                )
            address = _parse_address(fields[0], location)
            name = fields[1]
            if symbols.has_name(address):
                logger.warning(
                    f"{location}: ${address:04X} already named "
                    f"'{symbols.get_name(address)}', ignoring '{name}'"
                )
                continue
            symbols.add(name, address, user=True)

        else:
            raise DefinitionFormatError(
                f"expected an area or a symbol, got '{line.strip()}'",
                location,
                hint="symbol lines are 'address name'",
            )

    if not areas:
        logger.debug(f"{filename}: no areas defined, treating image as code")
        areas.append(MemoryArea(AreaKind.CODE, image.start, image.end))

    return Definitions(areas=sort_areas(areas), symbols=symbols)


def load_definitions(
    filepath: Union[str, Path],
    image: MemoryImage,
    label_prefix: str = "L",
) -> Definitions:
    """
    Read and parse a definition file from disk.

    Raises:
        FileNotFoundError: If the file doesn't exist
        DefinitionFormatError: If the file is malformed
    """
    filepath = Path(filepath)
    definitions = parse_definitions(
        filepath.read_text(encoding="utf-8"), image, str(filepath), label_prefix
    )
    logger.info(
        f"{filepath} loaded: {len(definitions.areas)} areas, "
        f"{len(definitions.symbols)} symbols"
    )
    return definitions


def load_optional_definitions(
    filepath: Optional[Union[str, Path]],
    image: MemoryImage,
    label_prefix: str = "L",
) -> Definitions:
    """Load a definition file if it exists, otherwise fall back to defaults."""
    if filepath is not None and Path(filepath).is_file():
        return load_definitions(filepath, image, label_prefix)
    logger.debug("no definition file, treating image as code")
    return default_definitions(image, label_prefix)
