"""
disasm1802 - CDP1802 Disassembler Command-Line Interface
========================================================

This module implements the command-line interface for the CDP1802
disassembler.

Usage Examples
--------------
Disassemble monitor.hex, using monitor.def if it exists:
    $ disasm1802 monitor

Explicit definition file and output file:
    $ disasm1802 monitor.hex -d labels.def -o monitor.asm

Load a file with bad checksums:
    $ disasm1802 dump.hex --no-checksum

Show the decode table:
    $ disasm1802 --dump-opcodes
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

import click

from disasm1802 import __version__
from disasm1802.cli.errors import handle_cli_exception
from disasm1802.config import DisassemblerConfig
from disasm1802.disassembler import CDP1802Disassembler, DisassemblyContext, OpcodeTable
from disasm1802.loaders import load_hex_file, load_optional_definitions

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


def resolve_input_paths(name: str) -> Tuple[Path, Path]:
    """
    Work out the image and definition file paths from the NAME argument.

    A name without an extension gets ".hex". The definition file is the
    image path with its extension replaced by ".def".
    """
    hex_path = Path(name)
    if not hex_path.suffix:
        hex_path = hex_path.with_suffix(".hex")
    return hex_path, hex_path.with_suffix(".def")


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument("name", required=False)
@click.option(
    "-d", "--definitions",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Definition file with areas and names (default: NAME.def if present)",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: stdout)",
)
@click.option(
    "-w", "--data-width",
    type=click.IntRange(min=1),
    default=None,
    help="Wrap data lines longer than this many characters (default: 60)",
)
@click.option(
    "--label-prefix",
    default=None,
    help="Prefix for generated labels (default: L)",
)
@click.option(
    "--no-checksum",
    is_flag=True,
    help="Accept Intel HEX records with wrong checksums",
)
@click.option(
    "--dump-opcodes",
    is_flag=True,
    help="Print the 16x16 opcode table and exit",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="disasm1802")
def main(
    name: Optional[str],
    definitions: Optional[Path],
    output: Optional[Path],
    data_width: Optional[int],
    label_prefix: Optional[str],
    no_checksum: bool,
    dump_opcodes: bool,
    verbose: bool,
) -> None:
    """
    Disassemble CDP1802 machine code.

    NAME is the Intel HEX image; ".hex" is added when it has no
    extension. Areas and names are read from NAME.def when that file
    exists, otherwise the whole image is disassembled as code.

    \b
    Examples:
        disasm1802 monitor                  # monitor.hex + monitor.def
        disasm1802 rom.hex -o rom.asm       # write listing to a file
        disasm1802 rom.hex -d labels.def    # explicit definition file
    """
    setup_logging(verbose)

    if dump_opcodes:
        for row in OpcodeTable().dump():
            click.echo(row)
        return

    if name is None:
        raise click.UsageError("missing NAME of the image to disassemble")

    config = DisassemblerConfig.from_env()
    if data_width is not None:
        config.data_line_width = data_width
    if label_prefix:
        config.label_prefix = label_prefix
    if no_checksum:
        config.verify_checksums = False

    logger.info(f"DISASM1802 v{__version__}")

    try:
        hex_path, default_def_path = resolve_input_paths(name)
        image = load_hex_file(hex_path, config)
        defs = load_optional_definitions(
            definitions or default_def_path, image, config.label_prefix
        )

        context = DisassemblyContext.create(image, defs.areas, defs.symbols, config)
        context.opcodes.validate()
        lines = CDP1802Disassembler(context).disassemble()
    except Exception as e:
        handle_cli_exception(e, verbose)

    result = "\n".join(lines) + "\n"

    if output:
        try:
            output.write_text(result, encoding="utf-8")
        except OSError as e:
            handle_cli_exception(e, verbose)
        logger.debug(f"Output written to: {output}")
    else:
        click.echo(result, nl=False)

    logger.debug(f"{len(context.symbols)} labels, {len(lines)} lines")


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
