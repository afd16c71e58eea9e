"""
CLI Error Handling
==================

Maps exceptions to messages and exit codes for the command-line tool.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from disasm1802.errors import LoadError


class ExitCode(IntEnum):
    """Exit codes for the CLI."""
    SUCCESS = 0
    LOAD_ERROR = 1       # Malformed image or definition file
    INVALID_ARGS = 2     # Invalid arguments or missing files
    INTERNAL_ERROR = 3   # Unexpected internal error


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Report an exception and exit with the matching code.

    Load errors already carry "file:line:col: error:" formatting and are
    printed as-is. Contract violations inside the disassembler are
    internal errors, as is anything unexpected; with verbose set the
    traceback is printed too.

    Raises:
        SystemExit: Always
    """
    if isinstance(error, LoadError):
        click.echo(str(error), err=True)
        sys.exit(ExitCode.LOAD_ERROR)

    elif isinstance(error, (click.BadParameter, FileNotFoundError, PermissionError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
