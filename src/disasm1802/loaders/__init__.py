"""
Input Loaders
=============

Thin readers for the two input files:

- **intel_hex**: the program image (Intel HEX records)
- **definitions**: CODE/DATA areas and user symbol names
"""

from .intel_hex import load_hex_file, parse_hex
from .definitions import (
    Definitions,
    default_definitions,
    load_definitions,
    load_optional_definitions,
    parse_definitions,
)

__all__ = [
    "load_hex_file",
    "parse_hex",
    "Definitions",
    "default_definitions",
    "load_definitions",
    "load_optional_definitions",
    "parse_definitions",
]
