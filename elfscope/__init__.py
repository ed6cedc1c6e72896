"""
ELFScope -- ELF Structure Decoder
==================================

ELFScope decodes the raw bytes of an ELF (Executable and Linkable Format)
object or executable into an immutable, symbolic data model: the file
header, the program (segment) headers and the section headers with their
resolved names and raw contents.

Capabilities:
    - ELF32 and ELF64 images, little- and big-endian
    - Symbolic names for file types, machines, segment and section types
    - Segment permission and section attribute flag decoding
    - Section name resolution through the section-name string table
    - Bounds-checked decoding with typed errors
    - JSON export using the conventional ELF field names

Usage::

    from elfscope import decode

    image = decode(open("/usr/bin/ls", "rb").read())
    print(image.file_header.machine)

References:
    - TIS Committee. (1995). ELF Specification, Version 1.2.
    - System V Application Binary Interface, Edition 4.1.
"""

__version__ = "1.0.0"

from elfscope.core.errors import (
    ElfDecodeError,
    ElfFileError,
    InvalidFormatError,
    OutOfBoundsError,
)
from elfscope.core.models import (
    FileHeader,
    ParsedImage,
    ProgramHeaderEntry,
    SectionHeaderEntry,
)
from elfscope.parsers.elf_parser import ElfParser, decode

__all__ = [
    "decode",
    "ElfParser",
    "ParsedImage",
    "FileHeader",
    "ProgramHeaderEntry",
    "SectionHeaderEntry",
    "ElfDecodeError",
    "ElfFileError",
    "InvalidFormatError",
    "OutOfBoundsError",
]
