"""
ELF Binary Format Parser
==========================

Manual struct-based decoder for the Executable and Linkable Format (ELF).
Both 32-bit (ELF32) and 64-bit (ELF64) images in either byte order are
supported.

The decode runs five strictly ordered stages:

    1. identify         -- magic, word width and byte order (e_ident)
    2. file_header      -- ElfN_Ehdr
    3. program_headers  -- ElfN_Phdr table, with segment contents
    4. section_headers  -- ElfN_Shdr table, with section contents
    5. names            -- section names from the section-name string table

Any failure aborts the whole decode with an
:class:`~elfscope.core.errors.ElfDecodeError`; no partial image is
returned.

References:
    - TIS Committee. (1995). Tool Interface Standard (TIS) Executable and
      Linkable Format (ELF) Specification, Version 1.2.
    - System V Application Binary Interface, Edition 4.1.
    - Linux man page: elf(5).
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from elfscope.core.errors import ElfDecodeError, InvalidFormatError, OutOfBoundsError
from elfscope.core.models import (
    FileHeader,
    ParsedImage,
    ProgramHeaderEntry,
    SectionHeaderEntry,
)
from elfscope.parsers.binary_reader import BinaryReader
from elfscope.parsers.strtab import StringTableReader
from elfscope.parsers.symbols import (
    EI_CLASS,
    EI_DATA,
    EI_NIDENT,
    ELF_MAGIC,
    ELFCLASS32,
    ELFCLASS64,
    ELFDATA2LSB,
    ELFDATA2MSB,
    SHN_XINDEX,
    SHT_NOBITS,
    data_encoding_name,
    elf_class_name,
    file_type_name,
    format_address,
    format_value,
    machine_name,
    section_flags_text,
    section_type_name,
    segment_flags_text,
    segment_type_name,
)


# ---------------------------------------------------------------------------
# Layout descriptors
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class _Layout:
    """Struct formats for one ELF class.

    The program header field order differs between the classes: ELF64
    stores ``p_flags`` right after ``p_type``, ELF32 stores it after
    ``p_memsz``.  :attr:`program_header_fields` names the unpacked values
    in storage order.
    """

    elf_class: int
    header_format: str
    program_header_format: str
    program_header_fields: tuple[str, ...]
    section_header_format: str

    @property
    def is_64_bit(self) -> bool:
        return self.elf_class == ELFCLASS64


_SECTION_HEADER_FIELDS: tuple[str, ...] = (
    "sh_name", "sh_type", "sh_flags", "sh_addr", "sh_offset",
    "sh_size", "sh_link", "sh_info", "sh_addralign", "sh_entsize",
)

_HEADER_FIELDS: tuple[str, ...] = (
    "e_type", "e_machine", "e_version", "e_entry", "e_phoff",
    "e_shoff", "e_flags", "e_ehsize", "e_phentsize", "e_phnum",
    "e_shentsize", "e_shnum", "e_shstrndx",
)

# Elf32_Ehdr: 52 bytes, Elf32_Phdr: 32 bytes, Elf32_Shdr: 40 bytes
_ELF32 = _Layout(
    elf_class=ELFCLASS32,
    header_format="HHIIIIIHHHHHH",
    program_header_format="IIIIIIII",
    program_header_fields=(
        "p_type", "p_offset", "p_vaddr", "p_paddr",
        "p_filesz", "p_memsz", "p_flags", "p_align",
    ),
    section_header_format="IIIIIIIIII",
)

# Elf64_Ehdr: 64 bytes, Elf64_Phdr: 56 bytes, Elf64_Shdr: 64 bytes
_ELF64 = _Layout(
    elf_class=ELFCLASS64,
    header_format="HHIQQQIHHHHHH",
    program_header_format="IIQQQQQQ",
    program_header_fields=(
        "p_type", "p_flags", "p_offset", "p_vaddr",
        "p_paddr", "p_filesz", "p_memsz", "p_align",
    ),
    section_header_format="IIQQQQIIQQ",
)

_LAYOUTS: dict[int, _Layout] = {
    ELFCLASS32: _ELF32,
    ELFCLASS64: _ELF64,
}

_BYTE_ORDERS: dict[int, str] = {
    ELFDATA2LSB: "little",
    ELFDATA2MSB: "big",
}


# ---------------------------------------------------------------------------
# ELF Parser
# ---------------------------------------------------------------------------

class ElfParser:
    """Struct-based decoder producing a :class:`ParsedImage`.

    The parser holds no state shared between instances; each call to
    :meth:`parse` works only on the buffer given to the constructor.

    Usage::

        image = ElfParser(raw_bytes).parse()
        for section in image.section_headers:
            print(section.name, section.section_type)
    """

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        """Initialise the parser with raw binary data.

        Args:
            data: Complete ELF file contents.
        """
        self._reader: BinaryReader = BinaryReader(data)
        self._layout: _Layout = _ELF64

    # ------------------------------------------------------------------ #
    #  Public interface
    # ------------------------------------------------------------------ #

    def parse(self) -> ParsedImage:
        """Decode the buffer.

        Returns:
            The fully populated, immutable image.

        Raises:
            InvalidFormatError: If the buffer is not an ELF image.
            OutOfBoundsError: If any structure extends past the buffer.
        """
        with self._stage("identify"):
            self._identify()
        with self._stage("file_header"):
            header, raw = self._parse_file_header()
        with self._stage("program_headers"):
            segments = self._parse_program_headers(raw)
        with self._stage("section_headers"):
            sections = self._parse_section_headers(raw)
        with self._stage("names"):
            sections = self._resolve_section_names(header, sections)

        return ParsedImage(
            file_header=header,
            program_headers=tuple(segments),
            section_headers=tuple(sections),
            size=len(self._reader),
        )

    # ------------------------------------------------------------------ #
    #  Stage 1: identification
    # ------------------------------------------------------------------ #

    def _identify(self) -> None:
        """Check the magic and select the layout and byte order."""
        magic = self._reader.data[:len(ELF_MAGIC)]
        if magic != ELF_MAGIC:
            raise InvalidFormatError(
                f"Not a valid ELF file: magic is {magic.hex() or 'empty'}, "
                f"expected {ELF_MAGIC.hex()}",
                offset=0,
            )

        ident = self._reader.read_bytes(0, EI_NIDENT, field="e_ident")
        ei_class = ident[EI_CLASS]
        ei_data = ident[EI_DATA]
        if ei_class not in _LAYOUTS:
            raise InvalidFormatError(
                f"Unsupported ELF class {ei_class} in e_ident[EI_CLASS]",
                offset=EI_CLASS,
            )
        if ei_data not in _BYTE_ORDERS:
            raise InvalidFormatError(
                f"Unsupported data encoding {ei_data} in e_ident[EI_DATA]",
                offset=EI_DATA,
            )

        self._layout = _LAYOUTS[ei_class]
        self._reader = self._reader.with_byte_order(_BYTE_ORDERS[ei_data])

    # ------------------------------------------------------------------ #
    #  Stage 2: file header
    # ------------------------------------------------------------------ #

    def _parse_file_header(self) -> tuple[FileHeader, dict[str, int]]:
        """Decode ``ElfN_Ehdr``.

        Returns:
            The header model and the raw integer field values, which later
            stages use for offset arithmetic.
        """
        is_64 = self._layout.is_64_bit
        ident = self._reader.read_bytes(0, EI_NIDENT, field="e_ident")
        values = self._reader.unpack(
            self._layout.header_format, EI_NIDENT, field="ElfN_Ehdr",
        )
        raw = dict(zip(_HEADER_FIELDS, values))

        header = FileHeader(
            ident=ident.hex(),
            elf_class=elf_class_name(ident[EI_CLASS]),
            data_encoding=data_encoding_name(ident[EI_DATA]),
            file_type=file_type_name(raw["e_type"]),
            machine=machine_name(raw["e_machine"]),
            version=raw["e_version"],
            entry_point=format_address(raw["e_entry"], is_64),
            program_header_offset=format_address(raw["e_phoff"], is_64),
            section_header_offset=format_address(raw["e_shoff"], is_64),
            flags=format_value(raw["e_flags"]),
            header_size=raw["e_ehsize"],
            program_header_entry_size=raw["e_phentsize"],
            program_header_count=raw["e_phnum"],
            section_header_entry_size=raw["e_shentsize"],
            section_header_count=raw["e_shnum"],
            section_name_table_index=raw["e_shstrndx"],
        )
        return header, raw

    # ------------------------------------------------------------------ #
    #  Stage 3: program headers
    # ------------------------------------------------------------------ #

    def _parse_program_headers(self, raw: dict[str, int]) -> list[ProgramHeaderEntry]:
        """Decode every program header and read each segment's contents."""
        count = raw["e_phnum"]
        if count == 0:
            return []

        table_offset = raw["e_phoff"]
        entry_size = raw["e_phentsize"]
        self._reader.ensure(table_offset, count * entry_size, field="program header table")

        is_64 = self._layout.is_64_bit
        segments: list[ProgramHeaderEntry] = []
        for i in range(count):
            offset = table_offset + i * entry_size
            values = self._reader.unpack(
                self._layout.program_header_format, offset, field=f"program_headers[{i}]",
            )
            ph = dict(zip(self._layout.program_header_fields, values))
            contents = self._reader.read_hex(
                ph["p_offset"], ph["p_filesz"], field=f"program_headers[{i}].contents",
            )
            segments.append(ProgramHeaderEntry(
                index=i,
                segment_type=segment_type_name(ph["p_type"]),
                offset=format_address(ph["p_offset"], is_64),
                virtual_address=format_address(ph["p_vaddr"], is_64),
                physical_address=format_address(ph["p_paddr"], is_64),
                file_size=ph["p_filesz"],
                memory_size=ph["p_memsz"],
                flags=segment_flags_text(ph["p_flags"]),
                alignment=ph["p_align"],
                contents=contents,
            ))
        return segments

    # ------------------------------------------------------------------ #
    #  Stage 4: section headers
    # ------------------------------------------------------------------ #

    def _parse_section_headers(self, raw: dict[str, int]) -> list[SectionHeaderEntry]:
        """Decode every section header and read each section's contents.

        ``SHT_NOBITS`` sections occupy no file space; their contents are
        empty and their offset/size are not checked against the buffer.
        """
        count = raw["e_shnum"]
        if count == 0:
            return []

        table_offset = raw["e_shoff"]
        entry_size = raw["e_shentsize"]
        self._reader.ensure(table_offset, count * entry_size, field="section header table")

        is_64 = self._layout.is_64_bit
        sections: list[SectionHeaderEntry] = []
        for i in range(count):
            offset = table_offset + i * entry_size
            values = self._reader.unpack(
                self._layout.section_header_format, offset, field=f"section_headers[{i}]",
            )
            sh = dict(zip(_SECTION_HEADER_FIELDS, values))

            contents = ""
            if sh["sh_type"] != SHT_NOBITS:
                contents = self._reader.read_hex(
                    sh["sh_offset"], sh["sh_size"], field=f"section_headers[{i}].contents",
                )

            sections.append(SectionHeaderEntry(
                index=i,
                name_offset=sh["sh_name"],
                section_type=section_type_name(sh["sh_type"]),
                flags=section_flags_text(sh["sh_flags"]),
                address=format_address(sh["sh_addr"], is_64),
                offset=format_address(sh["sh_offset"], is_64),
                size=sh["sh_size"],
                link=sh["sh_link"],
                info=sh["sh_info"],
                address_alignment=sh["sh_addralign"],
                entry_size=sh["sh_entsize"],
                contents=contents,
            ))
        return sections

    # ------------------------------------------------------------------ #
    #  Stage 5: section names
    # ------------------------------------------------------------------ #

    def _resolve_section_names(
        self,
        header: FileHeader,
        sections: list[SectionHeaderEntry],
    ) -> list[SectionHeaderEntry]:
        """Attach each section's name from the section-name string table.

        ``SHN_XINDEX`` means the real table index is stored in the
        ``sh_link`` field of section 0.

        Raises:
            OutOfBoundsError: If the table index is not a valid section.
        """
        if not sections:
            return sections

        index = header.section_name_table_index
        if index == SHN_XINDEX:
            index = sections[0].link
        if index >= len(sections):
            raise OutOfBoundsError(
                "e_shstrndx", index, 1, len(sections),
                message=(
                    f"e_shstrndx: section index {index} is outside the "
                    f"section header table ({len(sections)} entries)"
                ),
            )

        strtab = StringTableReader(sections[index].contents)
        return [
            section.model_copy(update={"name": strtab.read_name(section.name_offset)})
            for section in sections
        ]

    # ------------------------------------------------------------------ #
    #  Utility
    # ------------------------------------------------------------------ #

    @staticmethod
    @contextmanager
    def _stage(name: str) -> Iterator[None]:
        """Tag any :class:`ElfDecodeError` escaping the block with *name*."""
        try:
            yield
        except ElfDecodeError as exc:
            if exc.stage is None:
                exc.stage = name
            raise


# ---------------------------------------------------------------------------
# Module-level entry point
# ---------------------------------------------------------------------------

def decode(buffer: bytes | bytearray | memoryview) -> ParsedImage:
    """Decode a complete ELF image.

    Args:
        buffer: The full byte contents of a candidate object file.

    Returns:
        The decoded :class:`ParsedImage`.

    Raises:
        ElfDecodeError: On any structural failure (see :class:`ElfParser`).
    """
    return ElfParser(buffer).parse()
