"""
ELFScope Data Models
=====================

Pydantic-based, immutable data model of a decoded ELF image.  A
:class:`ParsedImage` is produced once per decode and never mutated
afterwards; its sequences are tuples and every model is frozen.

Each field carries the ELF structure member name as its alias
(``e_entry``, ``p_flags``, ``sh_name_str``, ...), so
``model_dump(by_alias=True)`` yields the conventional JSON layout while
Python code uses descriptive attribute names.

References:
    - TIS Committee. (1995). Executable and Linkable Format (ELF) Specification.
    - Pydantic v2 documentation. https://docs.pydantic.dev/latest/
"""

from __future__ import annotations

import json
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from elfscope.parsers.symbols import (
    ELF_MAGIC,
    SHN_XINDEX,
    SHT_NOBITS,
    parse_hex,
    section_type_name,
)


_MODEL_CONFIG = ConfigDict(
    frozen=True,
    populate_by_name=True,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# File header
# ---------------------------------------------------------------------------

class FileHeader(BaseModel):
    """The ELF file header (``ElfN_Ehdr``).

    Address and offset fields hold fixed-width hex text (16 digits for
    64-bit images, 8 for 32-bit); coded fields hold symbolic names.

    Attributes:
        ident: The 16 identification bytes as lowercase hex.
        elf_class: ``ELFCLASS32`` or ``ELFCLASS64``.
        data_encoding: ``ELFDATA2LSB`` or ``ELFDATA2MSB``.
        file_type: Object file type, e.g. ``ET_DYN``.
        machine: Target architecture, e.g. ``EM_X86_64``.
        version: Object file version.
        entry_point: Entry-point virtual address.
        program_header_offset: File offset of the program header table.
        section_header_offset: File offset of the section header table.
        flags: Processor-specific flags.
        header_size: Size of this header in bytes.
        program_header_entry_size: Size of one program header entry.
        program_header_count: Number of program header entries.
        section_header_entry_size: Size of one section header entry.
        section_header_count: Number of section header entries.
        section_name_table_index: Index of the section holding section names.
    """

    model_config = _MODEL_CONFIG

    ident: str = Field(alias="e_ident", min_length=32, max_length=32)
    elf_class: str = Field(alias="ei_class")
    data_encoding: str = Field(alias="ei_data")
    file_type: str = Field(alias="e_type")
    machine: str = Field(alias="e_machine")
    version: int = Field(alias="e_version", ge=0)
    entry_point: str = Field(alias="e_entry")
    program_header_offset: str = Field(alias="e_phoff")
    section_header_offset: str = Field(alias="e_shoff")
    flags: str = Field(alias="e_flags")
    header_size: int = Field(alias="e_ehsize", ge=0)
    program_header_entry_size: int = Field(alias="e_phentsize", ge=0)
    program_header_count: int = Field(alias="e_phnum", ge=0)
    section_header_entry_size: int = Field(alias="e_shentsize", ge=0)
    section_header_count: int = Field(alias="e_shnum", ge=0)
    section_name_table_index: int = Field(alias="e_shstrndx", ge=0)

    @property
    def magic(self) -> bytes:
        """The first four identification bytes."""
        return bytes.fromhex(self.ident[:8])

    @property
    def is_64_bit(self) -> bool:
        return self.elf_class == "ELFCLASS64"

    @property
    def is_little_endian(self) -> bool:
        return self.data_encoding == "ELFDATA2LSB"

    @property
    def word_width(self) -> int:
        """Address/offset width in bits (32 or 64)."""
        return 64 if self.is_64_bit else 32

    @property
    def byte_order(self) -> str:
        """``"little"`` or ``"big"``."""
        return "little" if self.is_little_endian else "big"

    @property
    def has_valid_magic(self) -> bool:
        return self.magic == ELF_MAGIC


# ---------------------------------------------------------------------------
# Program headers
# ---------------------------------------------------------------------------

class ProgramHeaderEntry(BaseModel):
    """One row of the program header table (a segment).

    Attributes:
        index: Position in the program header table.
        segment_type: Segment type, e.g. ``PT_LOAD``.
        offset: File offset of the segment contents.
        virtual_address: Virtual address of the segment in memory.
        physical_address: Physical address (where relevant).
        file_size: Size of the segment in the file.
        memory_size: Size of the segment in memory.
        flags: Permission tokens, e.g. ``READ|EXECUTE`` or ``none``.
        alignment: Segment alignment.
        contents: Hex encoding of the segment's bytes in the file.
    """

    model_config = _MODEL_CONFIG

    index: int = Field(ge=0)
    segment_type: str = Field(alias="p_type")
    offset: str = Field(alias="p_offset")
    virtual_address: str = Field(alias="p_vaddr")
    physical_address: str = Field(alias="p_paddr")
    file_size: int = Field(alias="p_filesz", ge=0)
    memory_size: int = Field(alias="p_memsz", ge=0)
    flags: str = Field(alias="p_flags")
    alignment: int = Field(alias="p_align", ge=0)
    contents: str = ""

    @property
    def file_offset(self) -> int:
        return parse_hex(self.offset)

    @property
    def data(self) -> bytes:
        """Raw segment bytes."""
        return bytes.fromhex(self.contents)


# ---------------------------------------------------------------------------
# Section headers
# ---------------------------------------------------------------------------

class SectionHeaderEntry(BaseModel):
    """One row of the section header table.

    Attributes:
        index: Position in the section header table (0 is the null entry).
        name_offset: Offset of the name inside the section-name string table.
        name: Resolved section name (filled in after all headers are read).
        section_type: Section type, e.g. ``SHT_PROGBITS``.
        flags: Attribute names, e.g. ``alloc|execinstr`` or ``none``.
        address: Virtual address at execution.
        offset: File offset of the section contents.
        size: Section size in bytes.
        link: Section index link (meaning depends on the type).
        info: Extra information (meaning depends on the type).
        address_alignment: Required alignment.
        entry_size: Size of each fixed-size record, or 0.
        contents: Hex encoding of the section bytes (empty for ``SHT_NOBITS``).
    """

    model_config = _MODEL_CONFIG

    index: int = Field(ge=0)
    name_offset: int = Field(alias="sh_name", ge=0)
    name: str = Field(default="", alias="sh_name_str")
    section_type: str = Field(alias="sh_type")
    flags: str = Field(alias="sh_flags")
    address: str = Field(alias="sh_addr")
    offset: str = Field(alias="sh_offset")
    size: int = Field(alias="sh_size", ge=0)
    link: int = Field(alias="sh_link", ge=0)
    info: int = Field(alias="sh_info", ge=0)
    address_alignment: int = Field(alias="sh_addralign", ge=0)
    entry_size: int = Field(alias="sh_entsize", ge=0)
    contents: str = ""

    @property
    def file_offset(self) -> int:
        return parse_hex(self.offset)

    @property
    def has_file_data(self) -> bool:
        """``False`` for sections occupying no space in the file."""
        return self.section_type != section_type_name(SHT_NOBITS)

    @property
    def data(self) -> bytes:
        """Raw section bytes."""
        return bytes.fromhex(self.contents)


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------

class ParsedImage(BaseModel):
    """A fully decoded ELF image.

    Attributes:
        file_header: The ELF file header.
        program_headers: Segments, in table order.
        section_headers: Sections with resolved names, in table order.
        size: Length of the decoded buffer in bytes.
    """

    model_config = _MODEL_CONFIG

    file_header: FileHeader = Field(alias="elf_header")
    program_headers: tuple[ProgramHeaderEntry, ...] = ()
    section_headers: tuple[SectionHeaderEntry, ...] = ()
    size: int = Field(default=0, alias="file_size", ge=0)

    # ------------------------------------------------------------------ #
    #  Lookups
    # ------------------------------------------------------------------ #

    @property
    def string_table(self) -> Optional[SectionHeaderEntry]:
        """The section that supplied section names, if any."""
        if not self.section_headers:
            return None
        index = self.file_header.section_name_table_index
        if index == SHN_XINDEX:
            index = self.section_headers[0].link
        if index < len(self.section_headers):
            return self.section_headers[index]
        return None

    def section_by_name(self, name: str) -> Optional[SectionHeaderEntry]:
        """Return the first section called *name*, or ``None``."""
        for section in self.section_headers:
            if section.name == name:
                return section
        return None

    def sections_of_type(self, section_type: str) -> list[SectionHeaderEntry]:
        """Return every section whose type name equals *section_type*."""
        return [s for s in self.section_headers if s.section_type == section_type]

    def segments_of_type(self, segment_type: str) -> list[ProgramHeaderEntry]:
        """Return every segment whose type name equals *segment_type*."""
        return [p for p in self.program_headers if p.segment_type == segment_type]

    # ------------------------------------------------------------------ #
    #  Serialisation
    # ------------------------------------------------------------------ #

    def to_dict(self, include_contents: bool = True) -> dict[str, Any]:
        """Serialise to the conventional ELF-field-named structure.

        Args:
            include_contents: Drop the hex ``contents`` of every entry when
                              ``False`` (useful for large binaries).
        """
        exclude: dict[str, Any] | None = None
        if not include_contents:
            exclude = {
                "program_headers": {"__all__": {"contents"}},
                "section_headers": {"__all__": {"contents"}},
            }
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)

    def to_json(self, indent: int | None = 2, include_contents: bool = True) -> str:
        """Serialise to a JSON document (see :meth:`to_dict`)."""
        return json.dumps(
            self.to_dict(include_contents=include_contents),
            indent=indent,
            ensure_ascii=False,
        )
