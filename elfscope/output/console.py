"""
ELFScope Console Output
========================

Rich-powered terminal summary of a decoded :class:`ParsedImage`: the file
header as a key/value panel, then one table each for program headers and
section headers.  Contents are shown as a short hex preview.
"""

from __future__ import annotations

from shared.console import ScopeConsole

from elfscope.core.models import (
    FileHeader,
    ParsedImage,
    ProgramHeaderEntry,
    SectionHeaderEntry,
)


def _preview(contents: str, max_bytes: int) -> str:
    """Return the first *max_bytes* bytes of hex *contents*, marking truncation."""
    if max_bytes <= 0:
        return ""
    limit = max_bytes * 2
    if len(contents) <= limit:
        return contents
    return contents[:limit] + "…"


class ElfscopeConsoleOutput:
    """Terminal display for decoded ELF images.

    Usage::

        output = ElfscopeConsoleOutput()
        output.display(image)
    """

    def __init__(
        self,
        console: ScopeConsole | None = None,
        preview_bytes: int = 16,
    ) -> None:
        """Initialise the renderer.

        Args:
            console: Optional ScopeConsole instance.
            preview_bytes: Bytes of contents shown per entry (0 hides the column).
        """
        self._console: ScopeConsole = console or ScopeConsole()
        self._preview_bytes = preview_bytes

    def display(self, image: ParsedImage, title: str = "") -> None:
        """Display the header, segments and sections of *image*."""
        self._console.section(title or "ELF Image")
        self.display_header(image.file_header, image.size)
        self._console.blank()
        self.display_program_headers(list(image.program_headers))
        self._console.blank()
        self.display_section_headers(list(image.section_headers))

    def display_header(self, header: FileHeader, size: int = 0, title: str = "") -> None:
        pairs = [
            ("Magic", header.ident),
            ("Class", f"{header.elf_class} ({header.word_width}-bit)"),
            ("Data", f"{header.data_encoding} ({header.byte_order}-endian)"),
            ("Type", header.file_type),
            ("Machine", header.machine),
            ("Version", header.version),
            ("Entry point", header.entry_point),
            ("PH offset", header.program_header_offset),
            ("SH offset", header.section_header_offset),
            ("Flags", header.flags),
            ("Header size", f"{header.header_size} B"),
            ("PH entry size", f"{header.program_header_entry_size} B"),
            ("PH count", header.program_header_count),
            ("SH entry size", f"{header.section_header_entry_size} B"),
            ("SH count", header.section_header_count),
            ("SH string table index", header.section_name_table_index),
        ]
        if size:
            pairs.insert(0, ("File size", f"{size:,} bytes"))
        self._console.key_values(title or "ELF Header", pairs)

    def display_program_headers(self, segments: list[ProgramHeaderEntry]) -> None:
        if not segments:
            self._console.info("No program headers.")
            return

        columns = ["#", "Type", "Offset", "VirtAddr", "PhysAddr",
                   "FileSiz", "MemSiz", "Flags", "Align"]
        if self._preview_bytes:
            columns.append("Contents")

        rows = []
        for ph in segments:
            row = [
                ph.index, ph.segment_type, ph.offset, ph.virtual_address,
                ph.physical_address, ph.file_size, ph.memory_size, ph.flags,
                ph.alignment,
            ]
            if self._preview_bytes:
                row.append(_preview(ph.contents, self._preview_bytes))
            rows.append(row)

        self._console.table(
            "Program Headers", columns, rows,
            styles=["dim", "bright_cyan"],
        )

    def display_section_headers(self, sections: list[SectionHeaderEntry]) -> None:
        if not sections:
            self._console.info("No section headers.")
            return

        columns = ["#", "Name", "Type", "Flags", "Address", "Offset",
                   "Size", "Link", "Info", "Align", "EntSize"]
        if self._preview_bytes:
            columns.append("Contents")

        rows = []
        for sh in sections:
            row = [
                sh.index, sh.name, sh.section_type, sh.flags, sh.address,
                sh.offset, sh.size, sh.link, sh.info, sh.address_alignment,
                sh.entry_size,
            ]
            if self._preview_bytes:
                row.append(_preview(sh.contents, self._preview_bytes))
            rows.append(row)

        self._console.table(
            "Section Headers", columns, rows,
            styles=["dim", "bold bright_white", "bright_cyan"],
        )
