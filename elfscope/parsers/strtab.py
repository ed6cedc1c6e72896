"""
String Table Reader
====================

Resolves byte offsets inside an ELF string-table section (a concatenation
of NUL-terminated names) into Python strings.  Resolution is permissive:
an offset outside the table yields an empty name, never an error.
"""

from __future__ import annotations

from elfscope.parsers.binary_reader import BinaryReader


class StringTableReader:
    """Name lookup over one string-table section's contents.

    Usage::

        strtab = StringTableReader(shstrtab_section.contents)
        strtab.read_name(1)    # -> ".text"
    """

    def __init__(self, contents: bytes | bytearray | str) -> None:
        """Initialise the reader.

        Args:
            contents: Raw bytes of the section, or their hex encoding as
                      stored in :attr:`SectionHeaderEntry.contents`.
        """
        if isinstance(contents, str):
            contents = bytes.fromhex(contents)
        self._reader = BinaryReader(contents)

    def __len__(self) -> int:
        return len(self._reader)

    def read_name(self, offset: int) -> str:
        """Read the NUL-terminated name starting at *offset*.

        The scan stops at the first NUL byte or at the end of the table.
        Undecodable bytes are replaced rather than raised.

        Returns:
            The decoded name, or ``""`` if *offset* is outside the table.
        """
        size = len(self._reader)
        if offset < 0 or offset >= size:
            return ""
        data = self._reader.read_bytes(offset, size - offset)
        end = data.find(b"\x00")
        if end != -1:
            data = data[:end]
        return data.decode("utf-8", errors="replace")

    def names(self) -> list[str]:
        """Return every name stored in the table, in order."""
        data = self._reader.data
        if not data:
            return []
        parts = data.split(b"\x00")
        if data.endswith(b"\x00"):
            parts = parts[:-1]
        return [p.decode("utf-8", errors="replace") for p in parts]
