"""
Bounds-Aware Binary Reader
===========================

A read-only cursor over an immutable byte buffer.  Reads fixed-width
unsigned integers and whole :mod:`struct` records at arbitrary offsets
in either byte order, and extracts raw byte ranges as ``bytes`` or
lowercase hexadecimal text.

Every read is checked against the buffer length first and fails with
:class:`~elfscope.core.errors.OutOfBoundsError` instead of returning a
short result.  64-bit values are decoded with the ``Q`` struct code into
Python integers, so the full unsigned 64-bit range is represented
exactly.
"""

from __future__ import annotations

import struct

from elfscope.core.errors import OutOfBoundsError


_ORDER_PREFIX: dict[str, str] = {
    "little": "<",
    "big": ">",
}


class BinaryReader:
    """Byte-order aware reader with explicit bounds checking.

    Usage::

        reader = BinaryReader(raw_bytes, byte_order="big")
        e_type = reader.read_u16(16, field="e_type")
        p_type, p_flags = reader.unpack("II", 64, field="phdr[0]")
    """

    __slots__ = ("_data", "_byte_order", "_prefix")

    def __init__(self, data: bytes | bytearray | memoryview, byte_order: str = "little") -> None:
        """Initialise the reader.

        Args:
            data: Buffer to read from.  It is copied into immutable ``bytes``.
            byte_order: ``"little"`` or ``"big"``.

        Raises:
            ValueError: If *byte_order* is not recognised.
        """
        if byte_order not in _ORDER_PREFIX:
            raise ValueError(f"Unsupported byte order: {byte_order!r}")
        self._data: bytes = bytes(data)
        self._byte_order: str = byte_order
        self._prefix: str = _ORDER_PREFIX[byte_order]

    def __len__(self) -> int:
        return len(self._data)

    @property
    def byte_order(self) -> str:
        """Active byte order (``"little"`` or ``"big"``)."""
        return self._byte_order

    @property
    def data(self) -> bytes:
        """The underlying immutable buffer."""
        return self._data

    def with_byte_order(self, byte_order: str) -> BinaryReader:
        """Return a reader over the same buffer using *byte_order*."""
        return BinaryReader(self._data, byte_order)

    # ------------------------------------------------------------------ #
    #  Bounds checking
    # ------------------------------------------------------------------ #

    def ensure(self, offset: int, size: int, field: str = "") -> None:
        """Verify that ``[offset, offset + size)`` lies inside the buffer.

        Raises:
            OutOfBoundsError: If the range is negative or extends past the end.
        """
        if offset < 0 or size < 0 or offset + size > len(self._data):
            raise OutOfBoundsError(field, offset, size, len(self._data))

    # ------------------------------------------------------------------ #
    #  Integer reads
    # ------------------------------------------------------------------ #

    def unpack(self, fmt: str, offset: int, field: str = "") -> tuple[int, ...]:
        """Unpack a struct record at *offset* in the active byte order.

        Args:
            fmt: :mod:`struct` format without a byte-order prefix.
            offset: Start offset of the record.
            field: Name used in the error if the record is truncated.
        """
        full_fmt = self._prefix + fmt
        self.ensure(offset, struct.calcsize(full_fmt), field)
        return struct.unpack_from(full_fmt, self._data, offset)

    def read_u8(self, offset: int, field: str = "") -> int:
        """Read one unsigned byte."""
        return self.unpack("B", offset, field)[0]

    def read_u16(self, offset: int, field: str = "") -> int:
        """Read an unsigned 16-bit integer."""
        return self.unpack("H", offset, field)[0]

    def read_u32(self, offset: int, field: str = "") -> int:
        """Read an unsigned 32-bit integer."""
        return self.unpack("I", offset, field)[0]

    def read_u64(self, offset: int, field: str = "") -> int:
        """Read an unsigned 64-bit integer (exact over the full range)."""
        return self.unpack("Q", offset, field)[0]

    # ------------------------------------------------------------------ #
    #  Byte ranges
    # ------------------------------------------------------------------ #

    def read_bytes(self, offset: int, size: int, field: str = "") -> bytes:
        """Return *size* raw bytes starting at *offset*."""
        self.ensure(offset, size, field)
        return self._data[offset:offset + size]

    def read_hex(self, offset: int, size: int, field: str = "") -> str:
        """Return the lowercase hex encoding of a byte range."""
        return self.read_bytes(offset, size, field).hex()
