"""
ELFScope Errors
================

Exception hierarchy raised by the decoding pipeline.  Every failure
aborts the whole decode; there is no partial result.  Unrecognised
numeric codes are *not* errors (see :mod:`elfscope.parsers.symbols`).
"""

from __future__ import annotations


class ElfDecodeError(Exception):
    """Base class for every ELFScope decoding failure.

    Attributes:
        stage:  Pipeline stage that failed (``identify``, ``file_header``,
                ``program_headers``, ``section_headers``, ``names``), or
                ``None`` when raised outside a stage.
        offset: Buffer offset involved in the failure, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        stage: str | None = None,
        offset: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.offset = offset

    def __str__(self) -> str:
        if self.stage:
            return f"[{self.stage}] {self.message}"
        return self.message


class InvalidFormatError(ElfDecodeError):
    """The buffer is not an ELF image (bad magic, class or data byte)."""

    pass


class OutOfBoundsError(ElfDecodeError):
    """A computed offset/size would read past the end of the buffer.

    Attributes:
        field:     Name of the field or range being read.
        length:    Number of bytes requested.
        available: Total length of the buffer.
    """

    def __init__(
        self,
        field: str,
        offset: int,
        length: int,
        available: int,
        *,
        stage: str | None = None,
        message: str | None = None,
    ) -> None:
        self.field = field
        self.length = length
        self.available = available
        if message is None:
            message = (
                f"{field or 'read'}: {length} byte(s) at offset {offset:#x} "
                f"exceed buffer of {available} byte(s)"
            )
        super().__init__(message, stage=stage, offset=offset)


class ElfFileError(ElfDecodeError):
    """The input file could not be loaded (missing, unreadable, too large)."""

    pass
