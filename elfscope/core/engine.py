"""
ELFScope Decoding Engine
=========================

File-level orchestration around :func:`elfscope.parsers.elf_parser.decode`:
reads the input from disk within the configured size limit, runs the
decoder and logs timing and summary counts.

The decoder itself is synchronous and reentrant; :meth:`ElfscopeEngine.analyze`
runs it in the default executor so async callers are not blocked.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from shared.config import ScopeConfig
from shared.logger import ScopeLogger

from elfscope.core.errors import ElfDecodeError, ElfFileError
from elfscope.core.models import ParsedImage
from elfscope.parsers.elf_parser import decode


class ElfscopeEngine:
    """Loads ELF files and decodes them into :class:`ParsedImage` values.

    Usage::

        engine = ElfscopeEngine()
        image = engine.analyze_sync("/usr/bin/ls")

    Or asynchronously::

        image = await engine.analyze("/usr/bin/ls")
    """

    def __init__(
        self,
        config: ScopeConfig | None = None,
        logger: ScopeLogger | None = None,
    ) -> None:
        """Initialise the engine.

        Args:
            config: ELFScope configuration.  Defaults are used if not provided.
            logger: Logger instance.  A new one is created if not provided.
        """
        self._config: ScopeConfig = config or ScopeConfig()
        self._logger: ScopeLogger = logger or ScopeLogger(
            "engine", console_output=False,
        )

    # ------------------------------------------------------------------ #
    #  Entry points
    # ------------------------------------------------------------------ #

    async def analyze(self, file_path: str | Path) -> ParsedImage:
        """Decode the ELF file at *file_path* without blocking the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.analyze_sync, file_path)

    def analyze_sync(self, file_path: str | Path) -> ParsedImage:
        """Read and decode the ELF file at *file_path*.

        Raises:
            ElfFileError: If the file is missing, unreadable or too large.
            ElfDecodeError: If the contents are not a decodable ELF image.
        """
        data = self.load(file_path)
        return self.decode_bytes(data, label=str(file_path))

    def decode_bytes(self, data: bytes, label: str = "<buffer>") -> ParsedImage:
        """Decode an in-memory image, logging timing and the outcome."""
        try:
            with self._logger.timed(f"decode {label}"):
                image = decode(data)
        except ElfDecodeError as exc:
            with self._logger.stage(exc.stage or "decode"):
                self._logger.error("Failed to decode %s: %s", label, exc)
            raise

        header = image.file_header
        self._logger.info(
            "Decoded %s: %s %s, %d-bit %s-endian, %d segment(s), %d section(s)",
            label,
            header.file_type,
            header.machine,
            header.word_width,
            header.byte_order,
            len(image.program_headers),
            len(image.section_headers),
        )
        return image

    # ------------------------------------------------------------------ #
    #  File loading
    # ------------------------------------------------------------------ #

    def load(self, file_path: str | Path) -> bytes:
        """Read *file_path* into memory, enforcing ``decoder.max_file_size``.

        Raises:
            ElfFileError: If the file cannot be read or exceeds the limit.
        """
        path = Path(file_path)
        if not path.is_file():
            self._logger.error("File not found: %s", path)
            raise ElfFileError(f"File not found: {path}")

        file_size = path.stat().st_size
        max_size = self._config.decoder.max_file_size
        if file_size > max_size:
            self._logger.error(
                "File too large: %s (%d bytes, max %d)", path, file_size, max_size,
            )
            raise ElfFileError(
                f"File too large: {file_size:,} bytes (max: {max_size:,} bytes)"
            )

        try:
            data = path.read_bytes()
        except OSError as exc:
            raise ElfFileError(f"Cannot read {path}: {exc}") from exc

        self._logger.debug("Loaded %s (%d bytes)", path, len(data))
        return data
