"""
ELFScope Parsers
=================

Binary decoding pipeline:

- ``binary_reader`` -- bounds-checked integer and byte-range reads
- ``symbols``       -- ELF constant tables and hex formatting
- ``strtab``        -- NUL-terminated string table lookups
- ``elf_parser``    -- stage orchestration and the ``decode`` entry point
"""
