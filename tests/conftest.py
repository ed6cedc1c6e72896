"""
Shared fixtures and a test-only ELF image encoder.

:func:`build_elf` lays out a synthetic image as::

    ElfN_Ehdr | ElfN_Phdr[] | section bodies ... | .shstrtab | pad | ElfN_Shdr[]

A null section is prepended and a ``.shstrtab`` section appended unless
disabled.  Any header field can be forced through *overrides* to build
corrupted images.
"""

from __future__ import annotations

import struct
from typing import Any

import pytest


ELF_MAGIC = b"\x7fELF"

# (ehsize, phentsize, shentsize)
SIZES: dict[int, tuple[int, int, int]] = {
    32: (52, 32, 40),
    64: (64, 56, 64),
}

_HEADER_FORMATS = {32: "HHIIIIIHHHHHH", 64: "HHIQQQIHHHHHH"}
_PHDR_FORMATS = {32: "IIIIIIII", 64: "IIQQQQQQ"}
_SHDR_FORMATS = {32: "IIIIIIIIII", 64: "IIQQQQIIQQ"}

SHT_STRTAB = 3
SHT_NOBITS = 8


def _pack_segment(prefix: str, bits: int, seg: dict[str, Any]) -> bytes:
    values = {
        "type": seg.get("type", 1),
        "flags": seg.get("flags", 0),
        "offset": seg.get("offset", 0),
        "vaddr": seg.get("vaddr", 0),
        "paddr": seg.get("paddr", seg.get("vaddr", 0)),
        "filesz": seg.get("filesz", 0),
        "memsz": seg.get("memsz", seg.get("filesz", 0)),
        "align": seg.get("align", 0),
    }
    if bits == 64:
        order = ("type", "flags", "offset", "vaddr", "paddr", "filesz", "memsz", "align")
    else:
        order = ("type", "offset", "vaddr", "paddr", "filesz", "memsz", "flags", "align")
    return struct.pack(prefix + _PHDR_FORMATS[bits], *(values[k] for k in order))


def build_elf(
    *,
    bits: int = 64,
    byte_order: str = "little",
    e_type: int = 2,
    e_machine: int = 62,
    e_version: int = 1,
    e_entry: int = 0x401000,
    e_flags: int = 0,
    segments: list[dict[str, Any]] | None = None,
    sections: list[dict[str, Any]] | None = None,
    add_null_section: bool = True,
    add_shstrtab: bool = True,
    overrides: dict[str, int] | None = None,
) -> bytes:
    """Encode a synthetic ELF image.

    Section dicts accept ``name``, ``type``, ``flags``, ``addr``, ``data``,
    ``size``, ``offset``, ``link``, ``info``, ``addralign``, ``entsize``
    and ``name_offset`` (forces ``sh_name``).  ``offset`` and ``size``
    override the computed placement.  Segment dicts accept the
    ``p_*`` member names without prefix.
    """
    segments = list(segments or [])
    prefix = "<" if byte_order == "little" else ">"
    ehsize, phentsize, shentsize = SIZES[bits]

    secs: list[dict[str, Any]] = []
    if add_null_section:
        secs.append({"name": "", "type": 0})
    secs.extend(dict(s) for s in (sections or []))
    if add_shstrtab:
        secs.append({"name": ".shstrtab", "type": SHT_STRTAB})

    # Section-name string table
    strtab = bytearray(b"\x00")
    name_offsets: list[int] = []
    for sec in secs:
        if "name_offset" in sec:
            name_offsets.append(sec["name_offset"])
        elif sec.get("name"):
            name_offsets.append(len(strtab))
            strtab += sec["name"].encode("utf-8") + b"\x00"
        else:
            name_offsets.append(0)
    if add_shstrtab:
        secs[-1]["data"] = bytes(strtab)

    # Bodies
    phoff = ehsize if segments else 0
    cursor = ehsize + len(segments) * phentsize
    body = bytearray()
    offsets: list[int] = []
    sizes: list[int] = []
    for sec in secs:
        data = sec.get("data", b"")
        if sec.get("type") == SHT_NOBITS:
            offsets.append(cursor)
            sizes.append(sec.get("size", 0))
        elif data:
            offsets.append(cursor)
            sizes.append(len(data))
            body += data
            cursor += len(data)
        else:
            offsets.append(0)
            sizes.append(0)

    padding = (-cursor) % 8
    shoff = cursor + padding if secs else 0

    header_values = {
        "e_type": e_type,
        "e_machine": e_machine,
        "e_version": e_version,
        "e_entry": e_entry,
        "e_phoff": phoff,
        "e_shoff": shoff,
        "e_flags": e_flags,
        "e_ehsize": ehsize,
        "e_phentsize": phentsize,
        "e_phnum": len(segments),
        "e_shentsize": shentsize,
        "e_shnum": len(secs),
        "e_shstrndx": len(secs) - 1 if add_shstrtab else 0,
    }
    header_values.update(overrides or {})

    ident = ELF_MAGIC + bytes([
        2 if bits == 64 else 1,
        1 if byte_order == "little" else 2,
        1,
        0,
    ]) + bytes(8)
    header = ident + struct.pack(prefix + _HEADER_FORMATS[bits], *header_values.values())

    phdrs = b"".join(_pack_segment(prefix, bits, seg) for seg in segments)

    shdrs = bytearray()
    for sec, name_offset, offset, size in zip(secs, name_offsets, offsets, sizes):
        shdrs += struct.pack(
            prefix + _SHDR_FORMATS[bits],
            name_offset,
            sec.get("type", 1),
            sec.get("flags", 0),
            sec.get("addr", 0),
            sec.get("offset", offset),
            sec.get("size", size),
            sec.get("link", 0),
            sec.get("info", 0),
            sec.get("addralign", 0),
            sec.get("entsize", 0),
        )

    return bytes(header + phdrs + body + bytes(padding) + shdrs)


@pytest.fixture
def sample_sections() -> list[dict[str, Any]]:
    """A small realistic set of sections."""
    return [
        {"name": ".text", "type": 1, "flags": 0x6, "addr": 0x401000,
         "data": bytes(range(32)), "addralign": 16},
        {"name": ".data", "type": 1, "flags": 0x3, "addr": 0x402000,
         "data": b"\xde\xad\xbe\xef", "addralign": 4},
        {"name": ".bss", "type": SHT_NOBITS, "flags": 0x3, "addr": 0x403000,
         "size": 0x100, "addralign": 32},
        {"name": ".comment", "type": 1, "flags": 0x30,
         "data": b"GCC: 13.2\x00", "addralign": 1, "entsize": 1},
    ]


@pytest.fixture
def elf64_le(sample_sections: list[dict[str, Any]]) -> bytes:
    """A 64-bit little-endian executable with one PT_PHDR and one PT_LOAD."""
    return build_elf(
        bits=64,
        byte_order="little",
        segments=[
            {"type": 6, "flags": 4, "offset": 64, "vaddr": 0x400040,
             "filesz": 2 * 56, "align": 8},
            {"type": 1, "flags": 5, "offset": 0, "vaddr": 0x400000,
             "filesz": 64, "memsz": 0x1000, "align": 0x1000},
        ],
        sections=sample_sections,
    )


@pytest.fixture
def elf_file(tmp_path, elf64_le: bytes):
    """Write :func:`elf64_le` to a temporary file and return its path."""
    path = tmp_path / "sample.elf"
    path.write_bytes(elf64_le)
    return path
