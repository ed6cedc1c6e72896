"""
ELF Symbolic Constants
=======================

Static translation tables from the numeric codes stored in an ELF image
to their symbolic names, plus the hexadecimal formatting helpers used
for every address, offset and flag field of the decoded model.

Every lookup is total: a code missing from its table is rendered as an
``UNKNOWN_*(value)`` token instead of being dropped or raising.

References:
    - TIS Committee. (1995). Tool Interface Standard (TIS) Executable and
      Linkable Format (ELF) Specification, Version 1.2.
    - System V Application Binary Interface, Edition 4.1.
    - Linux man page: elf(5).
"""

from __future__ import annotations


# ---------------------------------------------------------------------------
# Identification
# ---------------------------------------------------------------------------

ELF_MAGIC: bytes = b"\x7fELF"
EI_NIDENT: int = 16
EI_CLASS: int = 4
EI_DATA: int = 5

ELFCLASS32: int = 1
ELFCLASS64: int = 2

ELFDATA2LSB: int = 1  # Little-endian
ELFDATA2MSB: int = 2  # Big-endian

_ELFCLASS_NAMES: dict[int, str] = {
    ELFCLASS32: "ELFCLASS32",
    ELFCLASS64: "ELFCLASS64",
}

_ELFDATA_NAMES: dict[int, str] = {
    ELFDATA2LSB: "ELFDATA2LSB",
    ELFDATA2MSB: "ELFDATA2MSB",
}

# Special section indices
SHN_XINDEX: int = 0xFFFF


# ---------------------------------------------------------------------------
# File types (e_type)
# ---------------------------------------------------------------------------

ET_NONE: int = 0
ET_REL: int = 1
ET_EXEC: int = 2
ET_DYN: int = 3
ET_CORE: int = 4

_ET_NAMES: dict[int, str] = {
    ET_NONE: "ET_NONE",
    ET_REL: "ET_REL",
    ET_EXEC: "ET_EXEC",
    ET_DYN: "ET_DYN",
    ET_CORE: "ET_CORE",
    0xFE00: "ET_LOOS",
    0xFEFF: "ET_HIOS",
    0xFF00: "ET_LOPROC",
    0xFFFF: "ET_HIPROC",
}


# ---------------------------------------------------------------------------
# Machines (e_machine)
# ---------------------------------------------------------------------------

EM_386: int = 3
EM_ARM: int = 40
EM_X86_64: int = 62
EM_AARCH64: int = 183
EM_RISCV: int = 243

_EM_NAMES: dict[int, str] = {
    0: "EM_NONE",
    1: "EM_M32",
    2: "EM_SPARC",
    EM_386: "EM_386",
    4: "EM_68K",
    5: "EM_88K",
    7: "EM_860",
    8: "EM_MIPS",
    10: "EM_MIPS_RS3_LE",
    15: "EM_PARISC",
    18: "EM_SPARC32PLUS",
    20: "EM_PPC",
    21: "EM_PPC64",
    22: "EM_S390",
    EM_ARM: "EM_ARM",
    42: "EM_SH",
    43: "EM_SPARCV9",
    50: "EM_IA_64",
    EM_X86_64: "EM_X86_64",
    83: "EM_AVR",
    94: "EM_XTENSA",
    164: "EM_HEXAGON",
    EM_AARCH64: "EM_AARCH64",
    190: "EM_CUDA",
    224: "EM_AMDGPU",
    EM_RISCV: "EM_RISCV",
    247: "EM_BPF",
    258: "EM_LOONGARCH",
}


# ---------------------------------------------------------------------------
# Segment types (p_type)
# ---------------------------------------------------------------------------

PT_NULL: int = 0
PT_LOAD: int = 1
PT_DYNAMIC: int = 2
PT_INTERP: int = 3
PT_NOTE: int = 4
PT_PHDR: int = 6

_PT_NAMES: dict[int, str] = {
    PT_NULL: "PT_NULL",
    PT_LOAD: "PT_LOAD",
    PT_DYNAMIC: "PT_DYNAMIC",
    PT_INTERP: "PT_INTERP",
    PT_NOTE: "PT_NOTE",
    5: "PT_SHLIB",
    PT_PHDR: "PT_PHDR",
    7: "PT_TLS",
    0x60000000: "PT_LOOS",
    0x6474E550: "PT_GNU_EH_FRAME",
    0x6474E551: "PT_GNU_STACK",
    0x6474E552: "PT_GNU_RELRO",
    0x6474E553: "PT_GNU_PROPERTY",
    0x6FFFFFFF: "PT_HIOS",
    0x70000000: "PT_LOPROC",
    0x70000001: "PT_ARM_EXIDX",
    0x7FFFFFFF: "PT_HIPROC",
}

# Segment permission flags (p_flags), tested in READ, WRITE, EXECUTE order
PF_X: int = 0x1
PF_W: int = 0x2
PF_R: int = 0x4

_PF_TOKENS: tuple[tuple[int, str], ...] = (
    (PF_R, "READ"),
    (PF_W, "WRITE"),
    (PF_X, "EXECUTE"),
)


# ---------------------------------------------------------------------------
# Section types (sh_type)
# ---------------------------------------------------------------------------

SHT_NULL: int = 0
SHT_PROGBITS: int = 1
SHT_SYMTAB: int = 2
SHT_STRTAB: int = 3
SHT_NOBITS: int = 8

_SHT_NAMES: dict[int, str] = {
    SHT_NULL: "SHT_NULL",
    SHT_PROGBITS: "SHT_PROGBITS",
    SHT_SYMTAB: "SHT_SYMTAB",
    SHT_STRTAB: "SHT_STRTAB",
    4: "SHT_RELA",
    5: "SHT_HASH",
    6: "SHT_DYNAMIC",
    7: "SHT_NOTE",
    SHT_NOBITS: "SHT_NOBITS",
    9: "SHT_REL",
    10: "SHT_SHLIB",
    11: "SHT_DYNSYM",
    14: "SHT_INIT_ARRAY",
    15: "SHT_FINI_ARRAY",
    16: "SHT_PREINIT_ARRAY",
    17: "SHT_GROUP",
    18: "SHT_SYMTAB_SHNDX",
    0x60000000: "SHT_LOOS",
    0x6FFFFFF5: "SHT_GNU_ATTRIBUTES",
    0x6FFFFFF6: "SHT_GNU_HASH",
    0x6FFFFFF7: "SHT_GNU_LIBLIST",
    0x6FFFFFF8: "SHT_CHECKSUM",
    0x6FFFFFFD: "SHT_GNU_verdef",
    0x6FFFFFFE: "SHT_GNU_verneed",
    0x6FFFFFFF: "SHT_GNU_versym",
    0x70000000: "SHT_LOPROC",
    0x70000001: "SHT_ARM_EXIDX",
    0x70000003: "SHT_ARM_ATTRIBUTES",
    0x7FFFFFFF: "SHT_HIPROC",
}

# Section attribute flags (sh_flags), in ascending value order
SHF_WRITE: int = 0x1
SHF_ALLOC: int = 0x2
SHF_EXECINSTR: int = 0x4

_SHF_NAMES: tuple[tuple[int, str], ...] = (
    (SHF_WRITE, "SHF_WRITE"),
    (SHF_ALLOC, "SHF_ALLOC"),
    (SHF_EXECINSTR, "SHF_EXECINSTR"),
    (0x10, "SHF_MERGE"),
    (0x20, "SHF_STRINGS"),
    (0x40, "SHF_INFO_LINK"),
    (0x80, "SHF_LINK_ORDER"),
    (0x100, "SHF_OS_NONCONFORMING"),
    (0x200, "SHF_GROUP"),
    (0x400, "SHF_TLS"),
    (0x800, "SHF_COMPRESSED"),
    (0x0FF00000, "SHF_MASKOS"),
    (0xF0000000, "SHF_MASKPROC"),
)


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

def elf_class_name(code: int) -> str:
    """Return ``ELFCLASS32``/``ELFCLASS64`` for an identification class byte."""
    return _ELFCLASS_NAMES.get(code, f"UNKNOWN_CLASS({code})")


def data_encoding_name(code: int) -> str:
    """Return ``ELFDATA2LSB``/``ELFDATA2MSB`` for an identification data byte."""
    return _ELFDATA_NAMES.get(code, f"UNKNOWN_DATA({code})")


def file_type_name(code: int) -> str:
    """Translate an ``e_type`` value, e.g. ``2`` -> ``"ET_EXEC"``."""
    return _ET_NAMES.get(code, f"UNKNOWN_TYPE({code})")


def machine_name(code: int) -> str:
    """Translate an ``e_machine`` value, e.g. ``62`` -> ``"EM_X86_64"``."""
    return _EM_NAMES.get(code, f"UNKNOWN_MACHINE({code})")


def segment_type_name(code: int) -> str:
    """Translate a ``p_type`` value; unknown codes keep their hex value."""
    return _PT_NAMES.get(code, f"UNKNOWN_PT(0x{code:x})")


def section_type_name(code: int) -> str:
    """Translate an ``sh_type`` value; unknown codes keep their hex value."""
    return _SHT_NAMES.get(code, f"UNKNOWN_SHT(0x{code:x})")


def segment_flags_text(mask: int) -> str:
    """Convert program header flags to a pipe-joined token list.

    Args:
        mask: Program header flags value (``p_flags``).

    Returns:
        String like ``"READ|EXECUTE"`` for ``0b101``, or ``"none"``.
    """
    parts = [token for bit, token in _PF_TOKENS if mask & bit]
    return "|".join(parts) if parts else "none"


def section_flags_text(mask: int) -> str:
    """Convert a section flags bitmask to lowercase short names.

    Every table entry whose bits intersect *mask* contributes its name
    without the ``SHF_`` prefix, so the OS/processor mask entries match
    any bit inside their range.

    Args:
        mask: Section header flags value (``sh_flags``).

    Returns:
        String like ``"write|alloc"``, or ``"none"`` when no flag is set.
    """
    parts = [
        name[len("SHF_"):].lower()
        for bit, name in _SHF_NAMES
        if mask & bit
    ]
    return "|".join(parts) if parts else "none"


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def format_address(value: int | str, is_64_bit: bool = False) -> str:
    """Render an address or file offset as fixed-width hexadecimal.

    Already-formatted ``0x`` strings are returned unchanged.

    Args:
        value: Integer address, or a previously formatted string.
        is_64_bit: Pad to 16 digits when ``True``, 8 otherwise.
    """
    if isinstance(value, str) and value.startswith("0x"):
        return value
    width = 16 if is_64_bit else 8
    return f"0x{int(value):0{width}x}"


def format_value(value: int | str, is_64_bit: bool = False) -> str:
    """Render a generic flag/value field as fixed-width hexadecimal.

    Same rendering rules as :func:`format_address`.  Callers formatting a
    field that is 32 bits wide in both layouts (``e_flags``) leave
    *is_64_bit* at its default.
    """
    return format_address(value, is_64_bit)


def parse_hex(text: int | str) -> int:
    """Return the integer behind a value rendered by :func:`format_address`."""
    if isinstance(text, int):
        return text
    return int(text, 16)
