"""Tests for the ELF decoding pipeline."""

import pytest

from elfscope import decode
from elfscope.core.errors import ElfDecodeError, InvalidFormatError, OutOfBoundsError
from elfscope.parsers.elf_parser import ElfParser

from conftest import SIZES, build_elf


LAYOUTS = [(64, "little"), (64, "big"), (32, "little"), (32, "big")]


def _build_layout(bits, byte_order, sections):
    ehsize, phentsize, _ = SIZES[bits]
    return build_elf(
        bits=bits,
        byte_order=byte_order,
        e_flags=0x5000200,
        segments=[
            {"type": 6, "flags": 4, "offset": ehsize, "vaddr": 0x400000 + ehsize,
             "filesz": 2 * phentsize, "align": 8},
            {"type": 1, "flags": 5, "offset": 0, "vaddr": 0x400000,
             "filesz": ehsize, "memsz": 0x2000, "align": 0x1000},
        ],
        sections=sections,
    )


def _independent_name(buffer, strtab_offset, strtab_size, name_offset):
    table = buffer[strtab_offset:strtab_offset + strtab_size]
    if name_offset >= len(table):
        return ""
    end = table.find(b"\x00", name_offset)
    return table[name_offset:end if end != -1 else len(table)].decode()


# ---------------------------------------------------------------------------
# Layouts
# ---------------------------------------------------------------------------

class TestLayouts:

    @pytest.mark.parametrize("bits, byte_order", LAYOUTS)
    def test_header_fields(self, bits, byte_order, sample_sections):
        data = _build_layout(bits, byte_order, sample_sections)
        header = decode(data).file_header
        width = 16 if bits == 64 else 8

        assert header.ident == data[:16].hex()
        assert header.elf_class == ("ELFCLASS64" if bits == 64 else "ELFCLASS32")
        assert header.data_encoding == (
            "ELFDATA2LSB" if byte_order == "little" else "ELFDATA2MSB"
        )
        assert header.file_type == "ET_EXEC"
        assert header.machine == "EM_X86_64"
        assert header.version == 1
        assert header.entry_point == f"0x{0x401000:0{width}x}"
        assert header.program_header_offset == f"0x{SIZES[bits][0]:0{width}x}"
        assert header.flags == "0x05000200"
        assert header.header_size == SIZES[bits][0]
        assert header.program_header_entry_size == SIZES[bits][1]
        assert header.section_header_entry_size == SIZES[bits][2]
        assert header.word_width == bits
        assert header.byte_order == byte_order
        assert header.has_valid_magic

    @pytest.mark.parametrize("bits, byte_order", LAYOUTS)
    def test_entry_counts_match_header(self, bits, byte_order, sample_sections):
        image = decode(_build_layout(bits, byte_order, sample_sections))
        header = image.file_header
        assert len(image.program_headers) == header.program_header_count == 2
        assert len(image.section_headers) == header.section_header_count == 6
        assert [p.index for p in image.program_headers] == [0, 1]
        assert [s.index for s in image.section_headers] == list(range(6))

    @pytest.mark.parametrize("bits, byte_order", LAYOUTS)
    def test_segments(self, bits, byte_order, sample_sections):
        data = _build_layout(bits, byte_order, sample_sections)
        phdr, load = decode(data).program_headers
        ehsize, phentsize, _ = SIZES[bits]

        assert phdr.segment_type == "PT_PHDR"
        assert phdr.flags == "READ"
        assert phdr.file_offset == ehsize
        assert phdr.data == data[ehsize:ehsize + 2 * phentsize]

        assert load.segment_type == "PT_LOAD"
        assert load.flags == "READ|EXECUTE"
        assert load.virtual_address == format(0x400000, f"#0{18 if bits == 64 else 10}x")
        assert load.file_size == ehsize
        assert load.memory_size == 0x2000
        assert load.alignment == 0x1000
        assert load.contents == data[:ehsize].hex()

    @pytest.mark.parametrize("bits, byte_order", LAYOUTS)
    def test_section_names_match_string_table(self, bits, byte_order, sample_sections):
        data = _build_layout(bits, byte_order, sample_sections)
        image = decode(data)
        strtab = image.string_table

        assert [s.name for s in image.section_headers] == [
            "", ".text", ".data", ".bss", ".comment", ".shstrtab",
        ]
        for section in image.section_headers:
            assert section.name == _independent_name(
                data, strtab.file_offset, strtab.size, section.name_offset,
            )

    @pytest.mark.parametrize("bits, byte_order", LAYOUTS)
    def test_section_fields(self, bits, byte_order, sample_sections):
        image = decode(_build_layout(bits, byte_order, sample_sections))
        text = image.section_by_name(".text")
        comment = image.section_by_name(".comment")

        assert text.section_type == "SHT_PROGBITS"
        assert text.flags == "alloc|execinstr"
        assert text.data == bytes(range(32))
        assert text.address_alignment == 16
        assert comment.flags == "merge|strings"
        assert comment.entry_size == 1
        assert image.section_by_name(".data").flags == "write|alloc"
        assert image.section_headers[0].section_type == "SHT_NULL"
        assert image.section_headers[0].flags == "none"

    def test_32_bit_flags_follow_memsz(self):
        # Elf32_Phdr stores p_flags after p_memsz, Elf64_Phdr right after p_type
        data = build_elf(
            bits=32,
            byte_order="big",
            segments=[{"type": 1, "flags": 6, "offset": 0, "vaddr": 0x8000,
                       "paddr": 0x9000, "filesz": 16, "memsz": 32, "align": 4}],
        )
        segment = decode(data).program_headers[0]
        assert segment.flags == "READ|WRITE"
        assert segment.virtual_address == "0x00008000"
        assert segment.physical_address == "0x00009000"
        assert segment.file_size == 16
        assert segment.memory_size == 32
        assert segment.alignment == 4

    def test_large_64_bit_address(self):
        data = build_elf(e_entry=0xFFFFFFFF80000000)
        assert decode(data).file_header.entry_point == "0xffffffff80000000"


# ---------------------------------------------------------------------------
# Edge cases
# ---------------------------------------------------------------------------

class TestEdgeCases:

    def test_minimal_image(self):
        data = build_elf(add_shstrtab=False)
        image = decode(data)
        assert image.program_headers == ()
        assert len(image.section_headers) == 1
        assert image.section_headers[0].name == ""
        assert image.section_headers[0].section_type == "SHT_NULL"
        assert image.size == len(data)

    def test_no_sections(self):
        data = build_elf(add_null_section=False, add_shstrtab=False)
        image = decode(data)
        assert image.section_headers == ()
        assert image.string_table is None

    def test_nobits_section_has_no_contents(self):
        data = build_elf(sections=[
            {"name": ".bss", "type": 8, "flags": 0x3, "size": 0x100000},
        ])
        bss = decode(data).section_by_name(".bss")
        assert bss.section_type == "SHT_NOBITS"
        assert bss.contents == ""
        assert bss.size == 0x100000
        assert not bss.has_file_data

    def test_unknown_codes_are_preserved(self):
        data = build_elf(
            e_type=0x1234,
            e_machine=9999,
            segments=[{"type": 0x12345678}],
            sections=[{"name": ".odd", "type": 0x99}],
        )
        image = decode(data)
        assert image.file_header.file_type == "UNKNOWN_TYPE(4660)"
        assert image.file_header.machine == "UNKNOWN_MACHINE(9999)"
        assert image.program_headers[0].segment_type == "UNKNOWN_PT(0x12345678)"
        assert image.section_by_name(".odd").section_type == "UNKNOWN_SHT(0x99)"

    def test_name_offset_outside_table_is_empty(self):
        data = build_elf(sections=[{"name": ".x", "name_offset": 5000}])
        assert decode(data).section_headers[1].name == ""

    def test_extended_string_table_index(self):
        data = build_elf(
            add_null_section=False,
            sections=[
                {"name": "", "type": 0, "link": 2},
                {"name": ".text", "data": b"\x90"},
            ],
            overrides={"e_shstrndx": 0xFFFF},
        )
        image = decode(data)
        assert [s.name for s in image.section_headers] == ["", ".text", ".shstrtab"]
        assert image.string_table.index == 2

    def test_accepts_bytearray_and_memoryview(self, elf64_le):
        expected = decode(elf64_le)
        assert decode(bytearray(elf64_le)) == expected
        assert decode(memoryview(elf64_le)) == expected

    def test_decoding_is_deterministic(self, elf64_le):
        first = ElfParser(elf64_le).parse()
        second = ElfParser(elf64_le).parse()
        assert first == second
        assert first.to_json() == second.to_json()


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

class TestFailures:

    def test_bad_magic(self, elf64_le):
        data = b"\x7fELG" + elf64_le[4:]
        with pytest.raises(InvalidFormatError) as info:
            decode(data)
        assert info.value.stage == "identify"

    @pytest.mark.parametrize("data", [b"", b"\x7f", b"MZ\x90\x00garbage"])
    def test_short_or_foreign_input(self, data):
        with pytest.raises(InvalidFormatError):
            decode(data)

    def test_magic_only_is_out_of_bounds(self):
        with pytest.raises(OutOfBoundsError) as info:
            decode(b"\x7fELF")
        assert info.value.stage == "identify"

    @pytest.mark.parametrize("index, value", [(4, 0), (4, 3), (5, 0), (5, 9)])
    def test_unsupported_identification(self, elf64_le, index, value):
        data = bytearray(elf64_le)
        data[index] = value
        with pytest.raises(InvalidFormatError):
            decode(bytes(data))

    def test_truncated_header(self, elf64_le):
        with pytest.raises(OutOfBoundsError) as info:
            decode(elf64_le[:40])
        assert info.value.stage == "file_header"

    def test_program_header_table_past_end(self):
        data = build_elf(segments=[{"type": 1}], overrides={"e_phoff": 0xFFFFFF})
        with pytest.raises(OutOfBoundsError) as info:
            decode(data)
        assert info.value.stage == "program_headers"
        assert "[program_headers]" in str(info.value)

    def test_segment_contents_past_end(self):
        data = build_elf(segments=[{"type": 1, "offset": 0, "filesz": 1 << 20}])
        with pytest.raises(OutOfBoundsError) as info:
            decode(data)
        assert info.value.stage == "program_headers"

    def test_section_header_table_past_end(self):
        data = build_elf(overrides={"e_shnum": 100})
        with pytest.raises(OutOfBoundsError) as info:
            decode(data)
        assert info.value.stage == "section_headers"

    def test_section_contents_past_end(self):
        data = build_elf(sections=[{"name": ".big", "offset": 0, "size": 1 << 20}])
        with pytest.raises(OutOfBoundsError) as info:
            decode(data)
        assert info.value.stage == "section_headers"

    def test_string_table_index_out_of_range(self):
        data = build_elf(overrides={"e_shstrndx": 50})
        with pytest.raises(OutOfBoundsError) as info:
            decode(data)
        assert info.value.stage == "names"
        assert info.value.field == "e_shstrndx"

    def test_all_failures_share_base_class(self):
        for data in (b"", b"\x7fELF"):
            with pytest.raises(ElfDecodeError):
                decode(data)
