from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from pehdr.reader import Layout
from pehdr.tables import is_pe32_plus_machine

DOS_LAYOUT = Layout(
    "DOS header",
    [
        ("signature", "2s"),
        ("last_size", "h"),
        ("num_blocks", "h"),
        ("num_reloc", "h"),
        ("hdr_size", "h"),
        ("min_alloc", "h"),
        ("max_alloc", "h"),
        ("ss", "H"),
        ("sp", "H"),
        ("checksum", "h"),
        ("ip", "H"),
        ("cs", "H"),
        ("reloc_pos", "h"),
        ("num_overlays", "h"),
        ("reserved1", "4h"),
        ("oem_id", "h"),
        ("oem_info", "h"),
        ("reserved2", "10h"),
        ("pe_header_offset", "i"),
    ],
)

# Size of the "PE\0\0" magic between the DOS stub and the COFF header.
PE_SIGNATURE_SIZE = 4

COFF_LAYOUT = Layout(
    "COFF header",
    [
        ("machine", "H"),
        ("number_of_sections", "H"),
        ("time_date_stamp", "I"),
        ("pointer_to_symbol_table", "I"),
        ("number_of_symbols", "I"),
        ("size_of_optional_header", "H"),
        ("characteristics", "H"),
    ],
)


def _optional_layout(name: str, pe32_plus: bool) -> Layout:
    # "Q" fields are the ones whose width follows the image word size.
    wide = "Q" if pe32_plus else "I"
    fields = [
        ("magic", "H"),
        ("major_linker_version", "B"),
        ("minor_linker_version", "B"),
        ("size_of_code", "I"),
        ("size_of_initialized_data", "I"),
        ("size_of_uninitialized_data", "I"),
        ("address_of_entry_point", "I"),
        ("base_of_code", "I"),
    ]
    if not pe32_plus:
        fields.append(("base_of_data", "I"))
    fields += [
        ("image_base", wide),
        ("section_alignment", "I"),
        ("file_alignment", "I"),
        ("major_os_version", "H"),
        ("minor_os_version", "H"),
        ("major_image_version", "H"),
        ("minor_image_version", "H"),
        ("major_subsystem_version", "H"),
        ("minor_subsystem_version", "H"),
        ("win32_version_value", "I"),
        ("size_of_image", "I"),
        ("size_of_headers", "I"),
        ("checksum", "I"),
        ("subsystem", "H"),
        ("dll_characteristics", "H"),
        ("size_of_stack_reserve", wide),
        ("size_of_stack_commit", wide),
        ("size_of_heap_reserve", wide),
        ("size_of_heap_commit", wide),
        ("loader_flags", "I"),
        ("number_of_rva_and_sizes", "I"),
    ]
    return Layout(name, fields)


OPTIONAL32_LAYOUT = _optional_layout("PE32 optional header", pe32_plus=False)
OPTIONAL64_LAYOUT = _optional_layout("PE32+ optional header", pe32_plus=True)


@dataclass(frozen=True)
class DosHeader:
    signature: bytes
    last_size: int
    num_blocks: int
    num_reloc: int
    hdr_size: int
    min_alloc: int
    max_alloc: int
    ss: int
    sp: int
    checksum: int
    ip: int
    cs: int
    reloc_pos: int
    num_overlays: int
    reserved1: Tuple[int, ...]
    oem_id: int
    oem_info: int
    reserved2: Tuple[int, ...]
    pe_header_offset: int


@dataclass(frozen=True)
class CoffHeader:
    machine: int
    number_of_sections: int
    time_date_stamp: int
    pointer_to_symbol_table: int
    number_of_symbols: int
    size_of_optional_header: int
    characteristics: int

    @property
    def is_pe32_plus(self) -> bool:
        return is_pe32_plus_machine(self.machine)


@dataclass(frozen=True)
class OptionalHeader:
    pe32_plus: bool
    magic: int
    major_linker_version: int
    minor_linker_version: int
    size_of_code: int
    size_of_initialized_data: int
    size_of_uninitialized_data: int
    address_of_entry_point: int
    base_of_code: int
    image_base: int
    section_alignment: int
    file_alignment: int
    major_os_version: int
    minor_os_version: int
    major_image_version: int
    minor_image_version: int
    major_subsystem_version: int
    minor_subsystem_version: int
    win32_version_value: int
    size_of_image: int
    size_of_headers: int
    checksum: int
    subsystem: int
    dll_characteristics: int
    size_of_stack_reserve: int
    size_of_stack_commit: int
    size_of_heap_reserve: int
    size_of_heap_commit: int
    loader_flags: int
    number_of_rva_and_sizes: int
    # PE32 only; PE32+ drops the field to make room for the wider image base.
    base_of_data: Optional[int] = None

    @property
    def word_bits(self) -> int:
        return 64 if self.pe32_plus else 32


def decode_dos_header(data, off: int = 0) -> Tuple[DosHeader, int]:
    return DosHeader(**DOS_LAYOUT.read(data, off)), DOS_LAYOUT.size


def coff_header_offset(dos: DosHeader) -> int:
    return dos.pe_header_offset + PE_SIGNATURE_SIZE


def decode_coff_header(data, off: int) -> Tuple[CoffHeader, int]:
    return CoffHeader(**COFF_LAYOUT.read(data, off)), COFF_LAYOUT.size


def optional_layout(pe32_plus: bool) -> Layout:
    return OPTIONAL64_LAYOUT if pe32_plus else OPTIONAL32_LAYOUT


def decode_optional_header(data, off: int, *, pe32_plus: bool) -> Tuple[OptionalHeader, int]:
    """
    Decode the fixed part of the optional header.

    The layout is chosen by the caller from the COFF machine code, not from
    the magic field; the data directory table that follows is not read.
    """
    layout = optional_layout(pe32_plus)
    return OptionalHeader(pe32_plus=pe32_plus, **layout.read(data, off)), layout.size
