from __future__ import annotations

from typing import List, Sequence, Tuple

from pehdr.headers import CoffHeader, DosHeader, OptionalHeader
from pehdr.tables import (
    DLL_CHARACTERISTICS,
    FILE_CHARACTERISTICS,
    flag_labels,
    machine_name,
    optional_magic_name,
    subsystem_name,
)

LINE_WIDTH = 80

Row = Tuple[str, str]


def banner(title: str, *, width: int = LINE_WIDTH) -> str:
    head = f"-- {title} "
    if len(head) >= width:
        raise ValueError(f"Title {title!r} does not fit in {width} columns.")
    return head + "-" * (width - len(head))


def hex_dec(value: int, bits: int) -> str:
    digits = bits // 4
    return f"0x{value & ((1 << bits) - 1):0{digits}x} ({value})"


def address(value: int, bits: int) -> str:
    digits = bits // 4
    return f"0x{value & ((1 << bits) - 1):0{digits}x}"


def version(major: int, minor: int) -> str:
    return f"{major}.{minor}"


def flags_text(value: int, table, bits: int = 16) -> str:
    labels = flag_labels(value, table)
    if not labels:
        return f"None ({address(value, bits)})"
    return f"{' '.join(labels)} ({address(value, bits)})"


def printable(raw: bytes) -> str:
    return "".join(chr(b) if 0x20 <= b < 0x7F else "." for b in raw)


def block(title: str, rows: Sequence[Row], *, width: int = LINE_WIDTH) -> List[str]:
    pad = max((len(label) for label, _ in rows), default=0)
    lines = [banner(title, width=width), ""]
    lines += [f"{label.rjust(pad)}: {text}" for label, text in rows]
    lines.append("")
    return lines


def render_dos(hdr: DosHeader, *, width: int = LINE_WIDTH) -> List[str]:
    rows: List[Row] = [
        ("signature", f"'{printable(hdr.signature)}'"),
        ("lastSize", hex_dec(hdr.last_size, 16)),
        ("numBlocks", hex_dec(hdr.num_blocks, 16)),
        ("numReloc", hex_dec(hdr.num_reloc, 16)),
        ("hdrSize", hex_dec(hdr.hdr_size, 16)),
        ("minAlloc", hex_dec(hdr.min_alloc, 16)),
        ("maxAlloc", hex_dec(hdr.max_alloc, 16)),
        ("SS", address(hdr.ss, 16)),
        ("SP", address(hdr.sp, 16)),
        ("checksum", hex_dec(hdr.checksum, 16)),
        ("IP", address(hdr.ip, 16)),
        ("CS", address(hdr.cs, 16)),
        ("relocPos", hex_dec(hdr.reloc_pos, 16)),
        ("numOverlays", hex_dec(hdr.num_overlays, 16)),
        ("OEM Id", hex_dec(hdr.oem_id, 16)),
        ("OEM Info", hex_dec(hdr.oem_info, 16)),
        ("LFA New", hex_dec(hdr.pe_header_offset, 32)),
    ]
    return block("DOS Header", rows, width=width)


def render_coff(hdr: CoffHeader, *, width: int = LINE_WIDTH) -> List[str]:
    rows: List[Row] = [
        ("Machine", f"{machine_name(hdr.machine)} ({address(hdr.machine, 16)})"),
        ("Number of sections", hex_dec(hdr.number_of_sections, 16)),
        ("Time/Date stamp", hex_dec(hdr.time_date_stamp, 32)),
        ("Symbol table", address(hdr.pointer_to_symbol_table, 32)),
        ("Number of symbols", hex_dec(hdr.number_of_symbols, 32)),
        ("Optional header size", hex_dec(hdr.size_of_optional_header, 16)),
        ("Characteristics", flags_text(hdr.characteristics, FILE_CHARACTERISTICS)),
    ]
    return block("COFF Header", rows, width=width)


def render_optional(hdr: OptionalHeader, *, width: int = LINE_WIDTH) -> List[str]:
    wb = hdr.word_bits
    rows: List[Row] = [
        ("Signature", f"{address(hdr.magic, 16)} ({optional_magic_name(hdr.magic)})"),
        ("Linker version", version(hdr.major_linker_version, hdr.minor_linker_version)),
        ("Size of code", hex_dec(hdr.size_of_code, 32)),
        ("Size of initialized data", hex_dec(hdr.size_of_initialized_data, 32)),
        ("Size of uninitialized data", hex_dec(hdr.size_of_uninitialized_data, 32)),
        ("Entry point", address(hdr.address_of_entry_point, 32)),
        ("Base of code", address(hdr.base_of_code, 32)),
    ]
    if hdr.base_of_data is not None:
        rows.append(("Base of data", address(hdr.base_of_data, 32)))
    rows += [
        ("Image base", address(hdr.image_base, wb)),
        ("Section alignment", hex_dec(hdr.section_alignment, 32)),
        ("File alignment", hex_dec(hdr.file_alignment, 32)),
        ("OS version", version(hdr.major_os_version, hdr.minor_os_version)),
        ("Image version", version(hdr.major_image_version, hdr.minor_image_version)),
        ("Subsystem version", version(hdr.major_subsystem_version, hdr.minor_subsystem_version)),
        ("Win32 version value", hex_dec(hdr.win32_version_value, 32)),
        ("Size of image", hex_dec(hdr.size_of_image, 32)),
        ("Size of headers", hex_dec(hdr.size_of_headers, 32)),
        ("Checksum", address(hdr.checksum, 32)),
        ("Subsystem", f"{subsystem_name(hdr.subsystem)} ({hdr.subsystem})"),
        ("DLL characteristics", flags_text(hdr.dll_characteristics, DLL_CHARACTERISTICS)),
        ("Size of stack reserve", hex_dec(hdr.size_of_stack_reserve, wb)),
        ("Size of stack commit", hex_dec(hdr.size_of_stack_commit, wb)),
        ("Size of heap reserve", hex_dec(hdr.size_of_heap_reserve, wb)),
        ("Size of heap commit", hex_dec(hdr.size_of_heap_commit, wb)),
        ("Loader flags", address(hdr.loader_flags, 32)),
        ("Number of RVA and sizes", hex_dec(hdr.number_of_rva_and_sizes, 32)),
    ]
    title = "Optional Header (PE32+)" if hdr.pe32_plus else "Optional Header (PE32)"
    return block(title, rows, width=width)
