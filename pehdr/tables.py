from __future__ import annotations

from typing import Dict, List, Tuple

IMAGE_DOS_SIGNATURE = b"MZ"
IMAGE_NT_SIGNATURE = b"PE\x00\x00"

IMAGE_FILE_MACHINE_AMD64 = 0x8664

PE32_MAGIC = 0x10B
PE32P_MAGIC = 0x20B
ROM_MAGIC = 0x107

UNKNOWN = "Unknown"
UNKNOWN_SUBSYSTEM = "Unknown subsystem"

MACHINE_NAMES: Dict[int, str] = {
    0x014C: "Intel 386",
    0x8664: "x64 / AMD AMD64",
    0x0162: "MIPS R3000",
    0x0168: "MIPS R10000",
    0x0169: "MIPS little endian WCI v2",
    0x0183: "Old Alpha AXP",
    0x0184: "Alpha AXP",
    0x01A2: "Hitachi SH3",
    0x01A3: "Hitachi SH3 DSP",
    0x01A6: "Hitachi SH4",
    0x01A8: "Hitachi SH5",
    0x01C0: "ARM little endian",
    0x01C2: "Thumb",
    0x01C4: "ARM Thumb-2",
    0x01D3: "Matsushita AM33",
    0x01F0: "PowerPC little endian",
    0x01F1: "PowerPC with floating point support",
    0x0200: "Intel IA64",
    0x0266: "MIPS16",
    0x0268: "Motorola 68000 series",
    0x0284: "Alpha AXP 64-bit",
    0x0366: "MIPS with FPU",
    0x0466: "MIPS16 with FPU",
    0x0EBC: "EFI Byte Code",
    0x9041: "Mitsubishi M32R little endian",
    0xAA64: "ARM64 little endian",
    0xC0EE: "CLR pure MSIL",
}

# Indexed directly by subsystem code; unassigned slots stay unknown.
SUBSYSTEM_NAMES: Tuple[str, ...] = (
    UNKNOWN_SUBSYSTEM,
    "Native",
    "Windows GUI",
    "Windows console",
    UNKNOWN_SUBSYSTEM,
    "OS/2 console",
    UNKNOWN_SUBSYSTEM,
    "POSIX console",
    "Native Win9x driver",
    "Windows CE GUI",
    "EFI application",
    "EFI boot service driver",
    "EFI runtime driver",
    "EFI ROM",
    "Xbox",
    UNKNOWN_SUBSYSTEM,
    "Windows boot application",
)

OPTIONAL_MAGIC_NAMES: Dict[int, str] = {
    PE32_MAGIC: "PE32",
    PE32P_MAGIC: "PE32+",
    ROM_MAGIC: "ROM",
}

# Curated subset of IMAGE_FILE_* bits, in display order.
FILE_CHARACTERISTICS: Tuple[Tuple[int, str], ...] = (
    (0x0002, "EXECUTABLE"),
    (0x0200, "NON-RELOCATABLE"),
    (0x2000, "DLL"),
)

DLL_CHARACTERISTICS: Tuple[Tuple[int, str], ...] = (
    (0x0040, "RELOCATABLE"),
    (0x0080, "INTEGRITY-FORCED"),
    (0x0100, "DEP-COMPATIBLE"),
    (0x0200, "NO-ISOLATION"),
    (0x0400, "NO-SEH"),
    (0x0800, "NO-BIND"),
    (0x2000, "WDM-DRIVER"),
    (0x8000, "TERMINAL-SERVER-AWARE"),
)


def machine_name(code: int) -> str:
    return MACHINE_NAMES.get(code, UNKNOWN)


def subsystem_name(code: int) -> str:
    if code < 0 or code >= len(SUBSYSTEM_NAMES):
        code = 0
    return SUBSYSTEM_NAMES[code]


def optional_magic_name(magic: int) -> str:
    return OPTIONAL_MAGIC_NAMES.get(magic, UNKNOWN)


def is_pe32_plus_machine(machine: int) -> bool:
    return machine == IMAGE_FILE_MACHINE_AMD64


def flag_labels(value: int, table: Tuple[Tuple[int, str], ...]) -> List[str]:
    return [label for bit, label in table if value & bit]
