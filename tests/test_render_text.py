from __future__ import annotations

import pytest

from pe_samples import build_pe
from pehdr.headers import decode_coff_header, decode_dos_header, decode_optional_header
from pehdr.reporters.text import (
    address,
    banner,
    flags_text,
    hex_dec,
    render_coff,
    render_dos,
    render_optional,
)
from pehdr.tables import DLL_CHARACTERISTICS


def _line(lines, label):
    for ln in lines:
        if ln.lstrip().startswith(label + ":"):
            return ln
    raise AssertionError(f"no line for {label!r}")


def test_banner_is_padded_to_width():
    b = banner("COFF Header")
    assert b.startswith("-- COFF Header -")
    assert len(b) == 80
    assert set(b[len("-- COFF Header "):]) == {"-"}
    assert len(banner("X", width=40)) == 40


def test_banner_title_too_long():
    with pytest.raises(ValueError):
        banner("T" * 80)


def test_value_shapes_match_width():
    assert hex_dec(0x90, 16) == "0x0090 (144)"
    assert hex_dec(-1, 16) == "0xffff (-1)"
    assert hex_dec(0x40, 32) == "0x00000040 (64)"
    assert address(0x1000, 32) == "0x00001000"
    assert address(0x140000000, 64) == "0x0000000140000000"


def test_dll_characteristics_none():
    assert flags_text(0, DLL_CHARACTERISTICS) == "None (0x0000)"


def test_dll_characteristics_each_flag_once_with_hex():
    text = flags_text(0xFFFF, DLL_CHARACTERISTICS)
    for _, label in DLL_CHARACTERISTICS:
        assert text.split().count(label) == 1
    assert text.endswith("(0xffff)")

    text = flags_text(0x0001, DLL_CHARACTERISTICS)
    assert text == "None (0x0001)"


def test_block_structure():
    data = build_pe()
    dos, _ = decode_dos_header(data)
    lines = render_dos(dos)
    assert lines[0].startswith("-- DOS Header ")
    assert lines[1] == ""
    assert lines[-1] == ""
    assert _line(lines, "signature").endswith("'MZ'")
    assert _line(lines, "maxAlloc").endswith("0xffff (-1)")
    assert _line(lines, "SP").endswith(": 0x00b8")
    assert _line(lines, "LFA New").endswith("0x00000040 (64)")
    # labels are right-aligned on the colon
    cols = {ln.index(":") for ln in lines[2:-1]}
    assert len(cols) == 1


def test_dos_signature_non_printable():
    dos, _ = decode_dos_header(build_pe(dos_magic=b"\x00Z"))
    assert _line(render_dos(dos), "signature").endswith("'.Z'")


def test_coff_scenario_i386():
    data = build_pe(machine=0x014C, num_sections=3, characteristics=0x0102)
    coff, _ = decode_coff_header(data, 0x44)
    lines = render_coff(coff)
    assert "Intel 386" in _line(lines, "Machine")
    assert _line(lines, "Number of sections").endswith("0x0003 (3)")
    chars = _line(lines, "Characteristics")
    assert "EXECUTABLE" in chars
    assert "DLL" not in chars
    assert "NON-RELOCATABLE" not in chars
    assert chars.endswith("(0x0102)")


def test_coff_unknown_machine_and_no_flags():
    coff, _ = decode_coff_header(build_pe(machine=0x1234, characteristics=0x0100), 0x44)
    lines = render_coff(coff)
    assert "Unknown (0x1234)" in _line(lines, "Machine")
    assert _line(lines, "Characteristics").endswith("None (0x0100)")


def test_optional_pe32_rendering():
    data = build_pe(subsystem=2, dll_characteristics=0x8140)
    opt, _ = decode_optional_header(data, 0x58, pe32_plus=False)
    lines = render_optional(opt)
    assert lines[0].startswith("-- Optional Header (PE32) ")
    assert _line(lines, "Signature").endswith("0x010b (PE32)")
    assert _line(lines, "Linker version").endswith("14.29")
    assert _line(lines, "Base of data").endswith("0x00002000")
    assert _line(lines, "Image base").endswith("0x00400000")
    assert "Windows GUI" in _line(lines, "Subsystem")
    assert _line(lines, "DLL characteristics").endswith(
        "RELOCATABLE DEP-COMPATIBLE TERMINAL-SERVER-AWARE (0x8140)"
    )
    assert _line(lines, "Size of stack reserve").endswith("0x00100000 (1048576)")


def test_optional_pe32_plus_rendering():
    data = build_pe(machine=0x8664, subsystem=99)
    opt, _ = decode_optional_header(data, 0x58, pe32_plus=True)
    lines = render_optional(opt)
    assert lines[0].startswith("-- Optional Header (PE32+) ")
    assert _line(lines, "Signature").endswith("(PE32+)")
    assert _line(lines, "Image base").endswith("0x0000000140000000")
    assert "Unknown subsystem" in _line(lines, "Subsystem")
    assert _line(lines, "DLL characteristics").endswith("None (0x0000)")
    assert _line(lines, "Size of heap commit").endswith("0x0000000000001000 (4096)")
    assert not any(ln.lstrip().startswith("Base of data") for ln in lines)


def test_optional_rom_and_unknown_magic():
    opt, _ = decode_optional_header(build_pe(opt_magic=0x107), 0x58, pe32_plus=False)
    assert _line(render_optional(opt), "Signature").endswith("(ROM)")
    opt, _ = decode_optional_header(build_pe(opt_magic=0x123), 0x58, pe32_plus=False)
    assert _line(render_optional(opt), "Signature").endswith("(Unknown)")
