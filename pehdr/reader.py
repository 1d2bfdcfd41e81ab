from __future__ import annotations

import struct
from typing import Any, Dict, List, Sequence, Tuple

from pehdr.errors import BoundsViolation

# All PE structures are little-endian regardless of host order.
_INT_CODES = {
    (1, False): "<B",
    (1, True): "<b",
    (2, False): "<H",
    (2, True): "<h",
    (4, False): "<I",
    (4, True): "<i",
    (8, False): "<Q",
    (8, True): "<q",
}


def check_bounds(data, off: int, size: int, *, what: str = "field") -> None:
    # struct.unpack_from treats a negative offset as relative to the end,
    # so the lower bound has to be enforced here as well.
    if off < 0 or size < 0 or off + size > len(data):
        raise BoundsViolation(what=what, offset=off, width=size, length=len(data))


def read_int(data, off: int, width: int, *, signed: bool = False, what: str = "field") -> int:
    code = _INT_CODES.get((width, signed))
    if code is None:
        raise ValueError(f"Unsupported integer width: {width}")
    check_bounds(data, off, width, what=what)
    return struct.unpack_from(code, data, off)[0]


def read_bytes(data, off: int, size: int, *, what: str = "bytes") -> bytes:
    check_bounds(data, off, size, what=what)
    return bytes(data[off : off + size])


def u8(data, off: int) -> int:
    return read_int(data, off, 1)


def u16(data, off: int) -> int:
    return read_int(data, off, 2)


def u32(data, off: int) -> int:
    return read_int(data, off, 4)


def u64(data, off: int) -> int:
    return read_int(data, off, 8)


def i16(data, off: int) -> int:
    return read_int(data, off, 2, signed=True)


def i32(data, off: int) -> int:
    return read_int(data, off, 4, signed=True)


class Layout:
    """
    A packed, little-endian structure declared as (name, struct code) pairs.

    Codes follow the struct module: "H" is one u16, "4h" is an array of four
    i16 (decoded as a tuple), "2s" is a two-byte string. Fields are laid out
    back to back with no padding.
    """

    def __init__(self, name: str, fields: Sequence[Tuple[str, str]]) -> None:
        self.name = name
        self._fields: List[Tuple[str, int, struct.Struct, bool]] = []
        off = 0
        for fname, code in fields:
            st = struct.Struct("<" + code)
            is_array = not code.endswith("s") and code[:-1].isdigit()
            self._fields.append((fname, off, st, is_array))
            off += st.size
        self.size = off

    @property
    def field_names(self) -> List[str]:
        return [f[0] for f in self._fields]

    def offset_of(self, fname: str) -> int:
        for name, rel, _, _ in self._fields:
            if name == fname:
                return rel
        raise KeyError(fname)

    def read(self, data, off: int) -> Dict[str, Any]:
        check_bounds(data, off, self.size, what=self.name)
        out: Dict[str, Any] = {}
        for fname, rel, st, is_array in self._fields:
            vals = st.unpack_from(data, off + rel)
            out[fname] = vals if is_array else vals[0]
        return out
