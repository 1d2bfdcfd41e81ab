from __future__ import annotations

import logging
from enum import Enum
from typing import Iterator, List, Optional

from pehdr.errors import MalformedSignature
from pehdr.headers import (
    PE_SIGNATURE_SIZE,
    CoffHeader,
    DosHeader,
    OptionalHeader,
    coff_header_offset,
    decode_coff_header,
    decode_dos_header,
    decode_optional_header,
)
from pehdr.reader import read_bytes
from pehdr.reporters.text import LINE_WIDTH, render_coff, render_dos, render_optional
from pehdr.source import ImageBuffer
from pehdr.tables import IMAGE_DOS_SIGNATURE, IMAGE_NT_SIGNATURE

logger = logging.getLogger(__name__)


class Stage(Enum):
    START = "start"
    DOS_DECODED = "dos_decoded"
    COFF_DECODED = "coff_decoded"
    OPTIONAL_DECODED = "optional_decoded"
    DONE = "done"


class HeaderInspector:
    """
    Walks an image left to right: DOS header, COFF header, optional header.

    Each call to step() decodes exactly one header and returns its rendered
    block. Nothing is rendered for a header whose decode raised.
    """

    def __init__(self, image: ImageBuffer, *, strict: bool = False, width: int = LINE_WIDTH) -> None:
        self.image = image
        self.strict = strict
        self.width = width
        self.stage = Stage.START
        self.cursor = 0
        self.dos: Optional[DosHeader] = None
        self.coff: Optional[CoffHeader] = None
        self.optional: Optional[OptionalHeader] = None

    @property
    def done(self) -> bool:
        return self.stage in (Stage.OPTIONAL_DECODED, Stage.DONE)

    def step(self) -> List[str]:
        if self.stage is Stage.START:
            return self._decode_dos()
        if self.stage is Stage.DOS_DECODED:
            return self._decode_coff()
        if self.stage is Stage.COFF_DECODED:
            return self._decode_optional()
        raise RuntimeError(f"Inspection already finished (stage={self.stage.value}).")

    def run(self) -> Iterator[List[str]]:
        while not self.done:
            yield self.step()
        self.stage = Stage.DONE

    def _check_signature(self, what: str, expected: bytes, found: bytes, offset: int) -> None:
        if found == expected:
            return
        if self.strict:
            raise MalformedSignature(what=what, expected=expected, found=found, offset=offset)
        logger.warning("%s signature mismatch at %#x: expected %r, found %r", what, offset, expected, found)

    def _decode_dos(self) -> List[str]:
        data = self.image.data
        dos, consumed = decode_dos_header(data, self.cursor)
        self._check_signature("DOS", IMAGE_DOS_SIGNATURE, dos.signature, self.cursor)
        logger.debug("DOS header at %#x (%d bytes); PE header at %#x", self.cursor, consumed, dos.pe_header_offset)

        self.dos = dos
        self.cursor = dos.pe_header_offset
        self.stage = Stage.DOS_DECODED
        return render_dos(dos, width=self.width)

    def _decode_coff(self) -> List[str]:
        assert self.dos is not None
        data = self.image.data
        sig_off = self.cursor
        sig = read_bytes(data, sig_off, PE_SIGNATURE_SIZE, what="PE signature")
        self._check_signature("PE", IMAGE_NT_SIGNATURE, sig, sig_off)

        coff_off = coff_header_offset(self.dos)
        coff, consumed = decode_coff_header(data, coff_off)
        logger.debug("COFF header at %#x (%d bytes); machine=%#06x", coff_off, consumed, coff.machine)

        self.coff = coff
        self.cursor = coff_off + consumed
        self.stage = Stage.COFF_DECODED
        return render_coff(coff, width=self.width)

    def _decode_optional(self) -> List[str]:
        assert self.coff is not None
        pe32_plus = self.coff.is_pe32_plus
        opt, consumed = decode_optional_header(self.image.data, self.cursor, pe32_plus=pe32_plus)
        logger.debug(
            "Optional header at %#x (%d bytes) using %s layout",
            self.cursor,
            consumed,
            "PE32+" if pe32_plus else "PE32",
        )

        self.optional = opt
        self.cursor += consumed
        self.stage = Stage.OPTIONAL_DECODED
        return render_optional(opt, width=self.width)


def inspect_image(image: ImageBuffer, *, strict: bool = False, width: int = LINE_WIDTH) -> List[str]:
    """Decode every header and return the full dump; raises on the first failure."""
    lines: List[str] = []
    for blk in HeaderInspector(image, strict=strict, width=width).run():
        lines.extend(blk)
    return lines
