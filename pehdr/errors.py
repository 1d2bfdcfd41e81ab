from __future__ import annotations

from typing import Any, Dict


class InspectError(Exception):
    """Base class for failures that stop an inspection run."""

    code = "E_INSPECT"

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> Dict[str, Any]:
        d = {"code": self.code, "message": self.message}
        d.update(self.extra)
        return d


class SourceUnavailable(InspectError):
    code = "E_SOURCE_UNAVAILABLE"

    def __init__(self, message: str, *, path: str, **extra: Any) -> None:
        super().__init__(message, path=path, **extra)
        self.path = path


class BoundsViolation(InspectError):
    code = "E_BOUNDS_VIOLATION"

    def __init__(self, *, what: str, offset: int, width: int, length: int) -> None:
        super().__init__(
            f"Read of {what} at offset {offset:#x} ({width} bytes) falls outside the {length}-byte image.",
            what=what,
            offset=offset,
            width=width,
            length=length,
        )
        self.what = what
        self.offset = offset
        self.width = width
        self.length = length


class MalformedSignature(InspectError):
    code = "E_BAD_SIGNATURE"

    def __init__(self, *, what: str, expected: bytes, found: bytes, offset: int) -> None:
        super().__init__(
            f"Bad {what} signature at offset {offset:#x}: expected {expected!r}, found {found!r}.",
            what=what,
            expected=expected,
            found=found,
            offset=offset,
        )
        self.expected = expected
        self.found = found
        self.offset = offset
