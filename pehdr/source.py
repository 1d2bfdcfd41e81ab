from __future__ import annotations

import logging
import mmap
import os
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Union

from pehdr.errors import SourceUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageBuffer:
    """Read-only view over a whole executable image."""

    data: Union[bytes, mmap.mmap]
    path: str = "<memory>"

    @property
    def length(self) -> int:
        return len(self.data)

    def __len__(self) -> int:
        return len(self.data)


@contextmanager
def open_image(path: Union[str, Path]) -> Iterator[ImageBuffer]:
    """
    Map `path` read-only for the duration of the with-block.

    Raises SourceUnavailable if the file cannot be opened or mapped, or is
    empty (mmap cannot map zero bytes).
    """
    p = Path(path).expanduser()
    try:
        f = p.open("rb")
    except OSError as e:
        raise SourceUnavailable(f"Cannot open {p}: {e.strerror or e}", path=str(p)) from e

    with f:
        size = os.fstat(f.fileno()).st_size
        if size == 0:
            raise SourceUnavailable(f"Cannot map {p}: file is empty", path=str(p))
        try:
            mm = mmap.mmap(f.fileno(), length=0, access=mmap.ACCESS_READ)
        except (OSError, ValueError) as e:
            raise SourceUnavailable(f"Cannot map {p}: {e}", path=str(p)) from e

        logger.debug("Mapped %s (%d bytes)", p, size)
        try:
            with mm:
                yield ImageBuffer(data=mm, path=str(p))
        finally:
            logger.debug("Released %s", p)
