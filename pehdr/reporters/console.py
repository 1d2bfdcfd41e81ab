from __future__ import annotations
from rich.console import Console
from typing import Iterable

# Plain text only: no markup, highlighting or wrapping of the dump.
console = Console(highlight=False, emoji=False, markup=False, soft_wrap=True)

def render_console(lines: Iterable[str]) -> None:
    for line in lines:
        console.print(line)
