"""
Program loader: Intcode text → initial memory image.

Accepted format (ASCII):

    intgr(,intgr)*      with intgr = -?[0-9]+

optionally followed by exactly one line terminator (LF or CRLF). No other
whitespace is allowed anywhere. Any deviation rejects the whole program.
"""

import logging
import re
from pathlib import Path
from typing import List, Union

from .errors import ParseError

log = logging.getLogger(__name__)

_INT = re.compile(r"-?[0-9]+")


def _strip_line_ending(text: str) -> str:
    if text.endswith("\r\n"):
        return text[:-2]
    if text.endswith("\n"):
        return text[:-1]
    return text


def parse_program(text: str) -> List[int]:
    """Parse program text into a list of integers.

    Raises ParseError pointing at the first offending character.
    An empty text parses to an empty program.
    """
    body = _strip_line_ending(text)
    if not body:
        return []

    cells: List[int] = []
    pos = 0
    while True:
        m = _INT.match(body, pos)
        if m is None:
            raise ParseError("expected an integer", pos, body[pos:pos + 16])
        cells.append(int(m.group()))
        pos = m.end()

        if pos == len(body):
            return cells
        if body[pos] != ",":
            raise ParseError(f"unexpected character {body[pos]!r}",
                             pos, body[pos:pos + 16])
        pos += 1


def read_program_file(path: Union[str, Path]) -> List[int]:
    """Read and parse a program file."""
    text = Path(path).read_text(encoding="ascii")
    cells = parse_program(text)
    log.info("Loaded %d cells from %s", len(cells), path)
    return cells
