"""
Intcode VM — Growable Memory

Memory is a zero-based list of integers that grows on demand: touching
address N (read or write) first extends the backing list to N+1 cells,
zero-filling the gap. Programs rely on this for scratch space past the
end of the loaded tape, and relative-mode code reaches it routinely.

Growth stops at DENSE_LIMIT. Cells above that live in a dict, so a
program that pokes address 2**62 costs one entry, not an exabyte of
zeros. Unwritten high cells still read as zero.

Negative addresses, and addresses that do not fit a signed 64-bit cell,
raise OutOfBounds.
"""

from typing import Dict, Iterable, List

from ..config import MAX_ADDRESS, ZERO_FILL, DENSE_LIMIT
from ..errors import OutOfBounds


def to_address(value) -> int:
    """Validate ``value`` as a memory address and return it."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise OutOfBounds(value)
    if value < 0 or value > MAX_ADDRESS:
        raise OutOfBounds(value)
    return value


class Memory:
    """Zero-initialised, auto-extending integer store owned by one engine."""

    def __init__(self, cells: Iterable[int] = ()):
        self._cells: List[int] = list(cells)
        self._sparse: Dict[int, int] = {}

    def __len__(self) -> int:
        if self._sparse:
            return max(len(self._cells), max(self._sparse) + 1)
        return len(self._cells)

    def __repr__(self) -> str:
        return f"Memory({len(self._cells)} cells, {len(self._sparse)} sparse)"

    def _is_dense(self, address: int) -> bool:
        """True if ``address`` belongs in the flat list, growing it if needed."""
        if address < len(self._cells):
            return True
        if address >= DENSE_LIMIT:
            return False
        self._cells.extend([ZERO_FILL] * (address + 1 - len(self._cells)))
        return True

    # --- Core read/write ---

    def get(self, address: int) -> int:
        address = to_address(address)
        if self._is_dense(address):
            return self._cells[address]
        return self._sparse.get(address, ZERO_FILL)

    def set(self, address: int, value: int):
        address = to_address(address)
        if self._is_dense(address):
            self._cells[address] = value
        else:
            self._sparse[address] = value

    # --- Inspection ---

    def snapshot(self) -> List[int]:
        """Copy of the flat cells, for diffing or assertions."""
        return list(self._cells)

    def sparse_cells(self) -> Dict[int, int]:
        """Copy of the cells written above DENSE_LIMIT."""
        return dict(sorted(self._sparse.items()))

    def dump(self, start: int = 0, length: int = 32, width: int = 8) -> str:
        """Text dump of a range of flat cells, ``width`` cells per line."""
        lines = []
        end = min(start + length, len(self._cells))
        for row in range(start, end, width):
            cells = self._cells[row:min(row + width, end)]
            lines.append(f"{row:06d}  " + " ".join(f"{c:>8d}" for c in cells))
        return "\n".join(lines)
