from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from .tile import Tile

Coord = Tuple[int, int]

# Short labels used when printing the grid in a terminal.
COLOR_LABELS = {
    'red': 'R', 'orange': 'O', 'yellow': 'Y', 'green': 'G', 'mint': 'M',
    'cyan': 'C', 'blue': 'B', 'indigo': 'I', 'purple': 'P', 'pink': 'K',
}


def grid_size_of(tiles: Sequence[Tile]) -> int:
    """Side length of a square board."""
    n = math.isqrt(len(tiles))
    if n * n != len(tiles):
        raise ValueError(f'board of {len(tiles)} tiles is not square')
    return n


def index(r: int, c: int, size: int) -> int:
    """Calculates the 1D index for a given row and column."""
    return r * size + c


def is_complete(tiles: Sequence[Tile]) -> bool:
    """True once every tile is matched or blocked."""
    return all(t.is_resolved for t in tiles)


def tile_label(tile: Tile, peek: bool = False) -> str:
    if tile.is_blocked:
        return 'X' if (tile.is_revealed or peek) else '#'
    if tile.is_matched:
        return COLOR_LABELS.get(tile.color, '?').lower()
    if tile.is_revealed or peek:
        return COLOR_LABELS.get(tile.color, '?')
    return '#'


def pretty(tiles: Sequence[Tile], peek: bool = False) -> str:
    """Human-readable grid: '#' face down, upper case revealed, lower case matched, 'X' blocked."""
    size = grid_size_of(tiles)
    header = '   ' + ' '.join(str(c) for c in range(size))
    lines: List[str] = [header]
    for r in range(size):
        row = [tile_label(tiles[index(r, c, size)], peek) for c in range(size)]
        lines.append(f'{r:>2} ' + ' '.join(row))
    return '\n'.join(lines)
