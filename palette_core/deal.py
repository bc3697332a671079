from __future__ import annotations

import random
from typing import List, Optional, Sequence

from .levels import Level
from .tile import PALETTE, Color, Tile, blocked_tile


def deal_tiles(
    level: Level,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
    palette: Sequence[Color] = PALETTE,
) -> List[Tile]:
    """Creates the shuffled tiles for a level: color pairs plus a blocked filler on odd grids."""
    if rng is None:
        rng = random.Random(seed)
    tiles: List[Tile] = []
    # Pair slots cycle through the palette, so colors repeat on large grids.
    for i in range(level.pair_count):
        color = palette[i % len(palette)]
        tiles.append(Tile(color=color))
        tiles.append(Tile(color=color))
    if level.has_blocked_tile:
        tiles.append(blocked_tile())
    rng.shuffle(tiles)
    return tiles
