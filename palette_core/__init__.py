"""
Pixel Palette core Python package.

This package contains the tile-matching game logic, kept free of any
presentation code so both front ends (terminal and Flask) share it.
Modules:
- tile.py: Tile, PALETTE
- levels.py: Level, LevelId, get_level
- deal.py: deal_tiles
- board.py: board helpers (completion check, coordinates, pretty printing)
- state.py: Session, GameSnapshot, TapOutcome, Phase, Outcome
- engine.py: MatchEngine
- timer.py / notifier.py / scheduler.py: time-driven collaborators
"""
