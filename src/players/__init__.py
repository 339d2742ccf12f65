"""
Minesweeper players module.

Provides players that choose cells from clear cache observations:
- RandomPlayer: Baseline random selection
- LogicPlayer: Single-clue deduction with a risk-based fallback
"""
from .base_player import BasePlayer
from .random_player import RandomPlayer
from .logic_player import LogicPlayer

__all__ = [
    "BasePlayer",
    "RandomPlayer",
    "LogicPlayer",
]
