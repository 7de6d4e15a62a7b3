"""Game module for Puyo Chain.

Exports the rules engine:
- GameGrid: Grid of colors with gravity and group clearing
- PuyoPair: Falling two-cell piece with wall-kick rotation
- find_groups: Same-color connected group detection
- ScoringRules: Chain/color/connection bonus tables
- settle: Chain resolution as a generator of steps
- PuyoGame: Session state machine
"""

from .grid import Color, GameGrid, OutOfBoundsError, PUYO_COLORS
from .pieces import Direction, MoveResult, NextPreview, PuyoPair, Spin, move_pair, rotate_pair
from .connectivity import ConnectedGroup, find_groups, has_any_group
from .rules import ScoringRules, calculate_score
from .settling import SettleResult, SettleStep, settle, settle_all
from .core import Action, GameConfig, GameSnapshot, Phase, PuyoGame

__all__ = [
    "Color",
    "GameGrid",
    "OutOfBoundsError",
    "PUYO_COLORS",
    "Direction",
    "MoveResult",
    "NextPreview",
    "PuyoPair",
    "Spin",
    "move_pair",
    "rotate_pair",
    "ConnectedGroup",
    "find_groups",
    "has_any_group",
    "ScoringRules",
    "calculate_score",
    "SettleResult",
    "SettleStep",
    "settle",
    "settle_all",
    "Action",
    "GameConfig",
    "GameSnapshot",
    "Phase",
    "PuyoGame",
]
