from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Dict, Generator, Optional, Tuple

import numpy as np

from .connectivity import MIN_CONNECT
from .grid import BOARD_HEIGHT, BOARD_WIDTH, PUYO_COLORS, VISIBLE_HEIGHT, Color, GameGrid
from .pieces import (
    SPAWN_X,
    Direction,
    NextPreview,
    PuyoPair,
    Spin,
    move_pair,
    random_preview,
    rotate_pair,
    spawn_pair,
)
from .rules import ScoringRules
from .settling import CLEAR, GRAVITY, MARK, SettleResult, SettleStep, settle


logger = logging.getLogger(__name__)


class Action(IntEnum):
    LEFT = 0
    RIGHT = 1
    DOWN = 2
    ROTATE_CW = 3
    ROTATE_CCW = 4
    HARD_DROP = 5
    PAUSE = 6
    RESET = 7
    NONE = 8


class Phase(Enum):
    FALLING = "falling"
    SETTLING = "settling"
    PAUSED = "paused"
    GAME_OVER = "game_over"


@dataclass
class GameConfig:
    width: int = BOARD_WIDTH
    height: int = BOARD_HEIGHT
    visible_height: int = VISIBLE_HEIGHT
    spawn_x: int = SPAWN_X
    min_connect: int = MIN_CONNECT
    colors: Tuple[Color, ...] = PUYO_COLORS
    random_seed: Optional[int] = None
    drop_interval_ms: int = 1000
    soft_drop_interval_ms: int = 50
    settle_delays_ms: Dict[str, int] = field(
        default_factory=lambda: {MARK: 300, CLEAR: 100, GRAVITY: 200}
    )
    # Resolve chains synchronously on landing instead of step by step
    auto_settle: bool = True
    start_paused: bool = False

    @property
    def hidden_rows(self) -> int:
        return self.height - self.visible_height


@dataclass(frozen=True)
class GameSnapshot:
    grid: np.ndarray = field(repr=False)
    marked: np.ndarray = field(repr=False)
    pair: Optional[PuyoPair]
    next_preview: NextPreview
    score: int
    chain: int
    phase: Phase


class PuyoGame:
    """Single-owner game session.

    Commands that only make sense while a pair is falling are silently
    ignored in every other phase.
    """

    def __init__(self, config: Optional[GameConfig] = None, rules: Optional[ScoringRules] = None) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.rng = random.Random(self.config.random_seed)
        self.grid = GameGrid(self.config.width, self.config.height)
        self.score = 0
        self.chain = 0
        self.last_chain = 0
        self.phase = Phase.FALLING
        self.current_pair: Optional[PuyoPair] = None
        self.next_preview = random_preview(self.rng, self.config.colors)
        self.soft_drop = False
        self._settler: Optional[Generator[SettleStep, None, SettleResult]] = None
        self.reset()

    # -- lifecycle -----------------------------------------------------------

    def reset(self) -> None:
        self.rng.seed(self.config.random_seed)
        self.grid.reset()
        self.score = 0
        self.chain = 0
        self.last_chain = 0
        self.soft_drop = False
        self._settler = None
        self.current_pair = spawn_pair(random_preview(self.rng, self.config.colors), self.config.spawn_x)
        self.next_preview = random_preview(self.rng, self.config.colors)
        self.phase = Phase.PAUSED if self.config.start_paused else Phase.FALLING
        logger.info("session reset (phase=%s)", self.phase.value)

    @property
    def game_over(self) -> bool:
        return self.phase == Phase.GAME_OVER

    @property
    def drop_interval_ms(self) -> int:
        """Descent cadence the external timer should use right now."""
        if self.soft_drop:
            return self.config.soft_drop_interval_ms
        return self.config.drop_interval_ms

    def set_soft_drop(self, active: bool) -> None:
        self.soft_drop = bool(active)

    def toggle_pause(self) -> None:
        if self.phase == Phase.FALLING:
            self.phase = Phase.PAUSED
        elif self.phase == Phase.PAUSED:
            self.phase = Phase.FALLING

    # -- falling pair commands -----------------------------------------------

    def move(self, direction: Direction) -> bool:
        """Move the falling pair; return True if it landed."""
        if self.phase != Phase.FALLING or self.current_pair is None:
            return False
        result = move_pair(self.grid, self.current_pair, direction)
        if result.landed:
            self._land(result.pair)
            return True
        self.current_pair = result.pair
        return False

    def rotate(self, spin: Spin) -> None:
        if self.phase != Phase.FALLING or self.current_pair is None:
            return
        self.current_pair = rotate_pair(self.grid, self.current_pair, spin)

    def hard_drop(self) -> None:
        if self.phase != Phase.FALLING or self.current_pair is None:
            return
        pair = self.current_pair
        while True:
            result = move_pair(self.grid, pair, Direction.DOWN)
            pair = result.pair
            if result.landed:
                break
        self._land(pair)

    def _land(self, pair: PuyoPair) -> None:
        self.grid.place(pair.colored_cells())
        self.grid.apply_gravity()
        self.current_pair = None
        self.phase = Phase.SETTLING
        self._settler = settle(self.grid, self.rules, chain=1, score=self.score, min_connect=self.config.min_connect)
        if self.config.auto_settle:
            self.finish_settling()

    # -- settling ------------------------------------------------------------

    def advance_settling(self) -> Optional[SettleStep]:
        """Run one settling step; return None once settling has finished."""
        if self.phase != Phase.SETTLING or self._settler is None:
            return None
        try:
            step = next(self._settler)
        except StopIteration as stop:
            self._finish_chain(stop.value)
            return None
        self.score = step.score
        self.chain = step.chain
        return step

    def finish_settling(self) -> None:
        while self.advance_settling() is not None:
            pass

    def _finish_chain(self, result: SettleResult) -> None:
        self._settler = None
        self.score = result.score
        self.last_chain = result.chain
        if self._spawn_blocked():
            self.phase = Phase.GAME_OVER
            self.current_pair = None
            logger.info("game over with score %d", self.score)
            return
        self.current_pair = spawn_pair(self.next_preview, self.config.spawn_x)
        self.next_preview = random_preview(self.rng, self.config.colors)
        self.chain = 0
        self.phase = Phase.FALLING

    def _spawn_blocked(self) -> bool:
        column = self.grid.grid[:2, self.config.spawn_x]
        return bool(column.any())

    # -- views ---------------------------------------------------------------

    def step(self, action: Action) -> Tuple[np.ndarray, int, bool, dict]:
        if action == Action.RESET:
            self.reset()
            return self.get_state(), 0, False, self._info()

        score_before = self.score
        if action == Action.LEFT:
            self.move(Direction.LEFT)
        elif action == Action.RIGHT:
            self.move(Direction.RIGHT)
        elif action == Action.DOWN:
            self.move(Direction.DOWN)
        elif action == Action.ROTATE_CW:
            self.rotate(Spin.CLOCKWISE)
        elif action == Action.ROTATE_CCW:
            self.rotate(Spin.COUNTERCLOCKWISE)
        elif action == Action.HARD_DROP:
            self.hard_drop()
        elif action == Action.PAUSE:
            self.toggle_pause()
        elif action == Action.NONE:
            pass

        return self.get_state(), self.score - score_before, self.game_over, self._info()

    def _info(self) -> dict:
        return {
            "score": self.score,
            "chain": self.chain,
            "last_chain": self.last_chain,
            "phase": self.phase.value,
        }

    def get_state(self) -> np.ndarray:
        # Overlay the falling pair on a copy of the grid, negated
        state = self.grid.clone_state()
        if self.current_pair is not None:
            for x, y, color in self.current_pair.colored_cells():
                if self.grid.is_inside(x, y):
                    state[y, x] = -int(color)
        return state

    def snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            grid=self.grid.clone_state(),
            marked=self.grid.marked.copy(),
            pair=self.current_pair,
            next_preview=self.next_preview,
            score=self.score,
            chain=self.chain,
            phase=self.phase,
        )
