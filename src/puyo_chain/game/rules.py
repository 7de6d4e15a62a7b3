from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple


BASE_SCORE = 10
CHAIN_BONUS: Tuple[int, ...] = (
    0, 0, 8, 16, 32, 64, 96, 128, 160, 192, 224, 256, 288, 320, 352, 384, 416, 448, 480, 512,
)
COLOR_BONUS: Tuple[int, ...] = (0, 0, 3, 6, 12, 24)
CONNECTION_BONUS: Tuple[int, ...] = (0, 0, 0, 0, 0, 2, 3, 4, 5, 6, 7, 10)


def _clamped(table: Sequence[int], index: int) -> int:
    return table[max(0, min(index, len(table) - 1))]


@dataclass(frozen=True)
class ScoringRules:
    base_score: int = BASE_SCORE
    chain_bonus: Tuple[int, ...] = CHAIN_BONUS
    color_bonus: Tuple[int, ...] = COLOR_BONUS
    connection_bonus: Tuple[int, ...] = CONNECTION_BONUS

    def bonus_for_chain(self, chain: int) -> int:
        return _clamped(self.chain_bonus, chain)

    def bonus_for_colors(self, distinct_colors: int) -> int:
        return _clamped(self.color_bonus, distinct_colors)

    def bonus_for_groups(self, group_sizes: Iterable[int]) -> int:
        return sum(_clamped(self.connection_bonus, size) for size in group_sizes)

    def score_for_round(
        self,
        cells_cleared: int,
        chain: int,
        distinct_colors: int,
        group_sizes: Iterable[int],
    ) -> int:
        """Points for one removal round.

        ``cells_cleared * base_score * bonus`` where bonus is the sum of the
        chain, color and connection bonuses, floored at 1.
        """
        if cells_cleared <= 0:
            return 0
        bonus = (
            self.bonus_for_chain(chain)
            + self.bonus_for_colors(distinct_colors)
            + self.bonus_for_groups(group_sizes)
        )
        return cells_cleared * self.base_score * max(bonus, 1)


DEFAULT_RULES = ScoringRules()


def calculate_score(
    cells_cleared: int,
    chain: int,
    distinct_colors: int,
    group_sizes: Iterable[int],
    rules: ScoringRules = DEFAULT_RULES,
) -> int:
    return rules.score_for_round(cells_cleared, chain, distinct_colors, group_sizes)
