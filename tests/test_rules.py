from __future__ import annotations

import pytest

from puyo_chain.game import ScoringRules, calculate_score
from puyo_chain.game.rules import BASE_SCORE, CHAIN_BONUS, COLOR_BONUS, CONNECTION_BONUS


@pytest.mark.parametrize("chain, colors, groups", [(1, 1, [4]), (5, 3, [4, 5, 6]), (30, 0, [])])
def test_zero_cells_scores_zero(chain, colors, groups):
    assert calculate_score(0, chain, colors, groups) == 0


def test_single_group_of_four_uses_floor_bonus():
    # All bonuses are zero, so the multiplier floors at 1
    assert calculate_score(4, 1, 1, [4]) == 4 * BASE_SCORE


def test_second_chain_bonus():
    assert calculate_score(4, 2, 1, [4]) == 4 * BASE_SCORE * 8


def test_connection_and_color_bonus_add_up():
    # chain 3 -> 16, two colors -> 3, sizes 5 and 8 -> 2 + 5
    assert calculate_score(13, 3, 2, [5, 8]) == 13 * BASE_SCORE * (16 + 3 + 2 + 5)


def test_tables_clamp_to_last_entry():
    rules = ScoringRules()
    assert rules.bonus_for_chain(100) == CHAIN_BONUS[-1] == 512
    assert rules.bonus_for_colors(9) == COLOR_BONUS[-1] == 24
    assert rules.bonus_for_groups([40]) == CONNECTION_BONUS[-1] == 10


def test_custom_rules():
    rules = ScoringRules(base_score=1, chain_bonus=(0, 1), color_bonus=(0,), connection_bonus=(0,))
    assert calculate_score(4, 7, 2, [4], rules=rules) == 4
