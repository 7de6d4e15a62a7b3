from __future__ import annotations

import numpy as np
import pytest

from puyo_chain.game import Action, Color, Direction, GameConfig, Phase, PuyoGame, PuyoPair, Spin
from puyo_chain.game.settling import CLEAR, GRAVITY, MARK


def _game(**kwargs) -> PuyoGame:
    return PuyoGame(GameConfig(random_seed=1234, **kwargs))


def test_fresh_session():
    game = _game()
    assert game.phase == Phase.FALLING
    assert game.score == 0
    assert game.chain == 0
    assert game.grid.is_empty()
    assert game.current_pair is not None
    assert game.current_pair.main_pos == (2, 0)
    assert game.current_pair.sub_pos == (2, -1)


def test_start_paused():
    game = _game(start_paused=True)
    assert game.phase == Phase.PAUSED
    game.toggle_pause()
    assert game.phase == Phase.FALLING


def test_pause_blocks_movement():
    game = _game()
    pair = game.current_pair
    game.toggle_pause()
    game.move(Direction.LEFT)
    game.rotate(Spin.CLOCKWISE)
    game.hard_drop()
    assert game.current_pair == pair
    assert game.grid.is_empty()
    game.toggle_pause()
    game.move(Direction.LEFT)
    assert game.current_pair.main_pos == (1, 0)


def test_hard_drop_lands_and_spawns_next():
    game = _game()
    preview = game.next_preview
    game.current_pair = PuyoPair(Color.RED, Color.BLUE)
    game.hard_drop()
    assert game.grid.cell_at(2, 12) == Color.RED
    assert game.grid.cell_at(2, 11) == Color.BLUE
    assert game.phase == Phase.FALLING
    assert game.current_pair.main_color == preview.main
    assert game.current_pair.sub_color == preview.sub
    assert game.current_pair.main_pos == (2, 0)


def test_move_down_until_landing():
    game = _game()
    game.current_pair = PuyoPair(Color.RED, Color.BLUE)
    landed = [game.move(Direction.DOWN) for _ in range(13)]
    assert landed == [False] * 12 + [True]
    assert game.grid.cell_at(2, 12) == Color.RED


def test_horizontal_pair_splits_under_gravity():
    game = _game()
    game.grid.grid[12, 3] = int(Color.GREEN)
    game.current_pair = PuyoPair(Color.RED, Color.BLUE)
    game.rotate(Spin.CLOCKWISE)  # sub to the right of main
    game.hard_drop()
    # Sub rests on the green cell, main falls to the floor
    assert game.grid.cell_at(2, 12) == Color.RED
    assert game.grid.cell_at(3, 11) == Color.BLUE


def test_four_column_block_of_eight_clears_in_one_round():
    game = _game()
    game.grid.grid[11:13, 0:3] = int(Color.RED)
    game.current_pair = PuyoPair(Color.RED, Color.RED)
    game.move(Direction.RIGHT)
    game.hard_drop()
    # chain 1 -> 0, one color -> 0, group of 8 -> 5
    assert game.score == 8 * 10 * (0 + 0 + 5)
    assert game.grid.is_empty()
    assert game.last_chain == 1
    assert game.chain == 0
    assert game.phase == Phase.FALLING


def test_second_pair_of_reds_clears_a_square():
    game = _game()
    game.current_pair = PuyoPair(Color.RED, Color.RED, x=2)
    game.move(Direction.LEFT)
    game.move(Direction.LEFT)
    game.hard_drop()
    game.current_pair = PuyoPair(Color.RED, Color.RED)
    game.move(Direction.LEFT)
    game.hard_drop()
    assert game.score == 4 * 10
    assert game.grid.is_empty()


def test_stepwise_settling_ignores_input():
    game = _game(auto_settle=False)
    game.grid.grid[11:13, 0:3] = int(Color.RED)
    game.current_pair = PuyoPair(Color.RED, Color.RED)
    game.move(Direction.RIGHT)
    game.hard_drop()
    assert game.phase == Phase.SETTLING
    assert game.current_pair is None

    game.move(Direction.LEFT)
    game.rotate(Spin.CLOCKWISE)
    game.toggle_pause()
    assert game.phase == Phase.SETTLING

    kinds = []
    while True:
        step = game.advance_settling()
        if step is None:
            break
        kinds.append(step.kind)
        if step.kind == CLEAR:
            assert game.chain == 1
            assert game.score == 400
    assert kinds == [MARK, CLEAR, GRAVITY]
    assert game.phase == Phase.FALLING
    assert game.current_pair is not None
    assert game.chain == 0
    assert game.advance_settling() is None


def test_game_over_when_spawn_column_fills():
    game = _game()
    for _ in range(6):
        assert game.phase == Phase.FALLING
        game.current_pair = PuyoPair(Color.RED, Color.BLUE)
        game.hard_drop()
    assert game.phase == Phase.GAME_OVER
    assert game.game_over
    assert game.current_pair is None
    assert game.score == 0

    grid_before = game.grid.clone_state()
    game.move(Direction.LEFT)
    game.hard_drop()
    game.toggle_pause()
    assert game.phase == Phase.GAME_OVER
    assert np.array_equal(grid_before, game.grid.grid)


def test_reset_matches_fresh_session():
    fresh = _game().snapshot()
    game = _game()
    for action in (Action.LEFT, Action.ROTATE_CW, Action.HARD_DROP, Action.HARD_DROP, Action.PAUSE):
        game.step(action)
    game.set_soft_drop(True)
    game.reset()
    snap = game.snapshot()
    assert np.array_equal(snap.grid, fresh.grid)
    assert snap.pair == fresh.pair
    assert snap.next_preview == fresh.next_preview
    assert snap.score == 0
    assert snap.chain == 0
    assert snap.phase == Phase.FALLING
    assert game.drop_interval_ms == 1000


def test_reset_from_game_over():
    game = _game()
    game.grid.grid[1:13, 2] = [int(Color.RED), int(Color.BLUE)] * 6
    game.current_pair = PuyoPair(Color.GREEN, Color.BLUE, x=0)
    game.hard_drop()
    assert game.game_over
    game.step(Action.RESET)
    assert game.phase == Phase.FALLING
    assert game.grid.is_empty()


def test_soft_drop_interval():
    game = _game()
    assert game.drop_interval_ms == 1000
    game.set_soft_drop(True)
    assert game.drop_interval_ms == 50
    game.set_soft_drop(False)
    assert game.drop_interval_ms == 1000


def test_step_reports_score_delta_and_state_overlay():
    game = _game()
    state, delta, done, info = game.step(Action.NONE)
    assert delta == 0
    assert not done
    assert info["phase"] == "falling"
    # Main cell at (2, 0) is overlaid as a negative color; sub is above the grid
    assert state[0, 2] == -int(game.current_pair.main_color)
    assert np.count_nonzero(state) == 1

    game.grid.grid[11:13, 0:3] = int(Color.RED)
    game.current_pair = PuyoPair(Color.RED, Color.RED)
    game.step(Action.RIGHT)
    _, delta, done, info = game.step(Action.HARD_DROP)
    assert delta == 400
    assert info["last_chain"] == 1


@pytest.mark.parametrize("action", [Action.LEFT, Action.RIGHT, Action.ROTATE_CCW])
def test_actions_keep_pair_on_board(action):
    game = _game()
    for _ in range(10):
        game.step(action)
    pair = game.current_pair
    for x, _ in pair.cells():
        assert 0 <= x < game.grid.width


def test_reset_during_settling_aborts_the_chain():
    fresh = _game(auto_settle=False).snapshot()
    game = _game(auto_settle=False)
    game.grid.grid[11:13, 0:3] = int(Color.RED)
    game.current_pair = PuyoPair(Color.RED, Color.RED)
    game.move(Direction.RIGHT)
    game.hard_drop()
    step = game.advance_settling()
    assert step.kind == MARK
    assert game.grid.marked.any()

    game.reset()
    snap = game.snapshot()
    assert np.array_equal(snap.grid, fresh.grid)
    assert not snap.marked.any()
    assert snap.pair == fresh.pair
    assert snap.next_preview == fresh.next_preview
    assert snap.score == 0
    assert snap.chain == 0
    assert snap.phase == Phase.FALLING
    assert game.advance_settling() is None
    assert game.phase == Phase.FALLING


def test_spawn_cells_cleared_by_the_chain_do_not_end_the_game():
    game = _game(auto_settle=False)
    game.grid.grid[2:13, 2] = [int(Color.GREEN), int(Color.BLUE)] * 5 + [int(Color.GREEN)]
    game.grid.grid[3:13, 3] = [int(Color.YELLOW), int(Color.PURPLE)] * 5
    game.grid.grid[1:3, 3] = int(Color.RED)
    game.current_pair = PuyoPair(Color.RED, Color.RED)
    game.hard_drop()
    # Pair rests on top of column 2, filling both spawn rows until the reds pop
    assert game.phase == Phase.SETTLING
    assert game.grid.cell_at(2, 0) == Color.RED
    assert game.grid.cell_at(2, 1) == Color.RED

    game.finish_settling()
    assert game.phase == Phase.FALLING
    assert game.current_pair is not None
    assert not game.grid.grid[:2, 2].any()
    assert game.score == 4 * 10


def test_chain_counter_follows_the_round_being_resolved():
    game = _game(auto_settle=False)
    # Reds pop first, then the blues that fall together form the second round
    game.grid.grid[9, 0] = int(Color.BLUE)
    game.grid.grid[10:13, 0] = int(Color.RED)
    game.grid.grid[11, 1] = int(Color.BLUE)
    game.grid.grid[12, 1] = int(Color.RED)
    game.grid.grid[12, 2:4] = int(Color.BLUE)
    game.current_pair = PuyoPair(Color.GREEN, Color.YELLOW, x=5)
    game.hard_drop()

    seen = []
    while True:
        step = game.advance_settling()
        if step is None:
            break
        seen.append((step.kind, game.chain))
    assert seen == [
        (MARK, 1), (CLEAR, 1), (GRAVITY, 1),
        (MARK, 2), (CLEAR, 2), (GRAVITY, 2),
    ]
    assert game.chain == 0
    assert game.last_chain == 2
    assert game.score == 40 + 320
