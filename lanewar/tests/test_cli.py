"""
Tests for the command-line interface.
"""

import pytest

from ..cli import describe_result, main, render_board, run_play_command
from ..engine_core.state import GameResult, LanePower, Side
from .conftest import BRUTE, SCOUT

NIGHTCRAWLER = 4


class TestCommands:
    """Tests for the subcommands."""

    def test_catalog(self, capsys):
        main(["catalog"])

        out = capsys.readouterr().out
        assert "Quicksilver" in out
        assert "24 cards, valid" in out

    def test_simulate(self, capsys):
        main(["simulate", "-n", "2", "--seed", "1", "--opponent-bot", "first"])

        out = capsys.readouterr().out
        assert "2 games: greedy (player) vs first (opponent)" in out
        counts = [int(line.split()[-1]) for line in out.splitlines()[1:]]
        assert sum(counts) == 2

    def test_no_command_prints_help(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 1
        assert "usage: lanewar" in capsys.readouterr().out


class TestPlayCommands:
    """Tests for the interactive command parser."""

    def test_place_uses_the_first_free_slot(self, state, board, engine):
        board.put(BRUTE, Side.PLAYER, 1)
        board.hand(Side.PLAYER, SCOUT)

        assert run_play_command(engine, ["place", "1", "2"])

        assert state.slot(1, Side.PLAYER, 1).occupied

    def test_quit(self, engine):
        assert run_play_command(engine, ["quit"]) is False

    def test_refusals_are_printed(self, engine, capsys):
        run_play_command(engine, ["retract", "99"])

        assert "! Card 99 is not on the board" in capsys.readouterr().out

    def test_non_numbers(self, engine, capsys):
        assert run_play_command(engine, ["place", "one", "two"])

        assert "Numbers only" in capsys.readouterr().out

    def test_moves_lists_lane_changes(self, board, engine, capsys):
        nightcrawler = board.put(NIGHTCRAWLER, Side.PLAYER, 0)

        run_play_command(engine, ["moves"])

        out = capsys.readouterr().out
        assert f"move {nightcrawler.handle} 2   (Nightcrawler)" in out
        assert f"move {nightcrawler.handle} 3   (Nightcrawler)" in out

    def test_no_moves(self, board, engine, capsys):
        board.put(BRUTE, Side.PLAYER, 0)

        run_play_command(engine, ["moves"])

        assert "No moves available" in capsys.readouterr().out

    def test_move_goes_to_the_first_free_slot(self, state, board, engine):
        nightcrawler = board.put(NIGHTCRAWLER, Side.PLAYER, 0)
        board.put(BRUTE, Side.PLAYER, 2)

        run_play_command(engine, ["move", str(nightcrawler.handle), "3"])

        assert state.find_slot(nightcrawler.handle) is state.slot(2, Side.PLAYER, 1)

    def test_illegal_move_reports_the_reason(self, board, engine, capsys):
        brute = board.put(BRUTE, Side.PLAYER, 0)

        run_play_command(engine, ["move", str(brute.handle), "2"])

        assert "! Brute cannot move" in capsys.readouterr().out

    def test_end_turn(self, state, engine):
        engine.start()

        run_play_command(engine, ["END"])

        assert state.current_turn == 2


class TestRendering:
    """Tests for the text board."""

    def test_hidden_opponent_cards(self, board, state):
        board.put(SCOUT, Side.OPPONENT, 0, revealed=False)
        board.put(BRUTE, Side.PLAYER, 0)

        text = render_board(state)

        assert "(hidden)" in text
        assert "Brute 10" in text
        assert "Scout" not in text

    def test_describe_result(self, state):
        assert describe_result(state) == "No result"

        state.result = GameResult(
            winner=Side.PLAYER, lane_powers=[LanePower(1, 0)] * 3,
            lanes_won={Side.PLAYER: 3, Side.OPPONENT: 0},
        )
        assert describe_result(state) == "You win!"

        state.result.winner = Side.OPPONENT
        state.result.retreated = True
        assert describe_result(state) == "The opponent wins. (retreat)"
