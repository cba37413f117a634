"""Tests for the main.py harness."""

from __future__ import annotations

import logging
import random

import pytest

import main
from mdp.Solver import Solver
from tictactoe.TicTacToeBoard import O, X
from tictactoe.TicTacToeMDP import TicTacToeMDP


class TestRun:
    def test_nim(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main.main(["run", "--example", "nim"]) == 0
        assert "optimal_take" in capsys.readouterr().out

    def test_nim_with_lp_check(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="main"):
            assert main.main(["run", "--example", "nim", "--verify-lp"]) == 0
        assert "LP cross-check" in caplog.text

    def test_tictactoe_self_play_is_a_draw(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="main"):
            assert main.main(["run", "--example", "tictactoe"]) == 0
        assert "Game over: draw" in caplog.text

    def test_tictactoe_random_opponent_policy_iteration(self) -> None:
        argv = ["run", "--example", "tictactoe", "--opponent", "random", "--method", "policy_iteration"]
        assert main.main(argv) == 0

    def test_jacobi_update_rule(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="mdp.Solver"):
            assert main.main(["run", "--example", "nim", "--update-rule", "jacobi"]) == 0
        assert "jacobi updates" in caplog.text

    def test_default_config_reaches_solver(self) -> None:
        config = main.dotdict(main.args)
        config.update({"verify_lp": False})
        result = main.run("nim", config)
        assert result.converged

    def test_non_convergence_exit_status(self) -> None:
        assert main.main(["run", "--example", "nim", "--max-sweeps", "1"]) == 1

    def test_unknown_example(self) -> None:
        with pytest.raises(SystemExit):
            main.main(["run", "--example", "chess"])


class TestSelfPlay:
    def test_random_opponent_game(self) -> None:
        model = TicTacToeMDP(opponent="random")
        result = Solver(1.0, 1e-9, 100).solve(model)
        moves, won_by = main.self_play(model, result.policy, random.Random(3))
        marks = [mark for mark, _cell in moves]
        assert marks[0] == X
        assert all(a != b for a, b in zip(marks, marks[1:]))
        assert len({cell for _mark, cell in moves}) == len(moves)
        assert won_by in (X, O, None)

    def test_build_model(self) -> None:
        assert isinstance(main.build_model("tictactoe", "minimax"), TicTacToeMDP)
        with pytest.raises(ValueError):
            main.build_model("go", "minimax")
