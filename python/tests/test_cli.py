"""Command-line interface, driven through typer's CliRunner."""

from __future__ import annotations

import json

from typer.testing import CliRunner

from main import app

runner = CliRunner()


def _message(output: str) -> dict:
    # Log records may share the captured output; the response is printed last.
    return json.loads(output.strip().splitlines()[-1])


def test_solve_json_output() -> None:
    result = runner.invoke(app, ["solve", "--json", "1", "2", "3", "4", "5", "6", "7", "0", "8"])
    assert result.exit_code == 0, result.output
    message = _message(result.output)
    assert message["moves"] == [8]
    assert message["method"] == "hybrid-multi"


def test_solve_rich_output() -> None:
    result = runner.invoke(app, ["solve", "--trace", "1", "2", "3", "4", "5", "6", "0", "7", "8"])
    assert result.exit_code == 0, result.output
    assert "Solved in 2 moves" in result.output
    assert "ida_star" in result.output


def test_unsolvable_board_exits_with_error() -> None:
    result = runner.invoke(app, ["solve", "--json", "2", "1", "3", "4", "5", "6", "7", "8", "0"])
    assert result.exit_code == 1
    assert _message(result.output)["method"] == "unsolvable"


def test_invalid_board_exits_with_error() -> None:
    result = runner.invoke(app, ["solve", "--json", "1", "1", "3", "4", "5", "6", "7", "8", "0"])
    assert result.exit_code == 1
    assert _message(result.output)["method"] == "invalid_input"


def test_non_square_tile_count_is_rejected() -> None:
    result = runner.invoke(app, ["solve", "1", "2", "0"])
    assert result.exit_code != 0


def test_scramble_then_solve() -> None:
    scrambled = runner.invoke(app, ["scramble", "-s", "3", "--moves", "20", "--seed", "4", "--json"])
    assert scrambled.exit_code == 0, scrambled.output
    tiles = _message(scrambled.output)
    assert sorted(tiles) == list(range(9))

    solved = runner.invoke(app, ["solve", "--json", *map(str, tiles)])
    assert solved.exit_code == 0, solved.output
    assert _message(solved.output)["moves"]


def test_algorithms_lists_registry() -> None:
    result = runner.invoke(app, ["algorithms"])
    assert result.exit_code == 0
    assert "ida_star" in result.output
    assert "tabu_search" in result.output
    assert "hybrid" in result.output
