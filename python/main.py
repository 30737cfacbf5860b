#!/usr/bin/env python3
"""Sliding Puzzle Solver.

Usage::

    python main.py solve 1 2 3 4 5 6 7 0 8          # 3×3, size inferred
    python main.py solve --preset advanced ... -v   # staged 4×4 / 5×5 with debug logs
    python main.py solve --json ...                 # raw response message
    python main.py scramble -s 4 --moves 60 --seed 7
    python main.py algorithms
"""

import json
import logging
import math
import sys
from enum import StrEnum
from pathlib import Path
from typing import List, Optional

import typer

ROOT = Path(__file__).resolve().parent  # python/

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.engine.gamegenerator import GameGenerator  # noqa: E402
from backend.engine.gamesolver import PRESETS, Solver, load_config  # noqa: E402
from backend.models import Board, InvalidInput, Mode, SolveRequest  # noqa: E402

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class Preset(StrEnum):
    hybrid = "hybrid"
    advanced = "advanced"
    legacy = "legacy"


# -- helpers ------------------------------------------------------------------


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )


def _infer_size(count: int) -> int:
    size = math.isqrt(count)
    if size * size != count:
        raise typer.BadParameter(
            f"{count} tiles do not form a square board; pass --size."
        )
    return size


# -- CLI entry point ----------------------------------------------------------

app = typer.Typer(add_completion=False, help="Sliding puzzle solver (3×3 to 5×5).")


@app.command()
def solve(
    tiles: List[int] = typer.Argument(
        ..., help="Row-major tile values, 0 for the blank.",
    ),
    size: Optional[int] = typer.Option(
        None, "-s", "--size",
        help="Board side (3-5). Inferred from the tile count when omitted.",
    ),
    mode: Mode = typer.Option(
        Mode.SEQUENTIAL, "-m", "--mode",
        help="Dispatcher mode for whole-board searches.",
    ),
    preset: Preset = typer.Option(
        Preset.hybrid, "-p", "--preset",
        help="Engine configuration preset.",
    ),
    config: Optional[Path] = typer.Option(
        None, "-c", "--config",
        help="JSON file merged over the preset.",
    ),
    as_json: bool = typer.Option(
        False, "--json",
        help="Print the response message as JSON.",
    ),
    trace: bool = typer.Option(
        False, "-t", "--trace",
        help="Show every search attempt.",
    ),
    verbose: bool = typer.Option(
        False, "-v", "--verbose",
        help="Debug logging.",
    ),
) -> None:
    """Solve one board and print the move list (tile values)."""
    _configure_logging(verbose)
    if size is None:
        size = _infer_size(len(tiles))

    solver = Solver(load_config(config, preset.value))
    response = solver.handle(SolveRequest(tuple(tiles), size, mode))

    if as_json:
        typer.echo(json.dumps(response.to_dict()))
    else:
        from frontend.cli.rich.app import show_response

        try:
            board = Board.from_flat(size, list(tiles))
        except InvalidInput as exc:
            typer.echo(f"Invalid board: {exc}", err=True)
        else:
            show_response(board, response, trace=trace)

    if response.moves is None:
        raise typer.Exit(code=1)


@app.command()
def scramble(
    size: int = typer.Option(
        4, "-s", "--size",
        min=3, max=5,
        help="Grid size (3-5).",
    ),
    moves: Optional[int] = typer.Option(
        None, "-n", "--moves",
        min=1,
        help="Random moves from the solved board (default: size² × 100).",
    ),
    seed: Optional[int] = typer.Option(
        None, "--seed",
        help="Random seed for a reproducible board.",
    ),
    as_json: bool = typer.Option(
        False, "--json",
        help="Print the tiles as a JSON list.",
    ),
) -> None:
    """Print a random solvable board."""
    board = GameGenerator.generate(size, moves, seed)
    if as_json:
        typer.echo(json.dumps(board.to_flat()))
        return

    from frontend.cli.rich.app import show_board

    show_board(board, "Scramble")
    typer.echo(" ".join(str(v) for v in board.to_flat()))


@app.command()
def algorithms() -> None:
    """List the registered search algorithms and presets."""
    from frontend.cli.rich.app import show_algorithms

    show_algorithms()
    typer.echo(f"Presets: {', '.join(PRESETS)}")


if __name__ == "__main__":
    app()
