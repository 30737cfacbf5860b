"""Rich terminal report - board grids, solve summaries and attempt traces."""

from __future__ import annotations

import rich.box
from rich.align import Align
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from backend.engine.gamesolver.algorithms import get_algorithm_info
from backend.models.board import Board
from backend.models.messages import Attempt, SolveResponse

console = Console()


# -- helpers ------------------------------------------------------------------


def _format_moves(moves: list[int], per_line: int = 20) -> Text:
    text = Text()
    for i in range(0, len(moves), per_line):
        if i:
            text.append("\n")
        text.append(" ".join(str(m) for m in moves[i : i + per_line]))
    return text


# -- board rendering ----------------------------------------------------------


def render_board(board: Board) -> Table:
    """Return a Rich Table representing the puzzle grid."""
    width = len(str(board.size * board.size - 1))
    table = Table(
        show_header=False,
        show_edge=True,
        pad_edge=True,
        box=rich.box.HEAVY,
        border_style="bright_blue",
        padding=(0, 1),
    )
    for _ in range(board.size):
        table.add_column(width=width + 1, justify="center")

    for r, row in enumerate(board.tiles):
        cells: list[str] = []
        for c, val in enumerate(row):
            if val == 0:
                cells.append("[dim]·[/dim]")
            elif board.is_tile_correct(r, c):
                cells.append(f"[bold green]{val:>{width}}[/bold green]")
            else:
                cells.append(f"[bold white]{val:>{width}}[/bold white]")
        table.add_row(*cells)

    return table


def render_trace(trace: list[Attempt]) -> Table:
    table = Table(box=rich.box.SIMPLE_HEAVY, header_style="bold cyan")
    table.add_column("Algorithm")
    table.add_column("Result", justify="right")
    table.add_column("Termination")
    table.add_column("Nodes", justify="right")
    table.add_column("Time", justify="right")
    for attempt in trace:
        if attempt.moves is None:
            result = "[red]-[/red]"
        else:
            result = f"[green]{len(attempt.moves)} moves[/green]"
        table.add_row(
            attempt.algorithm,
            result,
            attempt.termination,
            f"{attempt.expanded:,}",
            f"{attempt.elapsed:.2f}s",
        )
    return table


# -- screens ------------------------------------------------------------------


def show_board(board: Board, title: str = "Board") -> None:
    size = board.size
    panel = Panel(
        Align.center(render_board(board)),
        title=f"[bold cyan]{title}  {size}×{size}[/bold cyan]",
        border_style="cyan",
        padding=(1, 2),
    )
    console.print(Align.center(panel))


def show_response(board: Board, response: SolveResponse, trace: bool = False) -> None:
    """Print the start board, the outcome and (optionally) the trace."""
    show_board(board, "Start")

    summary = Text()
    if response.moves is None:
        summary.append("No solution", style="bold red")
    elif not response.moves:
        summary.append("Already solved", style="bold green")
    else:
        summary.append(f"Solved in {len(response.moves)} moves", style="bold green")
    summary.append(f"  method={response.method}", style="dim")
    summary.append(f"  {response.elapsed:.2f}s", style="dim")

    parts: list = [summary]
    if response.moves:
        parts.extend([Text(""), _format_moves(response.moves)])
    if response.error:
        parts.extend([Text(""), Text(response.error, style="yellow")])
    console.print(Panel(Group(*parts), border_style="green" if response.solved else "red"))

    if trace and response.trace:
        console.print(render_trace(response.trace))


def show_algorithms() -> None:
    table = Table(box=rich.box.SIMPLE_HEAVY, header_style="bold cyan")
    table.add_column("Name")
    table.add_column("Optimal", justify="center")
    table.add_column("Description")
    for info in get_algorithm_info():
        table.add_row(
            info["name"],
            "[green]yes[/green]" if info["optimal"] else "[dim]no[/dim]",
            info["description"],
        )
    console.print(table)
