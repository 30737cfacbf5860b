"""Search context: problem definition, resource budget and result record."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Callable

from backend.engine.gamesolver.heuristics import Heuristic, manhattan
from backend.models.state import PuzzleState


class SearchError(Exception):
    """Base class for errors raised inside the search layer."""


class ResourceExhausted(SearchError):
    """Raised by ``SearchBudget`` when a cap is hit; never leaves an algorithm."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class LinkedEvent(threading.Event):
    """Cancel flag that also reads as set once its parent is set.

    Lets a pool stop its own searches without losing the caller's cancel.
    """

    def __init__(self, parent: threading.Event | None = None) -> None:
        super().__init__()
        self.parent = parent

    def is_set(self) -> bool:
        if super().is_set():
            return True
        return self.parent is not None and self.parent.is_set()


# -- termination reasons ------------------------------------------------------

OK = "ok"
ALREADY_SOLVED = "already_solved"
EXHAUSTED = "exhausted"
NODE_LIMIT = "node_limit"
TIMEOUT = "timeout"
CANCELLED = "cancelled"
UNSOLVABLE = "unsolvable"
ERROR = "error"


@dataclass(frozen=True)
class SearchProblem:
    """What to search for.

    Attributes:
        start: State the search begins from (never mutated)
        heuristic: Estimate of the remaining cost to the goal
        is_goal: Goal test
        locked: Cells whose tiles must not move
        goal_state: Explicit goal, needed for backward search only
    """
    start: PuzzleState
    heuristic: Heuristic = manhattan
    is_goal: Callable[[PuzzleState], bool] = PuzzleState.is_solved
    locked: frozenset[int] = frozenset()
    goal_state: PuzzleState | None = None

    @classmethod
    def whole_board(
        cls,
        start: PuzzleState,
        heuristic: Heuristic = manhattan,
        locked: frozenset[int] = frozenset(),
    ) -> SearchProblem:
        return cls(
            start=start,
            heuristic=heuristic,
            locked=locked,
            goal_state=PuzzleState.solved(start.size),
        )

    @property
    def is_whole_board(self) -> bool:
        """True for the unconstrained solve-everything problem."""
        return (
            not self.locked
            and self.goal_state is not None
            and self.goal_state.is_solved()
        )

    def expand(self, state: PuzzleState) -> list[tuple[PuzzleState, int]]:
        return state.neighbors(self.locked)


@dataclass
class SearchBudget:
    """Node-expansion cap, wall-clock timeout and cooperative cancellation.

    ``None`` for a cap means "no bound".
    """
    max_nodes: int | None = None
    timeout_sec: float | None = None
    cancel: threading.Event | None = None
    expanded: int = 0
    start_time: float = field(default_factory=time.perf_counter)

    def tick(self) -> None:
        """Account for one expansion; raise ``ResourceExhausted`` when spent."""
        self.expanded += 1
        if self.max_nodes is not None and self.expanded > self.max_nodes:
            raise ResourceExhausted(NODE_LIMIT)
        self.check()

    def check(self) -> None:
        """Check the clock and the cancel flag without spending a node."""
        if self.timeout_sec is not None and self.elapsed() > self.timeout_sec:
            raise ResourceExhausted(TIMEOUT)
        if self.cancel is not None and self.cancel.is_set():
            raise ResourceExhausted(CANCELLED)

    def elapsed(self) -> float:
        return time.perf_counter() - self.start_time


@dataclass
class SearchResult:
    """Outcome of one algorithm run.

    ``moves`` is ``None`` on failure and ``[]`` when the start already
    satisfied the goal.
    """
    moves: list[int] | None
    algorithm: str
    termination: str = OK
    expanded: int = 0
    elapsed: float = 0.0
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.moves is not None


@dataclass
class Node:
    """Search-tree node; the move list is rebuilt from parent links."""
    state: PuzzleState
    g: int = 0
    move: int | None = None
    parent: Node | None = None

    def path(self) -> list[int]:
        moves: list[int] = []
        node: Node | None = self
        while node is not None and node.move is not None:
            moves.append(node.move)
            node = node.parent
        moves.reverse()
        return moves

    def child(self, state: PuzzleState, move: int) -> Node:
        return Node(state=state, g=self.g + 1, move=move, parent=self)

    @property
    def previous(self) -> PuzzleState | None:
        return self.parent.state if self.parent is not None else None
