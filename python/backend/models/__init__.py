from backend.models.board import Board
from backend.models.messages import Attempt, Mode, SolveRequest, SolveResponse
from backend.models.state import InvalidInput, PuzzleState

__all__ = [
    "Attempt",
    "Board",
    "InvalidInput",
    "Mode",
    "PuzzleState",
    "SolveRequest",
    "SolveResponse",
]
