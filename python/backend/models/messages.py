"""Solve request / response messages exchanged with the solver worker."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class Mode(StrEnum):
    SEQUENTIAL = "hybrid-sequential"
    ALL = "hybrid-all"


# -- method tags --------------------------------------------------------------

ALREADY_SOLVED = "already_solved"
HYBRID_MULTI = "hybrid-multi"
HYBRID_ALL = "hybrid-all"
INVALID_INPUT = "invalid_input"
UNSOLVABLE = "unsolvable"
WORKER_CRASH = "worker_crash"


def stage_tag(size: int, suffix: str) -> str:
    """E.g. ``stage_tag(4, "stage2_ida") == "4x4_stage2_ida"``."""
    return f"{size}x{size}_{suffix}"


# -- messages -----------------------------------------------------------------


@dataclass(frozen=True)
class SolveRequest:
    tiles: tuple[int, ...]
    size: int
    mode: Mode = Mode.SEQUENTIAL

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SolveRequest:
        """Build a request from a worker message.

        ``None`` cells are read as the blank; ``useAllAlgos`` is accepted as
        an alias for ``mode="hybrid-all"``.
        """
        raw = data.get("tiles", data.get("state", ()))
        tiles = tuple(0 if v is None else v for v in raw)
        mode = data.get("mode")
        if mode is None:
            mode = Mode.ALL if data.get("useAllAlgos") else Mode.SEQUENTIAL
        return cls(tiles=tiles, size=int(data["size"]), mode=Mode(mode))

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "solve",
            "tiles": list(self.tiles),
            "size": self.size,
            "mode": self.mode.value,
        }


@dataclass(frozen=True)
class Attempt:
    """One algorithm run recorded in a dispatcher trace."""

    algorithm: str
    moves: list[int] | None
    termination: str = ""
    expanded: int = 0
    elapsed: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "algorithm": self.algorithm,
            "result": self.moves,
            "termination": self.termination,
        }


@dataclass
class SolveResponse:
    moves: list[int] | None
    method: str
    trace: list[Attempt] | None = None
    error: str | None = None
    elapsed: float = 0.0

    @property
    def solved(self) -> bool:
        return self.moves is not None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": "done",
            "moves": self.moves,
            "method": self.method,
        }
        if self.trace is not None:
            data["trace"] = [a.to_dict() for a in self.trace]
        if self.error is not None:
            data["error"] = self.error
        return data
