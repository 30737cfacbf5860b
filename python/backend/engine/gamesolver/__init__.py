from backend.engine.gamesolver.dispatcher import HybridDispatcher
from backend.engine.gamesolver.patterndb import PatternDatabase, pdb_heuristic
from backend.engine.gamesolver.presets import (
    PRESETS,
    BoardProfile,
    EngineConfig,
    Limits,
    get_preset,
    load_config,
)
from backend.engine.gamesolver.solver import Solver
from backend.engine.gamesolver.stages import Stage, StageController, plan_stages
from backend.engine.gamesolver.worker import SolverWorker

__all__ = [
    "PRESETS",
    "BoardProfile",
    "EngineConfig",
    "HybridDispatcher",
    "Limits",
    "PatternDatabase",
    "Solver",
    "SolverWorker",
    "Stage",
    "StageController",
    "get_preset",
    "load_config",
    "pdb_heuristic",
    "plan_stages",
]
