"""
Search algorithms.

Importing this package registers every built-in algorithm.
"""

from .base import SearchAlgorithm
from .registry import (
    CANONICAL_ORDER,
    create_algorithm,
    get_algorithm_info,
    get_algorithm_names,
    register_algorithm,
)
from .branch_bound import BreadthFirstBranchAndBound, DepthFirstBranchAndBound
from .informed import (
    AStar,
    Dijkstra,
    GreedyBestFirst,
    IDAStar,
    MemoryBoundedAStar,
    RecursiveBestFirst,
)
from .local import BeamSearch, Genetic, HillClimbing, SimulatedAnnealing, TabuSearch
from .uninformed import BidirectionalBFS, BreadthFirst, DepthLimitedDFS, IterativeDeepeningDFS

__all__ = [
    "CANONICAL_ORDER",
    "SearchAlgorithm",
    "create_algorithm",
    "get_algorithm_info",
    "get_algorithm_names",
    "register_algorithm",
    "AStar",
    "BeamSearch",
    "BidirectionalBFS",
    "BreadthFirst",
    "BreadthFirstBranchAndBound",
    "DepthFirstBranchAndBound",
    "DepthLimitedDFS",
    "Dijkstra",
    "Genetic",
    "GreedyBestFirst",
    "HillClimbing",
    "IDAStar",
    "IterativeDeepeningDFS",
    "MemoryBoundedAStar",
    "RecursiveBestFirst",
    "SimulatedAnnealing",
    "TabuSearch",
]
