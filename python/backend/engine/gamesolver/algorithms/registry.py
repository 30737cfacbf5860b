"""
Algorithm Registry - name lookup and factory for search algorithms.
"""

from __future__ import annotations

from typing import Any

from .base import SearchAlgorithm


# Global registry of algorithms
_ALGORITHMS: dict[str, type[SearchAlgorithm]] = {}

# Order the hybrid dispatcher tries algorithms in by default
CANONICAL_ORDER: tuple[str, ...] = (
    "ida_star",
    "a_star",
    "bfs",
    "dfs_limited",
    "iddfs",
    "bibfs",
    "dijkstra",
    "greedy_best_first",
    "rbfs",
    "sma_star",
    "dfbnb",
    "bfbnb",
    "hill_climbing",
    "simulated_annealing",
    "beam_search",
    "genetic",
    "tabu_search",
)


def register_algorithm(cls: type[SearchAlgorithm]) -> type[SearchAlgorithm]:
    """
    Decorator to register an algorithm class.

    Usage:
        @register_algorithm
        class MySearch(SearchAlgorithm):
            name = "my_search"
            ...

    Args:
        cls: Algorithm class to register

    Returns:
        The same class (for decorator chaining)
    """
    _ALGORITHMS[cls.name] = cls
    return cls


def create_algorithm(name: str, **kwargs: Any) -> SearchAlgorithm:
    """
    Create an algorithm instance by name.

    Args:
        name: Algorithm name (e.g., "ida_star", "bfs")
        **kwargs: Options passed to the algorithm constructor

    Returns:
        Algorithm instance

    Raises:
        ValueError: If algorithm name not found
    """
    if name not in _ALGORITHMS:
        available = ", ".join(_ALGORITHMS.keys())
        raise ValueError(f"Unknown algorithm: {name}. Available: {available}")
    return _ALGORITHMS[name](**kwargs)


def get_algorithm_names() -> list[str]:
    """
    Get registered algorithm names, canonical ones first.

    Returns:
        List of registered algorithm names
    """
    names = [n for n in CANONICAL_ORDER if n in _ALGORITHMS]
    return names + [n for n in _ALGORITHMS if n not in CANONICAL_ORDER]


def get_algorithm_info() -> list[dict[str, Any]]:
    """
    Get name, description and optimality for all registered algorithms.

    Returns:
        List of dicts with 'name', 'description' and 'optimal' keys
    """
    return [
        {
            "name": name,
            "description": _ALGORITHMS[name].description,
            "optimal": _ALGORITHMS[name].optimal,
        }
        for name in get_algorithm_names()
    ]
