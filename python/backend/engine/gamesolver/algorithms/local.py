"""Local-search metaheuristics.

None of these is complete; they return a move list only when they happen
to reach the goal within their step cap.  Randomised ones take a ``seed``.
"""

from __future__ import annotations

import logging
import math
import random

from backend.engine.gamesolver.context import Node, SearchBudget, SearchProblem
from backend.engine.gamesolver.primitives import LRUCache
from backend.models.state import PuzzleState

from .base import SearchAlgorithm
from .registry import register_algorithm

logger = logging.getLogger(__name__)


def _push_move(moves: list[int], tile: int) -> None:
    """Append *tile*, cancelling it against an immediate undo."""
    if moves and moves[-1] == tile:
        moves.pop()
    else:
        moves.append(tile)


@register_algorithm
class HillClimbing(SearchAlgorithm):
    name = "hill_climbing"
    description = "Steepest-ascent hill climbing on h"

    def __init__(
        self,
        max_nodes: int | None = None,
        timeout_sec: float | None = 10.0,
        max_steps: int = 2000,
    ) -> None:
        super().__init__(max_nodes, timeout_sec)
        self.max_steps = max_steps

    def _run(self, problem: SearchProblem, budget: SearchBudget) -> list[int] | None:
        h = problem.heuristic
        state = problem.start
        current = h(state)
        moves: list[int] = []
        for _ in range(self.max_steps):
            budget.tick()
            scored = [(h(nxt), nxt, tile) for nxt, tile in problem.expand(state)]
            if not scored:
                return None
            best_h, best, tile = min(scored, key=lambda c: c[0])
            if best_h >= current:
                logger.debug(f"hill_climbing: local optimum at h={current}")
                return None
            state, current = best, best_h
            moves.append(tile)
            if problem.is_goal(state):
                return moves
        return None


@register_algorithm
class SimulatedAnnealing(SearchAlgorithm):
    """
    Random-neighbour annealing.

    A worse neighbour is accepted with probability exp(-delta / T); T is
    multiplied by ``cooling`` after every step.
    """
    name = "simulated_annealing"
    description = "Simulated annealing with geometric cooling"

    def __init__(
        self,
        max_nodes: int | None = None,
        timeout_sec: float | None = 10.0,
        max_steps: int = 3000,
        temperature: float = 10.0,
        cooling: float = 0.995,
        seed: int | None = None,
    ) -> None:
        super().__init__(max_nodes, timeout_sec)
        self.max_steps = max_steps
        self.temperature = temperature
        self.cooling = cooling
        self.seed = seed

    def _run(self, problem: SearchProblem, budget: SearchBudget) -> list[int] | None:
        rng = random.Random(self.seed)
        h = problem.heuristic
        state = problem.start
        current = h(state)
        temperature = self.temperature
        moves: list[int] = []

        for _ in range(self.max_steps):
            budget.tick()
            options = problem.expand(state)
            if not options:
                return None
            nxt, tile = rng.choice(options)
            h_next = h(nxt)
            delta = h_next - current
            if delta < 0 or (
                temperature > 0 and rng.random() < math.exp(-delta / temperature)
            ):
                state, current = nxt, h_next
                _push_move(moves, tile)
                if problem.is_goal(state):
                    return moves
            temperature *= self.cooling
        return None


@register_algorithm
class BeamSearch(SearchAlgorithm):
    """Level-by-level search keeping only the ``beam_width`` lowest-h nodes."""
    name = "beam_search"
    description = "Beam search on h"

    def __init__(
        self,
        max_nodes: int | None = None,
        timeout_sec: float | None = 10.0,
        beam_width: int = 10,
        max_rounds: int = 3000,
    ) -> None:
        super().__init__(max_nodes, timeout_sec)
        self.beam_width = beam_width
        self.max_rounds = max_rounds

    def _run(self, problem: SearchProblem, budget: SearchBudget) -> list[int] | None:
        h = problem.heuristic
        beam = [Node(problem.start)]
        visited = {problem.start.key()}

        for _ in range(self.max_rounds):
            candidates: list[tuple[int, Node]] = []
            for node in beam:
                budget.tick()
                for nxt, tile in problem.expand(node.state):
                    k = nxt.key()
                    if k in visited:
                        continue
                    visited.add(k)
                    child = node.child(nxt, tile)
                    if problem.is_goal(nxt):
                        return child.path()
                    candidates.append((h(nxt), child))
            if not candidates:
                return None
            candidates.sort(key=lambda c: c[0])
            beam = [node for _, node in candidates[: self.beam_width]]
        return None


@register_algorithm
class Genetic(SearchAlgorithm):
    """
    Genetic search over move sequences.

    Individuals are tile sequences seeded by random walks.  Decoding plays
    each gene that is a legal move from the current decoded state and skips
    the rest, so any decoded prefix is a valid move list.  Fitness is the
    heuristic value of the decoded end state (0 = goal).  Children take the
    first half of one parent and the second half of another; a mutation
    replaces one gene.
    """
    name = "genetic"
    description = "Genetic algorithm over move sequences"

    def __init__(
        self,
        max_nodes: int | None = None,
        timeout_sec: float | None = 10.0,
        population_size: int = 40,
        generations: int = 60,
        mutation_rate: float = 0.1,
        min_length: int = 10,
        max_length: int = 40,
        seed: int | None = None,
    ) -> None:
        super().__init__(max_nodes, timeout_sec)
        self.population_size = population_size
        self.generations = generations
        self.mutation_rate = mutation_rate
        self.min_length = min_length
        self.max_length = max_length
        self.seed = seed

    def _random_walk(self, problem: SearchProblem, rng: random.Random) -> list[int]:
        genes: list[int] = []
        state = problem.start
        for _ in range(rng.randint(self.min_length, self.max_length)):
            options = problem.expand(state)
            if not options:
                break
            state, tile = rng.choice(options)
            genes.append(tile)
        return genes

    @staticmethod
    def _decode(problem: SearchProblem, genes: list[int]) -> tuple[list[int], PuzzleState]:
        state = problem.start
        moves: list[int] = []
        for tile in genes:
            for nxt, moved in problem.expand(state):
                if moved == tile:
                    state = nxt
                    _push_move(moves, tile)
                    break
            else:
                continue
            if problem.is_goal(state):
                break
        return moves, state

    def _run(self, problem: SearchProblem, budget: SearchBudget) -> list[int] | None:
        rng = random.Random(self.seed)
        h = problem.heuristic
        tile_count = problem.start.size * problem.start.size
        population = [self._random_walk(problem, rng) for _ in range(self.population_size)]

        for generation in range(self.generations):
            scored: list[tuple[int, int, list[int]]] = []
            for genes in population:
                budget.tick()
                moves, state = self._decode(problem, genes)
                if problem.is_goal(state):
                    logger.debug(f"genetic: goal reached in generation {generation}")
                    return moves
                scored.append((h(state), len(genes), genes))

            scored.sort(key=lambda s: (s[0], s[1]))
            parents = [genes for _, _, genes in scored[: max(2, len(scored) // 2)]]
            population = []
            for _ in range(self.population_size):
                p1 = rng.choice(parents)
                p2 = rng.choice(parents)
                child = p1[: len(p1) // 2] + p2[len(p2) // 2 :]
                if child and rng.random() < self.mutation_rate:
                    child[rng.randrange(len(child))] = rng.randrange(1, tile_count)
                population.append(child)
        return None


@register_algorithm
class TabuSearch(SearchAlgorithm):
    """Greedy walk that never re-enters one of the last ``tabu_size`` states."""
    name = "tabu_search"
    description = "Tabu search with an LRU tabu list"

    def __init__(
        self,
        max_nodes: int | None = None,
        timeout_sec: float | None = 10.0,
        tabu_size: int = 100,
        max_steps: int = 2000,
    ) -> None:
        super().__init__(max_nodes, timeout_sec)
        self.tabu_size = tabu_size
        self.max_steps = max_steps

    def _run(self, problem: SearchProblem, budget: SearchBudget) -> list[int] | None:
        h = problem.heuristic
        state = problem.start
        tabu: LRUCache[tuple[int, ...], bool] = LRUCache(self.tabu_size)
        tabu.set(state.key(), True)
        moves: list[int] = []

        for _ in range(self.max_steps):
            budget.tick()
            options = [
                (h(nxt), nxt, tile)
                for nxt, tile in problem.expand(state)
                if nxt.key() not in tabu
            ]
            if not options:
                logger.debug("tabu_search: every neighbour is tabu")
                return None
            _, state, tile = min(options, key=lambda c: c[0])
            _push_move(moves, tile)
            tabu.set(state.key(), True)
            if problem.is_goal(state):
                return moves
        return None
