"""
Busca exata (sem sobreprodução) sobre o espaço de demanda restante
"""

import heapq
import itertools
import logging
import time
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from .exceptions import SearchBudgetExhausted
from .patterns import Pattern


logger = logging.getLogger(__name__)


class SearchState(NamedTuple):
    """Estado da busca: demanda restante e caminho de padrões escolhidos"""
    remaining: Tuple[int, ...]
    bars: int
    waste: int
    path: Optional[tuple]  # lista encadeada (índice do padrão, caminho anterior)


def _unwind(path: Optional[tuple]) -> List[int]:
    indices = []
    while path is not None:
        index, path = path
        indices.append(index)
    indices.reverse()
    return indices


class ExactCoverSolver:
    """
    Busca best-first que escolhe padrões cuja soma é exatamente a demanda

    A fila de prioridade ordena por menos barras e depois menos desperdício
    acumulado. Um mapa da demanda restante para o melhor (barras, desperdício)
    já visto descarta estados que não melhoram.

    A matriz de quantidades dos padrões é montada uma vez; os sucessores de
    cada nó saem de uma única máscara numpy.
    """

    def __init__(
        self,
        patterns: Sequence[Pattern],
        max_nodes: int = 120000,
        upper_bound: Optional[int] = None,
        time_limit: Optional[float] = None,
        lengths: Optional[Sequence[int]] = None,
    ):
        """
        Args:
            patterns: Padrões disponíveis
            max_nodes: Máximo de nós expandidos
            upper_bound: Barras de uma solução conhecida; poda estados piores
            time_limit: Tempo máximo da busca (s)
            lengths: Comprimento de cada item (unidades); com `upper_bound`,
                permite podar pelo mínimo de barras ainda necessárias
        """
        self.patterns = list(patterns)
        self.max_nodes = max_nodes
        self.upper_bound = upper_bound
        self.time_limit = time_limit
        self.nodes_visited = 0

        if self.patterns:
            self.matrix = np.array([p.counts for p in self.patterns], dtype=np.int64)
            self.wastes = np.array([p.waste for p in self.patterns], dtype=np.int64)
            self.stock = self.patterns[0].used + self.patterns[0].waste
        else:
            self.matrix = None
            self.wastes = None
            self.stock = None
        self.lengths = np.asarray(lengths, dtype=np.int64) if lengths is not None else None

    def _bars_needed(self, remaining: np.ndarray) -> np.ndarray:
        """Limite inferior de barras para cobrir cada linha de `remaining`"""
        if self.lengths is not None and self.stock:
            units = remaining @ self.lengths
            return -(-units // self.stock)
        return remaining.any(axis=1).astype(np.int64)

    def solve(self, demand: Sequence[int]) -> Optional[List[Pattern]]:
        """
        Procura a sequência de padrões que cobre a demanda exatamente

        Returns:
            Padrões escolhidos (uma barra cada) ou None se a fronteira esgotar

        Raises:
            SearchBudgetExhausted: orçamento de nós ou de tempo excedido
        """
        start = tuple(int(d) for d in demand)
        deadline = time.monotonic() + self.time_limit if self.time_limit else None
        ub = self.upper_bound
        counter = itertools.count()

        seen: Dict[Tuple[int, ...], Tuple[int, int]] = {start: (0, 0)}
        frontier = [(0, 0, next(counter), SearchState(start, 0, 0, None))]
        self.nodes_visited = 0

        while frontier:
            bars, waste, _, state = heapq.heappop(frontier)
            if seen.get(state.remaining, (bars, waste)) < (bars, waste):
                continue  # entrada obsoleta

            self.nodes_visited += 1
            if self.nodes_visited > self.max_nodes:
                raise SearchBudgetExhausted(self.nodes_visited - 1, "nodes")
            if deadline is not None and time.monotonic() > deadline:
                raise SearchBudgetExhausted(self.nodes_visited, "time")

            if not any(state.remaining):
                return [self.patterns[i] for i in _unwind(state.path)]

            nb = bars + 1
            if self.matrix is None or (ub is not None and nb > ub):
                continue

            remaining = np.array(state.remaining, dtype=np.int64)
            valid = np.flatnonzero((self.matrix <= remaining).all(axis=1))
            if valid.size == 0:
                continue
            successors = remaining - self.matrix[valid]

            if ub is not None:
                keep = nb + self._bars_needed(successors) <= ub
                valid = valid[keep]
                successors = successors[keep]

            new_wastes = waste + self.wastes[valid]
            for j, row, nw in zip(valid.tolist(), successors.tolist(), new_wastes.tolist()):
                nxt = tuple(row)
                best = seen.get(nxt)
                if best is not None and best <= (nb, nw):
                    continue
                seen[nxt] = (nb, nw)
                heapq.heappush(
                    frontier,
                    (nb, nw, next(counter), SearchState(nxt, nb, nw, (j, state.path))),
                )

        logger.debug("Fronteira esgotada após %d nós", self.nodes_visited)
        return None
