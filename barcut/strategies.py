"""
Estratégias de cobertura da demanda, aplicadas em ordem
"""

import logging
from typing import List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from .exact import ExactCoverSolver
from .exceptions import PieceExceedsStock
from .heuristics import first_fit_decreasing
from .models import SolveStrategy, SolverConfig
from .patterns import Pattern
from .units import UnitConverter


logger = logging.getLogger(__name__)


class CoverContext(NamedTuple):
    """Dados de um problema já convertidos para unidades inteiras"""
    names: Tuple[str, ...]
    lengths: Tuple[int, ...]
    demands: Tuple[int, ...]
    stock: int
    kerf: int
    converter: UnitConverter
    config: SolverConfig
    patterns: Tuple[Pattern, ...]
    patterns_complete: bool
    upper_bound: Optional[int] = None


class CoverStrategy:
    """
    Interface comum: tentar cobrir a demanda exatamente

    `attempt` devolve a lista de barras (padrões) ou None quando a estratégia
    não encontra cobertura.
    """

    strategy = None  # type: SolveStrategy

    def attempt(self, context: CoverContext) -> Optional[List[Pattern]]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ExactCoverStrategy(CoverStrategy):
    """Busca exata; propaga SearchBudgetExhausted para acionar os fallbacks"""

    strategy = SolveStrategy.EXACT

    def __init__(self):
        self.nodes_visited = 0

    def attempt(self, context: CoverContext) -> Optional[List[Pattern]]:
        solver = ExactCoverSolver(
            context.patterns,
            max_nodes=context.config.max_nodes,
            upper_bound=context.upper_bound,
            time_limit=context.config.time_limit,
            lengths=context.lengths,
        )
        try:
            return solver.solve(context.demands)
        finally:
            self.nodes_visited = solver.nodes_visited


class GreedyPatternCoverStrategy(CoverStrategy):
    """
    Escolhe repetidamente o padrão que cobre mais peças restantes

    Nunca excede a demanda restante de nenhum item; empates vão para o menor
    desperdício. Falha quando nenhum padrão válido sobra.
    """

    strategy = SolveStrategy.GREEDY_COVER

    def attempt(self, context: CoverContext) -> Optional[List[Pattern]]:
        remaining = np.asarray(context.demands, dtype=np.int64)
        if not remaining.any():
            return []
        if not context.patterns:
            return None

        matrix = np.array([p.counts for p in context.patterns], dtype=np.int64)
        pieces = matrix.sum(axis=1)
        waste = np.array([p.waste for p in context.patterns], dtype=np.int64)
        index = np.arange(len(context.patterns))

        chosen: List[Pattern] = []
        while remaining.any():
            valid = np.flatnonzero((matrix <= remaining).all(axis=1) & (pieces > 0))
            if valid.size == 0:
                return None
            # mais peças, depois menor desperdício, depois ordem original
            order = np.lexsort((index[valid], waste[valid], -pieces[valid]))
            best = int(valid[order[0]])
            remaining = remaining - matrix[best]
            chosen.append(context.patterns[best])
        return chosen


class PerPieceStrategy(CoverStrategy):
    """Empacota peça a peça (First Fit Decreasing); sempre encontra um plano"""

    strategy = SolveStrategy.PER_PIECE

    def attempt(self, context: CoverContext) -> Optional[List[Pattern]]:
        oversized = [
            (name, context.converter.to_meters(length))
            for name, length, demand in zip(context.names, context.lengths, context.demands)
            if demand > 0 and length > context.stock
        ]
        if oversized:
            raise PieceExceedsStock(oversized, context.converter.to_meters(context.stock))
        return first_fit_decreasing(
            context.lengths, context.demands, context.stock, context.kerf
        )


def default_strategies() -> List[CoverStrategy]:
    """Cadeia padrão: exata, cobertura gulosa, peça a peça"""
    return [ExactCoverStrategy(), GreedyPatternCoverStrategy(), PerPieceStrategy()]


def strategy_names(strategies: Sequence[CoverStrategy]) -> List[str]:
    return [s.strategy.value for s in strategies]
