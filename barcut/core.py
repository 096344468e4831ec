"""
Núcleo do sistema BarCut: validação, cadeia de estratégias e grupos
"""

import logging
import math
import re
import time
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from .exceptions import (
    CutPlannerError, InvalidInput, PieceExceedsStock,
    SearchBudgetExhausted, Infeasible,
)
from .heuristics import greedy_upper_bound
from .models import (
    DEFAULT_STOCK_LENGTH, Item, ItemLike, PieceLine, Solution,
    SolverConfig, SolveRequest, SolveResult, GroupSolveRequest, GroupSolveResult,
)
from .patterns import generate_patterns
from .solution import build_solution
from .strategies import (
    CoverContext, CoverStrategy, ExactCoverStrategy, default_strategies,
)
from .units import UnitConverter


logger = logging.getLogger(__name__)


def group_by_diameter(pieces: Iterable[PieceLine]) -> "OrderedDict[str, List[PieceLine]]":
    """Agrupa as linhas por diâmetro mantendo a ordem de entrada"""
    groups: "OrderedDict[str, List[PieceLine]]" = OrderedDict()
    for piece in pieces:
        groups.setdefault(str(piece.diameter), []).append(piece)
    return groups


def natural_key(text: str) -> List[Any]:
    """Chave de ordenação natural ("3/8" < "12", "2" < "10")"""
    return [int(tok) if tok.isdigit() else tok.lower() for tok in re.split(r"(\d+)", text)]


class CutPlanner:
    """
    Planejador de cortes para barras de comprimento único
    """

    def __init__(
        self,
        kerf: float = 0.0,
        config: Optional[SolverConfig] = None,
        strategy_factory: Callable[[], List[CoverStrategy]] = default_strategies,
    ):
        """
        Inicializa o planejador de cortes

        Args:
            kerf: Perda por corte em metros
            config: Parâmetros padrão do solver
            strategy_factory: Cria a cadeia de estratégias de cada resolução
        """
        self.kerf = kerf
        self.config = config or SolverConfig()
        self.strategy_factory = strategy_factory

    def solve(
        self,
        items: Sequence[ItemLike],
        stock_length: float = DEFAULT_STOCK_LENGTH,
        kerf: Optional[float] = None,
        config: Optional[SolverConfig] = None,
    ) -> Solution:
        """
        Resolve o problema de corte de um grupo de peças

        Args:
            items: Peças (nome, comprimento em m, demanda)
            stock_length: Comprimento da barra (m)
            kerf: Perda por corte (m); usa o padrão do planejador se None
            config: Parâmetros do solver; usa o padrão do planejador se None

        Returns:
            Plano de corte que atende exatamente a demanda

        Raises:
            InvalidInput: comprimentos não positivos ou demanda negativa
            PieceExceedsStock: peça maior que a barra
        """
        solution, _ = self._solve(items, stock_length, kerf, config)
        return solution

    def optimize(self, request: SolveRequest) -> SolveResult:
        """
        Otimiza um grupo sem propagar erros de domínio

        Args:
            request: Requisição de otimização

        Returns:
            Resultado da otimização (success=False em caso de erro)
        """
        start_time = time.time()

        try:
            solution, metadata = self._solve(
                request.items, request.stock_length, request.kerf, request.config
            )
            return SolveResult(
                success=True,
                solution=solution,
                processing_time=(time.time() - start_time) * 1000,
                metadata=metadata,
            )

        except CutPlannerError as e:
            offending = e.item_names if isinstance(e, PieceExceedsStock) else []
            return SolveResult(
                success=False,
                error=str(e),
                error_type=type(e).__name__,
                offending_items=offending,
                processing_time=(time.time() - start_time) * 1000,
            )

    def solve_groups(
        self,
        pieces: Iterable[PieceLine],
        stock_length: float = DEFAULT_STOCK_LENGTH,
        kerf: Optional[float] = None,
        config: Optional[SolverConfig] = None,
    ) -> "OrderedDict[str, SolveResult]":
        """
        Resolve cada diâmetro de forma independente

        Args:
            pieces: Linhas de peças de todos os diâmetros
            stock_length: Comprimento da barra (m)
            kerf: Perda por corte (m)
            config: Parâmetros do solver

        Returns:
            Resultado por diâmetro, em ordem natural de diâmetro
        """
        config = config or self.config
        kerf = self.kerf if kerf is None else kerf
        groups = group_by_diameter(pieces)

        requests = [
            (diameter, SolveRequest(
                items=[line.to_item() for line in lines],
                stock_length=stock_length,
                kerf=kerf,
                config=config,
            ))
            for diameter, lines in sorted(groups.items(), key=lambda g: natural_key(g[0]))
        ]

        if config.max_workers > 1 and len(requests) > 1:
            with ThreadPoolExecutor(max_workers=config.max_workers) as executor:
                results = list(executor.map(self.optimize, [r for _, r in requests]))
        else:
            results = [self.optimize(r) for _, r in requests]

        output: "OrderedDict[str, SolveResult]" = OrderedDict()
        for (diameter, _), result in zip(requests, results):
            result.metadata["diameter"] = diameter
            output[diameter] = result
        return output

    def optimize_groups(self, request: GroupSolveRequest) -> GroupSolveResult:
        """Método de conveniência para requisições agrupadas"""
        groups = self.solve_groups(
            request.pieces, request.stock_length, request.kerf, request.config
        )
        successful = len([r for r in groups.values() if r.success])
        return GroupSolveResult(
            total_groups=len(groups),
            successful=successful,
            failed=len(groups) - successful,
            groups=dict(groups),
        )

    def _solve(
        self,
        items: Sequence[ItemLike],
        stock_length: float,
        kerf: Optional[float],
        config: Optional[SolverConfig],
    ) -> Tuple[Solution, Dict[str, Any]]:
        config = config or self.config
        kerf = self.kerf if kerf is None else kerf
        converter = UnitConverter(config.scale)

        prepared = self._prepare_items(items)
        context = self._build_context(prepared, stock_length, kerf, converter, config)

        total_units = sum(l * d for l, d in zip(context.lengths, context.demands))
        lower_bound = math.ceil(total_units / context.stock)

        strategies = self.strategy_factory()
        metadata: Dict[str, Any] = {
            "patterns": len(context.patterns),
            "patterns_complete": context.patterns_complete,
            "upper_bound": context.upper_bound,
            "lower_bound": lower_bound,
            "strategies_tried": [],
        }

        for strategy in strategies:
            metadata["strategies_tried"].append(strategy.strategy.value)
            try:
                bars = strategy.attempt(context)
            except SearchBudgetExhausted as e:
                logger.warning("%s; aplicando estratégias alternativas", e)
                bars = None
            finally:
                if isinstance(strategy, ExactCoverStrategy):
                    metadata["nodes_visited"] = strategy.nodes_visited

            if bars is None:
                logger.info("Estratégia %s não encontrou cobertura", strategy.strategy.value)
                continue

            proven = isinstance(strategy, ExactCoverStrategy) and context.patterns_complete
            solution = build_solution(
                bars,
                context.names,
                context.lengths,
                context.stock,
                converter,
                strategy=strategy.strategy,
                kerf=kerf,
                proven_optimal=proven,
                lower_bound=lower_bound,
            )
            logger.info(
                "Plano com %d barras (estratégia %s, aproveitamento %.2f%%)",
                solution.total_bars, strategy.strategy.value, solution.utilization_pct,
            )

            metadata["strategy"] = strategy.strategy.value
            metadata["gap_to_lower_bound"] = solution.total_bars - lower_bound
            if context.upper_bound is not None:
                metadata["gap_to_upper_bound"] = solution.total_bars - context.upper_bound
                if solution.total_bars > context.upper_bound:
                    logger.warning(
                        "Estratégia %s usou %d barras, acima do limite guloso de %d (mínimo %d)",
                        strategy.strategy.value, solution.total_bars,
                        context.upper_bound, lower_bound,
                    )
            return solution, metadata

        raise Infeasible("Nenhuma estratégia produziu um plano de corte")

    def _prepare_items(self, items: Sequence[ItemLike]) -> List[Item]:
        """Normaliza as peças recebidas para `Item`"""
        prepared = []
        for raw in items:
            if isinstance(raw, Item):
                prepared.append(raw)
                continue
            try:
                if isinstance(raw, dict):
                    prepared.append(Item(**raw))
                else:
                    name, length, demand = raw
                    prepared.append(Item(name=name, length=length, demand=demand))
            except (ValidationError, TypeError, ValueError) as e:
                raise InvalidInput(f"Peça inválida {raw!r}: {e}") from e
        return prepared

    def _build_context(
        self,
        items: List[Item],
        stock_length: float,
        kerf: float,
        converter: UnitConverter,
        config: SolverConfig,
    ) -> CoverContext:
        """Valida a entrada e converte tudo para unidades inteiras"""
        if not math.isfinite(stock_length) or stock_length <= 0:
            raise InvalidInput(f"Comprimento da barra deve ser positivo: {stock_length}")
        if not math.isfinite(kerf) or kerf < 0:
            raise InvalidInput(f"Perda por corte não pode ser negativa: {kerf}")

        stock = converter.to_units(stock_length)
        if stock <= 0:
            raise InvalidInput(f"Comprimento da barra abaixo da resolução: {stock_length}")

        lengths = []
        for item in items:
            if not math.isfinite(item.length) or item.length <= 0:
                raise InvalidInput(f"Comprimento da peça {item.name} deve ser positivo: {item.length}")
            if item.demand < 0:
                raise InvalidInput(f"Demanda da peça {item.name} não pode ser negativa: {item.demand}")
            units = converter.to_units(item.length)
            if units <= 0:
                raise InvalidInput(f"Comprimento da peça {item.name} abaixo da resolução: {item.length}")
            lengths.append(units)

        oversized = [
            (item.name, item.length)
            for item, units in zip(items, lengths)
            if item.demand > 0 and units > stock
        ]
        if oversized:
            raise PieceExceedsStock(oversized, stock_length)

        demands = [item.demand for item in items]
        kerf_units = converter.to_units(kerf)

        patterns, complete = generate_patterns(
            lengths,
            demands,
            stock,
            kerf=kerf_units,
            max_patterns=config.max_patterns,
            max_states_per_step=config.max_states_per_step,
        )

        upper_bound = None
        if config.use_upper_bound:
            upper_bound = greedy_upper_bound(lengths, demands, stock, kerf_units)

        return CoverContext(
            names=tuple(item.name for item in items),
            lengths=tuple(lengths),
            demands=tuple(demands),
            stock=stock,
            kerf=kerf_units,
            converter=converter,
            config=config,
            patterns=tuple(patterns),
            patterns_complete=complete,
            upper_bound=upper_bound,
        )
