"""
Reconstrução do plano de corte a partir dos padrões escolhidos
"""

from typing import List, Sequence, Tuple

from .models import Solution, SolveStrategy
from .patterns import Pattern
from .units import UnitConverter


def build_solution(
    bars: Sequence[Pattern],
    names: Sequence[str],
    lengths: Sequence[int],
    stock: int,
    converter: UnitConverter,
    strategy: SolveStrategy,
    kerf: float = 0.0,
    proven_optimal: bool = False,
    lower_bound: int = 0,
) -> Solution:
    """
    Expande cada padrão em segmentos (nome, comprimento) e calcula as métricas

    Args:
        bars: Padrões escolhidos, um por barra
        names: Nome de cada item
        lengths: Comprimento de cada item (unidades)
        stock: Comprimento da barra (unidades)
        converter: Conversor de unidades usado na resolução
        strategy: Estratégia que gerou os padrões
        kerf: Perda por corte (m), apenas informativa
        proven_optimal: Se o número de barras é mínimo comprovado
        lower_bound: Limite inferior de barras

    Returns:
        Plano de corte normalizado
    """
    segments: List[List[Tuple[str, float]]] = []
    required_units = 0
    for pattern in bars:
        bar = []
        for index, count in enumerate(pattern.counts):
            bar.extend((names[index], converter.to_meters(lengths[index])) for _ in range(count))
            required_units += count * lengths[index]
        segments.append(bar)

    total_bars = len(segments)
    bought_units = total_bars * stock

    if total_bars:
        utilization = round(100 * required_units / bought_units, 2)
        waste_pct = round(100 - utilization, 2)
    else:
        utilization = 0.0
        waste_pct = 0.0

    return Solution(
        bars=segments,
        total_bars=total_bars,
        total_required_m=converter.to_meters(required_units),
        total_bought_m=converter.to_meters(bought_units),
        total_waste_m=converter.to_meters(bought_units - required_units),
        utilization_pct=utilization,
        waste_pct=waste_pct,
        stock_length=converter.to_meters(stock),
        kerf=kerf,
        strategy=strategy,
        proven_optimal=proven_optimal,
        lower_bound=lower_bound,
    )
