"""
Hierarquia de erros do BarCut
"""

from typing import List, Sequence, Tuple


class CutPlannerError(Exception):
    """Erro base do planejador de cortes"""


class InvalidInput(CutPlannerError):
    """Entrada rejeitada antes de qualquer busca"""


class PieceExceedsStock(CutPlannerError):
    """Uma ou mais peças são maiores que a barra de estoque"""

    def __init__(self, pieces: Sequence[Tuple[str, float]], stock_length: float):
        self.pieces: List[Tuple[str, float]] = list(pieces)
        self.stock_length = stock_length
        described = ", ".join(f"{name} ({length:g} m)" for name, length in self.pieces)
        super().__init__(
            f"Peças maiores que a barra de {stock_length:g} m: {described}"
        )

    @property
    def item_names(self) -> List[str]:
        return [name for name, _ in self.pieces]


class SearchBudgetExhausted(CutPlannerError):
    """A busca exata excedeu o orçamento de nós ou de tempo"""

    def __init__(self, nodes_visited: int, reason: str = "nodes"):
        self.nodes_visited = nodes_visited
        self.reason = reason
        super().__init__(
            f"Nenhuma solução exata dentro do orçamento ({reason}, {nodes_visited} nós visitados)"
        )


class Infeasible(CutPlannerError):
    """Nenhuma estratégia conseguiu produzir um plano"""
