"""
BarCut - Otimização de corte de varilhas em barras de comprimento fixo

Determina quantas barras cortar para atender exatamente a demanda de cada
peça, sem sobreprodução, e informa aproveitamento e desperdício.
"""

from .core import CutPlanner, group_by_diameter
from .exceptions import (
    CutPlannerError, InvalidInput, PieceExceedsStock, SearchBudgetExhausted, Infeasible
)
from .models import (
    Item, PieceLine, SolverConfig, Solution, SolveStrategy, SolveRequest,
    SolveResult, GroupSolveRequest, GroupSolveResult, COMMERCIAL_STOCK_LENGTHS,
)
from .units import UnitConverter, parse_length

__version__ = "1.0.0"
__author__ = "BarCut Team"

__all__ = [
    "CutPlanner",
    "group_by_diameter",
    "Item",
    "PieceLine",
    "SolverConfig",
    "Solution",
    "SolveStrategy",
    "SolveRequest",
    "SolveResult",
    "GroupSolveRequest",
    "GroupSolveResult",
    "COMMERCIAL_STOCK_LENGTHS",
    "UnitConverter",
    "parse_length",
    "CutPlannerError",
    "InvalidInput",
    "PieceExceedsStock",
    "SearchBudgetExhausted",
    "Infeasible",
]
