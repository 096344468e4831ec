"""Fixtures compartilhadas dos testes do BarCut"""

import pytest

from barcut import CutPlanner, Item, SolverConfig
from barcut.patterns import generate_patterns
from barcut.strategies import CoverContext
from barcut.units import UnitConverter


@pytest.fixture
def planner() -> CutPlanner:
    """Planejador com parâmetros padrão"""
    return CutPlanner()


@pytest.fixture
def mixed_items():
    """Grupo com vários comprimentos, parecido com uma obra real"""
    return [
        Item(name="Zapata", length=2.4, demand=8),
        Item(name="Columna", length=3.1, demand=6),
        Item(name="Viga", length=4.5, demand=4),
        Item(name="Estribo", length=1.25, demand=10),
    ]


def make_context(lengths, demands, stock, patterns=None, kerf=0, upper_bound=None):
    """Monta um CoverContext em unidades inteiras para testar estratégias"""
    complete = True
    if patterns is None:
        patterns, complete = generate_patterns(lengths, demands, stock, kerf=kerf)
    return CoverContext(
        names=tuple(f"P{i}" for i in range(len(lengths))),
        lengths=tuple(lengths),
        demands=tuple(demands),
        stock=stock,
        kerf=kerf,
        converter=UnitConverter(),
        config=SolverConfig(),
        patterns=tuple(patterns),
        patterns_complete=complete,
        upper_bound=upper_bound,
    )
