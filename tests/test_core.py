"""Testes do planejador: cenários, invariantes e cadeia de fallback"""

import pytest

from barcut import (
    CutPlanner, InvalidInput, Item, PieceExceedsStock, PieceLine,
    SolveRequest, SolverConfig, SolveStrategy, group_by_diameter,
)
from barcut.core import natural_key
from barcut.heuristics import greedy_upper_bound
from barcut.units import UnitConverter


def assert_valid_plan(solution, items, stock_length):
    """Sem sobreprodução, capacidade respeitada e comprimento conservado"""
    expected = {item.name: item.demand for item in items if item.demand > 0}
    assert solution.piece_counts() == expected

    for bar in solution.bars:
        assert sum(length for _, length in bar) <= stock_length + 1e-9

    required = sum(item.length * item.demand for item in items)
    assert solution.total_required_m == pytest.approx(required, abs=1e-6)
    assert sum(length for bar in solution.bars for _, length in bar) == pytest.approx(required, abs=1e-6)
    assert solution.total_bought_m == pytest.approx(solution.total_bars * stock_length)
    if solution.total_bars:
        assert solution.utilization_pct + solution.waste_pct == pytest.approx(100, abs=0.011)


# =============================================================================
# Cenários
# =============================================================================


def test_perfect_fit_single_bar(planner):
    solution = planner.solve([Item(name="A", length=3, demand=4)], stock_length=12)

    assert solution.total_bars == 1
    assert solution.bars == [[("A", 3.0)] * 4]
    assert solution.total_waste_m == 0.0
    assert solution.utilization_pct == 100.0
    assert solution.waste_pct == 0.0
    assert solution.strategy is SolveStrategy.EXACT
    assert solution.proven_optimal


def test_two_bars_when_exact_fit_impossible(planner):
    solution = planner.solve([Item(name="B", length=4, demand=3)], stock_length=9)

    assert solution.total_bars == 2
    assert [len(bar) for bar in solution.bars] == [2, 1]
    assert [round(9 - sum(l for _, l in bar), 3) for bar in solution.bars] == [1.0, 5.0]
    assert solution.total_bought_m == 18.0
    assert solution.total_required_m == 12.0
    assert solution.total_waste_m == 6.0
    assert solution.utilization_pct == 66.67
    assert solution.waste_pct == 33.33


def test_piece_longer_than_stock(planner):
    with pytest.raises(PieceExceedsStock) as excinfo:
        planner.solve([Item(name="X", length=10, demand=1)], stock_length=9)
    assert excinfo.value.item_names == ["X"]
    assert excinfo.value.stock_length == 9


def test_empty_item_list(planner):
    solution = planner.solve([], stock_length=12)

    assert solution.total_bars == 0
    assert solution.bars == []
    assert solution.total_required_m == 0.0
    assert solution.total_bought_m == 0.0
    assert solution.total_waste_m == 0.0
    assert solution.utilization_pct == 0.0
    assert solution.waste_pct == 0.0


def test_zero_demand_items_are_ignored(planner):
    items = [Item(name="A", length=3, demand=0), Item(name="Z", length=20, demand=0)]
    assert planner.solve(items, stock_length=12).total_bars == 0


# =============================================================================
# Validação
# =============================================================================


@pytest.mark.parametrize("stock_length", [0, -1, float("inf")])
def test_invalid_stock_length(planner, stock_length):
    with pytest.raises(InvalidInput):
        planner.solve([Item(name="A", length=1, demand=1)], stock_length=stock_length)


@pytest.mark.parametrize("item", [
    Item(name="A", length=0, demand=1),
    Item(name="A", length=-2, demand=1),
    Item(name="A", length=0.0001, demand=1),
    Item(name="A", length=1, demand=-1),
])
def test_invalid_items(planner, item):
    with pytest.raises(InvalidInput):
        planner.solve([item], stock_length=12)


def test_negative_kerf(planner):
    with pytest.raises(InvalidInput):
        planner.solve([Item(name="A", length=1, demand=1)], stock_length=12, kerf=-0.1)


def test_malformed_item(planner):
    with pytest.raises(InvalidInput):
        planner.solve([{"name": "A", "length": "abc", "demand": 1}], stock_length=12)
    with pytest.raises(InvalidInput):
        planner.solve([("A", 1.0)], stock_length=12)


def test_accepts_dicts_and_tuples(planner):
    solution = planner.solve(
        [{"name": "A", "length": 3, "demand": 2}, ("B", 2.5, 2)], stock_length=12
    )
    assert solution.piece_counts() == {"A": 2, "B": 2}


# =============================================================================
# Invariantes
# =============================================================================


@pytest.mark.parametrize("stock_length", [9, 12])
def test_mixed_group_invariants(planner, mixed_items, stock_length):
    solution = planner.solve(mixed_items, stock_length=stock_length)
    assert_valid_plan(solution, mixed_items, stock_length)
    assert solution.total_bars >= solution.lower_bound


def test_exact_never_worse_than_greedy_bound(planner, mixed_items):
    converter = UnitConverter()
    lengths = [converter.to_units(i.length) for i in mixed_items]
    demands = [i.demand for i in mixed_items]

    solution = planner.solve(mixed_items, stock_length=12)

    assert solution.strategy is SolveStrategy.EXACT
    assert solution.total_bars <= greedy_upper_bound(lengths, demands, 12000)


def test_deterministic(planner, mixed_items):
    first = planner.solve(mixed_items, stock_length=12)
    second = CutPlanner().solve(list(mixed_items), stock_length=12)
    assert first == second


def test_kerf_counts_between_pieces(planner):
    items = [Item(name="A", length=3, demand=4)]
    solution = planner.solve(items, stock_length=12, kerf=0.01)

    assert solution.total_bars == 2
    assert solution.kerf == 0.01
    assert all(len(bar) <= 3 for bar in solution.bars)
    assert_valid_plan(solution, items, 12)


def test_default_kerf_from_planner():
    solution = CutPlanner(kerf=0.01).solve([Item(name="A", length=3, demand=4)], stock_length=12)
    assert solution.total_bars == 2


# =============================================================================
# Fallbacks
# =============================================================================


def test_budget_exhaustion_falls_back_to_greedy_cover(caplog):
    planner = CutPlanner(config=SolverConfig(max_nodes=1))
    items = [Item(name="B", length=4, demand=3)]

    with caplog.at_level("WARNING", logger="barcut.core"):
        solution = planner.solve(items, stock_length=9)

    assert solution.strategy is SolveStrategy.GREEDY_COVER
    assert not solution.proven_optimal
    assert solution.total_bars == 2
    assert_valid_plan(solution, items, 9)
    assert any("orçamento" in record.getMessage() for record in caplog.records)


def test_time_limit_falls_back_to_greedy_cover(mixed_items, caplog):
    planner = CutPlanner(config=SolverConfig(time_limit=1e-9))

    with caplog.at_level("WARNING", logger="barcut.core"):
        result = planner.optimize(SolveRequest(items=mixed_items, stock_length=12))

    assert result.success
    assert result.solution.strategy is not SolveStrategy.EXACT
    assert not result.solution.proven_optimal
    assert result.metadata["nodes_visited"] == 1
    assert_valid_plan(result.solution, mixed_items, 12)
    assert any("(time," in record.getMessage() for record in caplog.records)


def test_exact_search_is_time_bounded_by_default():
    assert SolverConfig().time_limit is not None
    assert SolverConfig().time_limit > 0
    assert SolverConfig(time_limit=None).time_limit is None


def test_eight_item_group_finishes_within_time_limit():
    items = [
        Item(name=f"P{i}", length=length, demand=demand)
        for i, (length, demand) in enumerate([
            (2.35, 9), (1.85, 11), (3.15, 7), (0.95, 14),
            (4.2, 5), (1.4, 12), (2.75, 6), (0.6, 18),
        ])
    ]
    planner = CutPlanner(config=SolverConfig(time_limit=2.0))

    result = planner.optimize(SolveRequest(items=items, stock_length=12))

    assert result.success
    assert result.processing_time < 30000
    assert result.solution.total_bars >= result.metadata["lower_bound"] == 12
    assert result.metadata["gap_to_lower_bound"] == result.solution.total_bars - 12
    assert_valid_plan(result.solution, items, 12)


def test_fallback_worse_than_greedy_bound_is_reported(caplog):
    # a barra só de peças curtas deixa as longas sozinhas
    items = [Item(name="Longa", length=6, demand=3), Item(name="Curta", length=1, demand=12)]
    planner = CutPlanner(config=SolverConfig(max_nodes=1))

    with caplog.at_level("WARNING", logger="barcut.core"):
        result = planner.optimize(SolveRequest(items=items, stock_length=10))

    assert result.solution.strategy is SolveStrategy.GREEDY_COVER
    assert result.solution.total_bars == 4
    assert result.metadata["upper_bound"] == 3
    assert result.metadata["lower_bound"] == 3
    assert result.metadata["gap_to_upper_bound"] == 1
    assert result.metadata["gap_to_lower_bound"] == 1
    assert any("limite guloso" in record.getMessage() for record in caplog.records)


def test_exact_plan_has_no_gap_to_upper_bound(planner, mixed_items):
    result = planner.optimize(SolveRequest(items=mixed_items, stock_length=12))

    assert result.metadata["strategy"] == result.solution.strategy.value
    assert result.metadata["gap_to_upper_bound"] <= 0


def test_per_piece_is_the_backstop():
    planner = CutPlanner(config=SolverConfig(max_patterns=1))
    items = [Item(name="B", length=4, demand=3)]

    solution = planner.solve(items, stock_length=9)

    assert solution.strategy is SolveStrategy.PER_PIECE
    assert not solution.proven_optimal
    assert_valid_plan(solution, items, 9)


def test_pruned_generation_is_best_effort(mixed_items):
    planner = CutPlanner(config=SolverConfig(max_states_per_step=3))
    solution = planner.solve(mixed_items, stock_length=12)

    assert not solution.proven_optimal
    assert_valid_plan(solution, mixed_items, 12)


def test_upper_bound_can_be_disabled(mixed_items):
    planner = CutPlanner(config=SolverConfig(use_upper_bound=False))
    solution = planner.solve(mixed_items, stock_length=12)
    assert solution.total_bars == CutPlanner().solve(mixed_items, stock_length=12).total_bars


# =============================================================================
# optimize() e grupos
# =============================================================================


def test_optimize_success(planner):
    result = planner.optimize(SolveRequest(items=[Item(name="A", length=3, demand=4)], stock_length=12))

    assert result.success
    assert result.solution.total_bars == 1
    assert result.metadata["patterns"] == 4
    assert result.metadata["strategies_tried"] == ["exact"]
    assert result.metadata["nodes_visited"] >= 1
    assert result.processing_time >= 0


def test_optimize_reports_oversized_piece(planner):
    result = planner.optimize(SolveRequest(items=[Item(name="X", length=10, demand=1)], stock_length=9))

    assert not result.success
    assert result.solution is None
    assert result.error_type == "PieceExceedsStock"
    assert result.offending_items == ["X"]


def test_optimize_reports_invalid_input(planner):
    result = planner.optimize(SolveRequest(items=[Item(name="A", length=1, demand=1)], stock_length=0))
    assert not result.success
    assert result.error_type == "InvalidInput"


def test_natural_diameter_order():
    assert sorted(["12", "3/8", "1/2", "8"], key=natural_key) == ["1/2", "3/8", "8", "12"]


def test_group_by_diameter_keeps_input_order():
    lines = [
        PieceLine(diameter="3/8", length=1, quantity=1),
        PieceLine(diameter=12, length=1, quantity=1),
        PieceLine(diameter="3/8", length=2, quantity=1),
    ]
    groups = group_by_diameter(lines)
    assert list(groups) == ["3/8", "12"]
    assert [line.length for line in groups["3/8"]] == [1, 2]


def test_piece_line_parses_text_length():
    line = PieceLine(diameter="1/2", label="", length="1 1/4", quantity=3)
    assert line.length == 1.25
    assert line.to_item() == Item(name="1.25 m", length=1.25, demand=3)


def test_piece_line_rejects_bad_length():
    with pytest.raises(ValueError):
        PieceLine(diameter="1/2", length="abc", quantity=3)


def test_groups_are_independent(planner):
    lines = [
        PieceLine(diameter="1/2", label="Zapata", length=2.4, quantity=5),
        PieceLine(diameter="3/8", label="Largo", length=13, quantity=1),
        PieceLine(diameter="1/4", label="", length=0.9, quantity=12),
    ]
    results = planner.solve_groups(lines, stock_length=12)

    assert list(results) == ["1/2", "1/4", "3/8"]
    assert results["1/2"].success
    assert results["1/4"].success
    assert results["1/4"].solution.piece_counts() == {"0.9 m": 12}
    assert not results["3/8"].success
    assert results["3/8"].offending_items == ["Largo"]
    assert results["3/8"].metadata["diameter"] == "3/8"


def test_parallel_groups_match_sequential():
    lines = [
        PieceLine(diameter="1/2", label="Zapata", length=2.4, quantity=8),
        PieceLine(diameter="1/2", label="Columna", length=3.1, quantity=6),
        PieceLine(diameter="3/8", label="Estribo", length=1.25, quantity=20),
        PieceLine(diameter="5/8", label="Viga", length=5.5, quantity=3),
    ]
    sequential = CutPlanner().solve_groups(lines)
    parallel = CutPlanner(config=SolverConfig(max_workers=3)).solve_groups(lines)

    assert list(sequential) == list(parallel)
    for diameter in sequential:
        assert sequential[diameter].solution == parallel[diameter].solution


def test_optimize_groups_counts(planner):
    from barcut import GroupSolveRequest

    request = GroupSolveRequest(pieces=[
        PieceLine(diameter="1/2", length=2.4, quantity=5),
        PieceLine(diameter="3/8", length=13, quantity=1),
    ])
    result = planner.optimize_groups(request)

    assert result.total_groups == 2
    assert result.successful == 1
    assert result.failed == 1
