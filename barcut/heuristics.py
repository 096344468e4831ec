"""
Heurística First Fit Decreasing para barras
"""

from typing import List, Sequence, Tuple

from .patterns import Pattern, fits, make_pattern


def expand_pieces(lengths: Sequence[int], demands: Sequence[int]) -> List[Tuple[int, int]]:
    """Expande a demanda em peças individuais (comprimento, índice do item)"""
    pieces = []
    for index, (length, demand) in enumerate(zip(lengths, demands)):
        pieces.extend((length, index) for _ in range(demand))
    # sort estável: empates mantêm a ordem de entrada
    pieces.sort(key=lambda p: -p[0])
    return pieces


def first_fit_decreasing(
    lengths: Sequence[int],
    demands: Sequence[int],
    stock: int,
    kerf: int = 0,
) -> List[Pattern]:
    """
    Empacota cada peça na primeira barra aberta com espaço suficiente

    Args:
        lengths: Comprimento de cada item (unidades)
        demands: Quantidade de cada item
        stock: Comprimento da barra (unidades)
        kerf: Perda por corte (unidades)

    Returns:
        Lista de barras, cada uma como um padrão
    """
    n = len(lengths)
    bar_counts: List[List[int]] = []
    bar_used: List[int] = []
    bar_pieces: List[int] = []

    for length, index in expand_pieces(lengths, demands):
        if length > stock:
            raise ValueError(f"Item {index} ({length}) excede a barra ({stock})")

        for b in range(len(bar_counts)):
            if fits(bar_used[b] + length, bar_pieces[b] + 1, stock, kerf):
                bar_counts[b][index] += 1
                bar_used[b] += length
                bar_pieces[b] += 1
                break
        else:
            counts = [0] * n
            counts[index] = 1
            bar_counts.append(counts)
            bar_used.append(length)
            bar_pieces.append(1)

    return [make_pattern(counts, lengths, stock) for counts in bar_counts]


def greedy_upper_bound(
    lengths: Sequence[int],
    demands: Sequence[int],
    stock: int,
    kerf: int = 0,
) -> int:
    """Quantidade de barras usada pelo First Fit Decreasing"""
    return len(first_fit_decreasing(lengths, demands, stock, kerf))
