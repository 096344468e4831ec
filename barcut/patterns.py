"""
Geração de padrões de corte (combinações de peças que cabem em uma barra)
"""

import logging
from typing import Dict, List, NamedTuple, Sequence, Tuple

import numpy as np


logger = logging.getLogger(__name__)


class Pattern(NamedTuple):
    """Quantas peças de cada item vão em uma barra"""
    counts: Tuple[int, ...]
    used: int       # unidades ocupadas por peças
    waste: int      # unidades que sobram (inclui perdas de corte)
    pieces: int


def kerf_loss(pieces: int, kerf: int) -> int:
    """Perda de corte de uma barra com `pieces` peças"""
    return kerf * max(0, pieces - 1)


def fits(used: int, pieces: int, stock: int, kerf: int = 0) -> bool:
    """Se as peças cabem em uma barra considerando a perda por corte"""
    return used + kerf_loss(pieces, kerf) <= stock


def make_pattern(counts: Sequence[int], lengths: Sequence[int], stock: int) -> Pattern:
    """Cria um padrão a partir do vetor de quantidades"""
    counts = tuple(int(c) for c in counts)
    used = sum(c * l for c, l in zip(counts, lengths))
    return Pattern(counts=counts, used=used, waste=stock - used, pieces=sum(counts))


def generate_patterns(
    lengths: Sequence[int],
    demands: Sequence[int],
    stock: int,
    kerf: int = 0,
    max_patterns: int = 2000,
    max_states_per_step: int = 1200,
) -> Tuple[List[Pattern], bool]:
    """
    Enumera padrões de corte por expansão de estados com poda (beam search)

    Os itens são processados na ordem recebida. Após cada item, a fronteira é
    ordenada por comprimento usado decrescente e apenas os
    `max_states_per_step` melhores estados são mantidos. Essa poda pode
    descartar padrões úteis.

    Args:
        lengths: Comprimento de cada item (unidades)
        demands: Demanda de cada item (limita as repetições por padrão)
        stock: Comprimento da barra (unidades)
        kerf: Perda por corte (unidades)
        max_patterns: Máximo de padrões retornados
        max_states_per_step: Estados mantidos após cada item

    Returns:
        (padrões ordenados por desperdício crescente, se a enumeração foi completa)
    """
    n = len(lengths)
    complete = True

    # (usado, peças, quantidades parciais)
    states: List[Tuple[int, int, Tuple[int, ...]]] = [(0, 0, ())]

    for i in range(n):
        li = lengths[i]
        max_q = min(demands[i], stock // max(1, li))
        next_states = []

        for used, pieces, counts in states:
            for q in range(max_q + 1):
                new_used = used + q * li
                new_pieces = pieces + q
                if not fits(new_used, new_pieces, stock, kerf):
                    break
                next_states.append((new_used, new_pieces, counts + (q,)))

        next_states.sort(key=lambda s: -s[0])
        if len(next_states) > max_states_per_step:
            complete = False
            logger.debug(
                "Item %d: %d estados podados para %d",
                i, len(next_states), max_states_per_step,
            )
            next_states = next_states[:max_states_per_step]
        states = next_states

    unique: Dict[Tuple[int, ...], int] = {}
    for used, pieces, counts in states:
        if pieces == 0:
            continue
        if used > unique.get(counts, -1):
            unique[counts] = used

    # Padrões unitários sempre presentes para itens que cabem na barra
    for i in range(n):
        if demands[i] > 0 and lengths[i] <= stock:
            counts = tuple(1 if j == i else 0 for j in range(n))
            if counts not in unique:
                unique[counts] = lengths[i]

    if not unique:
        return [], complete

    matrix = np.array(list(unique.keys()), dtype=np.int64)
    used = matrix @ np.asarray(lengths, dtype=np.int64)
    waste = stock - used
    pieces = matrix.sum(axis=1)

    # lexsort: última chave é a primária (desperdício crescente, depois usado decrescente)
    order = np.lexsort((-used, waste))
    if len(order) > max_patterns:
        complete = False
        order = order[:max_patterns]

    patterns = [
        Pattern(
            counts=tuple(int(c) for c in matrix[k]),
            used=int(used[k]),
            waste=int(waste[k]),
            pieces=int(pieces[k]),
        )
        for k in order
    ]
    logger.debug("%d padrões gerados (completo=%s)", len(patterns), complete)
    return patterns, complete
