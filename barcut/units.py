"""
Conversão entre metros e unidades inteiras de comprimento
"""

import math
import re
from typing import Optional


DEFAULT_SCALE = 1000  # mm (0.001 m)

_MIXED_FRACTION = re.compile(r"^(\d+)\s+(\d+)/(\d+)$")
_FRACTION = re.compile(r"^(\d+)/(\d+)$")


class UnitConverter:
    """
    Converte comprimentos reais (m) para inteiros e vice-versa.

    Toda a aritmética combinatória (encaixe de padrões, controle de demanda)
    é feita em unidades inteiras para que as comparações sejam exatas.
    """

    def __init__(self, scale: int = DEFAULT_SCALE):
        """
        Args:
            scale: Unidades por metro (1000 = resolução de milímetro)
        """
        if scale < 1:
            raise ValueError("A escala deve ser positiva")
        self.scale = scale
        self.decimals = max(3, math.ceil(math.log10(scale)))

    def to_units(self, meters: float) -> int:
        """Metros -> unidades inteiras (arredondamento ao mais próximo)"""
        return int(round(meters * self.scale))

    def to_meters(self, units: int) -> float:
        """Unidades inteiras -> metros"""
        return round(units / self.scale, self.decimals)

    def round_meters(self, meters: float) -> float:
        """Arredonda um valor em metros na resolução da escala"""
        return round(meters, self.decimals)


def parse_length(raw: str) -> Optional[float]:
    """
    Interpreta um comprimento digitado pelo usuário.

    Aceita "3", "2.4", "2,4", "1/2", "2 1/2", "3m" e '3"'. Retorna None quando
    o texto não é um número.
    """
    if not raw:
        return None
    s = raw.strip().lower()
    s = re.sub(r"m\b", "", s).replace('"', "").strip()

    match = _MIXED_FRACTION.match(s)
    if match:
        whole, num, den = (int(g) for g in match.groups())
        if den == 0:
            return None
        return whole + num / den

    match = _FRACTION.match(s)
    if match:
        num, den = (int(g) for g in match.groups())
        if den == 0:
            return None
        return num / den

    try:
        value = float(s.replace(",", "."))
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value
