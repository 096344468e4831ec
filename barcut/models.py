"""
Modelos de dados para o sistema BarCut
"""

from typing import List, Optional, Tuple, Dict, Any, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator
from enum import Enum

from .units import parse_length


DEFAULT_STOCK_LENGTH = 12.0

# Comprimentos comerciais de varilha oferecidos na interface (m)
COMMERCIAL_STOCK_LENGTHS = (9.0, 12.0)


class SolveStrategy(str, Enum):
    """Estratégias de cobertura que podem produzir um plano"""
    EXACT = "exact"                 # Busca exata por padrões
    GREEDY_COVER = "greedy_cover"   # Cobertura gulosa por padrões
    PER_PIECE = "per_piece"         # Empacotamento peça a peça (FFD)


class Item(BaseModel):
    """Representa um tipo de peça a cortar"""
    name: str = Field(..., description="Nome descritivo da peça")
    length: float = Field(..., description="Comprimento da peça (m)")
    demand: int = Field(..., description="Quantidade exata necessária")

    model_config = ConfigDict(frozen=True)


class PieceLine(BaseModel):
    """Linha de peça como digitada pelo usuário, agrupada por diâmetro"""
    id: Optional[str] = Field(None, description="Identificador da linha")
    diameter: str = Field(..., description="Diâmetro da varilha (ex: 1/2, 3/8, 12)")
    label: str = Field("", description="Etiqueta (Sapata, Coluna, ...)")
    length: float = Field(..., description="Comprimento de corte por peça (m)")
    quantity: int = Field(..., description="Quantidade de peças")

    @field_validator("diameter", mode="before")
    @classmethod
    def validate_diameter(cls, v):
        if isinstance(v, (int, float)):
            return str(v)
        return v

    @field_validator("length", mode="before")
    @classmethod
    def validate_length(cls, v):
        if isinstance(v, str):
            parsed = parse_length(v)
            if parsed is None:
                raise ValueError(f"Comprimento inválido: {v!r}")
            return parsed
        return v

    def to_item(self) -> Item:
        """Converte a linha em item do solver"""
        name = self.label or f"{self.length:g} m"
        return Item(name=name, length=self.length, demand=self.quantity)


class SolverConfig(BaseModel):
    """Parâmetros de ajuste do solver (não são regra de negócio)"""
    scale: int = Field(1000, ge=1, description="Unidades por metro (1000 = mm)")
    max_patterns: int = Field(2000, ge=1, description="Máximo de padrões retornados")
    max_states_per_step: int = Field(1200, ge=1, description="Estados retidos por item na geração")
    max_nodes: int = Field(120000, ge=1, description="Máximo de nós visitados na busca exata")
    use_upper_bound: bool = Field(True, description="Podar a busca com o limite guloso")
    time_limit: Optional[float] = Field(10.0, gt=0, description="Tempo máximo da busca exata (s); None desativa")
    max_workers: int = Field(1, ge=1, description="Grupos resolvidos em paralelo")

    model_config = ConfigDict(frozen=True)


class Solution(BaseModel):
    """Plano de corte normalizado devolvido ao chamador"""
    bars: List[List[Tuple[str, float]]] = Field(..., description="Segmentos (nome, comprimento m) por barra")
    total_bars: int = Field(..., description="Barras utilizadas")
    total_required_m: float = Field(..., description="Comprimento total das peças (m)")
    total_bought_m: float = Field(..., description="Comprimento total comprado (m)")
    total_waste_m: float = Field(..., description="Desperdício total (m)")
    utilization_pct: float = Field(..., description="Aproveitamento percentual")
    waste_pct: float = Field(..., description="Desperdício percentual")
    stock_length: float = Field(..., description="Comprimento da barra (m)")
    kerf: float = Field(0.0, description="Perda por corte (m)")
    strategy: SolveStrategy = Field(..., description="Estratégia que gerou o plano")
    proven_optimal: bool = Field(False, description="Se o número de barras é mínimo comprovado")
    lower_bound: int = Field(0, description="Limite inferior de barras")

    def piece_counts(self) -> Dict[str, int]:
        """Quantidade de peças cortadas por nome"""
        counts: Dict[str, int] = {}
        for bar in self.bars:
            for name, _ in bar:
                counts[name] = counts.get(name, 0) + 1
        return counts


class SolveRequest(BaseModel):
    """Requisição de otimização para um grupo de peças"""
    items: List[Item] = Field(..., description="Peças a cortar")
    stock_length: float = Field(DEFAULT_STOCK_LENGTH, description="Comprimento da barra (m)")
    kerf: float = Field(0.0, description="Perda por corte (m)")
    config: Optional[SolverConfig] = Field(None, description="Parâmetros do solver")


class GroupSolveRequest(BaseModel):
    """Requisição de otimização para várias linhas agrupadas por diâmetro"""
    pieces: List[PieceLine] = Field(..., description="Linhas de peças")
    stock_length: float = Field(DEFAULT_STOCK_LENGTH, description="Comprimento da barra (m)")
    kerf: float = Field(0.0, description="Perda por corte (m)")
    config: Optional[SolverConfig] = Field(None, description="Parâmetros do solver")


class SolveResult(BaseModel):
    """Resultado completo da otimização"""
    success: bool = Field(..., description="Se a otimização foi bem-sucedida")
    solution: Optional[Solution] = Field(None, description="Plano de corte")
    error: Optional[str] = Field(None, description="Mensagem de erro")
    error_type: Optional[str] = Field(None, description="Classe do erro")
    offending_items: List[str] = Field(default_factory=list, description="Peças que causaram o erro")
    processing_time: float = Field(0.0, description="Tempo de processamento (ms)")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Metadados adicionais")


class GroupSolveResult(BaseModel):
    """Resultados por diâmetro"""
    total_groups: int = Field(..., description="Quantidade de grupos")
    successful: int = Field(..., description="Grupos resolvidos")
    failed: int = Field(..., description="Grupos com erro")
    groups: Dict[str, SolveResult] = Field(..., description="Resultado por diâmetro")


ItemLike = Union[Item, Dict[str, Any]]
