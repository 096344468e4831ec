"""
Utilitários de relatório do BarCut
"""

import logging
from typing import Dict, List, Optional
from pathlib import Path

import pandas as pd

from .models import Solution, SolveResult


logger = logging.getLogger(__name__)


class CutPlanReporter:
    """Classe para geração de relatórios de um plano de corte"""

    def __init__(self, solution: Solution, title: Optional[str] = None):
        """
        Inicializa o gerador de relatórios

        Args:
            solution: Plano de corte
            title: Título do grupo (ex: diâmetro)
        """
        self.solution = solution
        self.title = title

    def to_dataframe(self) -> pd.DataFrame:
        """Tabela com um segmento por linha"""
        rows = []
        for bar_number, bar in enumerate(self.solution.bars, 1):
            position = 0.0
            for order, (name, length) in enumerate(bar, 1):
                rows.append({
                    "barra": bar_number,
                    "ordem": order,
                    "peca": name,
                    "comprimento_m": length,
                    "posicao_m": round(position, 3),
                })
                position += length + self.solution.kerf
        return pd.DataFrame(rows, columns=["barra", "ordem", "peca", "comprimento_m", "posicao_m"])

    def summary_by_piece(self) -> pd.DataFrame:
        """Quantidade e comprimento total cortado por peça"""
        df = self.to_dataframe()
        if df.empty:
            return pd.DataFrame(columns=["peca", "quantidade", "total_m"])
        summary = df.groupby("peca", sort=False).agg(
            quantidade=("comprimento_m", "size"),
            total_m=("comprimento_m", "sum"),
        ).reset_index()
        summary["total_m"] = summary["total_m"].round(3)
        return summary

    def generate_text_report(self) -> str:
        """Gera relatório em formato texto"""
        s = self.solution
        report = []
        report.append("=" * 60)
        report.append("PLANO DE CORTE" + (f" - {self.title}" if self.title else ""))
        report.append("=" * 60)
        report.append("")

        report.append("RESUMO:")
        report.append(f"  • Barra: {s.stock_length:g} m")
        report.append(f"  • Barras: {s.total_bars}")
        report.append(f"  • Utilizado: {s.total_required_m:.3f} m ({s.utilization_pct}%)")
        report.append(f"  • Desperdício: {s.total_waste_m:.3f} m ({s.waste_pct}%)")
        report.append(f"  • Estratégia: {s.strategy.value}")
        report.append(f"  • Mínimo comprovado: {'sim' if s.proven_optimal else 'não'}")

        if s.bars:
            report.append("")
            report.append("BARRAS:")
            report.append("-" * 40)
            for i, bar in enumerate(s.bars, 1):
                used = sum(length for _, length in bar)
                pieces = " + ".join(f"{name} ({length:g} m)" for name, length in bar)
                report.append(f"  {i}. {pieces}  | sobra {s.stock_length - used:.3f} m")

        report.append("\n" + "=" * 60)
        return "\n".join(report)

    def generate_csv_report(self, file_path: str) -> None:
        """Gera relatório em formato CSV"""
        self.to_dataframe().to_csv(file_path, index=False, encoding="utf-8")

    def generate_json_report(self, file_path: str) -> None:
        """Gera relatório em formato JSON"""
        with open(file_path, "w", encoding="utf-8") as f:
            f.write(self.solution.model_dump_json(indent=2))


def generate_groups_report(results: Dict[str, SolveResult]) -> str:
    """Relatório texto de vários diâmetros"""
    sections = []
    for diameter, result in results.items():
        if result.success and result.solution is not None:
            sections.append(CutPlanReporter(result.solution, f"Ø {diameter}").generate_text_report())
        else:
            sections.append(f"Ø {diameter} - sem solução: {result.error}")
    sections.append(f"Gerado em: {pd.Timestamp.now().strftime('%d/%m/%Y %H:%M:%S')}")
    return "\n\n".join(sections)


def export_result(results: Dict[str, SolveResult], output_dir: str, formats: List[str] = None) -> List[Path]:
    """
    Exporta resultados em múltiplos formatos

    Args:
        results: Resultado por diâmetro
        output_dir: Diretório de saída
        formats: Lista de formatos (txt, csv, json)

    Returns:
        Arquivos gerados
    """
    if formats is None:
        formats = ["txt", "csv", "json"]

    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    written = []

    if "txt" in formats:
        path = out / "plano_de_corte.txt"
        path.write_text(generate_groups_report(results), encoding="utf-8")
        written.append(path)

    for diameter, result in results.items():
        if not result.success or result.solution is None:
            continue
        reporter = CutPlanReporter(result.solution, diameter)
        slug = "".join(c if c.isalnum() else "_" for c in diameter)
        if "csv" in formats:
            path = out / f"plano_{slug}.csv"
            reporter.generate_csv_report(str(path))
            written.append(path)
        if "json" in formats:
            path = out / f"plano_{slug}.json"
            reporter.generate_json_report(str(path))
            written.append(path)

    logger.info("Relatórios exportados para: %s", output_dir)
    return written
