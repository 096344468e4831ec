"""
Servidor FastAPI principal para o BarCut
"""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
import tempfile
from pathlib import Path

from barcut import CutPlanner, COMMERCIAL_STOCK_LENGTHS, __version__
from barcut.models import (
    GroupSolveRequest, GroupSolveResult, SolveRequest, SolveResult, SolverConfig,
)
from barcut.utils import CutPlanReporter, generate_groups_report

# Configuração do FastAPI
app = FastAPI(
    title="BarCut API",
    description="API para otimização de corte de varilhas em barras",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configuração de CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Instância global do planejador (sem estado mutável entre requisições)
cut_planner = CutPlanner()


@app.get("/")
async def root():
    """Página inicial da API"""
    return {
        "message": "BarCut API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


@app.get("/health")
async def health_check():
    """Verificação de saúde da API"""
    return {
        "status": "healthy",
        "service": "BarCut API",
        "version": __version__
    }


@app.get("/config/defaults")
async def get_defaults():
    """Parâmetros padrão do solver e comprimentos comerciais"""
    return {
        "config": SolverConfig().model_dump(),
        "stock_lengths": list(COMMERCIAL_STOCK_LENGTHS),
        "strategies": ["exact", "greedy_cover", "per_piece"],
    }


@app.post("/solve", response_model=SolveResult)
def solve(request: SolveRequest):
    """
    Otimização de um grupo de peças

    Args:
        request: Peças, comprimento da barra e perda por corte

    Returns:
        Resultado da otimização em formato JSON
    """
    result = cut_planner.optimize(request)

    if not result.success:
        raise HTTPException(
            status_code=422,
            detail={
                "error": result.error,
                "error_type": result.error_type,
                "offending_items": result.offending_items,
            }
        )

    return result


@app.post("/solve/groups", response_model=GroupSolveResult)
def solve_groups(request: GroupSolveRequest):
    """
    Otimização por diâmetro; cada grupo é independente

    Grupos com erro aparecem com success=False sem afetar os demais.
    """
    return cut_planner.optimize_groups(request)


@app.post("/report/generate")
def generate_report(result: GroupSolveResult, format: str = "txt"):
    """
    Gera relatórios em diferentes formatos

    Args:
        result: Resultado por diâmetro
        format: Formato do relatório (txt, csv, json, all)

    Returns:
        Relatório no formato solicitado
    """
    formats = ["txt", "csv", "json"] if format == "all" else [format]
    unknown = [f for f in formats if f not in ("txt", "csv", "json")]
    if unknown:
        raise HTTPException(status_code=400, detail=f"Formato não suportado: {', '.join(unknown)}")

    results = {}

    if "txt" in formats:
        results["txt"] = generate_groups_report(result.groups)

    if "json" in formats:
        results["json"] = {
            diameter: group.solution.model_dump(mode="json")
            for diameter, group in result.groups.items()
            if group.success and group.solution is not None
        }

    if "csv" in formats:
        csv_data = {}
        with tempfile.TemporaryDirectory() as temp_dir:
            for diameter, group in result.groups.items():
                if not group.success or group.solution is None:
                    continue
                path = Path(temp_dir) / "report.csv"
                CutPlanReporter(group.solution, diameter).generate_csv_report(str(path))
                csv_data[diameter] = path.read_text(encoding="utf-8")
        results["csv"] = csv_data

    return {
        "formats_generated": formats,
        "results": results
    }


@app.get("/examples")
async def get_example():
    """Retorna exemplo de dados para otimização agrupada"""
    return {
        "stock_length": 12.0,
        "kerf": 0.0,
        "pieces": [
            {"diameter": "1/2", "label": "Zapata", "length": 2.4, "quantity": 8},
            {"diameter": "1/2", "label": "Columna", "length": 3.1, "quantity": 6},
            {"diameter": "3/8", "label": "Estribo", "length": "1 1/4", "quantity": 20},
            {"diameter": "3/8", "label": "", "length": 0.9, "quantity": 12}
        ]
    }


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
