#!/usr/bin/env python3
"""
Script principal para executar o sistema BarCut
"""

import sys
import os
import argparse
import logging
from pathlib import Path

# Adicionar o diretório atual ao path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from barcut import CutPlanner, PieceLine, SolverConfig
from barcut.utils import export_result, generate_groups_report


def create_sample_data():
    """Cria dados de exemplo para demonstração"""
    return [
        PieceLine(diameter="1/2", label="Zapata", length=2.4, quantity=8),
        PieceLine(diameter="1/2", label="Columna", length=3.1, quantity=6),
        PieceLine(diameter="1/2", label="Viga", length=4.5, quantity=4),
        PieceLine(diameter="3/8", label="Estribo", length="1 1/4", quantity=20),
        PieceLine(diameter="3/8", label="", length=0.9, quantity=12),
    ]


def run_demo(stock_length: float, kerf: float, workers: int):
    """Executa demonstração do sistema"""

    print("BarCut - Demonstração do Sistema")
    print("=" * 60)

    pieces = create_sample_data()
    planner = CutPlanner(kerf=kerf, config=SolverConfig(max_workers=workers))

    print(f"✓ Barra de {stock_length:g} m, perda por corte de {planner.kerf:g} m")
    print(f"✓ {len(pieces)} linhas de peças carregadas")

    print("\nExecutando otimização...")
    results = planner.solve_groups(pieces, stock_length=stock_length)

    print()
    print(generate_groups_report(results))
    return results


def run_api_server():
    """Inicia o servidor da API"""

    print("Iniciando servidor da API BarCut...")

    import uvicorn

    print("✓ Servidor iniciado em http://localhost:8000")
    print("✓ Documentação da API: http://localhost:8000/docs")
    print("\nPressione Ctrl+C para parar o servidor")

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )


def run_tests():
    """Executa os testes do sistema"""

    print("Executando testes do BarCut...")

    import pytest

    start_dir = Path(__file__).parent / "tests"
    return pytest.main([str(start_dir), "-v"]) == 0


def main():
    """Função principal"""

    parser = argparse.ArgumentParser(
        description="BarCut - Otimização de Corte de Varilhas",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exemplos de uso:
  python run.py demo                    # Executa demonstração
  python run.py demo --stock 9          # Demonstração com barras de 9 m
  python run.py api                     # Inicia servidor da API
  python run.py test                    # Executa testes
  python run.py demo --export results   # Executa demo e exporta resultados
        """
    )

    parser.add_argument(
        'command',
        choices=['demo', 'api', 'test'],
        help='Comando a executar'
    )

    parser.add_argument(
        '--stock',
        type=float,
        default=12.0,
        help='Comprimento da barra em metros (padrão: 12)'
    )

    parser.add_argument(
        '--kerf',
        type=float,
        default=0.0,
        help='Perda por corte em metros (padrão: 0)'
    )

    parser.add_argument(
        '--workers',
        type=int,
        default=1,
        help='Diâmetros resolvidos em paralelo'
    )

    parser.add_argument(
        '--export',
        metavar='DIR',
        help='Diretório para exportar resultados'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Mostrar logs detalhados do solver'
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == 'demo':
            results = run_demo(args.stock, args.kerf, args.workers)

            if args.export:
                print(f"\nExportando resultados para: {args.export}")
                export_result(results, args.export)
                print("✓ Exportação concluída!")

        elif args.command == 'api':
            run_api_server()

        elif args.command == 'test':
            success = run_tests()
            sys.exit(0 if success else 1)

    except KeyboardInterrupt:
        print("\n\nSistema interrompido pelo usuário")


if __name__ == "__main__":
    main()
