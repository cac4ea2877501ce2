"""
Script de ejemplo: ejecuta un escenario de tráfico desde un archivo JSON.

Uso:
    python examples/run_simulation.py data/scenarios/basic_road.json
    python examples/run_simulation.py data/scenarios/bus_line.json --quiet --plot Bulevar
    python examples/run_simulation.py --compare
"""

import argparse
import sys
from pathlib import Path

# Agregar el proyecto al path
sys.path.insert(0, str(Path(__file__).parent.parent))

from traffic_microsim.simulator import ScenarioValidationError, StateReporter, TrafficScenario
from traffic_microsim.utils.config import (
    BASIC_SCENARIO_FILE,
    BUS_LINE_SCENARIO_FILE,
    INTERSECTION_SCENARIO_FILE,
    SimulatorConfig,
    setup_logging,
)
from traffic_microsim.utils.metrics import MetricsCalculator


def run_scenario(scenario_file, seed=None, max_steps=None, quiet=False, plot_road=None,
                 output=None):
    """
    Carga y ejecuta un escenario.

    Args:
        scenario_file: Ruta al escenario JSON
        seed: Semilla (default: la del escenario)
        max_steps: Presupuesto de pasos (default: el del escenario)
        quiet: Si True, no imprime cada paso
        plot_road: Vía para graficar trayectorias (opcional)
        output: Archivo PNG para guardar el gráfico

    Returns:
        dict: Métricas de la simulación
    """
    scenario = TrafficScenario(str(scenario_file))

    print("\n" + "="*70)
    print(f"ESCENARIO: {scenario.name}")
    print("="*70)
    if scenario.description:
        print(scenario.description)

    simulator = scenario.build_simulator(seed)
    reporter = StateReporter(verbose=not quiet, keep_history=plot_road is not None)

    budget = max_steps if max_steps is not None else scenario.max_steps
    if budget is None:
        budget = SimulatorConfig.DEFAULT_MAX_STEPS

    metrics = simulator.run(max_steps=budget, reporter=reporter, verbose=True)

    if plot_road is not None:
        fig = reporter.plot_trajectories(plot_road)
        target = output or f"trayectorias_{plot_road}.png"
        fig.savefig(target, dpi=120)
        print(f"\n✓ Gráfico guardado en {target}")

    return metrics


def compare_scenarios(seed=None):
    """Ejecuta los escenarios de ejemplo y compara sus métricas."""
    print("\n" + "="*80)
    print("COMPARACIÓN DE ESCENARIOS")
    print("="*80)

    scenario_files = [
        (BASIC_SCENARIO_FILE, "Vía simple"),
        (INTERSECTION_SCENARIO_FILE, "Intersección"),
        (BUS_LINE_SCENARIO_FILE, "Línea de bus")
    ]

    results = {}
    for scenario_file, label in scenario_files:
        results[label] = run_scenario(scenario_file, seed=seed, quiet=True)

    df = MetricsCalculator.create_summary_dataframe(results)

    print("\n" + "="*80)
    print("RESUMEN")
    print("="*80)
    print(df.to_string(index=False))

    return df


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Microsimulación de tráfico por pasos discretos"
    )
    parser.add_argument("scenario", nargs="?", default=str(BASIC_SCENARIO_FILE),
                        help="Archivo JSON del escenario")
    parser.add_argument("--seed", type=int, default=None,
                        help="Semilla del generador aleatorio")
    parser.add_argument("--max-steps", type=int, default=None,
                        help="Cantidad máxima de pasos")
    parser.add_argument("--quiet", action="store_true",
                        help="No imprimir el estado en cada paso")
    parser.add_argument("--plot", metavar="VIA", default=None,
                        help="Graficar trayectorias de la vía indicada")
    parser.add_argument("--output", default=None,
                        help="Archivo PNG para el gráfico")
    parser.add_argument("--compare", action="store_true",
                        help="Ejecutar y comparar los escenarios de ejemplo")
    parser.add_argument("--log-level", default=None,
                        help="Nivel de logging (DEBUG, INFO, WARNING)")
    return parser


def main(argv=None) -> int:
    """Función principal."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        if args.compare:
            compare_scenarios(args.seed)
        else:
            run_scenario(args.scenario, seed=args.seed, max_steps=args.max_steps,
                         quiet=args.quiet, plot_road=args.plot, output=args.output)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ScenarioValidationError as e:
        print(str(e), file=sys.stderr)
        return 2

    print("\n✓ Simulación finalizada")
    return 0


if __name__ == "__main__":
    sys.exit(main())
