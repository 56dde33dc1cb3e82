import argparse
import logging
from dataclasses import asdict
from pathlib import Path

import pandas as pd

from reoffer.baselines import ComparativeBaselines, ComparisonReport
from reoffer.config import load_config
from reoffer.data_loader import constant_capacity, load_dataset, remaining_terms_capacity
from reoffer.encoding import to_bit_string
from reoffer.ga import GAResult, GeneticSolver
from reoffer.model import Dataset
from reoffer.statistics import summarize_dataset


def print_chromosome_representation(result: GAResult):
    print("\n" + "=" * 80)
    print("CROMOSOMA - un bit por disciplina (orden: más reprobados primero)")
    print("=" * 80)
    print(to_bit_string(result.best_selection))
    for d in result.selected_disciplines:
        print(f"{d.code:<12} sem {d.semester:<3} reprobados={d.failed_student_count:<4} {d.name}")
    print("=" * 80 + "\n")


def print_comparison(report: ComparisonReport):
    print(f"{'Estrategia':<22}{'Alumnos':>10}{'% Cobertura':>14}{'Plazas':>10}{'Fitness':>12}")
    for row in report.as_rows():
        print(
            f"{row['strategy']:<22}{row['students_helped']:>10.1f}{row['coverage_percent']:>13.1f}%"
            f"{row['slots_attended']:>10.1f}{row['fitness']:>12.1f}"
        )


def export_outputs(result: GAResult, report: ComparisonReport, dataset: Dataset, out_dir: Path):
    out_dir.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(
        [
            {
                "codigo": d.code,
                "nombre": d.name,
                "semestre": d.semester,
                "reprobados": d.failed_student_count,
            }
            for d in result.selected_disciplines
        ]
    ).to_csv(out_dir / "selected.csv", index=False)
    pd.DataFrame([asdict(h) for h in result.history]).to_csv(out_dir / "history.csv", index=False)
    pd.DataFrame(report.as_rows()).to_csv(out_dir / "comparison.csv", index=False)
    pd.DataFrame([asdict(d) for d in result.best_evaluation.student_details(dataset)]).to_csv(
        out_dir / "students.csv", index=False
    )
    ev = result.best_evaluation
    eff = result.statistics.efficiency
    metrics = {
        "fitness": ev.fitness,
        "benefited_students": ev.benefited_students,
        "satisfied_slots": ev.total_satisfied_slots,
        "selected_disciplines": ev.num_selected_disciplines,
        "percent_students_benefited": eff.percent_students_benefited,
        "mean_slots_per_benefited_student": eff.mean_slots_per_benefited_student,
        "mean_students_per_discipline": eff.mean_students_per_discipline,
        "time_sec": result.elapsed_seconds,
        "generations_ran": len(result.history),
    }
    pd.DataFrame([metrics]).to_csv(out_dir / "metrics.csv", index=False)


def main():
    parser = argparse.ArgumentParser(description="Optimización de reoferta de disciplinas con AG")
    parser.add_argument("--config", default="config.yaml", help="Ruta al archivo de configuración")
    parser.add_argument("--data", default="data/pendencias.csv", help="CSV o XLSX con las reprobaciones por alumno")
    parser.add_argument("--out_dir", default="outputs", help="Directorio de salida")
    parser.add_argument(
        "--current_term",
        default=None,
        help="Semestre actual (ej. 2026.1); activa la capacidad según semestres restantes",
    )
    parser.add_argument("--verbose", action="store_true", help="Log detallado del AG")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    cfg = load_config(args.config)
    if args.current_term:
        policy = remaining_terms_capacity(args.current_term, fallback=cfg.default_capacity)
    else:
        policy = constant_capacity(cfg.default_capacity)

    print("Cargando datos...")
    dataset = load_dataset(args.data, cfg, policy)
    summary = summarize_dataset(dataset)
    print(
        f"Alumnos: {summary['total_students']} | Disciplinas: {summary['total_disciplines']} | "
        f"Media de reprobaciones: {summary['mean_failures_per_student']}"
    )

    print(f"Generaciones: {cfg.max_generations} | Población: {cfg.population_size}")
    result = GeneticSolver(dataset, cfg).run()
    ev = result.best_evaluation

    print("\n--- MEJOR SOLUCIÓN ---")
    print(
        f"Fitness: {ev.fitness:.1f} | Alumnos: {ev.benefited_students}/{len(dataset.students)} | "
        f"Plazas: {ev.total_satisfied_slots} | Tiempo: {result.elapsed_seconds:.2f}s"
    )
    print_chromosome_representation(result)

    report = ComparativeBaselines(dataset, cfg).compare(result)
    print_comparison(report)

    out_dir = Path(args.out_dir)
    export_outputs(result, report, dataset, out_dir)
    print(f"Se guardaron resultados en {out_dir}/")


if __name__ == "__main__":
    main()
