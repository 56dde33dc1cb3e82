"""
Estadísticas derivadas de una selección evaluada: disciplinas por semestre,
impacto por perfil de reprobación y razones de eficiencia.
"""
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .evaluation import EvaluationResult
from .model import Dataset, Discipline, Student

# (etiqueta, mínimo, máximo inclusive); None = sin límite superior
FAILURE_BRACKETS: List[Tuple[str, int, Optional[int]]] = [
    ("1-5", 1, 5),
    ("6-10", 6, 10),
    ("11-15", 11, 15),
    ("16-20", 16, 20),
    ("20+", 21, None),
]


@dataclass
class BracketImpact:
    total: int = 0
    benefited: int = 0


@dataclass
class Efficiency:
    percent_students_benefited: float
    mean_slots_per_benefited_student: float
    mean_students_per_discipline: float


@dataclass
class Statistics:
    disciplines_per_semester: Dict[int, int]
    impact_by_failures: Dict[str, BracketImpact]
    efficiency: Efficiency
    summary: Dict[str, int] = field(default_factory=dict)


def failure_bracket(total_failures: int) -> str:
    for label, _low, high in FAILURE_BRACKETS:
        if high is None or total_failures <= high:
            return label
    return FAILURE_BRACKETS[-1][0]


def _ratio(num: float, den: float) -> float:
    # 0.0 como centinela cuando el denominador es cero
    if den == 0:
        return 0.0
    return round(num / den, 2)


def compute_statistics(evaluation: EvaluationResult, dataset: Dataset) -> Statistics:
    by_code = {d.code: d for d in dataset.disciplines}

    per_semester: Counter = Counter()
    for code in evaluation.selected_discipline_codes:
        per_semester[by_code[code].semester] += 1

    impact = {label: BracketImpact() for label, _, _ in FAILURE_BRACKETS}
    for student, matched in zip(dataset.students, evaluation.per_student_matched):
        bucket = impact[failure_bracket(student.total_failures)]
        bucket.total += 1
        if matched > 0:
            bucket.benefited += 1

    n_students = len(dataset.students)
    benefited = evaluation.benefited_students
    n_selected = evaluation.num_selected_disciplines
    efficiency = Efficiency(
        percent_students_benefited=_ratio(benefited * 100, n_students),
        mean_slots_per_benefited_student=_ratio(evaluation.total_satisfied_slots, benefited),
        mean_students_per_discipline=_ratio(benefited, n_selected),
    )

    return Statistics(
        disciplines_per_semester=dict(sorted(per_semester.items())),
        impact_by_failures=impact,
        efficiency=efficiency,
        summary={
            "total_students": n_students,
            "benefited_students": benefited,
            "selected_disciplines": n_selected,
            "satisfied_slots": evaluation.total_satisfied_slots,
        },
    )


def summarize_dataset(dataset: Dataset) -> Dict[str, Any]:
    """Resumen descriptivo del dataset cargado (antes de optimizar)."""
    students = dataset.students
    most_failed: Optional[Discipline] = dataset.disciplines[0] if dataset.disciplines else None
    worst_student: Optional[Student] = students[0] if students else None
    total_failures = sum(s.total_failures for s in students)
    capacity_dist = Counter(s.capacity_per_term for s in students)
    return {
        "total_disciplines": len(dataset.disciplines),
        "total_students": len(students),
        "disciplines_with_failures": sum(1 for d in dataset.disciplines if d.failed_student_count > 0),
        "mean_failures_per_student": _ratio(total_failures, len(students)),
        "most_failed_discipline": most_failed.code if most_failed else None,
        "student_with_most_failures": worst_student.id if worst_student else None,
        "capacity_distribution": dict(sorted(capacity_dist.items())),
    }
