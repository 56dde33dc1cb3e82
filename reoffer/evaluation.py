# reoffer/evaluation.py
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from .config import OptimizerConfig
from .encoding import Selection, as_selection, selection_to_codes
from .model import Dataset


@dataclass(frozen=True)
class StudentDetail:
    student_id: str
    name: str
    total_failures: int
    matched: int     # reprobadas que están en la selección
    satisfied: int   # matched limitado por la capacidad del alumno


@dataclass(frozen=True)
class EvaluationResult:
    fitness: float
    benefited_students: int
    total_satisfied_slots: int
    num_selected_disciplines: int
    selected_discipline_codes: Tuple[str, ...]
    penalty: float
    per_student_matched: Tuple[int, ...]
    per_student_satisfied: Tuple[int, ...]

    def student_details(self, dataset: Dataset) -> List[StudentDetail]:
        return [
            StudentDetail(
                student_id=s.id,
                name=s.name,
                total_failures=s.total_failures,
                matched=m,
                satisfied=sat,
            )
            for s, m, sat in zip(dataset.students, self.per_student_matched, self.per_student_satisfied)
        ]


def evaluate(
    selection: Selection,
    dataset: Dataset,
    cfg: OptimizerConfig,
) -> EvaluationResult:
    """
    Fitness de una selección de disciplinas.

    fitness = beneficiados * weight_students + plazas * weight_slots - penalty
    donde penalty = max(0, seleccionadas - max_disciplines) * penalty_rate.
    Es la única medida de calidad: la usan el AG y las dos baselines.
    """
    sel = as_selection(selection, len(dataset.disciplines))

    matched = dataset.incidence @ sel.astype(np.int32)
    satisfied = np.minimum(matched, dataset.capacities)

    benefited = int(np.count_nonzero(satisfied))
    slots = int(satisfied.sum())

    num_selected = int(sel.sum())
    excess = max(0, num_selected - cfg.max_disciplines)
    penalty = excess * cfg.penalty_rate

    fitness = benefited * cfg.weight_students + slots * cfg.weight_slots - penalty

    return EvaluationResult(
        fitness=fitness,
        benefited_students=benefited,
        total_satisfied_slots=slots,
        num_selected_disciplines=num_selected,
        selected_discipline_codes=tuple(selection_to_codes(sel, dataset)),
        penalty=penalty,
        per_student_matched=tuple(matched.tolist()),
        per_student_satisfied=tuple(satisfied.tolist()),
    )
