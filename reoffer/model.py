# reoffer/model.py
import math
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np


class DatasetError(ValueError):
    """Datos de entrada que violan algún invariante del dataset."""


@dataclass(frozen=True)
class Discipline:
    code: str
    name: str
    curriculum_position: int = 0
    failed_student_count: int = 0   # derivado al construir el Dataset

    @property
    def semester(self) -> int:
        # 5 disciplinas por semestre en la malla; 1 si la posición es desconocida
        if self.curriculum_position <= 0:
            return 1
        return math.ceil(self.curriculum_position / 5)


@dataclass(frozen=True)
class Student:
    id: str
    name: str
    failed_disciplines: Tuple[str, ...]
    capacity_per_term: int = 5
    campus: str = "unknown"
    entry_term: Optional[str] = None

    def __post_init__(self):
        # orden canónico: primera aparición, sin duplicados
        unique = tuple(dict.fromkeys(self.failed_disciplines))
        object.__setattr__(self, "failed_disciplines", unique)

    @property
    def total_failures(self) -> int:
        return len(self.failed_disciplines)


@dataclass(frozen=True)
class Dataset:
    disciplines: Tuple[Discipline, ...]
    students: Tuple[Student, ...]
    # incidencia[alumno, disciplina] = 1 si el alumno reprobó la disciplina
    incidence: np.ndarray = field(repr=False, compare=False)
    capacities: np.ndarray = field(repr=False, compare=False)


def ensure_not_empty(dataset: Optional[Dataset]) -> Dataset:
    if dataset is None or not dataset.disciplines or not dataset.students:
        raise DatasetError("Datos inválidos: disciplinas y alumnos son obligatorios")
    return dataset


def build_dataset(
    disciplines: Iterable[Discipline],
    students: Iterable[Student],
) -> Dataset:
    """
    Construye el Dataset inmutable a partir de los registros de la ingesta.

    - Deriva ``failed_student_count`` de cada disciplina.
    - Descarta alumnos sin reprobaciones.
    - Ordena disciplinas (reprobados desc, posición en la malla asc) y
      alumnos (total de reprobaciones desc).
    Lanza DatasetError si un invariante no se cumple.
    """
    disc_list = list(disciplines)
    seen: Dict[str, Discipline] = {}
    for d in disc_list:
        if d.code in seen:
            raise DatasetError(f"Código de disciplina duplicado: {d.code}")
        seen[d.code] = d

    active: List[Student] = []
    counts: Dict[str, int] = {code: 0 for code in seen}
    for s in students:
        if s.capacity_per_term < 1:
            raise DatasetError(
                f"Alumno {s.id}: capacity_per_term debe ser >= 1 (recibido {s.capacity_per_term})"
            )
        for code in s.failed_disciplines:
            if code not in seen:
                raise DatasetError(f"Alumno {s.id} referencia disciplina inexistente: {code}")
            counts[code] += 1
        if s.total_failures > 0:
            active.append(s)

    ordered_disc = sorted(
        (replace(d, failed_student_count=counts[d.code]) for d in disc_list),
        key=lambda d: (-d.failed_student_count, d.curriculum_position),
    )
    ordered_students = sorted(active, key=lambda s: -s.total_failures)

    col = {d.code: j for j, d in enumerate(ordered_disc)}
    incidence = np.zeros((len(ordered_students), len(ordered_disc)), dtype=np.int32)
    for i, s in enumerate(ordered_students):
        for code in s.failed_disciplines:
            incidence[i, col[code]] = 1
    capacities = np.array([s.capacity_per_term for s in ordered_students], dtype=np.int32)
    incidence.setflags(write=False)
    capacities.setflags(write=False)

    return Dataset(
        disciplines=tuple(ordered_disc),
        students=tuple(ordered_students),
        incidence=incidence,
        capacities=capacities,
    )
