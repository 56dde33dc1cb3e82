# reoffer/data_loader.py
"""
Ingesta de la planilla de pendencias (una fila por alumno, una columna por
disciplina marcada con "X" cuando hubo reprobación) hacia un Dataset.
"""
import logging
import math
import re
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pandas as pd

from .config import OptimizerConfig
from .model import Dataset, Discipline, Student, build_dataset

logger = logging.getLogger(__name__)

# (total_reprobaciones, periodo_ingreso) -> capacidad por semestre
CapacityPolicy = Callable[[int, Optional[str]], int]

ID_COLUMNS = ["matricula", "matrícula", "student_id", "id"]
NAME_COLUMNS = ["nome", "nombre", "name", "discente"]
CAMPUS_COLUMNS = ["polo", "campus"]
ENTRY_COLUMNS = ["ingresso", "ingreso", "ano ingresso", "entry_term", "inicio"]

# hojas candidatas a contener las pendencias (búsqueda por substring, sin mayúsculas)
PENDING_SHEET_NAMES = ["pendencias", "pendências", "reprovacoes", "reprovações", "reprobaciones"]


class DataLoadError(ValueError):
    pass


def constant_capacity(value: int = 5) -> CapacityPolicy:
    def policy(total_failures: int, entry_term: Optional[str]) -> int:
        return value
    return policy


def term_index(term: str) -> int:
    """'2017.2' -> número absoluto de semestres (año * 2 + 0/1)."""
    year, _, half = str(term).strip().partition(".")
    return int(year) * 2 + (1 if half.strip() == "2" else 0)


def remaining_terms_capacity(
    current_term: str,
    deadline_terms: int = 14,
    fallback: int = 5,
) -> CapacityPolicy:
    """
    Capacidad según los semestres que le quedan al alumno antes del plazo
    máximo: ceil(reprobaciones / semestres_restantes), con techo 8 en la recta
    final (<= 2 semestres), 7 con <= 4 semestres y 6 en otro caso.
    Sin periodo de ingreso se usa ``fallback``.
    """
    current = term_index(current_term)

    def policy(total_failures: int, entry_term: Optional[str]) -> int:
        if not entry_term:
            return fallback
        try:
            elapsed = current - term_index(entry_term)
        except ValueError:
            logger.warning("Periodo de ingreso inválido %r; usando capacidad %d", entry_term, fallback)
            return fallback
        remaining = max(1, deadline_terms - elapsed)
        if remaining <= 2:
            ceiling = 8
        elif remaining <= 4:
            ceiling = 7
        else:
            ceiling = 6
        return max(1, min(math.ceil(total_failures / remaining), ceiling))

    return policy


def _find_column(columns: List[str], candidates: List[str], fuzzy: bool = False) -> Optional[str]:
    lowered = {c.strip().lower(): c for c in columns}
    for cand in candidates:
        if cand in lowered:
            return lowered[cand]
    if fuzzy:
        for cand in candidates:
            for low, original in lowered.items():
                if cand in low:
                    return original
    return None


def _cell(row: pd.Series, col: Optional[str]) -> str:
    if col is None:
        return ""
    val = row[col]
    if pd.isna(val):
        return ""
    return str(val).strip()


def _discipline_columns(columns: List[str], pattern: str) -> Dict[str, Discipline]:
    regex = re.compile(pattern)
    out: Dict[str, Discipline] = {}
    for col in columns:
        m = regex.search(col)
        if not m:
            continue
        code = m.group(0)
        parts = col.split(" - ", 1)
        name = parts[1].strip() if len(parts) > 1 else col.strip()
        digits = re.search(r"\d+", code)
        position = int(digits.group(0)) if digits else 0
        out[col] = Discipline(code=code, name=name, curriculum_position=position)
    return out


def build_dataset_from_frame(
    df: pd.DataFrame,
    cfg: Optional[OptimizerConfig] = None,
    capacity_policy: Optional[CapacityPolicy] = None,
    entry_terms: Optional[Dict[str, str]] = None,
) -> Dataset:
    """
    ``entry_terms`` (matrícula -> periodo de ingreso) completa el ingreso de
    las filas que no lo traen.
    """
    cfg = cfg or OptimizerConfig()
    entry_terms = entry_terms or {}
    policy = capacity_policy or constant_capacity(cfg.default_capacity)
    if df.empty:
        raise DataLoadError("Planilla vacía o sin datos válidos")

    columns = [str(c) for c in df.columns]
    df = df.set_axis(columns, axis=1)
    id_col = _find_column(columns, ID_COLUMNS)
    name_col = _find_column(columns, NAME_COLUMNS)
    if id_col is None or name_col is None:
        raise DataLoadError("La planilla debe tener columnas de matrícula y nombre")
    campus_col = _find_column(columns, CAMPUS_COLUMNS)
    entry_col = _find_column(columns, ENTRY_COLUMNS, fuzzy=True)

    disc_cols = _discipline_columns(columns, cfg.discipline_pattern)
    marks = set(cfg.failure_marks)

    students: List[Student] = []
    used: Dict[str, Discipline] = {}
    for idx, row in df.iterrows():
        sid = _cell(row, id_col)
        name = _cell(row, name_col)
        if not sid or not name:
            logger.warning("Fila %s: datos incompletos (matrícula o nombre faltante)", idx)
            continue

        failed = []
        for col, disc in disc_cols.items():
            if _cell(row, col) in marks:
                failed.append(disc.code)
                used.setdefault(disc.code, disc)
        if not failed:
            continue

        entry = _cell(row, entry_col) or entry_terms.get(sid)
        students.append(
            Student(
                id=sid,
                name=name,
                failed_disciplines=tuple(failed),
                capacity_per_term=policy(len(set(failed)), entry),
                campus=_cell(row, campus_col) or "unknown",
                entry_term=entry,
            )
        )

    logger.info("Ingesta: %d alumnos con reprobaciones, %d disciplinas", len(students), len(used))
    return build_dataset(used.values(), students)


def find_pending_sheet(sheet_names: List[str]) -> str:
    """Hoja de pendencias por nombre; si no hay coincidencia, la primera."""
    for name in sheet_names:
        low = name.strip().lower()
        if any(cand in low for cand in PENDING_SHEET_NAMES):
            return name
    return sheet_names[0]


def entry_term_map(df: pd.DataFrame) -> Dict[str, str]:
    """Matrícula -> periodo de ingreso, leído de la hoja de metadatos."""
    columns = [str(c) for c in df.columns]
    id_col = _find_column(columns, ID_COLUMNS)
    entry_col = _find_column(columns, ENTRY_COLUMNS, fuzzy=True)
    if id_col is None or entry_col is None:
        return {}
    df = df.set_axis(columns, axis=1)
    out: Dict[str, str] = {}
    for _, row in df.iterrows():
        sid = _cell(row, id_col)
        entry = _cell(row, entry_col)
        if sid and entry:
            out[sid] = entry
    return out


def load_workbook(
    path: str,
    cfg: Optional[OptimizerConfig] = None,
    capacity_policy: Optional[CapacityPolicy] = None,
) -> Dataset:
    sheets = pd.read_excel(path, sheet_name=None, dtype=str)
    if not sheets:
        raise DataLoadError(f"Planilla sin hojas: {path}")
    names = list(sheets)
    pending = find_pending_sheet(names)
    logger.info("Usando la hoja %r para las pendencias", pending)
    entries = entry_term_map(sheets[names[0]])
    return build_dataset_from_frame(sheets[pending], cfg, capacity_policy, entry_terms=entries)


def load_dataset(
    path: str,
    cfg: Optional[OptimizerConfig] = None,
    capacity_policy: Optional[CapacityPolicy] = None,
) -> Dataset:
    if Path(path).suffix.lower() in (".xlsx", ".xlsm", ".xls"):
        return load_workbook(path, cfg, capacity_policy)
    df = pd.read_csv(path, dtype=str)
    return build_dataset_from_frame(df, cfg, capacity_policy)
