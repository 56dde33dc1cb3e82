"""
Codifica y decodifica el cromosoma binario de reoferta:
bit i = 1 si la disciplina ``dataset.disciplines[i]`` se reoferta.
"""
from typing import Iterable, List, Sequence

import numpy as np

from .model import Dataset, DatasetError, Discipline

Selection = np.ndarray


def empty_selection(n_disciplines: int) -> Selection:
    return np.zeros(n_disciplines, dtype=np.int8)


def as_selection(bits: Sequence[int], n_disciplines: int) -> Selection:
    """Normaliza listas/arrays 0-1 a un vector int8, validando el tamaño."""
    arr = np.asarray(bits, dtype=np.int8).ravel()
    if arr.shape[0] != n_disciplines:
        raise ValueError(
            f"El cromosoma debe tener {n_disciplines} bits (recibido {arr.shape[0]})"
        )
    if np.any((arr != 0) & (arr != 1)):
        raise ValueError("El cromosoma solo admite bits 0/1")
    return arr


def selection_from_codes(codes: Iterable[str], dataset: Dataset) -> Selection:
    sel = empty_selection(len(dataset.disciplines))
    col = {d.code: i for i, d in enumerate(dataset.disciplines)}
    for code in codes:
        if code not in col:
            raise DatasetError(f"Disciplina desconocida: {code}")
        sel[col[code]] = 1
    return sel


def selection_to_codes(selection: Selection, dataset: Dataset) -> List[str]:
    return [dataset.disciplines[i].code for i in np.flatnonzero(selection)]


def selected_disciplines(selection: Selection, dataset: Dataset) -> List[Discipline]:
    return [dataset.disciplines[i] for i in np.flatnonzero(selection)]


def to_bit_string(selection: Selection) -> str:
    return "".join("1" if b else "0" for b in selection)


def from_bit_string(bits: str, n_disciplines: int) -> Selection:
    clean = bits.replace(" ", "")
    if len(clean) != n_disciplines or set(clean) - {"0", "1"}:
        raise ValueError(f"El cromosoma debe tener {n_disciplines} bits 0/1")
    return np.array([int(ch) for ch in clean], dtype=np.int8)
