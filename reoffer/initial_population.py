# reoffer/initial_population.py
from typing import List

import numpy as np

from .encoding import Selection, empty_selection


def build_random_individual(
    n_disciplines: int,
    max_selected: int,
    rng: np.random.Generator,
) -> Selection:
    # k ~ U{0..max_selected}; k índices distintos vía barajado + prefijo
    k = int(rng.integers(0, max_selected + 1))
    ind = empty_selection(n_disciplines)
    order = rng.permutation(n_disciplines)
    ind[order[:k]] = 1
    return ind


def build_initial_population(
    n_disciplines: int,
    max_selected: int,
    pop_size: int,
    rng: np.random.Generator,
) -> List[Selection]:
    return [build_random_individual(n_disciplines, max_selected, rng) for _ in range(pop_size)]
