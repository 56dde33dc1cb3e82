from typing import List, Sequence, Tuple

import numpy as np

from .encoding import Selection


def tournament_selection(
    population: Sequence[Selection],
    fitnesses: Sequence[float],
    rng: np.random.Generator,
    tournament_size: int = 3,
) -> Selection:
    """
    Torneo con reposición: el primer sorteado es el mejor inicial y solo se
    reemplaza por una mejora estricta. Devuelve una copia del ganador.
    """
    best = int(rng.integers(0, len(population)))
    for _ in range(1, tournament_size):
        idx = int(rng.integers(0, len(population)))
        if fitnesses[idx] > fitnesses[best]:
            best = idx
    return population[best].copy()


def single_point_crossover(
    p1: Selection,
    p2: Selection,
    crossover_rate: float,
    rng: np.random.Generator,
) -> Tuple[Selection, Selection]:
    """Cruce de un punto; con prob. 1 - crossover_rate los padres pasan intactos."""
    if rng.random() > crossover_rate:
        return p1.copy(), p2.copy()
    cut = int(rng.integers(0, len(p1))) if len(p1) > 0 else 0
    c1 = np.concatenate((p1[:cut], p2[cut:]))
    c2 = np.concatenate((p2[:cut], p1[cut:]))
    return c1, c2


def bit_flip_mutation(ind: Selection, mutation_rate: float, rng: np.random.Generator) -> Selection:
    """Mutación por inversión de bits, independiente por gen."""
    out = ind.copy()
    mask = rng.random(len(out)) < mutation_rate
    out[mask] ^= 1
    return out


def elite_indices(fitnesses: Sequence[float], n_elites: int) -> List[int]:
    # orden descendente estable: en empates gana el de menor índice
    order = np.argsort(-np.asarray(fitnesses, dtype=float), kind="stable")
    return [int(i) for i in order[:n_elites]]
