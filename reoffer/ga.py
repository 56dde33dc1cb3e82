import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np

from .config import OptimizerConfig
from .encoding import Selection, selected_disciplines
from .evaluation import EvaluationResult, evaluate
from .initial_population import build_initial_population
from .model import Dataset, Discipline, ensure_not_empty
from .operators import bit_flip_mutation, elite_indices, single_point_crossover, tournament_selection
from .statistics import Statistics, compute_statistics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationRecord:
    generation: int
    best_fitness: float
    mean_fitness: float
    benefited_students: int
    num_selected_disciplines: int


@dataclass
class GAResult:
    best_selection: Selection
    best_evaluation: EvaluationResult
    selected_disciplines: List[Discipline]
    statistics: Statistics
    history: List[GenerationRecord]
    parameters_used: Dict[str, Any]
    elapsed_seconds: float = 0.0


class GeneticSolver:
    def __init__(
        self,
        dataset: Dataset,
        cfg: Optional[OptimizerConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.dataset = dataset
        self.cfg = cfg or OptimizerConfig()
        self._injected_rng = rng
        self.rng = self._fresh_rng()

    def _fresh_rng(self) -> np.random.Generator:
        # sin generador inyectado, cada run() arranca de la semilla configurada
        if self._injected_rng is not None:
            return self._injected_rng
        return np.random.default_rng(self.cfg.seed)

    @property
    def n_elites(self) -> int:
        return int(math.floor(self.cfg.population_size * self.cfg.elite_fraction))

    def _next_generation(
        self,
        population: List[Selection],
        fitnesses: List[float],
    ) -> List[Selection]:
        cfg = self.cfg
        new_pop: List[Selection] = []

        # Elitismo
        for i in elite_indices(fitnesses, self.n_elites):
            new_pop.append(population[i].copy())

        while len(new_pop) < cfg.population_size:
            p1 = tournament_selection(population, fitnesses, self.rng, cfg.tournament_size)
            p2 = tournament_selection(population, fitnesses, self.rng, cfg.tournament_size)
            c1, c2 = single_point_crossover(p1, p2, cfg.crossover_rate, self.rng)
            c1 = bit_flip_mutation(c1, cfg.mutation_rate, self.rng)
            c2 = bit_flip_mutation(c2, cfg.mutation_rate, self.rng)
            new_pop.append(c1)
            if len(new_pop) < cfg.population_size:
                new_pop.append(c2)

        return new_pop

    def run(self) -> GAResult:
        dataset = ensure_not_empty(self.dataset)
        cfg = self.cfg
        n_disc = len(dataset.disciplines)
        logger.info(
            "Iniciando AG con %d alumnos y %d disciplinas", len(dataset.students), n_disc
        )

        self.rng = self._fresh_rng()
        start = time.perf_counter()
        population = build_initial_population(n_disc, cfg.max_disciplines, cfg.population_size, self.rng)
        history: List[GenerationRecord] = []
        best_selection: Optional[Selection] = None
        best_eval: Optional[EvaluationResult] = None

        for gen in range(cfg.max_generations):
            evaluations = [evaluate(ind, dataset, cfg) for ind in population]
            fitnesses = [e.fitness for e in evaluations]

            gen_best = int(np.argmax(fitnesses))
            if best_eval is None or fitnesses[gen_best] > best_eval.fitness:
                best_selection = population[gen_best].copy()
                best_eval = evaluations[gen_best]

            history.append(
                GenerationRecord(
                    generation=gen + 1,
                    best_fitness=best_eval.fitness,
                    mean_fitness=float(np.mean(fitnesses)),
                    benefited_students=best_eval.benefited_students,
                    num_selected_disciplines=best_eval.num_selected_disciplines,
                )
            )

            if cfg.log_every and (gen % cfg.log_every == 0 or gen == cfg.max_generations - 1):
                logger.info(
                    "Gen %d: mejor fitness=%.2f alumnos=%d/%d",
                    gen + 1, best_eval.fitness, best_eval.benefited_students, len(dataset.students),
                )

            population = self._next_generation(population, fitnesses)

        elapsed = time.perf_counter() - start

        if best_eval is None:
            # max_generations < 1: se evalúa la población inicial para tener resultado
            evaluations = [evaluate(ind, dataset, cfg) for ind in population]
            gen_best = int(np.argmax([e.fitness for e in evaluations]))
            best_selection = population[gen_best].copy()
            best_eval = evaluations[gen_best]

        logger.info(
            "Optimización concluida: %d/%d alumnos beneficiados en %.2fs",
            best_eval.benefited_students, len(dataset.students), elapsed,
        )

        return GAResult(
            best_selection=best_selection,
            best_evaluation=best_eval,
            selected_disciplines=selected_disciplines(best_selection, dataset),
            statistics=compute_statistics(best_eval, dataset),
            history=history,
            parameters_used=cfg.parameters_used(),
            elapsed_seconds=elapsed,
        )
