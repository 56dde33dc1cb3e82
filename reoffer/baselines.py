"""
Estrategias comparativas para validar el AG.

1. Prioridad simple: reoferta las N disciplinas con más reprobados.
2. Selección aleatoria: N disciplinas al azar, repetido ``num_random_trials``
   veces, con estadísticas agregadas de las simulaciones.

Ambas usan ``evaluate`` con la misma configuración del AG, de modo que los
fitness sean comparables.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from .config import OptimizerConfig
from .encoding import selection_from_codes
from .evaluation import EvaluationResult, evaluate
from .ga import GAResult
from .model import Dataset, Discipline, ensure_not_empty

logger = logging.getLogger(__name__)


@dataclass
class BaselineResult:
    strategy: str
    description: str
    disciplines: List[Discipline]
    evaluation: EvaluationResult
    coverage_percent: float


@dataclass
class RandomTrial:
    trial: int
    disciplines: List[Discipline]
    evaluation: EvaluationResult


@dataclass
class MetricStats:
    mean: float
    min: float
    max: float
    std: float

    @classmethod
    def of(cls, values: Sequence[float]) -> "MetricStats":
        arr = np.asarray(values, dtype=float)
        if arr.size == 0:
            return cls(0.0, 0.0, 0.0, 0.0)
        # desvío estándar poblacional (ddof=0)
        return cls(float(arr.mean()), float(arr.min()), float(arr.max()), float(arr.std()))


@dataclass
class RandomBaselineResult:
    strategy: str
    description: str
    benefited_students: MetricStats
    satisfied_slots: MetricStats
    fitness: MetricStats
    best_trial: Optional[RandomTrial]
    worst_trial: Optional[RandomTrial]
    trials: List[RandomTrial] = field(default_factory=list)


@dataclass(frozen=True)
class Summary:
    students_helped: float
    coverage_percent: float
    slots_attended: float
    fitness: float


@dataclass
class ComparisonReport:
    genetic: Summary
    greedy: Summary
    random: Summary
    greedy_detail: BaselineResult
    random_detail: RandomBaselineResult

    def as_rows(self) -> List[Dict[str, Any]]:
        rows = []
        for name, s in (("genetic", self.genetic), ("greedy", self.greedy), ("random_mean", self.random)):
            rows.append(
                {
                    "strategy": name,
                    "students_helped": s.students_helped,
                    "coverage_percent": s.coverage_percent,
                    "slots_attended": s.slots_attended,
                    "fitness": s.fitness,
                }
            )
        return rows


def _coverage(benefited: float, n_students: int) -> float:
    if n_students == 0:
        return 0.0
    return round(benefited / n_students * 100, 1)


class ComparativeBaselines:
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
        if self._injected_rng is not None:
            return self._injected_rng
        return np.random.default_rng(self.cfg.seed)

    def _evaluate_disciplines(self, disciplines: Sequence[Discipline]) -> EvaluationResult:
        sel = selection_from_codes((d.code for d in disciplines), self.dataset)
        return evaluate(sel, self.dataset, self.cfg)

    def _shuffle(self, items: List[Discipline]) -> List[Discipline]:
        # Fisher-Yates
        for i in range(len(items) - 1, 0, -1):
            j = int(self.rng.integers(0, i + 1))
            items[i], items[j] = items[j], items[i]
        return items

    def greedy(self) -> BaselineResult:
        dataset = ensure_not_empty(self.dataset)
        ranked = sorted(dataset.disciplines, key=lambda d: -d.failed_student_count)
        chosen = ranked[: self.cfg.max_disciplines]
        ev = self._evaluate_disciplines(chosen)
        return BaselineResult(
            strategy="greedy",
            description=f"Las {self.cfg.max_disciplines} disciplinas con más reprobaciones",
            disciplines=chosen,
            evaluation=ev,
            coverage_percent=_coverage(ev.benefited_students, len(dataset.students)),
        )

    def randomized(self) -> RandomBaselineResult:
        dataset = ensure_not_empty(self.dataset)
        pool = [d for d in dataset.disciplines if d.failed_student_count > 0]
        self.rng = self._fresh_rng()

        trials: List[RandomTrial] = []
        for i in range(self.cfg.num_random_trials):
            chosen = self._shuffle(list(pool))[: self.cfg.max_disciplines]
            trials.append(RandomTrial(trial=i + 1, disciplines=chosen, evaluation=self._evaluate_disciplines(chosen)))

        best: Optional[RandomTrial] = None
        worst: Optional[RandomTrial] = None
        for t in trials:
            if best is None or t.evaluation.fitness > best.evaluation.fitness:
                best = t
            if worst is None or t.evaluation.fitness < worst.evaluation.fitness:
                worst = t

        logger.debug("Selección aleatoria: %d simulaciones sobre %d disciplinas", len(trials), len(pool))
        return RandomBaselineResult(
            strategy="random",
            description=(
                f"Media de {self.cfg.num_random_trials} selecciones aleatorias "
                f"de {self.cfg.max_disciplines} disciplinas"
            ),
            benefited_students=MetricStats.of([t.evaluation.benefited_students for t in trials]),
            satisfied_slots=MetricStats.of([t.evaluation.total_satisfied_slots for t in trials]),
            fitness=MetricStats.of([t.evaluation.fitness for t in trials]),
            best_trial=best,
            worst_trial=worst,
            trials=trials,
        )

    def compare(self, ga_result: GAResult) -> ComparisonReport:
        n_students = len(ensure_not_empty(self.dataset).students)
        greedy = self.greedy()
        rand = self.randomized()
        ga_ev = ga_result.best_evaluation

        return ComparisonReport(
            genetic=Summary(
                students_helped=ga_ev.benefited_students,
                coverage_percent=_coverage(ga_ev.benefited_students, n_students),
                slots_attended=ga_ev.total_satisfied_slots,
                fitness=ga_ev.fitness,
            ),
            greedy=Summary(
                students_helped=greedy.evaluation.benefited_students,
                coverage_percent=greedy.coverage_percent,
                slots_attended=greedy.evaluation.total_satisfied_slots,
                fitness=greedy.evaluation.fitness,
            ),
            random=Summary(
                students_helped=rand.benefited_students.mean,
                coverage_percent=_coverage(rand.benefited_students.mean, n_students),
                slots_attended=rand.satisfied_slots.mean,
                fitness=rand.fitness.mean,
            ),
            greedy_detail=greedy,
            random_detail=rand,
        )
