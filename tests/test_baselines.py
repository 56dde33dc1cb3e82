import unittest

import numpy as np

from reoffer.baselines import ComparativeBaselines, MetricStats
from reoffer.config import OptimizerConfig
from reoffer.ga import GeneticSolver
from reoffer.model import DatasetError, Discipline, Student, build_dataset


def disjoint_dataset():
    """D1..D5 con 5,4,3,2,1 reprobados, sin alumnos compartidos; Z sin reprobados."""
    disciplines = [Discipline(f"D{j}", f"Disc {j}", j) for j in range(1, 6)]
    disciplines.append(Discipline("Z", "Sin reprobados", 9))
    students = []
    for j, count in zip(range(1, 6), (5, 4, 3, 2, 1)):
        for k in range(count):
            students.append(Student(f"D{j}-{k}", "x", (f"D{j}",), capacity_per_term=10))
    return build_dataset(disciplines, students)


def overlapping_dataset():
    disciplines = [Discipline(c, c, i + 1) for i, c in enumerate("ABCDEFGH")]
    rng = np.random.default_rng(11)
    students = []
    for i in range(30):
        codes = rng.choice(list("ABCDEFGH"), size=int(rng.integers(1, 4)), replace=False)
        students.append(Student(f"s{i}", f"Alumno {i}", tuple(str(c) for c in codes), capacity_per_term=2))
    return build_dataset(disciplines, students)


class GreedyTests(unittest.TestCase):
    def test_greedy_is_optimal_on_disjoint_data(self):
        ds = disjoint_dataset()
        cfg = OptimizerConfig(max_disciplines=3)
        res = ComparativeBaselines(ds, cfg).greedy()
        self.assertEqual([d.code for d in res.disciplines], ["D1", "D2", "D3"])
        self.assertEqual(res.evaluation.total_satisfied_slots, 12)
        self.assertEqual(res.evaluation.benefited_students, 12)
        self.assertEqual(res.evaluation.penalty, 0)
        self.assertEqual(res.coverage_percent, 80.0)

    def test_greedy_with_cap_above_pool(self):
        ds = disjoint_dataset()
        res = ComparativeBaselines(ds, OptimizerConfig(max_disciplines=50)).greedy()
        self.assertEqual(len(res.disciplines), 6)
        self.assertEqual(res.evaluation.benefited_students, 15)


class RandomizedTests(unittest.TestCase):
    def test_aggregates_and_extremes(self):
        ds = overlapping_dataset()
        cfg = OptimizerConfig(max_disciplines=3, num_random_trials=40)
        res = ComparativeBaselines(ds, cfg).randomized()
        self.assertEqual(len(res.trials), 40)
        fits = [t.evaluation.fitness for t in res.trials]
        self.assertAlmostEqual(res.fitness.mean, float(np.mean(fits)))
        self.assertAlmostEqual(res.fitness.std, float(np.std(fits)))
        self.assertLessEqual(res.fitness.min, res.fitness.mean)
        self.assertLessEqual(res.fitness.mean, res.fitness.max)
        self.assertEqual(res.best_trial.evaluation.fitness, max(fits))
        self.assertEqual(res.worst_trial.evaluation.fitness, min(fits))
        self.assertEqual(res.best_trial.trial, fits.index(max(fits)) + 1)
        self.assertEqual(res.worst_trial.trial, fits.index(min(fits)) + 1)
        for t in res.trials:
            self.assertEqual(len(t.disciplines), 3)

    def test_pool_excludes_disciplines_without_failures(self):
        ds = disjoint_dataset()
        cfg = OptimizerConfig(max_disciplines=5, num_random_trials=20)
        res = ComparativeBaselines(ds, cfg).randomized()
        for t in res.trials:
            self.assertNotIn("Z", [d.code for d in t.disciplines])
        # con el pool completo todas las simulaciones coinciden: gana la primera
        self.assertEqual(res.fitness.std, 0.0)
        self.assertEqual(res.best_trial.trial, 1)
        self.assertEqual(res.worst_trial.trial, 1)

    def test_same_seed_is_reproducible(self):
        ds = overlapping_dataset()
        cfg = OptimizerConfig(max_disciplines=2, num_random_trials=15, seed=5)
        r1 = ComparativeBaselines(ds, cfg).randomized()
        r2 = ComparativeBaselines(ds, cfg).randomized()
        self.assertEqual(
            [t.evaluation.selected_discipline_codes for t in r1.trials],
            [t.evaluation.selected_discipline_codes for t in r2.trials],
        )

    def test_repeated_calls_give_same_trials(self):
        ds = overlapping_dataset()
        cfg = OptimizerConfig(max_disciplines=2, num_random_trials=15, seed=5)
        baselines = ComparativeBaselines(ds, cfg)
        first = baselines.randomized()
        second = baselines.randomized()
        self.assertEqual(
            [t.evaluation.selected_discipline_codes for t in first.trials],
            [t.evaluation.selected_discipline_codes for t in second.trials],
        )
        self.assertEqual(first.fitness, second.fitness)

    def test_metric_stats_empty(self):
        self.assertEqual(MetricStats.of([]), MetricStats(0.0, 0.0, 0.0, 0.0))


class ComparisonTests(unittest.TestCase):
    def test_compare_report(self):
        ds = overlapping_dataset()
        cfg = OptimizerConfig(max_disciplines=3, population_size=30, max_generations=15, num_random_trials=25)
        ga = GeneticSolver(ds, cfg).run()
        report = ComparativeBaselines(ds, cfg).compare(ga)

        self.assertEqual(report.genetic.students_helped, ga.best_evaluation.benefited_students)
        self.assertEqual(report.genetic.fitness, ga.best_evaluation.fitness)
        self.assertEqual(report.greedy.fitness, report.greedy_detail.evaluation.fitness)
        self.assertEqual(report.greedy.coverage_percent, report.greedy_detail.coverage_percent)
        self.assertEqual(report.random.fitness, report.random_detail.fitness.mean)
        self.assertEqual(report.random.students_helped, report.random_detail.benefited_students.mean)
        self.assertEqual(len(report.random_detail.trials), 25)

        rows = report.as_rows()
        self.assertEqual([r["strategy"] for r in rows], ["genetic", "greedy", "random_mean"])
        self.assertGreaterEqual(report.genetic.fitness, report.random.fitness)

    def test_empty_dataset_rejected(self):
        ds = build_dataset([Discipline("A", "A", 1)], [])
        with self.assertRaises(DatasetError):
            ComparativeBaselines(ds).greedy()
        with self.assertRaises(DatasetError):
            ComparativeBaselines(ds).randomized()


if __name__ == "__main__":
    unittest.main()
