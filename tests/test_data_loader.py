import tempfile
import unittest
from pathlib import Path

import pandas as pd

from reoffer.config import OptimizerConfig, load_config
from reoffer.data_loader import (
    DataLoadError,
    build_dataset_from_frame,
    constant_capacity,
    entry_term_map,
    find_pending_sheet,
    load_dataset,
    remaining_terms_capacity,
    term_index,
)


def pending_frame():
    return pd.DataFrame(
        {
            "Matrícula": ["2019001", "2020002", "2021003", None, "2022005"],
            "Nome": ["Ana", "Bruno", "Carla", "Sem Matricula", "Elisa"],
            "Polo": ["Sede", None, "Norte", "Sede", "Sede"],
            "Ingresso": ["2019.1", "2020.2", "2021.1", "2021.1", "2022.1"],
            "CCCD001 - Algoritmos I": ["X", "x", None, "X", None],
            "CCCD007 - Álgebra Linear": ["X", None, "1", None, None],
            "CCCD012 - Redes": [None, None, None, None, None],
        }
    )


class CapacityPolicyTests(unittest.TestCase):
    def test_term_index(self):
        self.assertEqual(term_index("2017.2"), 2017 * 2 + 1)
        self.assertEqual(term_index("2018.1"), 2018 * 2)

    def test_remaining_terms_ceilings(self):
        policy = remaining_terms_capacity("2026.1")
        self.assertEqual(policy(10, "2018.1"), 8)   # recta final
        self.assertEqual(policy(80, "2021.1"), 7)
        self.assertEqual(policy(80, "2025.1"), 6)
        self.assertEqual(policy(10, "2025.1"), 1)   # ceil(10 / 12)
        self.assertEqual(policy(10, None), 5)
        self.assertEqual(policy(10, "sin fecha"), 5)

    def test_constant_capacity(self):
        self.assertEqual(constant_capacity(3)(40, "2010.1"), 3)


class DataLoaderTests(unittest.TestCase):
    def test_build_dataset_from_frame(self):
        ds = build_dataset_from_frame(pending_frame(), OptimizerConfig())
        # fila sin matrícula y alumno sin reprobaciones se descartan
        self.assertEqual([s.id for s in ds.students], ["2019001", "2020002", "2021003"])
        self.assertEqual([d.code for d in ds.disciplines], ["CCCD001", "CCCD007"])
        first = ds.disciplines[0]
        self.assertEqual(first.name, "Algoritmos I")
        self.assertEqual(first.curriculum_position, 1)
        self.assertEqual(first.failed_student_count, 2)
        self.assertEqual(ds.disciplines[1].semester, 2)

        ana = ds.students[0]
        self.assertEqual(ana.failed_disciplines, ("CCCD001", "CCCD007"))
        self.assertEqual(ana.capacity_per_term, 5)
        self.assertEqual(ana.entry_term, "2019.1")
        self.assertEqual(ds.students[1].campus, "unknown")

    def test_capacity_policy_is_applied(self):
        ds = build_dataset_from_frame(pending_frame(), capacity_policy=constant_capacity(2))
        self.assertTrue(all(s.capacity_per_term == 2 for s in ds.students))

    def test_missing_identity_columns(self):
        df = pd.DataFrame({"Nome": ["Ana"], "CCCD001 - X": ["X"]})
        with self.assertRaises(DataLoadError):
            build_dataset_from_frame(df)

    def test_empty_frame(self):
        with self.assertRaises(DataLoadError):
            build_dataset_from_frame(pd.DataFrame())

    def test_load_dataset_from_csv(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "pendencias.csv"
            pending_frame().to_csv(path, index=False)
            ds = load_dataset(str(path))
        self.assertEqual(len(ds.students), 3)
        self.assertEqual(ds.disciplines[0].code, "CCCD001")

    def test_load_dataset_from_workbook(self):
        ingreso = pd.DataFrame(
            {"Matrícula": ["2019001", "2020002", "2021003"], "Ingresso": ["2019.1", "2020.2", "2021.1"]}
        )
        pending = pending_frame().drop(columns=["Ingresso"])
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "pendencias.xlsx"
            with pd.ExcelWriter(path, engine="openpyxl") as writer:
                ingreso.to_excel(writer, sheet_name="Planilha1", index=False)
                pending.to_excel(writer, sheet_name="Pendencias 2021", index=False)
            ds = load_dataset(str(path), capacity_policy=remaining_terms_capacity("2026.1"))
        self.assertEqual([s.id for s in ds.students], ["2019001", "2020002", "2021003"])
        self.assertEqual([d.code for d in ds.disciplines], ["CCCD001", "CCCD007"])
        # el ingreso sale de la primera hoja
        self.assertEqual([s.entry_term for s in ds.students], ["2019.1", "2020.2", "2021.1"])
        self.assertEqual(ds.students[0].capacity_per_term, 2)   # plazo vencido: 1 semestre restante

    def test_find_pending_sheet(self):
        self.assertEqual(find_pending_sheet(["Planilha1", "REPROVAÇÕES"]), "REPROVAÇÕES")
        self.assertEqual(find_pending_sheet(["Planilha1", "Resumo"]), "Planilha1")

    def test_entry_term_map(self):
        df = pd.DataFrame({"Matricula": ["1", "2", None], "Ano Ingresso": ["2020.1", None, "2021.1"]})
        self.assertEqual(entry_term_map(df), {"1": "2020.1"})


class ConfigTests(unittest.TestCase):
    def test_defaults(self):
        cfg = OptimizerConfig()
        self.assertEqual(cfg.population_size, 100)
        self.assertEqual(cfg.max_generations, 50)
        self.assertEqual(cfg.crossover_rate, 0.8)
        self.assertEqual(cfg.mutation_rate, 0.2)
        self.assertEqual(cfg.max_disciplines, 10)
        self.assertEqual(cfg.weight_students, 100)
        self.assertEqual(cfg.weight_slots, 1)
        self.assertEqual(cfg.penalty_rate, 1000)
        self.assertEqual(cfg.num_random_trials, 100)

    def test_load_yaml_keeps_explicit_zero_and_ignores_unknown(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.yaml"
            path.write_text("max_disciplines: 0\npopulation_size: 30\nunknown_key: 1\n", encoding="utf-8")
            cfg = load_config(str(path))
        self.assertEqual(cfg.max_disciplines, 0)
        self.assertEqual(cfg.population_size, 30)
        self.assertEqual(cfg.max_generations, 50)

    def test_missing_file_gives_defaults(self):
        self.assertEqual(load_config("/nonexistent/config.yaml"), OptimizerConfig())

    def test_non_mapping_rejected(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.yaml"
            path.write_text("- 1\n- 2\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_config(str(path))


if __name__ == "__main__":
    unittest.main()
