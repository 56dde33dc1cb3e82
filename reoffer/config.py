"""
Configuración del optimizador de reoferta.

Incluye un cargador desde YAML (JSON también es YAML válido) para dejar los
parámetros del AG y de las estrategias comparativas reproducibles.
"""
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


DEFAULT_FAILURE_MARKS: List[str] = ["X", "x", "1"]


@dataclass
class OptimizerConfig:
    # Algoritmo genético
    population_size: int = 100
    max_generations: int = 50
    crossover_rate: float = 0.8
    mutation_rate: float = 0.2
    tournament_size: int = 3
    elite_fraction: float = 0.1
    seed: Optional[int] = 42
    log_every: int = 10

    # Restricción y pesos del fitness
    max_disciplines: int = 10
    weight_students: float = 100
    weight_slots: float = 1
    penalty_rate: float = 1000

    # Selección aleatoria (baseline)
    num_random_trials: int = 100

    # Ingesta de datos
    default_capacity: int = 5
    discipline_pattern: str = r"CCCD\d+"
    failure_marks: List[str] = field(default_factory=lambda: list(DEFAULT_FAILURE_MARKS))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OptimizerConfig":
        merged = asdict(cls())
        for k, v in data.items():
            if k in merged:
                merged[k] = v
        return cls(**merged)

    def parameters_used(self) -> Dict[str, Any]:
        """Parámetros que influyen en una ejecución del AG (para reportes)."""
        return {
            "population_size": self.population_size,
            "max_generations": self.max_generations,
            "crossover_rate": self.crossover_rate,
            "mutation_rate": self.mutation_rate,
            "max_disciplines": self.max_disciplines,
            "tournament_size": self.tournament_size,
            "elite_fraction": self.elite_fraction,
            "weight_students": self.weight_students,
            "weight_slots": self.weight_slots,
            "penalty_rate": self.penalty_rate,
            "seed": self.seed,
        }


def _load_yaml(path: Path) -> Any:
    if not path.exists():
        return {}
    text = path.read_text(encoding="utf-8")
    return yaml.safe_load(text) or {}


def load_config(path: str = "config.yaml") -> OptimizerConfig:
    cfg_path = Path(path)
    data = _load_yaml(cfg_path)
    if not isinstance(data, dict):
        raise ValueError("config.yaml debe contener un objeto mapeo")
    return OptimizerConfig.from_dict(data)
