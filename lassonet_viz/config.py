"""
Simulation configuration.

All constants of the toy LassoNet network live in one dataclass so that the
engine, the scheduler and the runner read them from a single place. Presets
are derived from the reference configuration with ``dataclasses.replace``.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional


def _reference_targets() -> Dict[int, float]:
    # feature id -> target theta; ids not listed use noise_target
    return {1: 1.8, 2: 0.6}


@dataclass
class SimulationConfig:
    # Network geometry
    num_features: int = 3
    hidden_size: int = 5

    # Optimization constants
    hierarchy_coefficient: float = 2.0  # M in |w_k| <= M * |theta|
    learning_rate: float = 0.1
    prune_epsilon: float = 1e-4

    # Lambda path
    max_lambda: float = 2.0
    lambda_step: float = 0.2
    lambda_decimals: int = 2
    epochs_per_lambda: int = 5
    pretrain_epochs: int = 5

    # Synthetic targets
    feature_targets: Dict[int, float] = field(default_factory=_reference_targets)
    noise_target: float = 0.05

    # Initialization: theta_i = init_theta - i * init_theta_decay
    init_theta: float = 1.0
    init_theta_decay: float = 0.4
    hidden_ratio: float = 0.5  # hidden weight = theta * hidden_ratio (init and target)

    def to_dict(self) -> Dict[str, Any]:
        out = dict(self.__dict__)
        out["feature_targets"] = {int(k): float(v) for k, v in self.feature_targets.items()}
        return out


def _default_presets() -> Dict[str, SimulationConfig]:
    base = SimulationConfig()

    fast = replace(
        base,
        pretrain_epochs=2,
        epochs_per_lambda=2,
        lambda_step=0.5,
    )

    wide = replace(
        base,
        num_features=6,
        hidden_size=8,
        init_theta=1.2,
        init_theta_decay=0.2,
        feature_targets={1: 1.8, 2: 0.6, 3: 1.2, 4: -0.4},
    )

    return {"reference": base, "fast": fast, "wide": wide}


PRESETS = tuple(_default_presets().keys())


def get_preset(name: str) -> SimulationConfig:
    """Return a fresh preset configuration, falling back to ``reference``."""
    presets = _default_presets()
    if name not in presets:
        print(f"⚠️ Unknown preset '{name}', using 'reference' (available: {', '.join(PRESETS)})")
        return presets["reference"]
    return presets[name]


def config_from_dict(values: Dict[str, Any], base: Optional[SimulationConfig] = None) -> SimulationConfig:
    """
    Build a configuration from a plain dictionary.

    Args:
        values: Field overrides, e.g. parsed from JSON
        base: Configuration the overrides are applied to (reference if None)

    Returns:
        SimulationConfig with the known fields replaced
    """
    if base is None:
        base = SimulationConfig()

    config_fields = {f.name for f in SimulationConfig.__dataclass_fields__.values()}
    unknown = sorted(k for k in values if k not in config_fields)
    if unknown:
        print(f"Ignoring unknown config keys: {unknown}")

    filtered = {k: v for k, v in values.items() if k in config_fields}
    if "feature_targets" in filtered:
        # JSON object keys are always strings
        filtered["feature_targets"] = {int(k): float(v) for k, v in filtered["feature_targets"].items()}

    return replace(base, **filtered)


def load_config(path: str, base: Optional[SimulationConfig] = None) -> SimulationConfig:
    """Load configuration overrides from a JSON file."""
    with open(path, "r") as f:
        values = json.load(f)
    return config_from_dict(values, base=base)
