"""
LassoNet Visualizer Core

Step engine and scheduler for a toy LassoNet network: alternating gradient
and hierarchical proximal steps while lambda is annealed upward.

Modules:
- config: SimulationConfig and presets
- state: immutable features, step details and simulation state
- engine: initialize_weights, perform_gradient_step, perform_proximal_step
- scheduler: reset, advance, run_until_finished, LassoNetSimulation
- summary: LLM summary of a state with placeholder fallback
- utils / plots / runner: results, figures and command line
"""

from .config import SimulationConfig, get_preset, config_from_dict, load_config
from .state import (
    Feature,
    GradientDetail,
    OptimizationStep,
    ProximalDetail,
    SimulationPhase,
    SimulationState,
)
from .engine import initialize_weights, perform_gradient_step, perform_proximal_step, soft_threshold
from .scheduler import LassoNetSimulation, advance, reset, run_until_finished
from .summary import analyze_state

__all__ = [
    'SimulationConfig', 'get_preset', 'config_from_dict', 'load_config',
    'Feature', 'GradientDetail', 'ProximalDetail', 'OptimizationStep', 'SimulationPhase', 'SimulationState',
    'initialize_weights', 'perform_gradient_step', 'perform_proximal_step', 'soft_threshold',
    'LassoNetSimulation', 'advance', 'reset', 'run_until_finished',
    'analyze_state',
]
