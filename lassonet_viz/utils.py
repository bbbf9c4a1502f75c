# lassonet_viz/utils.py

import numpy as np
import pandas as pd
from typing import Any, Dict, Optional, Sequence

from .config import SimulationConfig
from .state import Feature, GradientDetail, ProximalDetail, SimulationPhase, SimulationState


def to_native(obj):
    """
    Convert numpy types and state objects to native Python types for JSON serialization.
    """
    if hasattr(obj, "to_dict"):
        return to_native(obj.to_dict())
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, (list, tuple)):
        return [to_native(v) for v in obj]
    if isinstance(obj, dict):
        return {k: to_native(v) for k, v in obj.items()}
    return obj


def active_count(features: Sequence[Feature]) -> int:
    return sum(1 for f in features if f.is_active)


def clamped_count(features: Sequence[Feature]) -> int:
    return sum(1 for f in features if f.is_clamped)


def state_stats(state: SimulationState, config: SimulationConfig) -> Dict[str, Any]:
    """Dashboard numbers: active features, lambda, epoch out of its budget, phase."""
    budget = config.pretrain_epochs if state.phase == SimulationPhase.PRETRAIN else config.epochs_per_lambda
    return {
        "active_features": active_count(state.features),
        "clamped_features": clamped_count(state.features),
        "lambda": round(state.lambda_, config.lambda_decimals),
        "epoch": state.epoch,
        "epoch_budget": budget,
        "phase": state.phase.value,
        "next_step": state.step.value,
    }


def trajectory_frame(states: Sequence[SimulationState]) -> pd.DataFrame:
    """
    One row per (call, feature) over a sequence of visited states.

    ``executed`` is the kind of engine step that produced the row's state
    (None for the initial state and the INIT -> PRETRAIN transition).
    """
    rows = []
    prev = None
    for call, state in enumerate(states):
        executed = None
        if prev is not None and prev.phase != SimulationPhase.INIT:
            executed = prev.step.value
        for f in state.features:
            rows.append({
                "call": call,
                "phase": state.phase.value,
                "executed": executed,
                "lambda": state.lambda_,
                "epoch": state.epoch,
                "feature_id": f.id,
                "theta": f.theta,
                "max_abs_w": f.max_abs_w,
                "is_active": f.is_active,
                "is_clamped": f.is_clamped,
            })
        prev = state
    return pd.DataFrame(rows, columns=[
        "call", "phase", "executed", "lambda", "epoch",
        "feature_id", "theta", "max_abs_w", "is_active", "is_clamped",
    ])


def pruning_lambdas(states: Sequence[SimulationState]) -> Dict[int, Optional[float]]:
    """First lambda at which each feature became inactive (None if it survived)."""
    if not states:
        return {}
    result = {f.id: None for f in states[0].features}
    for prev, state in zip(states, states[1:]):
        was_active = {f.id for f in prev.features if f.is_active}
        for f in state.features:
            if f.id in was_active and not f.is_active and result.get(f.id) is None:
                # the proximal step used the lambda held before the transition
                result[f.id] = prev.lambda_
    return result


def results_dict(states: Sequence[SimulationState], config: SimulationConfig) -> Dict[str, Any]:
    final = states[-1]
    result = {
        "model_name": "LassoNet-Toy",
        "config": config.to_dict(),
        "final_phase": final.phase.value,
        "n_calls": len(states) - 1,
        "final_lambda": final.lambda_,
        "selected_features": [f.id for f in final.features if f.is_active],
        "n_selected": active_count(final.features),
        "pruning_lambda": {str(k): v for k, v in pruning_lambdas(states).items()},
        "final_features": [f.to_dict() for f in final.features],
        "logs": list(final.logs),
    }
    return to_native(result)


def format_detail(detail, config: Optional[SimulationConfig] = None) -> str:
    """Plain-text math inspector for one step detail record."""
    if config is None:
        config = SimulationConfig()
    if detail is None:
        return "Start simulation to see math."

    lines = [f"Math Inspector (Focus: Feature {detail.feature_id})"]
    if isinstance(detail, GradientDetail):
        lines += [
            "Standard Gradient Update: θ_new = θ_old - η · ∇L",
            f"  θ_old            {detail.old_val:.4f}",
            f"  Gradient (∇L)    {detail.grad:.4f}",
            f"  Learning Rate η  {detail.learning_rate}",
            f"  θ_new            {detail.new_val:.4f}",
        ]
    elif isinstance(detail, ProximalDetail):
        lines += [
            "1. Sparsity: Soft Thresholding",
            f"  Input θ          {detail.input_theta:.4f}",
            f"  Threshold (λη)   {detail.lambda_:.4f}",
            f"  Result θ         {detail.thresholded_theta:.4f}",
            "2. Hierarchy Constraint: |W| ≤ M · |θ_new|",
            f"  Current W        {detail.input_w:.4f}",
            f"  Limit (M·|θ|)    {config.hierarchy_coefficient} * {abs(detail.thresholded_theta):.3f} = {detail.limit:.4f}",
            f"  Clamped W        {detail.clamped_w:.4f}",
        ]
    return "\n".join(lines)
