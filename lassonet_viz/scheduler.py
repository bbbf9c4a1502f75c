"""
Phase / epoch / lambda scheduler.

INIT -> PRETRAIN -> PATH_LOOP -> FINISHED. Each ``advance`` call performs
exactly one state change and returns a new ``SimulationState``; the input
state is never modified. Inside PRETRAIN and PATH_LOOP the calls alternate
between a gradient step and a proximal step, and every proximal step
completes one epoch.
"""

from dataclasses import replace
from typing import List, Optional

from .config import SimulationConfig
from .engine import initialize_weights, perform_gradient_step, perform_proximal_step
from .state import OptimizationStep, SimulationPhase, SimulationState

INTRO_DETAIL = ("Initialization Phase: Weights are set. Lower feature ids start stronger, "
                "the last features start weak and behave like noise.")
PRETRAIN_DETAIL = "Phase: Pretraining. No sparsity penalty yet. Just fitting the data."
FINISHED_DETAIL = "Final Model obtained. Check which features survived (Active)."


def reset(config: Optional[SimulationConfig] = None) -> SimulationState:
    """Fresh state at INIT with deterministically initialized features."""
    if config is None:
        config = SimulationConfig()
    features = initialize_weights(config.num_features, config.hidden_size, config)
    return SimulationState(
        phase=SimulationPhase.INIT,
        step=OptimizationStep.GRADIENT,
        lambda_=0.0,
        epoch=0,
        features=features,
        logs=(f"Initialized {config.num_features} features with deterministic weights.",),
        detailed_log=INTRO_DETAIL,
        detail=None,
    )


def advance(state: SimulationState, config: Optional[SimulationConfig] = None) -> SimulationState:
    """
    Perform one scheduler transition.

    Returns the same object when the run is FINISHED.
    """
    if config is None:
        config = SimulationConfig()

    if state.phase == SimulationPhase.FINISHED:
        return state

    if state.phase == SimulationPhase.INIT:
        return replace(
            state,
            phase=SimulationPhase.PRETRAIN,
            logs=state.logs + (">>> Starting Pretraining (Lambda = 0)",),
            detailed_log=PRETRAIN_DETAIL,
        )

    logs = list(state.logs)
    epoch = state.epoch

    # 1) one engine call
    if state.step == OptimizationStep.GRADIENT:
        features, detail = perform_gradient_step(state.features, config)
        next_step = OptimizationStep.PROXIMAL
        detailed_log = (f"Step 1: Gradient Descent. Updating θ and W to minimize loss. "
                        f"Feature {detail.feature_id} θ moved to {detail.new_val:.2f}.")
    else:
        features, detail = perform_proximal_step(state.features, state.lambda_, config)
        next_step = OptimizationStep.GRADIENT
        epoch += 1

        clamped = sum(1 for f in features if f.is_clamped)
        detailed_log = (f"Step 2: Proximal Update (λ={state.lambda_:.2f}). "
                        f"1) Applied Soft-Thresholding to θ. "
                        f"2) Enforced |W| ≤ {config.hierarchy_coefficient}*|θ|. "
                        f"{clamped} features have W clamped by θ hierarchy.")

        was_active = {f.id for f in state.features if f.is_active}
        pruned = sorted(f.id for f in features if f.id in was_active and not f.is_active)
        if pruned:
            names = ", ".join(str(fid) for fid in pruned)
            logs.append(f"⚠️ Feature pruned at λ={state.lambda_:.2f} (feature {names})")

    phase = state.phase
    lambda_ = state.lambda_

    # 2) phase transitions
    if state.phase == SimulationPhase.PRETRAIN:
        if epoch >= config.pretrain_epochs:
            phase = SimulationPhase.PATH_LOOP
            epoch = 0
            lambda_ = config.lambda_step
            logs.append(f">>> Entering Warm-start Path. Increasing λ to {lambda_}")
    elif state.phase == SimulationPhase.PATH_LOOP:
        if epoch >= config.epochs_per_lambda:
            epoch = 0
            lambda_ = round(state.lambda_ + config.lambda_step, config.lambda_decimals)
            if lambda_ > config.max_lambda:
                phase = SimulationPhase.FINISHED
                logs.append(">>> Training Completed")
                detailed_log = FINISHED_DETAIL
            else:
                logs.append(f"Increasing Penalty: λ = {lambda_}")

    return SimulationState(
        phase=phase,
        step=next_step,
        lambda_=lambda_,
        epoch=epoch,
        features=features,
        logs=tuple(logs),
        detailed_log=detailed_log,
        detail=detail,
    )


def run_until_finished(state: SimulationState, config: Optional[SimulationConfig] = None,
                       max_calls: Optional[int] = None) -> List[SimulationState]:
    """Drive ``advance`` until FINISHED (or ``max_calls``); returns every visited state."""
    states = [state]
    calls = 0
    while not state.is_finished:
        if max_calls is not None and calls >= max_calls:
            break
        state = advance(state, config)
        states.append(state)
        calls += 1
    return states


class LassoNetSimulation:
    """
    Owner of the current simulation state.

    Each ``step`` replaces ``state`` wholesale, so readers holding the old
    reference keep a consistent snapshot.
    """

    def __init__(self, config: Optional[SimulationConfig] = None):
        self.config = config if config is not None else SimulationConfig()
        self.state = reset(self.config)
        self.history = [self.state]

    @property
    def is_finished(self) -> bool:
        return self.state.is_finished

    def reset(self) -> SimulationState:
        self.state = reset(self.config)
        self.history = [self.state]
        return self.state

    def step(self) -> SimulationState:
        if self.state.is_finished:
            return self.state
        self.state = advance(self.state, self.config)
        self.history.append(self.state)
        return self.state

    def run(self, max_calls: Optional[int] = None) -> SimulationState:
        states = run_until_finished(self.state, self.config, max_calls=max_calls)
        self.history.extend(states[1:])
        self.state = states[-1]
        return self.state
