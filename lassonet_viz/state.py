"""
Immutable state objects shared by the step engine and the scheduler.

Every object here is a frozen dataclass; updates produce new instances via
``dataclasses.replace`` so that a reader holding a reference always sees a
completed step.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


class SimulationPhase(str, Enum):
    INIT = "INIT"
    PRETRAIN = "PRETRAIN"
    PATH_LOOP = "PATH_LOOP"
    FINISHED = "FINISHED"


class OptimizationStep(str, Enum):
    GRADIENT = "GRADIENT"
    PROXIMAL = "PROXIMAL"


@dataclass(frozen=True)
class Feature:
    """One input feature: skip weight theta plus its hidden-layer weights w."""

    id: int
    theta: float
    w: Tuple[float, ...]
    is_active: bool = True
    is_clamped: bool = False
    prev_theta: float = 0.0
    prev_w: Tuple[float, ...] = ()
    grad_theta: float = 0.0
    grad_w: Tuple[float, ...] = ()

    @property
    def max_abs_w(self) -> float:
        return max((abs(v) for v in self.w), default=0.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "theta": self.theta,
            "w": list(self.w),
            "is_active": self.is_active,
            "is_clamped": self.is_clamped,
            "prev_theta": self.prev_theta,
            "prev_w": list(self.prev_w),
            "grad_theta": self.grad_theta,
            "grad_w": list(self.grad_w),
        }


@dataclass(frozen=True)
class GradientDetail:
    """Operands of one gradient update for the representative feature."""

    feature_id: int
    old_val: float
    grad: float
    learning_rate: float
    new_val: float

    @property
    def step_type(self) -> OptimizationStep:
        return OptimizationStep.GRADIENT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step_type": self.step_type.value,
            "feature_id": self.feature_id,
            "old_val": self.old_val,
            "grad": self.grad,
            "learning_rate": self.learning_rate,
            "new_val": self.new_val,
        }


@dataclass(frozen=True)
class ProximalDetail:
    """Operands of one proximal update; ``lambda_`` is the effective threshold."""

    feature_id: int
    input_theta: float
    lambda_: float
    thresholded_theta: float
    input_w: float
    limit: float
    clamped_w: float

    @property
    def step_type(self) -> OptimizationStep:
        return OptimizationStep.PROXIMAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step_type": self.step_type.value,
            "feature_id": self.feature_id,
            "input_theta": self.input_theta,
            "lambda": self.lambda_,
            "thresholded_theta": self.thresholded_theta,
            "input_w": self.input_w,
            "limit": self.limit,
            "clamped_w": self.clamped_w,
        }


StepDetail = Union[GradientDetail, ProximalDetail]


@dataclass(frozen=True)
class SimulationState:
    phase: SimulationPhase
    step: OptimizationStep
    lambda_: float
    epoch: int
    features: Tuple[Feature, ...]
    logs: Tuple[str, ...]
    detailed_log: Optional[str] = None
    detail: Optional[StepDetail] = None

    @property
    def is_finished(self) -> bool:
        return self.phase == SimulationPhase.FINISHED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "step": self.step.value,
            "lambda": self.lambda_,
            "epoch": self.epoch,
            "features": [f.to_dict() for f in self.features],
            "logs": list(self.logs),
            "detailed_log": self.detailed_log,
            "detail": self.detail.to_dict() if self.detail is not None else None,
        }
