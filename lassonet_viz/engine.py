"""
Step engine for the toy LassoNet network.

Pure functions over a tuple of ``Feature`` objects:

- ``initialize_weights``: deterministic starting point (lower ids start stronger)
- ``perform_gradient_step``: synthetic gradient descent toward fixed per-feature targets
- ``perform_proximal_step``: soft-thresholding of theta followed by the
  hierarchical projection |w_k| <= M * |theta| (Algorithm 2 of the LassoNet paper)

The "gradients" are linear pulls toward hardcoded targets; there is no data
and no loss. Nothing here logs, raises or keeps references to its inputs.
"""

from dataclasses import replace
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from .config import SimulationConfig
from .state import Feature, GradientDetail, ProximalDetail

# Representative features for the detail record, in order of preference
DETAIL_FEATURE_IDS = (1, 2)


def _as_tuple(values: np.ndarray) -> Tuple[float, ...]:
    return tuple(float(v) for v in values)


def initialize_weights(num_features: int, hidden_size: int,
                       config: Optional[SimulationConfig] = None) -> Tuple[Feature, ...]:
    """
    Create the starting features, 1-indexed.

    Feature i (0-based) starts at theta_i = init_theta - i * init_theta_decay
    (1.0, 0.6, 0.2 for the reference config) and all of its hidden weights
    start at theta_i * hidden_ratio.
    """
    if config is None:
        config = SimulationConfig()

    features = []
    for i in range(num_features):
        theta = config.init_theta - i * config.init_theta_decay
        w = (theta * config.hidden_ratio,) * hidden_size
        features.append(Feature(
            id=i + 1,
            theta=theta,
            w=w,
            is_active=True,
            is_clamped=False,
            prev_theta=theta,
            prev_w=w,
            grad_theta=0.0,
            grad_w=(0.0,) * hidden_size,
        ))
    return tuple(features)


def target_theta_for(feature_id: int, config: Optional[SimulationConfig] = None) -> float:
    """Fixed target theta for a feature id; unlisted ids are treated as noise."""
    if config is None:
        config = SimulationConfig()
    return float(config.feature_targets.get(feature_id, config.noise_target))


def soft_threshold(x: float, tau: float) -> float:
    """Proximal operator of tau * |x|."""
    if x > tau:
        return x - tau
    if x < -tau:
        return x + tau
    return 0.0


def _representative_id(updated_ids: Iterable[int]) -> int:
    updated = set(updated_ids)
    for fid in DETAIL_FEATURE_IDS:
        if fid in updated:
            return fid
    return DETAIL_FEATURE_IDS[0]


def _find(features: Sequence[Feature], feature_id: int) -> Optional[Feature]:
    for f in features:
        if f.id == feature_id:
            return f
    return features[0] if features else None


def perform_gradient_step(features: Sequence[Feature],
                          config: Optional[SimulationConfig] = None) -> Tuple[Tuple[Feature, ...], GradientDetail]:
    """
    One synthetic gradient-descent step.

    Active features move toward their target: theta' = theta - lr * (theta - target),
    and likewise every hidden weight toward target * hidden_ratio. Inactive
    features are returned untouched, stale gradients included.

    Returns:
        (new features, detail for the representative feature)
    """
    if config is None:
        config = SimulationConfig()
    lr = config.learning_rate

    new_features = []
    updated = {}
    for f in features:
        if not f.is_active:
            new_features.append(f)
            continue

        target_theta = target_theta_for(f.id, config)
        target_w = target_theta * config.hidden_ratio

        w = np.asarray(f.w, dtype=np.float64)
        grad_theta = f.theta - target_theta
        grad_w = w - target_w

        new_theta = f.theta - lr * grad_theta
        new_w = w - lr * grad_w

        nf = replace(
            f,
            theta=new_theta,
            w=_as_tuple(new_w),
            is_clamped=False,
            prev_theta=f.theta,
            prev_w=f.w,
            grad_theta=grad_theta,
            grad_w=_as_tuple(grad_w),
        )
        new_features.append(nf)
        updated[f.id] = (f, nf)

    rep_id = _representative_id(updated)
    if rep_id in updated:
        old, new = updated[rep_id]
        detail = GradientDetail(
            feature_id=rep_id,
            old_val=old.theta,
            grad=new.grad_theta,
            learning_rate=lr,
            new_val=new.theta,
        )
    else:
        # Nothing representative was updated: report feature 1 as it stands
        f = _find(features, rep_id)
        theta = f.theta if f is not None else 0.0
        detail = GradientDetail(
            feature_id=f.id if f is not None else rep_id,
            old_val=theta,
            grad=0.0,
            learning_rate=lr,
            new_val=theta,
        )

    return tuple(new_features), detail


def perform_proximal_step(features: Sequence[Feature], lambda_: float,
                          config: Optional[SimulationConfig] = None) -> Tuple[Tuple[Feature, ...], ProximalDetail]:
    """
    One hierarchical proximal step, applied to every feature.

    1) theta' = soft_threshold(theta, lambda * lr); |theta'| <= prune_epsilon
       prunes the feature (theta' = 0, is_active = False).
    2) Each hidden weight is projected onto [-M|theta'|, M|theta'|];
       is_clamped is True if any component moved.
    3) Gradients are zeroed, prev_* hold the pre-step values.

    A negative lambda is a caller error and is not checked.
    """
    if config is None:
        config = SimulationConfig()
    tau = lambda_ * config.learning_rate
    m = config.hierarchy_coefficient

    new_features = []
    for f in features:
        new_theta = soft_threshold(f.theta, tau)
        is_active = abs(new_theta) > config.prune_epsilon
        if not is_active:
            new_theta = 0.0

        limit = m * abs(new_theta)
        w = np.asarray(f.w, dtype=np.float64)
        over = np.abs(w) > limit
        new_w = np.where(over, np.sign(w) * limit, w)

        new_features.append(replace(
            f,
            theta=new_theta,
            w=_as_tuple(new_w),
            is_active=is_active,
            is_clamped=bool(over.any()),
            prev_theta=f.theta,
            prev_w=f.w,
            grad_theta=0.0,
            grad_w=(0.0,) * len(f.w),
        ))

    rep_id = _representative_id(f.id for f in features)
    old = _find(features, rep_id)
    new = _find(new_features, rep_id)
    if old is None:
        detail = ProximalDetail(rep_id, 0.0, tau, 0.0, 0.0, 0.0, 0.0)
    else:
        detail = ProximalDetail(
            feature_id=old.id,
            input_theta=old.theta,
            lambda_=tau,
            thresholded_theta=new.theta,
            input_w=old.w[0] if old.w else 0.0,
            limit=m * abs(new.theta),
            clamped_w=new.w[0] if new.w else 0.0,
        )

    return tuple(new_features), detail
