import json

import numpy as np
import pytest

from lassonet_viz.scheduler import advance, reset, run_until_finished
from lassonet_viz.state import SimulationPhase
from lassonet_viz.utils import (
    active_count,
    format_detail,
    pruning_lambdas,
    results_dict,
    state_stats,
    to_native,
    trajectory_frame,
)


@pytest.fixture
def reference_run(config):
    return run_until_finished(reset(config), config)


def test_to_native_converts_numpy_and_states(config):
    state = reset(config)
    out = to_native({"a": np.float64(1.5), "b": np.arange(3), "c": np.bool_(True), "s": state})
    assert out["a"] == 1.5 and type(out["a"]) is float
    assert out["b"] == [0, 1, 2]
    assert out["c"] is True
    assert out["s"]["phase"] == "INIT"
    json.dumps(out)


def test_trajectory_frame_shape(reference_run):
    frame = trajectory_frame(reference_run)
    assert len(frame) == len(reference_run) * 3
    assert frame["call"].max() == len(reference_run) - 1
    first = frame[frame["call"] == 0]
    assert first["executed"].isna().all()
    # INIT -> PRETRAIN performs no engine step
    assert frame[frame["call"] == 1]["executed"].isna().all()
    assert set(frame[frame["call"] == 2]["executed"]) == {"GRADIENT"}
    assert set(frame[frame["call"] == 3]["executed"]) == {"PROXIMAL"}


def test_pruning_lambdas(reference_run):
    lambdas = pruning_lambdas(reference_run)
    assert lambdas[1] is None
    assert lambdas[2] == pytest.approx(1.0)
    assert lambdas[3] == pytest.approx(0.4)


def test_results_dict_is_json_ready(reference_run, config):
    results = results_dict(reference_run, config)
    text = json.dumps(results)
    assert results["final_phase"] == "FINISHED"
    assert results["n_calls"] == 111
    assert results["selected_features"] == [1]
    assert results["n_selected"] == 1
    assert results["pruning_lambda"]["3"] == pytest.approx(0.4)
    assert "Training Completed" in text


def test_state_stats(config):
    state = advance(reset(config), config)
    stats = state_stats(state, config)
    assert stats["active_features"] == 3
    assert stats["phase"] == "PRETRAIN"
    assert stats["epoch_budget"] == config.pretrain_epochs
    assert stats["next_step"] == "GRADIENT"
    assert active_count(state.features) == 3


def test_format_detail(reference_run, config):
    assert format_detail(None, config) == "Start simulation to see math."

    grad_state = reference_run[2]
    text = format_detail(grad_state.detail, config)
    assert "Focus: Feature 1" in text
    assert "θ_old            1.0000" in text
    assert "θ_new            1.0800" in text

    prox_state = reference_run[3]
    text = format_detail(prox_state.detail, config)
    assert "Soft Thresholding" in text
    assert "Limit (M·|θ|)    2.0 * 1.080 = 2.1600" in text
    assert reference_run[-1].phase == SimulationPhase.FINISHED
