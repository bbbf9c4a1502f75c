from types import SimpleNamespace

from lassonet_viz.scheduler import reset, run_until_finished
from lassonet_viz.summary import (
    PLACEHOLDER_EMPTY,
    PLACEHOLDER_NO_KEY,
    PLACEHOLDER_UNAVAILABLE,
    analyze_state,
    build_prompt,
    build_snapshot,
)


class FakeModels:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    def generate_content(self, model, contents):
        self.calls.append((model, contents))
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


class FakeClient:
    def __init__(self, **kwargs):
        self.models = FakeModels(**kwargs)


def test_snapshot_fields(config):
    state = reset(config)
    snap = build_snapshot(state)
    assert snap["phase"] == "INIT"
    assert snap["lambda"] == 0.0
    assert snap["epoch"] == 0
    assert snap["step"] == "GRADIENT"
    assert [f["id"] for f in snap["features"]] == [1, 2, 3]
    assert snap["features"][0]["max_abs_w"] == 0.5
    assert set(snap["features"][0]) == {"id", "theta", "max_abs_w", "is_active"}


def test_prompt_mentions_state(config):
    state = run_until_finished(reset(config), config, max_calls=30)[-1]
    prompt = build_prompt(build_snapshot(state), config)
    assert "Phase: PATH_LOOP" in prompt
    assert "Feature 3:" in prompt
    assert "|W| <= 2.0*|theta|" in prompt


def test_no_key_returns_placeholder(config, monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)
    assert analyze_state(reset(config), config) == PLACEHOLDER_NO_KEY


def test_client_text_is_returned(config):
    client = FakeClient(text="Feature 3 is being pruned.")
    state = reset(config)
    assert analyze_state(state, config, client=client, model="m") == "Feature 3 is being pruned."
    model, contents = client.models.calls[0]
    assert model == "m"
    assert "Feature 1:" in contents


def test_empty_response_placeholder(config):
    assert analyze_state(reset(config), config, client=FakeClient(text="")) == PLACEHOLDER_EMPTY


def test_failure_degrades_and_leaves_state_untouched(config):
    state = run_until_finished(reset(config), config, max_calls=20)[-1]
    before = state.to_dict()
    result = analyze_state(state, config, client=FakeClient(error=RuntimeError("boom")))
    assert result == PLACEHOLDER_UNAVAILABLE
    assert state.to_dict() == before


def test_client_construction_failure_degrades(config, monkeypatch):
    def broken(api_key):
        raise ImportError("google-genai not installed")

    monkeypatch.setattr("lassonet_viz.summary._default_client", broken)
    assert analyze_state(reset(config), config, api_key="k") == PLACEHOLDER_UNAVAILABLE
