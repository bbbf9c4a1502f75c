"""
Natural-language summary of a simulation state.

The summary is produced by an external LLM service and is purely
observational: it receives a read-only snapshot and whatever goes wrong
(missing key, missing client library, request failure) is turned into a
placeholder string. The simulation state is never touched.
"""

import os
from typing import Any, Dict, Optional

from .config import SimulationConfig
from .state import SimulationState

DEFAULT_MODEL = "gemini-2.5-flash"

PLACEHOLDER_NO_KEY = "Please set GEMINI_API_KEY (or API_KEY) to enable the AI analysis."
PLACEHOLDER_EMPTY = "No analysis was generated."
PLACEHOLDER_UNAVAILABLE = "The analysis service is unavailable right now."


def build_snapshot(state: SimulationState) -> Dict[str, Any]:
    return {
        "phase": state.phase.value,
        "lambda": state.lambda_,
        "epoch": state.epoch,
        "step": state.step.value,
        "features": [
            {
                "id": f.id,
                "theta": f.theta,
                "max_abs_w": f.max_abs_w,
                "is_active": f.is_active,
            }
            for f in state.features
        ],
    }


def build_prompt(snapshot: Dict[str, Any], config: Optional[SimulationConfig] = None) -> str:
    if config is None:
        config = SimulationConfig()

    feature_summary = "\n".join(
        f"Feature {f['id']}: Theta={f['theta']:.3f}, Max(|W|)={f['max_abs_w']:.3f}, Active={f['is_active']}"
        for f in snapshot["features"]
    )

    return (
        "You are an expert in machine learning and in particular the LassoNet architecture.\n"
        "Analyse the current training state of the LassoNet model being visualised.\n"
        "\n"
        "Context:\n"
        f"- Phase: {snapshot['phase']}\n"
        f"- Current lambda (penalty coefficient): {snapshot['lambda']:.3f}\n"
        f"- Epoch: {snapshot['epoch']}\n"
        f"- Next optimization step: {snapshot['step']}\n"
        "\n"
        "Feature weights:\n"
        f"{feature_summary}\n"
        "\n"
        "Explain briefly (at most 2 sentences): what is happening to feature selection? "
        "Which features are being eliminated (theta going to 0)? "
        f"Is the hierarchy constraint |W| <= {config.hierarchy_coefficient}*|theta| active?"
    )


def _resolve_api_key(api_key: Optional[str]) -> Optional[str]:
    if api_key:
        return api_key
    return os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY")


def _default_client(api_key: str):
    from google import genai
    return genai.Client(api_key=api_key)


def analyze_state(state: SimulationState,
                  config: Optional[SimulationConfig] = None,
                  client=None,
                  api_key: Optional[str] = None,
                  model: str = DEFAULT_MODEL) -> str:
    """
    Ask the LLM service to describe the current sparsity pattern.

    Args:
        state: Simulation state to describe (not modified)
        config: Simulation configuration (for the hierarchy coefficient)
        client: Object exposing ``models.generate_content(model=..., contents=...)``;
            a google-genai client is created when omitted and a key is available
        api_key: Overrides GEMINI_API_KEY / API_KEY
        model: Model name passed to the client

    Returns:
        The analysis text, or a placeholder string
    """
    if client is None:
        key = _resolve_api_key(api_key)
        if not key:
            return PLACEHOLDER_NO_KEY

    prompt = build_prompt(build_snapshot(state), config)

    try:
        if client is None:
            client = _default_client(key)
        response = client.models.generate_content(model=model, contents=prompt)
        text = getattr(response, "text", None)
        return text or PLACEHOLDER_EMPTY
    except Exception as e:
        print(f"❌ Analysis request failed: {e}")
        return PLACEHOLDER_UNAVAILABLE
