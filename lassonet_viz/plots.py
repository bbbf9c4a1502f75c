"""
Static figures of a simulation run.

- regularization path: theta of every feature over the run, lambda on a twin axis
- hidden weight heatmap: |w| per feature and hidden unit for one state

Both functions return the matplotlib Figure; pass ``save_path`` to write a PNG.
"""

import numpy as np
import pandas as pd
from typing import Optional

from .config import SimulationConfig
from .state import SimulationState


def plot_regularization_path(frame: pd.DataFrame,
                             config: Optional[SimulationConfig] = None,
                             save_path: Optional[str] = None,
                             show: bool = False):
    """
    Plot theta per feature against the call index.

    Args:
        frame: Output of ``utils.trajectory_frame``
        config: Used for the title (hierarchy coefficient, learning rate)
        save_path: Optional PNG path
        show: Call ``plt.show()`` instead of closing the figure
    """
    import matplotlib.pyplot as plt

    if config is None:
        config = SimulationConfig()

    fig, ax = plt.subplots(figsize=(12, 5))
    palette = plt.get_cmap("tab10")

    for i, (fid, group) in enumerate(frame.groupby("feature_id")):
        color = palette(i % 10)
        ax.plot(group["call"], group["theta"], color=color, label=f"X{fid} θ")

        # mark the call at which the feature got pruned
        was_active = group["is_active"].shift(1, fill_value=True).astype(bool)
        pruned = group[was_active & ~group["is_active"].astype(bool)]
        if not pruned.empty:
            ax.scatter(pruned["call"], pruned["theta"], color=color, marker="x", s=80, zorder=3)

    ax.axhline(0.0, color="grey", linewidth=0.8, linestyle=":")
    ax.set_xlabel("Call")
    ax.set_ylabel("θ (skip weight)")
    ax.set_title(f"LassoNet path (M={config.hierarchy_coefficient}, η={config.learning_rate})")

    lam = frame.drop_duplicates("call")[["call", "lambda"]]
    ax2 = ax.twinx()
    ax2.step(lam["call"], lam["lambda"], where="post", color="black", alpha=0.4, label="λ")
    ax2.set_ylabel("λ")

    lines, labels = ax.get_legend_handles_labels()
    lines2, labels2 = ax2.get_legend_handles_labels()
    ax.legend(lines + lines2, labels + labels2, loc="upper right")
    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
    if show:
        plt.show()
    else:
        plt.close(fig)
    return fig


def plot_hidden_weights(state: SimulationState,
                        save_path: Optional[str] = None,
                        show: bool = False):
    """Heatmap of |w| (features x hidden units); clamped features are starred."""
    import matplotlib.pyplot as plt
    import seaborn as sns

    W = np.abs(np.array([f.w for f in state.features], dtype=np.float64))
    labels = [f"X{f.id}{' *' if f.is_clamped else ''}{'' if f.is_active else ' (pruned)'}"
              for f in state.features]

    fig, ax = plt.subplots(figsize=(10, 0.6 * len(labels) + 2))
    sns.heatmap(W, ax=ax, cmap="viridis", annot=True, fmt=".3f",
                yticklabels=labels, cbar_kws={"label": "|weight|"})
    ax.set_xlabel("Hidden unit")
    ax.set_ylabel("Feature")
    ax.set_title(f"Hidden weight magnitudes ({state.phase.value}, λ={state.lambda_:.2f})")
    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
    if show:
        plt.show()
    else:
        plt.close(fig)
    return fig
