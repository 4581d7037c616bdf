from __future__ import annotations

from typing import Dict, Optional

import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from .roc import RocCurve


def plot_roc(
    curves: Dict[str, RocCurve] | RocCurve,
    *,
    ax: Optional[Axes] = None,
    title: str = "ROC curve",
    labels: Optional[Dict[str, str]] = None,
) -> Figure:
    """Overlay ROC curves with the chance diagonal; legend shows each AUC."""
    if isinstance(curves, RocCurve):
        curves = {curves.name: curves}
    labels = labels or {}

    if ax is None:
        fig, ax = plt.subplots(figsize=(5, 5))
    else:
        fig = ax.figure

    for name, curve in curves.items():
        ax.plot(curve.fpr, curve.tpr, lw=1.5, label=f"{labels.get(name, name)} (AUC={curve.auc:.3f})")
    ax.plot([0, 1], [0, 1], ls="--", color="grey", lw=1, label="chance")

    ax.set_xlim(0.0, 1.0)
    ax.set_ylim(0.0, 1.0)
    ax.set_xlabel("False positive rate")
    ax.set_ylabel("True positive rate")
    ax.set_title(title)
    ax.legend(loc="lower right", fontsize="small")
    return fig
