"""
Model evaluation — ROC curves, AUC tables and the ROC chart.
"""

from .roc import RocCurve, auc_summary, compute_roc, compute_roc_multi, roc_table
from .plots import plot_roc

__all__ = [
    "RocCurve",
    "auc_summary",
    "compute_roc",
    "compute_roc_multi",
    "roc_table",
    "plot_roc",
]
