"""Tests for ROC curves and AUC summaries."""

import numpy as np
import pandas as pd
import pytest
from matplotlib.figure import Figure

from core.errors import DataError
from data_prep.dataset import write_frame
from evaluation.plots import plot_roc
from evaluation.roc import RocCurve, auc_summary, compute_roc, compute_roc_multi, roc_table


@pytest.fixture
def scored_frame() -> pd.DataFrame:
    rng = np.random.default_rng(3)
    n = 500
    actual = rng.random(n) < 0.3
    noisy = np.clip(actual * 0.3 + rng.random(n) * 0.7, 0, 1)
    return pd.DataFrame({
        "default": pd.Categorical(np.where(actual, "default", "current"), categories=["current", "default"]),
        "p_good": noisy,
        "p_random": rng.random(n),
        "p_perfect": actual.astype(float),
    })


def test_curve_is_monotone_and_spans_unit_square(scored_frame) -> None:
    curve = compute_roc("default", "p_good", scored_frame)
    assert isinstance(curve, RocCurve)
    assert np.all(np.diff(curve.fpr) >= 0)
    assert np.all(np.diff(curve.tpr) >= 0)
    assert curve.fpr[0] == 0 and curve.tpr[0] == 0
    assert curve.fpr[-1] == 1 and curve.tpr[-1] == 1
    assert 0.0 <= curve.auc <= 1.0
    assert curve.n_positive + curve.n_negative == 500


def test_perfect_predictor_has_auc_one(scored_frame) -> None:
    assert compute_roc("default", "p_perfect", scored_frame).auc == pytest.approx(1.0)


def test_positive_defaults_to_last_level(scored_frame) -> None:
    curve = compute_roc("default", "p_good", scored_frame)
    assert curve.positive == "default"
    flipped = compute_roc("default", "p_good", scored_frame, positive="current")
    assert flipped.auc == pytest.approx(1.0 - curve.auc)


def test_numeric_zero_one_actual(scored_frame) -> None:
    frame = scored_frame.assign(default=(scored_frame["default"] == "default").astype(int))
    curve = compute_roc("default", "p_good", frame)
    assert curve.positive == 1
    assert curve.auc == pytest.approx(compute_roc("default", "p_good", scored_frame).auc)


def test_reads_from_dataset_handle(scored_frame, tmp_path) -> None:
    handle = write_frame(scored_frame, tmp_path / "scored.csv", categorical={"default": ["current", "default"]})
    a = compute_roc("default", "p_good", handle)
    b = compute_roc("default", "p_good", handle)
    np.testing.assert_array_equal(a.fpr, b.fpr)
    np.testing.assert_array_equal(a.tpr, b.tpr)
    assert a.auc == pytest.approx(compute_roc("default", "p_good", scored_frame).auc)


def test_multi_curves_and_tables(scored_frame) -> None:
    curves = compute_roc_multi("default", ["p_random", "p_good", "p_perfect"], scored_frame)
    assert list(curves) == ["p_random", "p_good", "p_perfect"]

    table = roc_table(curves)
    assert list(table.columns) == ["model", "fpr", "tpr", "threshold"]
    assert set(table["model"]) == set(curves)
    assert len(table) == sum(len(c) for c in curves.values())

    summary = auc_summary(curves)
    assert list(summary["model"]) == ["p_perfect", "p_good", "p_random"]
    assert summary["auc"].is_monotonic_decreasing


def test_iterates_points(scored_frame) -> None:
    curve = compute_roc("default", "p_good", scored_frame)
    points = list(curve)
    assert len(points) == len(curve)
    assert points[0][:2] == (0.0, 0.0)


def test_missing_predictions_skipped(scored_frame) -> None:
    frame = scored_frame.copy()
    frame.loc[:9, "p_good"] = np.nan
    curve = compute_roc("default", "p_good", frame)
    assert curve.n_positive + curve.n_negative == 490


def test_non_binary_actual_raises() -> None:
    frame = pd.DataFrame({"y": ["a", "b", "c", "a"], "p": [0.1, 0.2, 0.3, 0.4]})
    with pytest.raises(DataError):
        compute_roc("y", "p", frame)


def test_single_class_raises() -> None:
    frame = pd.DataFrame({"y": [1, 1, 1], "p": [0.2, 0.5, 0.9]})
    with pytest.raises(DataError):
        compute_roc("y", "p", frame)


def test_unknown_column_raises(scored_frame) -> None:
    with pytest.raises(DataError):
        compute_roc("default", "p_missing", scored_frame)
    with pytest.raises(DataError):
        compute_roc_multi("default", [], scored_frame)


def test_plot_roc_returns_figure(scored_frame) -> None:
    curves = compute_roc_multi("default", ["p_good", "p_random"], scored_frame)
    fig = plot_roc(curves, title="Validation", labels={"p_good": "logit"})
    assert isinstance(fig, Figure)
    ax = fig.axes[0]
    assert ax.get_title() == "Validation"
    assert len(ax.lines) == 3
    assert ax.get_legend().get_texts()[0].get_text().startswith("logit (AUC=")

    single = plot_roc(curves["p_good"])
    assert isinstance(single, Figure)
