"""Tests for scoring fitted models against datasets."""

import dataclasses

import numpy as np
import pandas as pd
import pytest

from core.config import ScoreOptions
from core.errors import ConfigurationError, DataError
from data_prep.dataset import DatasetHandle, write_frame
from data_prep.formula import Formula, build_formula
from engine.scorer import predict_frame, score
from engine.trainer import train


@pytest.fixture
def logit(mortgage_parquet: DatasetHandle):
    return train(build_formula(mortgage_parquet, "default", exclude={"year"}), mortgage_parquet, "logistic")


class _ExplodingEstimator:
    def predict_proba(self, X):
        raise AssertionError("prediction should not be attempted")


class TestScore:
    def test_probabilities_sum_to_one(self, logit, mortgage_parquet, tmp_path) -> None:
        out = score(logit, mortgage_parquet, tmp_path / "scored.parquet")
        frame = out.read()
        assert list(frame.columns) == ["pred_current", "pred_default"]
        assert len(frame) == 2000
        assert frame.min().min() >= 0.0 and frame.max().max() <= 1.0
        np.testing.assert_allclose(frame["pred_current"] + frame["pred_default"], 1.0, atol=1e-6)

    def test_write_input_columns(self, logit, mortgage_parquet, tmp_path) -> None:
        out = score(logit, mortgage_parquet, tmp_path / "scored.parquet", write_input_columns=True)
        assert out.columns == mortgage_parquet.columns + ["pred_current", "pred_default"]
        assert out.schema["default"].levels == ("current", "default")

    def test_extra_columns_only(self, logit, mortgage_parquet, tmp_path) -> None:
        out = score(logit, mortgage_parquet, tmp_path / "scored.csv", extra_columns_to_copy=["default"])
        assert out.columns == ["default", "pred_current", "pred_default"]
        assert out.fmt == "csv"

    def test_options_object(self, logit, mortgage_parquet, tmp_path) -> None:
        opts = ScoreOptions(extra_columns_to_copy=("default",), prediction_column_names=("p_cur", "p_def"))
        out = score(logit, mortgage_parquet, tmp_path / "scored.parquet", options=opts)
        assert out.columns == ["default", "p_cur", "p_def"]

    def test_custom_prediction_names(self, logit, mortgage_parquet, tmp_path) -> None:
        out = score(logit, mortgage_parquet, tmp_path / "s.parquet", prediction_column_names=["a", "b"])
        assert out.columns == ["a", "b"]

    def test_wrong_number_of_names(self, logit, mortgage_parquet, tmp_path) -> None:
        with pytest.raises(ConfigurationError):
            score(logit, mortgage_parquet, tmp_path / "s.parquet", prediction_column_names=["only_one"])

    def test_prediction_name_clash(self, logit, mortgage_parquet, tmp_path) -> None:
        with pytest.raises(ConfigurationError):
            score(logit, mortgage_parquet, tmp_path / "s.parquet", write_input_columns=True,
                  prediction_column_names=["default", "other"])

    def test_unknown_extra_column(self, logit, mortgage_parquet, tmp_path) -> None:
        with pytest.raises(DataError):
            score(logit, mortgage_parquet, tmp_path / "s.parquet", extra_columns_to_copy=["loan_id"])

    def test_missing_feature_fails_before_prediction(self, tmp_path) -> None:
        frame = pd.DataFrame({"a": [1.0, 2.0, 3.0, 4.0], "b": [0.0, 1.0, 0.0, 1.0], "c": [3.0, 1.0, 2.0, 0.0],
                              "default": ["current", "default", "current", "default"]})
        train_set = write_frame(frame, tmp_path / "train.parquet")
        model = train(build_formula(train_set, "default"), train_set, "logistic")
        assert model.features == ("a", "b", "c")

        exploding = dataclasses.replace(model, estimator=_ExplodingEstimator())
        no_b = write_frame(frame.drop(columns="b"), tmp_path / "no_b.parquet")
        with pytest.raises(DataError):
            score(exploding, no_b, tmp_path / "scored.parquet")
        assert not (tmp_path / "scored.parquet").exists()

    def test_numeric_feature_given_as_text(self, logit, mortgage_frame, tmp_path) -> None:
        bad = write_frame(mortgage_frame.assign(ccDebt="lots"), tmp_path / "bad.csv")
        with pytest.raises(DataError):
            score(logit, bad, tmp_path / "s.parquet")

    def test_score_other_storage_format(self, logit, mortgage_csv, mortgage_parquet, tmp_path) -> None:
        from_csv = score(logit, mortgage_csv, tmp_path / "a.parquet").read()
        from_parquet = score(logit, mortgage_parquet, tmp_path / "b.parquet").read()
        np.testing.assert_allclose(from_csv.to_numpy(), from_parquet.to_numpy())

    def test_score_in_place(self, logit, mortgage_parquet) -> None:
        out = score(logit, mortgage_parquet, mortgage_parquet.path, write_input_columns=True)
        assert out.path == mortgage_parquet.path
        assert out.num_rows == 2000
        assert "pred_default" in DatasetHandle(mortgage_parquet.path).columns

    def test_multiclass_column_per_class(self, tmp_path) -> None:
        rng = np.random.default_rng(13)
        x = rng.normal(size=600)
        grade = np.select([x < -0.5, x < 0.5], ["a", "b"], default="c")
        handle = write_frame(pd.DataFrame({"x": x, "z": rng.normal(size=600), "grade": grade}),
                             tmp_path / "grades.parquet")
        model = train(Formula("grade", ("x", "z")), handle, "random_forest",
                      {"n_estimators": 20, "random_state": 0})
        assert model.classes == ("a", "b", "c")

        frame = score(model, handle, tmp_path / "scored.parquet").read()
        assert list(frame.columns) == ["pred_a", "pred_b", "pred_c"]
        assert len(frame) == 600
        np.testing.assert_allclose(frame.sum(axis=1), 1.0, atol=1e-6)
        assert frame.min().min() >= 0.0

    def test_regression_single_column(self, mortgage_parquet, tmp_path) -> None:
        model = train(Formula("ccDebt", ("creditScore", "yearsEmploy")), mortgage_parquet, "linear")
        out = score(model, mortgage_parquet, tmp_path / "r.parquet", extra_columns_to_copy=["ccDebt"])
        frame = out.read()
        assert list(frame.columns) == ["ccDebt", "pred_ccDebt"]
        assert frame["pred_ccDebt"].notna().all()


class TestPredictFrame:
    def test_missing_features_give_nan(self, logit) -> None:
        frame = pd.DataFrame({
            "creditScore": [720, np.nan], "houseAge": [10, 12], "yearsEmploy": [4, 4], "ccDebt": [3000.0, 3000.0],
        })
        preds = predict_frame(logit, frame)
        assert preds.loc[0].notna().all()
        assert preds.loc[1].isna().all()
        assert preds.loc[0].sum() == pytest.approx(1.0)

    def test_keeps_index(self, logit) -> None:
        frame = pd.DataFrame({
            "creditScore": [600, 800], "houseAge": [1, 2], "yearsEmploy": [1, 10], "ccDebt": [9000.0, 100.0],
        }, index=[10, 20])
        preds = predict_frame(logit, frame)
        assert list(preds.index) == [10, 20]
        assert preds.loc[10, "pred_default"] > preds.loc[20, "pred_default"]

    def test_unseen_level_scores_as_all_zero_dummies(self, tmp_path) -> None:
        rng = np.random.default_rng(5)
        frame = pd.DataFrame({
            "region": rng.choice(["north", "south"], 200),
            "default": rng.choice(["current", "default"], 200),
        })
        handle = write_frame(frame, tmp_path / "r.csv")
        model = train(Formula("default", ("region",)), handle, "logistic")
        preds = predict_frame(model, pd.DataFrame({"region": ["east"]}))
        assert preds.iloc[0].sum() == pytest.approx(1.0)
