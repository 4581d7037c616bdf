"""Tests for the simulator, data checks and dataset summaries."""

import numpy as np
import pandas as pd
import pytest

from core.errors import ConfigurationError
from core.schema import MORTGAGE_DEFAULT_COLUMNS, ColumnType
from data_prep.simulate import MortgageSimulationParams, simulate_mortgage_defaults, write_mortgage_dataset
from data_prep.summary import summarize_dataset
from data_prep.validators import validate_mortgage_dataset


class TestSimulate:
    def test_columns_and_ranges(self, mortgage_frame) -> None:
        assert list(mortgage_frame.columns) == list(MORTGAGE_DEFAULT_COLUMNS)
        assert mortgage_frame["creditScore"].between(300, 850).all()
        assert (mortgage_frame["ccDebt"] >= 0).all()
        assert list(mortgage_frame["default"].cat.categories) == ["current", "default"]

    def test_reproducible(self) -> None:
        a = simulate_mortgage_defaults(300, seed=4)
        b = simulate_mortgage_defaults(300, seed=4)
        pd.testing.assert_frame_equal(a, b)
        assert not a.equals(simulate_mortgage_defaults(300, seed=5))

    def test_default_rate_follows_base_logit(self) -> None:
        low = simulate_mortgage_defaults(5000, seed=1, params=MortgageSimulationParams(base_logit=-4.0))
        high = simulate_mortgage_defaults(5000, seed=1, params=MortgageSimulationParams(base_logit=0.0))
        assert (low["default"] == "default").mean() < (high["default"] == "default").mean()

    def test_negative_rows_rejected(self, tmp_path) -> None:
        with pytest.raises(ConfigurationError):
            simulate_mortgage_defaults(-1)
        with pytest.raises(ConfigurationError):
            write_mortgage_dataset(tmp_path / "x.parquet", -1)

    def test_write_blockwise(self, tmp_path) -> None:
        handle = write_mortgage_dataset(tmp_path / "sim.csv", 1050, seed=2, block_size=200)
        assert handle.num_rows == 1050
        assert handle.schema["default"].ctype is ColumnType.CATEGORICAL
        assert handle.schema["default"].levels == ("current", "default")

    def test_write_zero_rows(self, tmp_path) -> None:
        handle = write_mortgage_dataset(tmp_path / "empty.parquet", 0)
        assert handle.num_rows == 0
        assert handle.columns == list(MORTGAGE_DEFAULT_COLUMNS)


class TestValidate:
    def test_clean_data_passes(self, mortgage_frame) -> None:
        result = validate_mortgage_dataset(mortgage_frame)
        assert result.is_valid
        assert result.summary() == "All checks passed."

    def test_missing_columns(self, mortgage_frame) -> None:
        result = validate_mortgage_dataset(mortgage_frame.drop(columns=["ccDebt"]))
        assert not result.is_valid
        assert "ccDebt" in result.errors[0]

    def test_empty(self, mortgage_frame) -> None:
        assert not validate_mortgage_dataset(mortgage_frame.iloc[:0]).is_valid

    def test_unknown_response_level(self, mortgage_frame) -> None:
        frame = mortgage_frame.assign(default=mortgage_frame["default"].astype(str))
        frame.loc[0, "default"] = "paid_off"
        result = validate_mortgage_dataset(frame)
        assert any("paid_off" in e for e in result.errors)

    def test_single_class(self, mortgage_frame) -> None:
        frame = mortgage_frame.assign(default="current")
        result = validate_mortgage_dataset(frame)
        assert any("single class" in e for e in result.errors)

    def test_negative_debt_and_odd_scores(self, mortgage_frame) -> None:
        frame = mortgage_frame.copy()
        frame.loc[0, "ccDebt"] = -10.0
        frame.loc[1, "creditScore"] = 900
        result = validate_mortgage_dataset(frame)
        assert any("negative ccDebt" in e for e in result.errors)
        assert any("creditScore outside" in w for w in result.warnings)
        assert "ERRORS (1)" in result.summary()

    def test_imbalance_warning(self, mortgage_frame) -> None:
        frame = mortgage_frame.assign(default="current")
        frame.loc[0, "default"] = "default"
        result = validate_mortgage_dataset(frame)
        assert result.is_valid
        assert any("Minority class" in w for w in result.warnings)


class TestSummary:
    def test_matches_pandas(self, mortgage_parquet, mortgage_frame) -> None:
        summary = summarize_dataset(mortgage_parquet).set_index("column")
        assert list(summary.index) == list(MORTGAGE_DEFAULT_COLUMNS)

        credit = mortgage_frame["creditScore"]
        assert summary.loc["creditScore", "count"] == 2000
        assert summary.loc["creditScore", "mean"] == pytest.approx(credit.mean())
        assert summary.loc["creditScore", "std"] == pytest.approx(credit.std(ddof=0), rel=1e-6)
        assert summary.loc["creditScore", "min"] == credit.min()

        levels = summary.loc["default", "levels"]
        assert summary.loc["default", "type"] == "categorical"
        assert sum(levels.values()) == 2000
        assert levels["default"] == int((mortgage_frame["default"] == "default").sum())
        assert np.isnan(summary.loc["default", "mean"])

    def test_counts_missing(self, tmp_path) -> None:
        from data_prep.dataset import write_frame

        handle = write_frame(pd.DataFrame({"x": [1.0, np.nan, 3.0]}), tmp_path / "m.csv", block_size=2)
        row = summarize_dataset(handle).iloc[0]
        assert row["count"] == 2 and row["missing"] == 1
        assert row["mean"] == pytest.approx(2.0)

    def test_std_of_large_offset_values_across_blocks(self, tmp_path) -> None:
        from data_prep.dataset import write_frame

        values = 1e9 + np.random.default_rng(6).normal(0.0, 1.0, 5000)
        handle = write_frame(pd.DataFrame({"balance": values}), tmp_path / "big.parquet", block_size=333)
        row = summarize_dataset(handle).iloc[0]
        assert row["mean"] == pytest.approx(values.mean(), rel=1e-12)
        assert row["std"] == pytest.approx(values.std(ddof=0), rel=1e-6)
