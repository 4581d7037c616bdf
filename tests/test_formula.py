"""Tests for formula construction."""

import pytest

from core.errors import ConfigurationError, DataError
from data_prep.dataset import DatasetHandle
from data_prep.formula import Formula, build_formula


class TestBuildFormula:
    SCHEMA = ["a", "b", "c", "default"]

    def test_all_other_columns_are_features(self) -> None:
        f = build_formula(self.SCHEMA, "default")
        assert f.response == "default"
        assert f.features == ("a", "b", "c")

    def test_exclusion(self) -> None:
        assert build_formula(self.SCHEMA, "default", exclude={"a"}).features == ("b", "c")

    def test_unknown_response(self) -> None:
        with pytest.raises(DataError):
            build_formula(self.SCHEMA, "x")

    def test_exclusion_is_exact_name(self) -> None:
        f = build_formula(["year", "yearsEmploy", "creditScore", "default"], "default", exclude=["year"])
        assert f.features == ("yearsEmploy", "creditScore")

    def test_response_substring_of_other_column_stays_a_feature(self) -> None:
        f = build_formula(["default", "default_history", "ccDebt"], "default")
        assert f.features == ("default_history", "ccDebt")
        assert "default" not in f.features

    def test_excluding_unknown_name_is_harmless(self) -> None:
        assert build_formula(self.SCHEMA, "default", exclude={"zzz"}).features == ("a", "b", "c")

    def test_from_mapping_keeps_order(self) -> None:
        f = build_formula({"c": float, "default": str, "a": float}, "default")
        assert f.features == ("c", "a")

    def test_from_dataset_handle(self, mortgage_parquet: DatasetHandle) -> None:
        f = build_formula(mortgage_parquet, "default", exclude={"year"})
        assert f.features == ("creditScore", "houseAge", "yearsEmploy", "ccDebt")

    def test_everything_excluded(self) -> None:
        with pytest.raises(DataError):
            build_formula(self.SCHEMA, "default", exclude={"a", "b", "c"})


class TestFormula:
    def test_str_and_parse(self) -> None:
        f = Formula("default", ("creditScore", "ccDebt"))
        assert str(f) == "default ~ creditScore + ccDebt"
        assert Formula.parse(str(f)) == f

    def test_parse_tolerates_spacing(self) -> None:
        assert Formula.parse("y~a+ b ").features == ("a", "b")

    @pytest.mark.parametrize("text", ["y a + b", "y ~ a ~ b", " ~ a"])
    def test_parse_rejects_malformed(self, text: str) -> None:
        with pytest.raises(ConfigurationError):
            Formula.parse(text)

    def test_response_cannot_be_feature(self) -> None:
        with pytest.raises(DataError):
            Formula("y", ("a", "y"))

    def test_columns(self) -> None:
        assert Formula("y", ("a", "b")).columns == ("y", "a", "b")
