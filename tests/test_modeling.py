"""Tests for tsa_volumes.modeling / prediction / metrics on a synthetic series."""

import numpy as np
import pandas as pd
import pytest
from rich.console import Console

from tsa_volumes.features import augment_features
from tsa_volumes.metrics import counts_from_log, error_summary, score_split
from tsa_volumes.modeling import (
    add_log_target,
    build_model_zoo,
    default_features,
    design_matrix,
    evaluate_models,
    fit_holiday_effects,
    make_preprocessor,
    split_by_date,
    split_columns,
)
from tsa_volumes.prediction import fit_and_predict

HOLIDAYS = {
    pd.Timestamp("2022-07-04"): "Independence Day",
    pd.Timestamp("2022-11-24"): "Thanksgiving",
    pd.Timestamp("2023-07-04"): "Independence Day",
    pd.Timestamp("2023-11-23"): "Thanksgiving",
}


@pytest.fixture
def model_table() -> pd.DataFrame:
    """Two years of counts: weekday pattern, a Saturday dip, a holiday dip and lift around holidays."""
    rng = np.random.default_rng(7)
    dates = pd.date_range("2022-01-01", "2023-12-31", freq="D")
    base = pd.DataFrame({"Date": dates, "Numbers": 0})
    feat = augment_features(base, HOLIDAYS, window_days=5)

    level = np.full(len(feat), 2_000_000.0)
    level *= np.where(feat["Weekday"].astype(str) == "Sat", 0.8, 1.0)
    level *= np.where(feat["IsHoliday"], 0.6, 1.0)
    level *= np.where(feat["SurroundsHoliday"], 1.1, 1.0)
    level *= rng.normal(1.0, 0.01, len(feat))
    feat["Numbers"] = level.round().astype("int64")
    return add_log_target(feat)


class TestMetrics:
    def test_perfect_prediction(self) -> None:
        y = [1.0, 2.0, 3.0]
        assert error_summary(y, y) == {"RMSE": 0.0, "MAE": 0.0, "MAPE_%": 0.0, "sMAPE_%": 0.0}

    def test_known_values(self) -> None:
        assert error_summary([0, 0], [3, 4])["RMSE"] == pytest.approx(np.sqrt(12.5))
        assert error_summary([1, 2], [2, 4])["MAE"] == pytest.approx(1.5)
        assert error_summary([100], [110])["MAPE_%"] == pytest.approx(10.0)

    def test_counts_from_log_clips_negative(self) -> None:
        assert counts_from_log([-5.0])[0] == 0.0
        assert counts_from_log(np.log1p([1234.0]))[0] == pytest.approx(1234.0)

    def test_score_split_reports_both_scales(self) -> None:
        scores = score_split("test", [100.0, 200.0], np.log1p([110.0, 200.0]))
        names = {"RMSE", "MAE", "MAPE_%", "sMAPE_%"}
        assert set(scores) == {f"test_{scale}_{n}" for scale in ("log", "count") for n in names}
        assert scores["test_count_MAE"] == pytest.approx(5.0)
        assert scores["test_count_MAPE_%"] == pytest.approx(5.0)
        assert scores["test_log_MAE"] == pytest.approx((np.log1p(110.0) - np.log1p(100.0)) / 2)

    def test_score_split_counts_are_observed_not_back_transformed(self) -> None:
        scores = score_split("train", [0.0, 50.0], np.log1p([0.0, 50.0]))
        assert scores["train_count_RMSE"] == pytest.approx(0.0, abs=1e-9)
        assert scores["train_log_RMSE"] == pytest.approx(0.0, abs=1e-12)


class TestDesign:
    def test_split_columns(self) -> None:
        num, cat = split_columns(default_features())
        assert cat == ["Weekday", "NearestHoliday", "Year"]
        assert "IsHoliday" in num and "SurroundsHoliday" in num

    def test_design_matrix_types(self, model_table) -> None:
        X = design_matrix(model_table, default_features())
        assert X["IsHoliday"].dtype == float
        assert X["Year"].iloc[0] == "2022"

    def test_preprocessor_emits_dense_one_hot(self, model_table) -> None:
        num, cat = split_columns(default_features())
        pre = make_preprocessor(num, cat)
        assert pre.transformers[0][1].sparse_output is False
        Xt = pre.fit_transform(design_matrix(model_table, default_features()))
        assert isinstance(Xt, np.ndarray)

    def test_log_target(self) -> None:
        df = add_log_target(pd.DataFrame({"Numbers": [0, 9]}))
        assert df["y"].tolist() == pytest.approx([0.0, np.log(10)])


class TestFitHolidayEffects:
    def test_recovers_weekday_and_holiday_effects(self, model_table) -> None:
        _, coefs = fit_holiday_effects(model_table)
        c = dict(zip(coefs["term"], coefs["coef"]))

        assert coefs["term"].iloc[0] == "(intercept)"
        # baseline weekday is Fri; Saturday is ~log(0.8) below it
        assert c["Weekday_Sat"] == pytest.approx(np.log(0.8), abs=0.03)
        assert c["IsHoliday"] == pytest.approx(np.log(0.6), abs=0.05)
        assert c["SurroundsHoliday"] == pytest.approx(np.log(1.1), abs=0.03)

    def test_default_target_is_log_counts(self, model_table) -> None:
        _, by_default = fit_holiday_effects(model_table.drop(columns=["Numbers"]))
        _, explicit = fit_holiday_effects(model_table, target="y")
        pd.testing.assert_frame_equal(by_default, explicit)

    def test_predicts_on_training_rows(self, model_table) -> None:
        pipe, _ = fit_holiday_effects(model_table)
        pred = pipe.predict(design_matrix(model_table, default_features()))
        assert error_summary(model_table["y"], pred)["RMSE"] < 0.05


class TestEvaluation:
    def test_split_by_date(self, model_table) -> None:
        train, test = split_by_date(model_table, pd.Timestamp("2023-07-01"))
        assert train["Date"].max() < pd.Timestamp("2023-07-01") <= test["Date"].min()
        assert len(train) + len(test) == len(model_table)

    def test_evaluate_models_reports_every_model(self, model_table) -> None:
        train, test = split_by_date(model_table, pd.Timestamp("2023-07-01"))
        res = evaluate_models(train, test, n_jobs=1, console=Console(quiet=True))

        num, cat = split_columns(default_features())
        assert set(res["model"]) == set(build_model_zoo(make_preprocessor(num, cat)))
        assert "test_count_RMSE" in res.columns
        lin = res.set_index("model").loc["LinearRegression", "test_log_RMSE"]
        dummy = res.set_index("model").loc["DummyMean", "test_log_RMSE"]
        assert lin < dummy

    def test_fit_and_predict_tidy_output(self, model_table) -> None:
        train, test = split_by_date(model_table, pd.Timestamp("2023-07-01"))
        num, cat = split_columns(default_features())
        model = build_model_zoo(make_preprocessor(num, cat))["LinearRegression"]

        pred = fit_and_predict(model, train, test)
        assert list(pred.columns) == ["split", "Date", "y_true", "y_pred", "count_true", "count_pred", "residual"]
        assert (pred["split"] == "train").sum() == len(train)
        assert (pred["split"] == "test").sum() == len(test)
        assert np.allclose(pred["residual"], pred["count_true"] - pred["count_pred"])
        assert np.array_equal(pred["count_true"], np.concatenate([train["Numbers"], test["Numbers"]]).astype(float))
