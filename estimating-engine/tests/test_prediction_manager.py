"""
Tests for the per-period forecast simulator.

The simulator draws from an explicit generator, so expected values can be
reproduced here by replaying the same draws.
"""

from datetime import date

import numpy as np
import pandas as pd
import pytest

from bid_estimator.custom_exceptions import InvalidParameterError
from bid_estimator.prediction_manager import (
    forecast_to_frame,
    generate_time_points,
    simulate_forecast,
)
from bid_estimator.profile_manager import build_win_profiles
from bid_estimator.schemas import ForecastRequest, ForecastResult, WinProfile


def make_request(**overrides) -> ForecastRequest:
    fields = dict(
        start_date=date(2024, 1, 31),
        period_count=4,
        frequency="Months",
        client_type="Existing",
        win_threshold=0.5,
    )
    fields.update(overrides)
    return ForecastRequest(**fields)


def profile(category: str, avg_amount: float, win_rate: float) -> WinProfile:
    return WinProfile(category=category, avg_amount=avg_amount, win_rate=win_rate, record_count=10)


@pytest.fixture
def profiles():
    # Given out of category order on purpose
    return {
        "Retail": profile("Retail", 200_000, 0.3),
        "Commercial": profile("Commercial", 1_000_000, 0.6),
        "Healthcare": profile("Healthcare", 4_000_000, 0.5),
    }


class TestGenerateTimePoints:

    def test_days_are_exact(self) -> None:
        points = generate_time_points(date(2024, 2, 27), 4, "Days")
        assert points == [date(2024, 2, 27), date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]

    def test_weeks_keep_the_weekday(self) -> None:
        points = generate_time_points(date(2024, 12, 25), 3, "Weeks")
        assert points == [date(2024, 12, 25), date(2025, 1, 1), date(2025, 1, 8)]

    def test_months_follow_the_calendar(self) -> None:
        points = generate_time_points(date(2024, 1, 31), 4, "Months")
        assert points == [date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30)]

    def test_dates_past_the_supported_range_raise(self) -> None:
        with pytest.raises(InvalidParameterError):
            generate_time_points(date(2262, 4, 1), 30, "Days")

    def test_far_future_start_date_raises(self) -> None:
        with pytest.raises(InvalidParameterError):
            generate_time_points(date(3000, 1, 1), 2, "Months")

    def test_unknown_frequency_raises(self) -> None:
        with pytest.raises(InvalidParameterError):
            generate_time_points(date(2024, 1, 1), 2, "Years")


class TestSimulateForecast:

    def test_row_count_is_periods_times_profiled_categories(self, profiles) -> None:
        rows = simulate_forecast(make_request(period_count=5), profiles, 1)
        assert len(rows) == 15

    def test_rows_are_category_major_in_category_order(self, profiles) -> None:
        rows = simulate_forecast(make_request(), profiles, 1)

        categories = [row.category for row in rows]
        assert categories == ["Commercial"] * 4 + ["Healthcare"] * 4 + ["Retail"] * 4
        assert [row.date for row in rows[:4]] == generate_time_points(date(2024, 1, 31), 4, "Months")

    def test_categories_without_profile_are_skipped(self, profiles) -> None:
        rows = simulate_forecast(make_request(), {"Retail": profiles["Retail"]}, 1)

        assert {row.category for row in rows} == {"Retail"}

    def test_no_profiles_gives_no_rows(self) -> None:
        assert simulate_forecast(make_request(), {}, 1) == []

    def test_client_type_is_echoed(self, profiles) -> None:
        rows = simulate_forecast(make_request(client_type="New"), profiles, 1)
        assert {row.client_type for row in rows} == {"New"}

    def test_probabilities_are_clamped(self) -> None:
        extremes = {"Commercial": profile("Commercial", 1_000_000, 1.0), "Retail": profile("Retail", 100_000, 0.0)}

        rows = simulate_forecast(make_request(period_count=200, frequency="Days"), extremes, 4)

        probabilities = [row.predicted_win_probability for row in rows]
        assert all(0.0 <= p <= 1.0 for p in probabilities)
        assert 1.0 in probabilities and 0.0 in probabilities

    def test_threshold_uses_unrounded_probability(self, profiles) -> None:
        request = make_request(period_count=50, frequency="Days", win_threshold=0.55)
        rows = simulate_forecast(request, {"Commercial": profiles["Commercial"]}, 21)

        # Replay the generator: amounts are drawn first, then probabilities
        rng = np.random.default_rng(21)
        amounts = rng.normal(1_000_000, 0.15 * 1_000_000, size=50)
        probabilities = np.clip(rng.normal(0.6, 0.05, size=50), 0.0, 1.0)

        for row, amount, probability in zip(rows, amounts, probabilities):
            expected = ForecastResult.WIN if probability >= 0.55 else ForecastResult.LOSS
            assert row.result == expected
            assert row.predicted_win_probability == round(float(probability), 3)
            assert row.predicted_amount == round(float(amount), 2)

    def test_probability_that_rounds_up_to_threshold_is_a_loss(self, profiles) -> None:
        # Find a draw whose 3-decimal rounding lands above the raw value
        rng = np.random.default_rng(31)
        rng.normal(1_000_000, 0.15 * 1_000_000, size=50)
        probabilities = np.clip(rng.normal(0.6, 0.05, size=50), 0.0, 1.0)
        index = next(i for i, p in enumerate(probabilities) if round(float(p), 3) > p)
        threshold = round(float(probabilities[index]), 3)

        request = make_request(period_count=50, frequency="Days", win_threshold=threshold)
        rows = simulate_forecast(request, {"Commercial": profiles["Commercial"]}, 31)

        assert rows[index].predicted_win_probability == threshold
        assert rows[index].result == ForecastResult.LOSS

    def test_probability_exactly_at_threshold_is_a_win(self, profiles) -> None:
        rng = np.random.default_rng(31)
        rng.normal(1_000_000, 0.15 * 1_000_000, size=50)
        probabilities = np.clip(rng.normal(0.6, 0.05, size=50), 0.0, 1.0)

        request = make_request(period_count=50, frequency="Days", win_threshold=float(probabilities[0]))
        rows = simulate_forecast(request, {"Commercial": profiles["Commercial"]}, 31)

        assert rows[0].result == ForecastResult.WIN

    def test_zero_threshold_makes_every_row_a_win(self, profiles) -> None:
        rows = simulate_forecast(make_request(win_threshold=0.0, period_count=30), profiles, 8)
        assert all(row.result == ForecastResult.WIN for row in rows)

    def test_full_threshold_needs_a_probability_clamped_to_one(self, profiles) -> None:
        rows = simulate_forecast(make_request(win_threshold=1.0, period_count=30), profiles, 8)
        assert all(row.result == ForecastResult.LOSS for row in rows)

        certain = {"Commercial": profile("Commercial", 1_000_000, 1.0)}
        rows = simulate_forecast(make_request(win_threshold=1.0, period_count=100), certain, 8)
        wins = [row for row in rows if row.result == ForecastResult.WIN]
        assert wins
        assert all(row.predicted_win_probability == 1.0 for row in wins)

    def test_identically_seeded_generators_give_identical_output(self, profiles) -> None:
        request = make_request(period_count=12)

        first = simulate_forecast(request, profiles, np.random.default_rng(2024))
        second = simulate_forecast(request, profiles, np.random.default_rng(2024))

        assert [row.model_dump_json() for row in first] == [row.model_dump_json() for row in second]

    def test_scenario_amounts_stay_near_the_profile_mean(self, scenario_history) -> None:
        profiles = build_win_profiles(scenario_history)

        rows = simulate_forecast(make_request(period_count=3, win_threshold=0.5), profiles, 77)

        commercial = [row for row in rows if row.category == "Commercial"]
        assert len(commercial) == 3
        for row in commercial:
            assert abs(row.predicted_amount - 1_000_000) < 5 * 150_000


class TestRequestValidation:

    @pytest.mark.parametrize("overrides", [
        {"period_count": 0},
        {"frequency": "Years"},
        {"client_type": "Prospect"},
        {"win_threshold": -0.01},
        {"win_threshold": 1.5},
    ])
    def test_bad_requests_are_rejected_before_drawing(self, profiles, overrides) -> None:
        rng = np.random.default_rng(3)
        state = rng.bit_generator.state

        with pytest.raises(InvalidParameterError):
            simulate_forecast(make_request(**overrides), profiles, rng)

        assert rng.bit_generator.state == state


class TestForecastToFrame:

    def test_table_has_display_columns(self, profiles) -> None:
        frame = forecast_to_frame(simulate_forecast(make_request(), profiles, 1))

        assert list(frame.columns) == [
            "Category", "Date", "Client Type", "Predicted Win Probability", "Predicted Amount", "Result",
        ]
        assert len(frame) == 12
        assert set(frame["Result"]) <= {"Win", "Loss"}

    def test_empty_forecast_keeps_columns(self) -> None:
        frame = forecast_to_frame([])
        assert frame.empty
        assert "Predicted Amount" in frame.columns
