"""Tests for per-category win profiles."""

import pandas as pd
import pytest

from bid_estimator.data_loader import empty_history
from bid_estimator.profile_manager import build_win_profiles


class TestBuildWinProfiles:

    def test_profiles_for_present_categories_only(self, history: pd.DataFrame) -> None:
        profiles = build_win_profiles(history)

        assert list(profiles) == ["Commercial", "Healthcare", "Retail"]

    def test_average_amount_and_win_rate(self, history: pd.DataFrame) -> None:
        profiles = build_win_profiles(history)

        commercial = profiles["Commercial"]
        assert commercial.avg_amount == pytest.approx(750_000)
        assert commercial.win_rate == pytest.approx(2 / 3)
        assert commercial.record_count == 3
        assert profiles["Healthcare"].win_rate == pytest.approx(0.5)
        assert profiles["Retail"].win_rate == 0.0

    def test_profile_bounds_hold(self, scenario_history: pd.DataFrame) -> None:
        for profile in build_win_profiles(scenario_history).values():
            assert 0.0 <= profile.win_rate <= 1.0
            assert profile.avg_amount > 0

    def test_scenario_commercial_profile(self, scenario_history: pd.DataFrame) -> None:
        commercial = build_win_profiles(scenario_history)["Commercial"]

        assert commercial.avg_amount == pytest.approx(1_000_000)
        assert commercial.win_rate == pytest.approx(0.6)

    def test_empty_history_gives_no_profiles(self) -> None:
        assert build_win_profiles(empty_history()) == {}
