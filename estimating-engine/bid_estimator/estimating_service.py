# estimating-engine/bid_estimator/estimating_service.py
import logging
from datetime import date
from typing import Dict, List, Optional

import numpy as np
import pandas as pd
from pydantic import ValidationError

from .cache_manager import ResultCache
from .custom_exceptions import InvalidParameterError
from .data_loader import load_history
from .ohp_estimator import (
    OHPModel,
    fit_ohp_model,
    highlight_estimate,
    ohp_curve,
    ohp_scatter,
    predict_ohp,
    validate_target_amount,
)
from .prediction_manager import simulate_forecast, validate_forecast_request
from .profile_manager import build_win_profiles
from .schemas import (
    CATEGORY_LABELS,
    DatasetSummary,
    ForecastRequest,
    OHPEstimateResponse,
    SimulatedOutcome,
    WinProfile,
)
from .training_manager import BalancedModels, train_balanced_models

# Set up a logger for this module
logger = logging.getLogger(__name__)


class EstimatingService:
    """
    Query façade over one bid history.

    Derived results (win profiles, the fitted OH&P model and seeded forecasts)
    are memoised per dataset version; replacing the history invalidates them.
    """

    def __init__(self, history: pd.DataFrame):
        self._history = history
        self._cache = ResultCache()

    @classmethod
    def from_settings(cls) -> "EstimatingService":
        return cls(load_history())

    @property
    def history(self) -> pd.DataFrame:
        return self._history

    @property
    def dataset_version(self) -> int:
        return self._cache.version

    def replace_history(self, history: pd.DataFrame) -> None:
        self._history = history
        self._cache.invalidate()

    # --- Win profiles ---
    def build_win_profiles(self) -> Dict[str, WinProfile]:
        profiles = self._cache.get_or_compute("win_profiles", (), lambda: build_win_profiles(self._history))
        return dict(profiles)

    # --- Forecast ---
    def get_forecast(
        self,
        start_date: date,
        period_count: int,
        frequency: str,
        client_type: str,
        win_threshold: float,
        seed: Optional[int] = None,
    ) -> List[SimulatedOutcome]:
        """
        Simulates the forecast table. With an explicit seed the result is
        reproducible and memoised; without one a fresh generator is used.
        """
        try:
            request = ForecastRequest(
                start_date=start_date,
                period_count=period_count,
                frequency=frequency,
                client_type=client_type,
                win_threshold=win_threshold,
            )
        except ValidationError as e:
            raise InvalidParameterError(f"Invalid forecast request: {e}")
        validate_forecast_request(request)
        profiles = self.build_win_profiles()

        if seed is None:
            return simulate_forecast(request, profiles, np.random.default_rng())

        params = (request.start_date, request.period_count, request.frequency,
                  request.client_type, request.win_threshold, seed)
        rows = self._cache.get_or_compute("forecast", params, lambda: simulate_forecast(request, profiles, seed))
        return [row.model_copy() for row in rows]

    # --- OH&P ---
    def ohp_model(self) -> OHPModel:
        return self._cache.get_or_compute("ohp_model", (), lambda: fit_ohp_model(self._history))

    def get_ohp_estimate(self, target_amount: float) -> OHPEstimateResponse:
        target_amount = validate_target_amount(target_amount)
        model = self.ohp_model()
        estimate = predict_ohp(model, target_amount)
        return OHPEstimateResponse(
            estimate=estimate,
            intercept=model.intercept,
            slope=model.slope,
            scatter=ohp_scatter(self._history),
            curve=ohp_curve(model, target_amount=target_amount),
            highlight=highlight_estimate(estimate),
        )

    # --- Reserved training interface ---
    def train_balanced_models(self, seed: int) -> BalancedModels:
        return train_balanced_models(self._history, seed)

    # --- Diagnostics ---
    def dataset_summary(self) -> DatasetSummary:
        history = self._history
        category_counts = history["category"].value_counts()
        return DatasetSummary(
            dataset_version=self.dataset_version,
            record_count=len(history),
            status_counts={str(k): int(v) for k, v in history["status"].value_counts().items()},
            category_counts={label: int(category_counts.get(label, 0)) for label in CATEGORY_LABELS},
        )
