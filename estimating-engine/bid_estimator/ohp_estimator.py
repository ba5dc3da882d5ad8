# estimating-engine/bid_estimator/ohp_estimator.py
import math
import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import pandas as pd

from .custom_exceptions import InsufficientDataError, InvalidParameterError
from .schemas import CurvePoint, HighlightPoint, OHPEstimate, ScatterPoint
from .settings import settings

# Set up a logger for this module
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OHPModel:
    """Fitted line percent_of_raw = intercept + slope * log(amount)."""
    intercept: float
    slope: float
    observation_count: int
    min_amount: float
    max_amount: float

    def percent_at(self, amount):
        return self.intercept + self.slope * np.log(amount)


def fit_ohp_model(records: pd.DataFrame) -> OHPModel:
    """
    Fits ordinary least squares of the unscaled OH&P percentage against
    log(amount) over the whole Won/Lost history.
    Raises InsufficientDataError when fewer than two distinct amounts exist.
    """
    amounts = records["amount"].to_numpy(dtype=float)
    percents = records["percent_of_raw"].to_numpy(dtype=float)

    if not (np.isfinite(amounts).all() and np.isfinite(percents).all()):
        raise InsufficientDataError("Historical amounts and OH&P percentages must all be finite to fit the OH&P model.")
    if len(np.unique(amounts)) < 2:
        raise InsufficientDataError(
            "At least two distinct historical amounts are required to fit the OH&P model."
        )

    slope, intercept = np.polyfit(np.log(amounts), percents, deg=1)
    model = OHPModel(
        intercept=float(intercept),
        slope=float(slope),
        observation_count=len(amounts),
        min_amount=float(amounts.min()),
        max_amount=float(amounts.max()),
    )
    logger.info(f"Fitted OH&P model on {model.observation_count} records: "
                f"percent = {model.intercept:.4f} + {model.slope:.4f} * log(amount)")
    return model


def validate_target_amount(target_amount: float) -> float:
    try:
        value = float(target_amount)
    except (TypeError, ValueError):
        raise InvalidParameterError(f"Target amount must be a number, got '{target_amount}'.")
    if not math.isfinite(value) or value <= 0:
        raise InvalidParameterError("Target amount must be a positive number.")
    return value


def predict_ohp(model: OHPModel, target_amount: float) -> OHPEstimate:
    """Evaluates the fitted line at log(target_amount) and derives the dollar value."""
    target_amount = validate_target_amount(target_amount)
    predicted_percent = float(model.percent_at(target_amount))
    return OHPEstimate(
        target_amount=target_amount,
        predicted_percent=predicted_percent,
        predicted_dollar_value=predicted_percent / 100 * target_amount,
    )


def ohp_curve(model: OHPModel, points: Optional[int] = None, target_amount: Optional[float] = None) -> List[CurvePoint]:
    """
    Samples the fitted curve geometrically across the historical amount range,
    stretched to cover the target amount when one is given.
    """
    points = points or settings.curve_points
    low, high = model.min_amount, model.max_amount
    if target_amount is not None:
        target_amount = validate_target_amount(target_amount)
        low, high = min(low, target_amount), max(high, target_amount)

    amounts = np.geomspace(low, high, num=max(points, 2))
    return [CurvePoint(amount=float(a), percent_of=float(p)) for a, p in zip(amounts, model.percent_at(amounts))]


def ohp_scatter(records: pd.DataFrame) -> List[ScatterPoint]:
    """Historical (amount, unscaled percent, status) points for the chart."""
    return [
        ScatterPoint(amount=amount, percent_of=percent, status=status)
        for amount, percent, status in zip(records["amount"], records["percent_of_raw"], records["status"])
    ]


def highlight_estimate(estimate: OHPEstimate) -> HighlightPoint:
    return HighlightPoint(
        amount=estimate.target_amount,
        percent_of=round(estimate.predicted_percent, 2),
        label=f"{estimate.predicted_percent:.2f}% / ${estimate.predicted_dollar_value:,.2f}",
    )
