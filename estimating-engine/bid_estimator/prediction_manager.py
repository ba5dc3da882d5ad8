# estimating-engine/bid_estimator/prediction_manager.py
import logging
from datetime import date
from typing import Dict, List

import numpy as np
import pandas as pd

from .balancer import as_generator
from .custom_exceptions import InvalidParameterError
from .schemas import (
    CATEGORY_LABELS,
    ClientType,
    ForecastRequest,
    ForecastResult,
    Frequency,
    SimulatedOutcome,
    WinProfile,
)
from .settings import settings

# Set up a logger for this module
logger = logging.getLogger(__name__)

# Weeks and months step on the calendar from the start date; days are exact.
FREQUENCY_OFFSETS = {
    Frequency.DAYS.value: pd.DateOffset(days=1),
    Frequency.WEEKS.value: pd.DateOffset(weeks=1),
    Frequency.MONTHS.value: pd.DateOffset(months=1),
}


def validate_forecast_request(request: ForecastRequest) -> None:
    """
    Checks the request before anything is simulated.
    Raises InvalidParameterError on the first bad field.
    """
    if request.period_count < 1:
        raise InvalidParameterError("Period count must be a positive integer.")
    if request.frequency not in FREQUENCY_OFFSETS:
        raise InvalidParameterError(
            f"Invalid frequency '{request.frequency}'. Choose one of: {', '.join(FREQUENCY_OFFSETS)}."
        )
    if request.client_type not in [c.value for c in ClientType]:
        raise InvalidParameterError(f"Invalid client type '{request.client_type}'. Choose 'Existing' or 'New'.")
    if not 0.0 <= request.win_threshold <= 1.0:
        raise InvalidParameterError("Win threshold must be between 0 and 1.")


def generate_time_points(start_date: date, period_count: int, frequency: str) -> List[date]:
    """Returns `period_count` dates beginning at `start_date`, one frequency unit apart."""
    if frequency not in FREQUENCY_OFFSETS:
        raise InvalidParameterError(f"Invalid frequency '{frequency}'.")
    offset = FREQUENCY_OFFSETS[frequency]
    try:
        start = pd.Timestamp(start_date).as_unit("ns")
        # Each point is offset from the start, so month-end dates clamp without drifting
        return [(start + offset * i).date() for i in range(period_count)]
    except (pd.errors.OutOfBoundsDatetime, OverflowError) as e:
        raise InvalidParameterError(f"Forecast dates starting at {start_date} fall outside the supported range: {e}")


def simulate_forecast(request: ForecastRequest, profiles: Dict[str, WinProfile], rng) -> List[SimulatedOutcome]:
    """
    Simulates one outcome per category per time point.

    For each profiled category, amounts are drawn from
    Normal(avg_amount, amount_sd_ratio * avg_amount) and win probabilities from
    Normal(win_rate, win_probability_sd) clamped to [0, 1]. A point is a Win when
    its unrounded probability reaches the threshold. Rows are category-major in
    the fixed category order; `rng` may be a seed or a numpy Generator.
    """
    validate_forecast_request(request)
    rng = as_generator(rng)
    time_points = generate_time_points(request.start_date, request.period_count, request.frequency)

    rows = []
    for label in CATEGORY_LABELS:
        profile = profiles.get(label)
        if profile is None:
            continue

        amounts = rng.normal(
            loc=profile.avg_amount,
            scale=settings.amount_sd_ratio * profile.avg_amount,
            size=request.period_count,
        )
        probabilities = np.clip(
            rng.normal(loc=profile.win_rate, scale=settings.win_probability_sd, size=request.period_count),
            0.0,
            1.0,
        )

        for point, amount, probability in zip(time_points, amounts, probabilities):
            result = ForecastResult.WIN if probability >= request.win_threshold else ForecastResult.LOSS
            rows.append(SimulatedOutcome(
                category=label,
                date=point,
                client_type=request.client_type,
                predicted_win_probability=round(float(probability), 3),
                predicted_amount=round(float(amount), 2),
                result=result,
            ))

    logger.info(f"Simulated {len(rows)} outcomes over {request.period_count} {request.frequency.lower()} "
                f"for {len(rows) // request.period_count} categories.")
    return rows


def forecast_to_frame(rows: List[SimulatedOutcome]) -> pd.DataFrame:
    """Formats simulated outcomes as a table for display or export."""
    results = pd.DataFrame(
        [row.model_dump(mode="json") for row in rows],
        columns=list(SimulatedOutcome.model_fields),
    )
    return results.rename(columns={
        'category': 'Category',
        'date': 'Date',
        'client_type': 'Client Type',
        'predicted_win_probability': 'Predicted Win Probability',
        'predicted_amount': 'Predicted Amount',
        'result': 'Result',
    })
