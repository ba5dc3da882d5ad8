# estimating-engine/bid_estimator/schemas.py
from datetime import date
from enum import Enum
from typing import Dict, List, Tuple

from pydantic import BaseModel, ConfigDict

# --- Reference Data ---
# Fixed project-type set, in display order. Codes appear in raw exports,
# labels everywhere downstream.
PROJECT_CATEGORIES: Dict[str, str] = {
    "CM": "Commercial",
    "ED": "Education",
    "HC": "Healthcare",
    "HO": "Hospitality",
    "IN": "Industrial",
    "MF": "Multi-Family",
    "PW": "Public Works",
    "RT": "Retail",
}
CATEGORY_LABELS: Tuple[str, ...] = tuple(PROJECT_CATEGORIES.values())


class BidStatus(str, Enum):
    WON = "Won"
    LOST = "Lost"


class ClientType(str, Enum):
    EXISTING = "Existing"
    NEW = "New"


class Frequency(str, Enum):
    DAYS = "Days"
    WEEKS = "Weeks"
    MONTHS = "Months"


class ForecastResult(str, Enum):
    WIN = "Win"
    LOSS = "Loss"


# --- Forecast Schemas ---
class WinProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str
    avg_amount: float
    win_rate: float
    record_count: int


class ForecastRequest(BaseModel):
    # Enumerated fields stay plain strings here so that unsupported values
    # surface as InvalidParameterError from the simulator, not as a parse error.
    start_date: date
    period_count: int
    frequency: str
    client_type: str
    win_threshold: float


class SimulatedOutcome(BaseModel):
    category: str
    date: date
    client_type: str
    predicted_win_probability: float
    predicted_amount: float
    result: ForecastResult


class ForecastResponse(BaseModel):
    request: ForecastRequest
    rows: List[SimulatedOutcome]


# --- OH&P Schemas ---
class OHPEstimate(BaseModel):
    target_amount: float
    predicted_percent: float
    predicted_dollar_value: float


class ScatterPoint(BaseModel):
    amount: float
    percent_of: float
    status: BidStatus


class CurvePoint(BaseModel):
    amount: float
    percent_of: float


class HighlightPoint(BaseModel):
    amount: float
    percent_of: float
    label: str


class OHPEstimateResponse(BaseModel):
    estimate: OHPEstimate
    intercept: float
    slope: float
    scatter: List[ScatterPoint]
    curve: List[CurvePoint]
    highlight: HighlightPoint


# --- Diagnostics & Training Schemas ---
class DatasetSummary(BaseModel):
    dataset_version: int
    record_count: int
    status_counts: Dict[str, int]
    category_counts: Dict[str, int]


class TrainingSummary(BaseModel):
    seed: int
    balanced_sample_size: int
    class_counts: Dict[str, int]
    classifier: str
    regressor: str
    classifier_train_accuracy: float
    regressor_train_r2: float
