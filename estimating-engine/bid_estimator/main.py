# estimating-engine/bid_estimator/main.py
import logging
from datetime import date
from functools import lru_cache
from typing import Annotated, List, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse

# Import our schemas and exceptions
from .schemas import (
    DatasetSummary,
    ForecastRequest,
    ForecastResponse,
    OHPEstimateResponse,
    TrainingSummary,
    WinProfile,
)
from .custom_exceptions import DatasetLoadError, InsufficientDataError, InvalidParameterError
from .estimating_service import EstimatingService
from .settings import settings

# Set up a logger for this module
logger = logging.getLogger(__name__)


app = FastAPI(
    title="Bid Estimating & Forecast API",
    description="An API to forecast bid outcomes per project type and recommend OH&P for a target amount.",
    version="1.0.0"
)


@lru_cache()
def get_service() -> EstimatingService:
    """Loads the bid history once per process and shares the service."""
    logger.info(f"Loading bid history from the '{settings.history_source}' source")
    return EstimatingService.from_settings()


# --- Exception Handlers ---
# This makes our error handling clean and centralized.
@app.exception_handler(InvalidParameterError)
async def invalid_parameter_exception_handler(request: Request, exc: InvalidParameterError):
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc)},
    )

@app.exception_handler(InsufficientDataError)
async def insufficient_data_exception_handler(request: Request, exc: InsufficientDataError):
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc)},
    )

@app.exception_handler(DatasetLoadError)
async def dataset_load_exception_handler(request: Request, exc: DatasetLoadError):
    logger.error(f"Bid history could not be loaded: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc)},
    )


# --- Forecast Endpoint ---
@app.get(
    "/forecasts",
    response_model=ForecastResponse,
    tags=["Forecasting"],
    summary="Simulate win/loss outcomes per project type",
    description="Simulates one outcome per project type for each future period, starting at start_date.",
)
def get_forecast(
    service: Annotated[EstimatingService, Depends(get_service)],
    start_date: date,
    period_count: int,
    frequency: str,
    client_type: str,
    win_threshold: float,
    seed: Annotated[Optional[int], Query(description="Seed for a reproducible simulation.")] = None,
) -> ForecastResponse:
    rows = service.get_forecast(start_date, period_count, frequency, client_type, win_threshold, seed=seed)
    request = ForecastRequest(
        start_date=start_date,
        period_count=period_count,
        frequency=frequency,
        client_type=client_type,
        win_threshold=win_threshold,
    )
    return ForecastResponse(request=request, rows=rows)


# --- OH&P Endpoint ---
@app.get("/ohp/estimate", response_model=OHPEstimateResponse, tags=["OH&P"])
def get_ohp_estimate(
    service: Annotated[EstimatingService, Depends(get_service)],
    target_amount: Annotated[float, Query(description="Contract amount to price.")],
) -> OHPEstimateResponse:
    """
    Recommends an OH&P percentage and dollar value for the target amount,
    with the historical scatter and fitted curve for charting.
    """
    return service.get_ohp_estimate(target_amount)


# --- Diagnostics Endpoints ---
@app.get("/diagnostics/win-profiles", response_model=List[WinProfile], tags=["Diagnostics"])
def get_win_profiles(service: Annotated[EstimatingService, Depends(get_service)]):
    """
    Returns the average amount and win rate per project type.
    """
    return list(service.build_win_profiles().values())

@app.get("/diagnostics/dataset", response_model=DatasetSummary, tags=["Diagnostics"])
def get_dataset_summary(service: Annotated[EstimatingService, Depends(get_service)]):
    return service.dataset_summary()


# --- Training Endpoint ---
@app.post("/training/run", response_model=TrainingSummary, tags=["Training"])
def run_training(
    service: Annotated[EstimatingService, Depends(get_service)],
    seed: Annotated[Optional[int], Query(description="Seed for the balanced sample.")] = None,
):
    """
    Trains the win classifier and OH&P regressor on a balanced sample.
    The models are reported on but not persisted or used by other endpoints.
    """
    seed = settings.default_seed if seed is None else seed
    logger.info(f"Received request to train balanced models with seed {seed}.")
    return service.train_balanced_models(seed).summary
