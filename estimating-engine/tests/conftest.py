"""
Shared fixtures for the estimating engine tests.

Histories are built directly as raw rows and passed through
prepare_history, so every test sees the same typing and filtering the
service applies to real exports.
"""

from typing import List, Optional

import numpy as np
import pandas as pd
import pytest
from sqlalchemy import create_engine

from bid_estimator.data_loader import prepare_history


def pytest_configure(config) -> None:
    config.addinivalue_line("markers", "api: tests that go through the FastAPI app")


def make_raw_bids(
    project_types: List[str],
    amounts: List[float],
    percents: List[float],
    statuses: List[str],
    client_types: Optional[List[str]] = None,
) -> pd.DataFrame:
    n = len(project_types)
    return pd.DataFrame({
        "project_type": project_types,
        "amount": amounts,
        "percent_of": percents,
        "status": statuses,
        "client_type": client_types or ["Existing"] * n,
        "city": ["Austin"] * n,
        "state": ["TX"] * n,
    })


@pytest.fixture
def raw_bids() -> pd.DataFrame:
    """Mixed export: three usable categories plus rows that must be filtered out."""
    return make_raw_bids(
        project_types=["CM", "CM", "CM", "HC", "HC", "Retail", "PW", "CM", "XX", "ED"],
        amounts=[250_000, 1_200_000, 800_000, 5_000_000, 3_000_000, 150_000, 2_000_000, 400_000, 500_000, -10],
        percents=[12.0, 9.0, 10.0, 6.5, 7.0, 14.0, 8.0, 11.0, 10.0, 10.0],
        statuses=["Won", "Lost", "won", "Lost", "Won", "Lost", "Pending", "No Bid", "Won", "Lost"],
        client_types=["Existing", "New", "Existing", "New", "Existing", "New", "Existing", "New", "New", "New"],
    )


@pytest.fixture
def history(raw_bids: pd.DataFrame) -> pd.DataFrame:
    return prepare_history(raw_bids)


@pytest.fixture
def scenario_history() -> pd.DataFrame:
    """
    100 bids, 50 Won and 50 Lost. Commercial has 50 bids averaging exactly
    $1,000,000 with a 0.6 win rate; Industrial holds the remaining outcomes.
    """
    commercial_amounts = list(1_000_000 + np.tile([-100_000.0, 100_000.0], 25))
    commercial_statuses = ["Won"] * 30 + ["Lost"] * 20
    industrial_amounts = list(np.linspace(200_000, 4_000_000, 50))
    industrial_statuses = ["Won"] * 20 + ["Lost"] * 30
    return prepare_history(make_raw_bids(
        ["CM"] * 50 + ["IN"] * 50,
        commercial_amounts + industrial_amounts,
        list(np.linspace(12.0, 6.0, 100)),
        commercial_statuses + industrial_statuses,
    ))


@pytest.fixture
def even_outcome_history() -> pd.DataFrame:
    """100 bids over two categories, 50 Won and 50 Lost."""
    project_types = ["CM"] * 60 + ["IN"] * 40
    amounts = list(np.linspace(100_000, 6_000_000, 100))
    percents = list(np.linspace(14.0, 5.0, 100))
    statuses = ["Won", "Lost"] * 50
    return prepare_history(make_raw_bids(project_types, amounts, percents, statuses))


@pytest.fixture
def sqlite_engine():
    engine = create_engine("sqlite://")
    yield engine
    engine.dispose()
