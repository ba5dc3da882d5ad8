# estimating-engine/bid_estimator/data_loader.py
import os
import logging

import numpy as np
import pandas as pd
from sklearn.preprocessing import StandardScaler
from sqlalchemy.exc import SQLAlchemyError

from .custom_exceptions import DatasetLoadError, InvalidParameterError
from .db_utils import get_db_engine
from .schemas import BidStatus, CATEGORY_LABELS, ClientType, PROJECT_CATEGORIES
from .settings import settings

# Set up a logger for this module
logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["project_type", "amount", "percent_of", "status", "client_type"]
DESCRIPTIVE_COLUMNS = ["city", "state"]
HISTORY_COLUMNS = [
    "category", "amount", "percent_of_raw", "percent_of_scaled",
    "status", "client_type", "city", "state",
]

# Raw project types may carry either the short code or the label
_CATEGORY_LOOKUP = {code.lower(): label for code, label in PROJECT_CATEGORIES.items()}
_CATEGORY_LOOKUP.update({label.lower(): label for label in CATEGORY_LABELS})


def empty_history() -> pd.DataFrame:
    """Returns a history frame with the right columns and no rows."""
    df = pd.DataFrame({column: pd.Series(dtype="object") for column in HISTORY_COLUMNS})
    df["category"] = pd.Categorical([], categories=CATEGORY_LABELS, ordered=True)
    df["amount"] = df["amount"].astype(float)
    df["percent_of_raw"] = df["percent_of_raw"].astype(float)
    df["percent_of_scaled"] = df["percent_of_scaled"].astype(float)
    return df


def prepare_history(raw_df: pd.DataFrame) -> pd.DataFrame:
    """
    Types and filters raw bid rows into the history frame used by every
    computation. Only Won/Lost outcomes survive. The unscaled OH&P value is
    kept in `percent_of_raw`; `percent_of_scaled` is a separate standardised copy.
    """
    missing = [column for column in REQUIRED_COLUMNS if column not in raw_df.columns]
    if missing:
        raise InvalidParameterError(f"Bid history is missing required columns: {', '.join(missing)}")

    df = raw_df.copy()
    for column in DESCRIPTIVE_COLUMNS:
        if column not in df.columns:
            df[column] = ""
    total = len(df)

    df["status"] = df["status"].astype(str).str.strip().str.title()
    df = df[df["status"].isin([s.value for s in BidStatus])].copy()
    if len(df) < total:
        logger.info(f"Excluded {total - len(df)} records without a Won/Lost outcome.")

    df["category"] = df["project_type"].astype(str).str.strip().str.lower().map(_CATEGORY_LOOKUP)
    df["client_type"] = df["client_type"].astype(str).str.strip().str.title()
    df["amount"] = pd.to_numeric(df["amount"], errors="coerce").astype(float)
    df["percent_of_raw"] = pd.to_numeric(df["percent_of"], errors="coerce").astype(float)

    before = len(df)
    df = df.dropna(subset=["category", "amount", "percent_of_raw"])
    df = df[
        np.isfinite(df["amount"]) & np.isfinite(df["percent_of_raw"])
        & (df["amount"] > 0) & df["client_type"].isin([c.value for c in ClientType])
    ].copy()
    if len(df) < before:
        logger.warning(f"Dropped {before - len(df)} records with an unknown project type, client type or invalid amount.")

    if df.empty:
        logger.warning("No usable bid records after filtering.")
        return empty_history()

    df = df.reset_index(drop=True)
    df["category"] = pd.Categorical(df["category"], categories=CATEGORY_LABELS, ordered=True)
    df["amount"] = df["amount"].astype(float)
    df["percent_of_raw"] = df["percent_of_raw"].astype(float)
    df["percent_of_scaled"] = StandardScaler().fit_transform(df[["percent_of_raw"]]).ravel()
    df["city"] = df["city"].fillna("").astype(str)
    df["state"] = df["state"].fillna("").astype(str)

    logger.info(f"Prepared {len(df)} historical bid records.")
    return df[HISTORY_COLUMNS]


def load_history_from_csv(path: str) -> pd.DataFrame:
    """Reads a flat bid-history export and prepares it."""
    if not os.path.exists(path):
        raise DatasetLoadError(f"Bid history file does not exist at path: {path}")

    logger.info(f"Reading bid history from {path}")
    try:
        raw_df = pd.read_csv(path)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise DatasetLoadError(f"Failed to read bid history from {path}. Error: {e}")
    return prepare_history(raw_df)


def load_history_from_db(engine, table_name: str) -> pd.DataFrame:
    """Fetches the bid history table from the database and prepares it."""
    if not table_name.isidentifier():
        raise InvalidParameterError(f"Invalid history table name: '{table_name}'")

    logger.info(f"Fetching bid history from table '{table_name}'")
    query = f"SELECT {', '.join(REQUIRED_COLUMNS + DESCRIPTIVE_COLUMNS)} FROM {table_name}"
    try:
        raw_df = pd.read_sql(query, engine)
    except SQLAlchemyError as e:
        raise DatasetLoadError(f"Failed to fetch bid history from table '{table_name}'. Error: {e}")
    return prepare_history(raw_df)


def load_history() -> pd.DataFrame:
    """Loads the bid history from the source named in the application settings."""
    if settings.history_source == "db":
        return load_history_from_db(get_db_engine(), settings.history_table)
    return load_history_from_csv(settings.history_csv_path)
