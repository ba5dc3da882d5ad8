# estimating-engine/bid_estimator/training_manager.py
import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.compose import ColumnTransformer
from sklearn.linear_model import LinearRegression, LogisticRegression
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder, StandardScaler

from .balancer import balance_records
from .custom_exceptions import InsufficientDataError
from .schemas import BidStatus, TrainingSummary

# Set up a logger for this module
logger = logging.getLogger(__name__)

CATEGORICAL_FEATURES = ["category", "client_type"]
NUMERIC_FEATURES = ["log_amount"]


@dataclass
class BalancedModels:
    """Opaque handles for the models trained on the balanced sample."""
    classifier: Pipeline
    regressor: Pipeline
    summary: TrainingSummary


def build_feature_frame(records: pd.DataFrame) -> pd.DataFrame:
    features = records[CATEGORICAL_FEATURES].astype(str)
    features["log_amount"] = np.log(records["amount"].to_numpy(dtype=float))
    return features


def _preprocessor() -> ColumnTransformer:
    return ColumnTransformer([
        ("cat", OneHotEncoder(handle_unknown="ignore"), CATEGORICAL_FEATURES),
        ("num", StandardScaler(), NUMERIC_FEATURES),
    ])


def train_balanced_models(records: pd.DataFrame, seed: int) -> BalancedModels:
    """
    Balances the history and fits a win classifier and an OH&P regressor on it.

    The classifier predicts Won from project type, client type and log(amount);
    the regressor predicts the standardised OH&P percentage from the same
    features. Nothing else in the engine consumes these models and they are not
    persisted.
    """
    logger.info(f"Training balanced models with seed {seed}...")
    sample = balance_records(records, seed)
    if sample.empty:
        raise InsufficientDataError("Balanced sample is empty: the history needs both Won and Lost records.")

    X = build_feature_frame(sample)
    y_won = (sample["status"] == BidStatus.WON.value).astype(int)
    y_percent = sample["percent_of_scaled"].to_numpy(dtype=float)

    classifier = Pipeline([
        ("prep", _preprocessor()),
        ("model", LogisticRegression(max_iter=2000)),
    ])
    classifier.fit(X, y_won)

    regressor = Pipeline([
        ("prep", _preprocessor()),
        ("model", LinearRegression()),
    ])
    regressor.fit(X, y_percent)

    summary = TrainingSummary(
        seed=seed,
        balanced_sample_size=len(sample),
        class_counts={status: int(count) for status, count in sample["status"].value_counts().items()},
        classifier=type(classifier.named_steps["model"]).__name__,
        regressor=type(regressor.named_steps["model"]).__name__,
        classifier_train_accuracy=float(classifier.score(X, y_won)),
        regressor_train_r2=float(regressor.score(X, y_percent)),
    )
    logger.info(f"Trained {summary.classifier} and {summary.regressor} on {summary.balanced_sample_size} records.")
    return BalancedModels(classifier=classifier, regressor=regressor, summary=summary)
