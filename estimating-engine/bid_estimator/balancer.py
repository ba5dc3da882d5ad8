# estimating-engine/bid_estimator/balancer.py
import logging

import numpy as np
import pandas as pd

from .schemas import BidStatus

# Set up a logger for this module
logger = logging.getLogger(__name__)


def as_generator(seed) -> np.random.Generator:
    """Accepts a seed or an existing generator and returns a generator."""
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def balance_records(records: pd.DataFrame, seed) -> pd.DataFrame:
    """
    Builds an equal-count Won/Lost sample for model training.

    min(|Won|, |Lost|) rows are drawn without replacement from each outcome,
    then the combined sample is shuffled once with the same generator, so the
    same records and seed always give the same row order. If either outcome
    is absent the sample is empty.
    """
    rng = as_generator(seed)
    won_index = np.flatnonzero((records["status"] == BidStatus.WON.value).to_numpy())
    lost_index = np.flatnonzero((records["status"] == BidStatus.LOST.value).to_numpy())
    n = min(len(won_index), len(lost_index))

    if n == 0:
        logger.warning("Cannot balance bid history: one of the outcomes has no records.")
        return records.iloc[0:0].copy()

    chosen = np.concatenate([
        rng.choice(won_index, size=n, replace=False),
        rng.choice(lost_index, size=n, replace=False),
    ])
    chosen = rng.permutation(chosen)

    logger.info(f"Balanced sample built with {n} Won and {n} Lost records.")
    return records.iloc[chosen].reset_index(drop=True)
