# estimating-engine/bid_estimator/profile_manager.py
import logging
from typing import Dict

import pandas as pd

from .schemas import BidStatus, CATEGORY_LABELS, WinProfile

# Set up a logger for this module
logger = logging.getLogger(__name__)


def build_win_profiles(records: pd.DataFrame) -> Dict[str, WinProfile]:
    """
    Computes the average amount and win rate of every project category
    present in the history. Categories without records get no profile.
    """
    if records.empty:
        return {}

    grouped = (
        records.assign(won=(records["status"] == BidStatus.WON.value).astype(float))
        .groupby("category", observed=True)
        .agg(avg_amount=("amount", "mean"), win_rate=("won", "mean"), record_count=("amount", "size"))
    )

    profiles = {}
    for label in CATEGORY_LABELS:
        if label not in grouped.index:
            continue
        row = grouped.loc[label]
        profiles[label] = WinProfile(
            category=label,
            avg_amount=float(row["avg_amount"]),
            win_rate=float(row["win_rate"]),
            record_count=int(row["record_count"]),
        )

    logger.info(f"Built win profiles for {len(profiles)} of {len(CATEGORY_LABELS)} categories.")
    return profiles
