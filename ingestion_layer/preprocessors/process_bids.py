import os

import pandas as pd

from bid_estimator.db_utils import get_db_engine
from bid_estimator.data_loader import DESCRIPTIVE_COLUMNS, REQUIRED_COLUMNS
from bid_estimator.settings import settings

RAW_BIDS_PATH = "./../local_s3_bucket/bids/"


def clean_bid_file(raw_df: pd.DataFrame) -> pd.DataFrame:
    """Drops rows the engine could never use; outcome filtering happens at load time."""
    missing = [column for column in REQUIRED_COLUMNS if column not in raw_df.columns]
    if missing:
        raise ValueError(f"Bid file is missing required columns: {', '.join(missing)}")

    df = raw_df.copy()
    for column in DESCRIPTIVE_COLUMNS:
        if column not in df.columns:
            df[column] = None

    df.dropna(subset=REQUIRED_COLUMNS, inplace=True)
    df['amount'] = pd.to_numeric(df['amount'], errors='coerce')
    df['percent_of'] = pd.to_numeric(df['percent_of'], errors='coerce')
    df.dropna(subset=['amount', 'percent_of'], inplace=True)
    df = df[df['amount'] > 0]
    return df[REQUIRED_COLUMNS + DESCRIPTIVE_COLUMNS]


def process_bid_file(file_path=None, engine=None, table_name=None):
    """Processes a raw bid export and replaces the bid history table with it."""
    file_path = file_path or os.path.join(RAW_BIDS_PATH, "bid_history.csv")
    engine = engine or get_db_engine()
    table_name = table_name or settings.history_table

    if not os.path.exists(file_path):
        print(f"Error: Bid file not found at {file_path}.")
        return 0

    print(f"Processing bid file: {file_path}")
    bids_df = clean_bid_file(pd.read_csv(file_path))

    # engine.begin() handles commit/rollback for the whole load
    with engine.begin() as conn:
        bids_df.to_sql(table_name, conn, if_exists='replace', index=False)

    print(f"Successfully loaded {len(bids_df)} bids into '{table_name}'.")
    return len(bids_df)


if __name__ == "__main__":
    process_bid_file()
