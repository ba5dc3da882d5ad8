import os

import numpy as np
import pandas as pd
from faker import Faker

# --- Configuration ---
LOCAL_S3_PATH = "./../local_s3_bucket/bids/"

# Codes as they appear in the estimating system export
PROJECT_TYPES = ["CM", "ED", "HC", "HO", "IN", "MF", "PW", "RT"]
STATUSES = ["Won", "Lost", "Pending", "No Bid"]
STATUS_WEIGHTS = [0.38, 0.47, 0.10, 0.05]


def generate_bid_history(records=500, seed=None, fake=None) -> pd.DataFrame:
    """
    Generates a fake bid history. Larger projects carry a lower OH&P
    percentage, and a share of bids have no final outcome yet.
    """
    rng = np.random.default_rng(seed)
    fake = fake or Faker("en_US")
    if seed is not None:
        fake.seed_instance(seed)

    # Log-uniform contract amounts between $50k and $25M
    amounts = np.round(np.exp(rng.uniform(np.log(50_000), np.log(25_000_000), size=records)), 2)
    percent_of = np.round(np.clip(32.0 - 1.6 * np.log(amounts) + rng.normal(0, 1.0, size=records), 1.0, None), 2)

    return pd.DataFrame({
        "project_type": rng.choice(PROJECT_TYPES, size=records),
        "amount": amounts,
        "percent_of": percent_of,
        "status": rng.choice(STATUSES, size=records, p=STATUS_WEIGHTS),
        "client_type": rng.choice(["Existing", "New"], size=records, p=[0.6, 0.4]),
        "city": [fake.city() for _ in range(records)],
        "state": [fake.state_abbr() for _ in range(records)],
    })


def create_bid_history_file(records=500, seed=None, output_dir=LOCAL_S3_PATH, **kwargs):
    """Generates a bid history and saves it as a CSV file."""
    print(f"Generating {records} fake bid records...")
    df = generate_bid_history(records=records, seed=seed)

    os.makedirs(output_dir, exist_ok=True)
    file_path = os.path.join(output_dir, "bid_history.csv")
    df.to_csv(file_path, index=False)
    print(f"Successfully created bid history file at: {file_path}")
    return file_path


if __name__ == "__main__":
    # You can specify the number of records and the seed here
    create_bid_history_file(records=500, seed=7)
