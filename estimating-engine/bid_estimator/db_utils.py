# estimating-engine/bid_estimator/db_utils.py
from sqlalchemy import create_engine
from .settings import settings # Import the settings instance

def get_db_engine(connection_string: str | None = None):
    """Creates and returns a SQLAlchemy engine from application settings."""
    # The connection string is managed centrally unless a caller overrides it
    return create_engine(connection_string or settings.db_connection_string)
