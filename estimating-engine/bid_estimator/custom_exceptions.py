# estimating-engine/bid_estimator/custom_exceptions.py
class EstimatingError(Exception):
    """Base class for every error raised by the estimating engine."""
    pass

class InvalidParameterError(EstimatingError):
    """Raised when a query parameter is out of range or unsupported."""
    pass

class InsufficientDataError(EstimatingError):
    """Raised when the history is empty or too degenerate for a computation."""
    pass

class DatasetLoadError(EstimatingError):
    """Raised when the bid history source is missing or cannot be read."""
    pass
