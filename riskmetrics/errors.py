"""
Error taxonomy shared by the calculation engines and the analysis job.
"""


class MetricsError(Exception):
    """Base class for all metrics calculation failures."""
    pass


class InvalidInput(MetricsError):
    """Raised when a price is non-positive or non-finite."""
    pass


class InsufficientData(MetricsError):
    """Raised when a series is too short for the requested metric."""
    pass


class LengthMismatch(MetricsError):
    """Raised when two series passed to a pairwise metric differ in length."""
    pass


class DegenerateSample(MetricsError):
    """Raised when variance is underdetermined (N - ddof <= 0)."""
    pass
