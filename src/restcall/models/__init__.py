from .errors import BaseUrlMissingError, NetworkError, Reason
from .outcome import CallResult, Failure, Nothing, Outcome, Success

__all__ = [
    "BaseUrlMissingError",
    "CallResult",
    "Failure",
    "NetworkError",
    "Nothing",
    "Outcome",
    "Reason",
    "Success",
]
