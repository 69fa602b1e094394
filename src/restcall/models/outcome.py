from dataclasses import dataclass
from typing import Any, NamedTuple, Optional, Union

from pydantic import BaseModel

from .errors import NetworkError, Reason


@dataclass(frozen=True)
class Success:
    """The request completed with a status code in the 2xx range."""

    status_code: Optional[int] = None


@dataclass(frozen=True)
class Failure:
    """The request could not be built, sent or decoded.

    ``status_code`` is only set when the server actually answered.
    """

    status_code: Optional[int] = None
    error: Optional[NetworkError] = None

    @property
    def reason(self) -> Optional[Reason]:
        return self.error.reason if self.error is not None else None


Outcome = Union[Success, Failure]


class CallResult(NamedTuple):
    outcome: Outcome
    value: Any = None

    @property
    def ok(self) -> bool:
        return isinstance(self.outcome, Success)


class Nothing(BaseModel):
    """Expected response type for calls whose response body is not read."""


def failure(reason: Reason, status_code: Optional[int] = None, json: Any = None) -> CallResult:
    return CallResult(Failure(status_code, NetworkError(reason, json)), None)
