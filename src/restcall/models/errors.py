from enum import Enum
from typing import Any, Optional


class Reason(str, Enum):
    """Why a call ended in a failure outcome."""

    BUILDING_PAYLOAD = "buildingPayload"
    CASTING_TO_EXPECTED_TYPE = "castingToExpectedType"
    INVALID_URL = "invalidURL"
    METHOD_NOT_ALLOWED = "methodNotAllowed"
    REQUEST_FAILED = "requestFailed"
    UNWRAPPING_RESPONSE = "unwrappingResponse"
    INVALID_RESPONSE_TYPE = "invalidResponseType"
    # Reserved, nothing produces these yet.
    GROUP_INCOMPLETE = "groupIncomplete"
    UNKNOWN_STATUS = "unknownStatus"


class NetworkError(Exception):
    """An error that occurred while sending a request or reading its response.

    Instances are delivered to the caller inside a ``Failure`` outcome. They are
    only raised internally, between the encoder and the dispatcher.

    Attributes:
        reason: The failure classification.
        json: The response body parsed as generic JSON, when one was available.
    """

    def __init__(self, reason: Reason, json: Optional[Any] = None):
        self.reason = reason
        self.json = json
        super().__init__(f"Request failed: {reason.value}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NetworkError):
            return NotImplemented
        return self.reason == other.reason and self.json == other.json

    def __hash__(self) -> int:
        return hash(self.reason)

    def __repr__(self) -> str:
        return f"NetworkError(reason={self.reason!r}, json={self.json!r})"


class BaseUrlMissingError(Exception):
    def __init__(
        self,
        message="No base URL configured. Pass base_url explicitly or set the RESTCALL_BASE_URL environment variable.",
    ):
        self.message = message
        super().__init__(self.message)
