from ._network_manager import NetworkManager
from ._response_resolver import is_success_status, resolve_response

__all__ = [
    "NetworkManager",
    "is_success_status",
    "resolve_response",
]
