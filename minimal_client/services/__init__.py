"""
Service contracts served over the transport adapters
"""

from .add_two_ints import (
    SERVICE_TYPE,
    DEFAULT_SERVICE_NAME,
    AddTwoIntsRequest,
    AddTwoIntsResponse,
    AddTwoIntsClient,
    handle_add_two_ints,
)

__all__ = [
    "SERVICE_TYPE",
    "DEFAULT_SERVICE_NAME",
    "AddTwoIntsRequest",
    "AddTwoIntsResponse",
    "AddTwoIntsClient",
    "handle_add_two_ints",
]
