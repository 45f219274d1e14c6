"""
AddTwoInts service contract

Request and response types of the example_interfaces/srv/AddTwoInts
interface (two int64 in, one int64 out), the server-side handler and a typed
client wrapper around a transport adapter.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Dict, Any

from minimal_client.adapters.adapter_interface import ClientAdapterInterface, ServiceCallError

logger = logging.getLogger(__name__)

SERVICE_TYPE = "example_interfaces/srv/AddTwoInts"
DEFAULT_SERVICE_NAME = "add_two_ints"

INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1


def _int64_field(data: Dict[str, Any], name: str) -> int:
    if name not in data:
        raise ValueError(f"missing field: {name}")
    value = data[name]
    # bool is an int subclass but never a valid int64 field
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {name} must be an integer, got {type(value).__name__}")
    return value


def _check_int64(name: str, value: int):
    if not INT64_MIN <= value <= INT64_MAX:
        raise ValueError(f"field {name} out of int64 range: {value}")


def wrap_int64(value: int) -> int:
    """Two's complement wraparound to the int64 range"""
    return (value - INT64_MIN) % 2 ** 64 + INT64_MIN


@dataclass(frozen=True)
class AddTwoIntsRequest:
    a: int = 0
    b: int = 0

    def __post_init__(self):
        _check_int64("a", self.a)
        _check_int64("b", self.b)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AddTwoIntsRequest":
        return cls(a=_int64_field(data, "a"), b=_int64_field(data, "b"))


@dataclass(frozen=True)
class AddTwoIntsResponse:
    sum: int = 0

    def __post_init__(self):
        _check_int64("sum", self.sum)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AddTwoIntsResponse":
        return cls(sum=_int64_field(data, "sum"))


def handle_add_two_ints(params: Dict[str, Any]) -> Dict[str, Any]:
    """Server-side handler

    Args:
        params: Request parameters with integer ``a`` and ``b``

    Returns:
        Dict: Response with ``sum``, wrapped to int64

    Raises:
        ValueError: Missing or non-integer parameters
    """
    request = AddTwoIntsRequest.from_dict(params)
    response = AddTwoIntsResponse(sum=wrap_int64(request.a + request.b))
    logger.info(f"Incoming request a: {request.a} b: {request.b}")
    return response.to_dict()


class AddTwoIntsClient:
    """Typed AddTwoInts client bound to one service name"""

    def __init__(self, adapter: ClientAdapterInterface, service_name: str = DEFAULT_SERVICE_NAME):
        self.adapter = adapter
        self.service_name = service_name

    def wait_for_service(self, timeout_s: float = 1.0) -> bool:
        return self.adapter.wait_for_service(self.service_name, timeout_s)

    def call(self, request: AddTwoIntsRequest) -> AddTwoIntsResponse:
        """Send a request and wait for the sum

        Raises:
            ServiceCallError: The service answered with an error
            TimeoutError: No answer in time
            ConnectionError: Transport failure
            ValueError: Malformed response
        """
        response = self.adapter.call(self.service_name, request.to_dict())
        if "error" in response:
            error = response["error"] or {}
            raise ServiceCallError(
                f"{self.service_name}: {error.get('message', 'unknown error')}",
                code=error.get("code"),
            )
        result = response.get("result")
        if not isinstance(result, dict):
            raise ValueError(f"Malformed {SERVICE_TYPE} response: {result!r}")
        return AddTwoIntsResponse.from_dict(result)
