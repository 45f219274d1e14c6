"""
Transport adapter interface

Defines the interface every RPC transport adapter implements so the client
application does not depend on the underlying messaging library.
"""

import abc
from typing import Dict, Any, Callable, Optional

# JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Reserved method answering with the names of registered services
LIST_SERVICES_METHOD = "rpc.list_services"


class ServiceCallError(RuntimeError):
    """Raised when a service answers a request with a JSON-RPC error."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class ClientAdapterInterface(abc.ABC):
    """Client side of a transport adapter"""

    @abc.abstractmethod
    def call(self, method: str, params: Dict[str, Any] = None) -> Dict[str, Any]:
        """Send an RPC request and wait for the response

        Args:
            method: Service (method) name
            params: Request parameters

        Returns:
            Dict: JSON-RPC response object

        Raises:
            TimeoutError: Request timed out
            ConnectionError: Transport failure
            ValueError: Invalid response
        """

    @abc.abstractmethod
    def wait_for_service(self, service: str, timeout_s: float = 1.0) -> bool:
        """Block up to timeout_s until service is available

        Returns:
            bool: True when the service is registered on the server
        """

    @abc.abstractmethod
    def close(self) -> None:
        """Close the connection and release resources"""


class ServerAdapterInterface(abc.ABC):
    """Server side of a transport adapter"""

    @abc.abstractmethod
    def register_method(self, name: str, handler: Callable[[Dict[str, Any]], Any]):
        """Register an RPC handler

        Args:
            name: Service (method) name
            handler: Receives the params dict and returns the result
        """

    @abc.abstractmethod
    def start(self, threaded: bool = True):
        """Start serving

        Args:
            threaded: Run the serve loop in a background thread
        """

    @abc.abstractmethod
    def stop(self):
        """Stop serving and release resources"""
