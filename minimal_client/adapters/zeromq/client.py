"""
ZeroMQ client adapter

JSON-RPC 2.0 client over a ZeroMQ REQ socket.
"""

import zmq
import json
import uuid
import time
import logging
from typing import Dict, Any, Optional

from minimal_client.adapters.adapter_interface import ClientAdapterInterface, LIST_SERVICES_METHOD
from minimal_client.telemetry.tracer import inject_trace_context
from minimal_client.telemetry.metrics import record_latency, increment_counter

logger = logging.getLogger(__name__)

# Pause between availability checks answered with "not registered"
SERVICE_POLL_INTERVAL_S = 0.1


class ZeroMQClient(ClientAdapterInterface):
    """
    ZeroMQ client adapter implementing JSON-RPC 2.0 request-response

    A REQ socket cannot send again after a request went unanswered, so the
    socket is rebuilt whenever a request times out.
    """

    def __init__(self,
                 server_address: str = "tcp://localhost:5555",
                 timeout_ms: int = 5000):
        """Initialize the ZeroMQ client

        Args:
            server_address: ZeroMQ server address
            timeout_ms: Request timeout in milliseconds
        """
        self.server_address = server_address
        self.timeout_ms = timeout_ms
        self.context = zmq.Context()
        self.socket = None
        self._connect()
        logger.info(f"ZeroMQ client connected to {server_address}")

    def __del__(self):
        self.close()

    def __enter__(self) -> "ZeroMQClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _connect(self):
        self.socket = self.context.socket(zmq.REQ)
        self.socket.setsockopt(zmq.LINGER, 0)
        self.socket.connect(self.server_address)

    def _reset_socket(self):
        """Drop the stuck REQ socket and open a fresh one"""
        if self.socket is not None:
            self.socket.close()
        self._connect()
        logger.debug(f"ZeroMQ socket to {self.server_address} rebuilt")

    def close(self):
        """Close the client connection"""
        if getattr(self, 'socket', None) is not None:
            self.socket.close()
            self.socket = None
        if getattr(self, 'context', None) is not None:
            self.context.term()
            self.context = None

    def call(self, method: str, params: Dict[str, Any] = None) -> Dict[str, Any]:
        """Send a JSON-RPC 2.0 request and wait for the response

        Args:
            method: Method name
            params: Method parameters

        Returns:
            Dict: JSON-RPC response object. An ``error`` member is left for
            the caller to handle.

        Raises:
            TimeoutError: Request timed out
            ConnectionError: ZeroMQ failure
            ValueError: Invalid response
        """
        return self._request(method, params, self.timeout_ms)

    def _request(self, method: str, params: Optional[Dict[str, Any]], timeout_ms: int) -> Dict[str, Any]:
        if self.socket is None:
            raise ConnectionError("ZeroMQ client is closed")

        request_id = str(uuid.uuid4())
        request = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or {},
            "id": request_id
        }

        trace_context = inject_trace_context()
        if trace_context:
            request["trace_context"] = trace_context

        request_json = json.dumps(request)
        start_time = time.time()

        try:
            logger.debug(f"Sending request: {request_json[:200]}")
            self.socket.send(request_json.encode('utf-8'))
            increment_counter("rpc.client.requests", 1, {"method": method})

            if not self.socket.poll(timeout_ms, zmq.POLLIN):
                latency_ms = (time.time() - start_time) * 1000
                logger.debug(f"Request {method} timed out after {latency_ms:.2f}ms")
                increment_counter("rpc.client.errors", 1, {"type": "timeout", "method": method})
                self._reset_socket()
                raise TimeoutError(f"ZeroMQ request timed out ({timeout_ms}ms)")

            response_bytes = self.socket.recv()

        except zmq.error.ZMQError as e:
            logger.error(f"ZeroMQ error: {e}")
            increment_counter("rpc.client.errors", 1, {"type": "zmq_error", "method": method})
            raise ConnectionError(f"ZeroMQ connection error: {e}") from e

        latency_ms = (time.time() - start_time) * 1000
        record_latency("rpc.client.latency", latency_ms, {"method": method})
        logger.debug(f"Received response, latency: {latency_ms:.2f}ms")

        try:
            response = json.loads(response_bytes.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            increment_counter("rpc.client.errors", 1, {"type": "invalid_response", "method": method})
            raise ValueError(f"Undecodable JSON-RPC response: {e}") from e

        if not isinstance(response, dict) or response.get("jsonrpc") != "2.0":
            logger.error(f"Invalid JSON-RPC 2.0 response: {response}")
            increment_counter("rpc.client.errors", 1, {"type": "invalid_response", "method": method})
            raise ValueError("Invalid JSON-RPC 2.0 response")

        if response.get("id") != request_id:
            logger.error(f"Response ID mismatch: {response.get('id')} != {request_id}")
            increment_counter("rpc.client.errors", 1, {"type": "id_mismatch", "method": method})
            raise ValueError(f"Response ID mismatch: {response.get('id')} != {request_id}")

        if "error" in response:
            error = response["error"] or {}
            logger.debug(f"RPC error: {error.get('message')}, code: {error.get('code')}")
            increment_counter("rpc.client.errors", 1, {
                "type": "rpc_error",
                "method": method,
                "code": str(error.get('code', -1))
            })
        else:
            increment_counter("rpc.client.success", 1, {"method": method})

        return response

    def wait_for_service(self, service: str, timeout_s: float = 1.0) -> bool:
        """Wait until the server has registered service

        An unreachable server and a server without the service both count as
        "not available"; the server is asked at least once.

        Args:
            service: Service name
            timeout_s: Maximum time to wait in seconds

        Returns:
            bool: Whether the service became available in time
        """
        deadline = time.monotonic() + timeout_s
        while True:
            remaining_ms = max(int((deadline - time.monotonic()) * 1000), 1)
            try:
                response = self._request(LIST_SERVICES_METHOD, None, remaining_ms)
            except TimeoutError:
                return False

            result = response.get("result")
            services = result.get("services", []) if isinstance(result, dict) else []
            if service in services:
                return True

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False
            time.sleep(min(SERVICE_POLL_INTERVAL_S, remaining))
