"""
ZeroMQ server adapter

JSON-RPC 2.0 server over a ZeroMQ REP socket.
"""

import zmq
import json
import logging
import threading
import time
from typing import Dict, Any, Callable, Optional

from minimal_client.adapters.adapter_interface import (
    ServerAdapterInterface,
    LIST_SERVICES_METHOD,
    PARSE_ERROR,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    INVALID_PARAMS,
    INTERNAL_ERROR,
)
from minimal_client.telemetry.tracer import extract_trace_context, with_trace_context
from minimal_client.telemetry.metrics import record_latency, increment_counter

logger = logging.getLogger(__name__)

# Poll timeout of the serve loop, bounds how long stop() waits
POLL_INTERVAL_MS = 100


def _error_response(code: int, message: str, request_id: Any = None) -> Dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "error": {
            "code": code,
            "message": message
        },
        "id": request_id
    }


class ZeroMQServer(ServerAdapterInterface):
    """
    ZeroMQ server adapter implementing JSON-RPC 2.0 request-response

    Every request gets exactly one reply, as the REP socket requires.
    """

    def __init__(self, bind_address: str = "tcp://*:5555"):
        """Initialize the ZeroMQ server

        Args:
            bind_address: Address to bind; a ``*`` port picks a free port,
                see ``endpoint`` for the address actually bound
        """
        self.bind_address = bind_address
        self.methods: Dict[str, Callable[[Dict[str, Any]], Any]] = {}
        self.running = False
        self.server_thread: Optional[threading.Thread] = None
        self.context = zmq.Context()

        self.socket = self.context.socket(zmq.REP)
        self.socket.setsockopt(zmq.LINGER, 0)
        self.socket.bind(bind_address)
        self.endpoint = self.socket.getsockopt_string(zmq.LAST_ENDPOINT)

        self.register_method(LIST_SERVICES_METHOD, self._handle_list_services)

        increment_counter("rpc.server.started", 1)
        logger.info(f"ZeroMQ server bound to {self.endpoint}")

    def register_method(self, name: str, handler: Callable[[Dict[str, Any]], Any]):
        """Register an RPC handler

        Args:
            name: Method name
            handler: Receives the params dict and returns the result
        """
        self.methods[name] = handler
        logger.debug(f"Registered RPC method: {name}")

    def start(self, threaded: bool = True):
        """Start the server

        Args:
            threaded: Run the serve loop in a background thread
        """
        self.running = True

        if threaded:
            self.server_thread = threading.Thread(target=self._run_server, daemon=True)
            self.server_thread.start()
            logger.info("ZeroMQ server started in background thread")
        else:
            logger.info("ZeroMQ server started in main thread")
            self._run_server()

    def stop(self):
        """Stop the server and close the socket"""
        self.running = False
        if self.server_thread is not None:
            self.server_thread.join(timeout=1.0)
            self.server_thread = None
        if self.socket is not None:
            self.socket.close()
            self.socket = None
        if self.context is not None:
            self.context.term()
            self.context = None
            logger.info("ZeroMQ server stopped")

    def _run_server(self):
        """Serve loop"""
        logger.info("ZeroMQ server accepting requests")

        while self.running:
            try:
                if not self.socket.poll(POLL_INTERVAL_MS, zmq.POLLIN):
                    continue
                request_bytes = self.socket.recv()

                start_time = time.time()
                increment_counter("rpc.server.requests.received", 1)

                response, method = self._handle_raw(request_bytes)
                self.socket.send(json.dumps(response).encode('utf-8'))
            except zmq.error.ZMQError as e:
                if not self.running:
                    break
                logger.error(f"Error in server loop: {e}")
                increment_counter("rpc.server.errors", 1, {"type": "loop_error"})
                time.sleep(1.0)
                continue

            latency_ms = (time.time() - start_time) * 1000
            record_latency("rpc.server.request.latency", latency_ms, {"method": method})
            logger.debug(f"Sent response, took: {latency_ms:.2f}ms")

    def _handle_raw(self, request_bytes: bytes):
        """Decode one request and produce a serializable response

        Returns:
            Tuple of response dict and method name (for metrics)
        """
        try:
            request = json.loads(request_bytes.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error(f"JSON parse error: {e}")
            increment_counter("rpc.server.errors", 1, {"type": "parse_error"})
            return _error_response(PARSE_ERROR, "Parse error"), "unknown"

        if not isinstance(request, dict):
            increment_counter("rpc.server.errors", 1, {"type": "invalid_request"})
            return _error_response(INVALID_REQUEST, "Invalid Request: expected an object"), "unknown"

        method_name = request.get("method") or "unknown"
        response = self._handle_request(request)
        try:
            json.dumps(response)
        except (TypeError, ValueError) as e:
            logger.error(f"Result of {method_name} is not JSON serializable: {e}")
            increment_counter("rpc.server.errors", 1, {"type": "internal_error"})
            response = _error_response(INTERNAL_ERROR, f"Internal error: {e}", request.get("id"))
        return response, method_name

    def _handle_request(self, request: Dict[str, Any]) -> Dict[str, Any]:
        """Dispatch a JSON-RPC request to its handler

        Args:
            request: JSON-RPC request object

        Returns:
            Dict: JSON-RPC response object
        """
        response_id = request.get("id")

        if request.get("jsonrpc") != "2.0":
            increment_counter("rpc.server.errors", 1, {"type": "invalid_request"})
            return _error_response(
                INVALID_REQUEST, "Invalid Request: Not a valid JSON-RPC 2.0 request", response_id
            )

        method_name = request.get("method")
        if not method_name or not isinstance(method_name, str):
            increment_counter("rpc.server.errors", 1, {"type": "method_missing"})
            return _error_response(INVALID_REQUEST, "Invalid Request: Method not specified", response_id)

        handler = self.methods.get(method_name)
        if handler is None:
            increment_counter("rpc.server.errors", 1, {"type": "method_not_found", "method": method_name})
            return _error_response(METHOD_NOT_FOUND, f"Method not found: {method_name}", response_id)

        params = request.get("params", {})
        if not isinstance(params, dict):
            increment_counter("rpc.server.errors", 1, {"type": "invalid_params", "method": method_name})
            return _error_response(INVALID_PARAMS, "Invalid params: expected an object", response_id)

        trace_context = extract_trace_context(request.get("trace_context"))

        try:
            with with_trace_context(trace_context):
                increment_counter("rpc.server.method.calls", 1, {"method": method_name})
                result = handler(params)
        except ValueError as e:
            logger.warning(f"Invalid params for {method_name}: {e}")
            increment_counter("rpc.server.method.errors", 1, {"method": method_name})
            return _error_response(INVALID_PARAMS, f"Invalid params: {e}", response_id)
        except Exception as e:
            logger.exception(f"Error executing method {method_name}")
            increment_counter("rpc.server.method.errors", 1, {"method": method_name})
            return _error_response(INTERNAL_ERROR, f"Internal error: {e}", response_id)

        return {
            "jsonrpc": "2.0",
            "result": result,
            "id": response_id
        }

    def _handle_list_services(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Built-in: names of the registered services"""
        return {
            "services": [name for name in sorted(self.methods) if name != LIST_SERVICES_METHOD]
        }
