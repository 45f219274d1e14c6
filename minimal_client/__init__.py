"""
minimal_client

Demonstration AddTwoInts client. The service name is resolved from the
ENDPOINTS directory (endpoints), the request travels as JSON-RPC 2.0 over
ZeroMQ (adapters) and is traced with OpenTelemetry (telemetry).
"""

__version__ = "0.1.0"
