"""
Transport Adapters Module

Unified client/server interfaces over the RPC middleware:
- zeromq: ZeroMQ REQ/REP adapter

Adapters speak JSON-RPC 2.0 and carry OpenTelemetry trace context in the request envelope.
"""

from .adapter_interface import ClientAdapterInterface, ServerAdapterInterface, ServiceCallError

__all__ = [
    "ClientAdapterInterface",
    "ServerAdapterInterface",
    "ServiceCallError",
]
