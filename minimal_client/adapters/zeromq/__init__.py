"""
ZeroMQ Adapter Package

ZeroMQ REQ/REP client and server adapters speaking JSON-RPC 2.0.
"""

from minimal_client.adapters.zeromq.client import ZeroMQClient
from minimal_client.adapters.zeromq.server import ZeroMQServer

__all__ = ["ZeroMQClient", "ZeroMQServer"]
