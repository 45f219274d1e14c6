"""
AddTwoInts server

Serves handle_add_two_ints under the name resolved for PROVIDER_ENDPOINT so
the client can be run end to end.
"""

import argparse
import logging
import sys
from typing import List, Optional

from minimal_client.adapters.zeromq.server import ZeroMQServer
from minimal_client.config import ClientConfig
from minimal_client.endpoints.resolver import resolve_endpoint_name
from minimal_client.main import configure_logging, setup_telemetry
from minimal_client.services.add_two_ints import DEFAULT_SERVICE_NAME, handle_add_two_ints

logger = logging.getLogger(__name__)

PROVIDER_ENDPOINT = "PROVIDER_ENDPOINT"


def create_server(bind_address: str, service_name: str) -> ZeroMQServer:
    server = ZeroMQServer(bind_address=bind_address)
    server.register_method(service_name, handle_add_two_ints)
    return server


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="AddTwoInts demonstration server")
    parser.add_argument("--bind-address", help="ZeroMQ bind address override")
    args = parser.parse_args(argv)

    try:
        config = ClientConfig.from_env()
    except ValueError as e:
        configure_logging()
        logger.error(f"Invalid configuration: {e}")
        return 2

    configure_logging(config.log_level)
    setup_telemetry(config)

    service_name = resolve_endpoint_name(PROVIDER_ENDPOINT, DEFAULT_SERVICE_NAME)
    server = create_server(args.bind_address or config.bind_address, service_name)
    logger.info(f"Serving {service_name} on {server.endpoint}")

    try:
        server.start(threaded=False)
    except KeyboardInterrupt:
        logger.info("Received termination signal, shutting down")
    finally:
        server.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
