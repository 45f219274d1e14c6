"""
AddTwoInts client

Resolves the service name of REQUESTER_ENDPOINT, waits for the service to
appear, sends one addition request and logs the result.
"""

import argparse
import logging
import sys
import time
from typing import List, Optional

from minimal_client.adapters.adapter_interface import ServiceCallError
from minimal_client.adapters.zeromq.client import ZeroMQClient
from minimal_client.config import ClientConfig
from minimal_client.endpoints.resolver import resolve_endpoint_name
from minimal_client.services.add_two_ints import (
    DEFAULT_SERVICE_NAME,
    AddTwoIntsClient,
    AddTwoIntsRequest,
)
from minimal_client.telemetry.metrics import setup_metrics
from minimal_client.telemetry.tracer import create_span, setup_tracer

logger = logging.getLogger(__name__)

REQUESTER_ENDPOINT = "REQUESTER_ENDPOINT"


def configure_logging(log_level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def setup_telemetry(config: ClientConfig) -> None:
    if not config.enable_telemetry:
        return
    setup_tracer(config.service_name, config.otlp_endpoint)
    setup_metrics(config.service_name, config.otlp_endpoint)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="AddTwoInts demonstration client")
    parser.add_argument("-a", type=int, default=41, help="First operand (default: 41)")
    parser.add_argument("-b", type=int, default=1, help="Second operand (default: 1)")
    parser.add_argument("--server-address", help="ZeroMQ server address override")
    parser.add_argument("--max-wait", type=float, default=None,
                        help="Give up waiting for the service after this many seconds")
    return parser


def wait_for_service(client: AddTwoIntsClient,
                     interval_s: float = 1.0,
                     max_wait_s: Optional[float] = None) -> bool:
    """Block until the service appears

    Args:
        client: Service client
        interval_s: Timeout of each availability check
        max_wait_s: Overall limit, None waits forever

    Returns:
        bool: False when max_wait_s elapsed first
    """
    started = time.monotonic()
    while not client.wait_for_service(interval_s):
        if max_wait_s is not None and time.monotonic() - started >= max_wait_s:
            return False
        logger.info("waiting for service to appear...")
    return True


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = ClientConfig.from_env()
    except ValueError as e:
        configure_logging()
        logger.error(f"Invalid configuration: {e}")
        return 2
    if args.server_address:
        config.server_address = args.server_address

    configure_logging(config.log_level)
    setup_telemetry(config)
    logger.debug(f"Configuration: {config.to_dict()}")

    try:
        request = AddTwoIntsRequest(a=args.a, b=args.b)
    except ValueError as e:
        logger.error(f"Invalid request: {e}")
        return 2

    service_name = resolve_endpoint_name(REQUESTER_ENDPOINT, DEFAULT_SERVICE_NAME)
    logger.info(f"Using service {service_name} at {config.server_address}")

    with ZeroMQClient(server_address=config.server_address, timeout_ms=config.timeout_ms) as adapter:
        client = AddTwoIntsClient(adapter, service_name)

        try:
            available = wait_for_service(client, config.wait_interval_s, args.max_wait)
        except KeyboardInterrupt:
            logger.error("client interrupted while waiting for service to appear.")
            return 1
        except (ConnectionError, ValueError) as e:
            logger.error(f"error while waiting for service to appear: {e}")
            return 1
        if not available:
            logger.error(f"service {service_name} did not appear within {args.max_wait}s")
            return 1

        with create_span("add_two_ints.call", {"service": service_name}):
            try:
                response = client.call(request)
            except (TimeoutError, ConnectionError, ServiceCallError, ValueError) as e:
                logger.error(f"service call failed :( ({e})")
                return 1

    logger.info(f"result of {request.a} + {request.b} = {response.sum}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
