"""
Endpoint resolution

Maps a logical endpoint name to a concrete service name using the endpoint
directory published in the ENDPOINTS environment variable:

    {"endpoints": [{"endpoint_name": "...", "endpoint_key": "..."}, ...]}

The decision logic (parse_endpoint_directory, resolve) is pure and returns a
Resolution describing the outcome. resolve_endpoint_name is the process-level
entry point that reads the environment and logs the diagnostic.
"""

import json
import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Tuple, Union

from minimal_client.endpoints.naming import sanitize_and_checksum

logger = logging.getLogger(__name__)

ENDPOINTS_ENV_VAR = "ENDPOINTS"


class ResolutionFailure(Enum):
    """Why resolution fell back to the default value"""
    CONFIG_ABSENT = "config_absent"
    CONFIG_MALFORMED = "config_malformed"
    CONFIG_INCOMPLETE = "config_incomplete"
    NO_MATCH = "no_match"


@dataclass(frozen=True)
class EndpointEntry:
    """One element of the endpoints array

    Fields that are missing or not strings are stored as None so the entry
    keeps its position in the directory without ever qualifying.
    """
    endpoint_name: Optional[str] = None
    endpoint_key: Optional[str] = None

    @classmethod
    def from_value(cls, value: Any) -> "EndpointEntry":
        if not isinstance(value, dict):
            return cls()
        name = value.get("endpoint_name")
        key = value.get("endpoint_key")
        return cls(
            endpoint_name=name if isinstance(name, str) else None,
            endpoint_key=key if isinstance(key, str) else None,
        )

    def matches(self, search_name: str) -> bool:
        return self.endpoint_name is not None and self.endpoint_name == search_name

    def qualifies(self, search_name: str) -> bool:
        return self.matches(search_name) and self.endpoint_key is not None


@dataclass(frozen=True)
class EndpointDirectory:
    """Parsed ENDPOINTS document

    Attributes:
        entries: Endpoint entries in document order
        has_endpoints: Whether the document carried an ``endpoints`` array
    """
    entries: Tuple[EndpointEntry, ...] = ()
    has_endpoints: bool = False

    @classmethod
    def from_document(cls, document: Any) -> "EndpointDirectory":
        if not isinstance(document, dict):
            return cls()
        endpoints = document.get("endpoints")
        if not isinstance(endpoints, list):
            return cls()
        return cls(
            entries=tuple(EndpointEntry.from_value(item) for item in endpoints),
            has_endpoints=True,
        )

    def lookup(self, search_name: str) -> Optional[EndpointEntry]:
        """Return the first entry with a matching name and a string key"""
        for entry in self.entries:
            if entry.qualifies(search_name):
                return entry
        return None


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving a logical endpoint name

    Attributes:
        name: Resolved service name, or the default value on failure
        failure: Failure kind, None when the name was resolved
        detail: Human readable explanation of the failure
    """
    name: str
    failure: Optional[ResolutionFailure] = None
    detail: str = ""

    @property
    def resolved(self) -> bool:
        return self.failure is None


def parse_endpoint_directory(text: str) -> EndpointDirectory:
    """Parse the ENDPOINTS document

    Args:
        text: JSON text

    Returns:
        EndpointDirectory: Parsed directory; documents without an endpoints
        array yield an empty directory with has_endpoints False

    Raises:
        ValueError: text is not valid UTF-8 JSON
    """
    # Undecodable environment bytes surface as lone surrogates
    text.encode("utf-8")
    document = json.loads(text, parse_constant=_reject_constant)
    # Lone surrogates written as \uXXXX escapes
    json.dumps(document, ensure_ascii=False).encode("utf-8")
    return EndpointDirectory.from_document(document)


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def resolve(config: Union[str, EndpointDirectory, None],
            search_name: str,
            default_value: str) -> Resolution:
    """Resolve search_name against an endpoint directory

    Args:
        config: Raw ENDPOINTS text, an already parsed directory, or None when
            no configuration is available
        search_name: Logical endpoint name, matched exactly
        default_value: Fallback name

    Returns:
        Resolution: Never raises
    """
    if config is None:
        return Resolution(
            name=default_value,
            failure=ResolutionFailure.CONFIG_ABSENT,
            detail=f"Environment variable {ENDPOINTS_ENV_VAR} not set. Using default value.",
        )

    if isinstance(config, EndpointDirectory):
        directory = config
    else:
        try:
            directory = parse_endpoint_directory(config)
        except (ValueError, RecursionError) as e:
            return Resolution(
                name=default_value,
                failure=ResolutionFailure.CONFIG_MALFORMED,
                detail=f"Error parsing {ENDPOINTS_ENV_VAR}: {e}. Using default value.",
            )

    entry = directory.lookup(search_name)
    if entry is not None:
        return Resolution(name=sanitize_and_checksum(entry.endpoint_key))

    if not directory.has_endpoints:
        failure = ResolutionFailure.CONFIG_INCOMPLETE
        detail = f"{ENDPOINTS_ENV_VAR} has no endpoints array."
    elif any(e.matches(search_name) for e in directory.entries):
        failure = ResolutionFailure.CONFIG_INCOMPLETE
        detail = f"Endpoint {search_name} is missing endpoint_key."
    else:
        failure = ResolutionFailure.NO_MATCH
        detail = f"Endpoint {search_name} not found."

    return Resolution(
        name=default_value,
        failure=failure,
        detail=f"{detail} Using default value.",
    )


def resolve_endpoint_name(search_name: str,
                          default_value: str,
                          environ: Optional[Mapping[str, str]] = None) -> str:
    """Resolve a logical endpoint name from the process environment

    Every failure is logged as a warning and replaced by default_value.

    Args:
        search_name: Logical endpoint name, e.g. "REQUESTER_ENDPOINT"
        default_value: Name to use when resolution fails
        environ: Environment mapping, os.environ when omitted

    Returns:
        str: Service name
    """
    if environ is None:
        environ = os.environ

    result = resolve(environ.get(ENDPOINTS_ENV_VAR), search_name, default_value)
    if result.resolved:
        logger.debug(f"Resolved endpoint {search_name} to {result.name}")
    else:
        logger.warning(result.detail)
    return result.name
