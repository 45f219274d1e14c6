"""
Endpoint naming and resolution

- naming: derives sanitized, checksummed service names from endpoint keys
- resolver: looks logical endpoint names up in the ENDPOINTS directory
"""

from .naming import sanitize, checksum, sanitize_and_checksum, NAME_PREFIX, MAX_NAME_LENGTH
from .resolver import (
    ENDPOINTS_ENV_VAR,
    EndpointDirectory,
    EndpointEntry,
    Resolution,
    ResolutionFailure,
    parse_endpoint_directory,
    resolve,
    resolve_endpoint_name,
)

__all__ = [
    "sanitize",
    "checksum",
    "sanitize_and_checksum",
    "NAME_PREFIX",
    "MAX_NAME_LENGTH",
    "ENDPOINTS_ENV_VAR",
    "EndpointDirectory",
    "EndpointEntry",
    "Resolution",
    "ResolutionFailure",
    "parse_endpoint_directory",
    "resolve",
    "resolve_endpoint_name",
]
