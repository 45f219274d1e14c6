"""
Service name derivation

Turns an arbitrary endpoint key into a deterministic, identifier-safe service
name: a fixed prefix, the sanitized key and a decimal checksum of the raw key.
"""

NAME_PREFIX = "ros2_"
MAX_NAME_LENGTH = 256
CHECKSUM_MODULUS = 1_000_000_007
CHECKSUM_MULTIPLIER = 31

_ALLOWED = frozenset(
    b"abcdefghijklmnopqrstuvwxyz"
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    b"0123456789_"
)


def _raw_bytes(value: str) -> bytes:
    """Encode value to UTF-8, keeping undecodable environment bytes as-is

    os.environ maps bytes that are not UTF-8 to U+DC80..U+DCFF; those go back
    to the original byte. Any other lone surrogate is encoded as its three
    byte UTF-8 form.
    """
    try:
        return value.encode("utf-8", "surrogateescape")
    except UnicodeEncodeError:
        return value.encode("utf-8", "surrogatepass")


def sanitize(value: str) -> str:
    """Replace every byte outside [A-Za-z0-9_] with an underscore

    The key is taken as UTF-8 bytes, so a non-ASCII character yields one
    underscore per encoded byte.

    Args:
        value: Raw endpoint key

    Returns:
        str: Sanitized key, same length as the encoded input
    """
    return "".join(
        chr(byte) if byte in _ALLOWED else "_"
        for byte in _raw_bytes(value)
    )


def checksum(value: str) -> int:
    """Polynomial rolling hash over the raw UTF-8 bytes of value"""
    total = 0
    for byte in _raw_bytes(value):
        total = (total * CHECKSUM_MULTIPLIER + byte) % CHECKSUM_MODULUS
    return total


def sanitize_and_checksum(value: str) -> str:
    """Build a service name from an endpoint key

    Args:
        value: Raw endpoint key

    Returns:
        str: ``NAME_PREFIX + sanitized + checksum``, never longer than
        MAX_NAME_LENGTH characters. The sanitized part is truncated from the
        right when the whole name would not fit.
    """
    suffix = str(checksum(value))
    budget = max(MAX_NAME_LENGTH - len(NAME_PREFIX) - len(suffix), 0)
    return NAME_PREFIX + sanitize(value)[:budget] + suffix
