"""HTTP Basic authentication parsing for DynDNS2 clients."""

import base64
import binascii
from typing import Optional, Tuple


def parse_basic_auth(authorization: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    Extract (username, password) from a Basic Authorization header.

    DynDNS2 clients put the update credential in the password slot; the
    username is ignored by the update pipeline.

    Args:
        authorization: Raw Authorization header value

    Returns:
        Tuple of username and password, or None if the header is missing
        or malformed
    """
    if not authorization:
        return None

    scheme, _, encoded = authorization.strip().partition(" ")
    if scheme.lower() != "basic" or not encoded.strip():
        return None

    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None

    username, separator, password = decoded.partition(":")
    if not separator:
        return None
    return username, password
