"""Gate for externally supplied media URLs used as generation seeds."""

import logging
from typing import Optional
from urllib.parse import urlsplit

from .errors import ValidationError

logger = logging.getLogger(__name__)

# Hosts never forwarded upstream. Matched as substrings of the hostname.
UNSAFE_HOSTS = (
    "yna.co.kr",
    "unsafe",
    "localhost",
    "127.0.0.1",
    "0.0.0.0",
)


def is_safe_seed_url(url: object) -> bool:
    """Return True if the URL may be sent to a provider as a start image.

    Requires an absolute https URL whose host contains a dot and matches no
    deny-listed host. Hosts without a dot are rejected even when they are
    valid addresses. Anything that fails to parse is unsafe.
    """
    if not isinstance(url, str) or not url.strip():
        return False

    try:
        parsed = urlsplit(url.strip())
        host = (parsed.hostname or "").lower()
    except ValueError as e:
        logger.warning(f"Rejected seed URL that failed to parse: {e}")
        return False

    if parsed.scheme != "https":
        logger.warning(f"Rejected non-HTTPS seed URL: {parsed.scheme or '<none>'}://...")
        return False

    if not host or "." not in host:
        logger.warning(f"Rejected seed URL without a domain: {host or '<empty>'}")
        return False

    if any(blocked in host for blocked in UNSAFE_HOSTS):
        logger.warning(f"Rejected seed URL with blocked host: {host}")
        return False

    return True


def require_safe_seed_url(url: str) -> str:
    """Return the URL, or raise if it may not be used as a seed.

    Raises:
        ValidationError: If the URL fails the safety check.
    """
    if not is_safe_seed_url(url):
        raise ValidationError(f"Unsafe seed image URL: {url}")
    return url.strip()


def seed_for_request(url: Optional[str]) -> Optional[str]:
    """Seed to forward upstream: the URL when safe, otherwise no seed."""
    if url and is_safe_seed_url(url):
        return url.strip()
    return None
