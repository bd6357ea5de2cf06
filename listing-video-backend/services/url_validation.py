"""
Listing URL helpers used before a job is created.
"""

import logging
from urllib.parse import urlparse


def normalize_url(url: str) -> str:
    """Trims the URL and adds https:// when no scheme is given."""
    normalized_url = (url or "").strip()
    if not normalized_url.startswith("http://") and not normalized_url.startswith("https://"):
        normalized_url = "https://" + normalized_url
    return normalized_url


def validate_url(url: str) -> bool:
    """
    Returns True when the URL, once normalized, looks like a public web address:
    http(s) scheme and a hostname of at least three characters containing a dot.
    """
    normalized_url = normalize_url(url)
    logging.debug(f"Validating URL: {normalized_url}")

    try:
        parsed = urlparse(normalized_url)
        hostname = parsed.hostname or ""
    except ValueError as e:
        logging.debug(f"URL validation error: {e}")
        return False

    if parsed.scheme not in ("http", "https"):
        logging.debug(f"Invalid protocol: {parsed.scheme}")
        return False

    if len(hostname) < 3:
        logging.debug(f"Invalid hostname: {hostname}")
        return False

    if "." not in hostname:
        logging.debug(f"Hostname missing dot: {hostname}")
        return False

    return True
