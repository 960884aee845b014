"""
Link Validation Module

Checks that a recipe link is a well-formed absolute URL before it is stored.
No network access is made; the link is only parsed.
"""

import ipaddress
from urllib.parse import urlparse

from constants import DANGEROUS_SCHEMES, HOST_REQUIRED_SCHEMES


class LinkValidationError(Exception):
    """Raised when a link is not a well-formed URL."""
    pass


def _is_valid_hostname(hostname):
    """Accept IP literals and dotted/simple DNS labels."""
    try:
        ipaddress.ip_address(hostname)
        return True
    except ValueError:
        pass

    labels = hostname.rstrip('.').split('.')
    for label in labels:
        if not label or len(label) > 63:
            return False
        if label.startswith('-') or label.endswith('-'):
            return False
        if not all(ch.isalnum() or ch in '-_' for ch in label):
            return False
    return True


def check_link(url):
    """
    Validate that a link is a well-formed absolute URL.

    Returns (is_valid, error_message) tuple.

    Checks:
    - A scheme is present and is not a script/data scheme
    - http(s) and ftp links carry a valid hostname
    - Other schemes (mailto:, tel:, ...) carry a non-empty body
    """
    if not url or not isinstance(url, str):
        return False, "Empty link"

    url = url.strip()
    if any(ch.isspace() for ch in url):
        return False, "Link must not contain whitespace"

    try:
        parsed = urlparse(url)
        # Accessing port validates it
        parsed.port
    except ValueError:
        return False, "Invalid link format"

    scheme = parsed.scheme.lower()
    if not scheme:
        return False, "Link must be an absolute URL"

    if scheme in DANGEROUS_SCHEMES:
        return False, f"Invalid scheme: {scheme}"

    if scheme in HOST_REQUIRED_SCHEMES:
        hostname = parsed.hostname
        if not hostname or not _is_valid_hostname(hostname):
            return False, "No valid hostname in link"
    elif not (parsed.netloc or parsed.path):
        return False, "Invalid link format"

    return True, None


def is_valid_link(url):
    """Boolean form of check_link()."""
    is_valid, _ = check_link(url)
    return is_valid


def validate_link(url):
    """
    Return the stripped link, or raise LinkValidationError.

    Args:
        url: The link to validate

    Returns:
        The link without surrounding whitespace

    Raises:
        LinkValidationError: If the link is not well-formed
    """
    is_valid, error = check_link(url)
    if not is_valid:
        raise LinkValidationError(error)
    return url.strip()
