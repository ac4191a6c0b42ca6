"""
utils/validators.py
Input validation and sanitization functions
"""

import re
from typing import Tuple

from utils.constants import HOSTNAME_MAX_LEN, LABEL_MAX_LEN, PORT_MIN, PORT_MAX


_LABEL_RE = re.compile(r"^[A-Za-z0-9-]+$")


def is_valid_hostname(host: str) -> bool:
    """
    Conservative DNS hostname check.

    Not exhaustive; rejects clearly invalid input such as `example.com">AAAA`
    before any network activity. A single trailing dot (FQDN) is allowed.
    """
    if not host or not isinstance(host, str) or len(host) > HOSTNAME_MAX_LEN:
        return False

    if host.endswith("."):
        host = host[:-1]

    for label in host.split("."):
        if not label or len(label) > LABEL_MAX_LEN:
            return False
        if label[0] == "-" or label[-1] == "-":
            return False
        if not _LABEL_RE.match(label):
            return False
    return True


def validate_port(port: int) -> Tuple[bool, str]:
    """
    Validate that port number is in valid range [1-65535].

    Args:
        port: Port number to validate

    Returns:
        (is_valid, error_message) tuple
    """
    if not isinstance(port, int) or isinstance(port, bool):
        return (False, "Port must be an integer")

    if port < PORT_MIN or port > PORT_MAX:
        return (False, f"Port {port} out of valid range [{PORT_MIN}-{PORT_MAX}]")

    return (True, "")


def sanitize_evidence(text: str, max_length: int = 500) -> str:
    """
    Sanitize low-level error text before it is shown to users:
    - Removing control characters
    - Collapsing whitespace
    - Truncating to max_length

    Args:
        text: Raw error / protocol text
        max_length: Maximum allowed length (default: 500)

    Returns:
        Sanitized string
    """
    if not text or not isinstance(text, str):
        return ""

    sanitized = re.sub(r'[\x00-\x08\x0b-\x0c\x0e-\x1f\x7f-\x9f]', '', text)
    sanitized = ' '.join(sanitized.split())

    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length] + "..."

    return sanitized


__all__ = ["is_valid_hostname", "validate_port", "sanitize_evidence"]
