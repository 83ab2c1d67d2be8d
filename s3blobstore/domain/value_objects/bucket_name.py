"""S3 bucket naming rules."""

import re

# 3-63 chars of [a-z0-9.-], alphanumeric at both ends, no "..", ".-" or "-.",
# and never an IPv4 dotted quad.
BUCKET_NAME_PATTERN = re.compile(
    r"^(?!\d{1,3}(?:\.\d{1,3}){3}$)"
    r"(?!.*(?:\.\.|\.-|-\.))"
    r"[a-z0-9][a-z0-9.-]{1,61}[a-z0-9]$"
)


def is_valid_bucket_name(name: str) -> bool:
    """Check a bucket name against the S3 naming grammar.

    Examples:
        >>> is_valid_bucket_name("foo.bar-blat")
        True
        >>> is_valid_bucket_name("127.0.0.1")
        False
    """
    return BUCKET_NAME_PATTERN.fullmatch(name) is not None
