"""
Document identifiers.

Ids are 24 lowercase hex characters (12 random bytes), the same shape as a
document-store object id, so malformed ids can be rejected before any query.
"""

import re
import secrets

OBJECT_ID_PATTERN = r"^[0-9a-f]{24}$"
_OBJECT_ID_RE = re.compile(r"[0-9a-f]{24}")


def new_object_id() -> str:
    """Generate a fresh document id."""
    return secrets.token_hex(12)


def is_valid_object_id(value: str) -> bool:
    """Check that a string has the document id shape."""
    return _OBJECT_ID_RE.fullmatch(value or "") is not None
