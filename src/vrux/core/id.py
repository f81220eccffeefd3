"""ID Generation.

ULID-based identifiers with type prefixes (req_*, usr_*, and user-* for
user-created templates) so logs stay readable and IDs sort by creation
time. Share IDs are short random hex tokens since they end up in public
URLs.
"""

import secrets
from typing import NewType

from ulid import ULID

RequestID = NewType("RequestID", str)
TemplateID = NewType("TemplateID", str)
UserID = NewType("UserID", str)
ShareID = NewType("ShareID", str)
SessionToken = NewType("SessionToken", str)


class Prefix:
    """ID prefix constants."""

    REQUEST = "req"
    TEMPLATE = "user"  # user-contributed templates, built-ins use slugs
    USER = "usr"


def generate_prefixed(prefix: str, sep: str = "_") -> str:
    """Generate ULID with type prefix."""
    return f"{prefix}{sep}{ULID()}"


def new_request_id() -> RequestID:
    """Generate new request ID."""
    return RequestID(generate_prefixed(Prefix.REQUEST))


def new_template_id() -> TemplateID:
    """Generate ID for a user-created template (``user-<ulid>``)."""
    return TemplateID(generate_prefixed(Prefix.TEMPLATE, sep="-"))


def new_user_id() -> UserID:
    """Generate new user ID."""
    return UserID(generate_prefixed(Prefix.USER))


def new_share_id() -> ShareID:
    """Generate share ID: 6 random bytes as 12 hex characters."""
    return ShareID(secrets.token_hex(6))


def new_session_token() -> SessionToken:
    """Generate opaque session token: 32 random bytes as hex."""
    return SessionToken(secrets.token_hex(32))

