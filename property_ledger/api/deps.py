"""
Shared request dependencies.
"""

from fastapi import Header

from property_ledger.config import get_settings


def get_actor(x_actor: str | None = Header(default=None, alias="X-Actor")) -> str:
    """
    Identify who is posting.

    The X-Actor header is recorded as-is in posted_by and audit
    records. Requests without it post as the configured default.
    """
    if x_actor and x_actor.strip():
        return x_actor.strip()[:100]
    return get_settings().DEFAULT_ACTOR
