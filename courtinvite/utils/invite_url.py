# courtinvite/utils/invite_url.py
"""
Builders for the links the front end shares and redirects to.

Canonical invite links look like ``/{host_slug}/{public_code}``; sessions
published before codes existed are still reachable at ``/s/{session_id}``.
"""

from typing import Optional
from urllib.parse import quote, urlencode

from courtinvite.core.config import settings
from courtinvite.utils.slug import DEFAULT_HOST_SLUG

EDIT_MODES = ("preview", "payments", "edit")


def _absolute(path: str, base_url: Optional[str] = None) -> str:
    base = (base_url or settings.PUBLIC_BASE_URL).rstrip("/")
    return f"{base}{path}"


def share_path(host_slug: Optional[str], public_code: str) -> str:
    return f"/{quote(host_slug or DEFAULT_HOST_SLUG)}/{quote(public_code)}"


def share_url(host_slug: Optional[str], public_code: str, base_url: Optional[str] = None) -> str:
    return _absolute(share_path(host_slug, public_code), base_url)


def legacy_share_url(session_id: str, base_url: Optional[str] = None) -> str:
    return _absolute(f"/s/{quote(session_id)}", base_url)


def canonical_url(session, base_url: Optional[str] = None) -> str:
    """Share URL for a session: the code link when it has one, else the legacy id link."""
    if session.public_code:
        return share_url(session.host_slug, session.public_code, base_url)
    return legacy_share_url(session.id, base_url)


def host_edit_url(session_id: str, mode: str = "edit", base_url: Optional[str] = None) -> str:
    if mode not in EDIT_MODES:
        raise ValueError(f"Unknown edit mode: {mode}")
    query = urlencode({"mode": mode})
    return _absolute(f"/host/sessions/{quote(session_id)}/edit?{query}", base_url)
