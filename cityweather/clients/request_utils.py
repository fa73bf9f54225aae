from __future__ import annotations

from typing import Mapping, MutableMapping, Optional

from .. import __version__

USER_AGENT = f"cityweather/{__version__} (+https://www.ncdc.noaa.gov/cdo-web/)"


def build_request_headers(token: Optional[str], base: Optional[Mapping[str, str]] = None) -> MutableMapping[str, str]:
    """
    Return request headers for a CDO call.

    Args:
        token: CDO access token, sent in the ``token`` header.
        base: Optional mapping of headers to seed the final set (values here win over defaults).
    """
    headers: MutableMapping[str, str] = dict(base or {})
    headers.setdefault("User-Agent", USER_AGENT)
    headers.setdefault("Accept", "application/json")
    if token:
        headers["token"] = token
    return headers


def text_excerpt(text: Optional[str], limit: int = 200) -> str:
    """Shorten a response body for log and error messages."""
    if not text:
        return ""
    return text[:limit] + ("..." if len(text) > limit else "")
