from __future__ import annotations

from typing import Optional

from .cookies import build_cookie_header
from .endpoints import (
    ACCESS_TOKEN_COOKIE,
    CSRF_COOKIE,
    DEVICE_CORRELATION_COOKIE,
    DEVICE_ID_COOKIE,
)
from .session import DeviceIdentity, SessionState


JSON_CONTENT_TYPE = "application/json"


def csrf_headers(csrf_token: str) -> dict[str, str]:
    # One logical value. The web app reads either name depending on the endpoint, so both are always sent.
    return {"csrf-token": csrf_token, "xsrf-token": csrf_token}


def base_headers(user_agent: str, *, cookie: str = "", json_body: bool = False) -> dict[str, str]:
    headers = {"user-agent": user_agent}
    if cookie:
        headers["Cookie"] = cookie
    if json_body:
        headers["Content-Type"] = JSON_CONTENT_TYPE
    return headers


def session_cookie(device: DeviceIdentity, session: SessionState) -> str:
    """
    Cookie header for authenticated calls: device id, access token, CSRF cookie and (when known) `w_fc`.
    """
    return build_cookie_header(
        [
            (DEVICE_ID_COOKIE, device.id),
            (DEVICE_CORRELATION_COOKIE, session.device_correlation_cookie),
            (CSRF_COOKIE, session.csrf_cookie),
            (ACCESS_TOKEN_COOKIE, session.access_token),
        ]
    )


def session_headers(
    device: DeviceIdentity,
    session: SessionState,
    user_agent: str,
    *,
    csrf: bool = False,
    json_body: bool = False,
) -> dict[str, str]:
    headers = base_headers(user_agent, cookie=session_cookie(device, session), json_body=json_body)
    token: Optional[str] = session.csrf_token
    if csrf and token:
        headers.update(csrf_headers(token))
    return headers
