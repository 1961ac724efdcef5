from __future__ import annotations

import asyncio
from http.cookies import SimpleCookie

from conftest import FakeTransport, next_data_html
from venmo_web_client.api.auth import AuthHandshake
from venmo_web_client.api.cookies import build_cookie_header, parse_set_cookie
from venmo_web_client.api.endpoints import USER_AGENT, VenmoEndpoints
from venmo_web_client.api.session import DeviceIdentity, SessionState
from venmo_web_client.api.transport import HttpResponse


def test_parse_set_cookie_ignores_attributes_and_order() -> None:
    a = ["_csrf=abc; Path=/; HttpOnly", "api_access_token=tok; Secure; SameSite=Lax"]
    b = list(reversed(a))
    assert parse_set_cookie(a) == parse_set_cookie(b) == {"_csrf": "abc", "api_access_token": "tok"}


def test_parse_set_cookie_expires_date_and_empty_value() -> None:
    values = [
        "login_email=; Path=/; Expires=Thu, 01 Jan 1970 00:00:00 GMT",
        "api_access_token=tok==; Path=/; Expires=Wed, 21 Oct 2026 07:28:00 GMT; HttpOnly",
    ]
    assert parse_set_cookie(values) == {"login_email": "", "api_access_token": "tok=="}


def test_quoted_values_keep_delimiters() -> None:
    parsed = parse_set_cookie(['_csrf="ab;cd"; Path=/; HttpOnly', 'w_fc="x, y=z"; Path=/', "v_id=fp01-x"])
    assert parsed == {"_csrf": "ab;cd", "w_fc": "x, y=z", "v_id": "fp01-x"}


def test_later_cookie_wins() -> None:
    assert parse_set_cookie(["_csrf=old", "_csrf=new"]) == {"_csrf": "new"}


def test_build_cookie_header_skips_empty_values() -> None:
    header = build_cookie_header([("v_id", "fp01-1"), ("w_fc", None), ("_csrf", ""), ("api_access_token", "t")])
    assert header == "v_id=fp01-1; api_access_token=t"
    assert build_cookie_header({"a": "1", "b": None}) == "a=1"


def test_http_response_helpers() -> None:
    resp = HttpResponse(
        status=201,
        text='{"ok": true}',
        headers={"Venmo-Otp-Secret": "s3cr3t"},
        set_cookies=["_csrf=abc; Path=/"],
    )
    assert resp.ok
    assert resp.header("venmo-otp-secret") == "s3cr3t"
    assert resp.header("missing") is None
    assert resp.cookies == {"_csrf": "abc"}
    assert resp.json() == {"ok": True}
    assert not HttpResponse(status=401).ok


def test_http_response_reads_library_jar() -> None:
    jar = SimpleCookie()
    jar.load('api_access_token="a;b"; Path=/; HttpOnly')
    resp = HttpResponse(status=200, jar=jar)
    assert resp.cookies == {"api_access_token": "a;b"}


def test_handshake_stores_csrf_cookie_containing_semicolon(credentials) -> None:
    transport = FakeTransport()
    transport.route(
        "GET",
        VenmoEndpoints.verify_bank(),
        lambda req: HttpResponse(status=200, text=next_data_html(), set_cookies=['_csrf="ab;cd"; Path=/; HttpOnly']),
    )
    session = SessionState()
    hs = AuthHandshake(
        credentials=credentials,
        device=DeviceIdentity.generate(),
        session=session,
        transport=transport,
        user_agent=USER_AGENT,
    )

    asyncio.run(hs.login())

    assert session.csrf_cookie == "ab;cd"
