from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from venmo_web_client.api.client import VenmoClient  # noqa: E402
from venmo_web_client.api.endpoints import VenmoEndpoints  # noqa: E402
from venmo_web_client.api.session import CredentialSet  # noqa: E402
from venmo_web_client.api.transport import HttpResponse  # noqa: E402


def pytest_configure(config: Any) -> None:
    config.addinivalue_line(
        "markers",
        "live: tests that talk to the real Venmo web app (need VENMO_* credentials)",
    )


OTP_SECRET = "otp-secret-123"
CSRF_COOKIE_VALUE = "csrf-cookie-abc"
CSRF_TOKEN_VALUE = "csrf-token-xyz"
ACCESS_TOKEN_VALUE = "access-token-777"
W_FC_VALUE = "wfc-555"


def next_data_html(csrf_token: Optional[str] = CSRF_TOKEN_VALUE) -> str:
    page_props: Dict[str, Any] = {}
    if csrf_token is not None:
        page_props["csrfToken"] = csrf_token
    payload = json.dumps({"props": {"pageProps": page_props}, "page": "/account/mfa/verify-bank"})
    return (
        "<html><head><title>Verify</title></head><body><div id=\"__next\"></div>"
        f'<script id="__NEXT_DATA__" type="application/json">{payload}</script>'
        "</body></html>"
    )


@dataclass
class RecordedRequest:
    method: str
    url: str
    headers: Dict[str, str]
    params: Dict[str, str]
    json_body: Any

    def cookie(self, name: str) -> Optional[str]:
        for part in (self.headers.get("Cookie") or "").split(";"):
            k, _, v = part.strip().partition("=")
            if k == name:
                return v
        return None


Handler = Callable[[RecordedRequest], HttpResponse]


@dataclass
class FakeTransport:
    """
    In-memory stand-in for the Venmo web app. Routes are keyed by (METHOD, url); the default routes implement a
    well-behaved MFA login. Tests override single routes to inject failures.
    """

    routes: Dict[tuple, Handler] = field(default_factory=dict)
    calls: List[RecordedRequest] = field(default_factory=list)

    def __post_init__(self) -> None:
        defaults: Dict[tuple, Handler] = {
            ("POST", VenmoEndpoints.login()): lambda req: HttpResponse(
                status=401,
                text=json.dumps({"error": {"code": 81109, "message": "Additional authentication is required"}}),
                headers={"Venmo-Otp-Secret": OTP_SECRET},
            ),
            ("GET", VenmoEndpoints.verify_bank()): lambda req: HttpResponse(
                status=200,
                text=next_data_html(),
                set_cookies=[f"_csrf={CSRF_COOKIE_VALUE}; Path=/; HttpOnly"],
            ),
            ("POST", VenmoEndpoints.mfa_sign_in()): lambda req: HttpResponse(
                status=201,
                text="{}",
                set_cookies=[
                    "login_email=; Path=/; Expires=Thu, 01 Jan 1970 00:00:00 GMT",
                    f"api_access_token={ACCESS_TOKEN_VALUE}; Path=/; Secure; HttpOnly",
                ],
            ),
            ("POST", VenmoEndpoints.device_data()): lambda req: HttpResponse(
                status=200,
                text="",
                set_cookies=[f"w_fc={W_FC_VALUE}; Path=/"],
            ),
        }
        for k, v in defaults.items():
            self.routes.setdefault(k, v)

    def route(self, method: str, url: str, handler: Handler) -> None:
        self.routes[(method, url)] = handler

    def calls_to(self, url: str) -> List[RecordedRequest]:
        return [c for c in self.calls if c.url == url]

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        params: Optional[Mapping[str, str]] = None,
        json_body: Any = None,
    ) -> HttpResponse:
        req = RecordedRequest(
            method=method,
            url=url,
            headers=dict(headers),
            params=dict(params or {}),
            json_body=json_body,
        )
        self.calls.append(req)
        handler = self.routes.get((method, url))
        if handler is None:
            return HttpResponse(status=404, text="not found")
        return handler(req)


@dataclass
class FakeGraphQL:
    responses: Dict[str, Any] = field(default_factory=dict)
    calls: List[Dict[str, Any]] = field(default_factory=list)

    async def execute(
        self,
        operation: str,
        query: str,
        *,
        variables: Optional[Mapping[str, Any]] = None,
        headers: Mapping[str, str],
    ) -> Dict[str, Any]:
        self.calls.append({"operation": operation, "variables": dict(variables or {}), "headers": dict(headers)})
        resp = self.responses.get(operation, {})
        return resp(variables) if callable(resp) else resp


@pytest.fixture
def credentials() -> CredentialSet:
    return CredentialSet(username="alice@example.com", password="hunter2", bank_account_number="000123456789")


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def graphql() -> FakeGraphQL:
    return FakeGraphQL()


@pytest.fixture
def client(credentials: CredentialSet, transport: FakeTransport, graphql: FakeGraphQL) -> VenmoClient:
    return VenmoClient(credentials, transport=transport, graphql=graphql)
