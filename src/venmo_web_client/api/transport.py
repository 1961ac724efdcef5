from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import cached_property
from http.cookies import SimpleCookie
from typing import Any, Mapping, Optional, Protocol

from aiohttp import ClientSession, ClientTimeout, DummyCookieJar

from .cookies import cookie_values, parse_set_cookie


logger = logging.getLogger(__name__)


@dataclass
class HttpResponse:
    status: int
    text: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    # Raw Set-Cookie values, one per header (hand-built responses).
    set_cookies: list[str] = field(default_factory=list)
    # Cookies already parsed by the HTTP library.
    jar: SimpleCookie = field(default_factory=SimpleCookie, repr=False)

    @cached_property
    def cookies(self) -> dict[str, str]:
        # Parsed once per response; handshake steps and operations read from this map.
        return {**cookie_values(self.jar), **parse_set_cookie(self.set_cookies)}

    def header(self, name: str) -> Optional[str]:
        want = name.lower()
        for k, v in self.headers.items():
            if k.lower() == want:
                return v
        return None

    def json(self) -> Any:
        return json.loads(self.text)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Transport(Protocol):
    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        params: Optional[Mapping[str, str]] = None,
        json_body: Any = None,
    ) -> HttpResponse: ...


class AiohttpTransport:
    """
    Minimal aiohttp transport.

    Uses a `DummyCookieJar` so the only cookies sent are the ones the caller puts in the `Cookie` header;
    the handshake decides per endpoint which cookies go out. Response cookies are still parsed by aiohttp
    (`resp.cookies`) and handed over as the response jar.
    """

    def __init__(self, *, timeout: float = 30) -> None:
        self._timeout = timeout

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        params: Optional[Mapping[str, str]] = None,
        json_body: Any = None,
    ) -> HttpResponse:
        kwargs: dict[str, Any] = {"headers": dict(headers)}
        if params:
            kwargs["params"] = dict(params)
        if json_body is not None:
            kwargs["data"] = json.dumps(json_body)

        async with ClientSession(
            cookie_jar=DummyCookieJar(),
            timeout=ClientTimeout(total=self._timeout),
        ) as session:
            async with session.request(method, url, **kwargs) as resp:
                text = await resp.text()
                logger.debug("%s %s -> %d", method, url, resp.status)
                return HttpResponse(
                    status=resp.status,
                    text=text,
                    headers={k: v for k, v in resp.headers.items()},
                    jar=resp.cookies,
                )
