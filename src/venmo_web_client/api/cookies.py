from __future__ import annotations

import logging
from http.cookies import CookieError, Morsel, SimpleCookie
from typing import Iterable, Mapping, Optional, Tuple


logger = logging.getLogger(__name__)


def load_set_cookie(values: Iterable[str]) -> SimpleCookie:
    """
    Load raw `Set-Cookie` header values (one per header) into a `SimpleCookie`.

    Quoted values keep their `;`, `,` and `=`; attributes (Path, Expires, HttpOnly, ...) end up on the Morsel.
    A name seen twice keeps the later value, like a browser cookie jar.
    """
    jar = SimpleCookie()
    for raw in values:
        try:
            jar.load(raw)
        except CookieError:
            logger.warning("Ignoring malformed Set-Cookie header")
    return jar


def cookie_values(jar: Mapping[str, Morsel]) -> dict[str, str]:
    # Morsel.value is the unquoted value.
    return {name: morsel.value for name, morsel in jar.items()}


def parse_set_cookie(values: Iterable[str]) -> dict[str, str]:
    """
    Raw `Set-Cookie` values -> name -> value map.
    """
    return cookie_values(load_set_cookie(values))


def build_cookie_header(pairs: Iterable[Tuple[str, Optional[str]]] | Mapping[str, Optional[str]]) -> str:
    """
    Render a `Cookie` request header. Pairs with an empty/None value are skipped.
    """
    items = pairs.items() if isinstance(pairs, Mapping) else pairs
    return "; ".join(f"{k}={v}" for k, v in items if v)
