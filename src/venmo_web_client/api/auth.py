from __future__ import annotations

import json
import logging
import re
import uuid
from typing import Any, Optional

from ..errors import HandshakeError
from .cookies import build_cookie_header
from .endpoints import (
    ACCESS_TOKEN_COOKIE,
    CSRF_COOKIE,
    DEVICE_CORRELATION_COOKIE,
    DEVICE_ID_COOKIE,
    LOGIN_EMAIL_COOKIE,
    MFA_REQUIRED_MESSAGE,
    OTP_SECRET_HEADER,
    VenmoEndpoints,
)
from .headers import base_headers, csrf_headers, session_headers
from .session import CredentialSet, DeviceIdentity, HandshakeState, SessionState
from .transport import HttpResponse, Transport


logger = logging.getLogger(__name__)

_NEXT_DATA_RE = re.compile(
    r'<script[^>]*\bid="__NEXT_DATA__"[^>]*>(.*?)</script>',
    re.S | re.I,
)
_CSRF_TOKEN_PATH = ("props", "pageProps", "csrfToken")

# How much of a failed response body we keep on the error (the MFA step is the usual suspect).
_BODY_SNIPPET_CHARS = 2000

STEP_LOGIN = "login"
STEP_VERIFY_BANK = "verify-bank"
STEP_MFA_SIGN_IN = "mfa-sign-in"
STEP_DEVICE_DATA = "device-data"


def _snippet(text: str) -> str:
    return (text or "")[:_BODY_SNIPPET_CHARS]


def extract_next_data(html: str) -> dict[str, Any]:
    """
    Pull the JSON embedded in Next.js's `<script id="__NEXT_DATA__">` tag.

    Raises ValueError when the tag is missing or the payload is not a JSON object.
    """
    m = _NEXT_DATA_RE.search(html or "")
    if not m:
        raise ValueError("__NEXT_DATA__ script tag not found")
    data = json.loads(m.group(1))
    if not isinstance(data, dict):
        raise ValueError("__NEXT_DATA__ payload is not a JSON object")
    return data


def _dig(data: Any, path: tuple[str, ...]) -> Optional[Any]:
    cur = data
    for key in path:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(key)
    return cur


class AuthHandshake:
    """
    Drives the web login: credentials -> MFA challenge -> CSRF bootstrap -> bank-account MFA -> access token.

    The web app was not built for programmatic use and the exact cookie/header mix has drifted over time,
    so every extraction rule lives here and nothing else in the package knows about it.
    """

    def __init__(
        self,
        *,
        credentials: CredentialSet,
        device: DeviceIdentity,
        session: SessionState,
        transport: Transport,
        user_agent: str,
        eager_device_correlation: bool = False,
    ) -> None:
        self._credentials = credentials
        self._device = device
        self._session = session
        self._transport = transport
        self._user_agent = user_agent
        self._eager_device_correlation = eager_device_correlation
        self.state = HandshakeState.UNSTARTED

    @property
    def device(self) -> DeviceIdentity:
        return self._device

    async def login(self) -> str:
        """
        Run the full handshake and return the access token.

        Fails closed: any unexpected status or missing artifact raises `HandshakeError`, leaves the handshake in
        FAILED and clears the session. There is no retry; calling `login()` again restarts from step 1, and
        after a failure it does so with a new device identity (fresh device + OTP cycle).
        """
        if self.state == HandshakeState.FAILED:
            self._device = DeviceIdentity.generate()
            logger.info("Previous login failed; retrying with a new device id")
        self._session.clear()
        self.state = HandshakeState.UNSTARTED
        try:
            otp_secret = await self._submit_credentials()
            self.state = HandshakeState.MFA_CHALLENGED

            await self._bootstrap_csrf(otp_secret)
            self.state = HandshakeState.CSRF_ACQUIRED

            await self._verify_mfa(otp_secret)
            self.state = HandshakeState.AUTHENTICATED

            if self._eager_device_correlation:
                await self.acquire_device_correlation()
        except Exception:
            self.state = HandshakeState.FAILED
            self._session.clear()
            raise

        logger.info("Login complete (device=%s)", self._device.id)
        return self._session.access_token or ""

    async def _submit_credentials(self) -> str:
        resp = await self._transport.request(
            "POST",
            VenmoEndpoints.login(),
            headers=base_headers(
                self._user_agent,
                cookie=build_cookie_header([(DEVICE_ID_COOKIE, self._device.id)]),
                json_body=True,
            ),
            json_body={
                "phoneEmailUsername": self._credentials.username,
                "password": self._credentials.password,
                "return_json": "true",
            },
        )

        # An MFA-protected account always answers the first POST with 401 + a specific error message.
        if resp.status != 401:
            raise HandshakeError(
                STEP_LOGIN,
                f"unexpected login response: expected status 401, got {resp.status}",
                status=resp.status,
                body=_snippet(resp.text),
            )

        message = self._error_message(resp)
        if message != MFA_REQUIRED_MESSAGE:
            raise HandshakeError(
                STEP_LOGIN,
                f"unexpected login response: expected MFA challenge, got error message {message!r}",
                status=resp.status,
                field="error.message",
                body=_snippet(resp.text),
            )

        otp_secret = resp.header(OTP_SECRET_HEADER)
        if not otp_secret:
            raise HandshakeError(
                STEP_LOGIN,
                "MFA challenge response is missing the OTP secret header",
                status=resp.status,
                field=OTP_SECRET_HEADER,
            )

        logger.info("Login accepted credentials; MFA challenge issued")
        return otp_secret

    def _error_message(self, resp: HttpResponse) -> Optional[str]:
        try:
            data = resp.json()
        except ValueError:
            return None
        message = _dig(data, ("error", "message"))
        return message if isinstance(message, str) else None

    async def _bootstrap_csrf(self, otp_secret: str) -> None:
        resp = await self._transport.request(
            "GET",
            VenmoEndpoints.verify_bank(),
            headers=base_headers(
                self._user_agent,
                cookie=build_cookie_header([(DEVICE_ID_COOKIE, self._device.id)]),
                json_body=True,
            ),
            params={"k": otp_secret},
        )

        # Cookie first: without it the token in the page is useless, so don't bother parsing HTML.
        csrf_cookie = resp.cookies.get(CSRF_COOKIE)
        if not csrf_cookie:
            raise HandshakeError(
                STEP_VERIFY_BANK,
                "verify-bank response did not set the CSRF cookie",
                status=resp.status,
                field=CSRF_COOKIE,
            )

        try:
            next_data = extract_next_data(resp.text)
        except ValueError as e:
            raise HandshakeError(
                STEP_VERIFY_BANK,
                f"could not read embedded page data ({e})",
                status=resp.status,
                field="__NEXT_DATA__",
                body=_snippet(resp.text),
            ) from e

        csrf_token = _dig(next_data, _CSRF_TOKEN_PATH)
        if not isinstance(csrf_token, str) or not csrf_token:
            raise HandshakeError(
                STEP_VERIFY_BANK,
                "embedded page data has no CSRF token",
                status=resp.status,
                field=".".join(_CSRF_TOKEN_PATH),
            )

        self._session.csrf_cookie = csrf_cookie
        self._session.csrf_token = csrf_token
        logger.info("CSRF material acquired")

    async def _verify_mfa(self, otp_secret: str) -> None:
        session = self._session
        headers = base_headers(
            self._user_agent,
            cookie=build_cookie_header(
                [
                    (DEVICE_ID_COOKIE, self._device.id),
                    (CSRF_COOKIE, session.csrf_cookie),
                    (LOGIN_EMAIL_COOKIE, self._credentials.username),
                ]
            ),
            json_body=True,
        )
        headers.update(csrf_headers(session.csrf_token or ""))
        headers[OTP_SECRET_HEADER] = otp_secret

        resp = await self._transport.request(
            "POST",
            VenmoEndpoints.mfa_sign_in(),
            headers=headers,
            json_body={"accountNumber": self._credentials.bank_account_number, "isGroup": False},
        )

        if resp.status not in (200, 201):
            logger.debug("MFA sign-in rejected (status=%d) body=%s", resp.status, _snippet(resp.text))
            raise HandshakeError(
                STEP_MFA_SIGN_IN,
                f"MFA sign-in was rejected: expected status 200/201, got {resp.status}",
                status=resp.status,
                body=_snippet(resp.text),
            )

        access_token = resp.cookies.get(ACCESS_TOKEN_COOKIE)
        if not access_token:
            raise HandshakeError(
                STEP_MFA_SIGN_IN,
                "MFA sign-in response did not set the access token cookie",
                status=resp.status,
                field=ACCESS_TOKEN_COOKIE,
            )

        session.access_token = access_token
        logger.info("MFA verified; access token acquired")

    async def acquire_device_correlation(self) -> str:
        """
        Obtain the `w_fc` device-correlation cookie. Payments are rejected without it.
        """
        self._session.require_authenticated("acquire_device_correlation")

        correlation_id = str(uuid.uuid4())
        resp = await self._transport.request(
            "POST",
            VenmoEndpoints.device_data(),
            headers=session_headers(self._device, self._session, self._user_agent, csrf=True, json_body=True),
            json_body={"correlationId": correlation_id},
        )

        if resp.status != 200:
            raise HandshakeError(
                STEP_DEVICE_DATA,
                f"device-data was rejected: expected status 200, got {resp.status}",
                status=resp.status,
                body=_snippet(resp.text),
            )

        w_fc = resp.cookies.get(DEVICE_CORRELATION_COOKIE)
        if not w_fc:
            raise HandshakeError(
                STEP_DEVICE_DATA,
                "device-data response did not set the device correlation cookie",
                status=resp.status,
                field=DEVICE_CORRELATION_COOKIE,
            )

        self._session.device_correlation_cookie = w_fc
        logger.info("Device correlation cookie acquired")
        return w_fc
