from __future__ import annotations

import asyncio
import os

import pytest

from venmo_web_client.api.client import VenmoClient
from venmo_web_client.api.session import CredentialSet, HandshakeState


_CREDS = ("VENMO_USERNAME", "VENMO_PASSWORD", "VENMO_BANK_ACCOUNT_NUMBER")

pytestmark = [
    pytest.mark.live,
    pytest.mark.skipif(
        not all(os.getenv(name) for name in _CREDS),
        reason="live test needs VENMO_USERNAME, VENMO_PASSWORD and VENMO_BANK_ACCOUNT_NUMBER",
    ),
]


def test_live_login_and_read_only_calls() -> None:
    """
    Read-only smoke test against the real web app. Never moves money.
    """
    client = VenmoClient(
        CredentialSet(
            username=os.environ["VENMO_USERNAME"],
            password=os.environ["VENMO_PASSWORD"],
            bank_account_number=os.environ["VENMO_BANK_ACCOUNT_NUMBER"],
        )
    )

    async def run():
        await client.login()
        identities = await client.get_identities()
        instruments = await client.get_funding_instruments()
        return identities, instruments

    identities, instruments = asyncio.run(run())

    assert client.state == HandshakeState.AUTHENTICATED
    assert identities
    assert instruments.wallet
