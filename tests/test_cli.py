from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from conftest import FakeGraphQL, FakeTransport
from venmo_web_client import cli
from venmo_web_client.api.client import VenmoClient
from venmo_web_client.api.endpoints import VenmoEndpoints
from venmo_web_client.api.queries import FUNDING_INSTRUMENTS_OPERATION, PEOPLE_OPERATION
from venmo_web_client.api.transport import HttpResponse
from venmo_web_client.config import AppConfig
from venmo_web_client.errors import HandshakeError


def test_parser_pay_arguments() -> None:
    args = cli._build_parser().parse_args(
        ["pay", "--to", "@bob", "--amount", "12.34", "--note", "pizza", "--request", "--dry-run"]
    )
    assert args.cmd == "pay"
    assert args.to == "@bob"
    assert args.request is True
    assert args.dry_run is True
    assert args.audience == "private"


def test_parser_requires_command() -> None:
    with pytest.raises(SystemExit):
        cli._build_parser().parse_args([])


def test_parse_amount_cents() -> None:
    assert cli._parse_amount_cents("12.34") == 1234
    assert cli._parse_amount_cents("$1,000") == 100000
    with pytest.raises(SystemExit):
        cli._parse_amount_cents("twelve")
    with pytest.raises(SystemExit):
        cli._parse_amount_cents("0")


def test_main_returns_2_on_invalid_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("VENMO_USERNAME", "VENMO_PASSWORD", "VENMO_BANK_ACCOUNT_NUMBER"):
        monkeypatch.delenv(name, raising=False)

    rc = cli.main(
        [
            "--env-file",
            str(tmp_path / "missing.env"),
            "--config",
            str(tmp_path / "missing.yaml"),
            "identities",
        ]
    )
    assert rc == 2


def test_main_returns_1_on_client_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VENMO_USERNAME", "alice@example.com")
    monkeypatch.setenv("VENMO_PASSWORD", "hunter2")
    monkeypatch.setenv("VENMO_BANK_ACCOUNT_NUMBER", "000123456789")
    monkeypatch.delenv("LOG_FILE", raising=False)

    async def failing_login(self):
        raise HandshakeError("login", "unexpected login response: expected status 401, got 200", status=200)

    monkeypatch.setattr(cli.VenmoClient, "login", failing_login)

    rc = cli.main(
        [
            "--env-file",
            str(tmp_path / "missing.env"),
            "--config",
            str(tmp_path / "missing.yaml"),
            "identities",
        ]
    )
    assert rc == 1


def _pay_setup(monkeypatch: pytest.MonkeyPatch):
    cfg = AppConfig.model_validate(
        {"credentials": {"username": "alice@example.com", "password": "hunter2", "bank_account_number": "1"}}
    )
    transport = FakeTransport()
    graphql = FakeGraphQL(
        responses={
            PEOPLE_OPERATION: {"search": {"people": {"edges": [{"node": {"id": "2222", "handle": "bob"}}]}}},
            FUNDING_INSTRUMENTS_OPERATION: {
                "profile": {
                    "wallet": [
                        {"id": "bank-1", "instrumentType": "bank", "roles": {"peerPayments": "default"}},
                        {"id": "bal-1", "instrumentType": "balance", "roles": {"peerPayments": "backup"}},
                    ]
                }
            },
        }
    )
    transport.route(
        "POST",
        VenmoEndpoints.eligibility(),
        lambda req: HttpResponse(status=200, text='{"eligible": true, "eligibilityToken": "tok"}'),
    )
    transport.route("POST", VenmoEndpoints.payments(), lambda req: HttpResponse(status=200, text=""))
    monkeypatch.setattr(
        cli, "_client", lambda c: VenmoClient(c.credential_set(), transport=transport, graphql=graphql)
    )
    return cfg, transport


def _pay(cfg, funding_source: str) -> int:
    return asyncio.run(
        cli._cmd_pay(
            cfg,
            to="bob",
            amount_in_cents=500,
            note="lunch",
            action="pay",
            audience="private",
            funding_source=funding_source,
            dry_run=False,
        )
    )


def test_pay_rejects_unknown_funding_source(monkeypatch: pytest.MonkeyPatch) -> None:
    cfg, transport = _pay_setup(monkeypatch)
    with pytest.raises(SystemExit, match="Unknown funding source"):
        _pay(cfg, "card-999")
    assert transport.calls_to(VenmoEndpoints.payments()) == []


@pytest.mark.parametrize("requested, expected", [("bal-1", "bal-1"), ("", "bank-1")])
def test_pay_uses_listed_or_default_funding_source(
    monkeypatch: pytest.MonkeyPatch, requested: str, expected: str
) -> None:
    cfg, transport = _pay_setup(monkeypatch)

    assert _pay(cfg, requested) == 0

    payment = transport.calls_to(VenmoEndpoints.payments())[0]
    assert payment.json_body["fundingSourceID"] == expected
    assert payment.json_body["targetUserDetails"] == {"userId": "2222"}
