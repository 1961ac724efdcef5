from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .api.client import VenmoClient
from .browser.client import BrowserPaymentClient
from .config import AppConfig, load_config
from .errors import VenmoError
from .logging_config import configure_logging
from .util.money import cents_to_money_str, money_to_cents


logger = logging.getLogger("venmo_web_client")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="venmo_web_client")
    p.add_argument(
        "--env-file",
        default=".env",
        help="Path to a dotenv file (default: .env). If missing, env vars must already be set.",
    )
    p.add_argument("--config", default="config.yaml", help="Optional YAML config (default: config.yaml)")

    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("login", help="Run the login handshake and report the identities on the account")
    sub.add_parser("identities", help="List account identities (personal/business) and balances")

    stories = sub.add_parser("stories", help="Print the transaction feed, newest first")
    stories.add_argument("--feed-type", choices=["me", "friend"], default="me")
    stories.add_argument(
        "--external-id",
        default="",
        help="Identity external id (default: the personal identity from `identities`)",
    )
    stories.add_argument("--pages", type=int, default=1, help="Feed pages to follow (default: 1)")

    sub.add_parser("funding", help="List funding instruments (use an id as --funding-source for pay)")

    search = sub.add_parser("search", help="Resolve a name or @username to a user id")
    search.add_argument("term")

    pay = sub.add_parser("pay", help="Check eligibility and submit a payment or request")
    pay.add_argument("--to", required=True, help="Name or @username (first search result is used)")
    pay.add_argument("--amount", required=True, help="Dollar amount, e.g. 12.34")
    pay.add_argument("--note", required=True)
    pay.add_argument("--request", action="store_true", help="Request money instead of paying")
    pay.add_argument("--audience", choices=["private", "friends", "public"], default="private")
    pay.add_argument(
        "--funding-source",
        default="",
        help="Funding instrument id (default: the wallet entry marked default for peer payments)",
    )
    pay.add_argument("--dry-run", action="store_true", help="Stop after the eligibility check")

    bpay = sub.add_parser("browser-pay", help="Pay through the web UI with a real browser (Playwright/WebKit)")
    bpay.add_argument("--to", required=True, help="Name or @username (first search result is used)")
    bpay.add_argument("--amount", required=True, help="Dollar amount, e.g. 12.34")
    bpay.add_argument("--note", required=True)
    bpay.add_argument("--headful", action="store_true", help="Show the browser window (debug)")
    bpay.add_argument("--slowmo-ms", type=int, default=None, help="Playwright slow motion in milliseconds (debug).")

    return p


def _parse_amount_cents(raw: str) -> int:
    try:
        cents = money_to_cents(raw)
    except ValueError as e:
        raise SystemExit(f"Invalid amount: {raw!r}") from e
    if cents <= 0:
        raise SystemExit(f"Amount must be positive: {raw!r}")
    return cents


def _client(cfg: AppConfig) -> VenmoClient:
    return VenmoClient(
        cfg.credential_set(),
        user_agent=cfg.client.user_agent,
        timeout=cfg.client.timeout_seconds,
        eager_device_correlation=cfg.client.eager_device_correlation,
    )


async def _cmd_login(cfg: AppConfig) -> None:
    venmo = _client(cfg)
    await venmo.login()
    identities = await venmo.get_identities()
    logger.info("Login OK (identities=%d)", len(identities))
    for ident in identities:
        print(f"{ident.identity_type}\t@{ident.username}\t{ident.display_name}")


async def _cmd_identities(cfg: AppConfig) -> None:
    venmo = _client(cfg)
    await venmo.login()
    for ident in await venmo.get_identities():
        print(
            f"{ident.external_id}\t{ident.identity_type}\t@{ident.username}\t"
            f"{ident.display_name}\t{cents_to_money_str(ident.balance_cents)}"
        )


async def _cmd_stories(cfg: AppConfig, *, feed_type: str, external_id: str, pages: int) -> None:
    venmo = _client(cfg)
    await venmo.login()
    if not external_id:
        identities = await venmo.get_identities()
        personal = next((i for i in identities if i.identity_type == "personal"), None)
        if personal is None:
            raise SystemExit("No personal identity found; pass --external-id.")
        external_id = personal.external_id

    async for story in venmo.iter_stories(feed_type, external_id, max_pages=pages):  # type: ignore[arg-type]
        when = story.date.date().isoformat() if story.date else "?"
        title = story.title
        sender = title.sender.display_name if title and title.sender else ""
        receiver = title.receiver.display_name if title and title.receiver else ""
        note = story.note.content if story.note and story.note.content else ""
        print(f"{when}\t{story.amount}\t{sender} -> {receiver}\t{note}")


async def _cmd_funding(cfg: AppConfig) -> None:
    venmo = _client(cfg)
    await venmo.login()
    instruments = await venmo.get_funding_instruments()
    for w in instruments.wallet:
        extra = ""
        if w.metadata and w.metadata.available_balance and w.metadata.available_balance.display_string:
            extra = w.metadata.available_balance.display_string
        elif w.metadata and w.metadata.last_four_digits:
            extra = f"...{w.metadata.last_four_digits}"
        print(
            f"{w.id}\t{w.instrument_type}\t{w.name}\t{extra}\t"
            f"peer={w.roles.peer_payments or '-'} merchant={w.roles.merchant_payments or '-'}"
        )


async def _cmd_search(cfg: AppConfig, term: str) -> int:
    venmo = _client(cfg)
    await venmo.login()
    person = await venmo.get_person(term)
    if person is None:
        print(f"No match for {term!r}")
        return 1
    print(f"{person.id}\t@{person.handle}\t{person.display_name}\tfriend={person.is_friend}")
    return 0


async def _cmd_pay(
    cfg: AppConfig,
    *,
    to: str,
    amount_in_cents: int,
    note: str,
    action: str,
    audience: str,
    funding_source: str,
    dry_run: bool,
) -> int:
    venmo = _client(cfg)
    await venmo.login()

    person = await venmo.get_person(to)
    if person is None:
        raise SystemExit(f"No Venmo user found for {to!r}")
    logger.info("Resolved %r -> @%s (%s)", to, person.handle, person.display_name)

    instruments = await venmo.get_funding_instruments()
    if funding_source:
        chosen = instruments.get(funding_source)
        if chosen is None:
            raise SystemExit(f"Unknown funding source {funding_source!r} (see `funding` for valid ids).")
    else:
        chosen = instruments.default_for("peer") or instruments.balance()
        if chosen is None:
            raise SystemExit("No default funding instrument found; pass --funding-source (see `funding`).")
    funding_source = chosen.id
    logger.info("Using funding source %s (%s)", chosen.id, chosen.name)

    if dry_run:
        eligibility = await venmo.get_eligibility(person.id, amount_in_cents, action, note)  # type: ignore[arg-type]
        fees = ", ".join(f"{f.fee_type}" for f in eligibility.fees if f.fee_type) or "none"
        print(f"eligible={eligibility.eligible} fees={fees}")
        return 0 if eligibility.eligible else 1

    await venmo.send_payment(
        target_user_id=person.id,
        amount_in_cents=amount_in_cents,
        note=note,
        funding_source_id=funding_source,
        type=action,  # type: ignore[arg-type]
        audience=audience,  # type: ignore[arg-type]
    )
    print(f"Submitted {action} of {cents_to_money_str(amount_in_cents)} to @{person.handle}. Check `stories` to confirm.")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    env_path = Path(args.env_file)
    if env_path.exists():
        load_dotenv(env_path)

    # Default logging: can be overridden once config is loaded.
    configure_logging(level=os.getenv("LOG_LEVEL", "INFO"))

    try:
        cfg = load_config(args.config)
    except ValueError as e:
        # pydantic.ValidationError is a ValueError
        logger.error("Invalid configuration: %s", e)
        return 2
    configure_logging(level=cfg.logging.level, file_path=cfg.logging.file_path or None)

    try:
        if args.cmd == "login":
            asyncio.run(_cmd_login(cfg))
            return 0

        if args.cmd == "identities":
            asyncio.run(_cmd_identities(cfg))
            return 0

        if args.cmd == "stories":
            asyncio.run(
                _cmd_stories(cfg, feed_type=args.feed_type, external_id=args.external_id, pages=args.pages)
            )
            return 0

        if args.cmd == "funding":
            asyncio.run(_cmd_funding(cfg))
            return 0

        if args.cmd == "search":
            return asyncio.run(_cmd_search(cfg, args.term))

        if args.cmd == "pay":
            return asyncio.run(
                _cmd_pay(
                    cfg,
                    to=args.to,
                    amount_in_cents=_parse_amount_cents(args.amount),
                    note=args.note,
                    action="request" if args.request else "pay",
                    audience=args.audience,
                    funding_source=args.funding_source,
                    dry_run=args.dry_run,
                )
            )

        if args.cmd == "browser-pay":
            amount_in_cents = _parse_amount_cents(args.amount)
            slow_mo = cfg.browser.slow_mo_ms if args.slowmo_ms is None else args.slowmo_ms
            remaining = BrowserPaymentClient(creds=cfg.credential_set()).pay(
                recipient=args.to,
                amount_in_cents=amount_in_cents,
                note=args.note,
                headless=cfg.browser.headless and not args.headful,
                slow_mo_ms=slow_mo,
                debug_dir=cfg.browser.debug_dir,
            )
            if remaining is None:
                print(f"Paid {cents_to_money_str(amount_in_cents)} to {args.to}.")
            else:
                print(f"Paid {cents_to_money_str(amount_in_cents)} to {args.to}. Remaining balance ~{cents_to_money_str(remaining)}")
            return 0
    except VenmoError as e:
        logger.error("%s", e)
        return 1

    raise AssertionError("Unhandled command")


if __name__ == "__main__":
    sys.exit(main())
