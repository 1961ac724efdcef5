from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Optional

from playwright.sync_api import Page, sync_playwright

from ..api.session import CredentialSet
from ..errors import BrowserPaymentError
from ..util.money import cents_to_money_str, money_to_cents
from .selectors import PaymentSelectors


logger = logging.getLogger(__name__)

ACCOUNT_URL = "https://account.venmo.com/"

_BALANCE_RE = re.compile(r"\$\s*[\d,]+(?:\.\d{1,2})?")


def parse_balance_cents(text: str) -> Optional[int]:
    """
    Balance widget text ("Venmo balance $12.34") -> cents. None when no amount is shown.
    """
    m = _BALANCE_RE.search(text or "")
    if not m:
        return None
    return money_to_cents(m.group(0))


def amount_input_value(amount_in_cents: int) -> str:
    # The amount box takes plain dollars ("12.5" and "12.50" both work; "$" is rejected).
    return cents_to_money_str(amount_in_cents).replace("$", "").replace(",", "")


class BrowserPaymentClient:
    """
    UI-driven payment through account.venmo.com, for when the private payments endpoint refuses the
    HTTP client. Drives WebKit with Playwright: sign in (bank-account MFA), then "Pay or Request".

    No browser state is persisted: every run signs in from scratch.
    """

    def __init__(
        self,
        *,
        creds: CredentialSet,
        selectors: Optional[PaymentSelectors] = None,
        account_url: str = ACCOUNT_URL,
    ) -> None:
        self.creds = creds
        self.selectors = selectors or PaymentSelectors()
        self.account_url = account_url

    def pay(
        self,
        *,
        recipient: str,
        amount_in_cents: int,
        note: str,
        headless: bool = True,
        slow_mo_ms: int = 0,
        debug_dir: str = "data/debug",
    ) -> Optional[int]:
        """
        Pay `recipient` (name or @username; the first search result is used).

        Returns the balance left after the payment in cents, estimated from the balance shown on the review
        screen, or None when the balance widget could not be read.
        """
        if amount_in_cents <= 0:
            raise ValueError("amount_in_cents must be positive")

        with sync_playwright() as p:
            browser = p.webkit.launch(headless=headless, slow_mo=int(slow_mo_ms or 0))
            try:
                ctx = browser.new_context()
                page = ctx.new_page()
                try:
                    page.goto(self.account_url)
                    page.wait_for_load_state("networkidle")

                    if self.selectors.sign_in_title_text in (page.title() or ""):
                        self._sign_in(page)

                    balance_cents = self._fill_payment(
                        page,
                        recipient=recipient,
                        amount_in_cents=amount_in_cents,
                        note=note,
                    )

                    logger.info("Confirming payment of %s to %r", cents_to_money_str(amount_in_cents), recipient)
                    page.get_by_role("button", name=self.selectors.pay_button).click()
                    page.wait_for_load_state("networkidle")
                except BrowserPaymentError:
                    self._save_debug(page, debug_dir=debug_dir, name_prefix="browser_pay_failed")
                    raise
                except Exception as e:
                    self._save_debug(page, debug_dir=debug_dir, name_prefix="browser_pay_failed")
                    raise BrowserPaymentError(f"Browser payment failed: {e}") from e
                finally:
                    ctx.close()
            finally:
                browser.close()

        if balance_cents is None:
            return None
        return balance_cents - amount_in_cents

    def _sign_in(self, page: Page) -> None:
        s = self.selectors
        logger.info("Signing in through the web UI")

        # The username step is skipped when the page remembers the user.
        if not page.is_visible(f"text='{self.creds.username}'"):
            username = page.get_by_label(s.username_label)
            username.click()
            username.fill(self.creds.username)
            username.press("Enter")

        password = page.get_by_label(s.password_label, exact=True)
        password.click()
        password.fill(self.creds.password)
        password.press("Enter")

        page.get_by_role("link", name=s.confirm_another_way_link).click()
        bank = page.get_by_label(s.bank_account_number_label)
        bank.click()
        bank.fill(self.creds.bank_account_number)
        page.get_by_role("button", name=s.confirm_button).click()
        page.get_by_role("button", name=s.not_now_button).click()

    def _fill_payment(self, page: Page, *, recipient: str, amount_in_cents: int, note: str) -> Optional[int]:
        s = self.selectors
        page.get_by_role("link", name=s.pay_or_request_link).click()

        amount = page.get_by_placeholder(s.amount_placeholder)
        amount.click()
        amount.fill(amount_input_value(amount_in_cents))

        search = None
        for placeholder in s.recipient_placeholders:
            loc = page.get_by_placeholder(placeholder)
            if loc.count() > 0:
                search = loc
                break
        if search is None:
            raise BrowserPaymentError("Recipient search box not found (placeholder text changed?)")

        search.click()
        # Results come from a GraphQL people search; wait for it before picking the first option.
        with page.expect_response(lambda resp: "/graphql" in resp.url):
            search.fill(recipient)
        page.get_by_role("option").first.click()

        note_input = page.get_by_test_id(s.note_test_id)
        note_input.click()
        note_input.fill(note)
        page.get_by_role("button", name=s.pay_button).click()

        try:
            balance_text = page.get_by_test_id(s.balance_test_id).inner_text()
        except Exception:
            logger.warning("Could not read balance before confirming payment.", exc_info=True)
            return None
        balance_cents = parse_balance_cents(balance_text)
        if balance_cents is not None:
            logger.info("Balance before payment: %s", cents_to_money_str(balance_cents))
        return balance_cents

    def _save_debug(self, page: Page, *, debug_dir: str, name_prefix: str) -> None:
        try:
            out_dir = Path(debug_dir)
            out_dir.mkdir(parents=True, exist_ok=True)
            page.screenshot(path=str(out_dir / f"{name_prefix}.png"), full_page=True)
            (out_dir / f"{name_prefix}.html").write_text(page.content(), encoding="utf-8")
        except Exception:
            logger.debug("Failed to save debug artifacts.", exc_info=True)
