from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PaymentSelectors:
    """
    Labels/test ids the account.venmo.com UI uses for sign-in and "Pay or Request".
    The UI changes without notice; keep every text hook here.
    """

    # Sign in
    sign_in_title_text: str = "Sign in"
    username_label: str = "Enter email, mobile, or username"
    password_label: str = "Password"
    confirm_another_way_link: str = "Confirm another way"
    bank_account_number_label: str = "Bank account number"
    confirm_button: str = "Confirm it"
    not_now_button: str = "Not now"

    # Pay or Request
    pay_or_request_link: str = "Pay or Request"
    amount_placeholder: str = "0"
    # The recipient placeholder has been reworded at least once.
    recipient_placeholders: tuple[str, ...] = (
        "Name, @username, phone, or email",
        "Name, @username, email, phone",
    )
    note_test_id: str = "payment-note-input"
    pay_button: str = "Pay"
    balance_test_id: str = "money"
