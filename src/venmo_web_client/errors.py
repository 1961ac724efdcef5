from __future__ import annotations

from typing import Optional


class VenmoError(RuntimeError):
    """
    Base class for everything this package raises on purpose.
    """


class HandshakeError(VenmoError):
    """
    The login handshake got a response it did not expect (wrong status, missing header/cookie/field).

    Always fatal; the session is cleared and `login()` must start again from the credential step.
    """

    def __init__(
        self,
        step: str,
        reason: str,
        *,
        status: Optional[int] = None,
        field: Optional[str] = None,
        body: Optional[str] = None,
    ) -> None:
        self.step = step
        self.reason = reason
        self.status = status
        self.field = field
        self.body = body

        parts = [f"{step}: {reason}"]
        if status is not None:
            parts.append(f"status={status}")
        if field:
            parts.append(f"field={field}")
        super().__init__(" ".join(parts))


class NotAuthenticatedError(VenmoError):
    """
    An authenticated operation was called before `login()` completed. No request was sent.
    """

    def __init__(self, operation: str, missing: list[str]) -> None:
        self.operation = operation
        self.missing = list(missing)
        super().__init__(
            f"{operation} requires an authenticated session (missing: {', '.join(self.missing)}). Run login() first."
        )


class RequestFailedError(VenmoError):
    def __init__(self, operation: str, status: int, body: str = "") -> None:
        self.operation = operation
        self.status = status
        self.body = body
        super().__init__(f"{operation} failed: HTTP {status}")


class GraphQLRequestError(VenmoError):
    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"GraphQL {operation} failed: {detail}")


class PaymentNotEligibleError(VenmoError):
    """
    Raised by `send_payment()` when the eligibility check says the transfer is not allowed.
    """


class BrowserPaymentError(VenmoError):
    """
    The UI-driven payment flow could not complete (selector missing, unexpected page).
    """
