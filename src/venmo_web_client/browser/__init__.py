from .client import BrowserPaymentClient
from .selectors import PaymentSelectors

__all__ = ["BrowserPaymentClient", "PaymentSelectors"]
