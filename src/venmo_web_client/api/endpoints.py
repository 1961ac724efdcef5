from __future__ import annotations


USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/101.0.0.0 Safari/537.36"
)

DEVICE_ID_PREFIX = "fp01-"

# Cookie / header names the web app uses.
DEVICE_ID_COOKIE = "v_id"
CSRF_COOKIE = "_csrf"
ACCESS_TOKEN_COOKIE = "api_access_token"
DEVICE_CORRELATION_COOKIE = "w_fc"
LOGIN_EMAIL_COOKIE = "login_email"
OTP_SECRET_HEADER = "venmo-otp-secret"

MFA_REQUIRED_MESSAGE = "Additional authentication is required"


class VenmoEndpoints(object):
    LOGIN_URL = "https://venmo.com/login"
    ACCOUNT_URL = "https://account.venmo.com"
    GRAPHQL_URL = "https://api.venmo.com/graphql"

    @classmethod
    def login(cls) -> str:
        return cls.LOGIN_URL

    @classmethod
    def verify_bank(cls) -> str:
        return cls.ACCOUNT_URL + "/account/mfa/verify-bank"

    @classmethod
    def mfa_sign_in(cls) -> str:
        return cls.ACCOUNT_URL + "/api/account/mfa/sign-in"

    @classmethod
    def device_data(cls) -> str:
        return cls.ACCOUNT_URL + "/api/device-data"

    @classmethod
    def identities(cls) -> str:
        return cls.ACCOUNT_URL + "/api/user/identities"

    @classmethod
    def stories(cls) -> str:
        return cls.ACCOUNT_URL + "/api/stories"

    @classmethod
    def eligibility(cls) -> str:
        return cls.ACCOUNT_URL + "/api/eligibility"

    @classmethod
    def payments(cls) -> str:
        return cls.ACCOUNT_URL + "/api/payments"

    @classmethod
    def graphql(cls) -> str:
        return cls.GRAPHQL_URL
