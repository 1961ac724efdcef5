from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field, fields
from typing import Optional

from ..errors import NotAuthenticatedError
from .endpoints import DEVICE_ID_PREFIX


@dataclass(frozen=True)
class DeviceIdentity:
    id: str

    @classmethod
    def generate(cls) -> "DeviceIdentity":
        return cls(id=f"{DEVICE_ID_PREFIX}{uuid.uuid4()}")


@dataclass(frozen=True)
class CredentialSet:
    username: str
    password: str = field(repr=False)
    # Only used to answer the "confirm another way" MFA challenge; never used to move money.
    bank_account_number: str = field(repr=False)


class HandshakeState(str, enum.Enum):
    UNSTARTED = "unstarted"
    MFA_CHALLENGED = "mfa_challenged"
    CSRF_ACQUIRED = "csrf_acquired"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


_REQUIRED_FIELDS = ("access_token", "csrf_token", "csrf_cookie")


@dataclass
class SessionState:
    """
    Tokens acquired by the login handshake. One instance per client; operations read it live.
    """

    access_token: Optional[str] = field(default=None, repr=False)
    csrf_token: Optional[str] = field(default=None, repr=False)
    csrf_cookie: Optional[str] = field(default=None, repr=False)
    device_correlation_cookie: Optional[str] = field(default=None, repr=False)

    def missing_fields(self) -> list[str]:
        return [name for name in _REQUIRED_FIELDS if not getattr(self, name)]

    @property
    def is_authenticated(self) -> bool:
        return not self.missing_fields()

    def require_authenticated(self, operation: str) -> None:
        missing = self.missing_fields()
        if missing:
            raise NotAuthenticatedError(operation, missing)

    def clear(self) -> None:
        for f in fields(self):
            setattr(self, f.name, None)
