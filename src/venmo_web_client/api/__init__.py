from .auth import AuthHandshake
from .client import VenmoClient
from .session import CredentialSet, DeviceIdentity, HandshakeState, SessionState
from .transport import AiohttpTransport, HttpResponse

__all__ = [
    "AuthHandshake",
    "VenmoClient",
    "CredentialSet",
    "DeviceIdentity",
    "HandshakeState",
    "SessionState",
    "AiohttpTransport",
    "HttpResponse",
]
