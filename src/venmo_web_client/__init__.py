from .api import CredentialSet, VenmoClient

__all__ = ["CredentialSet", "VenmoClient"]
