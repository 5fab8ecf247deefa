"""Identity provider adapters - Firebase and in-memory implementations."""

from .firebase_links import FirebaseAdminLinkMinter
from .firebase_rest import FirebaseRestIdentityProvider
from .memory import InMemoryIdentityProvider

__all__ = [
    "FirebaseAdminLinkMinter",
    "FirebaseRestIdentityProvider",
    "InMemoryIdentityProvider",
]
