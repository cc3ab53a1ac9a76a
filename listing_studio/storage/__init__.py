"""
Storage module for Listing Studio.

Provides client storage backends and the credential store.
"""

from .client_storage import (
    ClientStorage,
    InMemoryClientStorage,
    DatabaseClientStorage,
    create_client_storage,
)
from .credentials import (
    CredentialStore,
    SaveResult,
    validate_credential,
)

__all__ = [
    "ClientStorage",
    "InMemoryClientStorage",
    "DatabaseClientStorage",
    "create_client_storage",
    "CredentialStore",
    "SaveResult",
    "validate_credential",
]
