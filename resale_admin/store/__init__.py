"""Access to the external entity store holding tickets, orders and customers."""

from .client import EntityStoreClient, EntityStoreError
from .credentials import Credentials, resolve_credentials

__all__ = [
    "Credentials",
    "EntityStoreClient",
    "EntityStoreError",
    "resolve_credentials",
]
