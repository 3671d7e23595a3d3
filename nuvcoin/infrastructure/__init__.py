"""
Infrastructure package for nuvcoin.

Centralizes I/O concerns: the durable key-value store shared by process
instances and the HTTP remote authority. Keep this layer focused on I/O and
resource management, decoupled from caching policy and aggregation.
"""

from nuvcoin.infrastructure.abstract import (
    AbstractRemoteProvider,
    DurableStore,
    RemoteError,
    RemoteProvider,
    UnsupportedOperation,
)
from nuvcoin.infrastructure.remote import HttpRemoteProvider
from nuvcoin.infrastructure.store import (
    JsonFileStore,
    MemoryStore,
    SharedMemoryBackend,
    load_records,
    save_records,
)

__all__ = [
    "AbstractRemoteProvider",
    "DurableStore",
    "HttpRemoteProvider",
    "JsonFileStore",
    "MemoryStore",
    "RemoteError",
    "RemoteProvider",
    "SharedMemoryBackend",
    "UnsupportedOperation",
    "load_records",
    "save_records",
]
