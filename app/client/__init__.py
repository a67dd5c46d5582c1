from app.client.storage import FileStore, KeyValueStore, MemoryStore, SafeStorage
from app.client.api import OKRClient, OKRClientError

__all__ = [
    "FileStore",
    "KeyValueStore",
    "MemoryStore",
    "SafeStorage",
    "OKRClient",
    "OKRClientError",
]
