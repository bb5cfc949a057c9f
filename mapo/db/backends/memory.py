from typing import (
    Dict,
)

from mapo.validation import (
    validate_is_bytes,
)

from .base import (
    BaseDB,
)


class MemoryDB(BaseDB):
    """
    Keeps the light client state in a plain ``dict``. It is the default backend
    of :class:`~mapo.db.atomic.AtomicDB`, nothing written to it outlives the
    process.
    """

    def __init__(self, kv_store: Dict[bytes, bytes] = None) -> None:
        self.kv_store = {} if kv_store is None else kv_store

    def __getitem__(self, key: bytes) -> bytes:
        return self.kv_store[key]

    def __setitem__(self, key: bytes, value: bytes) -> None:
        validate_is_bytes(key, title="Database key")
        validate_is_bytes(value, title="Database value")
        self.kv_store[key] = value

    def __delitem__(self, key: bytes) -> None:
        del self.kv_store[key]

    def _exists(self, key: bytes) -> bool:
        return key in self.kv_store

    def __repr__(self) -> str:
        return f"MemoryDB(<{len(self.kv_store)} keys>)"
