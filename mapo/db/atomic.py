from contextlib import (
    contextmanager,
)
import logging
from typing import (
    Dict,
    Iterator,
    Optional,
)

from eth_utils import (
    ValidationError,
)

from mapo.abc import (
    AtomicWriteBatchAPI,
    DatabaseAPI,
)

from .backends.base import (
    BaseAtomicDB,
    BaseDB,
)
from .backends.memory import (
    MemoryDB,
)

# Marks a key deleted inside a pending batch
DELETED = None


class AtomicDB(BaseAtomicDB):
    logger = logging.getLogger("mapo.db.AtomicDB")

    wrapped_db: DatabaseAPI = None

    def __init__(self, wrapped_db: DatabaseAPI = None) -> None:
        if wrapped_db is None:
            self.wrapped_db = MemoryDB()
        else:
            self.wrapped_db = wrapped_db

    def __getitem__(self, key: bytes) -> bytes:
        return self.wrapped_db[key]

    def __setitem__(self, key: bytes, value: bytes) -> None:
        self.wrapped_db[key] = value

    def __delitem__(self, key: bytes) -> None:
        del self.wrapped_db[key]

    def _exists(self, key: bytes) -> bool:
        return key in self.wrapped_db

    @contextmanager
    def atomic_batch(self) -> Iterator[AtomicWriteBatchAPI]:
        with AtomicDBWriteBatch._commit_unless_raises(self.wrapped_db) as readable_batch:
            yield readable_batch


class AtomicDBWriteBatch(BaseDB, AtomicWriteBatchAPI):
    """
    Collects the writes of one atomic batch. Reads observe the pending writes,
    which reach the wrapped database only when the batch exits cleanly.
    """

    logger = logging.getLogger("mapo.db.AtomicDBWriteBatch")

    _write_target_db: Optional[DatabaseAPI] = None
    _pending: Dict[bytes, Optional[bytes]] = None

    def __init__(self, write_target_db: DatabaseAPI) -> None:
        self._write_target_db = write_target_db
        self._pending = {}

    def __getitem__(self, key: bytes) -> bytes:
        if self._write_target_db is None:
            raise ValidationError("Cannot get data from a write batch, out of context")

        if key in self._pending:
            value = self._pending[key]
            if value is DELETED:
                raise KeyError(key)
            return value
        return self._write_target_db[key]

    def __setitem__(self, key: bytes, value: bytes) -> None:
        if self._write_target_db is None:
            raise ValidationError("Cannot set data from a write batch, out of context")
        self._pending[key] = value

    def __delitem__(self, key: bytes) -> None:
        if self._write_target_db is None:
            raise ValidationError(
                "Cannot delete data from a write batch, out of context"
            )
        if key not in self:
            raise KeyError(key)
        self._pending[key] = DELETED

    def _exists(self, key: bytes) -> bool:
        if key in self._pending:
            return self._pending[key] is not DELETED
        return key in self._write_target_db

    def _commit(self) -> None:
        for key, value in self._pending.items():
            if value is DELETED:
                self._write_target_db.delete(key)
            else:
                self._write_target_db[key] = value

    def _clear(self) -> None:
        self._pending = {}

    def _finalize(self) -> None:
        self._write_target_db = None
        self._pending = None

    @classmethod
    @contextmanager
    def _commit_unless_raises(
        cls, write_target_db: DatabaseAPI
    ) -> Iterator[AtomicWriteBatchAPI]:
        """
        Commit all writes inside the context, unless an exception was raised.

        Although this is technically an external API, it (and this whole class)
        is only intended to be used by AtomicDB.
        """
        readable_write_batch = cls(write_target_db)
        try:
            yield readable_write_batch
        except Exception:
            cls.logger.exception(
                "Unexpected error in atomic db write, dropped %d pending writes",
                len(readable_write_batch._pending),
            )
            readable_write_batch._clear()
            raise
        else:
            readable_write_batch._commit()
        finally:
            readable_write_batch._finalize()
