from abc import (
    ABC,
    abstractmethod,
)
from typing import (
    ContextManager,
    MutableMapping,
)

from eth_typing import (
    Address,
)

from mapo.consensus.istanbul.datatypes import (
    MapLightClient,
)
from mapo.typing import (
    AccountId,
)


class DatabaseAPI(MutableMapping[bytes, bytes], ABC):
    """
    A class representing a database.
    """

    @abstractmethod
    def set(self, key: bytes, value: bytes) -> None:
        """
        Assign the ``value`` to the ``key``.
        """
        ...

    @abstractmethod
    def exists(self, key: bytes) -> bool:
        """
        Return ``True`` if the ``key`` exists in the database, otherwise ``False``.
        """
        ...

    @abstractmethod
    def delete(self, key: bytes) -> None:
        """
        Delete the given ``key`` from the database.
        """
        ...


class AtomicWriteBatchAPI(DatabaseAPI):
    """
    The readable/writeable object returned by an atomic database when we start building
    a batch of writes to commit.

    Reads to this database will observe writes written during batching,
    but the writes will not actually persist until this object is committed.
    """


class AtomicDatabaseAPI(DatabaseAPI):
    """
    A database that writes changes immediately unless they happen inside an
    ``atomic_batch()`` context, in which case they are all written or none.
    """

    @abstractmethod
    def atomic_batch(self) -> ContextManager[AtomicWriteBatchAPI]:
        """
        Return a :class:`~typing.ContextManager` to write an atomic batch to the
        database.
        """
        ...


class LightClientStoreAPI(ABC):
    """
    The persisted state slot holding the single light client value.
    """

    @abstractmethod
    def load(self) -> MapLightClient:
        """
        Return the stored light client. Raise ``KeyError`` if the bridge was
        never initialized.
        """
        ...

    @abstractmethod
    def store(self, client: MapLightClient) -> None:
        """
        Replace the stored light client with ``client`` in one atomic write.
        """
        ...

    @abstractmethod
    def is_initialized(self) -> bool:
        ...


class AssetTransferAPI(ABC):
    """
    The capability moving assets into the local chain once a transfer has
    been proven. Implementations own replay protection, keyed on ``order_id``.
    """

    @abstractmethod
    def is_native(self, token: Address) -> bool:
        """
        Return ``True`` if ``token`` is the local chain's native asset, which
        is unlocked rather than minted.
        """
        ...

    @abstractmethod
    def unlock(
        self,
        recipient: AccountId,
        amount: int,
        token: Address,
        chain_id: int,
        order_id: bytes,
    ) -> None:
        ...

    @abstractmethod
    def lookup_asset(self, chain_id: int, token: Address) -> int:
        """
        Return the local asset id registered for ``token`` of ``chain_id``.
        Raise ``KeyError`` if there is none.
        """
        ...

    @abstractmethod
    def mint(
        self,
        recipient: AccountId,
        amount: int,
        asset_id: int,
        chain_id: int,
        order_id: bytes,
    ) -> None:
        ...
