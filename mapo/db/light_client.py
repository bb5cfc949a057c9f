import logging

import rlp

from mapo.abc import (
    AtomicDatabaseAPI,
    LightClientStoreAPI,
)
from mapo.consensus.istanbul.datatypes import (
    MapLightClient,
)
from mapo.consensus.istanbul.encoding import (
    decode_light_client,
    encode_light_client,
)

from .atomic import (
    AtomicDB,
)
from .schema import (
    SchemaV1,
)


class LightClientDB(LightClientStoreAPI):
    """
    Keeps the RLP encoded light client under a single key of an atomic database.
    """

    logger = logging.getLogger("mapo.db.LightClientDB")

    def __init__(self, db: AtomicDatabaseAPI = None) -> None:
        if db is None:
            db = AtomicDB()
        self.db = db

    def is_initialized(self) -> bool:
        return self.db.exists(SchemaV1.make_light_client_lookup_key())

    def load(self) -> MapLightClient:
        try:
            encoded = self.db[SchemaV1.make_light_client_lookup_key()]
        except KeyError:
            raise KeyError("Light client has not been initialized")

        try:
            return decode_light_client(encoded)
        except (rlp.DecodingError, rlp.DeserializationError) as err:
            raise ValueError(f"Stored light client is corrupt: {err}") from err

    def store(self, client: MapLightClient) -> None:
        encoded = encode_light_client(client)
        with self.db.atomic_batch() as db:
            db[SchemaV1.make_light_client_lookup_key()] = encoded
        self.logger.debug(
            "Stored light client at height %d with %d epoch records",
            client.header_height,
            len(client.epoch_records),
        )
