from eth_utils import (
    decode_hex,
    setup_DEBUG2_logging,
)
import pytest

from mapo.abc import (
    AssetTransferAPI,
)
from mapo.bridge import (
    MapBridge,
    MapBridgeContext,
)
from mapo.db.atomic import (
    AtomicDB,
)
from mapo.db.light_client import (
    LightClientDB,
)
from mapo.tools.keys import (
    make_validator_keys,
)

#
#  Setup DEBUG2 level logging.
#
# This needs to be done before the other imports
setup_DEBUG2_logging()


BRIDGE_ADDRESS = decode_hex("0xe2123fa0c94db1e5baeff348c0e7aecd15a11b45")
NATIVE_TOKEN = decode_hex("0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee")
WRAPPED_TOKEN = decode_hex("0xec3e016916ba9f10762e33e03e8556409d096fb4")
WRAPPED_ASSET_ID = 8


class RecordingAssets(AssetTransferAPI):
    """
    Asset capability that records every release instead of moving funds.
    """

    def __init__(self, native_token=NATIVE_TOKEN, registry=None):
        self.native_token = native_token
        self.registry = {} if registry is None else dict(registry)
        self.unlocked = []
        self.minted = []

    def is_native(self, token):
        return token == self.native_token

    def unlock(self, recipient, amount, token, chain_id, order_id):
        self.unlocked.append((recipient, amount, token, chain_id, order_id))

    def lookup_asset(self, chain_id, token):
        return self.registry[(chain_id, token)]

    def mint(self, recipient, amount, asset_id, chain_id, order_id):
        self.minted.append((recipient, amount, asset_id, chain_id, order_id))


@pytest.fixture(scope="session")
def validator_keys():
    return make_validator_keys(4)


@pytest.fixture(scope="session")
def genesis_validators(validator_keys):
    return tuple(key.to_validator() for key in validator_keys)


@pytest.fixture
def base_db():
    return AtomicDB()


@pytest.fixture
def light_client_db(base_db):
    return LightClientDB(base_db)


@pytest.fixture
def assets():
    return RecordingAssets(registry={(212, WRAPPED_TOKEN): WRAPPED_ASSET_ID})


@pytest.fixture
def bridge_context(light_client_db, assets):
    class TestingContext(MapBridgeContext):
        epoch_size = 100
        max_records = 3

    return TestingContext(light_client_db, assets, BRIDGE_ADDRESS)


@pytest.fixture
def bridge(bridge_context):
    return MapBridge(bridge_context)


@pytest.fixture
def bridge_address():
    return BRIDGE_ADDRESS


@pytest.fixture
def native_token():
    return NATIVE_TOKEN


@pytest.fixture
def wrapped_token():
    return WRAPPED_TOKEN
