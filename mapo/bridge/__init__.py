from .bridge import (  # noqa: F401
    MapBridge,
    MapBridgeContext,
)
from .events import (  # noqa: F401
    TransferEvent,
)
