from .datatypes import (  # noqa: F401
    EpochRecord,
    G2Point,
    HeaderAdvanced,
    MapLightClient,
    ReceiptProof,
    Validator,
)
from .epochs import (  # noqa: F401
    create_light_client,
    get_epoch_record,
    get_verifiable_header_range,
)
from .light_client import (  # noqa: F401
    advance_header,
    verify_proof_data,
    verify_receipt_proof,
)
