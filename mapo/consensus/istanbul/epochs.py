from typing import (
    Dict,
    Iterable,
    Mapping,
)

from eth_utils import (
    get_extended_debug_logger,
)

from mapo.exceptions import (
    EpochRecordNotFound,
)
from mapo.rlp.istanbul import (
    IstanbulExtra,
)
from mapo.typing import (
    HeaderRange,
)
from mapo.validation import (
    validate_gt,
    validate_uint64,
)

from ._utils import (
    compute_threshold,
)
from .constants import (
    DEFAULT_VALIDATOR_WEIGHT,
)
from .datatypes import (
    EpochRecord,
    MapLightClient,
    Validator,
)

logger = get_extended_debug_logger("mapo.consensus.istanbul.epochs")


def make_epoch_record(epoch: int, validators: Iterable[Validator]) -> EpochRecord:
    validators = tuple(validators)
    total_weight = sum(validator.weight for validator in validators)
    return EpochRecord(epoch, validators, compute_threshold(total_weight))


def compute_next_epoch_record(
    current: EpochRecord, extra: IstanbulExtra
) -> EpochRecord:
    """
    Apply the validator changes announced in the extra-data of the last block
    of ``current``. Validators flagged in ``removed_validators`` are dropped,
    added ones are appended in order with the default weight.
    """
    kept = tuple(
        validator
        for index, validator in enumerate(current.validators)
        if not (extra.removed_validators >> index) & 1
    )
    added = tuple(
        Validator(address, g1_pub_key, DEFAULT_VALIDATOR_WEIGHT)
        for address, g1_pub_key in zip(
            extra.added_validators, extra.added_g1_public_keys
        )
    )

    logger.debug2(
        "Epoch %d -> %d: %d removed, %d added",
        current.epoch,
        current.epoch + 1,
        len(current.validators) - len(kept),
        len(added),
    )
    return make_epoch_record(current.epoch + 1, kept + added)


def insert_epoch_record(
    epoch_records: Mapping[int, EpochRecord], record: EpochRecord, max_records: int
) -> Dict[int, EpochRecord]:
    """
    Return a copy of ``epoch_records`` holding ``record``, with the record
    ``max_records`` epochs older than it evicted.
    """
    updated = dict(epoch_records)
    updated[record.epoch] = record

    if record.epoch >= max_records:
        evicted = updated.pop(record.epoch - max_records, None)
        if evicted is not None:
            logger.debug("Evicted validator set of epoch %d", evicted.epoch)
    return updated


def apply_epoch_transition(
    client: MapLightClient, current: EpochRecord, extra: IstanbulExtra
) -> MapLightClient:
    next_record = compute_next_epoch_record(current, extra)
    logger.debug(
        "Validator set of epoch %d has %d members, threshold %d",
        next_record.epoch,
        len(next_record.validators),
        next_record.threshold,
    )
    return client._replace(
        epoch_records=insert_epoch_record(
            client.epoch_records, next_record, client.max_records
        )
    )


def get_verifiable_header_range(client: MapLightClient) -> HeaderRange:
    """
    Return the inclusive range of block numbers whose validator set is still
    retained by ``client``.
    """
    record_count = len(client.epoch_records)
    end = client.header_height + client.epoch_size
    start = end + 1 - record_count * client.epoch_size
    return (max(start, 0), end)


def get_epoch_record(client: MapLightClient, epoch: int) -> EpochRecord:
    try:
        return client.epoch_records[epoch]
    except KeyError:
        verifiable_range = get_verifiable_header_range(client)
        raise EpochRecordNotFound(
            f"No validator set for epoch {epoch}, headers between "
            f"{verifiable_range[0]} and {verifiable_range[1]} can be verified",
            epoch,
            verifiable_range,
        )


def create_light_client(
    validators: Iterable[Validator],
    epoch: int,
    epoch_size: int,
    header_height: int,
    max_records: int,
    threshold: int = None,
) -> MapLightClient:
    """
    Create a light client trusting ``validators`` as the validator set of
    ``epoch``. ``header_height`` is the last block of the previous epoch.

    The threshold is derived from the validator weights unless one is given,
    a bootstrap epoch may run with a threshold of ``0``.
    """
    validate_gt(epoch_size, 0, title="Epoch size")
    validate_gt(max_records, 0, title="Max records")
    validate_uint64(epoch, title="Epoch")
    validate_uint64(header_height, title="Header height")

    genesis_record = make_epoch_record(epoch, validators)
    validate_gt(len(genesis_record.validators), 0, title="Validator count")
    for validator in genesis_record.validators:
        validate_gt(validator.weight, 0, title="Validator weight")
    if threshold is not None:
        validate_uint64(threshold, title="Threshold")
        genesis_record = genesis_record._replace(threshold=threshold)

    return MapLightClient(
        epoch_records={epoch: genesis_record},
        epoch_size=epoch_size,
        header_height=header_height,
        max_records=max_records,
    )
