import rlp

from mapo.rlp.sedes import (
    address,
    g1_public_key,
)

from .datatypes import (
    EpochRecord,
    MapLightClient,
    Validator,
)

VALIDATOR_SEDES = rlp.sedes.List(
    (
        address,
        g1_public_key,
        rlp.sedes.big_endian_int,
    )
)
EPOCH_RECORD_SEDES = rlp.sedes.List(
    (
        rlp.sedes.big_endian_int,
        rlp.sedes.CountableList(VALIDATOR_SEDES),
        rlp.sedes.big_endian_int,
    )
)
LIGHT_CLIENT_SEDES = rlp.sedes.List(
    (
        rlp.sedes.CountableList(EPOCH_RECORD_SEDES),
        rlp.sedes.big_endian_int,
        rlp.sedes.big_endian_int,
        rlp.sedes.big_endian_int,
    )
)


def _epoch_record_to_list(record: EpochRecord) -> list:
    return [
        record.epoch,
        [list(validator) for validator in record.validators],
        record.threshold,
    ]


def _epoch_record_from_list(serialized: list) -> EpochRecord:
    epoch, validators, threshold = serialized
    return EpochRecord(
        epoch=epoch,
        validators=tuple(Validator(*validator) for validator in validators),
        threshold=threshold,
    )


def encode_epoch_record(record: EpochRecord) -> bytes:
    return rlp.encode(_epoch_record_to_list(record), sedes=EPOCH_RECORD_SEDES)


def decode_epoch_record(record: bytes) -> EpochRecord:
    return _epoch_record_from_list(rlp.decode(record, sedes=EPOCH_RECORD_SEDES))


def encode_light_client(client: MapLightClient) -> bytes:
    return rlp.encode(
        [
            [
                _epoch_record_to_list(record)
                for _, record in sorted(client.epoch_records.items())
            ],
            client.epoch_size,
            client.header_height,
            client.max_records,
        ],
        sedes=LIGHT_CLIENT_SEDES,
    )


def decode_light_client(client: bytes) -> MapLightClient:
    records_rlp, epoch_size, header_height, max_records = rlp.decode(
        client,
        sedes=LIGHT_CLIENT_SEDES,
    )

    records = (_epoch_record_from_list(record) for record in records_rlp)

    return MapLightClient(
        epoch_records={record.epoch: record for record in records},
        epoch_size=epoch_size,
        header_height=header_height,
        max_records=max_records,
    )
