from eth_utils import (
    ValidationError,
)
import pytest
import rlp
from trie import (
    HexaryTrie,
)

from mapo.consensus.istanbul.datatypes import (
    ReceiptProof,
)
from mapo.consensus.istanbul.epochs import (
    create_light_client,
)
from mapo.consensus.istanbul.light_client import (
    advance_header,
    normalize_key_index,
    verify_proof_data,
    verify_receipt_proof,
)
from mapo.exceptions import (
    EpochRecordNotFound,
    EventError,
    HeaderDecodeError,
    HeaderError,
    HeaderVerificationError,
    HeaderVerifyFailed,
    IstanbulExtraDecodeError,
    ProofError,
)
from mapo.rlp.headers import (
    MapHeader,
)
from mapo.rlp.istanbul import (
    IstanbulExtra,
)
from mapo.rlp.receipts import (
    LogEntry,
    ReceiptData,
)
from mapo.tools.keys import (
    make_validator_keys,
)
from mapo.tools.sealing import (
    make_istanbul_extra,
    seal_header,
)

EPOCH_SIZE = 100


@pytest.fixture
def client(genesis_validators):
    return create_light_client(
        genesis_validators,
        epoch=1,
        epoch_size=EPOCH_SIZE,
        header_height=0,
        max_records=2,
    )


def make_receipts(count):
    return tuple(
        ReceiptData(
            receipt_type=index % 3,
            post_state_or_status=b"\x01",
            cumulative_gas_used=21000 * (index + 1),
            logs=(LogEntry(bytes([index]) * 20, (), bytes([index]) * 10),),
        )
        for index in range(count)
    )


def make_receipt_trie(receipts):
    trie = HexaryTrie({})
    for index, receipt in enumerate(receipts):
        trie[rlp.encode(index)] = receipt.encode_index()
    return trie


def get_receipt_proof(trie, index):
    return tuple(rlp.encode(node) for node in trie.get_proof(rlp.encode(index)))


def test_advance_header(client, validator_keys):
    header, agg_pk = seal_header(
        MapHeader(number=EPOCH_SIZE),
        validator_keys[0],
        {index: key for index, key in enumerate(validator_keys)},
    )

    advanced, verified = advance_header(client, header.encode(), agg_pk)

    assert verified == header
    assert advanced.header_height == EPOCH_SIZE
    assert tuple(advanced.epoch_records) == (1, 2)
    assert advanced.epoch_records[2].validators == client.epoch_records[1].validators
    # the client passed in is a value and stays untouched
    assert client.header_height == 0
    assert tuple(client.epoch_records) == (1,)


def test_advance_header_sequence_applies_validator_changes(client, validator_keys):
    newcomers = make_validator_keys(2, start=10)
    all_keys = validator_keys + newcomers

    # epoch 1: drop validator 3, add two newcomers
    header, agg_pk = seal_header(
        MapHeader(number=EPOCH_SIZE),
        validator_keys[0],
        {0: validator_keys[0], 1: validator_keys[1], 2: validator_keys[2]},
        extra=make_istanbul_extra(added=newcomers, removed_validators=0b1000),
    )
    client, _ = advance_header(client, header.encode(), agg_pk)

    expected_keys = validator_keys[:3] + newcomers
    record = client.epoch_records[2]
    assert record.addresses == tuple(key.address for key in expected_keys)
    assert record.threshold == 4

    # epoch 2: the newcomers are part of the quorum
    header, agg_pk = seal_header(
        MapHeader(number=2 * EPOCH_SIZE),
        all_keys[4],
        {1: all_keys[1], 2: all_keys[2], 3: all_keys[4], 4: all_keys[5]},
    )
    client, _ = advance_header(client, header.encode(), agg_pk)

    assert client.header_height == 2 * EPOCH_SIZE
    # max_records is 2, epoch 1 is evicted
    assert tuple(client.epoch_records) == (2, 3)
    assert client.epoch_records[3].validators == record.validators


@pytest.mark.parametrize("number", (0, EPOCH_SIZE - 1, EPOCH_SIZE + 1, 2 * EPOCH_SIZE))
def test_advance_header_requires_next_epoch_boundary(client, validator_keys, number):
    header, agg_pk = seal_header(
        MapHeader(number=number), validator_keys[0], {0: validator_keys[0]}
    )

    with pytest.raises(HeaderError):
        advance_header(client, header.encode(), agg_pk)


def test_advance_header_twice_fails(client, validator_keys):
    header, agg_pk = seal_header(
        MapHeader(number=EPOCH_SIZE),
        validator_keys[0],
        {index: key for index, key in enumerate(validator_keys)},
    )
    advanced, _ = advance_header(client, header.encode(), agg_pk)

    with pytest.raises(HeaderError):
        advance_header(advanced, header.encode(), agg_pk)


def test_advance_header_rejects_malformed_input(client, validator_keys):
    with pytest.raises(HeaderDecodeError):
        advance_header(client, b"\xc0", None)

    header = MapHeader(number=EPOCH_SIZE, extra=b"\x00" * 31)
    with pytest.raises(IstanbulExtraDecodeError):
        advance_header(client, header.encode(), None)

    unpaired = IstanbulExtra(added_validators=[validator_keys[0].address])
    header, agg_pk = seal_header(
        MapHeader(number=EPOCH_SIZE),
        validator_keys[0],
        {index: key for index, key in enumerate(validator_keys)},
        extra=unpaired,
    )
    with pytest.raises(IstanbulExtraDecodeError):
        advance_header(client, header.encode(), agg_pk)


def test_advance_header_rejects_insufficient_quorum(client, validator_keys):
    header, agg_pk = seal_header(
        MapHeader(number=EPOCH_SIZE),
        validator_keys[0],
        {0: validator_keys[0], 1: validator_keys[1]},
    )

    with pytest.raises(HeaderVerifyFailed):
        advance_header(client, header.encode(), agg_pk)


def test_advance_header_without_epoch_record(client, validator_keys):
    gapped = client._replace(epoch_records={})
    header, agg_pk = seal_header(
        MapHeader(number=EPOCH_SIZE), validator_keys[0], {0: validator_keys[0]}
    )

    with pytest.raises(EpochRecordNotFound):
        advance_header(gapped, header.encode(), agg_pk)


@pytest.mark.parametrize(
    "key_index, expected",
    ((0, b"\x80"), (1, b"\x01"), (311, b"\x82\x01\x37")),
)
def test_normalize_key_index(key_index, expected):
    assert normalize_key_index(key_index) == expected
    assert normalize_key_index(expected) == expected


@pytest.mark.parametrize("key_index", (-1, -311, 2**64))
def test_normalize_key_index_out_of_range(key_index):
    with pytest.raises(ProofError):
        normalize_key_index(key_index)


def test_verify_receipt_proof_with_negative_index():
    receipts = make_receipts(2)
    trie = make_receipt_trie(receipts)
    header = MapHeader(receipt_hash=trie.root_hash)

    with pytest.raises(ProofError):
        verify_receipt_proof(header, -1, get_receipt_proof(trie, 1), receipts[1])


def test_verify_receipt_proof_with_malformed_receipt():
    receipts = make_receipts(2)
    trie = make_receipt_trie(receipts)
    header = MapHeader(receipt_hash=trie.root_hash)
    malformed = ReceiptData(0, b"\x01", 1, logs=(LogEntry(address=19 * b"\x01"),))

    with pytest.raises(EventError):
        verify_receipt_proof(header, 1, get_receipt_proof(trie, 1), malformed)


@pytest.mark.parametrize("index", (0, 1, 5))
def test_verify_receipt_proof(index):
    receipts = make_receipts(6)
    trie = make_receipt_trie(receipts)
    header = MapHeader(receipt_hash=trie.root_hash)

    verify_receipt_proof(header, index, get_receipt_proof(trie, index), receipts[index])


def test_verify_receipt_proof_rejects_other_receipt():
    receipts = make_receipts(6)
    trie = make_receipt_trie(receipts)
    header = MapHeader(receipt_hash=trie.root_hash)

    with pytest.raises(HeaderVerificationError):
        verify_receipt_proof(header, 1, get_receipt_proof(trie, 1), receipts[2])

    # the typed encoding of a legacy receipt is a different value
    retyped = ReceiptData(
        2,
        receipts[0].post_state_or_status,
        receipts[0].cumulative_gas_used,
        receipts[0].bloom,
        receipts[0].logs,
    )
    with pytest.raises(ProofError):
        verify_receipt_proof(header, 0, get_receipt_proof(trie, 0), retyped)


def test_verify_proof_data(client, validator_keys):
    receipts = make_receipts(3)
    trie = make_receipt_trie(receipts)
    header, agg_pk = seal_header(
        MapHeader(number=42, receipt_hash=trie.root_hash),
        validator_keys[1],
        {index: key for index, key in enumerate(validator_keys)},
    )
    proof = ReceiptProof(
        header=header.encode(),
        agg_pk=agg_pk,
        key_index=2,
        proof=get_receipt_proof(trie, 2),
        receipt=receipts[2],
    )

    assert verify_proof_data(client, proof) == header


def test_verify_proof_data_outside_retained_epochs(client, validator_keys):
    header, agg_pk = seal_header(
        MapHeader(number=EPOCH_SIZE + 1), validator_keys[0], {0: validator_keys[0]}
    )
    proof = ReceiptProof(header.encode(), agg_pk, 0, (), make_receipts(1)[0])

    with pytest.raises(EpochRecordNotFound) as excinfo:
        verify_proof_data(client, proof)

    assert excinfo.value.epoch == 2
    assert excinfo.value.verifiable_range == (1, EPOCH_SIZE)


def test_verify_proof_data_checks_signatures_first(client, validator_keys):
    header, agg_pk = seal_header(
        MapHeader(number=42), validator_keys[0], {0: validator_keys[0]}
    )
    proof = ReceiptProof(header.encode(), agg_pk, 0, (), make_receipts(1)[0])

    with pytest.raises(HeaderVerifyFailed):
        verify_proof_data(client, proof)


def test_verify_proof_data_rejects_empty_proof(client, validator_keys):
    header, agg_pk = seal_header(
        MapHeader(number=42),
        validator_keys[0],
        {index: key for index, key in enumerate(validator_keys)},
    )
    proof = ReceiptProof(header.encode(), agg_pk, 0, (), make_receipts(1)[0])

    with pytest.raises(ProofError):
        verify_proof_data(client, proof)


def test_proof_errors_are_validation_errors():
    assert issubclass(ProofError, ValidationError)
    assert issubclass(HeaderVerificationError, ProofError)
