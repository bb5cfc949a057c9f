from typing import (
    Tuple,
)

from eth_utils import (
    ValidationError,
)


class MapoError(Exception):
    """
    Base class for all errors raised by the light client and the bridge.
    """


class HeaderError(MapoError):
    """
    Raised when a header can not be decoded or does not sit on the next
    expected epoch boundary.
    """


class HeaderDecodeError(HeaderError):
    """
    Raised when the RLP of a header is malformed or has the wrong shape.
    """


class IstanbulExtraDecodeError(HeaderError):
    """
    Raised when the extra-data of a header does not hold Istanbul consensus data.
    """


class HeaderVerifyFailed(MapoError, ValidationError):
    """
    Raised when the proposer seal or the quorum certificate of a header is invalid.
    """


class BlsInvalidSignature(HeaderVerifyFailed):
    """
    Raised when the aggregated public key or the aggregated BLS signature
    does not verify.
    """


class EpochRecordNotFound(MapoError):
    """
    Raised when a header belongs to an epoch that is not retained by the
    light client.
    """

    def __init__(
        self, message: str, epoch: int, verifiable_range: Tuple[int, int]
    ) -> None:
        super().__init__(message, epoch, verifiable_range)
        self.epoch = epoch
        self.verifiable_range = verifiable_range

    def __str__(self) -> str:
        return self.args[0]


class ProofError(MapoError, ValidationError):
    """
    Raised when a receipt proof or the log it points at is invalid.
    """


class HeaderVerificationError(ProofError):
    """
    Raised when the value proven against the receipt root does not match the
    claimed receipt.
    """


class TokenError(MapoError):
    """
    Raised when the destination token of a transfer can not be resolved.
    """


class EventError(MapoError):
    """
    Raised when the fields of a transfer event are malformed.
    """
