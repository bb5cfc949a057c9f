from typing import (
    Any,
    Sequence,
    Union,
)

from eth_utils import (
    ValidationError,
)

from mapo.constants import (
    UINT_64_MAX,
)


def validate_is_bytes(value: bytes, title: str = "Value") -> None:
    if not isinstance(value, bytes):
        raise ValidationError(f"{title} must be a byte string.  Got: {type(value)}")


def validate_is_integer(value: Union[int, bool], title: str = "Value") -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(f"{title} must be a an integer.  Got: {type(value)}")


def validate_length(value: Sequence[Any], length: int, title: str = "Value") -> None:
    if not len(value) == length:
        raise ValidationError(
            f"{title} must be of length {length}.  "
            f"Got {value!r} of length {len(value)}"
        )


def validate_length_lte(
    value: Sequence[Any], maximum_length: int, title: str = "Value"
) -> None:
    if len(value) > maximum_length:
        raise ValidationError(
            f"{title} must be of length less than or equal to {maximum_length}.  "
            f"Got {value!r} of length {len(value)}"
        )


def validate_gt(value: int, minimum: int, title: str = "Value") -> None:
    validate_is_integer(value, title=title)
    if value <= minimum:
        raise ValidationError(f"{title} {value} is not greater than {minimum}")


def validate_lte(value: int, maximum: int, title: str = "Value") -> None:
    validate_is_integer(value, title=title)
    if value > maximum:
        raise ValidationError(f"{title} {value} is not less than or equal to {maximum}")


def validate_uint64(value: int, title: str = "Value") -> None:
    validate_is_integer(value, title=title)
    if value < 0:
        raise ValidationError(f"{title} cannot be negative.  Got: {value}")
    if value > UINT_64_MAX:
        raise ValidationError(
            f"{title} exceeds maximum uint64 size.  Got: {value}"
        )
