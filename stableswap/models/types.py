"""Shared field types for the HTTP models."""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field, PlainSerializer

from stableswap.safe_int import U64_MAX


def validate_amount(value: Any) -> int:
    """Validate a token amount given as an int or a decimal string.

    Args:
        value: Value to validate

    Returns:
        The amount as an int

    Raises:
        ValueError: If value is not a non-negative integer within u64 range
    """
    if isinstance(value, bool):
        raise ValueError("Amount must be an integer, not a boolean")
    if isinstance(value, str):
        try:
            value = int(value, 10)
        except ValueError as err:
            raise ValueError(f"Amount must be a decimal integer string: '{value}'") from err
    if not isinstance(value, int):
        raise ValueError(f"Amount must be string or int, got {type(value).__name__}")

    if value < 0:
        raise ValueError(f"Amount cannot be negative: {value}")
    if value > U64_MAX:
        raise ValueError(f"Amount overflow: {value} > 2^64-1")
    return value


# u64 token amount; accepted as int or decimal string, emitted as a decimal string
Amount = Annotated[
    int,
    BeforeValidator(validate_amount),
    PlainSerializer(str, return_type=str, when_used="json"),
    Field(description="Token amount as decimal string"),
]

# Caller identity (free-form, non-empty)
Identity = Annotated[str, Field(min_length=1, description="Caller identity")]
