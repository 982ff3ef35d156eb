"""ID and value generators (CUID primary keys, numeric passcodes)."""

import secrets

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()

DEFAULT_CODE_LENGTH = 6


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2)."""
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def generate_numeric_code(length: int = DEFAULT_CODE_LENGTH) -> str:
    """Return a random code of exactly `length` decimal digits.

    Drawn uniformly from [10^(length-1), 10^length - 1] with the secrets
    CSPRNG, so the leading digit is never zero.

    Args:
        length: Number of digits (>= 1).

    Returns:
        The code as a string.
    """
    if length < 1:
        raise ValueError("length must be >= 1")
    low = 10 ** (length - 1)
    high = 10**length - 1
    return str(low + secrets.randbelow(high - low + 1))
