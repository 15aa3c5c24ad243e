"""Challenge-response digest for Panasonic players with a player key.

The player hands out a nonce from get_nonce.cgi. Authenticated commands carry
the digest of player key + nonce in the cAUTH_VALUE form field.
"""

import hashlib

from ..exceptions import AuthComputationError
from .const import DIGEST_MIN_LENGTH, HASH_ALGORITHM


def check_algorithm(algorithm: str = HASH_ALGORITHM) -> None:
    """Verify the hash algorithm is available.

    Raises:
        AuthComputationError: Algorithm not supported by this interpreter
    """
    try:
        hashlib.new(algorithm)
    except ValueError as err:
        raise AuthComputationError(f"Hash algorithm {algorithm} unavailable: {err}") from err


def compute_digest(secret: str, nonce: str, algorithm: str = HASH_ALGORITHM) -> str:
    """Compute the auth value for a nonce.

    The digest is read as an unsigned integer and written as uppercase hex,
    zero-padded to at least 32 characters. Leading zero nibbles of the digest
    are therefore dropped once the value is longer than 32 digits; players
    expect exactly this rendering.

    Raises:
        AuthComputationError: Algorithm not supported
    """
    try:
        digest = hashlib.new(algorithm, (secret + nonce).encode("utf-8")).digest()
    except ValueError as err:
        raise AuthComputationError(f"Hash algorithm {algorithm} unavailable: {err}") from err

    number = int.from_bytes(digest, "big")
    return format(number, "X").rjust(DIGEST_MIN_LENGTH, "0")
