"""Core Key Generation Utility, building textbook RSA key material out of the number theory primitives.

Splits the requested modulus size between two random primes, picks a random public exponent coprime to the totient
and derives the private exponent as its modular inverse. Also converts user names into the integers that are signed
to authenticate a public key.

Typical usage example:

    with RandState(42) as state:
        (n, e), (n, d, p, q) = generate_key_pair(256, 50, state)
    m = username_to_int("alice")
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import string

from rsablock.numtheory import gcd
from rsablock.numtheory import make_prime
from rsablock.numtheory import mod_inverse
from rsablock.randstate import RandState

logger = logging.getLogger(__name__)

MIN_BITS: int = 16
BASE62_DIGITS: str = string.digits + string.ascii_uppercase + string.ascii_lowercase
_BASE62_VALUES: dict[str, int] = {ch: i for i, ch in enumerate(BASE62_DIGITS)}


def username_to_int(username: str, strict: bool = True) -> int:
    """Reads a user name as a base-62 number.

    Digits are `0-9`, then `A-Z` for 10 to 35, then `a-z` for 36 to 61, most significant first. Login names often
    hold characters such as `-`, `.` or `_` that are no base-62 digit. With `strict` unset, reading stops at the first
    of those and the value of the digits before it is returned, so `www-data` reads as `www`.

    Args:
        username: The name to convert.
        strict: Whether a character outside of the alphabet is an error.

    Returns:
        The integer the name (or its leading base-62 digits) spells in base 62.

    Raises:
        ValueError: If the name is empty, does not start with a base-62 digit, or if `strict` and it has characters
            outside of the base-62 alphabet.
    """
    if not username:
        raise ValueError("Username must not be empty.")
    value = 0
    for i, ch in enumerate(username):
        digit = _BASE62_VALUES.get(ch)
        if digit is None:
            if strict or i == 0:
                raise ValueError(f"Username {username!r} is not a base-62 string (bad character {ch!r}).")
            logger.debug("Username %r is read as its base-62 prefix %r", username, username[:i])
            break
        value = value * 62 + digit
    return value


def generate_public_key(nbits: int, iters: int, state: RandState) -> tuple[int, int, int, int]:
    """Generates the parts of a public key.

    The bits of `p` are drawn from [nbits/4, 3*nbits/4), `q` takes the remainder and both get one extra bit, so the
    modulus is at least `nbits` long. The public exponent is a random `nbits`-bit value coprime to the totient.

    Args:
        nbits: Minimum size of the modulus in bits. Must be >= 16.
        iters: Miller-Rabin confidence for the prime search.
        state: Source of randomness.

    Returns:
        A tuple of (p, q, n, e).

    Raises:
        ValueError: If `nbits` or `iters` are out of range.
    """
    if nbits < MIN_BITS:
        raise ValueError(f"nbits must be at least {MIN_BITS}.")
    if iters < 1:
        raise ValueError("iters must be >= 1")
    p_bits = state.randrange(nbits // 4, 3 * nbits // 4)
    q_bits = nbits - p_bits
    p = make_prime(p_bits + 1, iters, state)
    q = make_prime(q_bits + 1, iters, state)
    while p == q:  # (Un)Likely story.
        q = make_prime(q_bits + 1, iters, state)
    n = p * q
    totient = (p - 1) * (q - 1)
    tries = 0
    while True:
        tries += 1
        e = state.randbits(nbits)
        if e > 1 and gcd(e, totient) == 1:
            break
    logger.debug("Picked public exponent after %d candidates", tries)
    logger.info("Generated %d-bit modulus from %d-bit and %d-bit primes", n.bit_length(), p.bit_length(),
                q.bit_length())
    return p, q, n, e


def generate_private_key(e: int, p: int, q: int) -> int:
    """Derives the private exponent.

    Args:
        e: The public exponent.
        p: Private Prime 1.
        q: Private Prime 2.

    Returns:
        The inverse of `e` modulo (p-1)(q-1).

    Raises:
        NotInvertibleError: If `e` shares a factor with the totient.
    """
    return mod_inverse(e, (p - 1) * (q - 1))


def generate_key_pair(nbits: int, iters: int, state: RandState) -> tuple[tuple[int, int], tuple[int, int, int, int]]:
    """Generates an RSA key pair.

    Args:
        nbits: Minimum size of the modulus in bits.
        iters: Miller-Rabin confidence for the prime search.
        state: Source of randomness.

    Returns:
        A tuple of (public, private) sub-tuples: (modulus, exponent) and (modulus, exponent, p, q).
    """
    p, q, n, e = generate_public_key(nbits, iters, state)
    d = generate_private_key(e, p, q)
    return (n, e), (n, d, p, q)
