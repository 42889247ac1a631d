"""Number theory primitives underlying the RSA engine, mainly focusing on the search for large random primes.

Provides the greatest common divisor, the modular inverse via the Extended Euclidean Algorithm, fast modular
exponentiation, the Miller-Rabin probable-prime test and a random prime search. Anything random is drawn from the
`RandState` handed in by the caller.

Typical usage example:

    with RandState(1234) as state:
        p = make_prime(128, 50, state)
    i = mod_inverse(3, 7)
    r = pow_mod(4, 13, 497)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging

from rsablock.randstate import RandState

logger = logging.getLogger(__name__)


class NotInvertibleError(ValueError):
    """Raised when an integer has no inverse modulo the requested modulus."""


def gcd(a: int, b: int) -> int:
    """Computes the greatest common divisor with the Euclidean Algorithm.

    Args:
        a: The first natural number.
        b: The second natural number.

    Returns:
        The greatest common divisor of `a` and `b`. If either is 0 the other one is returned.
    """
    while b != 0:
        a, b = b, a % b
    return a


def eea(a: int, b: int) -> tuple[int, int, int]:
    """Implements the Extended Euclidean Algorithm.

    Such a that a*s0 + b*t0 = r0 = gcd(a, b).

    Args:
        a: The first natural number.
        b: The second natural number.

    Returns:
        Greatest common divisor of two integers.
        As well as the Bezout coefficients.
    """
    r0, r1 = a, b
    s0, s1, t0, t1 = 1, 0, 0, 1
    while r1 != 0:
        q = r0 // r1
        r0, r1 = r1, r0 - q * r1
        s0, s1 = s1, s0 - q * s1
        t0, t1 = t1, t0 - q * t1
    return r0, s0, t0


def mod_inverse(a: int, n: int) -> int:
    """Computes the inverse of `a` modulo `n`.

    Args:
        a: The number to invert.
        n: The modulus. Must be positive.

    Returns:
        The inverse `i` in range [0, n) such that a*i = 1 (mod n).

    Raises:
        ValueError: If `n` is not positive.
        NotInvertibleError: If gcd(a, n) > 1, so no inverse exists.
    """
    if n <= 0:
        raise ValueError("Modulus must be positive.")
    r, _, t = eea(n, a % n)
    if r != 1:
        raise NotInvertibleError(f"{a} has no inverse modulo {n} (gcd is {r}).")
    return t % n


def pow_mod(base: int, exponent: int, modulus: int) -> int:
    """Fast modular exponentiation by right-to-left square-and-multiply.

    Uses O(log exponent) modular multiplications.

    Args:
        base: The base.
        exponent: The exponent. Must be >= 0.
        modulus: The modulus. Must be > 0.

    Returns:
        base**exponent mod modulus, in range [0, modulus).

    Raises:
        ValueError: On a negative exponent or a non-positive modulus.
    """
    if exponent < 0:
        raise ValueError("Exponent must be >= 0.")
    if modulus <= 0:
        raise ValueError("Modulus must be > 0.")
    v = 1 % modulus
    p = base % modulus
    d = exponent
    while d > 0:
        if d & 1:
            v = (v * p) % modulus
        p = (p * p) % modulus
        d >>= 1
    return v


def is_prime(n: int, iters: int, state: RandState) -> bool:
    """Perform Miller-Rabin primality test.

    Note that `iters - 1` rounds are run, so a composite slips through with probability at most 4**-(iters - 1).
    With `iters == 1` no round is run and any `n` past the fast paths is reported prime.

    Args:
        n: The integer to be tested.
        iters: Confidence parameter, one more than the number of random bases tried.
        state: Source of the random bases.

    Returns:
        True if `n` is probably prime, False if it is certainly composite.

    Raises:
        ValueError: If `iters` < 1.
    """
    if iters < 1:
        raise ValueError("iters must be >= 1")
    if n <= 1 or n == 4:
        return False
    if n <= 3:
        return True
    r = n - 1
    s = 0
    while r % 2 == 0:
        s += 1
        r //= 2
    for _ in range(1, iters):
        a = state.randrange(2, n - 1)
        y = pow_mod(a, r, n)
        if y == 1 or y == n - 1:
            continue
        for _ in range(1, s):
            y = pow_mod(y, 2, n)
            if y == 1:
                return False
            if y == n - 1:
                break
        if y != n - 1:
            return False
    return True


def make_prime(bits: int, iters: int, state: RandState, max_tries: int | None = None) -> int:
    """Generate a probable prime number of exactly the specified bit size.

    Args:
        bits: The size of the prime to generate in bits. Must be >= 2.
        iters: Miller-Rabin confidence, passed to `is_prime`.
        state: Source of the random candidates.
        max_tries: Optional cap on the number of candidates. Unbounded if None.

    Returns:
        A probable prime with `bits` significant bits.

    Raises:
        ValueError: If `bits` < 2.
        RuntimeError: If `max_tries` candidates were drawn with no prime found.
    """
    if bits < 2:
        raise ValueError("bits must be >= 2")
    tries = 0
    while max_tries is None or tries < max_tries:
        tries += 1
        candidate = state.randbits(bits)
        # Leading zero bits make the draw shorter than requested.
        if candidate.bit_length() == bits and is_prime(candidate, iters, state):
            logger.debug("Found %d-bit prime after %d candidates", bits, tries)
            return candidate
    raise RuntimeError(f"Drew {max_tries} candidates with no {bits}-bit prime found. Check the random state.")
