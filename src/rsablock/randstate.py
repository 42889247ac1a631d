"""Seeded pseudo-random state shared by the probabilistic routines.

Every primality test, prime search and exponent search draws from one explicitly passed `RandState`. It wraps a
Mersenne Twister so that a given seed reproduces the same key material, which is what makes keys generated for
testing repeatable. It is NOT a cryptographically secure source and it is NOT thread-safe: give each thread its own
state.

Typical usage example:

    with RandState(42) as state:
        p = make_prime(128, 50, state)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import random
import time

logger = logging.getLogger(__name__)

_SEED_MASK = (1 << 64) - 1


class RandState:
    """Lifecycle-checked wrapper around a seeded Mersenne Twister.

    The state must be initialized before first use and must not be used after it has been cleared.

    Attributes:
        seed: The 64-bit seed the state was last initialized with, or None.
    """

    def __init__(self, seed: int | None = None) -> None:
        self.seed: int | None = None
        self._gen: random.Random | None = None
        if seed is not None:
            self.init(seed)

    def init(self, seed: int | None = None) -> None:
        """Seeds the generator.

        Args:
            seed: Seed to use, reduced to 64 bits. Defaults to the current time.

        Raises:
            RuntimeError: If the state is already initialized.
        """
        if self._gen is not None:
            raise RuntimeError("Random state is already initialized.")
        if seed is None:
            seed = int(time.time())
        self.seed = seed & _SEED_MASK
        self._gen = random.Random(self.seed)
        logger.debug("Random state initialized with seed %d", self.seed)

    def clear(self) -> None:
        """Tears the generator down. Further draws raise until re-initialized."""
        self._gen = None
        logger.debug("Random state cleared")

    @property
    def active(self) -> bool:
        return self._gen is not None

    def _generator(self) -> random.Random:
        if self._gen is None:
            raise RuntimeError("Random state used before init or after clear.")
        return self._gen

    def randbits(self, bits: int) -> int:
        """Uniform value in [0, 2**bits). May have fewer than `bits` significant bits."""
        if bits < 0:
            raise ValueError("bits must be >= 0")
        if bits == 0:
            return 0
        return self._generator().getrandbits(bits)

    def randrange(self, start: int, stop: int) -> int:
        """Uniform value in [start, stop)."""
        if stop <= start:
            raise ValueError("Empty range for random draw.")
        return self._generator().randrange(start, stop)

    def __enter__(self) -> "RandState":
        if not self.active:
            self.init(self.seed)
        return self

    def __exit__(self, *exc) -> None:
        self.clear()
