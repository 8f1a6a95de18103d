# cucumber/core/rng.py
"""
Seeded pseudo-random streams.

Every sampling operation in the package (dealing, determinization, random
policies) draws from a no-argument callable returning floats in [0, 1).
Seeds are arbitrary strings; numeric seeds are used through their ``str()``
form so ``123`` and ``"123"`` produce the same stream.

The seed string is hashed with BLAKE2b into a 128-bit integer that seeds a
numpy ``PCG64`` bit generator.  Hashing makes short, similar strings
("123", "124") land on unrelated streams.  It is not meant to be secure.
"""

from __future__ import annotations
import hashlib
from typing import Callable, Union

import numpy as np

RandomFn = Callable[[], float]
Seed = Union[str, int]


def seed_to_int(seed: Seed) -> int:
    """Hash ``seed`` into a stable 128-bit integer."""
    digest = hashlib.blake2b(str(seed).encode("utf-8"), digest_size=16).digest()
    return int.from_bytes(digest, "little")


def make_generator(seed: Seed) -> np.random.Generator:
    return np.random.Generator(np.random.PCG64(np.random.SeedSequence(seed_to_int(seed))))


def random_number_generator(seed: Seed) -> RandomFn:
    """
    Build a deterministic float stream from ``seed``.

    Args:
        seed: Any string (or number, converted with ``str``).

    Returns:
        RandomFn: A callable returning the next float in [0, 1) on each call.
                  Two callables built from the same seed return identical
                  sequences.

    Example:
        >>> rng = random_number_generator("123")
        >>> rng() == random_number_generator("123")()
        True
    """

    return make_generator(seed).random


def run_rng(seed: Seed, run_index: int) -> RandomFn:
    """Substream for one Monte Carlo run, keyed as ``f"{seed}{run_index}"``."""
    return random_number_generator(f"{seed}{run_index}")


def random_index(rng: RandomFn, n: int) -> int:
    """Uniform integer in [0, n) taken from a float stream."""
    if n <= 0:
        raise ValueError(f"cannot pick from {n} items")
    return min(int(rng() * n), n - 1)
