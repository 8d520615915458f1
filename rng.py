# -*- coding: utf-8 -*-
########################
# rng.py
########################
# Purpose:
# - Deterministic pseudo random numbers for ambient note generation.
#
# Design notes:
# - Linear congruential generator with the GCC constants.
# - Pure functions only. Callers thread the seed explicitly; nothing is stored here.
# - Arithmetic is exact integer math, so the sequence does not depend on float precision.
#
########################
# Interfaces:
# Public functions:
# - hash_seed(seed: int) -> int
# - scale_hash(value: int) -> float            (maps [0, 2**31) onto [-1, 1])
# - random_values(seed: int = 0) -> Iterator[float]
#
########################

from __future__ import annotations

from typing import Iterator

RNG_MODULUS = 0x80000000  # 2**31
RNG_MULTIPLIER = 1103515245
RNG_INCREMENT = 12345


def hash_seed(seed: int) -> int:
    return (RNG_MULTIPLIER * int(seed) + RNG_INCREMENT) % RNG_MODULUS


def scale_hash(value: int) -> float:
    return (2.0 * int(value)) / (RNG_MODULUS - 1) - 1.0


def random_values(seed: int = 0) -> Iterator[float]:
    """Yield scale_hash(hash_seed(seed)), then keep hashing the previous hash."""
    current = int(seed)
    while True:
        current = hash_seed(current)
        yield scale_hash(current)


def _run_unit_tests() -> None:
    assert hash_seed(0) == 12345
    assert hash_seed(12345) == 1406932606
    assert hash_seed(1406932606) == 654583775

    assert scale_hash(0) == -1.0
    assert abs(scale_hash(RNG_MODULUS - 1) - 1.0) < 1e-12

    stream = random_values(0)
    first = [next(stream) for _ in range(3)]
    again = random_values(0)
    assert first == [next(again) for _ in range(3)]
    assert first[0] == scale_hash(12345)
    assert all(-1.0 <= value <= 1.0 for value in first)


if __name__ == "__main__":
    _run_unit_tests()
    print("rng.py: ok")
