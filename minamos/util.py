"""Small helpers shared by the kernel components."""

from __future__ import annotations

import time

_LCG_MULTIPLIER = 1103515245
_LCG_INCREMENT = 12345
RAND_MAX = 0x7FFF


def int_to_string(n: int) -> str:
    """Render an integer in decimal, with a leading '-' when negative."""
    n = int(n)
    digits = str(abs(n))
    return f"-{digits}" if n < 0 else digits


def compare_string(s1: str | None, s2: str | None) -> int:
    """Compare two strings the way the kernel does.

    Returns 0 when equal, otherwise the difference between the code points
    at the first position where they differ (a missing character counts
    as 0). ``None`` sorts before any string.
    """
    if s1 is None and s2 is None:
        return 0
    if s1 is None:
        return -1
    if s2 is None:
        return 1
    for a, b in zip(s1, s2):
        if a != b:
            return ord(a) - ord(b)
    tail1 = ord(s1[len(s2)]) if len(s1) > len(s2) else 0
    tail2 = ord(s2[len(s1)]) if len(s2) > len(s1) else 0
    return tail1 - tail2


def low_16(address: int) -> int:
    """Lower 16 bits of an address."""
    return address & 0xFFFF


def high_16(address: int) -> int:
    """Upper 16 bits of a 32-bit address."""
    return (address >> 16) & 0xFFFF


def rand(seed: int | None = None) -> int:
    """Return a pseudo-random number in ``[0, 32767]``.

    Each call runs one linear congruential step over the seed. Without a
    seed, the monotonic clock stands in for the processor's time-stamp
    counter.
    """
    if seed is None:
        stamp = time.monotonic_ns()
        seed = (stamp & 0xFFFFFFFF) ^ ((stamp >> 32) & 0xFFFFFFFF)
    state = (seed * _LCG_MULTIPLIER + _LCG_INCREMENT) & 0xFFFFFFFF
    return (state >> 16) & RAND_MAX