"""Deterministic pseudo-random numbers and seed derivation.

The simulator must reproduce identical summaries for identical requests on
any platform, so it never touches ``random`` or ``numpy.random`` global
state.  Every batch run owns one :class:`Mulberry32` instance.

Mulberry32
----------
Single 32-bit state, advanced by a fixed additive constant and mixed with
three xorshifts and two multiplications::

    a = a + 0x6D2B79F5
    t = (a ^ a >> 15) * (a | 1)
    t = (t + (t ^ t >> 7) * (t | 61)) ^ t
    return (t ^ t >> 14) / 2**32

All arithmetic is modulo 2**32, which makes the stream bit-identical to the
common JavaScript ``Math.imul`` formulation.

Seed derivation
---------------
When a caller supplies no seed, one is derived from ``"<match_id>|<runs>"``
with 32-bit FNV-1a over UTF-16 code units, so two runs of the same request
always replay the same stream while different run counts get different
seeds.

Usage::

    rng = Mulberry32(derive_seed("atl|1000"))
    rng.random()   # 0.0 <= x < 1.0
"""

from __future__ import annotations

import math
from typing import Final

UINT32_MASK: Final[int] = 0xFFFFFFFF
_TWO_POW_32: Final[float] = 4294967296.0

_MULBERRY_INCREMENT: Final[int] = 0x6D2B79F5

_FNV_OFFSET_BASIS: Final[int] = 2166136261
_FNV_PRIME: Final[int] = 16777619


def to_uint32(seed: float) -> int:
    """Reduce any finite number to an unsigned 32-bit seed.

    Fractions are truncated toward zero and the result wrapped modulo 2**32,
    so ``-1`` becomes ``4294967295`` and ``123.9`` becomes ``123``.

    Raises:
        ValueError: If ``seed`` is NaN or infinite.
    """
    if isinstance(seed, float) and not math.isfinite(seed):
        raise ValueError(f"seed must be a finite number, got {seed!r}")
    return int(math.trunc(seed)) & UINT32_MASK


class Mulberry32:
    """Seeded mulberry32 generator returning floats in ``[0, 1)``.

    Instances are cheap and must not be shared between concurrent batch
    runs.
    """

    __slots__ = ("seed", "_state")

    def __init__(self, seed: float):
        self.seed = to_uint32(seed)
        self._state = self.seed

    def next_uint32(self) -> int:
        self._state = (self._state + _MULBERRY_INCREMENT) & UINT32_MASK
        a = self._state
        t = ((a ^ (a >> 15)) * (a | 1)) & UINT32_MASK
        t = ((t + (((t ^ (t >> 7)) * (t | 61)) & UINT32_MASK)) & UINT32_MASK) ^ t
        return (t ^ (t >> 14)) & UINT32_MASK

    def random(self) -> float:
        """Advance the state and return the next float in ``[0, 1)``."""
        return self.next_uint32() / _TWO_POW_32

    def __repr__(self) -> str:
        return f"Mulberry32(seed={self.seed})"


def derive_seed(text: str) -> int:
    """Hash ``text`` to a uint32 seed with 32-bit FNV-1a.

    Operates on UTF-16 code units so non-BMP characters hash the same way
    they would in a JavaScript ``charCodeAt`` loop.
    """
    h = _FNV_OFFSET_BASIS
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        h ^= data[i] | (data[i + 1] << 8)
        h = (h * _FNV_PRIME) & UINT32_MASK
    return h


def default_seed(match_id: str, iterations: int) -> int:
    """Seed used when a caller does not pass one: ``derive_seed("id|runs")``."""
    return derive_seed(f"{match_id}|{iterations}")
