"""Tests for the mulberry32 generator and seed derivation."""

import math

import pytest

from xgsim.core.prng import Mulberry32, default_seed, derive_seed, to_uint32


# ---------------------------------------------------------------------------
# to_uint32
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("seed, expected", [
    (0,            0),
    (123,          123),
    (123.9,        123),
    (-1,           4294967295),
    (-1.5,         4294967295),   # truncates toward zero first
    (2**32 + 5,    5),
    (4294967295,   4294967295),
])
def test_to_uint32(seed, expected):
    assert to_uint32(seed) == expected


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), -math.inf])
def test_to_uint32_rejects_non_finite(bad):
    with pytest.raises(ValueError):
        to_uint32(bad)


# ---------------------------------------------------------------------------
# Mulberry32
# ---------------------------------------------------------------------------

class TestMulberry32:

    def test_same_seed_same_stream(self):
        a = Mulberry32(42)
        b = Mulberry32(42)
        assert [a.random() for _ in range(50)] == [b.random() for _ in range(50)]

    def test_different_seeds_diverge(self):
        a = Mulberry32(1)
        b = Mulberry32(2)
        assert [a.random() for _ in range(10)] != [b.random() for _ in range(10)]

    def test_values_in_unit_interval(self):
        rng = Mulberry32(2024)
        values = [rng.random() for _ in range(5000)]
        assert all(0.0 <= v < 1.0 for v in values)

    def test_stream_is_roughly_uniform(self):
        rng = Mulberry32(7)
        values = [rng.random() for _ in range(20000)]
        mean = sum(values) / len(values)
        assert mean == pytest.approx(0.5, abs=0.02)
        below_tenth = sum(1 for v in values if v < 0.1) / len(values)
        assert below_tenth == pytest.approx(0.1, abs=0.02)

    @pytest.mark.parametrize("seed, expected", [
        (0,   [0.26642920868471265, 0.0003297457005828619, 0.2232720274478197]),
        (123, [0.7872516233474016, 0.1785435655619949, 0.49531551403924823]),
    ])
    def test_reference_vectors(self, seed, expected):
        # Values produced by the JavaScript mulberry32 for the same seeds
        rng = Mulberry32(seed)
        assert [rng.random() for _ in range(3)] == expected

    def test_equivalent_seeds_share_stream(self):
        # -1 and 2**32 - 1 reduce to the same uint32
        a = Mulberry32(-1)
        b = Mulberry32(4294967295)
        assert a.seed == b.seed
        assert [a.random() for _ in range(5)] == [b.random() for _ in range(5)]

    def test_random_is_uint32_over_two_pow_32(self):
        a = Mulberry32(99)
        b = Mulberry32(99)
        for _ in range(20):
            raw = a.next_uint32()
            assert 0 <= raw <= 0xFFFFFFFF
            assert b.random() == raw / 4294967296.0


# ---------------------------------------------------------------------------
# derive_seed
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("text, expected", [
    ("",       0x811C9DC5),   # FNV-1a offset basis
    ("a",      0xE40C292C),
    ("foobar", 0xBF9CF968),
])
def test_derive_seed_matches_fnv1a_vectors(text, expected):
    assert derive_seed(text) == expected


def test_derive_seed_is_order_sensitive():
    assert derive_seed("ab") != derive_seed("ba")
    assert derive_seed("atl|100") != derive_seed("atl|1000")


def test_derive_seed_is_uint32():
    for text in ("atl|1000", "x" * 500, "ñandú|10", "⚽|1"):
        assert 0 <= derive_seed(text) <= 0xFFFFFFFF


def test_default_seed_uses_id_pipe_runs():
    assert default_seed("atl", 1000) == derive_seed("atl|1000")
