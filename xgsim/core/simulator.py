"""
Shot-level Bernoulli simulation engine.

Every recorded shot is an independent Bernoulli trial whose success
probability is the shot's xG.  One simulated match draws one uniform number
per shot (all home shots first, then all away shots) and counts the hits.
Repeating that N times from a single seeded stream yields a scoreline
frequency table, which is ranked into the five most frequent scorelines plus
the hit rate of the real final score.

Reproducibility contract
------------------------
For a given ``(context, iterations, seed)`` the summary is byte-identical
across runs and platforms because:

    - the PRNG is mulberry32 (see :mod:`xgsim.core.prng`);
    - each side consumes exactly ``len(probabilities)`` draws per match;
    - home is always sampled before away inside an iteration;
    - ties in the ranking are broken by ordinal comparison of ``"h-a"``.

The ordinal tie-break means ``"10-0"`` ranks ahead of ``"2-0"`` when both
have the same count.

Usage::

    context = build_context(payload)          # once per request
    for n in (100, 1000, 10000):
        summary = run_batch(context, n)        # per-run default seed
        print(summary.to_dict())
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from xgsim.core.prng import Mulberry32, default_seed, to_uint32
from xgsim.core.shots import SIDE_HOME, Score, ShotsPayload, clamp_probability

logger = logging.getLogger(__name__)

TOP_N = 5


# ---------------------------------------------------------------------------
# Simulation context
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SimulationContext:
    """Read-only per-side probability sequences derived from a payload.

    Built once with :func:`build_context` and reused across any number of
    batch runs, including concurrent ones.
    """

    match_id: str
    final_score: Score
    home_probabilities: Tuple[float, ...]
    away_probabilities: Tuple[float, ...]

    @property
    def home_xg(self) -> float:
        return float(sum(self.home_probabilities))

    @property
    def away_xg(self) -> float:
        return float(sum(self.away_probabilities))

    @property
    def shot_count(self) -> int:
        return len(self.home_probabilities) + len(self.away_probabilities)


def split_probabilities(payload: ShotsPayload) -> Tuple[Tuple[float, ...], Tuple[float, ...]]:
    """Partition shot probabilities by side, keeping shot order within a side."""
    home: list[float] = []
    away: list[float] = []
    for shot in payload.shots:
        p = clamp_probability(shot.xg)
        if shot.side == SIDE_HOME:
            home.append(p)
        else:
            away.append(p)
    return tuple(home), tuple(away)


def build_context(payload: ShotsPayload) -> SimulationContext:
    home, away = split_probabilities(payload)
    return SimulationContext(
        match_id=payload.match.match_id,
        final_score=payload.match.final_score,
        home_probabilities=home,
        away_probabilities=away,
    )


# ---------------------------------------------------------------------------
# Summary DTOs
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class TopLine:
    score: Score
    count: int
    pct: float

    def to_dict(self) -> dict:
        return {"score": self.score.to_dict(), "count": self.count, "pct": self.pct}


@dataclass(frozen=True, slots=True)
class SimulationSummary:
    """Output of one batch run."""

    iterations: int
    top5: Tuple[TopLine, ...]
    final_score_count: int
    final_score_pct: float

    def to_dict(self) -> dict:
        """Render the wire DTO consumed by the HTTP and CLI layers."""
        return {
            "iterations": self.iterations,
            "top5": [line.to_dict() for line in self.top5],
            "marcadorFinalCount": self.final_score_count,
            "marcadorFinalPct": self.final_score_pct,
        }


# ---------------------------------------------------------------------------
# Sampling
# ---------------------------------------------------------------------------

def sample_goals(probabilities: Sequence[float], rng: Mulberry32) -> int:
    """Sum of independent Bernoulli trials, one ``rng`` draw per probability."""
    goals = 0
    for p in probabilities:
        if rng.random() < p:
            goals += 1
    return goals


def simulate_once(payload: ShotsPayload, rng: Mulberry32) -> Score:
    """Simulate a single match straight from a payload."""
    home, away = split_probabilities(payload)
    return Score(home=sample_goals(home, rng), away=sample_goals(away, rng))


def tally_scores(context: SimulationContext, iterations: int, rng: Mulberry32) -> Counter:
    """Run ``iterations`` simulated matches and count each ``"h-a"`` key."""
    if iterations < 0:
        raise ValueError(f"iterations must be >= 0, got {iterations}")
    home_ps = context.home_probabilities
    away_ps = context.away_probabilities
    counts: Counter = Counter()
    for _ in range(iterations):
        h = sample_goals(home_ps, rng)
        a = sample_goals(away_ps, rng)
        counts[f"{h}-{a}"] += 1
    return counts


# ---------------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------------

def _pct(count: int, iterations: int) -> float:
    if iterations <= 0:
        return 0.0
    return count / iterations * 100


def rank(counts: Counter, iterations: int, final_score: Score) -> SimulationSummary:
    """Reduce a frequency table to the top five scorelines and the real-score rate.

    Sorted by count descending, then by ordinal comparison of the ``"h-a"``
    key.
    """
    ordered = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    top5 = tuple(
        TopLine(score=Score.from_key(key), count=count, pct=_pct(count, iterations))
        for key, count in ordered[:TOP_N]
    )
    real_count = counts.get(final_score.key, 0)
    return SimulationSummary(
        iterations=iterations,
        top5=top5,
        final_score_count=real_count,
        final_score_pct=_pct(real_count, iterations),
    )


# ---------------------------------------------------------------------------
# Batch runner
# ---------------------------------------------------------------------------

def run_batch(
    context: SimulationContext,
    iterations: int,
    seed: Optional[float] = None,
) -> SimulationSummary:
    """Run ``iterations`` simulated matches from one seeded stream.

    Args:
        context: Probability partition from :func:`build_context`.
        iterations: Number of simulated matches (>= 0).
        seed: Optional seed; reduced to uint32.  When omitted the seed is
            ``derive_seed(f"{match_id}|{iterations}")``.

    Returns:
        :class:`SimulationSummary` for this batch.
    """
    resolved = to_uint32(seed) if seed is not None else default_seed(context.match_id, iterations)
    rng = Mulberry32(resolved)
    counts = tally_scores(context, iterations, rng)
    summary = rank(counts, iterations, context.final_score)
    logger.debug(
        "Batch %s: %d iterations, seed=%d, %d distinct scorelines",
        context.match_id, iterations, resolved, len(counts),
    )
    return summary


def run_simulations(
    payload: ShotsPayload,
    iterations: int,
    seed: Optional[float] = None,
) -> SimulationSummary:
    """Build a context for ``payload`` and run a single batch."""
    return run_batch(build_context(payload), iterations, seed)
