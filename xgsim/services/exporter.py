"""
Reporting sweep for a local match document.

Builds the probability partition once and runs one batch per requested
size (100 / 1,000 / 10,000 by default).  Without an explicit seed every size
derives its own seed, so the three runs are independent but individually
reproducible.

Usage:
    from xgsim.services.exporter import run_sweep, format_report
    sweep = run_sweep(payload)
    print(format_report(payload, sweep))
"""

from typing import Dict, Iterable, List, Optional, Sequence

from xgsim.core.shots import ShotsPayload
from xgsim.core.simulator import SimulationSummary, TopLine, build_context, run_batch

DEFAULT_SIZES = (100, 1000, 10000)


def run_sweep(
    payload: ShotsPayload,
    sizes: Iterable[int] = DEFAULT_SIZES,
    seed: Optional[float] = None,
) -> Dict[int, SimulationSummary]:
    """One batch per distinct size, in first-seen order.

    A repeated size would rerun the exact same seeded batch, so it is
    collapsed into a single entry.
    """
    context = build_context(payload)
    sweep: Dict[int, SimulationSummary] = {}
    for n in sizes:
        if n not in sweep:
            sweep[n] = run_batch(context, n, seed)
    return sweep


def format_top(top: Sequence[TopLine]) -> str:
    return "\n".join(
        f"{t.score.home}-{t.score.away}: {t.count} veces ({t.pct:.2f}%)" for t in top
    )


def format_report(payload: ShotsPayload, sweep: Dict[int, SimulationSummary]) -> str:
    real = payload.match.final_score
    lines: List[str] = []
    for n, summary in sweep.items():
        lines.append("")
        lines.append(f"--- Simulación de {n} partidos ---")
        lines.append(format_top(summary.top5))
        lines.append(
            f"Marcador real {real.home}-{real.away}: "
            f"{summary.final_score_count} veces ({summary.final_score_pct:.2f}%)"
        )
    return "\n".join(lines)
