"""Shot-level data transfer objects.

A :class:`ShotsPayload` is built once per simulation request (usually by
:func:`xgsim.services.adapter.adapt_external_document`) and is never mutated
afterwards.  Sides are tagged ``"home"`` / ``"away"``; the Spanish
``local`` / ``visitante`` names only appear at the JSON boundary.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Final, Literal, Optional, Tuple, Union

import numpy as np

Side = Literal["home", "away"]

SIDE_HOME: Final[str] = "home"
SIDE_AWAY: Final[str] = "away"


def clamp_probability(value: object) -> float:
    """Coerce a raw xG value into ``[0, 1]``.

    ``None``, NaN and anything that cannot be read as a number map to 0.0;
    values below 0 map to 0.0 and values above 1 map to 1.0.
    """
    if value is None:
        return 0.0
    try:
        p = float(value)
    except OverflowError:
        # integer beyond the double range
        return 1.0 if value > 0 else 0.0
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(p):
        return 0.0
    return float(np.clip(p, 0.0, 1.0))


@dataclass(frozen=True, slots=True)
class Score:
    """A scoreline: home goals, away goals."""

    home: int
    away: int

    @property
    def key(self) -> str:
        return f"{self.home}-{self.away}"

    @classmethod
    def from_key(cls, key: str) -> "Score":
        home, _, away = key.partition("-")
        return cls(home=int(home or 0), away=int(away or 0))

    def to_dict(self) -> dict:
        return {"local": self.home, "visitante": self.away}


@dataclass(frozen=True, slots=True)
class Shot:
    """One recorded shot.

    Only ``side`` and ``xg`` are read by the simulation.  The remaining
    fields are carried through for traceability.
    """

    minute: Union[int, float, str, None]
    side: Side
    xg: float
    player: Optional[str] = None
    xgot: Optional[float] = None
    situation: Optional[str] = None
    outcome: Optional[str] = None
    shot_type: Optional[str] = None


@dataclass(frozen=True, slots=True)
class MatchMeta:
    match_id: str
    home: str
    away: str
    final_score: Score
    date_iso: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ShotsPayload:
    match: MatchMeta
    shots: Tuple[Shot, ...] = field(default_factory=tuple)
