"""
Adapter from the external match document to :class:`ShotsPayload`.

External shape (keys are Spanish, as produced by the scraper)::

    {
      "partido": {
        "idPartido": "atl-mad-20240928",
        "fechaISO": "2024-09-28T19:00:00.000Z",
        "local": "Atletico Madrid",
        "visitante": "Real Madrid",
        "marcadorFinal": {"local": 2, "visitante": 1}
      },
      "disparos": [
        {"minuto": 12, "equipo": "Atletico Madrid", "xG": 0.31, ...},
        ...
      ]
    }

Structural problems (missing ids, team names, final score, or a
non-array ``disparos``) fail the check.  Bad xG values never do: they are
clamped into ``[0, 1]`` on ingestion.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from xgsim.core.shots import (
    SIDE_AWAY,
    SIDE_HOME,
    MatchMeta,
    Score,
    Shot,
    ShotsPayload,
    clamp_probability,
)
from xgsim.errors import MalformedMatchJsonError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# External schema
# ---------------------------------------------------------------------------

class ExternalScore(BaseModel):
    local: int = Field(..., ge=0)
    visitante: int = Field(..., ge=0)


class ExternalMatch(BaseModel):
    match_id: str = Field(..., alias="idPartido")
    date_iso: Optional[str] = Field(None, alias="fechaISO")
    local: str
    visitante: str
    final_score: ExternalScore = Field(..., alias="marcadorFinal")


class ExternalShot(BaseModel):
    minute: Union[int, float, str, None] = Field(None, alias="minuto")
    team: str = Field("", alias="equipo")
    xg: float = Field(0.0, alias="xG")
    player: Optional[str] = Field(None, alias="jugador")
    xgot: Optional[float] = Field(None, alias="xGOT")
    situation: Optional[str] = Field(None, alias="situacion")
    outcome: Optional[str] = Field(None, alias="resultado")
    shot_type: Optional[str] = Field(None, alias="tipo_disparo")

    @field_validator("xg", mode="before")
    @classmethod
    def clamp_xg(cls, v: Any) -> float:
        return clamp_probability(v)

    @field_validator("xgot", mode="before")
    @classmethod
    def lenient_xgot(cls, v: Any) -> Optional[float]:
        if v is None:
            return None
        try:
            return float(v)
        except (TypeError, ValueError, OverflowError):
            return None

    @field_validator("player", "situation", "outcome", "shot_type", mode="before")
    @classmethod
    def stringify_metadata(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)


class ExternalDocument(BaseModel):
    match: ExternalMatch = Field(..., alias="partido")
    shots: List[ExternalShot] = Field(..., alias="disparos")


# ---------------------------------------------------------------------------
# Schema check
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DocumentCheck:
    """Tagged result of :func:`check_external_document`."""

    ok: bool
    document: Optional[ExternalDocument] = None
    error: Optional[str] = None


def _describe(exc: ValidationError) -> str:
    first = exc.errors()[0]
    loc = ".".join(str(part) for part in first.get("loc", ())) or "document"
    return f"{loc}: {first.get('msg', 'invalid value')}"


def check_external_document(raw: Union[str, bytes, Mapping[str, Any]]) -> DocumentCheck:
    """Validate ``raw`` (JSON text or decoded mapping) against the external schema."""
    try:
        if isinstance(raw, (str, bytes, bytearray)):
            document = ExternalDocument.model_validate_json(raw)
        elif isinstance(raw, Mapping):
            document = ExternalDocument.model_validate(dict(raw))
        else:
            return DocumentCheck(ok=False, error="document must be a JSON object")
    except ValidationError as exc:
        return DocumentCheck(ok=False, error=_describe(exc))
    return DocumentCheck(ok=True, document=document)


# ---------------------------------------------------------------------------
# Adaptation
# ---------------------------------------------------------------------------

def side_for_team(team: str, home_name: str, away_name: str) -> str:
    """Exact-match a shot's team name; unknown names count for the away side."""
    if team == home_name:
        return SIDE_HOME
    if team == away_name:
        return SIDE_AWAY
    return SIDE_AWAY


def to_payload(document: ExternalDocument) -> ShotsPayload:
    match = document.match
    unmatched = 0
    shots = []
    for s in document.shots:
        side = side_for_team(s.team, match.local, match.visitante)
        if s.team not in (match.local, match.visitante):
            unmatched += 1
        shots.append(
            Shot(
                minute=s.minute,
                side=side,
                xg=clamp_probability(s.xg),
                player=s.player,
                xgot=s.xgot,
                situation=s.situation,
                outcome=s.outcome,
                shot_type=s.shot_type,
            )
        )
    if unmatched:
        logger.warning(
            "Match %s: %d shot(s) with unknown team name assigned to away side",
            match.match_id, unmatched,
        )

    return ShotsPayload(
        match=MatchMeta(
            match_id=match.match_id,
            date_iso=match.date_iso,
            home=match.local,
            away=match.visitante,
            final_score=Score(home=match.final_score.local, away=match.final_score.visitante),
        ),
        shots=tuple(shots),
    )


def adapt_external_document(raw: Union[str, bytes, Mapping[str, Any]]) -> ShotsPayload:
    """Check and convert an external document.

    Raises:
        MalformedMatchJsonError: If the document fails the schema check.
    """
    check = check_external_document(raw)
    if not check.ok:
        raise MalformedMatchJsonError(f"Match JSON payload is malformed ({check.error})")
    return to_payload(check.document)


def validate_payload(payload: Any) -> bool:
    """Minimal shape check for an internal ``{"match": ..., "shots": [...]}`` dict."""
    if not isinstance(payload, Mapping):
        return False
    match = payload.get("match")
    if not isinstance(match, Mapping):
        return False
    return (
        isinstance(match.get("local"), str)
        and isinstance(match.get("visitante"), str)
        and isinstance(payload.get("shots"), list)
    )
