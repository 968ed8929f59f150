"""
Pydantic request/response schemas for the simulation API.

Response field names follow the wire contract shared with the existing
clients (``local`` / ``visitante`` / ``marcadorFinalCount``), so they are
kept verbatim rather than snake_cased.
"""

from __future__ import annotations

import math
from typing import Optional

from pydantic import BaseModel, Field, field_validator


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------

def _is_finite(value) -> bool:
    try:
        return math.isfinite(value)
    except OverflowError:
        # ints too large for a double
        return False


class SimulateByIdRequest(BaseModel):
    """
    Payload for POST /simulate/by-id.

    ``runs`` defaults to 1000 server-side.  Without ``seed`` the server
    derives one from ``"<id>|<runs>"``, so repeated calls are reproducible.
    """

    id: str = Field(..., description="Match id as stored in matches_index")
    runs: Optional[int] = Field(None, gt=0, description="Number of simulated matches")
    seed: Optional[float] = Field(None, description="Optional PRNG seed (reduced to uint32)")

    # The "before" validators only run for keys present in the body, so an
    # explicit null is rejected while an omitted key keeps its default.

    @field_validator("id", mode="before")
    @classmethod
    def validate_id(cls, v):
        if not isinstance(v, str) or not v.strip():
            raise ValueError("Field 'id' is required")
        return v

    @field_validator("runs", mode="before")
    @classmethod
    def validate_runs(cls, v):
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("Field 'runs' must be a positive integer")
        # is_integer() is False for inf and NaN
        if isinstance(v, float) and not v.is_integer():
            raise ValueError("Field 'runs' must be a positive integer")
        return v

    @field_validator("seed", mode="before")
    @classmethod
    def validate_seed(cls, v):
        if isinstance(v, bool) or not isinstance(v, (int, float)) or not _is_finite(v):
            raise ValueError("Field 'seed' must be a finite number")
        return v

    model_config = {
        "json_schema_extra": {
            "example": {"id": "atl-mad-20240928", "runs": 1000, "seed": 1234}
        }
    }


# ---------------------------------------------------------------------------
# Response
# ---------------------------------------------------------------------------

class ScoreResponse(BaseModel):
    local: int
    visitante: int


class TopLineResponse(BaseModel):
    score: ScoreResponse
    count: int
    pct: float


class SimulationSummaryResponse(BaseModel):
    iterations: int
    top5: list[TopLineResponse]
    marcadorFinalCount: int
    marcadorFinalPct: float


class SimulateByIdResponse(BaseModel):
    """Structure for the POST /simulate/by-id endpoint."""
    id: str
    runs: int
    summary: SimulationSummaryResponse


class ErrorResponse(BaseModel):
    error: str
