"""
"Simulate by id" use case.

Flow for ``POST /simulate/by-id``::

    match id ──► MatchIndexRepository.find_by_id ──► storage_path
             ──► SupabaseMatchStorage.fetch_json ──► raw JSON text
             ──► adapt_external_document         ──► ShotsPayload
             ──► SimulationRunner.run(payload, runs, seed)

``runs`` defaults to 1000 and ``seed`` to ``derive_seed(f"{id}|{runs}")``,
so repeating a request without a seed replays the identical summary.
Collaborators are injected so tests can swap any of them for a MagicMock.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Protocol

from xgsim.core.prng import derive_seed
from xgsim.core.shots import ShotsPayload
from xgsim.core.simulator import SimulationSummary, build_context, run_batch
from xgsim.errors import MatchNotFoundError
from xgsim.services.adapter import adapt_external_document
from xgsim.services.match_index import MatchIndexRepository

logger = logging.getLogger(__name__)

DEFAULT_RUNS = 1000


class MatchStorage(Protocol):
    def fetch_json(self, path: str) -> str: ...


class SimulationRunner(ABC):
    @abstractmethod
    def run(self, payload: ShotsPayload, runs: int, seed: Optional[float] = None) -> SimulationSummary:
        """Simulate ``runs`` matches for ``payload``."""


class DefaultSimulationRunner(SimulationRunner):
    """Builds the probability partition and runs one batch."""

    def run(self, payload: ShotsPayload, runs: int, seed: Optional[float] = None) -> SimulationSummary:
        context = build_context(payload)
        return run_batch(context, runs, seed)


@dataclass(frozen=True)
class SimulationRequest:
    id: str
    runs: Optional[int] = None
    seed: Optional[float] = None


@dataclass(frozen=True)
class SimulateMatchByIdResponse:
    id: str
    runs: int
    summary: SimulationSummary

    def to_dict(self) -> dict:
        return {"id": self.id, "runs": self.runs, "summary": self.summary.to_dict()}


class SimulateMatchByIdUseCase:
    def __init__(
        self,
        match_index_repository: MatchIndexRepository,
        match_storage: MatchStorage,
        simulation_runner: SimulationRunner,
        default_runs: int = DEFAULT_RUNS,
    ):
        self.match_index_repository = match_index_repository
        self.match_storage = match_storage
        self.simulation_runner = simulation_runner
        self.default_runs = default_runs

    def execute(self, request: SimulationRequest) -> SimulateMatchByIdResponse:
        """
        Raises:
            MatchNotFoundError: id is not in the index.
            MalformedMatchJsonError: stored document fails the schema check.
            MatchIndexRepositoryError / MatchStorageError: backend failures.
        """
        metadata = self.match_index_repository.find_by_id(request.id)
        if metadata is None:
            logger.info("Match %s not found in index", request.id)
            raise MatchNotFoundError(request.id)

        raw_json = self.match_storage.fetch_json(metadata.storage_path)
        payload = adapt_external_document(raw_json)

        runs = request.runs if request.runs is not None else self.default_runs
        seed = request.seed if request.seed is not None else derive_seed(f"{request.id}|{runs}")

        started = time.perf_counter()
        summary = self.simulation_runner.run(payload, runs, seed)
        logger.info(
            "Simulated %s: %d runs, seed=%s, %d shots in %.3fs",
            metadata.id, runs, seed, len(payload.shots), time.perf_counter() - started,
        )

        return SimulateMatchByIdResponse(id=metadata.id, runs=runs, summary=summary)
