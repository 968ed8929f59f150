"""
Domain errors for the simulation service.

Each error maps to one HTTP status in ``xgsim.main``; nothing here is
retried.
"""


class SimulationServiceError(Exception):
    """Base class for errors raised by the simulation service."""


class MatchNotFoundError(SimulationServiceError):
    def __init__(self, match_id: str):
        self.match_id = match_id
        super().__init__(f"Match with id {match_id} was not found")


class MalformedMatchJsonError(SimulationServiceError):
    def __init__(self, message: str = "Match JSON payload is malformed"):
        super().__init__(message)


class MatchIndexRepositoryError(SimulationServiceError):
    def __init__(self, message: str = "Failed to query match index"):
        super().__init__(message)


class MatchStorageError(SimulationServiceError):
    def __init__(self, message: str = "Failed to fetch match JSON from storage"):
        super().__init__(message)
