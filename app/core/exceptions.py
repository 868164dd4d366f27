"""Jerarquía de excepciones del motor de resultados.

Cada excepción lleva un ``error_code`` estable y un ``http_status`` para que la
capa API pueda traducirla sin conocer el detalle de cada caso:

- ``NotFoundError``: sesión, resultado, edición, penalización... desconocidos.
- ``ValidationError``: datos de la edición inválidos, se rechaza antes de escribir.
- ``ConflictError``: el estado actual impide la operación (edición ya revertida, etc).
"""

from typing import Any


class LeagueError(Exception):
    """Base exception for every engine error."""

    error_code: str = "LEAGUE_ERR"
    http_status: int = 500

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "detail": self.message,
            "code": self.error_code,
        }
        if self.context:
            result["context"] = self.context
        return result


# -----------------------
# Not found
# -----------------------
class NotFoundError(LeagueError):
    error_code = "NOT_FOUND"
    http_status = 404


class SeasonNotFoundError(NotFoundError):
    error_code = "SEASON_NOT_FOUND"


class EventNotFoundError(NotFoundError):
    error_code = "EVENT_NOT_FOUND"


class SessionNotFoundError(NotFoundError):
    error_code = "SESSION_NOT_FOUND"


class ResultNotFoundError(NotFoundError):
    error_code = "RESULT_NOT_FOUND"


class CompetitorNotFoundError(NotFoundError):
    error_code = "COMPETITOR_NOT_FOUND"


class PenaltyNotFoundError(NotFoundError):
    error_code = "PENALTY_NOT_FOUND"


class SnapshotNotFoundError(NotFoundError):
    error_code = "SNAPSHOT_NOT_FOUND"


class EditNotFoundError(NotFoundError):
    error_code = "EDIT_NOT_FOUND"


class OrphanNotFoundError(NotFoundError):
    error_code = "ORPHAN_NOT_FOUND"


# -----------------------
# Validación
# -----------------------
class ValidationError(LeagueError):
    error_code = "VALIDATION_ERROR"
    http_status = 400


class InvalidPenaltyError(ValidationError):
    error_code = "INVALID_PENALTY"


class InvalidPositionError(ValidationError):
    error_code = "INVALID_POSITION"


class MissingEditFieldError(ValidationError):
    error_code = "MISSING_EDIT_FIELD"


# -----------------------
# Conflictos de estado
# -----------------------
class ConflictError(LeagueError):
    error_code = "CONFLICT"
    http_status = 409


class EditAlreadyRevertedError(ConflictError):
    error_code = "EDIT_ALREADY_REVERTED"


class CompetitorAlreadyMappedError(ConflictError):
    error_code = "COMPETITOR_ALREADY_MAPPED"


class OrphanAlreadyResolvedError(ConflictError):
    error_code = "ORPHAN_ALREADY_RESOLVED"


class IngestionError(LeagueError):
    """La ingesta de una sesión falló y se deshizo la transacción."""

    error_code = "INGESTION_FAILED"
    http_status = 500
