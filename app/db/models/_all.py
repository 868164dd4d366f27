# Importa todos los modelos para que SQLAlchemy los registre antes de create_all
from app.db.models.season import Season
from app.db.models.event import Event
from app.db.models.competitor import Competitor
from app.db.models.competitor_mapping import CompetitorMapping
from app.db.models.race_session import RaceSession
from app.db.models.base_result import BaseResult
from app.db.models.original_snapshot import OriginalSnapshot
from app.db.models.penalty_entry import PenaltyEntry
from app.db.models.audit_entry import AuditEntry
from app.db.models.orphaned_session import OrphanedSession
from app.db.models.session_error import SessionError
from app.db.models.user import User

__all__ = [
    "Season",
    "Event",
    "Competitor",
    "CompetitorMapping",
    "RaceSession",
    "BaseResult",
    "OriginalSnapshot",
    "PenaltyEntry",
    "AuditEntry",
    "OrphanedSession",
    "SessionError",
    "User",
]
