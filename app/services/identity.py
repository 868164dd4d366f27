"""
Resolución de identidad: piloto del simulador -> miembro de la liga.
"""

from sqlalchemy.orm import Session

from app.core.exceptions import CompetitorAlreadyMappedError, CompetitorNotFoundError
from app.core.logging import get_logger
from app.db.models.audit_entry import EditType
from app.db.models.base_result import BaseResult
from app.db.models.competitor import Competitor
from app.db.models.competitor_mapping import CompetitorMapping
from app.db.models.race_session import RaceSession
from app.db.session import transactional
from app.services.audit import record_edit, require_edit_fields
from app.services.results import get_result

logger = get_logger("identity")


class IdentityResolver:
    """
    Carga una vez los mapeos de la temporada y el roster activo y resuelve
    cada resultado en este orden:

    1. platform_id en la tabla de mapeos de la temporada
    2. platform_id del roster
    3. nombre del simulador en la tabla de mapeos
    4. nombre exacto en el roster

    Si nada coincide devuelve None y el resultado queda sin mapear.
    """

    def __init__(self, db: Session, season_id: int):
        self.db = db
        self.season_id = season_id
        self._loaded = False
        self._mapping_by_platform: dict[str, int] = {}
        self._mapping_by_name: dict[str, int] = {}
        self._roster_by_platform: dict[str, int] = {}
        self._roster_by_name: dict[str, int] = {}

    def _load(self):
        if self._loaded:
            return

        mappings = (
            self.db.query(CompetitorMapping)
            .filter(CompetitorMapping.season_id == self.season_id)
            .order_by(CompetitorMapping.id)
            .all()
        )
        for mapping in mappings:
            if mapping.platform_id:
                self._mapping_by_platform.setdefault(mapping.platform_id, mapping.competitor_id)
            if mapping.sim_driver_name:
                self._mapping_by_name.setdefault(mapping.sim_driver_name, mapping.competitor_id)

        roster = (
            self.db.query(Competitor)
            .filter(Competitor.is_active.is_(True))
            .order_by(Competitor.id)
            .all()
        )
        for competitor in roster:
            if competitor.platform_id:
                self._roster_by_platform.setdefault(competitor.platform_id, competitor.id)
            self._roster_by_name.setdefault(competitor.name, competitor.id)

        self._loaded = True

    def resolve(self, platform_id: str | None, sim_driver_name: str | None) -> int | None:
        self._load()

        if platform_id:
            if platform_id in self._mapping_by_platform:
                return self._mapping_by_platform[platform_id]
            if platform_id in self._roster_by_platform:
                return self._roster_by_platform[platform_id]

        if sim_driver_name:
            if sim_driver_name in self._mapping_by_name:
                return self._mapping_by_name[sim_driver_name]
            if sim_driver_name in self._roster_by_name:
                return self._roster_by_name[sim_driver_name]

        return None


def _same_driver_results(db: Session, result: BaseResult) -> list[BaseResult]:
    """Todas las filas del evento que corresponden al mismo piloto del simulador."""
    query = (
        db.query(BaseResult)
        .join(RaceSession, RaceSession.id == BaseResult.session_id)
        .filter(RaceSession.event_id == result.session.event_id)
    )
    if result.sim_driver_id is not None:
        query = query.filter(BaseResult.sim_driver_id == result.sim_driver_id)
    else:
        query = query.filter(
            BaseResult.sim_driver_id.is_(None),
            BaseResult.sim_driver_name == result.sim_driver_name,
        )
    return query.order_by(BaseResult.session_id, BaseResult.id).all()


def ensure_competitor_free(db: Session, row: BaseResult, competitor_id: int, own_ids: set[int]):
    """El piloto de la liga no puede ocupar dos resultados de la misma sesión."""
    taken = (
        db.query(BaseResult)
        .filter(
            BaseResult.session_id == row.session_id,
            BaseResult.competitor_id == competitor_id,
            BaseResult.id.notin_(own_ids),
        )
        .first()
    )
    if taken is not None:
        raise CompetitorAlreadyMappedError(
            f"Competitor {competitor_id} is already mapped to another result in session {row.session_id}",
            context={"session_id": row.session_id, "result_id": taken.id},
        )


def _remember_mapping(db: Session, season_id: int, competitor_id: int, result: BaseResult):
    mapping = None
    if result.platform_id:
        mapping = (
            db.query(CompetitorMapping)
            .filter(
                CompetitorMapping.season_id == season_id,
                CompetitorMapping.platform_id == result.platform_id,
            )
            .first()
        )
    if mapping is None:
        mapping = (
            db.query(CompetitorMapping)
            .filter(
                CompetitorMapping.season_id == season_id,
                CompetitorMapping.sim_driver_name == result.sim_driver_name,
            )
            .first()
        )

    if mapping is None:
        mapping = CompetitorMapping(season_id=season_id)
        db.add(mapping)

    mapping.competitor_id = competitor_id
    mapping.sim_driver_name = result.sim_driver_name
    mapping.sim_car_number = result.sim_car_number
    mapping.platform_id = result.platform_id or mapping.platform_id
    db.flush()


@transactional
def map_competitor(
    db: Session,
    result_id: int,
    competitor_id: int | None,
    edited_by: str,
    reason: str | None = None,
    remember: bool = True,
) -> list[BaseResult]:
    """
    Asigna (o quita, con None) el miembro de la liga de un resultado y de
    todas las filas del mismo piloto del simulador en el evento.
    Devuelve las filas que han cambiado.
    """
    result = get_result(db, result_id)
    if competitor_id is not None:
        competitor = db.get(Competitor, competitor_id)
        if competitor is None:
            raise CompetitorNotFoundError(f"Competitor {competitor_id} not found")
        default_reason = f"Mapped {result.sim_driver_name} to {competitor.name}"
    else:
        default_reason = f"Unmapped {result.sim_driver_name}"
    reason, edited_by = require_edit_fields(reason or default_reason, edited_by)

    rows = _same_driver_results(db, result)
    own_ids = {row.id for row in rows}
    if competitor_id is not None:
        for row in rows:
            ensure_competitor_free(db, row, competitor_id, own_ids)

    changed = []
    for row in rows:
        if row.competitor_id == competitor_id:
            continue
        old_competitor = row.competitor_id
        row.competitor_id = competitor_id
        db.flush()
        record_edit(
            db,
            session_id=row.session_id,
            result=row,
            edit_type=EditType.USER_MAPPING,
            old_value={"competitor_id": old_competitor},
            new_value={"competitor_id": competitor_id},
            reason=reason,
            edited_by=edited_by,
        )
        changed.append(row)

    if remember and competitor_id is not None:
        _remember_mapping(db, result.session.event.season_id, competitor_id, result)

    logger.info(
        "Mapped %s -> competitor %s (%s row(s))",
        result.sim_driver_name, competitor_id, len(changed),
    )
    return changed
