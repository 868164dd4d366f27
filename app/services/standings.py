from sqlalchemy import case, func
from sqlalchemy.orm import Session

from app.core.exceptions import SeasonNotFoundError
from app.db.models.base_result import BaseResult
from app.db.models.competitor import Competitor
from app.db.models.event import Event
from app.db.models.race_session import SESSION_TYPES_BY_KIND, RaceSession, SessionKind
from app.db.models.season import Season


def _count_if(condition):
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


def season_standings(db: Session, season_id: int) -> list[dict]:
    """Clasificación de pilotos de la liga sumando solo las sesiones de carrera."""
    if db.get(Season, season_id) is None:
        raise SeasonNotFoundError(f"Season {season_id} not found")

    rows = (
        db.query(
            Competitor.id.label("competitor_id"),
            Competitor.name,
            Competitor.team,
            func.count(BaseResult.id).label("races"),
            func.coalesce(func.sum(BaseResult.points), 0).label("points"),
            _count_if(BaseResult.position == 1).label("wins"),
            _count_if(BaseResult.position <= 3).label("podiums"),
            _count_if(BaseResult.fastest_lap.is_(True)).label("fastest_laps"),
            _count_if(BaseResult.pole_position.is_(True)).label("poles"),
            func.min(BaseResult.position).label("best_finish"),
            func.coalesce(func.sum(BaseResult.in_session_penalty_seconds), 0).label("in_session_penalty_seconds"),
            func.coalesce(func.sum(BaseResult.post_race_penalty_seconds), 0).label("post_race_penalty_seconds"),
            func.coalesce(func.sum(BaseResult.warnings), 0).label("warnings"),
        )
        .join(BaseResult, BaseResult.competitor_id == Competitor.id)
        .join(RaceSession, RaceSession.id == BaseResult.session_id)
        .join(Event, Event.id == RaceSession.event_id)
        .filter(
            Event.season_id == season_id,
            RaceSession.session_type.in_(SESSION_TYPES_BY_KIND[SessionKind.RACE]),
        )
        .group_by(Competitor.id, Competitor.name, Competitor.team)
        .all()
    )

    standings = [dict(row._mapping) for row in rows]
    standings.sort(key=lambda s: (-s["points"], -s["wins"], -s["podiums"], s["name"]))
    return standings
