"""
Payload de sesión decodificada que entrega el listener de telemetría.

Se valida una sola vez en la frontera: a partir de aquí el motor trabaja con
modelos tipados y nunca vuelve a inspeccionar la forma del JSON.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, RootModel, TypeAdapter, field_validator, model_validator
from pydantic.alias_generators import to_camel

from app.db.models.base_result import ResultStatus
from app.db.models.race_session import (
    DEFAULT_SESSION_TYPE,
    SESSION_TYPES_BY_KIND,
    SessionKind,
)

# Alias de texto que aceptamos además del código numérico
STATUS_ALIASES = {
    "finished": ResultStatus.FINISHED,
    "classified": ResultStatus.FINISHED,
    "active": ResultStatus.ACTIVE,
    "inactive": ResultStatus.INACTIVE,
    "invalid": ResultStatus.INVALID,
    "dnf": ResultStatus.DNF,
    "did_not_finish": ResultStatus.DNF,
    "dsq": ResultStatus.DISQUALIFIED,
    "disqualified": ResultStatus.DISQUALIFIED,
    "ncl": ResultStatus.NOT_CLASSIFIED,
    "not_classified": ResultStatus.NOT_CLASSIFIED,
    "ret": ResultStatus.RETIRED,
    "retired": ResultStatus.RETIRED,
}


class _PayloadModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ResultPayload(_PayloadModel):
    """Resultado de un piloto tal y como lo reporta el simulador."""

    driver_id: int | None = None
    platform_id: str | None = None
    name: str = Field(min_length=1)
    team: str | None = None
    car_number: int | None = None
    position: int | None = Field(default=None, ge=1)
    grid_position: int | None = Field(default=None, ge=0)
    lap_count: int = Field(default=0, ge=0)
    best_lap_ms: int | None = Field(default=None, ge=0)
    sector_ms: list[int | None] = Field(default_factory=lambda: [None, None, None])
    total_time_ms: int | None = Field(default=None, ge=0)
    in_session_penalty_seconds: int = Field(default=0, ge=0)
    warnings: int = Field(default=0, ge=0)
    status: ResultStatus = ResultStatus.FINISHED
    dnf_reason: str | None = None
    fastest_lap: bool = False
    pole: bool = False
    points: float = 0

    @field_validator("platform_id", mode="before")
    @classmethod
    def platform_id_as_text(cls, value: Any) -> Any:
        # Los Steam IDs llegan a veces como número
        if value is None or value == "":
            return None
        return str(value)

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip().isdigit():
            return int(value)
        if isinstance(value, str):
            key = value.strip().lower().replace(" ", "_").replace("-", "_")
            if key not in STATUS_ALIASES:
                raise ValueError(f"Unknown result status '{value}'")
            return STATUS_ALIASES[key]
        return value

    @field_validator("sector_ms")
    @classmethod
    def three_sectors(cls, value: list[int | None]) -> list[int | None]:
        if len(value) > 3:
            raise ValueError("sectorMs must have at most 3 entries")
        return value + [None] * (3 - len(value))


class _SessionPayloadBase(_PayloadModel):
    track: str = Field(min_length=1)
    session_type: int | None = None
    simulator_session_id: str | None = None
    extra_data: dict[str, Any] | None = Field(default=None, alias="metadata")
    results: list[ResultPayload] = Field(min_length=1)

    @field_validator("simulator_session_id", mode="before")
    @classmethod
    def simulator_id_as_text(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        return str(value)

    @model_validator(mode="after")
    def check_session_type(self):
        kind = self.kind
        if self.session_type is None:
            self.session_type = DEFAULT_SESSION_TYPE[kind]
        elif self.session_type not in SESSION_TYPES_BY_KIND[kind]:
            raise ValueError(
                f"sessionType {self.session_type} is not a {kind.value} session"
            )
        return self

    @model_validator(mode="after")
    def check_unique_positions(self):
        reported = [row.position for row in self.results if row.position is not None]
        duplicated = sorted({p for p in reported if reported.count(p) > 1})
        if duplicated:
            raise ValueError(f"Duplicated positions in results: {duplicated}")
        return self

    @property
    def kind(self) -> SessionKind:
        return SessionKind(self.session_kind)

    @property
    def is_race(self) -> bool:
        return self.kind == SessionKind.RACE


class PracticeSessionPayload(_SessionPayloadBase):
    session_kind: Literal["practice"]


class QualifyingSessionPayload(_SessionPayloadBase):
    session_kind: Literal["qualifying"]


class RaceSessionPayload(_SessionPayloadBase):
    session_kind: Literal["race"]


DecodedSession = Annotated[
    Union[PracticeSessionPayload, QualifyingSessionPayload, RaceSessionPayload],
    Field(discriminator="session_kind"),
]

decoded_session_adapter = TypeAdapter(DecodedSession)


class DecodedSessionBody(RootModel[DecodedSession]):
    """Cuerpo HTTP de la ingesta: la misma unión como modelo raíz."""


def parse_decoded_session(data: dict) -> PracticeSessionPayload | QualifyingSessionPayload | RaceSessionPayload:
    """Valida un payload crudo (dict) y devuelve la variante correspondiente."""
    return decoded_session_adapter.validate_python(data)


def dump_decoded_session(payload) -> dict:
    """Forma JSON del payload, la misma que acepta `parse_decoded_session`."""
    return payload.model_dump(mode="json", by_alias=True)
