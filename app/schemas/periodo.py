"""Esquemas para periodos académicos."""
from datetime import date, time

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.periodo import EstadoPeriodo, FasePeriodo


class PeriodoBase(BaseModel):
    anio: int = Field(description="Año del periodo", ge=2000, le=2100)
    fase: str = Field(description="ENERO-ABRIL, MAYO-AGOSTO o SEPTIEMBRE-DICIEMBRE")
    fecha_inicio: date = Field(description="Fecha de inicio del periodo")
    fecha_fin: date = Field(description="Fecha de fin del periodo")
    hora_fin: time = Field(default=time(23, 59, 59), description="Hora de cierre en fecha_fin")
    estado_activo: str = Field(default=EstadoPeriodo.ACTIVO, description="Activo o Inactivo")

    @field_validator("fase")
    @classmethod
    def validar_fase(cls, v: str) -> str:
        if v not in FasePeriodo.TODAS:
            raise ValueError(f"fase debe ser una de: {', '.join(FasePeriodo.TODAS)}")
        return v

    @field_validator("estado_activo")
    @classmethod
    def validar_estado(cls, v: str) -> str:
        if v not in EstadoPeriodo.TODOS:
            raise ValueError("estado_activo debe ser 'Activo' o 'Inactivo'")
        return v

    @model_validator(mode="after")
    def validar_fechas(self):
        if self.fecha_fin < self.fecha_inicio:
            raise ValueError("fecha_fin no puede ser anterior a fecha_inicio")
        return self


class PeriodoCreate(PeriodoBase):
    """Request para crear un periodo."""


class PeriodoUpdate(PeriodoBase):
    """Request para reemplazar los datos de un periodo."""


class PeriodoEstadoRequest(BaseModel):
    """Cambio manual de estado por el administrador."""
    nuevo_estado: str = Field(description="Activo o Inactivo")

    @field_validator("nuevo_estado")
    @classmethod
    def validar_estado(cls, v: str) -> str:
        if v not in EstadoPeriodo.TODOS:
            raise ValueError("Estado no válido. Debe ser 'Activo' o 'Inactivo'")
        return v


class PeriodoItem(BaseModel):
    """Fila de la lista de periodos."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    anio: int
    fase: str
    fecha_inicio: date
    fecha_fin: date
    hora_fin: time
    estado_activo: str


class PeriodoListResponse(BaseModel):
    periodos: list[PeriodoItem]


class CicloPeriodosResponse(BaseModel):
    """Resumen de una ejecución del ciclo de periodos y formatos."""
    periodos_desactivados: list[int]
    periodo_referencia_id: int | None
    estado_deseado: str | None
    formatos_actualizados: list[str]
    formatos_en_gracia: list[str]
    formatos_modificados_durante_ciclo: list[str]
