from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from agrovision.common.validators import strip_required
from agrovision.db import models

CropStage = Literal["plantada", "crescimento", "floracao", "colhida"]

# lifecycle order; a crop only moves forward through it
STAGE_ORDER = ("plantada", "crescimento", "floracao", "colhida")

FIELD_MAP = {
    "areaId": "area_id",
    "nome": "name",
    "variedade": "variety",
    "dataPlantio": "planted_on",
    "dataColheita": "harvested_on",
    "estadoAtual": "stage",
    "produtividade": "yield_amount",
    "observacoes": "notes",
}


class CropCreate(BaseModel):
    areaId: str
    nome: str = Field(..., min_length=1, max_length=100)
    variedade: Optional[str] = Field(None, max_length=100)
    dataPlantio: date
    dataColheita: Optional[date] = None
    estadoAtual: CropStage = "plantada"
    produtividade: Optional[float] = Field(None, ge=0)
    observacoes: Optional[str] = Field(None, max_length=1000)

    @field_validator("nome")
    @classmethod
    def validate_nome(cls, value: str) -> str:
        return strip_required(value)

    @model_validator(mode="after")
    def check_dates(self) -> "CropCreate":
        if self.dataColheita and self.dataColheita < self.dataPlantio:
            raise ValueError("dataColheita deve ser posterior ou igual a dataPlantio")
        return self


class CropUpdate(BaseModel):
    areaId: Optional[str] = None
    nome: Optional[str] = Field(None, min_length=1, max_length=100)
    variedade: Optional[str] = Field(None, max_length=100)
    dataPlantio: Optional[date] = None
    dataColheita: Optional[date] = None
    estadoAtual: Optional[CropStage] = None
    produtividade: Optional[float] = Field(None, ge=0)
    observacoes: Optional[str] = Field(None, max_length=1000)


class CropResponse(BaseModel):
    id: str
    areaId: str
    clienteId: str
    nome: str
    variedade: Optional[str] = None
    dataPlantio: date
    dataColheita: Optional[date] = None
    estadoAtual: str
    produtividade: Optional[float] = None
    observacoes: Optional[str] = None
    dataCriacao: datetime
    dataAtualizacao: datetime


def to_response(c: models.Crop) -> CropResponse:
    return CropResponse(
        id=c.id,
        areaId=c.area_id,
        clienteId=c.client_id,
        nome=c.name,
        variedade=c.variety,
        dataPlantio=c.planted_on,
        dataColheita=c.harvested_on,
        estadoAtual=c.stage,
        produtividade=c.yield_amount,
        observacoes=c.notes,
        dataCriacao=c.created_at,
        dataAtualizacao=c.updated_at,
    )
