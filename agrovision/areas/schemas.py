from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from agrovision.common.validators import strip_required
from agrovision.db import models

AreaStatus = Literal["ativa", "inativa", "manutencao"]
AreaUnit = Literal["hectares", "alqueires", "m²"]

FIELD_MAP = {
    "clienteId": "client_id",
    "propriedadeId": "property_id",
    "nome": "name",
    "descricao": "description",
    "tamanho": "size",
    "unidadeMedida": "unit",
    "localizacao": "location",
    "tipoSolo": "soil_type",
    "irrigada": "irrigated",
    "status": "status",
}


class Localizacao(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class AreaCreate(BaseModel):
    clienteId: str
    propriedadeId: Optional[str] = None
    nome: str = Field(..., min_length=1, max_length=100)
    descricao: Optional[str] = Field(None, max_length=500)
    tamanho: float = Field(..., gt=0)
    unidadeMedida: AreaUnit = "hectares"
    localizacao: Localizacao
    tipoSolo: Optional[str] = None
    irrigada: bool = False
    status: AreaStatus = "ativa"

    @field_validator("nome")
    @classmethod
    def validate_nome(cls, value: str) -> str:
        return strip_required(value)


class AreaUpdate(BaseModel):
    clienteId: Optional[str] = None
    propriedadeId: Optional[str] = None
    nome: Optional[str] = Field(None, min_length=1, max_length=100)
    descricao: Optional[str] = Field(None, max_length=500)
    tamanho: Optional[float] = Field(None, gt=0)
    unidadeMedida: Optional[AreaUnit] = None
    localizacao: Optional[Localizacao] = None
    tipoSolo: Optional[str] = None
    irrigada: Optional[bool] = None
    status: Optional[AreaStatus] = None


class AreaResponse(BaseModel):
    id: str
    clienteId: str
    propriedadeId: Optional[str] = None
    nome: str
    descricao: Optional[str] = None
    tamanho: float
    unidadeMedida: str
    localizacao: Localizacao
    tipoSolo: Optional[str] = None
    irrigada: bool
    status: str
    dataCriacao: datetime
    dataAtualizacao: datetime


def to_response(a: models.Area) -> AreaResponse:
    return AreaResponse(
        id=a.id,
        clienteId=a.client_id,
        propriedadeId=a.property_id,
        nome=a.name,
        descricao=a.description,
        tamanho=a.size,
        unidadeMedida=a.unit,
        localizacao=Localizacao.model_validate(a.location),
        tipoSolo=a.soil_type,
        irrigada=a.irrigated,
        status=a.status,
        dataCriacao=a.created_at,
        dataAtualizacao=a.updated_at,
    )
