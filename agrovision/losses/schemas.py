from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from agrovision.common.validators import strip_required
from agrovision.db import models

LossKind = Literal["clima", "praga", "doenca", "equipamento", "outro"]
LossUnit = Literal["kg", "ton", "sc", "ha", "percentual"]

LOSS_KINDS = ("clima", "praga", "doenca", "equipamento", "outro")

FIELD_MAP = {
    "culturaId": "crop_id",
    "pragaId": "pest_id",
    "tipo": "kind",
    "descricao": "description",
    "quantidadeAfetada": "quantity",
    "unidadeMedida": "unit",
    "valorEstimado": "estimated_value",
    "dataOcorrencia": "occurred_on",
    "medidaPreventiva": "preventive_measure",
    "observacoes": "notes",
}


class LossCreate(BaseModel):
    culturaId: str
    pragaId: Optional[str] = None
    tipo: LossKind
    descricao: str = Field(..., min_length=1, max_length=1000)
    quantidadeAfetada: float = Field(..., ge=0)
    unidadeMedida: Optional[LossUnit] = None
    valorEstimado: float = Field(0, ge=0)
    dataOcorrencia: date
    medidaPreventiva: Optional[str] = Field(None, max_length=1000)
    observacoes: Optional[str] = Field(None, max_length=1000)

    @field_validator("descricao")
    @classmethod
    def validate_descricao(cls, value: str) -> str:
        return strip_required(value)


class LossUpdate(BaseModel):
    culturaId: Optional[str] = None
    pragaId: Optional[str] = None
    tipo: Optional[LossKind] = None
    descricao: Optional[str] = Field(None, min_length=1, max_length=1000)
    quantidadeAfetada: Optional[float] = Field(None, ge=0)
    unidadeMedida: Optional[LossUnit] = None
    valorEstimado: Optional[float] = Field(None, ge=0)
    dataOcorrencia: Optional[date] = None
    medidaPreventiva: Optional[str] = Field(None, max_length=1000)
    observacoes: Optional[str] = Field(None, max_length=1000)


class LossResponse(BaseModel):
    id: str
    culturaId: str
    pragaId: Optional[str] = None
    areaId: str
    clienteId: str
    tipo: str
    descricao: str
    quantidadeAfetada: float
    unidadeMedida: Optional[str] = None
    valorEstimado: float
    dataOcorrencia: date
    medidaPreventiva: Optional[str] = None
    observacoes: Optional[str] = None
    dataCriacao: datetime
    dataAtualizacao: datetime


class KindTotals(BaseModel):
    valor: float = 0
    quantidade: int = 0


class LossReport(BaseModel):
    dataInicio: date
    dataFim: date
    clienteId: Optional[str] = None
    valorTotal: float
    quantidade: int
    porTipo: dict[str, KindTotals]


def to_response(loss: models.Loss) -> LossResponse:
    return LossResponse(
        id=loss.id,
        culturaId=loss.crop_id,
        pragaId=loss.pest_id,
        areaId=loss.area_id,
        clienteId=loss.client_id,
        tipo=loss.kind,
        descricao=loss.description,
        quantidadeAfetada=loss.quantity,
        unidadeMedida=loss.unit,
        valorEstimado=loss.estimated_value,
        dataOcorrencia=loss.occurred_on,
        medidaPreventiva=loss.preventive_measure,
        observacoes=loss.notes,
        dataCriacao=loss.created_at,
        dataAtualizacao=loss.updated_at,
    )
