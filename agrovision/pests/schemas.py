from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from agrovision.common.validators import strip_required
from agrovision.db import models

PestKind = Literal["inseto", "fungo", "bacteria", "virus", "nematoide", "erva_daninha", "doenca", "outro"]
Severity = Literal["baixa", "media", "alta", "critica"]

FIELD_MAP = {
    "culturaId": "crop_id",
    "nome": "name",
    "tipo": "kind",
    "gravidade": "severity",
    "dataDeteccao": "detected_on",
    "dataResolucao": "resolved_on",
    "areaAfetada": "affected_area",
    "tratamentoAplicado": "treatment",
    "observacoes": "notes",
}


class PestCreate(BaseModel):
    culturaId: str
    nome: str = Field(..., min_length=1, max_length=100)
    tipo: PestKind
    gravidade: Severity = "media"
    dataDeteccao: date
    dataResolucao: Optional[date] = None
    areaAfetada: Optional[float] = Field(None, ge=0)
    tratamentoAplicado: Optional[str] = Field(None, max_length=500)
    observacoes: Optional[str] = Field(None, max_length=1000)

    @field_validator("nome")
    @classmethod
    def validate_nome(cls, value: str) -> str:
        return strip_required(value)

    @model_validator(mode="after")
    def check_dates(self) -> "PestCreate":
        if self.dataResolucao and self.dataResolucao < self.dataDeteccao:
            raise ValueError("dataResolucao deve ser posterior ou igual a dataDeteccao")
        return self


class PestUpdate(BaseModel):
    culturaId: Optional[str] = None
    nome: Optional[str] = Field(None, min_length=1, max_length=100)
    tipo: Optional[PestKind] = None
    gravidade: Optional[Severity] = None
    dataDeteccao: Optional[date] = None
    dataResolucao: Optional[date] = None
    areaAfetada: Optional[float] = Field(None, ge=0)
    tratamentoAplicado: Optional[str] = Field(None, max_length=500)
    observacoes: Optional[str] = Field(None, max_length=1000)


class PestResponse(BaseModel):
    id: str
    culturaId: str
    areaId: str
    clienteId: str
    nome: str
    tipo: str
    gravidade: str
    dataDeteccao: date
    dataResolucao: Optional[date] = None
    ativa: bool
    areaAfetada: Optional[float] = None
    tratamentoAplicado: Optional[str] = None
    observacoes: Optional[str] = None
    dataCriacao: datetime
    dataAtualizacao: datetime


def to_response(p: models.Pest) -> PestResponse:
    return PestResponse(
        id=p.id,
        culturaId=p.crop_id,
        areaId=p.area_id,
        clienteId=p.client_id,
        nome=p.name,
        tipo=p.kind,
        gravidade=p.severity,
        dataDeteccao=p.detected_on,
        dataResolucao=p.resolved_on,
        ativa=p.resolved_on is None,
        areaAfetada=p.affected_area,
        tratamentoAplicado=p.treatment,
        observacoes=p.notes,
        dataCriacao=p.created_at,
        dataAtualizacao=p.updated_at,
    )
