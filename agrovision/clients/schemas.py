from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from agrovision.common.validators import BRAZILIAN_STATES, normalize_email, strip_required, validate_tax_id
from agrovision.db import models

ClientStatus = Literal["ativo", "inativo", "suspenso"]

FIELD_MAP = {
    "nome": "name",
    "email": "email",
    "telefone": "phone",
    "cpfCnpj": "tax_id",
    "endereco": "address",
    "tipoProducao": "production_type",
    "areaTotal": "total_area",
    "status": "status",
}


class Endereco(BaseModel):
    rua: Optional[str] = None
    cidade: Optional[str] = None
    estado: Optional[str] = Field(None, min_length=2, max_length=2)
    cep: Optional[str] = None

    @field_validator("estado")
    @classmethod
    def validate_estado(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.upper()
        if value not in BRAZILIAN_STATES:
            raise ValueError("Estado invalido")
        return value


class ClientBase(BaseModel):
    @field_validator("nome", check_fields=False)
    @classmethod
    def validate_nome(cls, value: Optional[str]) -> Optional[str]:
        return strip_required(value) if value is not None else value

    @field_validator("email", check_fields=False)
    @classmethod
    def validate_email(cls, value: Optional[str]) -> Optional[str]:
        return normalize_email(value) if value is not None else value

    @field_validator("cpfCnpj", check_fields=False)
    @classmethod
    def validate_cpf_cnpj(cls, value: Optional[str]) -> Optional[str]:
        return validate_tax_id(value) if value else None


class ClientCreate(ClientBase):
    nome: str = Field(..., min_length=1, max_length=100)
    email: str
    telefone: Optional[str] = None
    cpfCnpj: Optional[str] = None
    endereco: Optional[Endereco] = None
    tipoProducao: Optional[str] = None
    areaTotal: Optional[float] = Field(None, ge=0)
    status: ClientStatus = "ativo"


class ClientUpdate(ClientBase):
    nome: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = None
    telefone: Optional[str] = None
    cpfCnpj: Optional[str] = None
    endereco: Optional[Endereco] = None
    tipoProducao: Optional[str] = None
    areaTotal: Optional[float] = Field(None, ge=0)
    status: Optional[ClientStatus] = None


class ClientResponse(BaseModel):
    id: str
    nome: str
    email: str
    telefone: Optional[str] = None
    cpfCnpj: Optional[str] = None
    endereco: Optional[Endereco] = None
    tipoProducao: Optional[str] = None
    areaTotal: Optional[float] = None
    status: str
    dataCriacao: datetime
    dataAtualizacao: datetime


def to_response(c: models.Client) -> ClientResponse:
    return ClientResponse(
        id=c.id,
        nome=c.name,
        email=c.email,
        telefone=c.phone,
        cpfCnpj=c.tax_id,
        endereco=Endereco.model_validate(c.address) if c.address else None,
        tipoProducao=c.production_type,
        areaTotal=c.total_area,
        status=c.status,
        dataCriacao=c.created_at,
        dataAtualizacao=c.updated_at,
    )
