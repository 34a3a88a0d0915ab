from datetime import date, datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from agrovision.common.validators import BRAZILIAN_STATES, strip_required
from agrovision.db import models
from agrovision.properties.geometry import parse_boundary, validate_point

PropertyStatus = Literal["ativa", "inativa", "planejada"]
TenureRegime = Literal["propria", "arrendada", "parceria"]

FIELD_MAP = {
    "clienteId": "client_id",
    "nome": "name",
    "pais": "country",
    "uf": "state",
    "municipio": "municipality",
    "endereco": "address",
    "cep": "postal_code",
    "geom": "geometry",
    "srid": "srid",
    "areaTotalHa": "total_area_ha",
    "centroide": "centroid",
    "status": "status",
    "dataInicioOperacao": "operation_start_date",
    "regimePosse": "tenure_regime",
    "proprietarioExibicao": "display_owner",
    "contratoInicio": "contract_start",
    "contratoFim": "contract_end",
    "contratoIdentificador": "contract_identifier",
    "car": "car",
    "ccir": "ccir",
    "gestorNome": "manager_name",
    "gestorContato": "manager_contact",
}


class PropertyFields(BaseModel):
    @field_validator("nome", "municipio", check_fields=False)
    @classmethod
    def validate_text(cls, value: Optional[str]) -> Optional[str]:
        return strip_required(value) if value is not None else value

    @field_validator("uf", check_fields=False)
    @classmethod
    def validate_uf(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip().upper()
        if value not in BRAZILIAN_STATES:
            raise ValueError("UF invalida")
        return value

    @field_validator("pais", check_fields=False)
    @classmethod
    def validate_pais(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip().upper()
        if len(value) != 2 or not value.isalpha():
            raise ValueError("pais deve ser um codigo ISO de duas letras")
        return value

    @field_validator("geom", check_fields=False)
    @classmethod
    def validate_geom(cls, value: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
        if value is None:
            return value
        parse_boundary(value)
        return value

    @field_validator("centroide", check_fields=False)
    @classmethod
    def validate_centroide(cls, value: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
        return validate_point(value) if value is not None else value

    @field_validator("car", "ccir", check_fields=False)
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return value.strip() or None


class PropertyCreate(PropertyFields):
    clienteId: str
    nome: str = Field(..., min_length=1, max_length=200)
    pais: str = "BR"
    uf: str
    municipio: str
    endereco: Optional[str] = None
    cep: Optional[str] = None
    geom: dict[str, Any]
    srid: int = 4326
    areaTotalHa: float = Field(..., gt=0)
    centroide: Optional[dict[str, Any]] = None
    status: PropertyStatus = "ativa"
    dataInicioOperacao: Optional[date] = None
    regimePosse: TenureRegime = "propria"
    proprietarioExibicao: Optional[str] = None
    contratoInicio: Optional[date] = None
    contratoFim: Optional[date] = None
    contratoIdentificador: Optional[str] = None
    car: Optional[str] = None
    ccir: Optional[str] = None
    gestorNome: Optional[str] = None
    gestorContato: Optional[str] = None


class PropertyUpdate(PropertyFields):
    clienteId: Optional[str] = None
    nome: Optional[str] = Field(None, min_length=1, max_length=200)
    pais: Optional[str] = None
    uf: Optional[str] = None
    municipio: Optional[str] = None
    endereco: Optional[str] = None
    cep: Optional[str] = None
    geom: Optional[dict[str, Any]] = None
    srid: Optional[int] = None
    areaTotalHa: Optional[float] = Field(None, gt=0)
    centroide: Optional[dict[str, Any]] = None
    status: Optional[PropertyStatus] = None
    dataInicioOperacao: Optional[date] = None
    regimePosse: Optional[TenureRegime] = None
    proprietarioExibicao: Optional[str] = None
    contratoInicio: Optional[date] = None
    contratoFim: Optional[date] = None
    contratoIdentificador: Optional[str] = None
    car: Optional[str] = None
    ccir: Optional[str] = None
    gestorNome: Optional[str] = None
    gestorContato: Optional[str] = None


class PropertyResponse(BaseModel):
    id: str
    clienteId: str
    nome: str
    pais: str
    uf: str
    municipio: str
    endereco: Optional[str] = None
    cep: Optional[str] = None
    geom: dict[str, Any]
    srid: int
    areaTotalHa: float
    centroide: Optional[dict[str, Any]] = None
    status: str
    dataInicioOperacao: Optional[date] = None
    regimePosse: str
    proprietarioExibicao: Optional[str] = None
    contratoInicio: Optional[date] = None
    contratoFim: Optional[date] = None
    contratoIdentificador: Optional[str] = None
    car: Optional[str] = None
    ccir: Optional[str] = None
    gestorNome: Optional[str] = None
    gestorContato: Optional[str] = None
    criadoPor: Optional[str] = None
    atualizadoPor: Optional[str] = None
    dataCriacao: datetime
    dataAtualizacao: datetime


def to_response(p: models.Property) -> PropertyResponse:
    return PropertyResponse(
        id=p.id,
        clienteId=p.client_id,
        nome=p.name,
        pais=p.country,
        uf=p.state,
        municipio=p.municipality,
        endereco=p.address,
        cep=p.postal_code,
        geom=p.geometry,
        srid=p.srid,
        areaTotalHa=p.total_area_ha,
        centroide=p.centroid,
        status=p.status,
        dataInicioOperacao=p.operation_start_date,
        regimePosse=p.tenure_regime,
        proprietarioExibicao=p.display_owner,
        contratoInicio=p.contract_start,
        contratoFim=p.contract_end,
        contratoIdentificador=p.contract_identifier,
        car=p.car,
        ccir=p.ccir,
        gestorNome=p.manager_name,
        gestorContato=p.manager_contact,
        criadoPor=p.created_by,
        atualizadoPor=p.updated_by,
        dataCriacao=p.created_at,
        dataAtualizacao=p.updated_at,
    )
