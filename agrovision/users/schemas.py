from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from agrovision.common.validators import normalize_email, strip_required
from agrovision.core.permissions import AccessScope, AccountStatus, PermissionMatrix, Role
from agrovision.db import models


class UserCreate(BaseModel):
    nome: str = Field(..., min_length=2, max_length=100)
    email: str
    senha: str = Field(..., min_length=6, max_length=72)
    telefone: Optional[str] = None
    avatar: Optional[str] = None
    role: Role = Role.VIEWER
    status: AccountStatus = AccountStatus.ACTIVE
    tipoAcesso: AccessScope = AccessScope.CLIENT
    clientesVinculados: list[str] = Field(default_factory=list)
    permissoes: Optional[PermissionMatrix] = None

    @field_validator("nome")
    @classmethod
    def validate_nome(cls, value: str) -> str:
        return strip_required(value)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)


class UserUpdate(BaseModel):
    nome: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[str] = None
    telefone: Optional[str] = None
    avatar: Optional[str] = None
    role: Optional[Role] = None
    status: Optional[AccountStatus] = None
    tipoAcesso: Optional[AccessScope] = None
    clientesVinculados: Optional[list[str]] = None
    permissoes: Optional[PermissionMatrix] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: Optional[str]) -> Optional[str]:
        return normalize_email(value) if value is not None else value


class PasswordReset(BaseModel):
    novaSenha: str = Field(..., min_length=6, max_length=72)


class UserResponse(BaseModel):
    id: str
    nome: str
    email: str
    telefone: Optional[str] = None
    avatar: Optional[str] = None
    role: str
    status: str
    tipoAcesso: str
    clientesVinculados: list[str]
    permissoes: PermissionMatrix
    ultimoLogin: Optional[datetime] = None
    criadoPor: Optional[str] = None
    dataCriacao: datetime
    dataAtualizacao: datetime


def to_response(account: models.Account) -> UserResponse:
    """Public profile; the credential hash and lockout bookkeeping never leave the service."""
    return UserResponse(
        id=account.id,
        nome=account.name,
        email=account.email,
        telefone=account.phone,
        avatar=account.avatar,
        role=account.role,
        status=account.status,
        tipoAcesso=account.access_scope,
        clientesVinculados=list(account.client_ids),
        permissoes=PermissionMatrix.model_validate(account.permissions or {}),
        ultimoLogin=account.last_login_at,
        criadoPor=account.created_by,
        dataCriacao=account.created_at,
        dataAtualizacao=account.updated_at,
    )
