"""Application errors mapped straight to HTTP responses."""
from typing import Any, Optional


class AppError(Exception):
    """Base exception for every error raised on purpose by the API."""

    status_code = 500
    code = "internal_error"
    default_message = "Erro interno do servidor"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        **details: Any,
    ) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.details = {key: value for key, value in details.items() if value is not None}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.code, "message": self.message}
        body.update(self.details)
        return body


class ValidationError(AppError):
    status_code = 400
    code = "validation_error"
    default_message = "Dados invalidos"


class Unauthenticated(AppError):
    status_code = 401
    code = "unauthenticated"
    default_message = "Token de acesso nao fornecido ou invalido"


class InvalidCredentials(Unauthenticated):
    code = "invalid_credentials"
    default_message = "Credenciais invalidas"


class AccountLocked(Unauthenticated):
    code = "account_locked"
    default_message = "Conta temporariamente bloqueada devido a multiplas tentativas de login"


class Unauthorized(AppError):
    status_code = 403
    code = "forbidden"
    default_message = "Acesso negado"


class NotFound(AppError):
    status_code = 404
    code = "not_found"
    default_message = "Registro nao encontrado"


class Conflict(AppError):
    # 400 by default; registration answers 409
    status_code = 400
    code = "conflict"
    default_message = "Registro duplicado"


class InternalError(AppError):
    pass
