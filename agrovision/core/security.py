import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from agrovision.core.config import Settings, get_settings
from agrovision.core.errors import Unauthenticated, ValidationError
from agrovision.core.permissions import AccountStatus
from agrovision.db import models
from agrovision.db.session import get_db
from agrovision.users.repository import AccountRepository

logger = logging.getLogger(__name__)

TOKEN_COOKIE = "token"

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=get_settings().BCRYPT_ROUNDS,
)
bearer_scheme = HTTPBearer(auto_error=False)


def get_request_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def get_password_hash(password: str) -> str:
    if not isinstance(password, str):
        raise ValidationError("Senha invalida para hash")
    if len(password.encode("utf-8")) > 72:
        raise ValidationError("Senha maior que 72 bytes em UTF-8")
    return pwd_context.hash(password)


def create_access_token(
    data: dict[str, Any],
    settings: Settings,
    expires_delta: Optional[timedelta] = None,
) -> str:
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def token_claims(account: models.Account) -> dict[str, Any]:
    return {
        "sub": account.id,
        "role": account.role,
        "tipoAcesso": account.access_scope,
        "clientesVinculados": list(account.client_ids or []),
    }


def decode_access_token(token: str, settings: Settings) -> dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise Unauthenticated("Token invalido ou expirado")
    if not payload.get("sub"):
        raise Unauthenticated("Token invalido ou expirado")
    return payload


def extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(TOKEN_COOKIE)


def get_current_account(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> models.Account:
    """Resolve the caller from the bearer token or the ``token`` cookie.

    The account is re-read on every request so status flips and permission
    edits take effect before the token expires.
    """
    token = extract_token(request, credentials)
    if not token:
        raise Unauthenticated("Token de acesso nao fornecido")
    payload = decode_access_token(token, get_request_settings(request))

    account = AccountRepository(db).get(payload["sub"])
    if not account or account.status != AccountStatus.ACTIVE.value:
        raise Unauthenticated("Usuario nao encontrado ou inativo")
    return account
