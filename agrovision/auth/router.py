from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from agrovision.auth.schemas import ChangePasswordRequest, LoginRequest, LoginResponse, VerifyResponse
from agrovision.auth.service import AuthService
from agrovision.core.authorization import require_roles
from agrovision.core.config import Settings
from agrovision.core.permissions import Role
from agrovision.core.security import TOKEN_COOKIE, get_current_account, get_request_settings
from agrovision.db import models
from agrovision.db.session import get_db
from agrovision.users.schemas import UserCreate, to_response

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_request_settings),
):
    result = AuthService(db, settings).login(payload.email, payload.senha)
    response.set_cookie(
        TOKEN_COOKIE,
        result.token,
        max_age=result.expiresIn,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    return result


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    payload: UserCreate,
    current_user: models.Account = Depends(require_roles(Role.ADMIN)),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_request_settings),
):
    account = AuthService(db, settings).register(current_user, payload)
    return {"message": "Usuario criado com sucesso", "user": to_response(account)}


@router.get("/verify", response_model=VerifyResponse)
def verify(current_user: models.Account = Depends(get_current_account)):
    return VerifyResponse(user=to_response(current_user))


@router.post("/logout")
def logout(response: Response, current_user: models.Account = Depends(get_current_account)):
    response.delete_cookie(TOKEN_COOKIE)
    return {"message": "Logout realizado com sucesso"}


@router.put("/change-password")
def change_password(
    payload: ChangePasswordRequest,
    current_user: models.Account = Depends(get_current_account),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_request_settings),
):
    AuthService(db, settings).change_password(current_user, payload.senhaAtual, payload.novaSenha)
    return {"message": "Senha alterada com sucesso"}
