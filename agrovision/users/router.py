from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from agrovision.common.pagination import PaginationParams, get_pagination
from agrovision.core.authorization import require_client_access, require_permission, require_self_or_admin
from agrovision.core.permissions import AccessScope, AccountStatus, Action, Resource, Role
from agrovision.core.security import get_current_account
from agrovision.db import models
from agrovision.db.session import get_db
from agrovision.users.schemas import PasswordReset, UserCreate, UserUpdate, to_response
from agrovision.users.service import UserService

router = APIRouter(prefix="/users", tags=["Usuarios"])


@router.get("")
def list_users(
    search: Optional[str] = Query(None),
    role: Optional[Role] = Query(None),
    status_filter: Optional[AccountStatus] = Query(None, alias="status"),
    tipoAcesso: Optional[AccessScope] = Query(None),
    clienteId: Optional[str] = Query(None),
    params: PaginationParams = Depends(get_pagination),
    current_user: models.Account = Depends(require_permission(Resource.USERS, Action.VIEW)),
    db: Session = Depends(get_db),
):
    return UserService(db).search(
        current_user,
        params,
        q=search,
        role=role.value if role else None,
        status=status_filter.value if status_filter else None,
        access_scope=tipoAcesso.value if tipoAcesso else None,
        client_id=clienteId,
    )


@router.get("/by-client/{client_id}")
def list_users_by_client(
    client_id: str,
    current_user: models.Account = Depends(require_client_access()),
    db: Session = Depends(get_db),
):
    users = UserService(db).for_client(current_user, client_id)
    return {"data": [to_response(user) for user in users]}


@router.get("/{user_id}")
def get_user(
    user_id: str,
    current_user: models.Account = Depends(get_current_account),
    db: Session = Depends(get_db),
):
    return to_response(UserService(db).get(current_user, user_id))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    current_user: models.Account = Depends(get_current_account),
    db: Session = Depends(get_db),
):
    return to_response(UserService(db).create(current_user, payload))


@router.put("/{user_id}")
def update_user(
    user_id: str,
    payload: UserUpdate,
    current_user: models.Account = Depends(get_current_account),
    db: Session = Depends(get_db),
):
    return to_response(UserService(db).update(current_user, user_id, payload))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    current_user: models.Account = Depends(get_current_account),
    db: Session = Depends(get_db),
):
    UserService(db).delete(current_user, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{user_id}/change-password")
def change_user_password(
    user_id: str,
    payload: PasswordReset,
    current_user: models.Account = Depends(require_self_or_admin("user_id")),
    db: Session = Depends(get_db),
):
    UserService(db).set_password(current_user, user_id, payload.novaSenha)
    return {"message": "Senha alterada com sucesso"}
