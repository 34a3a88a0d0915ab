from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from agrovision.clients.schemas import ClientCreate, ClientUpdate, to_response
from agrovision.clients.service import ClientService
from agrovision.common.pagination import PaginationParams, get_pagination
from agrovision.core.authorization import require_permission
from agrovision.core.permissions import Action, Resource
from agrovision.db import models
from agrovision.db.session import get_db

router = APIRouter(prefix="/clients", tags=["Clientes"])


@router.get("")
def list_clients(
    search: Optional[str] = Query(None),
    status_filter: Optional[Literal["ativo", "inativo", "suspenso"]] = Query(None, alias="status"),
    params: PaginationParams = Depends(get_pagination),
    current_user: models.Account = Depends(require_permission(Resource.CLIENTS, Action.VIEW)),
    db: Session = Depends(get_db),
):
    return ClientService(db).search(current_user, params, q=search, status=status_filter)


@router.get("/{client_id}")
def get_client(
    client_id: str,
    current_user: models.Account = Depends(require_permission(Resource.CLIENTS, Action.VIEW)),
    db: Session = Depends(get_db),
):
    return to_response(ClientService(db).get_accessible(current_user, client_id))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_client(
    payload: ClientCreate,
    current_user: models.Account = Depends(require_permission(Resource.CLIENTS, Action.CREATE)),
    db: Session = Depends(get_db),
):
    return to_response(ClientService(db).create(current_user, payload))


@router.put("/{client_id}")
def update_client(
    client_id: str,
    payload: ClientUpdate,
    current_user: models.Account = Depends(require_permission(Resource.CLIENTS, Action.EDIT)),
    db: Session = Depends(get_db),
):
    return to_response(ClientService(db).update(current_user, client_id, payload))


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_client(
    client_id: str,
    current_user: models.Account = Depends(require_permission(Resource.CLIENTS, Action.DELETE)),
    db: Session = Depends(get_db),
):
    ClientService(db).delete(current_user, client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
