from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from agrovision.common.pagination import PaginationParams, get_pagination
from agrovision.core.authorization import require_client_access, require_permission
from agrovision.core.errors import ValidationError
from agrovision.core.permissions import Action, Resource
from agrovision.db import models
from agrovision.db.session import get_db
from agrovision.pests.schemas import PestCreate, PestKind, PestUpdate, Severity, to_response
from agrovision.pests.service import PestService

router = APIRouter(prefix="/pests", tags=["Pragas"])


@router.get("", dependencies=[Depends(require_client_access())])
def list_pests(
    culturaId: Optional[str] = Query(None),
    clienteId: Optional[str] = Query(None),
    ativas: Optional[bool] = Query(None),
    gravidade: Optional[Severity] = Query(None),
    tipo: Optional[PestKind] = Query(None),
    search: Optional[str] = Query(None),
    dataInicio: Optional[date] = Query(None),
    dataFim: Optional[date] = Query(None),
    params: PaginationParams = Depends(get_pagination),
    current_user: models.Account = Depends(require_permission(Resource.PESTS, Action.VIEW)),
    db: Session = Depends(get_db),
):
    if dataInicio and dataFim and dataFim < dataInicio:
        raise ValidationError("dataFim deve ser posterior ou igual a dataInicio")
    return PestService(db).search(
        current_user,
        params,
        client_id=clienteId,
        crop_id=culturaId,
        active_only=ativas,
        severity=gravidade,
        kind=tipo,
        q=search,
        detected_from=dataInicio,
        detected_until=dataFim,
    )


@router.get("/{pest_id}")
def get_pest(
    pest_id: str,
    current_user: models.Account = Depends(require_permission(Resource.PESTS, Action.VIEW)),
    db: Session = Depends(get_db),
):
    return to_response(PestService(db).get_accessible(current_user, pest_id))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_pest(
    payload: PestCreate,
    current_user: models.Account = Depends(require_permission(Resource.PESTS, Action.CREATE)),
    db: Session = Depends(get_db),
):
    return to_response(PestService(db).create(current_user, payload))


@router.put("/{pest_id}")
def update_pest(
    pest_id: str,
    payload: PestUpdate,
    current_user: models.Account = Depends(require_permission(Resource.PESTS, Action.EDIT)),
    db: Session = Depends(get_db),
):
    return to_response(PestService(db).update(current_user, pest_id, payload))


@router.delete("/{pest_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_pest(
    pest_id: str,
    current_user: models.Account = Depends(require_permission(Resource.PESTS, Action.DELETE)),
    db: Session = Depends(get_db),
):
    PestService(db).delete(current_user, pest_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
