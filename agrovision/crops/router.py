from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from agrovision.common.pagination import PaginationParams, get_pagination
from agrovision.core.authorization import require_client_access, require_permission
from agrovision.core.errors import ValidationError
from agrovision.core.permissions import Action, Resource
from agrovision.crops.schemas import CropCreate, CropStage, CropUpdate, to_response
from agrovision.crops.service import CropService
from agrovision.db import models
from agrovision.db.session import get_db

router = APIRouter(prefix="/crops", tags=["Culturas"])


@router.get("", dependencies=[Depends(require_client_access())])
def list_crops(
    areaId: Optional[str] = Query(None),
    clienteId: Optional[str] = Query(None),
    estadoAtual: Optional[CropStage] = Query(None),
    search: Optional[str] = Query(None),
    dataInicio: Optional[date] = Query(None),
    dataFim: Optional[date] = Query(None),
    params: PaginationParams = Depends(get_pagination),
    current_user: models.Account = Depends(require_permission(Resource.CROPS, Action.VIEW)),
    db: Session = Depends(get_db),
):
    if dataInicio and dataFim and dataFim < dataInicio:
        raise ValidationError("dataFim deve ser posterior ou igual a dataInicio")
    return CropService(db).search(
        current_user,
        params,
        client_id=clienteId,
        area_id=areaId,
        stage=estadoAtual,
        q=search,
        planted_from=dataInicio,
        planted_until=dataFim,
    )


@router.get("/{crop_id}")
def get_crop(
    crop_id: str,
    current_user: models.Account = Depends(require_permission(Resource.CROPS, Action.VIEW)),
    db: Session = Depends(get_db),
):
    return to_response(CropService(db).get_accessible(current_user, crop_id))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_crop(
    payload: CropCreate,
    current_user: models.Account = Depends(require_permission(Resource.CROPS, Action.CREATE)),
    db: Session = Depends(get_db),
):
    return to_response(CropService(db).create(current_user, payload))


@router.put("/{crop_id}")
def update_crop(
    crop_id: str,
    payload: CropUpdate,
    current_user: models.Account = Depends(require_permission(Resource.CROPS, Action.EDIT)),
    db: Session = Depends(get_db),
):
    return to_response(CropService(db).update(current_user, crop_id, payload))


@router.delete("/{crop_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_crop(
    crop_id: str,
    current_user: models.Account = Depends(require_permission(Resource.CROPS, Action.DELETE)),
    db: Session = Depends(get_db),
):
    CropService(db).delete(current_user, crop_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
