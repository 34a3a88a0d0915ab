from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from agrovision.areas.schemas import AreaCreate, AreaStatus, AreaUpdate, to_response
from agrovision.areas.service import AreaService
from agrovision.common.pagination import PaginationParams, get_pagination
from agrovision.core.authorization import require_client_access, require_permission
from agrovision.core.permissions import Action, Resource
from agrovision.db import models
from agrovision.db.session import get_db

router = APIRouter(prefix="/areas", tags=["Areas"])


@router.get("", dependencies=[Depends(require_client_access())])
def list_areas(
    clienteId: Optional[str] = Query(None),
    propriedadeId: Optional[str] = Query(None),
    status_filter: Optional[AreaStatus] = Query(None, alias="status"),
    irrigada: Optional[bool] = Query(None),
    search: Optional[str] = Query(None),
    params: PaginationParams = Depends(get_pagination),
    current_user: models.Account = Depends(require_permission(Resource.AREAS, Action.VIEW)),
    db: Session = Depends(get_db),
):
    return AreaService(db).search(
        current_user,
        params,
        client_id=clienteId,
        property_id=propriedadeId,
        status=status_filter,
        irrigated=irrigada,
        q=search,
    )


@router.get("/{area_id}")
def get_area(
    area_id: str,
    current_user: models.Account = Depends(require_permission(Resource.AREAS, Action.VIEW)),
    db: Session = Depends(get_db),
):
    return to_response(AreaService(db).get_accessible(current_user, area_id))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_area(
    payload: AreaCreate,
    current_user: models.Account = Depends(require_permission(Resource.AREAS, Action.CREATE)),
    db: Session = Depends(get_db),
):
    return to_response(AreaService(db).create(current_user, payload))


@router.put("/{area_id}")
def update_area(
    area_id: str,
    payload: AreaUpdate,
    current_user: models.Account = Depends(require_permission(Resource.AREAS, Action.EDIT)),
    db: Session = Depends(get_db),
):
    return to_response(AreaService(db).update(current_user, area_id, payload))


@router.delete("/{area_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_area(
    area_id: str,
    current_user: models.Account = Depends(require_permission(Resource.AREAS, Action.DELETE)),
    db: Session = Depends(get_db),
):
    AreaService(db).delete(current_user, area_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
