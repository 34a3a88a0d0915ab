from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from agrovision.common.pagination import PaginationParams, get_pagination
from agrovision.core.authorization import require_client_access, require_permission
from agrovision.core.permissions import Action, Resource
from agrovision.db import models
from agrovision.db.session import get_db
from agrovision.properties.schemas import PropertyCreate, PropertyStatus, PropertyUpdate, to_response
from agrovision.properties.service import PropertyService

router = APIRouter(prefix="/properties", tags=["Propriedades"])


@router.get("", dependencies=[Depends(require_client_access())])
def list_properties(
    clienteId: Optional[str] = Query(None),
    status_filter: Optional[PropertyStatus] = Query(None, alias="status"),
    uf: Optional[str] = Query(None, min_length=2, max_length=2),
    search: Optional[str] = Query(None),
    params: PaginationParams = Depends(get_pagination),
    current_user: models.Account = Depends(require_permission(Resource.PROPERTIES, Action.VIEW)),
    db: Session = Depends(get_db),
):
    return PropertyService(db).search(
        current_user,
        params,
        client_id=clienteId,
        status=status_filter,
        state=uf,
        q=search,
    )


@router.get("/{property_id}")
def get_property(
    property_id: str,
    current_user: models.Account = Depends(require_permission(Resource.PROPERTIES, Action.VIEW)),
    db: Session = Depends(get_db),
):
    return to_response(PropertyService(db).get_accessible(current_user, property_id))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_property(
    payload: PropertyCreate,
    current_user: models.Account = Depends(require_permission(Resource.PROPERTIES, Action.CREATE)),
    db: Session = Depends(get_db),
):
    return to_response(PropertyService(db).create(current_user, payload))


@router.put("/{property_id}")
def update_property(
    property_id: str,
    payload: PropertyUpdate,
    current_user: models.Account = Depends(require_permission(Resource.PROPERTIES, Action.EDIT)),
    db: Session = Depends(get_db),
):
    return to_response(PropertyService(db).update(current_user, property_id, payload))


@router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_property(
    property_id: str,
    current_user: models.Account = Depends(require_permission(Resource.PROPERTIES, Action.DELETE)),
    db: Session = Depends(get_db),
):
    PropertyService(db).delete(current_user, property_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
