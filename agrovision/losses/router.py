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
from agrovision.losses.export import XLSX_MEDIA_TYPE, build_report_workbook
from agrovision.losses.schemas import LossCreate, LossKind, LossReport, LossUpdate, to_response
from agrovision.losses.service import LossService

router = APIRouter(prefix="/losses", tags=["Perdas"])


@router.get("", dependencies=[Depends(require_client_access())])
def list_losses(
    culturaId: Optional[str] = Query(None),
    pragaId: Optional[str] = Query(None),
    clienteId: Optional[str] = Query(None),
    tipo: Optional[LossKind] = Query(None),
    dataInicio: Optional[date] = Query(None),
    dataFim: Optional[date] = Query(None),
    params: PaginationParams = Depends(get_pagination),
    current_user: models.Account = Depends(require_permission(Resource.LOSSES, Action.VIEW)),
    db: Session = Depends(get_db),
):
    if dataInicio and dataFim and dataFim < dataInicio:
        raise ValidationError("dataFim deve ser posterior ou igual a dataInicio")
    return LossService(db).search(
        current_user,
        params,
        client_id=clienteId,
        crop_id=culturaId,
        pest_id=pragaId,
        kind=tipo,
        occurred_from=dataInicio,
        occurred_until=dataFim,
    )


@router.get("/report", response_model=LossReport, dependencies=[Depends(require_client_access())])
def loss_report(
    dataInicio: date = Query(...),
    dataFim: date = Query(...),
    clienteId: Optional[str] = Query(None),
    current_user: models.Account = Depends(require_permission(Resource.REPORTS, Action.VIEW)),
    db: Session = Depends(get_db),
):
    return LossService(db).financial_report(current_user, dataInicio, dataFim, clienteId)


@router.get("/report/export", dependencies=[Depends(require_client_access())])
def export_loss_report(
    dataInicio: date = Query(...),
    dataFim: date = Query(...),
    clienteId: Optional[str] = Query(None),
    current_user: models.Account = Depends(require_permission(Resource.REPORTS, Action.EXPORT)),
    db: Session = Depends(get_db),
):
    service = LossService(db)
    report = service.financial_report(current_user, dataInicio, dataFim, clienteId)
    content, filename = build_report_workbook(
        report, service.report_rows(current_user, dataInicio, dataFim, clienteId)
    )
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/{loss_id}")
def get_loss(
    loss_id: str,
    current_user: models.Account = Depends(require_permission(Resource.LOSSES, Action.VIEW)),
    db: Session = Depends(get_db),
):
    return to_response(LossService(db).get_accessible(current_user, loss_id))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_loss(
    payload: LossCreate,
    current_user: models.Account = Depends(require_permission(Resource.LOSSES, Action.CREATE)),
    db: Session = Depends(get_db),
):
    return to_response(LossService(db).create(current_user, payload))


@router.put("/{loss_id}")
def update_loss(
    loss_id: str,
    payload: LossUpdate,
    current_user: models.Account = Depends(require_permission(Resource.LOSSES, Action.EDIT)),
    db: Session = Depends(get_db),
):
    return to_response(LossService(db).update(current_user, loss_id, payload))


@router.delete("/{loss_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_loss(
    loss_id: str,
    current_user: models.Account = Depends(require_permission(Resource.LOSSES, Action.DELETE)),
    db: Session = Depends(get_db),
):
    LossService(db).delete(current_user, loss_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
