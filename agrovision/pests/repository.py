from datetime import date
from typing import Optional

from sqlalchemy import or_

from agrovision.db import models
from agrovision.db.repository import SoftDeleteRepository


class PestRepository(SoftDeleteRepository[models.Pest]):
    model = models.Pest
    sort_fields = {
        "dataCriacao": models.Pest.created_at,
        "dataAtualizacao": models.Pest.updated_at,
        "nome": models.Pest.name,
        "gravidade": models.Pest.severity,
        "dataDeteccao": models.Pest.detected_on,
        "dataResolucao": models.Pest.resolved_on,
    }

    def search(
        self,
        *,
        visible_client_ids: Optional[list[str]] = None,
        client_id: Optional[str] = None,
        crop_id: Optional[str] = None,
        active_only: Optional[bool] = None,
        severity: Optional[str] = None,
        kind: Optional[str] = None,
        q: Optional[str] = None,
        detected_from: Optional[date] = None,
        detected_until: Optional[date] = None,
    ):
        query = self.active()
        if visible_client_ids is not None:
            query = query.filter(models.Pest.client_id.in_(visible_client_ids))
        if client_id:
            query = query.filter(models.Pest.client_id == client_id)
        if crop_id:
            query = query.filter(models.Pest.crop_id == crop_id)
        if active_only is True:
            query = query.filter(models.Pest.resolved_on.is_(None))
        elif active_only is False:
            query = query.filter(models.Pest.resolved_on.isnot(None))
        if severity:
            query = query.filter(models.Pest.severity == severity)
        if kind:
            query = query.filter(models.Pest.kind == kind)
        if q:
            term = f"%{q.strip()}%"
            query = query.filter(or_(models.Pest.name.ilike(term), models.Pest.treatment.ilike(term)))
        if detected_from:
            query = query.filter(models.Pest.detected_on >= detected_from)
        if detected_until:
            query = query.filter(models.Pest.detected_on <= detected_until)
        return query
