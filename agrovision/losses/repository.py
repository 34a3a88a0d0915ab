from datetime import date
from typing import Optional

from sqlalchemy import func

from agrovision.db import models
from agrovision.db.repository import SoftDeleteRepository


class LossRepository(SoftDeleteRepository[models.Loss]):
    model = models.Loss
    sort_fields = {
        "dataCriacao": models.Loss.created_at,
        "dataAtualizacao": models.Loss.updated_at,
        "dataOcorrencia": models.Loss.occurred_on,
        "valorEstimado": models.Loss.estimated_value,
        "quantidadeAfetada": models.Loss.quantity,
        "tipo": models.Loss.kind,
    }

    def search(
        self,
        *,
        visible_client_ids: Optional[list[str]] = None,
        client_id: Optional[str] = None,
        crop_id: Optional[str] = None,
        pest_id: Optional[str] = None,
        kind: Optional[str] = None,
        occurred_from: Optional[date] = None,
        occurred_until: Optional[date] = None,
    ):
        query = self.active()
        if visible_client_ids is not None:
            query = query.filter(models.Loss.client_id.in_(visible_client_ids))
        if client_id:
            query = query.filter(models.Loss.client_id == client_id)
        if crop_id:
            query = query.filter(models.Loss.crop_id == crop_id)
        if pest_id:
            query = query.filter(models.Loss.pest_id == pest_id)
        if kind:
            query = query.filter(models.Loss.kind == kind)
        if occurred_from:
            query = query.filter(models.Loss.occurred_on >= occurred_from)
        if occurred_until:
            query = query.filter(models.Loss.occurred_on <= occurred_until)
        return query

    def totals_by_kind(self, query) -> list[tuple[str, float, int]]:
        rows = (
            query.with_entities(
                models.Loss.kind,
                func.coalesce(func.sum(models.Loss.estimated_value), 0),
                func.count(models.Loss.id),
            )
            .group_by(models.Loss.kind)
            .all()
        )
        return [(kind, float(total or 0), int(count or 0)) for kind, total, count in rows]
