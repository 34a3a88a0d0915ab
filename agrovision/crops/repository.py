from datetime import date
from typing import Optional

from sqlalchemy import or_

from agrovision.db import models
from agrovision.db.repository import SoftDeleteRepository


class CropRepository(SoftDeleteRepository[models.Crop]):
    model = models.Crop
    sort_fields = {
        "dataCriacao": models.Crop.created_at,
        "dataAtualizacao": models.Crop.updated_at,
        "nome": models.Crop.name,
        "dataPlantio": models.Crop.planted_on,
        "dataColheita": models.Crop.harvested_on,
        "estadoAtual": models.Crop.stage,
        "produtividade": models.Crop.yield_amount,
    }

    def search(
        self,
        *,
        visible_client_ids: Optional[list[str]] = None,
        client_id: Optional[str] = None,
        area_id: Optional[str] = None,
        stage: Optional[str] = None,
        q: Optional[str] = None,
        planted_from: Optional[date] = None,
        planted_until: Optional[date] = None,
    ):
        query = self.active()
        if visible_client_ids is not None:
            query = query.filter(models.Crop.client_id.in_(visible_client_ids))
        if client_id:
            query = query.filter(models.Crop.client_id == client_id)
        if area_id:
            query = query.filter(models.Crop.area_id == area_id)
        if stage:
            query = query.filter(models.Crop.stage == stage)
        if q:
            term = f"%{q.strip()}%"
            query = query.filter(or_(models.Crop.name.ilike(term), models.Crop.variety.ilike(term)))
        if planted_from:
            query = query.filter(models.Crop.planted_on >= planted_from)
        if planted_until:
            query = query.filter(models.Crop.planted_on <= planted_until)
        return query
