from typing import Optional

from sqlalchemy import or_

from agrovision.db import models
from agrovision.db.repository import SoftDeleteRepository


class AreaRepository(SoftDeleteRepository[models.Area]):
    model = models.Area
    sort_fields = {
        "dataCriacao": models.Area.created_at,
        "dataAtualizacao": models.Area.updated_at,
        "nome": models.Area.name,
        "tamanho": models.Area.size,
        "status": models.Area.status,
    }

    def search(
        self,
        *,
        visible_client_ids: Optional[list[str]] = None,
        client_id: Optional[str] = None,
        property_id: Optional[str] = None,
        status: Optional[str] = None,
        irrigated: Optional[bool] = None,
        q: Optional[str] = None,
    ):
        query = self.active()
        if visible_client_ids is not None:
            query = query.filter(models.Area.client_id.in_(visible_client_ids))
        if client_id:
            query = query.filter(models.Area.client_id == client_id)
        if property_id:
            query = query.filter(models.Area.property_id == property_id)
        if status:
            query = query.filter(models.Area.status == status)
        if irrigated is not None:
            query = query.filter(models.Area.irrigated.is_(irrigated))
        if q:
            term = f"%{q.strip()}%"
            query = query.filter(or_(models.Area.name.ilike(term), models.Area.soil_type.ilike(term)))
        return query
