from typing import Optional

from sqlalchemy import or_

from agrovision.db import models
from agrovision.db.repository import SoftDeleteRepository


class PropertyRepository(SoftDeleteRepository[models.Property]):
    model = models.Property
    sort_fields = {
        "dataCriacao": models.Property.created_at,
        "dataAtualizacao": models.Property.updated_at,
        "nome": models.Property.name,
        "uf": models.Property.state,
        "municipio": models.Property.municipality,
        "areaTotalHa": models.Property.total_area_ha,
        "status": models.Property.status,
    }

    def search(
        self,
        *,
        visible_client_ids: Optional[list[str]] = None,
        client_id: Optional[str] = None,
        status: Optional[str] = None,
        state: Optional[str] = None,
        q: Optional[str] = None,
    ):
        query = self.active()
        if visible_client_ids is not None:
            query = query.filter(models.Property.client_id.in_(visible_client_ids))
        if client_id:
            query = query.filter(models.Property.client_id == client_id)
        if status:
            query = query.filter(models.Property.status == status)
        if state:
            query = query.filter(models.Property.state == state.upper())
        if q:
            term = f"%{q.strip()}%"
            query = query.filter(
                or_(
                    models.Property.name.ilike(term),
                    models.Property.municipality.ilike(term),
                    models.Property.car.ilike(term),
                )
            )
        return query

    def car_taken(self, car: str, exclude_id: Optional[str] = None) -> bool:
        query = self.active().filter(models.Property.car == car)
        if exclude_id:
            query = query.filter(models.Property.id != exclude_id)
        return query.first() is not None

    def active_area_ids(self, property_id: str) -> list[str]:
        return [
            area_id
            for (area_id,) in self.db.query(models.Area.id)
            .filter(models.Area.property_id == property_id, models.Area.deleted_at.is_(None))
            .all()
        ]
