from typing import Optional

from sqlalchemy import func, or_

from agrovision.db import models
from agrovision.db.repository import SoftDeleteRepository


class ClientRepository(SoftDeleteRepository[models.Client]):
    model = models.Client
    sort_fields = {
        "dataCriacao": models.Client.created_at,
        "dataAtualizacao": models.Client.updated_at,
        "nome": models.Client.name,
        "email": models.Client.email,
        "areaTotal": models.Client.total_area,
        "status": models.Client.status,
    }

    def search(
        self,
        *,
        q: Optional[str] = None,
        status: Optional[str] = None,
        visible_client_ids: Optional[list[str]] = None,
    ):
        query = self.active()
        if visible_client_ids is not None:
            query = query.filter(models.Client.id.in_(visible_client_ids))
        if q:
            term = f"%{q.strip()}%"
            query = query.filter(
                or_(
                    models.Client.name.ilike(term),
                    models.Client.email.ilike(term),
                    models.Client.tax_id.ilike(term),
                )
            )
        if status:
            query = query.filter(models.Client.status == status)
        return query

    def email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        query = self.active().filter(func.lower(models.Client.email) == email.lower())
        if exclude_id:
            query = query.filter(models.Client.id != exclude_id)
        return query.first() is not None

    def tax_id_taken(self, tax_id: str, exclude_id: Optional[str] = None) -> bool:
        query = self.active().filter(models.Client.tax_id == tax_id)
        if exclude_id:
            query = query.filter(models.Client.id != exclude_id)
        return query.first() is not None
