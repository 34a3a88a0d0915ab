from typing import Optional

from sqlalchemy import func, or_

from agrovision.db import models
from agrovision.db.repository import SoftDeleteRepository


class AccountRepository(SoftDeleteRepository[models.Account]):
    model = models.Account
    sort_fields = {
        "dataCriacao": models.Account.created_at,
        "dataAtualizacao": models.Account.updated_at,
        "nome": models.Account.name,
        "email": models.Account.email,
        "role": models.Account.role,
        "status": models.Account.status,
        "ultimoLogin": models.Account.last_login_at,
    }

    def get_by_email(self, email: str) -> Optional[models.Account]:
        normalized = email.strip().lower()
        return self.active().filter(func.lower(models.Account.email) == normalized).first()

    def email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        query = self.active().filter(func.lower(models.Account.email) == email.strip().lower())
        if exclude_id:
            query = query.filter(models.Account.id != exclude_id)
        return query.first() is not None

    def linked_to_any(self, query, client_ids: list[str]):
        return query.filter(
            models.Account.client_links.any(models.AccountClient.client_id.in_(client_ids))
        )

    def search(
        self,
        *,
        q: Optional[str] = None,
        role: Optional[str] = None,
        status: Optional[str] = None,
        access_scope: Optional[str] = None,
        client_id: Optional[str] = None,
        visible_client_ids: Optional[list[str]] = None,
    ):
        query = self.active()
        if q:
            term = f"%{q.strip()}%"
            query = query.filter(or_(models.Account.name.ilike(term), models.Account.email.ilike(term)))
        if role:
            query = query.filter(models.Account.role == role)
        if status:
            query = query.filter(models.Account.status == status)
        if access_scope:
            query = query.filter(models.Account.access_scope == access_scope)
        if client_id:
            query = self.linked_to_any(query, [client_id])
        if visible_client_ids is not None:
            query = self.linked_to_any(query, visible_client_ids)
        return query

    def active_for_client(self, client_id: str) -> list[models.Account]:
        return (
            self.active()
            .filter(models.Account.status == "ativo")
            .filter(
                or_(
                    models.Account.access_scope == "global",
                    models.Account.client_links.any(models.AccountClient.client_id == client_id),
                )
            )
            .order_by(models.Account.name.asc())
            .all()
        )
