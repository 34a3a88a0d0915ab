import logging
from typing import Optional

from sqlalchemy.orm import Session

from agrovision.clients.repository import ClientRepository
from agrovision.clients.schemas import FIELD_MAP, ClientCreate, ClientUpdate, to_response
from agrovision.common.fields import apply_values, column_values
from agrovision.common.pagination import PaginationParams, paginated
from agrovision.core.authorization import allowed_client_ids, ensure_client_access, has_global_access
from agrovision.core.errors import Conflict, NotFound, Unauthorized, ValidationError
from agrovision.db import models

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("nome", "email", "status")


class ClientService:
    def __init__(self, db: Session) -> None:
        self.repo = ClientRepository(db)

    def get_accessible(self, actor: models.Account, client_id: str) -> models.Client:
        client = self.repo.get(client_id)
        if not client:
            raise NotFound("Cliente nao encontrado")
        ensure_client_access(actor, client.id)
        return client

    def ensure_assignable(self, actor: models.Account, client_id: str) -> models.Client:
        """Check a client id coming from a request body before records are attached to it."""
        ensure_client_access(actor, client_id)
        client = self.repo.get(client_id)
        if not client:
            raise ValidationError("Cliente informado nao existe", clienteId=client_id)
        return client

    def search(
        self,
        actor: models.Account,
        params: PaginationParams,
        *,
        q: Optional[str] = None,
        status: Optional[str] = None,
    ) -> dict:
        query = self.repo.search(q=q, status=status, visible_client_ids=allowed_client_ids(actor))
        items, total = self.repo.paginate(query, params)
        return paginated([to_response(item) for item in items], total, params)

    def _ensure_unique(self, email: Optional[str], tax_id: Optional[str], exclude_id: Optional[str] = None) -> None:
        if email and self.repo.email_taken(email, exclude_id):
            raise Conflict("Ja existe um cliente com este email", campo="email")
        if tax_id and self.repo.tax_id_taken(tax_id, exclude_id):
            raise Conflict("Ja existe um cliente com este CPF/CNPJ", campo="cpfCnpj")

    def create(self, actor: models.Account, payload: ClientCreate) -> models.Client:
        if not has_global_access(actor):
            raise Unauthorized("Apenas usuarios com acesso global podem cadastrar clientes")
        self._ensure_unique(payload.email, payload.cpfCnpj)
        client = models.Client(**column_values(payload.model_dump(), FIELD_MAP))
        client = self.repo.add(client)
        logger.info("client created id=%s by=%s", client.id, actor.id)
        return client

    def update(self, actor: models.Account, client_id: str, payload: ClientUpdate) -> models.Client:
        client = self.get_accessible(actor, client_id)
        data = payload.model_dump(exclude_unset=True)
        for key in REQUIRED_FIELDS:
            if key in data and data[key] is None:
                data.pop(key)
        self._ensure_unique(
            data.get("email") if data.get("email") != client.email else None,
            data.get("cpfCnpj") if data.get("cpfCnpj") != client.tax_id else None,
            exclude_id=client.id,
        )
        apply_values(client, column_values(data, FIELD_MAP))
        return self.repo.save(client)

    def delete(self, actor: models.Account, client_id: str) -> None:
        client = self.get_accessible(actor, client_id)
        self.repo.soft_delete(client)
        logger.info("client deleted id=%s by=%s", client.id, actor.id)
