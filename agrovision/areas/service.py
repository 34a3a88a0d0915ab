import logging
from typing import Optional

from sqlalchemy.orm import Session

from agrovision.areas.repository import AreaRepository
from agrovision.areas.schemas import FIELD_MAP, AreaCreate, AreaUpdate, to_response
from agrovision.clients.service import ClientService
from agrovision.common.fields import apply_values, column_values
from agrovision.common.pagination import PaginationParams, paginated
from agrovision.core.authorization import allowed_client_ids, ensure_client_access
from agrovision.core.errors import NotFound, ValidationError
from agrovision.db import models
from agrovision.properties.repository import PropertyRepository

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("clienteId", "nome", "tamanho", "unidadeMedida", "localizacao", "irrigada", "status")


class AreaService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = AreaRepository(db)
        self.clients = ClientService(db)
        self.properties = PropertyRepository(db)

    def get_accessible(self, actor: models.Account, area_id: str) -> models.Area:
        area = self.repo.get(area_id)
        if not area:
            raise NotFound("Area nao encontrada")
        ensure_client_access(actor, area.client_id)
        return area

    def _check_property(self, property_id: Optional[str], client_id: str) -> None:
        if not property_id:
            return
        prop = self.properties.get(property_id)
        if not prop:
            raise ValidationError("Propriedade informada nao existe", propriedadeId=property_id)
        if prop.client_id != client_id:
            raise ValidationError("Propriedade pertence a outro cliente", propriedadeId=property_id)

    def _move_children(self, area: models.Area, client_id: str) -> None:
        # crops, pests and losses carry a copy of the owning client id
        for model in (models.Crop, models.Pest, models.Loss):
            self.db.query(model).filter(model.area_id == area.id).update(
                {model.client_id: client_id}, synchronize_session=False
            )

    def search(
        self,
        actor: models.Account,
        params: PaginationParams,
        *,
        client_id: Optional[str] = None,
        property_id: Optional[str] = None,
        status: Optional[str] = None,
        irrigated: Optional[bool] = None,
        q: Optional[str] = None,
    ) -> dict:
        if client_id:
            ensure_client_access(actor, client_id)
        query = self.repo.search(
            visible_client_ids=allowed_client_ids(actor),
            client_id=client_id,
            property_id=property_id,
            status=status,
            irrigated=irrigated,
            q=q,
        )
        items, total = self.repo.paginate(query, params)
        return paginated([to_response(item) for item in items], total, params)

    def create(self, actor: models.Account, payload: AreaCreate) -> models.Area:
        self.clients.ensure_assignable(actor, payload.clienteId)
        self._check_property(payload.propriedadeId, payload.clienteId)
        area = models.Area(**column_values(payload.model_dump(), FIELD_MAP))
        area = self.repo.add(area)
        logger.info("area created id=%s client=%s by=%s", area.id, area.client_id, actor.id)
        return area

    def update(self, actor: models.Account, area_id: str, payload: AreaUpdate) -> models.Area:
        area = self.get_accessible(actor, area_id)
        data = payload.model_dump(exclude_unset=True)
        for key in REQUIRED_FIELDS:
            if key in data and data[key] is None:
                data.pop(key)
        client_id = data.get("clienteId", area.client_id)
        if client_id != area.client_id:
            self.clients.ensure_assignable(actor, client_id)
        property_id = data["propriedadeId"] if "propriedadeId" in data else area.property_id
        if "propriedadeId" in data or client_id != area.client_id:
            self._check_property(property_id, client_id)
        if client_id != area.client_id:
            self._move_children(area, client_id)
        apply_values(area, column_values(data, FIELD_MAP))
        return self.repo.save(area)

    def delete(self, actor: models.Account, area_id: str) -> None:
        area = self.get_accessible(actor, area_id)
        self.repo.soft_delete(area)
        logger.info("area deleted id=%s by=%s", area.id, actor.id)
