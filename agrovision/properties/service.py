import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from agrovision.clients.service import ClientService
from agrovision.common.fields import apply_values, column_values
from agrovision.common.pagination import PaginationParams, paginated
from agrovision.core.authorization import allowed_client_ids, ensure_client_access
from agrovision.core.errors import Conflict, NotFound, ValidationError
from agrovision.db import models
from agrovision.properties.geometry import centroid_of
from agrovision.properties.repository import PropertyRepository
from agrovision.properties.schemas import FIELD_MAP, PropertyCreate, PropertyUpdate, to_response

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "clienteId",
    "nome",
    "pais",
    "uf",
    "municipio",
    "geom",
    "srid",
    "areaTotalHa",
    "status",
    "regimePosse",
)


def check_contract(values: dict[str, Any]) -> None:
    """Leased and partnership tenures must carry the contract window."""
    if values.get("tenure_regime", "propria") != "propria":
        missing = [
            name
            for name, column in (
                ("contratoInicio", "contract_start"),
                ("contratoFim", "contract_end"),
                ("contratoIdentificador", "contract_identifier"),
            )
            if not values.get(column)
        ]
        if missing:
            raise ValidationError(
                "Dados do contrato sao obrigatorios para posse arrendada ou parceria",
                campos=missing,
            )
    start, end = values.get("contract_start"), values.get("contract_end")
    if start and end and end < start:
        raise ValidationError("contratoFim deve ser posterior ou igual a contratoInicio")


class PropertyService:
    def __init__(self, db: Session) -> None:
        self.repo = PropertyRepository(db)
        self.clients = ClientService(db)

    def get_accessible(self, actor: models.Account, property_id: str) -> models.Property:
        prop = self.repo.get(property_id)
        if not prop:
            raise NotFound("Propriedade nao encontrada")
        ensure_client_access(actor, prop.client_id)
        return prop

    def search(
        self,
        actor: models.Account,
        params: PaginationParams,
        *,
        client_id: Optional[str] = None,
        status: Optional[str] = None,
        state: Optional[str] = None,
        q: Optional[str] = None,
    ) -> dict:
        query = self.repo.search(
            visible_client_ids=allowed_client_ids(actor),
            client_id=client_id,
            status=status,
            state=state,
            q=q,
        )
        items, total = self.repo.paginate(query, params)
        return paginated([to_response(item) for item in items], total, params)

    def create(self, actor: models.Account, payload: PropertyCreate) -> models.Property:
        self.clients.ensure_assignable(actor, payload.clienteId)
        values = column_values(payload.model_dump(), FIELD_MAP)
        check_contract(values)
        if values.get("car") and self.repo.car_taken(values["car"]):
            raise Conflict("Ja existe uma propriedade com este CAR", campo="car")
        if not values.get("centroid"):
            values["centroid"] = centroid_of(values["geometry"])
        prop = models.Property(**values, created_by=actor.id, updated_by=actor.id)
        prop = self.repo.add(prop)
        logger.info("property created id=%s client=%s by=%s", prop.id, prop.client_id, actor.id)
        return prop

    def update(self, actor: models.Account, property_id: str, payload: PropertyUpdate) -> models.Property:
        prop = self.get_accessible(actor, property_id)
        data = payload.model_dump(exclude_unset=True)
        for key in REQUIRED_FIELDS:
            if key in data and data[key] is None:
                data.pop(key)
        if "clienteId" in data and data["clienteId"] != prop.client_id:
            self.clients.ensure_assignable(actor, data["clienteId"])
            # areas must stay on their property's client
            area_ids = self.repo.active_area_ids(prop.id)
            if area_ids:
                raise ValidationError(
                    "Propriedade possui areas vinculadas e nao pode mudar de cliente",
                    areas=area_ids,
                )

        values = column_values(data, FIELD_MAP)
        merged = {column: getattr(prop, column) for column in FIELD_MAP.values()}
        merged.update(values)
        check_contract(merged)
        if values.get("car") and values["car"] != prop.car and self.repo.car_taken(values["car"], prop.id):
            raise Conflict("Ja existe uma propriedade com este CAR", campo="car")
        if "geometry" in values and "centroid" not in values:
            values["centroid"] = centroid_of(values["geometry"])

        apply_values(prop, values)
        prop.updated_by = actor.id
        return self.repo.save(prop)

    def delete(self, actor: models.Account, property_id: str) -> None:
        prop = self.get_accessible(actor, property_id)
        self.repo.soft_delete(prop)
        logger.info("property deleted id=%s by=%s", prop.id, actor.id)
