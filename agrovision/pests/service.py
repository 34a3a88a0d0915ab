import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from agrovision.common.fields import apply_values, column_values
from agrovision.common.pagination import PaginationParams, paginated
from agrovision.core.authorization import allowed_client_ids, ensure_client_access
from agrovision.core.errors import NotFound, ValidationError
from agrovision.crops.repository import CropRepository
from agrovision.db import models
from agrovision.pests.repository import PestRepository
from agrovision.pests.schemas import FIELD_MAP, PestCreate, PestUpdate, to_response

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("culturaId", "nome", "tipo", "gravidade", "dataDeteccao")


class PestService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = PestRepository(db)
        self.crops = CropRepository(db)

    def get_accessible(self, actor: models.Account, pest_id: str) -> models.Pest:
        pest = self.repo.get(pest_id)
        if not pest:
            raise NotFound("Praga nao encontrada")
        ensure_client_access(actor, pest.client_id)
        return pest

    def _resolve_crop(self, actor: models.Account, crop_id: str) -> models.Crop:
        crop = self.crops.get(crop_id)
        if not crop:
            raise ValidationError("Cultura informada nao existe", culturaId=crop_id)
        ensure_client_access(actor, crop.client_id)
        return crop

    def search(
        self,
        actor: models.Account,
        params: PaginationParams,
        *,
        client_id: Optional[str] = None,
        crop_id: Optional[str] = None,
        active_only: Optional[bool] = None,
        severity: Optional[str] = None,
        kind: Optional[str] = None,
        q: Optional[str] = None,
        detected_from: Optional[date] = None,
        detected_until: Optional[date] = None,
    ) -> dict:
        if client_id:
            ensure_client_access(actor, client_id)
        query = self.repo.search(
            visible_client_ids=allowed_client_ids(actor),
            client_id=client_id,
            crop_id=crop_id,
            active_only=active_only,
            severity=severity,
            kind=kind,
            q=q,
            detected_from=detected_from,
            detected_until=detected_until,
        )
        items, total = self.repo.paginate(query, params)
        return paginated([to_response(item) for item in items], total, params)

    def create(self, actor: models.Account, payload: PestCreate) -> models.Pest:
        crop = self._resolve_crop(actor, payload.culturaId)
        pest = models.Pest(
            **column_values(payload.model_dump(), FIELD_MAP),
            area_id=crop.area_id,
            client_id=crop.client_id,
        )
        pest = self.repo.add(pest)
        logger.info("pest created id=%s crop=%s severity=%s by=%s", pest.id, pest.crop_id, pest.severity, actor.id)
        return pest

    def update(self, actor: models.Account, pest_id: str, payload: PestUpdate) -> models.Pest:
        pest = self.get_accessible(actor, pest_id)
        data = payload.model_dump(exclude_unset=True)
        for key in REQUIRED_FIELDS:
            if key in data and data[key] is None:
                data.pop(key)
        values = column_values(data, FIELD_MAP)

        detected_on = values.get("detected_on", pest.detected_on)
        resolved_on = values.get("resolved_on", pest.resolved_on)
        if resolved_on and resolved_on < detected_on:
            raise ValidationError("dataResolucao deve ser posterior ou igual a dataDeteccao")

        if "crop_id" in values and values["crop_id"] != pest.crop_id:
            crop = self._resolve_crop(actor, values["crop_id"])
            values["area_id"] = crop.area_id
            values["client_id"] = crop.client_id
            # losses tied to this pest must stay on the same crop
            self.db.query(models.Loss).filter(models.Loss.pest_id == pest.id).update(
                {models.Loss.pest_id: None}, synchronize_session=False
            )

        apply_values(pest, values)
        return self.repo.save(pest)

    def delete(self, actor: models.Account, pest_id: str) -> None:
        pest = self.get_accessible(actor, pest_id)
        self.repo.soft_delete(pest)
        logger.info("pest deleted id=%s by=%s", pest.id, actor.id)
