import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from agrovision.areas.repository import AreaRepository
from agrovision.common.fields import apply_values, column_values
from agrovision.common.pagination import PaginationParams, paginated
from agrovision.core.authorization import allowed_client_ids, ensure_client_access
from agrovision.core.errors import NotFound, ValidationError
from agrovision.crops.repository import CropRepository
from agrovision.crops.schemas import FIELD_MAP, STAGE_ORDER, CropCreate, CropUpdate, to_response
from agrovision.db import models

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("areaId", "nome", "dataPlantio", "estadoAtual")


def check_stage_transition(current: str, target: str) -> None:
    if STAGE_ORDER.index(target) < STAGE_ORDER.index(current):
        raise ValidationError(
            f"Transicao de estado invalida: {current} -> {target}",
            estadoAtual=current,
            permitidos=list(STAGE_ORDER[STAGE_ORDER.index(current):]),
        )


class CropService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = CropRepository(db)
        self.areas = AreaRepository(db)

    def get_accessible(self, actor: models.Account, crop_id: str) -> models.Crop:
        crop = self.repo.get(crop_id)
        if not crop:
            raise NotFound("Cultura nao encontrada")
        ensure_client_access(actor, crop.client_id)
        return crop

    def _resolve_area(self, actor: models.Account, area_id: str) -> models.Area:
        area = self.areas.get(area_id)
        if not area:
            raise ValidationError("Area informada nao existe", areaId=area_id)
        ensure_client_access(actor, area.client_id)
        return area

    def search(
        self,
        actor: models.Account,
        params: PaginationParams,
        *,
        client_id: Optional[str] = None,
        area_id: Optional[str] = None,
        stage: Optional[str] = None,
        q: Optional[str] = None,
        planted_from: Optional[date] = None,
        planted_until: Optional[date] = None,
    ) -> dict:
        if client_id:
            ensure_client_access(actor, client_id)
        query = self.repo.search(
            visible_client_ids=allowed_client_ids(actor),
            client_id=client_id,
            area_id=area_id,
            stage=stage,
            q=q,
            planted_from=planted_from,
            planted_until=planted_until,
        )
        items, total = self.repo.paginate(query, params)
        return paginated([to_response(item) for item in items], total, params)

    def create(self, actor: models.Account, payload: CropCreate) -> models.Crop:
        area = self._resolve_area(actor, payload.areaId)
        crop = models.Crop(**column_values(payload.model_dump(), FIELD_MAP), client_id=area.client_id)
        crop = self.repo.add(crop)
        logger.info("crop created id=%s area=%s by=%s", crop.id, crop.area_id, actor.id)
        return crop

    def update(self, actor: models.Account, crop_id: str, payload: CropUpdate) -> models.Crop:
        crop = self.get_accessible(actor, crop_id)
        data = payload.model_dump(exclude_unset=True)
        for key in REQUIRED_FIELDS:
            if key in data and data[key] is None:
                data.pop(key)
        values = column_values(data, FIELD_MAP)

        if "stage" in values:
            check_stage_transition(crop.stage, values["stage"])
        planted_on = values.get("planted_on", crop.planted_on)
        harvested_on = values.get("harvested_on", crop.harvested_on)
        if harvested_on and harvested_on < planted_on:
            raise ValidationError("dataColheita deve ser posterior ou igual a dataPlantio")

        if "area_id" in values and values["area_id"] != crop.area_id:
            area = self._resolve_area(actor, values["area_id"])
            values["client_id"] = area.client_id
            self._move_children(crop, area)

        apply_values(crop, values)
        return self.repo.save(crop)

    def _move_children(self, crop: models.Crop, area: models.Area) -> None:
        for model in (models.Pest, models.Loss):
            self.db.query(model).filter(model.crop_id == crop.id).update(
                {model.area_id: area.id, model.client_id: area.client_id},
                synchronize_session=False,
            )

    def delete(self, actor: models.Account, crop_id: str) -> None:
        crop = self.get_accessible(actor, crop_id)
        self.repo.soft_delete(crop)
        logger.info("crop deleted id=%s by=%s", crop.id, actor.id)
