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
from agrovision.losses.repository import LossRepository
from agrovision.losses.schemas import FIELD_MAP, KindTotals, LossCreate, LossReport, LossUpdate, to_response
from agrovision.pests.repository import PestRepository

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("culturaId", "tipo", "descricao", "quantidadeAfetada", "valorEstimado", "dataOcorrencia")


class LossService:
    def __init__(self, db: Session) -> None:
        self.repo = LossRepository(db)
        self.crops = CropRepository(db)
        self.pests = PestRepository(db)

    def get_accessible(self, actor: models.Account, loss_id: str) -> models.Loss:
        loss = self.repo.get(loss_id)
        if not loss:
            raise NotFound("Perda nao encontrada")
        ensure_client_access(actor, loss.client_id)
        return loss

    def _resolve_crop(self, actor: models.Account, crop_id: str) -> models.Crop:
        crop = self.crops.get(crop_id)
        if not crop:
            raise ValidationError("Cultura informada nao existe", culturaId=crop_id)
        ensure_client_access(actor, crop.client_id)
        return crop

    def _check_pest(self, pest_id: Optional[str], crop_id: str) -> None:
        if not pest_id:
            return
        pest = self.pests.get(pest_id)
        if not pest:
            raise ValidationError("Praga informada nao existe", pragaId=pest_id)
        if pest.crop_id != crop_id:
            raise ValidationError("Praga informada pertence a outra cultura", pragaId=pest_id)

    def search(
        self,
        actor: models.Account,
        params: PaginationParams,
        *,
        client_id: Optional[str] = None,
        crop_id: Optional[str] = None,
        pest_id: Optional[str] = None,
        kind: Optional[str] = None,
        occurred_from: Optional[date] = None,
        occurred_until: Optional[date] = None,
    ) -> dict:
        if client_id:
            ensure_client_access(actor, client_id)
        query = self.repo.search(
            visible_client_ids=allowed_client_ids(actor),
            client_id=client_id,
            crop_id=crop_id,
            pest_id=pest_id,
            kind=kind,
            occurred_from=occurred_from,
            occurred_until=occurred_until,
        )
        items, total = self.repo.paginate(query, params)
        return paginated([to_response(item) for item in items], total, params)

    def create(self, actor: models.Account, payload: LossCreate) -> models.Loss:
        crop = self._resolve_crop(actor, payload.culturaId)
        self._check_pest(payload.pragaId, crop.id)
        loss = models.Loss(
            **column_values(payload.model_dump(), FIELD_MAP),
            area_id=crop.area_id,
            client_id=crop.client_id,
        )
        loss = self.repo.add(loss)
        logger.info("loss created id=%s crop=%s value=%.2f by=%s", loss.id, loss.crop_id, loss.estimated_value, actor.id)
        return loss

    def update(self, actor: models.Account, loss_id: str, payload: LossUpdate) -> models.Loss:
        loss = self.get_accessible(actor, loss_id)
        data = payload.model_dump(exclude_unset=True)
        for key in REQUIRED_FIELDS:
            if key in data and data[key] is None:
                data.pop(key)
        values = column_values(data, FIELD_MAP)

        crop_id = values.get("crop_id", loss.crop_id)
        if crop_id != loss.crop_id:
            crop = self._resolve_crop(actor, crop_id)
            values["area_id"] = crop.area_id
            values["client_id"] = crop.client_id
        pest_id = values["pest_id"] if "pest_id" in values else loss.pest_id
        if "pest_id" in values or crop_id != loss.crop_id:
            self._check_pest(pest_id, crop_id)

        apply_values(loss, values)
        return self.repo.save(loss)

    def delete(self, actor: models.Account, loss_id: str) -> None:
        loss = self.get_accessible(actor, loss_id)
        self.repo.soft_delete(loss)
        logger.info("loss deleted id=%s by=%s", loss.id, actor.id)

    def _report_query(self, actor: models.Account, start: date, end: date, client_id: Optional[str]):
        if end < start:
            raise ValidationError("dataFim deve ser posterior ou igual a dataInicio")
        if client_id:
            ensure_client_access(actor, client_id)
        return self.repo.search(
            visible_client_ids=allowed_client_ids(actor),
            client_id=client_id,
            occurred_from=start,
            occurred_until=end,
        )

    def financial_report(
        self,
        actor: models.Account,
        start: date,
        end: date,
        client_id: Optional[str] = None,
    ) -> LossReport:
        """Total estimated value and count of losses in [start, end], grouped by category."""
        query = self._report_query(actor, start, end, client_id)
        by_kind = {
            kind: KindTotals(valor=round(total, 2), quantidade=count)
            for kind, total, count in self.repo.totals_by_kind(query)
        }
        return LossReport(
            dataInicio=start,
            dataFim=end,
            clienteId=client_id,
            valorTotal=round(sum(item.valor for item in by_kind.values()), 2),
            quantidade=sum(item.quantidade for item in by_kind.values()),
            porTipo=by_kind,
        )

    def report_rows(
        self,
        actor: models.Account,
        start: date,
        end: date,
        client_id: Optional[str] = None,
    ) -> list[models.Loss]:
        query = self._report_query(actor, start, end, client_id)
        return query.order_by(models.Loss.occurred_on.asc(), models.Loss.created_at.asc()).all()
