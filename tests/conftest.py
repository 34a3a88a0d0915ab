import os

os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import date
from typing import Optional
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from agrovision.core.config import Settings
from agrovision.core.permissions import AccessScope, PermissionMatrix, Role, default_permissions
from agrovision.core.security import create_access_token, get_password_hash, token_claims
from agrovision.db import models
from agrovision.main import create_app

DEFAULT_PASSWORD = "senha-forte-123"

SQUARE = {
    "type": "Polygon",
    "coordinates": [[[-47.0, -22.0], [-46.0, -22.0], [-46.0, -21.0], [-47.0, -21.0], [-47.0, -22.0]]],
}


class Factory:
    """Seeds records straight through the store so each test states only what it exercises."""

    def __init__(self, db, settings: Settings) -> None:
        self.db = db
        self.settings = settings

    def _save(self, entity):
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def account(
        self,
        *,
        email: Optional[str] = None,
        password: str = DEFAULT_PASSWORD,
        role: Role = Role.VIEWER,
        scope: AccessScope = AccessScope.CLIENT,
        client_ids=(),
        permissions: Optional[PermissionMatrix] = None,
        status: str = "ativo",
    ) -> models.Account:
        account = models.Account(
            name=f"Usuario {role.value}",
            email=email or f"{role.value}-{uuid4().hex[:8]}@agro.test",
            password_hash=get_password_hash(password),
            role=role.value,
            status=status,
            access_scope=scope.value,
            permissions=(permissions or default_permissions(role)).model_dump(),
        )
        account.client_ids = list(client_ids)
        return self._save(account)

    def admin(self) -> models.Account:
        return self.account(role=Role.ADMIN, scope=AccessScope.GLOBAL)

    def headers(self, account: models.Account) -> dict:
        token = create_access_token(token_claims(account), self.settings)
        return {"Authorization": f"Bearer {token}"}

    def client_record(self, name: str = "Fazenda Boa Vista", email: Optional[str] = None) -> models.Client:
        return self._save(
            models.Client(name=name, email=email or f"{uuid4().hex[:8]}@fazenda.test", status="ativo")
        )

    def property_record(self, client: models.Client, **overrides) -> models.Property:
        values = dict(
            client_id=client.id,
            name="Sitio Sao Jose",
            country="BR",
            state="SP",
            municipality="Campinas",
            geometry=SQUARE,
            total_area_ha=120.0,
            status="ativa",
            tenure_regime="propria",
        )
        values.update(overrides)
        return self._save(models.Property(**values))

    def area(self, client: models.Client, **overrides) -> models.Area:
        values = dict(
            client_id=client.id,
            name="Talhao 1",
            size=10.5,
            unit="hectares",
            location={"latitude": -22.5, "longitude": -47.1},
            irrigated=False,
            status="ativa",
        )
        values.update(overrides)
        return self._save(models.Area(**values))

    def crop(self, area: models.Area, **overrides) -> models.Crop:
        values = dict(
            area_id=area.id,
            client_id=area.client_id,
            name="Soja",
            planted_on=date(2026, 1, 10),
            stage="plantada",
        )
        values.update(overrides)
        return self._save(models.Crop(**values))

    def pest(self, crop: models.Crop, **overrides) -> models.Pest:
        values = dict(
            crop_id=crop.id,
            area_id=crop.area_id,
            client_id=crop.client_id,
            name="Lagarta-do-cartucho",
            kind="inseto",
            severity="alta",
            detected_on=date(2026, 2, 1),
        )
        values.update(overrides)
        return self._save(models.Pest(**values))

    def loss(self, crop: models.Crop, **overrides) -> models.Loss:
        values = dict(
            crop_id=crop.id,
            area_id=crop.area_id,
            client_id=crop.client_id,
            kind="clima",
            description="Granizo",
            quantity=10,
            unit="sc",
            estimated_value=1000.0,
            occurred_on=date(2026, 3, 1),
        )
        values.update(overrides)
        return self._save(models.Loss(**values))


@pytest.fixture()
def settings() -> Settings:
    settings = Settings()
    settings.DATABASE_URL = "sqlite://"
    settings.SECRET_KEY = "test-secret"
    settings.ADMIN_EMAIL = None
    settings.ADMIN_PASSWORD = None
    settings.ENV = "test"
    return settings


@pytest.fixture()
def client(settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def db_session(client):
    db = client.app.state.database.session()
    yield db
    db.close()


@pytest.fixture()
def factory(db_session, settings) -> Factory:
    return Factory(db_session, settings)
