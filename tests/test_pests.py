from datetime import date

import pytest

from agrovision.core.permissions import Role
from agrovision.db import models


@pytest.fixture()
def crop(factory):
    return factory.crop(factory.area(factory.client_record()))


def test_create_pest_inherits_crop_placement(client, factory, crop):
    operator = factory.account(role=Role.OPERATOR, client_ids=[crop.client_id])

    response = client.post(
        "/api/pests",
        headers=factory.headers(operator),
        json={
            "culturaId": crop.id,
            "nome": "Ferrugem asiatica",
            "tipo": "fungo",
            "gravidade": "critica",
            "dataDeteccao": "2026-02-10",
            "areaAfetada": 3.5,
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["areaId"] == crop.area_id
    assert body["clienteId"] == crop.client_id
    assert body["ativa"] is True


def test_resolution_before_detection_is_rejected(client, factory, crop):
    headers = factory.headers(factory.admin())
    payload = {
        "culturaId": crop.id,
        "nome": "Percevejo",
        "tipo": "inseto",
        "dataDeteccao": "2026-02-10",
        "dataResolucao": "2026-02-01",
    }

    created = client.post("/api/pests", headers=headers, json=payload)
    pest = factory.pest(crop)
    updated = client.put(f"/api/pests/{pest.id}", headers=headers, json={"dataResolucao": "2026-01-15"})

    assert created.status_code == 400
    assert updated.status_code == 400


def test_invalid_kind_and_severity(client, factory, crop):
    headers = factory.headers(factory.admin())
    base = {"culturaId": crop.id, "nome": "X", "dataDeteccao": "2026-02-10"}

    assert client.post("/api/pests", headers=headers, json={**base, "tipo": "alienigena"}).status_code == 400
    assert (
        client.post("/api/pests", headers=headers, json={**base, "tipo": "inseto", "gravidade": "extrema"}).status_code
        == 400
    )


def test_active_filter(client, factory, crop):
    open_pest = factory.pest(crop, name="Aberta")
    closed_pest = factory.pest(crop, name="Resolvida", resolved_on=date(2026, 2, 20))
    headers = factory.headers(factory.admin())

    active = client.get("/api/pests?ativas=true", headers=headers)
    resolved = client.get("/api/pests?ativas=false", headers=headers)
    everything = client.get("/api/pests", headers=headers)

    assert [item["id"] for item in active.json()["data"]] == [open_pest.id]
    assert [item["id"] for item in resolved.json()["data"]] == [closed_pest.id]
    assert resolved.json()["data"][0]["ativa"] is False
    assert everything.json()["pagination"]["total"] == 2


def test_severity_and_kind_filters(client, factory, crop):
    factory.pest(crop, name="Lagarta", kind="inseto", severity="alta")
    factory.pest(crop, name="Mancha", kind="fungo", severity="baixa")
    headers = factory.headers(factory.admin())

    by_severity = client.get("/api/pests?gravidade=baixa", headers=headers)
    by_kind = client.get("/api/pests?tipo=inseto", headers=headers)

    assert [item["nome"] for item in by_severity.json()["data"]] == ["Mancha"]
    assert [item["nome"] for item in by_kind.json()["data"]] == ["Lagarta"]


def test_scoped_listing(client, factory, crop):
    other_crop = factory.crop(factory.area(factory.client_record(name="Outra")))
    factory.pest(crop)
    factory.pest(other_crop)
    viewer = factory.account(client_ids=[crop.client_id])
    headers = factory.headers(viewer)

    listing = client.get("/api/pests", headers=headers)
    foreign = client.get(f"/api/pests?clienteId={other_crop.client_id}", headers=headers)

    assert {item["clienteId"] for item in listing.json()["data"]} == {crop.client_id}
    assert foreign.status_code == 403


def test_moving_pest_detaches_linked_losses(client, factory, crop, db_session):
    other_crop = factory.crop(factory.area(factory.client_record(name="Outra")))
    pest = factory.pest(crop)
    loss = factory.loss(crop, kind="praga", pest_id=pest.id)

    response = client.put(f"/api/pests/{pest.id}", headers=factory.headers(factory.admin()), json={"culturaId": other_crop.id})

    assert response.status_code == 200
    assert response.json()["clienteId"] == other_crop.client_id
    db_session.expire_all()
    assert db_session.get(models.Loss, loss.id).pest_id is None


def test_resolve_and_delete_pest(client, factory, crop):
    pest = factory.pest(crop)
    headers = factory.headers(factory.admin())

    resolved = client.put(
        f"/api/pests/{pest.id}",
        headers=headers,
        json={"dataResolucao": "2026-02-15", "tratamentoAplicado": "Inseticida biologico"},
    )

    assert resolved.status_code == 200
    assert resolved.json()["ativa"] is False
    assert client.delete(f"/api/pests/{pest.id}", headers=headers).status_code == 204
    assert client.get(f"/api/pests/{pest.id}", headers=headers).status_code == 404
