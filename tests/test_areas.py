from agrovision.core.permissions import Role
from agrovision.db import models


def _payload(client_id, **overrides):
    payload = {
        "clienteId": client_id,
        "nome": "Talhao Norte",
        "tamanho": 42.0,
        "localizacao": {"latitude": -21.3, "longitude": -47.8},
    }
    payload.update(overrides)
    return payload


def test_scoped_listing_rejects_foreign_client(client, factory):
    x = factory.client_record(name="X")
    y = factory.client_record(name="Y")
    factory.area(x)
    factory.area(y)
    viewer = factory.account(client_ids=[x.id])

    foreign = client.get(f"/api/areas?clienteId={y.id}", headers=factory.headers(viewer))
    own = client.get(f"/api/areas?clienteId={x.id}", headers=factory.headers(viewer))

    assert foreign.status_code == 403
    assert foreign.json()["error"] == "forbidden"
    assert own.status_code == 200
    assert [item["clienteId"] for item in own.json()["data"]] == [x.id]


def test_listing_without_filter_only_shows_linked_clients(client, factory):
    x = factory.client_record(name="X")
    y = factory.client_record(name="Y")
    factory.area(x)
    factory.area(y)
    viewer = factory.account(client_ids=[x.id])

    response = client.get("/api/areas", headers=factory.headers(viewer))

    assert {item["clienteId"] for item in response.json()["data"]} == {x.id}


def test_pagination_shape(client, factory):
    farm = factory.client_record()
    for index in range(12):
        factory.area(farm, name=f"Talhao {index:02d}")
    headers = factory.headers(factory.admin())

    first = client.get("/api/areas?limit=5&sort=nome&order=asc", headers=headers)
    last = client.get("/api/areas?limit=5&page=3&sort=nome&order=asc", headers=headers)

    assert first.status_code == 200
    assert first.json()["pagination"] == {"page": 1, "limit": 5, "total": 12, "pages": 3}
    assert [item["nome"] for item in first.json()["data"]] == [f"Talhao {i:02d}" for i in range(5)]
    assert [item["nome"] for item in last.json()["data"]] == ["Talhao 10", "Talhao 11"]


def test_pagination_bounds_and_sort_key(client, factory):
    headers = factory.headers(factory.admin())

    assert client.get("/api/areas?limit=101", headers=headers).status_code == 400
    assert client.get("/api/areas?limit=0", headers=headers).status_code == 400
    assert client.get("/api/areas?page=0", headers=headers).status_code == 400
    assert client.get("/api/areas?order=sideways", headers=headers).status_code == 400
    bad_sort = client.get("/api/areas?sort=password_hash", headers=headers)
    assert bad_sort.status_code == 400
    assert bad_sort.json()["error"] == "validation_error"


def test_create_area(client, factory):
    farm = factory.client_record()
    prop = factory.property_record(farm)
    operator = factory.account(role=Role.OPERATOR, client_ids=[farm.id])

    response = client.post(
        "/api/areas",
        headers=factory.headers(operator),
        json=_payload(farm.id, propriedadeId=prop.id, irrigada=True, unidadeMedida="alqueires"),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["propriedadeId"] == prop.id
    assert body["irrigada"] is True
    assert body["unidadeMedida"] == "alqueires"
    assert body["status"] == "ativa"


def test_area_property_must_belong_to_same_client(client, factory):
    farm = factory.client_record()
    other = factory.client_record(name="Outra")
    foreign_property = factory.property_record(other)
    headers = factory.headers(factory.admin())

    response = client.post("/api/areas", headers=headers, json=_payload(farm.id, propriedadeId=foreign_property.id))

    assert response.status_code == 400


def test_invalid_area_payloads(client, factory):
    farm = factory.client_record()
    headers = factory.headers(factory.admin())

    assert client.post("/api/areas", headers=headers, json=_payload(farm.id, tamanho=0)).status_code == 400
    assert (
        client.post(
            "/api/areas",
            headers=headers,
            json=_payload(farm.id, localizacao={"latitude": -91, "longitude": 0}),
        ).status_code
        == 400
    )
    assert client.post("/api/areas", headers=headers, json=_payload(farm.id, unidadeMedida="acres")).status_code == 400


def test_operator_cannot_create_area_for_foreign_client(client, factory):
    farm = factory.client_record()
    other = factory.client_record(name="Outra")
    operator = factory.account(role=Role.OPERATOR, client_ids=[farm.id])

    response = client.post("/api/areas", headers=factory.headers(operator), json=_payload(other.id))

    assert response.status_code == 403


def test_moving_area_updates_children(client, factory, db_session):
    farm = factory.client_record()
    other = factory.client_record(name="Outra")
    area = factory.area(farm)
    crop = factory.crop(area)
    pest = factory.pest(crop)
    loss = factory.loss(crop, pest_id=pest.id)

    response = client.put(
        f"/api/areas/{area.id}",
        headers=factory.headers(factory.admin()),
        json={"clienteId": other.id},
    )

    assert response.status_code == 200
    assert response.json()["clienteId"] == other.id
    db_session.expire_all()
    assert db_session.get(models.Crop, crop.id).client_id == other.id
    assert db_session.get(models.Pest, pest.id).client_id == other.id
    assert db_session.get(models.Loss, loss.id).client_id == other.id


def test_viewer_cannot_edit_or_delete(client, factory):
    farm = factory.client_record()
    area = factory.area(farm)
    viewer = factory.account(client_ids=[farm.id])
    headers = factory.headers(viewer)

    assert client.put(f"/api/areas/{area.id}", headers=headers, json={"nome": "Novo"}).status_code == 403
    assert client.delete(f"/api/areas/{area.id}", headers=headers).status_code == 403


def test_delete_area(client, factory):
    farm = factory.client_record()
    area = factory.area(farm)
    headers = factory.headers(factory.admin())

    assert client.delete(f"/api/areas/{area.id}", headers=headers).status_code == 204
    assert client.get(f"/api/areas/{area.id}", headers=headers).status_code == 404
    assert client.get("/api/areas", headers=headers).json()["pagination"]["total"] == 0
