import pytest
from conftest import SQUARE

from agrovision.core.errors import ValidationError
from agrovision.core.permissions import Role
from agrovision.properties.geometry import centroid_of, parse_boundary, validate_point
from agrovision.properties.service import check_contract


def _payload(client_id, **overrides):
    payload = {
        "clienteId": client_id,
        "nome": "Fazenda Santa Rita",
        "uf": "sp",
        "municipio": "Ribeirao Preto",
        "geom": SQUARE,
        "areaTotalHa": 350.5,
    }
    payload.update(overrides)
    return payload


def test_centroid_of_square():
    assert centroid_of(SQUARE) == {"type": "Point", "coordinates": [-46.5, -21.5]}


def test_parse_boundary_rejects_points_and_self_intersections():
    with pytest.raises(ValueError):
        parse_boundary({"type": "Point", "coordinates": [0, 0]})
    bowtie = {"type": "Polygon", "coordinates": [[[0, 0], [1, 1], [1, 0], [0, 1], [0, 0]]]}
    with pytest.raises(ValueError):
        parse_boundary(bowtie)


def test_validate_point_bounds():
    assert validate_point({"type": "Point", "coordinates": [-47, -22]}) == {
        "type": "Point",
        "coordinates": [-47.0, -22.0],
    }
    with pytest.raises(ValueError):
        validate_point({"type": "Point", "coordinates": [200, 0]})


def test_check_contract_rules():
    check_contract({"tenure_regime": "propria"})
    with pytest.raises(ValidationError):
        check_contract({"tenure_regime": "arrendada"})


def test_create_property_computes_centroid(client, factory):
    farm = factory.client_record()
    admin = factory.admin()

    response = client.post("/api/properties", headers=factory.headers(admin), json=_payload(farm.id))

    assert response.status_code == 201
    body = response.json()
    assert body["uf"] == "SP"
    assert body["pais"] == "BR"
    assert body["srid"] == 4326
    assert body["regimePosse"] == "propria"
    assert body["centroide"] == {"type": "Point", "coordinates": [-46.5, -21.5]}
    assert body["criadoPor"] == admin.id


def test_leased_property_requires_contract(client, factory):
    farm = factory.client_record()
    headers = factory.headers(factory.admin())

    missing = client.post("/api/properties", headers=headers, json=_payload(farm.id, regimePosse="arrendada"))
    reversed_window = client.post(
        "/api/properties",
        headers=headers,
        json=_payload(
            farm.id,
            regimePosse="arrendada",
            contratoInicio="2026-06-01",
            contratoFim="2026-01-01",
            contratoIdentificador="CT-1",
        ),
    )
    ok = client.post(
        "/api/properties",
        headers=headers,
        json=_payload(
            farm.id,
            regimePosse="arrendada",
            contratoInicio="2026-01-01",
            contratoFim="2027-01-01",
            contratoIdentificador="CT-1",
        ),
    )

    assert missing.status_code == 400
    assert set(missing.json()["campos"]) == {"contratoInicio", "contratoFim", "contratoIdentificador"}
    assert reversed_window.status_code == 400
    assert ok.status_code == 201


def test_invalid_geometry_and_state_are_rejected(client, factory):
    farm = factory.client_record()
    headers = factory.headers(factory.admin())

    line = {"type": "LineString", "coordinates": [[0, 0], [1, 1]]}
    assert client.post("/api/properties", headers=headers, json=_payload(farm.id, geom=line)).status_code == 400
    assert client.post("/api/properties", headers=headers, json=_payload(farm.id, uf="ZZ")).status_code == 400
    assert client.post("/api/properties", headers=headers, json=_payload(farm.id, areaTotalHa=0)).status_code == 400


def test_car_must_be_unique(client, factory):
    farm = factory.client_record()
    headers = factory.headers(factory.admin())

    first = client.post("/api/properties", headers=headers, json=_payload(farm.id, car="SP-123"))
    second = client.post("/api/properties", headers=headers, json=_payload(farm.id, nome="Outra", car="SP-123"))

    assert first.status_code == 201
    assert second.status_code == 400
    assert second.json()["error"] == "conflict"


def test_property_for_foreign_or_unknown_client(client, factory):
    mine = factory.client_record()
    theirs = factory.client_record(name="Alheia")
    manager = factory.account(role=Role.MANAGER, client_ids=[mine.id])
    headers = factory.headers(manager)

    assert client.post("/api/properties", headers=headers, json=_payload(theirs.id)).status_code == 403
    assert client.post("/api/properties", headers=headers, json=_payload(mine.id)).status_code == 201

    admin_headers = factory.headers(factory.admin())
    assert client.post("/api/properties", headers=admin_headers, json=_payload("nao-existe")).status_code == 400


def test_update_geometry_recomputes_centroid(client, factory):
    farm = factory.client_record()
    prop = factory.property_record(farm)
    admin = factory.admin()
    shifted = {
        "type": "Polygon",
        "coordinates": [[[-48.0, -22.0], [-47.0, -22.0], [-47.0, -21.0], [-48.0, -21.0], [-48.0, -22.0]]],
    }

    response = client.put(f"/api/properties/{prop.id}", headers=factory.headers(admin), json={"geom": shifted})

    assert response.status_code == 200
    assert response.json()["centroide"]["coordinates"] == [-47.5, -21.5]
    assert response.json()["atualizadoPor"] == admin.id


def test_listing_filters_and_scope(client, factory):
    mine = factory.client_record()
    theirs = factory.client_record(name="Alheia")
    factory.property_record(mine, state="MG", name="Mineira")
    factory.property_record(mine, name="Paulista")
    factory.property_record(theirs, name="Alheia")
    viewer = factory.account(client_ids=[mine.id])
    headers = factory.headers(viewer)

    everything = client.get("/api/properties", headers=headers)
    by_state = client.get("/api/properties?uf=mg", headers=headers)
    foreign = client.get(f"/api/properties?clienteId={theirs.id}", headers=headers)

    assert everything.json()["pagination"]["total"] == 2
    assert [item["nome"] for item in by_state.json()["data"]] == ["Mineira"]
    assert foreign.status_code == 403


def test_soft_delete_property(client, factory):
    farm = factory.client_record()
    prop = factory.property_record(farm)
    headers = factory.headers(factory.admin())

    assert client.delete(f"/api/properties/{prop.id}", headers=headers).status_code == 204
    assert client.get(f"/api/properties/{prop.id}", headers=headers).status_code == 404


def test_validate_point_rejects_malformed_coordinates():
    for coordinates in (5, "x", [{}, 1], [None, 2], [1]):
        with pytest.raises(ValueError):
            validate_point({"type": "Point", "coordinates": coordinates})
    with pytest.raises(ValueError):
        parse_boundary({"type": "Polygon", "coordinates": 5})
    with pytest.raises(ValueError):
        parse_boundary({"type": "Polygon"})


def test_malformed_centroid_is_a_validation_error(client, factory):
    farm = factory.client_record()
    headers = factory.headers(factory.admin())

    scalar = client.post(
        "/api/properties",
        headers=headers,
        json=_payload(farm.id, centroide={"type": "Point", "coordinates": 5}),
    )
    objects = client.post(
        "/api/properties",
        headers=headers,
        json=_payload(farm.id, centroide={"type": "Point", "coordinates": [{}, 1]}),
    )

    assert scalar.status_code == 400
    assert scalar.json()["error"] == "validation_error"
    assert objects.status_code == 400


def test_property_with_areas_cannot_change_client(client, factory):
    farm = factory.client_record()
    other = factory.client_record(name="Compradora")
    prop = factory.property_record(farm)
    area = factory.area(farm, property_id=prop.id)
    headers = factory.headers(factory.admin())

    blocked = client.put(f"/api/properties/{prop.id}", headers=headers, json={"clienteId": other.id})

    assert blocked.status_code == 400
    assert blocked.json()["areas"] == [area.id]
    assert client.get(f"/api/properties/{prop.id}", headers=headers).json()["clienteId"] == farm.id

    assert client.delete(f"/api/areas/{area.id}", headers=headers).status_code == 204
    moved = client.put(f"/api/properties/{prop.id}", headers=headers, json={"clienteId": other.id})
    assert moved.status_code == 200
    assert moved.json()["clienteId"] == other.id
