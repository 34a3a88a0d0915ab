from agrovision.core.permissions import AccessScope, Role


def test_create_client_then_duplicate_email_conflicts(client, factory):
    admin = factory.admin()
    headers = factory.headers(admin)
    payload = {"nome": "Fazenda A", "email": "a@x.com", "cpfCnpj": "123.456.789-00"}

    created = client.post("/api/clients", headers=headers, json=payload)
    duplicate = client.post(
        "/api/clients",
        headers=headers,
        json={"nome": "Fazenda B", "email": "A@X.com"},
    )

    assert created.status_code == 201
    body = created.json()
    assert body["nome"] == "Fazenda A"
    assert body["status"] == "ativo"
    assert body["cpfCnpj"] == "123.456.789-00"
    assert duplicate.status_code == 400
    assert duplicate.json()["error"] == "conflict"


def test_duplicate_tax_id_conflicts(client, factory):
    headers = factory.headers(factory.admin())
    client.post("/api/clients", headers=headers, json={"nome": "A", "email": "a@x.com", "cpfCnpj": "12.345.678/0001-90"})

    response = client.post(
        "/api/clients",
        headers=headers,
        json={"nome": "B", "email": "b@x.com", "cpfCnpj": "12.345.678/0001-90"},
    )

    assert response.status_code == 400
    assert response.json()["campo"] == "cpfCnpj"


def test_invalid_tax_id_and_email_are_rejected(client, factory):
    headers = factory.headers(factory.admin())

    bad_tax_id = client.post("/api/clients", headers=headers, json={"nome": "A", "email": "a@x.com", "cpfCnpj": "12345"})
    bad_email = client.post("/api/clients", headers=headers, json={"nome": "A", "email": "nao-e-email"})
    bad_state = client.post(
        "/api/clients",
        headers=headers,
        json={"nome": "A", "email": "a@x.com", "endereco": {"estado": "XX"}},
    )

    assert bad_tax_id.status_code == 400
    assert bad_tax_id.json()["error"] == "validation_error"
    assert bad_email.status_code == 400
    assert bad_state.status_code == 400


def test_scoped_manager_cannot_create_clients(client, factory):
    farm = factory.client_record()
    manager = factory.account(role=Role.MANAGER, client_ids=[farm.id])

    response = client.post(
        "/api/clients",
        headers=factory.headers(manager),
        json={"nome": "Nova", "email": "nova@x.com"},
    )

    assert response.status_code == 403


def test_viewer_without_create_flag_is_forbidden(client, factory):
    viewer = factory.account(scope=AccessScope.GLOBAL)

    response = client.post(
        "/api/clients",
        headers=factory.headers(viewer),
        json={"nome": "Nova", "email": "nova@x.com"},
    )

    assert response.status_code == 403
    assert response.json()["recurso"] == "clientes"


def test_listing_is_scoped_to_linked_clients(client, factory):
    mine = factory.client_record(name="Minha")
    theirs = factory.client_record(name="Alheia")
    viewer = factory.account(client_ids=[mine.id])
    headers = factory.headers(viewer)

    listing = client.get("/api/clients", headers=headers)

    assert listing.status_code == 200
    assert [item["id"] for item in listing.json()["data"]] == [mine.id]
    assert listing.json()["pagination"]["total"] == 1
    assert client.get(f"/api/clients/{mine.id}", headers=headers).status_code == 200
    assert client.get(f"/api/clients/{theirs.id}", headers=headers).status_code == 403


def test_account_without_clients_is_forbidden(client, factory):
    factory.client_record()
    viewer = factory.account(client_ids=[])

    response = client.get("/api/clients", headers=factory.headers(viewer))

    assert response.status_code == 403


def test_update_client(client, factory):
    farm = factory.client_record(email="antes@x.com")
    factory.client_record(email="ocupado@x.com")
    headers = factory.headers(factory.admin())

    updated = client.put(
        f"/api/clients/{farm.id}",
        headers=headers,
        json={"telefone": "(19) 99999-0000", "endereco": {"cidade": "Campinas", "estado": "sp"}},
    )
    conflict = client.put(f"/api/clients/{farm.id}", headers=headers, json={"email": "ocupado@x.com"})
    same_email = client.put(f"/api/clients/{farm.id}", headers=headers, json={"email": "antes@x.com"})

    assert updated.status_code == 200
    assert updated.json()["telefone"] == "(19) 99999-0000"
    assert updated.json()["endereco"]["estado"] == "SP"
    assert updated.json()["email"] == "antes@x.com"
    assert conflict.status_code == 400
    assert same_email.status_code == 200


def test_soft_delete_hides_client(client, factory):
    farm = factory.client_record()
    headers = factory.headers(factory.admin())

    assert client.delete(f"/api/clients/{farm.id}", headers=headers).status_code == 204
    assert client.get(f"/api/clients/{farm.id}", headers=headers).status_code == 404
    assert client.delete(f"/api/clients/{farm.id}", headers=headers).status_code == 404
    listing = client.get("/api/clients", headers=headers).json()
    assert farm.id not in [item["id"] for item in listing["data"]]


def test_deleted_client_email_can_be_reused(client, factory):
    farm = factory.client_record(email="reuso@x.com")
    headers = factory.headers(factory.admin())
    client.delete(f"/api/clients/{farm.id}", headers=headers)

    response = client.post("/api/clients", headers=headers, json={"nome": "Nova", "email": "reuso@x.com"})

    assert response.status_code == 201


def test_manager_cannot_delete(client, factory):
    farm = factory.client_record()
    manager = factory.account(role=Role.MANAGER, client_ids=[farm.id])

    response = client.delete(f"/api/clients/{farm.id}", headers=factory.headers(manager))

    assert response.status_code == 403


def test_search_and_sort(client, factory):
    factory.client_record(name="Beta Agro")
    factory.client_record(name="Alfa Agro")
    factory.client_record(name="Gama Pecuaria")
    headers = factory.headers(factory.admin())

    response = client.get("/api/clients?search=agro&sort=nome&order=asc", headers=headers)
    invalid_sort = client.get("/api/clients?sort=senha", headers=headers)

    assert response.status_code == 200
    assert [item["nome"] for item in response.json()["data"]] == ["Alfa Agro", "Beta Agro"]
    assert invalid_sort.status_code == 400
