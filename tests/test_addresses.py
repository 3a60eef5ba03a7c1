ADDRESS = {
    "street": "Rua B, 20",
    "neighborhood": "Batel",
    "city": "Curitiba",
    "state": "PR",
    "zip_code": "80420-000",
}


def test_create_and_list_addresses(client, auth_headers, test_user):
    created = client.post("/addresses", json=ADDRESS, headers=auth_headers)

    assert created.status_code == 201
    address = created.json()["address"]
    assert str(address["user_id"]) == str(test_user["id"])

    listed = client.get("/addresses", headers=auth_headers)
    assert listed.status_code == 200
    assert [a["id"] for a in listed.json()["addresses"]] == [address["id"]]


def test_create_address_requires_all_fields(client, auth_headers, store):
    payload = dict(ADDRESS, city="")
    response = client.post("/addresses", json=payload, headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"error": "Todos os campos do endereço são obrigatórios."}
    assert not store.data.get("addresses")


def test_addresses_require_authentication(client):
    assert client.get("/addresses").status_code == 401
    assert client.post("/addresses", json=ADDRESS).status_code == 401


def test_update_address_accepts_legacy_zip_spelling(client, auth_headers, address):
    payload = {k: v for k, v in ADDRESS.items() if k != "zip_code"}
    payload["zipCode"] = "80420-999"

    response = client.put(f"/addresses/{address['id']}", json=payload, headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["address"] == {
        "id": address["id"],
        "street": "Rua B, 20",
        "neighborhood": "Batel",
        "city": "Curitiba",
        "state": "PR",
        "zipCode": "80420-999",
    }


def test_update_address_accepts_snake_case_zip(client, auth_headers, address):
    response = client.put(f"/addresses/{address['id']}", json=ADDRESS, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["address"]["zipCode"] == "80420-000"


def test_other_user_cannot_see_or_change_address(client, other_headers, address, store):
    listed = client.get("/addresses", headers=other_headers)
    assert listed.json()["addresses"] == []

    updated = client.put(f"/addresses/{address['id']}", json=ADDRESS, headers=other_headers)
    assert updated.status_code == 404
    assert updated.json() == {"error": "Endereço não encontrado."}

    deleted = client.delete(f"/addresses/{address['id']}", headers=other_headers)
    assert deleted.status_code == 204

    assert store.data["addresses"] == [address]
    assert address["street"] == "Rua A, 10"


def test_delete_own_address(client, auth_headers, address, store):
    response = client.delete(f"/addresses/{address['id']}", headers=auth_headers)

    assert response.status_code == 204
    assert response.content == b""
    assert store.data["addresses"] == []


def test_list_addresses_store_failure(client, auth_headers, store):
    store.fail("addresses", "find", message="boom")
    response = client.get("/addresses", headers=auth_headers)
    assert response.status_code == 500
    assert response.json() == {"error": "boom"}
