CARD = {"brand": "visa", "last4": "4242", "expiry": "12/30"}


def test_create_card_stores_only_safe_fields(client, auth_headers, store):
    payload = dict(CARD, number="4242424242424242", cvv="123")

    response = client.post("/credit-cards", json=payload, headers=auth_headers)

    assert response.status_code == 201
    stored = store.data["credit_cards"][0]
    assert "number" not in stored
    assert "cvv" not in stored
    assert response.json()["card"]["last4"] == "4242"


def test_create_card_requires_fields(client, auth_headers):
    response = client.post("/credit-cards", json={"brand": "visa"}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Brand, last4 e expiry são obrigatórios."}


def test_list_cards_newest_first_with_public_columns(client, auth_headers):
    client.post("/credit-cards", json=CARD, headers=auth_headers)
    client.post("/credit-cards", json=dict(CARD, last4="1111"), headers=auth_headers)

    response = client.get("/credit-cards", headers=auth_headers)

    assert response.status_code == 200
    cards = response.json()["creditCards"]
    assert [c["last4"] for c in cards] == ["1111", "4242"]
    assert set(cards[0]) == {"id", "brand", "last4", "expiry"}


def test_cards_are_scoped_to_owner(client, auth_headers, other_headers, store):
    card = client.post("/credit-cards", json=CARD, headers=auth_headers).json()["card"]

    assert client.get("/credit-cards", headers=other_headers).json()["creditCards"] == []
    assert client.delete(f"/credit-cards/{card['id']}", headers=other_headers).status_code == 204
    assert len(store.data["credit_cards"]) == 1

    assert client.delete(f"/credit-cards/{card['id']}", headers=auth_headers).status_code == 204
    assert store.data["credit_cards"] == []


def test_cards_have_no_update_route(client, auth_headers):
    response = client.put("/credit-cards/1", json=CARD, headers=auth_headers)
    assert response.status_code == 405
