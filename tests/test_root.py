def test_root_message(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Bem-vindo à API do Planeta Água! 🌎"}


def test_health_payload(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["uptime"] >= 0
    assert "timestamp" in body
    assert response.headers["X-Request-ID"]


def test_products_listed_by_name(client, products):
    response = client.get("/products")

    assert response.status_code == 200
    assert [p["name"] for p in response.json()["products"]] == ["Filtro", "Garrafa"]


def test_product_by_id(client, products):
    response = client.get("/products/2")
    assert response.status_code == 200
    assert response.json()["product"]["name"] == "Filtro"


def test_unknown_product_is_not_found(client, products):
    response = client.get("/products/99")
    assert response.status_code == 404
    assert response.json() == {"error": "Produto não encontrado."}


def test_product_listing_store_failure_is_internal_error(app, store):
    from fastapi.testclient import TestClient

    store.fail("products", "find", message="timeout")
    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/products")

    assert response.status_code == 500
    assert response.json() == {"error": "Erro interno do servidor."}
