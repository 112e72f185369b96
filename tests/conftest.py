import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("DEFAULT_ADMIN_EMAIL", "admin@motorotas.com")
os.environ.setdefault("DEFAULT_ADMIN_PASSWORD", "Admin@123")

import pytest
from fastapi.testclient import TestClient

from main import create_app

ADMIN_EMAIL = os.environ["DEFAULT_ADMIN_EMAIL"]
ADMIN_PASSWORD = os.environ["DEFAULT_ADMIN_PASSWORD"]
PASSWORD = "secret-pass-1"

ESTABLISHMENT_PROFILE = {
    "name": "Pizzaria Centro",
    "cnpj": "12.345.678/0001-90",
    "contact_email": "contato@pizzariacentro.com",
    "contact_phone": "11999990000",
    "address_line1": "Rua das Flores, 100",
    "city": "Sao Paulo",
    "state": "SP",
    "postal_code": "01000-000",
    "base_delivery_fee": 5.0,
    "additional_per_km": 2.0,
}

MOTOBOY_PROFILE = {
    "full_name": "Carlos Entregador",
    "cpf": "123.456.789-00",
    "cnh_number": "9876543210",
    "cnh_category": "A",
    "vehicle_type": "moto",
}

ORDER_PAYLOAD = {
    "customer_name": "Maria Cliente",
    "customer_phone": "11988887777",
    "pickup_address": "Rua das Flores, 100",
    "delivery_address": "Avenida Paulista, 1500",
    "notes": "Interfone 12",
}


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def app():
    return create_app("sqlite://")


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def login(client):
    def _login(email, password):
        response = client.post("/api/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        # requests must authenticate explicitly, not through the cookie jar
        client.cookies.clear()
        return auth_headers(response.json()["data"]["token"])

    return _login


@pytest.fixture()
def admin_headers(login):
    return login(ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture()
def register(client):
    def _register(email, role, profile):
        response = client.post(
            "/api/auth/register",
            json={"email": email, "password": PASSWORD, "role": role, "profile": profile},
        )
        assert response.status_code == 201, response.text
        client.cookies.clear()
        body = response.json()["data"]
        return {"headers": auth_headers(body["token"]), "user": body["user"]}

    return _register


@pytest.fixture()
def make_establishment(client, register):
    def _make(email="loja@motorotas.com", **overrides):
        account = register(email, "ESTABLISHMENT", {**ESTABLISHMENT_PROFILE, **overrides})
        response = client.get("/api/establishments", headers=account["headers"])
        assert response.status_code == 200, response.text
        account["profile"] = response.json()["data"][0]
        return account

    return _make


@pytest.fixture()
def make_motoboy(client, register):
    def _make(email="moto@motorotas.com", **overrides):
        account = register(email, "MOTOBOY", {**MOTOBOY_PROFILE, **overrides})
        response = client.get("/api/motoboys/me", headers=account["headers"])
        assert response.status_code == 200, response.text
        account["profile"] = response.json()["data"]
        return account

    return _make


@pytest.fixture()
def establishment(make_establishment):
    return make_establishment()


@pytest.fixture()
def motoboy(make_motoboy):
    return make_motoboy()


@pytest.fixture()
def create_order(client):
    def _create(account, **overrides):
        response = client.post("/api/orders", json={**ORDER_PAYLOAD, **overrides}, headers=account["headers"])
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create


@pytest.fixture()
def assign(client):
    def _assign(order_id, motoboy_account, headers):
        return client.post(
            f"/api/orders/{order_id}/assign",
            json={"motoboy_id": motoboy_account["profile"]["id"]},
            headers=headers,
        )

    return _assign


@pytest.fixture()
def respond(client):
    def _respond(order_id, motoboy_account, status, rejection_reason=None):
        payload = {"status": status}
        if rejection_reason is not None:
            payload["rejection_reason"] = rejection_reason
        return client.patch(f"/api/orders/{order_id}/assign", json=payload, headers=motoboy_account["headers"])

    return _respond


@pytest.fixture()
def order_detail(client, admin_headers):
    def _detail(order_id):
        response = client.get(f"/api/orders/{order_id}", headers=admin_headers)
        assert response.status_code == 200, response.text
        return response.json()["data"]

    return _detail
