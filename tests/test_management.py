from conftest import ESTABLISHMENT_PROFILE, MOTOBOY_PROFILE, PASSWORD


class TestEstablishments:
    def test_admin_creates_establishment_account(self, client, admin_headers, login):
        response = client.post(
            "/api/establishments",
            json={"email": "nova@motorotas.com", "password": PASSWORD, "profile": ESTABLISHMENT_PROFILE},
            headers=admin_headers,
        )
        assert response.status_code == 201
        assert response.json()["data"]["name"] == ESTABLISHMENT_PROFILE["name"]

        headers = login("nova@motorotas.com", PASSWORD)
        me = client.get("/api/auth/me", headers=headers).json()["data"]
        assert me["role"] == "ESTABLISHMENT"

    def test_duplicate_account_email(self, client, admin_headers, establishment):
        response = client.post(
            "/api/establishments",
            json={"email": "loja@motorotas.com", "password": PASSWORD, "profile": ESTABLISHMENT_PROFILE},
            headers=admin_headers,
        )
        assert response.status_code == 409

    def test_establishment_cannot_create_accounts(self, client, establishment):
        response = client.post(
            "/api/establishments",
            json={"email": "nova@motorotas.com", "password": PASSWORD, "profile": ESTABLISHMENT_PROFILE},
            headers=establishment["headers"],
        )
        assert response.status_code == 403

    def test_list_is_scoped_and_carries_metrics(
        self, client, admin_headers, establishment, make_establishment, create_order
    ):
        make_establishment("outra@motorotas.com", name="Outra Loja")
        create_order(establishment)
        create_order(establishment)

        own = client.get("/api/establishments", headers=establishment["headers"]).json()["data"]
        assert len(own) == 1
        assert own[0]["email"] == "loja@motorotas.com"
        assert own[0]["order_count"] == 2
        assert own[0]["metrics"]["totals"]["PENDING"] == 2
        assert own[0]["metrics"]["totals"]["DELIVERED"] == 0

        everything = client.get("/api/establishments", headers=admin_headers).json()["data"]
        assert len(everything) == 2

    def test_owner_updates_profile(self, client, establishment):
        profile_id = establishment["profile"]["id"]

        response = client.patch(
            f"/api/establishments/{profile_id}", json={"name": "Pizzaria Nova"}, headers=establishment["headers"]
        )
        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Pizzaria Nova"

        response = client.patch(f"/api/establishments/{profile_id}", json={"plan": "PRO"}, headers=establishment["headers"])
        assert response.status_code == 403

    def test_admin_changes_plan(self, client, admin_headers, establishment):
        response = client.patch(
            f"/api/establishments/{establishment['profile']['id']}", json={"plan": "ENTERPRISE"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["plan"] == "ENTERPRISE"

    def test_required_fields_cannot_be_nulled(self, client, admin_headers, establishment):
        profile_id = establishment["profile"]["id"]

        for field in ("name", "city", "base_delivery_fee", "plan"):
            response = client.patch(f"/api/establishments/{profile_id}", json={field: None}, headers=admin_headers)
            assert response.status_code == 400, field
            assert response.json()["error"]["code"] == "VALIDATION_ERROR"

        response = client.patch(f"/api/establishments/{profile_id}", json={"address_line2": None}, headers=admin_headers)
        assert response.status_code == 200

    def test_other_establishment_is_hidden(self, client, establishment, make_establishment):
        other = make_establishment("outra@motorotas.com", name="Outra Loja")

        response = client.get(f"/api/establishments/{establishment['profile']['id']}", headers=other["headers"])
        assert response.status_code == 403

    def test_unknown_establishment(self, client, admin_headers):
        response = client.get("/api/establishments/missing", headers=admin_headers)
        assert response.status_code == 404


class TestMotoboys:
    def test_admin_creates_motoboy_account(self, client, admin_headers):
        response = client.post(
            "/api/motoboys",
            json={"email": "novo@motorotas.com", "password": PASSWORD, "profile": MOTOBOY_PROFILE},
            headers=admin_headers,
        )
        assert response.status_code == 201
        body = response.json()["data"]
        assert body["full_name"] == MOTOBOY_PROFILE["full_name"]
        assert body["is_available"] is False

    def test_list_with_metrics(self, client, establishment, motoboy, create_order, assign):
        order = create_order(establishment)
        assign(order["id"], motoboy, establishment["headers"])

        response = client.get("/api/motoboys", headers=establishment["headers"])
        assert response.status_code == 200
        item = response.json()["data"][0]
        assert item["assignment_count"] == 1
        assert item["email"] == "moto@motorotas.com"
        assert item["metrics"] is None

        response = client.get("/api/motoboys", params={"metrics": "true"}, headers=establishment["headers"])
        metrics = response.json()["data"][0]["metrics"]
        assert metrics["assignments"]["ASSIGNED"] == 1
        assert metrics["assignments"]["total"] == 1
        assert metrics["average_rating"] is None

    def test_motoboys_cannot_list(self, client, motoboy):
        response = client.get("/api/motoboys", headers=motoboy["headers"])
        assert response.status_code == 403

    def test_motoboy_sees_only_itself(self, client, motoboy, make_motoboy):
        other = make_motoboy("moto2@motorotas.com", full_name="Joao Segundo")

        response = client.get(f"/api/motoboys/{motoboy['profile']['id']}", headers=motoboy["headers"])
        assert response.status_code == 200

        response = client.get(f"/api/motoboys/{other['profile']['id']}", headers=motoboy["headers"])
        assert response.status_code == 403

    def test_profile_updates(self, client, admin_headers, motoboy, make_motoboy):
        other = make_motoboy("moto2@motorotas.com", full_name="Joao Segundo")

        response = client.patch(
            f"/api/motoboys/{motoboy['profile']['id']}", json={"vehicle_type": "bike"}, headers=motoboy["headers"]
        )
        assert response.status_code == 200
        assert response.json()["data"]["vehicle_type"] == "bike"

        response = client.patch(
            f"/api/motoboys/{other['profile']['id']}", json={"vehicle_type": "bike"}, headers=motoboy["headers"]
        )
        assert response.status_code == 403

        response = client.patch(
            f"/api/motoboys/{other['profile']['id']}", json={"phone": "11911112222"}, headers=admin_headers
        )
        assert response.status_code == 200

    def test_required_fields_cannot_be_nulled(self, client, admin_headers, motoboy):
        profile_id = motoboy["profile"]["id"]

        for field in ("full_name", "cpf", "vehicle_type"):
            response = client.patch(f"/api/motoboys/{profile_id}", json={field: None}, headers=motoboy["headers"])
            assert response.status_code == 400, field
            assert response.json()["error"]["code"] == "VALIDATION_ERROR"

        profile = client.get(f"/api/motoboys/{profile_id}", headers=admin_headers).json()["data"]
        assert profile["full_name"] == MOTOBOY_PROFILE["full_name"]

        response = client.patch(f"/api/motoboys/{profile_id}", json={"phone": None}, headers=motoboy["headers"])
        assert response.status_code == 200
        assert response.json()["data"]["phone"] is None


class TestReports:
    def test_summary(self, client, admin_headers, establishment, motoboy, create_order, assign):
        order = create_order(establishment)
        create_order(establishment)
        assign(order["id"], motoboy, establishment["headers"])

        response = client.get("/api/reports/summary", headers=admin_headers)
        assert response.status_code == 200
        report = response.json()["data"]
        # admin + establishment + motoboy
        assert report["totals"] == {"users": 3, "motoboys": 1, "establishments": 1}
        assert report["orders"]["PENDING"] == 1
        assert report["orders"]["ASSIGNED"] == 1
        assert report["orders"]["CANCELLED"] == 0
        assert report["ratings"] == {"average": None, "count": 0}

    def test_summary_is_admin_only(self, client, establishment):
        response = client.get("/api/reports/summary", headers=establishment["headers"])
        assert response.status_code == 403


class TestHealth:
    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["data"]["database"] == "ok"
        assert response.headers["X-Request-ID"]
        assert response.headers["X-Content-Type-Options"] == "nosniff"

    def test_unknown_route_uses_error_envelope(self, client):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"
