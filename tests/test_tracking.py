class TestTracking:
    def test_public_tracking(self, client, establishment, create_order):
        order = create_order(establishment)

        response = client.get(f"/api/tracking/{order['delivery_code']}")
        assert response.status_code == 200
        tracking = response.json()["data"]
        assert tracking["status"] == "PENDING"
        assert tracking["delivery_address"] == order["delivery_address"]
        assert [e["status"] for e in tracking["events"]] == ["PENDING"]
        # customer contact data is not exposed
        assert "customer_phone" not in tracking

    def test_code_lookup_ignores_case(self, client, establishment, create_order):
        order = create_order(establishment)

        response = client.get(f"/api/tracking/{order['delivery_code'].lower()}")
        assert response.status_code == 200
        assert response.json()["data"]["id"] == order["id"]

    def test_unknown_code(self, client):
        response = client.get("/api/tracking/FFFFFFFF")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"
