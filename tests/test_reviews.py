import pytest


@pytest.fixture()
def delivered_order(establishment, motoboy, create_order, assign, respond):
    order = create_order(establishment)
    assign(order["id"], motoboy, establishment["headers"])
    respond(order["id"], motoboy, "ACCEPTED")
    respond(order["id"], motoboy, "COMPLETED")
    return order


def post_review(client, order, account, target_id, rating=5, comment=None):
    payload = {"target_id": target_id, "rating": rating}
    if comment is not None:
        payload["comment"] = comment
    return client.post(f"/api/orders/{order['id']}/reviews", json=payload, headers=account["headers"])


class TestCreateReview:
    def test_establishment_reviews_motoboy(self, client, delivered_order, establishment, motoboy):
        response = post_review(client, delivered_order, establishment, motoboy["user"]["id"], 4, "Rapido")
        assert response.status_code == 201
        review = response.json()["data"]
        assert review["rating"] == 4
        assert review["author_id"] == establishment["user"]["id"]
        assert review["target_id"] == motoboy["user"]["id"]

    def test_one_review_per_order(self, client, delivered_order, establishment, motoboy):
        post_review(client, delivered_order, establishment, motoboy["user"]["id"])

        response = post_review(client, delivered_order, establishment, motoboy["user"]["id"], 1)
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "REVIEW_EXISTS"

    def test_no_self_review(self, client, delivered_order, motoboy):
        response = post_review(client, delivered_order, motoboy, motoboy["user"]["id"])
        assert response.status_code == 403

    def test_target_must_take_part_in_the_order(self, client, delivered_order, establishment, make_motoboy):
        outsider = make_motoboy("outsider@motorotas.com", full_name="Fora Do Pedido")

        response = post_review(client, delivered_order, establishment, outsider["user"]["id"])
        assert response.status_code == 403

    def test_unknown_target(self, client, delivered_order, establishment):
        response = post_review(client, delivered_order, establishment, "missing-user")
        assert response.status_code == 404

    def test_author_must_take_part_in_the_order(self, client, delivered_order, make_establishment, motoboy):
        other = make_establishment("outra@motorotas.com", name="Outra Loja")

        response = post_review(client, delivered_order, other, motoboy["user"]["id"])
        assert response.status_code == 403

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_range(self, client, delivered_order, establishment, motoboy, rating):
        response = post_review(client, delivered_order, establishment, motoboy["user"]["id"], rating)
        assert response.status_code == 400


class TestListReviews:
    def test_reviews_with_authors(self, client, delivered_order, establishment, motoboy, order_detail):
        post_review(client, delivered_order, establishment, motoboy["user"]["id"], 5)
        post_review(client, delivered_order, motoboy, establishment["user"]["id"], 3)

        response = client.get(f"/api/orders/{delivered_order['id']}/reviews", headers=motoboy["headers"])
        assert response.status_code == 200
        reviews = response.json()["data"]
        assert len(reviews) == 2
        assert {r["author"]["role"] for r in reviews} == {"ESTABLISHMENT", "MOTOBOY"}

        assert len(order_detail(delivered_order["id"])["reviews"]) == 2

    def test_ratings_feed_the_metrics(self, client, delivered_order, establishment, motoboy, admin_headers):
        post_review(client, delivered_order, establishment, motoboy["user"]["id"], 4)

        response = client.get(f"/api/motoboys/{motoboy['profile']['id']}", headers=admin_headers)
        metrics = response.json()["data"]["metrics"]
        assert metrics["average_rating"] == 4.0
        assert metrics["rating_count"] == 1
        assert metrics["assignments"]["COMPLETED"] == 1
