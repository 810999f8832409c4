"""Tests for product reviews and the rating aggregate."""
from datetime import datetime, timedelta, timezone

from wigcatalog.models import Comment


def test_create_comment_defaults_author(client, make_product):
    product = make_product()
    resp = client.post("/v1/comments", json={"product_id": product.id, "rating": 5})
    data = resp.get_json()

    assert resp.status_code == 200
    assert data["comment"]["author"] == "Anonymous"
    assert data["comment"]["text"] is None
    assert data["comment"]["created_at"]


def test_create_comment_validation(client, make_product):
    product = make_product()
    assert client.post("/v1/comments", json={"product_id": product.id}).status_code == 400
    assert client.post("/v1/comments", json={"rating": 4}).status_code == 400
    assert client.post(
        "/v1/comments", json={"product_id": product.id, "rating": 6}
    ).status_code == 400
    assert client.post(
        "/v1/comments", json={"product_id": "nope", "rating": 3}
    ).status_code == 404


def test_comments_listed_newest_first(client, db, make_product):
    product = make_product()
    now = datetime.now(timezone.utc)
    for days_ago, author in ((3, "Оля"), (1, "Ірина"), (2, "Марта")):
        db.session.add(
            Comment(
                product_id=product.id,
                author=author,
                rating=4,
                created_at=now - timedelta(days=days_ago),
            )
        )
    db.session.commit()

    resp = client.get(f"/v1/comments?product_id={product.id}")
    assert [c["author"] for c in resp.get_json()["comments"]] == ["Ірина", "Марта", "Оля"]


def test_list_comments_requires_product_id(client):
    assert client.get("/v1/comments").status_code == 400


def test_rating_average_and_count(client, make_product):
    product = make_product()
    for rating in (5, 4, 4):
        client.post("/v1/comments", json={"product_id": product.id, "rating": rating})

    resp = client.get(f"/v1/rating?product_id={product.id}")
    assert resp.get_json() == {"average": 4.3, "count": 3}


def test_rating_without_reviews_is_null(client, make_product):
    product = make_product()
    resp = client.get(f"/v1/rating?product_id={product.id}")
    assert resp.get_json() == {"average": None, "count": 0}


def test_delete_comment(client, make_product):
    product = make_product()
    created = client.post(
        "/v1/comments", json={"product_id": product.id, "rating": 2, "text": "Meh"}
    ).get_json()["comment"]

    assert client.delete(f"/v1/comments/{created['id']}").status_code == 200
    assert client.delete(f"/v1/comments/{created['id']}").status_code == 404
