"""Tests for variant image ordering, upload and deletion."""
import io

import pytest
from sqlalchemy.exc import OperationalError

from wigcatalog.extensions import db as _db
from wigcatalog.models import VariantImage


def _files(png_bytes, *names):
    return [(io.BytesIO(png_bytes()), name) for name in names]


def _orders(db, variant_id):
    rows = db.session.execute(
        db.select(VariantImage.id, VariantImage.sort_order)
        .where(VariantImage.variant_id == variant_id)
        .order_by(VariantImage.sort_order)
    ).all()
    return [(row.id, row.sort_order) for row in rows]


def test_append_continues_after_max_sort_order(
    client, db, s3, png_bytes, make_product, make_variant, make_image
):
    variant = make_variant(make_product(), 100)
    make_image(variant, 1)
    make_image(variant, 4)

    resp = client.post(
        f"/v1/variants/{variant.id}/images",
        data={"images": _files(png_bytes, "a.png", "b.PNG", "c.png")},
        content_type="multipart/form-data",
    )
    data = resp.get_json()

    assert resp.status_code == 200
    assert data["success"] is True
    assert [i["sort_order"] for i in data["images"]] == [5, 6, 7]
    for image in data["images"]:
        assert image["url"].endswith(".png")
        assert image["url"] in s3.objects
        assert s3.objects[image["url"]]["content_type"] == "image/png"


def test_first_image_gets_sort_order_zero(client, png_bytes, make_product, make_variant):
    variant = make_variant(make_product(), 100)
    resp = client.post(
        f"/v1/variants/{variant.id}/images",
        data={"images[]": _files(png_bytes, "only.webp")},
        content_type="multipart/form-data",
    )
    assert [i["sort_order"] for i in resp.get_json()["images"]] == [0]


def test_extension_comes_from_format_when_filename_has_none(
    client, png_bytes, make_product, make_variant
):
    variant = make_variant(make_product(), 100)
    resp = client.post(
        f"/v1/variants/{variant.id}/images",
        data={"images": [(io.BytesIO(png_bytes(fmt="JPEG")), "blob")]},
        content_type="multipart/form-data",
    )
    assert resp.get_json()["images"][0]["url"].endswith(".jpg")


def test_append_rejects_non_images_without_storing(client, s3, make_product, make_variant):
    variant = make_variant(make_product(), 100)
    resp = client.post(
        f"/v1/variants/{variant.id}/images",
        data={"images": [(io.BytesIO(b"not an image"), "fake.png")]},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400
    assert s3.objects == {}


def test_append_without_files_is_400(client, make_product, make_variant):
    variant = make_variant(make_product(), 100)
    resp = client.post(
        f"/v1/variants/{variant.id}/images", data={}, content_type="multipart/form-data"
    )
    assert resp.status_code == 400


def test_append_to_missing_variant_is_404(client, png_bytes):
    resp = client.post(
        "/v1/variants/nope/images",
        data={"images": _files(png_bytes, "a.png")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 404


def test_failed_metadata_insert_removes_uploaded_objects(
    client, s3, monkeypatch, png_bytes, make_product, make_variant
):
    variant = make_variant(make_product(), 100)
    calls = {"n": 0}

    def failing_commit():
        calls["n"] += 1
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(_db.session, "commit", failing_commit)
    resp = client.post(
        f"/v1/variants/{variant.id}/images",
        data={"images": _files(png_bytes, "a.png", "b.png")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Internal server error"}
    assert calls["n"] == 1
    assert s3.objects == {}


def test_resort_applies_new_orders(client, db, make_product, make_variant, make_image):
    variant = make_variant(make_product(), 100)
    x = make_image(variant, 0)
    y = make_image(variant, 1)
    z = make_image(variant, 2)
    x_id, y_id, z_id = x.id, y.id, z.id

    resp = client.put(
        f"/v1/variants/{variant.id}/images/resort",
        json={"image_orders": [{"id": x_id, "sort_order": 2}, {"id": z_id, "sort_order": 0}]},
    )
    data = resp.get_json()

    assert resp.status_code == 200
    assert [i["id"] for i in data["images"]] == [z_id, y_id, x_id]
    assert _orders(db, variant.id) == [(z_id, 0), (y_id, 1), (x_id, 2)]


def test_resort_rejects_foreign_image_and_changes_nothing(
    client, db, make_product, make_variant, make_image
):
    product = make_product()
    a = make_variant(product, 100)
    b = make_variant(product, 200)
    x = make_image(a, 0)
    y = make_image(a, 1)
    z = make_image(b, 0)
    a_id, b_id = a.id, b.id
    before_a, before_b = _orders(db, a_id), _orders(db, b_id)

    resp = client.put(
        f"/v1/variants/{a_id}/images/resort",
        json={
            "image_orders": [
                {"id": x.id, "sort_order": 1},
                {"id": y.id, "sort_order": 0},
                {"id": z.id, "sort_order": 5},
            ]
        },
    )

    assert resp.status_code == 400
    assert z.id in resp.get_json()["error"]
    assert _orders(db, a_id) == before_a
    assert _orders(db, b_id) == before_b


@pytest.mark.parametrize(
    "orders",
    [
        [],
        [{"id": "x"}],
        [{"sort_order": 1}],
        [{"id": "SAME", "sort_order": 1}, {"id": "SAME", "sort_order": 2}],
        [{"id": "FIRST", "sort_order": "high"}],
        [{"id": "FIRST", "sort_order": 1}],  # collides with the untouched second image
    ],
)
def test_resort_rejects_malformed_batches(
    client, db, make_product, make_variant, make_image, orders
):
    variant = make_variant(make_product(), 100)
    first = make_image(variant, 0)
    make_image(variant, 1)
    ids = {"SAME": first.id, "FIRST": first.id}
    orders = [
        {**entry, "id": ids.get(entry["id"], entry["id"])} if "id" in entry else entry
        for entry in orders
    ]
    before = _orders(db, variant.id)

    resp = client.put(
        f"/v1/variants/{variant.id}/images/resort", json={"image_orders": orders}
    )

    assert resp.status_code == 400
    assert _orders(db, variant.id) == before


def test_resort_missing_variant_is_404(client):
    resp = client.put(
        "/v1/variants/nope/images/resort",
        json={"image_orders": [{"id": "x", "sort_order": 0}]},
    )
    assert resp.status_code == 404


def test_delete_image_removes_object_and_row(client, db, s3, make_product, make_variant, make_image):
    variant = make_variant(make_product(), 100)
    image = make_image(variant, 0, key="gone.png")
    image_id = image.id

    resp = client.delete(f"/v1/images/{image_id}")

    assert resp.status_code == 200
    assert resp.get_json() == {"success": True}
    assert "gone.png" not in s3.objects
    assert _orders(db, variant.id) == []


def test_delete_missing_image_does_not_touch_storage(client, s3):
    s3.objects["keep.png"] = {"body": b"x", "content_type": "image/png"}
    resp = client.delete("/v1/images/missing")
    assert resp.status_code == 404
    assert "keep.png" in s3.objects


def test_list_images_in_order(client, make_product, make_variant, make_image):
    variant = make_variant(make_product(), 100)
    make_image(variant, 3, key="c.png")
    make_image(variant, 1, key="a.png")

    resp = client.get(f"/v1/variants/{variant.id}/images")
    assert [i["url"] for i in resp.get_json()["images"]] == ["a.png", "c.png"]


def test_serve_stored_file(client, s3):
    s3.objects["abc.png"] = {"body": b"\x89PNG-bytes", "content_type": "image/png"}

    resp = client.get("/v1/files/abc.png")
    assert resp.status_code == 200
    assert resp.data == b"\x89PNG-bytes"
    assert resp.mimetype == "image/png"

    assert client.get("/v1/files/missing.png").status_code == 404
