import fnmatch
import io
from decimal import Decimal

import pytest
from botocore.exceptions import ClientError
from PIL import Image as PILImage

import wigcatalog.extensions as ext
from wigcatalog import create_app
from wigcatalog.extensions import db as _db
from wigcatalog.models import Product, Variant, VariantImage
from wigcatalog.services import storage_service


class FakeRedis:
    """In-memory stand-in for the few redis-py calls the cache makes."""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    def get(self, key):
        return self.store.get(key)

    def set(self, key, value, ex=None):
        self.store[key] = value
        self.ttls[key] = ex
        return True

    def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    def scan_iter(self, match="*"):
        return [k for k in list(self.store) if fnmatch.fnmatchcase(k, match)]

    def ping(self):
        return True


class FakeS3:
    """In-memory stand-in for the boto3 S3 client."""

    def __init__(self):
        self.objects = {}
        self.fail_deletes = False
        self.delete_calls = 0

    def put_object(self, Bucket, Key, Body, ContentType=None, **kwargs):
        self.objects[Key] = {"body": Body, "content_type": ContentType}

    def get_object(self, Bucket, Key):
        if Key not in self.objects:
            raise ClientError(
                {"Error": {"Code": "NoSuchKey", "Message": "Not Found"}}, "GetObject"
            )
        return {"Body": io.BytesIO(self.objects[Key]["body"])}

    def delete_object(self, Bucket, Key):
        self.objects.pop(Key, None)

    def delete_objects(self, Bucket, Delete):
        self.delete_calls += 1
        if self.fail_deletes:
            raise ClientError(
                {"Error": {"Code": "InternalError", "Message": "boom"}}, "DeleteObjects"
            )
        for obj in Delete["Objects"]:
            self.objects.pop(obj["Key"], None)
        return {"Deleted": Delete["Objects"]}


@pytest.fixture
def app():
    """Fresh application and in-memory database per test."""
    app = create_app("testing")
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture(autouse=True)
def s3(app, monkeypatch):
    fake = FakeS3()
    monkeypatch.setattr(storage_service, "_get_client", lambda: fake)
    return fake


@pytest.fixture
def cache(app, monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(ext, "redis_client", fake)
    return fake


def _png(color="red", size=(4, 4), fmt="PNG"):
    buffer = io.BytesIO()
    PILImage.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    return _png


@pytest.fixture
def make_product(db):
    counter = {"n": 0}

    def factory(**fields):
        counter["n"] += 1
        fields.setdefault("name", f"Product {counter['n']}")
        fields.setdefault("category_id", 1)
        fields.setdefault("type", 1)
        fields.setdefault("length", 20)
        product = Product(**fields)
        db.session.add(product)
        db.session.commit()
        return product

    return factory


@pytest.fixture
def make_variant(db):
    def factory(product, price, promo_price=None, color="black", stock_quantity=1):
        variant = Variant(
            product_id=product.id,
            price=Decimal(str(price)),
            promo_price=Decimal(str(promo_price)) if promo_price is not None else None,
            color=color,
            stock_quantity=stock_quantity,
        )
        db.session.add(variant)
        db.session.commit()
        return variant

    return factory


@pytest.fixture
def make_image(db, s3):
    def factory(variant, sort_order, key=None):
        key = key or f"{variant.id}-{sort_order}.png"
        s3.objects[key] = {"body": _png(), "content_type": "image/png"}
        image = VariantImage(variant_id=variant.id, url=key, sort_order=sort_order)
        db.session.add(image)
        db.session.commit()
        return image

    return factory
