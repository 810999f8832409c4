"""Read-through cache for catalog list and detail payloads.

Values are the serialized JSON response bodies. Entries are never checked
for freshness; they live until their TTL expires, a caller bypasses them,
or `invalidate_catalog` removes them.
"""
import logging
from flask import current_app
from redis import RedisError

from wigcatalog import extensions
from wigcatalog.errors import StorageError

logger = logging.getLogger(__name__)

KEY_DELIMITER = ":"
LIST_PREFIX = "products"
DETAIL_PREFIX = "product"

# Order matters: it is part of the key format.
LIST_KEY_FIELDS = (
    "maxPrice",
    "minPrice",
    "length",
    "type",
    "category",
    "page",
    "limit",
    "sortOrder",
    "ids",
)


def list_key(params):
    """Key for a catalog listing, skipping absent query fields.

    Each part carries its field name so `?minPrice=1000` and `?maxPrice=1000`
    never share an entry.
    """
    parts = [LIST_PREFIX]
    for field in LIST_KEY_FIELDS:
        value = params.get(field)
        if value not in (None, ""):
            parts.append(f"{field}={value}")
    return KEY_DELIMITER.join(parts)


def detail_key(product_id):
    return f"{DETAIL_PREFIX}{KEY_DELIMITER}{product_id}"


def get(key):
    client = extensions.redis_client
    if client is None:
        return None
    try:
        value = client.get(key)
    except RedisError as e:
        raise StorageError(f"Cache read failed for {key}") from e
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    logger.debug("Cache %s for %s", "hit" if value is not None else "miss", key)
    return value


def put(key, value, ttl=None):
    client = extensions.redis_client
    if client is None:
        return
    if ttl is None:
        ttl = current_app.config["CACHE_TTL_SECONDS"]
    try:
        client.set(key, value, ex=ttl)
    except RedisError as e:
        raise StorageError(f"Cache write failed for {key}") from e


def invalidate_catalog():
    """Drop every cached listing and product detail. Returns the count."""
    client = extensions.redis_client
    if client is None:
        return 0
    try:
        keys = list(client.scan_iter(match=f"{DETAIL_PREFIX}*"))
        if keys:
            client.delete(*keys)
    except RedisError as e:
        raise StorageError("Cache invalidation failed") from e
    logger.info("Invalidated %d catalog cache entries", len(keys))
    return len(keys)


def after_write():
    """Hook run by every catalog write.

    Cached payloads are left alone unless CACHE_INVALIDATE_ON_WRITE is set;
    readers then need `noCache` to see fresh data before the TTL runs out.
    """
    if current_app.config.get("CACHE_INVALIDATE_ON_WRITE"):
        invalidate_catalog()
