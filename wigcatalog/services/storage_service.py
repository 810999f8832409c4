import logging
import mimetypes
import os
import uuid

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app

from wigcatalog.errors import NotFoundError, StorageError

logger = logging.getLogger(__name__)


def _get_client():
    return boto3.client(
        "s3",
        endpoint_url=current_app.config["S3_ENDPOINT_URL"] or None,
        aws_access_key_id=current_app.config["S3_ACCESS_KEY"],
        aws_secret_access_key=current_app.config["S3_SECRET_KEY"],
        region_name=current_app.config["S3_REGION"],
        config=BotoConfig(signature_version="s3v4"),
    )


def generate_key(filename, fallback_ext=""):
    """Opaque storage key `<uuid4><ext>` keeping the upload's extension."""
    ext = os.path.splitext(filename or "")[1].lower() or fallback_ext
    return f"{uuid.uuid4()}{ext}"


def guess_content_type(storage_key):
    return mimetypes.guess_type(storage_key)[0] or "application/octet-stream"


def upload(storage_key, data, content_type=None):
    """Upload bytes to S3."""
    client = _get_client()
    bucket = current_app.config["S3_BUCKET_NAME"]
    try:
        client.put_object(
            Bucket=bucket,
            Key=storage_key,
            Body=data,
            ContentType=content_type or guess_content_type(storage_key),
        )
    except (BotoCoreError, ClientError) as e:
        raise StorageError(f"Upload of {storage_key} failed") from e


def download(storage_key):
    """Download file bytes from S3."""
    client = _get_client()
    bucket = current_app.config["S3_BUCKET_NAME"]
    try:
        response = client.get_object(Bucket=bucket, Key=storage_key)
    except ClientError as e:
        if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
            raise NotFoundError("File not found") from e
        raise StorageError(f"Download of {storage_key} failed") from e
    except BotoCoreError as e:
        raise StorageError(f"Download of {storage_key} failed") from e
    return response["Body"].read()


def delete(storage_key):
    """Delete an object from S3."""
    client = _get_client()
    bucket = current_app.config["S3_BUCKET_NAME"]
    try:
        client.delete_object(Bucket=bucket, Key=storage_key)
    except (BotoCoreError, ClientError) as e:
        raise StorageError(f"Delete of {storage_key} failed") from e


def delete_many(storage_keys, attempts=None):
    """Delete multiple objects from S3.

    Each attempt only retries the keys S3 reported as failed. Raises
    StorageError if keys remain after the last attempt.
    """
    remaining = list(dict.fromkeys(storage_keys))
    if not remaining:
        return
    if attempts is None:
        attempts = current_app.config["STORAGE_DELETE_ATTEMPTS"]
    client = _get_client()
    bucket = current_app.config["S3_BUCKET_NAME"]

    last_error = None
    for attempt in range(1, max(attempts, 1) + 1):
        try:
            response = client.delete_objects(
                Bucket=bucket,
                Delete={"Objects": [{"Key": k} for k in remaining]},
            )
        except (BotoCoreError, ClientError) as e:
            last_error = e
            logger.warning(
                "Bulk delete attempt %d/%d failed for %d keys: %s",
                attempt, attempts, len(remaining), e,
            )
            continue

        failed = {err["Key"] for err in response.get("Errors", [])}
        remaining = [k for k in remaining if k in failed]
        if not remaining:
            return
        logger.warning(
            "Bulk delete attempt %d/%d left %d keys", attempt, attempts, len(remaining)
        )

    raise StorageError(
        f"Could not delete {len(remaining)} stored objects: {remaining[:5]}"
    ) from last_error
