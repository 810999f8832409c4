import io
from flask import current_app
from PIL import Image as PILImage, UnidentifiedImageError

from wigcatalog.errors import ValidationError


ALLOWED_FORMATS = {"JPEG", "PNG", "WEBP", "GIF"}
FORMAT_EXTENSIONS = {"JPEG": ".jpg", "PNG": ".png", "WEBP": ".webp", "GIF": ".gif"}


def validate_image(image_bytes, filename=""):
    """Validate an uploaded image without re-encoding it.

    - Checks file size
    - Verifies it's a real image via Pillow
    - Restricts to web formats

    Returns:
        (format, content_type), e.g. ("PNG", "image/png")

    Raises:
        ValidationError on invalid input
    """
    max_size = current_app.config["MAX_IMAGE_SIZE"]
    if not image_bytes:
        raise ValidationError(f"Empty image upload: {filename or 'unnamed'}")
    if len(image_bytes) > max_size:
        raise ValidationError(
            f"Image too large: {len(image_bytes)} bytes (max {max_size})"
        )

    try:
        img = PILImage.open(io.BytesIO(image_bytes))
        img.verify()  # verify it's a real image
    except (UnidentifiedImageError, OSError, SyntaxError):
        raise ValidationError(f"Invalid image file: {filename or 'unnamed'}")

    if img.format not in ALLOWED_FORMATS:
        raise ValidationError(f"Unsupported image format: {img.format}")

    return img.format, PILImage.MIME.get(img.format, "application/octet-stream")


def extension_for(image_format):
    return FORMAT_EXTENSIONS.get(image_format, "")
