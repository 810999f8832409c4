"""Parsing of request values into typed fields; failures raise ValidationError."""
from decimal import Decimal, InvalidOperation

from wigcatalog.errors import ValidationError

TRUTHY = ("1", "true", "yes", "on")


def is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def require(data, *fields):
    missing = [f for f in fields if is_blank(data.get(f))]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")


def split_csv(raw):
    return [part.strip() for part in (raw or "").split(",") if part.strip()]


def parse_bool(raw):
    if isinstance(raw, bool):
        return raw
    return str(raw or "").strip().lower() in TRUTHY


def parse_enum(enum_cls, raw, label):
    """Accept an enum by value ("1") or by name ("wigs")."""
    raw = str(raw).strip()
    try:
        if raw.lstrip("-").isdigit():
            return enum_cls(int(raw))
        return enum_cls[raw.upper()]
    except (KeyError, ValueError):
        allowed = ", ".join(f"{m.name}={m.value}" for m in enum_cls)
        raise ValidationError(f"Invalid {label} '{raw}'. Allowed: {allowed}")


def parse_decimal(raw, label, minimum=None):
    if isinstance(raw, bool):
        raise ValidationError(f"{label} must be a number")
    try:
        value = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{label} must be a number")
    if not value.is_finite():
        raise ValidationError(f"{label} must be a number")
    if minimum is not None and value < minimum:
        raise ValidationError(f"{label} must be at least {minimum}")
    return value


def parse_int(raw, label, minimum=None, maximum=None):
    if isinstance(raw, bool):
        raise ValidationError(f"{label} must be an integer")
    try:
        value = int(str(raw).strip())
    except ValueError:
        raise ValidationError(f"{label} must be an integer")
    if minimum is not None and value < minimum:
        raise ValidationError(f"{label} must be at least {minimum}")
    if maximum is not None and value > maximum:
        raise ValidationError(f"{label} must be at most {maximum}")
    return value


def parse_positive_int(raw, label):
    return parse_int(raw, label, minimum=1)


def optional(parser, raw, *args, **kwargs):
    """Run `parser` unless the value is blank, in which case return None."""
    if is_blank(raw):
        return None
    return parser(raw, *args, **kwargs)
