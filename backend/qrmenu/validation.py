from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import Boolean, Integer, Numeric, String, Text

from .errors import ValidationError


# Maximum price: 99,999,999.99 fits Numeric(10, 2)
MAX_PRICE = Decimal("99999999.99")


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - extra_fields: accepted keys that are not columns (e.g. category_uuid);
      returned untouched for the service to resolve
    """
    writable_fields: frozenset[str]
    required_on_create: frozenset[str] = frozenset()
    extra_fields: frozenset[str] = frozenset()


class _FieldError(Exception):
    pass


def _columns_by_key(model) -> dict[str, Any]:
    return {c.key: c for c in model.__mapper__.columns}


def _coerce_value(col, value: Any):
    coltype = col.type

    # Integers: reject floats, bools and scientific notation
    if isinstance(coltype, Integer):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.lstrip("-").isdigit():
                return int(stripped)
        raise _FieldError("must be an integer")

    if isinstance(coltype, Numeric):
        if isinstance(value, bool):
            raise _FieldError("must be a decimal number")
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise _FieldError("must be a decimal number")
        if not amount.is_finite():
            raise _FieldError("must be a decimal number")
        return amount.quantize(Decimal("0.01"))

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        raise _FieldError("must be a boolean")

    if isinstance(coltype, (String, Text)):
        if not isinstance(value, str):
            raise _FieldError("must be a string")
        return value.strip()

    return value


def validate_payload(
    *,
    model,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    All problems are collected into one ValidationError.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError(message="Invalid JSON payload.")

    errors: list[dict] = []

    if not partial:
        for field in sorted(policy.required_on_create):
            if field not in payload:
                errors.append({"field": field, "message": "This value is required."})

    cols = _columns_by_key(model)
    patch: dict = {}

    for key, raw in payload.items():
        if key in policy.extra_fields:
            patch[key] = raw
            continue

        if key not in policy.writable_fields or key not in cols:
            errors.append({"field": key, "message": "Field not allowed."})
            continue

        col = cols[key]

        if raw is None:
            if not col.nullable:
                errors.append({"field": key, "message": "This value cannot be null."})
            else:
                patch[key] = None
            continue

        try:
            val = _coerce_value(col, raw)
        except _FieldError as exc:
            errors.append({"field": key, "message": f"This value {exc}."})
            continue

        if isinstance(col.type, (String, Text)) and not col.nullable and val == "":
            errors.append({"field": key, "message": "This value cannot be blank."})
            continue

        if isinstance(col.type, String) and col.type.length and len(val) > col.type.length:
            errors.append({"field": key, "message": f"This value exceeds max length {col.type.length}."})
            continue

        patch[key] = val

    if errors:
        raise ValidationError(errors=errors)

    return patch


def enforce_rules_product(patch: dict) -> None:
    """Business rules not captured by column metadata."""
    price = patch.get("price")
    if price is None:
        return
    if price < 0:
        raise ValidationError(errors=[{"field": "price", "message": "Price must be >= 0."}])
    if price > MAX_PRICE:
        raise ValidationError(errors=[{"field": "price", "message": f"Price cannot exceed {MAX_PRICE}."}])


def require_text(payload: dict, field: str) -> str:
    """Non-blank string field of a JSON body, or ValidationError."""
    value = (payload or {}).get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(errors=[{"field": field, "message": "This value should not be blank."}])
    return value.strip()
