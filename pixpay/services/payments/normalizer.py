"""Checkout input normalization and QR image repair."""

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any

from pixpay.common.errors import ValidationError
from pixpay.common.logging import logger
from pixpay.services.payments.schemas import CheckoutRequest

# (wire name, accepted aliases)
REQUIRED_FIELDS: list[tuple[str, tuple[str, ...]]] = [
    ("name", ("name",)),
    ("taxId", ("taxId", "cpfCnpj")),
    ("email", ("email",)),
    ("phone", ("phone",)),
    ("orderId", ("orderId",)),
    ("value", ("value",)),
]

DATA_IMAGE_PREFIX = "data:image"
PNG_DATA_URI_PREFIX = "data:image/png;base64,"
_BARE_BASE64 = re.compile(r"[A-Za-z0-9+/=]+")
_NON_AMOUNT_CHARS = re.compile(r"[^\d.,]")
_NON_DIGITS = re.compile(r"\D")


def _first_present(raw: dict[str, Any], names: tuple[str, ...]) -> Any:
    for name in names:
        value = raw.get(name)
        if not _is_blank(value):
            return value
    return None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def missing_fields(raw: dict[str, Any]) -> list[str]:
    """All required wire fields that are absent, null or blank, in declared order."""

    return [field for field, aliases in REQUIRED_FIELDS if _first_present(raw, aliases) is None]


def parse_amount(value: Any) -> Decimal:
    """Best-effort amount parsing; never raises, falls back to 0.

    Text keeps only digits, commas and periods. When a comma is present the
    last comma is the decimal separator and periods are thousands separators.
    """

    if isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, (int, float, Decimal)):
        if isinstance(value, float) and not math.isfinite(value):
            return Decimal("0")
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            return Decimal("0")
        if not amount.is_finite() or amount < 0:
            return Decimal("0")
        return amount
    if not isinstance(value, str):
        return Decimal("0")

    text = _NON_AMOUNT_CHARS.sub("", value)
    if "," in text:
        integer_part, _, fraction = text.replace(".", "").rpartition(",")
        text = f"{integer_part.replace(',', '')}.{fraction}"
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return Decimal("0")
    return amount if amount.is_finite() else Decimal("0")


def digits_only(value: Any) -> str:
    return _NON_DIGITS.sub("", "" if value is None else str(value))


def normalize_checkout(raw: Any) -> CheckoutRequest:
    """Turn loosely typed checkout JSON into a strict `CheckoutRequest`."""

    if not isinstance(raw, dict):
        raise ValidationError("request body must be a JSON object")
    missing = missing_fields(raw)
    if missing:
        logger.warning("checkout_missing_fields fields=%s", ",".join(missing))
        raise ValidationError(missing_fields=missing)

    tax_id = digits_only(_first_present(raw, ("taxId", "cpfCnpj")))
    phone = digits_only(raw["phone"])
    invalid = [name for name, digits in (("taxId", tax_id), ("phone", phone)) if not digits]
    if invalid:
        raise ValidationError(f"fields without digits: {', '.join(invalid)}")

    order_id = str(raw["orderId"]).strip()
    description = raw.get("description")
    if _is_blank(description):
        description = f"Order #{order_id or 'new'}"

    return CheckoutRequest(
        name=str(raw["name"]).strip(),
        tax_id=tax_id,
        email=str(raw["email"]).strip(),
        phone=phone,
        order_id=order_id,
        value=parse_amount(raw["value"]),
        description=str(description),
    )


def repair_qr_image(image: str | None) -> str:
    """Return a displayable data URI for the QR image, or "" if it is unusable."""

    if not image:
        return ""
    if image.startswith(DATA_IMAGE_PREFIX):
        return image
    if _BARE_BASE64.fullmatch(image):
        return PNG_DATA_URI_PREFIX + image
    logger.warning("qr_image_unrepairable length=%s", len(image))
    return ""
