"""Request/response schemas for the payments service and its gateway.

Gateway models validate the fields this service relies on and keep every
other provider field (`extra="allow"`).
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

# Asaas reports local Sao Paulo time without an offset; Brazil has no DST since 2019.
GATEWAY_TIMEZONE = timezone(timedelta(hours=-3))


class CheckoutRequest(BaseModel):
    """Strict checkout shape required by the orchestrator."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    name: str = Field(min_length=1)
    tax_id: str = Field(min_length=1, validation_alias=AliasChoices("taxId", "cpfCnpj", "tax_id"))
    email: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    order_id: str = Field(min_length=1)
    value: Decimal = Field(ge=0)
    description: str | None = None


class RemoteCustomer(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1)
    name: str | None = None
    email: str | None = None


class RemoteCharge(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(min_length=1)
    status: str = Field(min_length=1)
    value: Decimal | None = None
    external_reference: str | None = Field(default=None, alias="externalReference")


class PixQrCode(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    success: bool = True
    payload: str = ""
    encoded_image: str = Field(default="", alias="encodedImage")
    expiration_date: datetime | None = Field(default=None, alias="expirationDate")

    @field_validator("payload", "encoded_image", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return "" if value is None else value

    @field_validator("expiration_date", mode="before")
    @classmethod
    def _parse_gateway_datetime(cls, value):
        # Asaas sends "YYYY-MM-DD HH:MM:SS"
        if isinstance(value, str):
            if not value.strip():
                return None
            parsed = datetime.fromisoformat(value.strip())
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=GATEWAY_TIMEZONE)
        return value


class PaymentRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    order_id: str
    charge_id: str
    status: str
    amount: Decimal
    qr_payload: str
    qr_image: str
    expiration_date: datetime | None = None
    updated_at: datetime | None = None

    @field_serializer("amount")
    def _amount_as_number(self, amount: Decimal) -> float:
        return float(amount)


class PaymentResult(BaseModel):
    """Unified outcome of one successful orchestration.

    `copy_paste_key` and `qr_payload` carry the same value under two names.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    customer: dict[str, Any]
    charge: dict[str, Any]
    qr_code: dict[str, Any]
    persisted_record: PaymentRecordOut
    qr_image: str
    qr_payload: str
    copy_paste_key: str
    expiration_date: datetime
    payment_id: str
    status: str
    value: Decimal

    @field_serializer("value")
    def _value_as_number(self, value: Decimal) -> float:
        return float(value)


class ReconciliationResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    charge_id: str = Field(alias="paymentId")
    status: str
    updated_at: datetime
