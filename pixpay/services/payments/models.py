"""Payments database models.

`payment_records` is owned by this service. `orders` is owned by the shop;
only its status, charge link and `updated_at` are written here.
"""

from datetime import datetime
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from pixpay.common.db import Base


class Order(Base):
    """Shop order row; this service mirrors charge status onto it."""

    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid4()))
    status: Mapped[str] = mapped_column(String, default="PENDING")
    charge_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class PaymentRecord(Base):
    """Local projection of one gateway PIX charge."""

    __tablename__ = "payment_records"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid4()))
    order_id: Mapped[str] = mapped_column(String, index=True)
    charge_id: Mapped[str] = mapped_column(String, unique=True, index=True)
    status: Mapped[str] = mapped_column(String, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    qr_payload: Mapped[str] = mapped_column(Text)
    qr_image: Mapped[str] = mapped_column(Text, default="")
    expiration_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    last_polled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)


class EmailOverrideConfig(Base):
    """Single-row toggle that redirects customer emails to a fixed address."""

    __tablename__ = "email_override_config"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    use_override: Mapped[bool] = mapped_column(Boolean, default=False)
    override_email: Mapped[str] = mapped_column(String, default="")
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
