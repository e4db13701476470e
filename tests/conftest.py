"""Shared fixtures: in-memory SQLite store and a scripted fake gateway."""

import os

os.environ.setdefault("POSTGRES_DSN", "sqlite+pysqlite://")
os.environ.setdefault("TRACING_ENABLED", "false")

from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from pixpay.common.config import GatewayConfig  # noqa: E402
from pixpay.common.db import Base  # noqa: E402
from pixpay.common.errors import GatewayError  # noqa: E402
from pixpay.services.payments import models  # noqa: E402,F401
from pixpay.services.payments.schemas import PixQrCode, RemoteCharge, RemoteCustomer  # noqa: E402
from pixpay.services.payments.store import PaymentStore  # noqa: E402

VALID_PIX_PAYLOAD = "00020126580014br.gov.bcb.pix0136a1b2c3d4-e5f6-7890-abcd-ef1234567890520400005303986"
BARE_PNG_BASE64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="


class FakeGateway:
    """In-memory stand-in for `AsaasGateway` with scriptable failures."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.customer_requests = []
        self.charge_requests: list[dict] = []
        self.fail_on: set[str] = set()
        self.qr_payload = VALID_PIX_PAYLOAD
        self.encoded_image = BARE_PNG_BASE64
        self.expiration_date = "2026-10-19 23:59:59"
        self.remote_status: dict[str, str] = {}

    def _maybe_fail(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.fail_on:
            raise GatewayError(
                f"{operation} failed with status 400",
                status_code=400,
                details={"errors": [{"code": "invalid_action", "description": "rejected"}]},
                operation=operation,
            )

    async def create_customer(self, request) -> RemoteCustomer:
        self._maybe_fail("create_customer")
        self.customer_requests.append(request)
        return RemoteCustomer(id=f"cus_{len(self.customer_requests):06d}", name=request.name, email=request.email)

    async def create_pix_charge(self, customer_id, value, description, order_id) -> RemoteCharge:
        self._maybe_fail("create_charge")
        charge_id = f"pay_{len(self.charge_requests) + 1:06d}"
        self.charge_requests.append(
            {"customer": customer_id, "value": Decimal(value), "description": description, "order_id": order_id}
        )
        self.remote_status[charge_id] = "PENDING"
        return RemoteCharge(id=charge_id, status="PENDING", value=value, externalReference=order_id)

    async def get_pix_qr_code(self, charge_id) -> PixQrCode:
        self._maybe_fail("fetch_qr_code")
        return PixQrCode(
            success=True,
            payload=self.qr_payload,
            encodedImage=self.encoded_image,
            expirationDate=self.expiration_date,
        )

    async def get_charge(self, charge_id) -> RemoteCharge:
        self._maybe_fail("get_charge")
        if charge_id not in self.remote_status:
            raise GatewayError(
                "get_charge failed with status 404",
                status_code=404,
                details={"errors": [{"code": "not_found"}]},
                operation="get_charge",
            )
        return RemoteCharge(id=charge_id, status=self.remote_status[charge_id])


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture
def store(session_factory):
    return PaymentStore(session_factory)


@pytest.fixture
def gateway_config():
    return GatewayConfig(api_key="test-api-key", api_base_url="https://sandbox.asaas.test/api/v3")


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def checkout_payload():
    return {
        "name": "Maria Silva",
        "cpfCnpj": "123.456.789-09",
        "email": "maria@example.com",
        "phone": "(11) 98765-4321",
        "orderId": "order-1001",
        "value": "1.234,56",
    }
