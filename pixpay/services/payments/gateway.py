"""Asaas REST client for customers, PIX charges and QR codes.

Each call opens a short-lived `httpx.AsyncClient`; timeouts come from the
client configuration and are never retried here. Every non-2xx answer,
transport failure or malformed body becomes a `GatewayError`.
"""

from datetime import date, timedelta
from time import perf_counter
from typing import Any

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from pixpay.common.config import GatewayConfig
from pixpay.common.errors import GatewayError
from pixpay.common.logging import logger
from pixpay.common.metrics import gateway_latency_seconds, gateway_requests_total
from pixpay.services.payments.schemas import CheckoutRequest, PixQrCode, RemoteCharge, RemoteCustomer


class AsaasGateway:
    """Typed access to the four gateway endpoints this service uses."""

    def __init__(self, config: GatewayConfig, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.config = config
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.config.api_base_url.rstrip("/"),
            headers={
                "Content-Type": "application/json",
                "access_token": self.config.api_key,
                "Cache-Control": "no-cache, no-store, must-revalidate",
            },
            timeout=self.config.timeout_seconds,
            transport=self._transport,
        )

    async def _request(self, operation: str, method: str, path: str, json: dict | None = None) -> dict[str, Any]:
        started = perf_counter()
        status_code = "error"
        try:
            async with self._client() as client:
                resp = await client.request(method, path, json=json)
            status_code = str(resp.status_code)
        except httpx.HTTPError as exc:
            logger.error("gateway_transport_error operation=%s error=%s", operation, exc)
            raise GatewayError(f"{operation} request failed: {exc}", operation=operation) from exc
        finally:
            gateway_requests_total.labels(operation=operation, status_code=status_code).inc()
            gateway_latency_seconds.labels(operation=operation).observe(max(0.0, perf_counter() - started))

        if not resp.is_success:
            details = _error_details(resp)
            logger.error(
                "gateway_error operation=%s status_code=%s details=%s",
                operation,
                resp.status_code,
                details,
            )
            raise GatewayError(
                f"{operation} failed with status {resp.status_code}",
                status_code=resp.status_code,
                details=details,
                operation=operation,
            )
        try:
            body = resp.json()
        except ValueError as exc:
            raise GatewayError(
                f"{operation} returned a non-JSON body",
                status_code=resp.status_code,
                details=resp.text,
                operation=operation,
            ) from exc
        if not isinstance(body, dict):
            raise GatewayError(
                f"{operation} returned an unexpected body",
                status_code=resp.status_code,
                details=body,
                operation=operation,
            )
        return body

    async def create_customer(self, request: CheckoutRequest) -> RemoteCustomer:
        body = await self._request(
            "create_customer",
            "POST",
            "/customers",
            json={
                "name": request.name,
                "cpfCnpj": request.tax_id,
                "email": request.email,
                "phone": request.phone,
                "mobilePhone": request.phone,
                "externalReference": request.order_id,
            },
        )
        return _parse("create_customer", RemoteCustomer, body)

    async def create_pix_charge(self, customer_id: str, value, description: str, order_id: str) -> RemoteCharge:
        due_date = date.today() + timedelta(days=self.config.pix_due_days)
        body = await self._request(
            "create_charge",
            "POST",
            "/payments",
            json={
                "customer": customer_id,
                "billingType": "PIX",
                "value": float(value),
                "dueDate": due_date.isoformat(),
                "description": description,
                "externalReference": order_id,
            },
        )
        return _parse("create_charge", RemoteCharge, body)

    async def get_pix_qr_code(self, charge_id: str) -> PixQrCode:
        body = await self._request("fetch_qr_code", "GET", f"/payments/{charge_id}/pixQrCode")
        return _parse("fetch_qr_code", PixQrCode, body)

    async def get_charge(self, charge_id: str) -> RemoteCharge:
        body = await self._request("get_charge", "GET", f"/payments/{charge_id}")
        return _parse("get_charge", RemoteCharge, body)


def _parse(operation: str, model: type[BaseModel], body: dict[str, Any]):
    try:
        return model.model_validate(body)
    except PydanticValidationError as exc:
        raise GatewayError(
            f"{operation} returned a malformed response",
            details=exc.errors(include_url=False, include_context=False, include_input=False),
            operation=operation,
        ) from exc


def _error_details(resp: httpx.Response) -> Any:
    """Upstream error payload: parsed JSON when possible, raw text otherwise."""

    try:
        return resp.json()
    except ValueError:
        return resp.text
