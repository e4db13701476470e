"""PIX payment orchestration.

Runs customer -> charge -> QR code -> validate -> persist -> link-to-order as a
strict sequence. Earlier steps are never rolled back: a remote customer
survives a failed charge, and a live charge survives a failed insert (the
status reconciler is the recovery path for that window).
"""

from datetime import datetime, timedelta, timezone
from time import perf_counter

from pixpay.common.config import GatewayConfig
from pixpay.common.errors import ConfigurationError, InvalidChargeError, PixPayError
from pixpay.common.logging import charge_id_ctx, logger, order_id_ctx
from pixpay.common.metrics import (
    payment_failure_total,
    payment_latency_seconds,
    payment_requests_total,
    payment_success_total,
)
from pixpay.common.steps import StepPolicy, run_step
from pixpay.services.payments.gateway import AsaasGateway
from pixpay.services.payments.models import PaymentRecord
from pixpay.services.payments.normalizer import repair_qr_image
from pixpay.services.payments.schemas import (
    CheckoutRequest,
    PaymentRecordOut,
    PaymentResult,
    PixQrCode,
)
from pixpay.services.payments.store import PaymentStore

MIN_PIX_PAYLOAD_LENGTH = 10
DEFAULT_QR_EXPIRATION = timedelta(minutes=30)

# Execution order and failure policy of every orchestration step.
STEP_POLICIES: dict[str, StepPolicy] = {
    "email_override": StepPolicy.BEST_EFFORT,
    "create_customer": StepPolicy.REQUIRED,
    "create_charge": StepPolicy.REQUIRED,
    "fetch_qr_code": StepPolicy.REQUIRED,
    "validate_qr_code": StepPolicy.REQUIRED,
    "persist_payment": StepPolicy.REQUIRED,
    "link_order": StepPolicy.BEST_EFFORT,
}


def validate_qr_code(qr_code: PixQrCode) -> PixQrCode:
    """Reject PIX codes whose copy-paste payload cannot be paid."""

    if len(qr_code.payload or "") < MIN_PIX_PAYLOAD_LENGTH:
        raise InvalidChargeError(
            details={"payload_length": len(qr_code.payload or ""), "min_length": MIN_PIX_PAYLOAD_LENGTH}
        )
    return qr_code


class PixPaymentService:
    """Creates one remote customer and PIX charge per call and persists it."""

    def __init__(
        self,
        config: GatewayConfig,
        store: PaymentStore,
        gateway: AsaasGateway | None = None,
        service_name: str = "payments",
    ) -> None:
        self.config = config
        self.store = store
        self.gateway = gateway or AsaasGateway(config)
        self.service_name = service_name

    async def create_pix_payment(self, request: CheckoutRequest) -> PaymentResult:
        payment_requests_total.labels(service=self.service_name).inc()
        started = perf_counter()
        order_token = order_id_ctx.set(request.order_id)
        try:
            result = await self._run(request)
        except PixPayError as exc:
            payment_failure_total.labels(service=self.service_name, error_type=type(exc).__name__).inc()
            raise
        finally:
            payment_latency_seconds.labels(service=self.service_name).observe(max(0.0, perf_counter() - started))
            order_id_ctx.reset(order_token)
        payment_success_total.labels(service=self.service_name).inc()
        return result

    async def _run(self, request: CheckoutRequest) -> PaymentResult:
        if not self.config.api_key:
            raise ConfigurationError()
        logger.info(
            "pix_payment_started environment=%s order_id=%s value=%s",
            self.config.environment,
            request.order_id,
            request.value,
        )

        override = await self._step("email_override", self.store.get_email_override)
        if override.ok and override.value is not None and override.value.active:
            logger.info("customer_email_overridden")
            request = request.model_copy(update={"email": override.value.override_email.strip()})

        customer = (await self._step("create_customer", lambda: self.gateway.create_customer(request))).value
        logger.info("customer_created customer_id=%s", customer.id)

        description = request.description or f"Order #{request.order_id}"
        charge = (
            await self._step(
                "create_charge",
                lambda: self.gateway.create_pix_charge(customer.id, request.value, description, request.order_id),
            )
        ).value
        charge_token = charge_id_ctx.set(charge.id)
        try:
            logger.info("charge_created charge_id=%s status=%s", charge.id, charge.status)

            qr_code = (await self._step("fetch_qr_code", lambda: self.gateway.get_pix_qr_code(charge.id))).value
            await self._step("validate_qr_code", lambda: validate_qr_code(qr_code))

            record = PaymentRecord(
                order_id=request.order_id,
                charge_id=charge.id,
                status=charge.status,
                amount=request.value,
                qr_payload=qr_code.payload,
                qr_image=qr_code.encoded_image,
                expiration_date=qr_code.expiration_date,
                updated_at=datetime.now(timezone.utc),
            )
            persisted = (await self._step("persist_payment", lambda: self.store.save_payment(record))).value

            link = await self._step(
                "link_order", lambda: self.store.link_order_to_charge(request.order_id, charge.id)
            )
            if link.ok and not link.value:
                logger.warning("order_link_skipped reason=order_not_found order_id=%s", request.order_id)

            logger.info("pix_payment_completed charge_id=%s", charge.id)
            return PaymentResult(
                customer=customer.model_dump(mode="json", by_alias=True),
                charge=charge.model_dump(mode="json", by_alias=True),
                qr_code=qr_code.model_dump(mode="json", by_alias=True),
                persisted_record=PaymentRecordOut.model_validate(persisted),
                qr_image=repair_qr_image(qr_code.encoded_image),
                qr_payload=qr_code.payload,
                copy_paste_key=qr_code.payload,
                expiration_date=qr_code.expiration_date or datetime.now(timezone.utc) + DEFAULT_QR_EXPIRATION,
                payment_id=charge.id,
                status=charge.status,
                value=request.value,
            )
        finally:
            charge_id_ctx.reset(charge_token)

    async def _step(self, name: str, call):
        return await run_step(name, STEP_POLICIES[name], call)
