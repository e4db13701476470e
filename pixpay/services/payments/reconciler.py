"""Poll-based charge status reconciliation.

The gateway fetch is the only hard failure. Local writes are best-effort:
the freshly fetched status is returned even when the payment record is
missing or an update fails.
"""

from datetime import datetime, timezone
from typing import Callable

from pixpay.common.config import GatewayConfig
from pixpay.common.errors import GatewayError, NotConfiguredError, PersistenceError
from pixpay.common.logging import charge_id_ctx, logger
from pixpay.common.metrics import reconciliations_total
from pixpay.services.payments.gateway import AsaasGateway
from pixpay.services.payments.schemas import ReconciliationResult
from pixpay.services.payments.store import PaymentStore


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StatusReconciler:
    """Mirrors the gateway's current charge status onto payment and order rows."""

    def __init__(
        self,
        config: GatewayConfig,
        store: PaymentStore,
        gateway: AsaasGateway | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.config = config
        self.store = store
        self.gateway = gateway or AsaasGateway(config)
        self.clock = clock

    async def reconcile_status(self, charge_id: str) -> ReconciliationResult:
        if not self.config.api_key:
            reconciliations_total.labels(outcome="not_configured").inc()
            raise NotConfiguredError("payment gateway API key not configured for status checks")

        token = charge_id_ctx.set(charge_id)
        try:
            try:
                charge = await self.gateway.get_charge(charge_id)
            except GatewayError:
                reconciliations_total.labels(outcome="gateway_error").inc()
                raise
            status = charge.status
            updated_at = self.clock()
            logger.info("charge_status_fetched charge_id=%s status=%s", charge_id, status)

            outcome = self._mirror(charge_id, status, updated_at)
            reconciliations_total.labels(outcome=outcome).inc()
            return ReconciliationResult(charge_id=charge_id, status=status, updated_at=updated_at)
        finally:
            charge_id_ctx.reset(token)

    def _mirror(self, charge_id: str, status: str, updated_at: datetime) -> str:
        """Write status to the local rows; returns the outcome label."""

        try:
            record = self.store.get_payment_by_charge(charge_id)
        except PersistenceError as exc:
            logger.warning("payment_lookup_failed charge_id=%s error=%s", charge_id, exc)
            return "lookup_failed"
        if record is None:
            logger.warning("payment_record_not_found charge_id=%s", charge_id)
            return "not_found"

        outcome = "updated"
        try:
            self.store.update_payment_status(charge_id, status, updated_at)
        except PersistenceError as exc:
            logger.warning("payment_status_update_failed charge_id=%s error=%s", charge_id, exc)
            outcome = "partial"
        try:
            self.store.update_order_status(record.order_id, status, updated_at)
        except PersistenceError as exc:
            logger.warning(
                "order_status_update_failed order_id=%s charge_id=%s error=%s",
                record.order_id,
                charge_id,
                exc,
            )
            outcome = "partial"
        if outcome == "updated":
            logger.info("local_status_updated charge_id=%s order_id=%s status=%s", charge_id, record.order_id, status)
        return outcome
