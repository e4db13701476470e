"""Persistence operations for payment records, orders and email override.

Every operation opens its own session from the injected factory and commits
before returning. SQLAlchemy failures are re-raised as `PersistenceError`.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from pixpay.common.errors import PersistenceError
from pixpay.common.logging import logger
from pixpay.common.status import TERMINAL_STATUSES
from pixpay.services.payments.models import EmailOverrideConfig, Order, PaymentRecord


@dataclass(frozen=True)
class EmailOverride:
    use_override: bool
    override_email: str

    @property
    def active(self) -> bool:
        return self.use_override and bool(self.override_email.strip())


class PaymentStore:
    """Store adapter used by the orchestrator and reconciler."""

    def __init__(self, session_factory) -> None:
        self.session_factory = session_factory

    def get_email_override(self) -> EmailOverride | None:
        """Return the single override row, or None when it was never configured."""

        try:
            with self.session_factory() as db:
                row = db.execute(
                    select(EmailOverrideConfig).order_by(EmailOverrideConfig.id).limit(1)
                ).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"failed to read email override config: {exc}") from exc
        if row is None:
            return None
        return EmailOverride(use_override=bool(row.use_override), override_email=row.override_email or "")

    def save_payment(self, record: PaymentRecord) -> PaymentRecord:
        try:
            with self.session_factory() as db:
                if record.updated_at is None:
                    record.updated_at = datetime.now(timezone.utc)
                db.add(record)
                db.commit()
                return record
        except SQLAlchemyError as exc:
            logger.error("payment_persist_failed charge_id=%s error=%s", record.charge_id, exc)
            raise PersistenceError(details=str(exc)) from exc

    def link_order_to_charge(self, order_id: str, charge_id: str) -> bool:
        """Point the order at its charge. Returns False when the order row is absent."""

        try:
            with self.session_factory() as db:
                result = db.execute(
                    update(Order)
                    .where(Order.id == order_id)
                    .values(charge_id=charge_id, updated_at=datetime.now(timezone.utc))
                )
                db.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"failed to link order {order_id}: {exc}") from exc
        return result.rowcount == 1

    def get_payment_by_charge(self, charge_id: str) -> PaymentRecord | None:
        try:
            with self.session_factory() as db:
                return db.execute(
                    select(PaymentRecord).where(PaymentRecord.charge_id == charge_id)
                ).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"failed to read payment {charge_id}: {exc}") from exc

    def update_payment_status(self, charge_id: str, status: str, updated_at: datetime) -> None:
        try:
            with self.session_factory() as db:
                db.execute(
                    update(PaymentRecord)
                    .where(PaymentRecord.charge_id == charge_id)
                    .values(status=status, updated_at=updated_at)
                )
                db.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"failed to update payment {charge_id}: {exc}") from exc

    def update_order_status(self, order_id: str, status: str, updated_at: datetime) -> None:
        try:
            with self.session_factory() as db:
                db.execute(update(Order).where(Order.id == order_id).values(status=status, updated_at=updated_at))
                db.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"failed to update order {order_id}: {exc}") from exc

    def mark_polled(self, charge_id: str, polled_at: datetime) -> None:
        """Record a poll attempt whatever its outcome so the batch rotates."""

        try:
            with self.session_factory() as db:
                db.execute(
                    update(PaymentRecord)
                    .where(PaymentRecord.charge_id == charge_id)
                    .values(last_polled_at=polled_at)
                )
                db.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"failed to mark payment {charge_id} as polled: {exc}") from exc

    def list_pending_charge_ids(self, limit: int = 100) -> list[str]:
        """Non-terminal charge ids, never-polled first, then least recently polled."""

        try:
            with self.session_factory() as db:
                rows = db.execute(
                    select(PaymentRecord.charge_id)
                    .where(PaymentRecord.status.not_in(sorted(TERMINAL_STATUSES)))
                    .order_by(
                        PaymentRecord.last_polled_at.asc().nulls_first(),
                        PaymentRecord.updated_at,
                        PaymentRecord.charge_id,
                    )
                    .limit(limit)
                ).scalars()
                return list(rows)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"failed to list pending payments: {exc}") from exc
