"""Batch polling over non-terminal payment records."""

import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from pixpay.services.payments.models import PaymentRecord
from pixpay.services.payments.reconciler import StatusReconciler
from scripts.reconcile_pending import reconcile_pending


def add_record(session_factory, charge_id, status):
    with session_factory() as db:
        db.add(
            PaymentRecord(
                order_id=f"order-{charge_id}",
                charge_id=charge_id,
                status=status,
                amount=Decimal("10.00"),
                qr_payload="00020126580014br.gov.bcb.pix",
            )
        )
        db.commit()


def test_only_pending_records_are_polled(gateway_config, store, fake_gateway, session_factory):
    add_record(session_factory, "pay_a", "PENDING")
    add_record(session_factory, "pay_b", "CONFIRMED")
    add_record(session_factory, "pay_c", "PENDING")
    fake_gateway.remote_status.update({"pay_a": "RECEIVED", "pay_c": "PENDING"})

    assert sorted(store.list_pending_charge_ids()) == ["pay_a", "pay_c"]

    reconciler = StatusReconciler(gateway_config, store, gateway=fake_gateway)
    summary = asyncio.run(reconcile_pending(reconciler, store, limit=10))

    assert summary["checked"] == 2
    assert summary["settled"] == 1
    assert summary["failed"] == 0
    by_id = {item["paymentId"]: item for item in summary["results"]}
    assert by_id["pay_a"]["displayStatus"] == "CONFIRMED"
    assert store.list_pending_charge_ids() == ["pay_c"]


def test_gateway_failure_does_not_stop_the_batch(gateway_config, store, fake_gateway, session_factory):
    add_record(session_factory, "pay_gone", "PENDING")
    add_record(session_factory, "pay_ok", "PENDING")
    fake_gateway.remote_status["pay_ok"] = "CONFIRMED"

    reconciler = StatusReconciler(gateway_config, store, gateway=fake_gateway)
    summary = asyncio.run(reconcile_pending(reconciler, store, limit=10))

    assert summary["checked"] == 2
    assert summary["failed"] == 1
    assert summary["settled"] == 1


def test_failing_charge_rotates_behind_other_pending_charges(gateway_config, store, fake_gateway, session_factory):
    """A charge the gateway keeps rejecting must not hold the batch slot forever."""

    add_record(session_factory, "pay_gone", "PENDING")
    add_record(session_factory, "pay_ok", "PENDING")
    fake_gateway.remote_status["pay_ok"] = "PENDING"
    ticks = iter(datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc) + timedelta(seconds=i) for i in range(100))
    reconciler = StatusReconciler(gateway_config, store, gateway=fake_gateway, clock=lambda: next(ticks))

    polled = []
    for _ in range(4):
        summary = asyncio.run(reconcile_pending(reconciler, store, limit=1))
        polled.extend(item["paymentId"] for item in summary["results"])

    assert polled == ["pay_gone", "pay_ok", "pay_gone", "pay_ok"]
    with session_factory() as db:
        gone = db.query(PaymentRecord).filter_by(charge_id="pay_gone").one()
    assert gone.status == "PENDING"
    assert gone.last_polled_at is not None
