"""Poll the gateway for every non-terminal payment and print a JSON summary."""

import argparse
import asyncio
import json

from pixpay.common.config import settings
from pixpay.common.db import SessionLocal
from pixpay.common.errors import PixPayError
from pixpay.common.logging import configure_logging, logger
from pixpay.common.status import is_terminal, normalize_status
from pixpay.services.payments.reconciler import StatusReconciler
from pixpay.services.payments.store import PaymentStore


async def reconcile_pending(reconciler: StatusReconciler, store: PaymentStore, limit: int) -> dict:
    """Reconcile up to `limit` pending charges; one failure does not stop the batch.

    Every attempt is recorded before the gateway read, so charges that keep
    failing move behind the ones not yet polled.
    """

    summary = {"checked": 0, "settled": 0, "failed": 0, "results": []}
    for charge_id in store.list_pending_charge_ids(limit=limit):
        summary["checked"] += 1
        try:
            store.mark_polled(charge_id, reconciler.clock())
        except PixPayError as exc:
            logger.warning("mark_polled_failed charge_id=%s error=%s", charge_id, exc)
        try:
            result = await reconciler.reconcile_status(charge_id)
        except PixPayError as exc:
            logger.warning("reconcile_pending_failed charge_id=%s error=%s", charge_id, exc)
            summary["failed"] += 1
            summary["results"].append({"paymentId": charge_id, "error": str(exc)})
            continue
        if is_terminal(result.status):
            summary["settled"] += 1
        summary["results"].append(
            {
                "paymentId": charge_id,
                "status": result.status,
                "displayStatus": normalize_status(result.status),
                "updatedAt": result.updated_at.isoformat(),
            }
        )
    return summary


def main() -> None:
    """CLI entrypoint for scheduled status polling."""

    parser = argparse.ArgumentParser(description="Reconcile pending PIX charges against the gateway.")
    parser.add_argument("--limit", type=int, default=100)
    args = parser.parse_args()

    configure_logging()
    store = PaymentStore(SessionLocal)
    reconciler = StatusReconciler(settings.gateway_config(), store)
    summary = asyncio.run(reconcile_pending(reconciler, store, args.limit))
    print(json.dumps(summary, indent=2))


if __name__ == "__main__":
    main()
