"""Gateway charge status vocabulary used by checkout and polling."""

KNOWN_STATUSES: set[str] = {
    "PENDING",
    "AWAITING_RISK_ANALYSIS",
    "RECEIVED",
    "CONFIRMED",
    "RECEIVED_IN_CASH",
    "OVERDUE",
    "REFUND_REQUESTED",
    "REFUND_IN_PROGRESS",
    "REFUNDED",
    "CHARGEBACK_REQUESTED",
    "CHARGEBACK_DISPUTE",
    "AWAITING_CHARGEBACK_REVERSAL",
    "DUNNING_REQUESTED",
    "DUNNING_RECEIVED",
    "DELETED",
}

TERMINAL_STATUSES: set[str] = {
    "RECEIVED",
    "CONFIRMED",
    "RECEIVED_IN_CASH",
    "OVERDUE",
    "REFUNDED",
    "DELETED",
}

# Checkout screens treat a received PIX the same as a confirmed one.
STATUS_ALIASES: dict[str, str] = {"RECEIVED": "CONFIRMED"}


def normalize_status(raw) -> str:
    """Map a gateway status to the value shown to buyers; unknown means PENDING."""

    if not isinstance(raw, str) or not raw.strip():
        return "PENDING"
    status = raw.strip().upper()
    if status not in KNOWN_STATUSES:
        return "PENDING"
    return STATUS_ALIASES.get(status, status)


def is_terminal(status: str) -> bool:
    """True when polling can stop for a charge in this status."""

    return (status or "").upper() in TERMINAL_STATUSES
