"""Unit tests for gateway status normalization."""

from pixpay.common.status import is_terminal, normalize_status


def test_received_is_shown_as_confirmed():
    """A received PIX counts as confirmed for the buyer."""

    assert normalize_status("RECEIVED") == "CONFIRMED"
    assert normalize_status("confirmed") == "CONFIRMED"


def test_blank_or_unknown_status_is_pending():
    assert normalize_status(None) == "PENDING"
    assert normalize_status("  ") == "PENDING"
    assert normalize_status("SOMETHING_NEW") == "PENDING"
    assert normalize_status(42) == "PENDING"


def test_terminal_statuses():
    assert is_terminal("CONFIRMED")
    assert is_terminal("received")
    assert not is_terminal("PENDING")
    assert not is_terminal("")
