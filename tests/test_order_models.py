import pytest

from smm_broker.domain.orders import OPEN_STATUSES, TERMINAL_STATUSES, OrderStatus, can_transition, parse_count


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Pending", OrderStatus.PENDING),
        ("processing", OrderStatus.PROCESSING),
        ("In progress", OrderStatus.IN_PROGRESS),
        ("In_progress", OrderStatus.IN_PROGRESS),
        ("Partial", OrderStatus.PARTIAL),
        ("Completed", OrderStatus.COMPLETED),
        ("Canceled", OrderStatus.CANCELLED),
        ("Cancelled", OrderStatus.CANCELLED),
        ("Refunded", OrderStatus.REFUNDED),
        ("Lost", None),
    ],
)
def test_provider_status_mapping(raw, expected):
    assert OrderStatus.from_provider(raw) is expected


def test_terminal_and_open_statuses_partition_the_machine():
    assert TERMINAL_STATUSES == {OrderStatus.COMPLETED, OrderStatus.CANCELLED, OrderStatus.REFUNDED}
    assert OPEN_STATUSES | TERMINAL_STATUSES == set(OrderStatus)
    assert not OPEN_STATUSES & TERMINAL_STATUSES


@pytest.mark.parametrize(
    ("current", "new", "allowed"),
    [
        (OrderStatus.PENDING, OrderStatus.PROCESSING, True),
        (OrderStatus.PENDING, OrderStatus.COMPLETED, True),
        (OrderStatus.PROCESSING, OrderStatus.IN_PROGRESS, True),
        (OrderStatus.IN_PROGRESS, OrderStatus.PARTIAL, True),
        (OrderStatus.PARTIAL, OrderStatus.IN_PROGRESS, True),
        (OrderStatus.PARTIAL, OrderStatus.REFUNDED, True),
        (OrderStatus.PROCESSING, OrderStatus.PENDING, False),
        (OrderStatus.COMPLETED, OrderStatus.PARTIAL, False),
        (OrderStatus.CANCELLED, OrderStatus.REFUNDED, False),
        (OrderStatus.PENDING, OrderStatus.PENDING, False),
    ],
)
def test_transitions_only_move_forward(current, new, allowed):
    assert can_transition(current, new) is allowed


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("10", 10), (" 42 ", 42), ("12.7", 12), ("abc", 0), ("", 0), (None, 0), (157, 157)],
)
def test_parse_count_uses_leading_integer(raw, expected):
    assert parse_count(raw) == expected
