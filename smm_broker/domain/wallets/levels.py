"""Account level derivation."""

from __future__ import annotations

from decimal import Decimal
from typing import Sequence

DEFAULT_LEVEL_THRESHOLDS: tuple[Decimal, ...] = (Decimal("25000"), Decimal("100000"))


def calculate_account_level(
    total_spent: Decimal,
    thresholds: Sequence[Decimal] = DEFAULT_LEVEL_THRESHOLDS,
) -> int:
    """Level 1 plus one for every spend threshold reached."""
    spent = Decimal(total_spent)
    return 1 + sum(1 for threshold in sorted(thresholds) if spent >= threshold)
