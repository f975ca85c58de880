"""
Tip-Out Splitter

Distributes a tip pool across recipients by percentage. Used by the
standalone calculator and for applying saved templates.

Recipient order is preserved; nothing is sorted. Percentages adding
up to more than 100 produce a negative `remaining` and an
`over_allocated` result instead of an error.
"""

from decimal import Decimal
from typing import Iterable, Optional

from tiptrack.engine.calculations import HUNDRED, ZERO, to_decimal
from tiptrack.models.results import SplitAllocation, SplitResult
from tiptrack.models.shift import TipOutRecipient, TipOutTemplate


def split_tip_out(
    total_tips,
    recipients: Iterable[TipOutRecipient],
) -> SplitResult:
    """Split `total_tips` across `recipients` by their percentages."""
    total_tips = to_decimal(total_tips)

    allocations = [
        SplitAllocation(
            role=r.role,
            percentage=r.percentage,
            amount=total_tips * r.percentage / HUNDRED,
        )
        for r in recipients
    ]

    total_allocated = sum((a.amount for a in allocations), ZERO)
    percentage_given = (
        total_allocated / total_tips * HUNDRED if total_tips != 0 else ZERO
    )

    return SplitResult(
        total_tips=total_tips,
        allocations=allocations,
        total_allocated=total_allocated,
        remaining=total_tips - total_allocated,
        percentage_given=percentage_given,
        total_percentage=sum((a.percentage for a in allocations), ZERO),
    )


def calculate_tip_out(
    total_tips,
    template: Optional[TipOutTemplate],
) -> SplitResult:
    """Split using a saved template. No template means nothing is tipped out."""
    if template is None:
        return split_tip_out(total_tips, [])
    return split_tip_out(total_tips, template.recipients)


def tip_out_for_percentage(total_tips, percentage) -> Decimal:
    """Single flat tip-out, e.g. the user's default tip-out percentage."""
    return to_decimal(total_tips) * to_decimal(percentage) / HUNDRED
