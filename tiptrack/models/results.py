"""
Result Models for the Calculation Engine

Every engine and splitter operation returns one of these records.
They are frozen: results are values, computed fresh on each call.

DESIGN DECISION: No dict-shaped results. Named, typed fields give
the presentation layer and the test suite a stable contract.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from tiptrack.models.shift import Shift

ZERO = Decimal("0")


class _Result(BaseModel):
    model_config = ConfigDict(frozen=True)


# =============================================================================
# SINGLE SHIFT / TAXES
# =============================================================================

class ShiftEarnings(_Result):
    """Earnings derived from a single shift."""

    total_tips: Decimal
    net_tips: Decimal
    hourly_earnings: Decimal
    gross_earnings: Decimal
    effective_hourly_rate: Decimal
    tip_out: Decimal


class TaxBreakdown(_Result):
    """Flat-rate withholding estimate for an amount of gross earnings."""

    federal_tax: Decimal
    state_tax: Decimal
    fica_tax: Decimal
    total_tax: Decimal
    net_earnings: Decimal
    effective_tax_rate: Decimal


# =============================================================================
# PAYCHECK PREVIEW
# =============================================================================

class PaycheckSummary(_Result):
    """Totals over a set of shifts."""

    total_shifts: int
    total_hours: Decimal
    total_cash_tips: Decimal
    total_credit_tips: Decimal
    total_tip_out: Decimal
    total_tips: Decimal
    net_tips: Decimal
    hourly_earnings: Decimal
    gross_earnings: Decimal


class PaycheckBreakdown(_Result):
    """
    Take-home split between the cash channel and the paycheck channel.

    Cash tips go home the same night; credit tips and wages arrive on
    the paycheck and are taxed there. The tip-out is charged to each
    channel in proportion to its share of the tips.
    """

    cash_take_home: Decimal
    paycheck_gross: Decimal
    paycheck_taxes: Decimal
    paycheck_net: Decimal
    total_take_home: Decimal


class PaycheckAverages(_Result):
    tips_per_shift: Decimal
    hours_per_shift: Decimal
    effective_hourly_rate: Decimal


class PaycheckPreview(_Result):
    """Aggregated earnings, taxes and take-home for a set of shifts."""

    summary: PaycheckSummary
    taxes: TaxBreakdown
    breakdown: PaycheckBreakdown
    averages: PaycheckAverages


# =============================================================================
# WEEKLY SUMMARY / WEEK STATS
# =============================================================================

class DayBucket(_Result):
    """Shifts worked on one day of the week."""

    day: str
    shifts: list[Shift] = Field(default_factory=list)
    total_tips: Decimal = ZERO
    total_hours: Decimal = ZERO


class DayStats(DayBucket):
    avg_tips: Decimal = ZERO


class WeeklySummary(_Result):
    """Paycheck preview plus a per-weekday breakdown."""

    preview: PaycheckPreview
    by_day: dict[str, DayBucket]
    day_stats: list[DayStats]
    best_day: Optional[DayStats] = None
    worst_day: Optional[DayStats] = None


class WeekStats(_Result):
    """Headline numbers for the dashboard's week tile."""

    shift_count: int
    total_hours: Decimal
    total_tips: Decimal
    net_tips: Decimal
    avg_tips_per_shift: Decimal
    daily_tips: dict[str, Decimal]


# =============================================================================
# TRENDS
# =============================================================================

class TrendChanges(_Result):
    """Percentage change from the previous period to the current one."""

    total_tips: Decimal
    total_hours: Decimal
    effective_hourly_rate: Decimal
    gross_earnings: Decimal


class Trends(_Result):
    current: PaycheckPreview
    previous: PaycheckPreview
    changes: TrendChanges


# =============================================================================
# TIP-OUT SPLIT
# =============================================================================

class SplitAllocation(_Result):
    """One recipient's share of the tip pool."""

    role: str
    percentage: Decimal
    amount: Decimal


class SplitResult(_Result):
    """
    Outcome of splitting a tip pool.

    `remaining` is what the earner keeps; it goes negative when the
    percentages add up to more than 100.
    """

    total_tips: Decimal
    allocations: list[SplitAllocation] = Field(default_factory=list)
    total_allocated: Decimal = ZERO
    remaining: Decimal = ZERO
    percentage_given: Decimal = ZERO
    total_percentage: Decimal = ZERO

    @property
    def over_allocated(self) -> bool:
        """True when the recipients are owed more than the whole pool."""
        return self.total_percentage > 100

    @property
    def amounts(self) -> list[Decimal]:
        return [a.amount for a in self.allocations]
