"""
Calculation Engine

Turns raw shift records and the settings record into earnings, tax and
paycheck figures.

DESIGN DECISION: Every function here is pure.
- No I/O, no logging, no state kept between calls
- Callers re-invoke with the latest inputs whenever anything changes
- Division by zero defines the quotient as 0; nothing here raises for
  well-typed input
- Negative results (tip-out larger than tips, negative gross) are
  computed through and left for validation/presentation to flag
"""

from decimal import Decimal
from typing import Iterable, Optional

from tiptrack.models.results import (
    DayBucket,
    DayStats,
    PaycheckAverages,
    PaycheckBreakdown,
    PaycheckPreview,
    PaycheckSummary,
    ShiftEarnings,
    TaxBreakdown,
    TrendChanges,
    Trends,
    WeeklySummary,
    WeekStats,
)
from tiptrack.models.shift import Shift, UserSettings

ZERO = Decimal("0")
HUNDRED = Decimal("100")

DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def _ratio(numerator: Decimal, denominator: Decimal) -> Decimal:
    """numerator / denominator, or 0 when the denominator is not positive."""
    if denominator > 0:
        return numerator / denominator
    return ZERO


def to_decimal(value) -> Decimal:
    """Convert a number to Decimal. Floats go through str() to keep their printed value."""
    if isinstance(value, Decimal):
        return value
    if value is None:
        return ZERO
    return Decimal(str(value))


def _settings(settings: Optional[UserSettings]) -> UserSettings:
    return settings if settings is not None else UserSettings()


def day_name(shift: Shift) -> str:
    """Short weekday name ('Sun'..'Sat') for a shift's date."""
    return DAY_NAMES[(shift.shift_date.weekday() + 1) % 7]


def percent_change(current: Decimal, previous: Decimal) -> Decimal:
    """
    Percentage change from previous to current.

    A previous value of 0 reports 100 if something appeared from
    nothing and 0 otherwise.
    """
    if previous == 0:
        return HUNDRED if current > 0 else ZERO
    return (current - previous) / previous * HUNDRED


# =============================================================================
# SINGLE SHIFT
# =============================================================================

def calculate_shift_earnings(
    shift: Shift,
    settings: Optional[UserSettings] = None,
) -> ShiftEarnings:
    """Earnings for one shift at the configured hourly wage."""
    settings = _settings(settings)

    total_tips = shift.cash_tips + shift.credit_tips
    net_tips = total_tips - shift.tip_out
    hourly_earnings = shift.hours_worked * settings.hourly_wage
    gross_earnings = net_tips + hourly_earnings

    return ShiftEarnings(
        total_tips=total_tips,
        net_tips=net_tips,
        hourly_earnings=hourly_earnings,
        gross_earnings=gross_earnings,
        effective_hourly_rate=_ratio(gross_earnings, shift.hours_worked),
        tip_out=shift.tip_out,
    )


# =============================================================================
# TAXES
# =============================================================================

def calculate_taxes(
    gross_earnings: Decimal,
    settings: Optional[UserSettings] = None,
) -> TaxBreakdown:
    """
    Flat-rate withholding on gross earnings.

    Negative gross is not clamped; the taxes come out negative too.
    """
    settings = _settings(settings)
    gross_earnings = to_decimal(gross_earnings)

    federal_tax = gross_earnings * (settings.federal_tax_rate / HUNDRED)
    state_tax = gross_earnings * (settings.state_tax_rate / HUNDRED)
    fica_tax = gross_earnings * (settings.fica_rate / HUNDRED)
    total_tax = federal_tax + state_tax + fica_tax

    return TaxBreakdown(
        federal_tax=federal_tax,
        state_tax=state_tax,
        fica_tax=fica_tax,
        total_tax=total_tax,
        net_earnings=gross_earnings - total_tax,
        effective_tax_rate=_ratio(total_tax, gross_earnings) * HUNDRED,
    )


# =============================================================================
# PAYCHECK PREVIEW
# =============================================================================

def calculate_paycheck_preview(
    shifts: Iterable[Shift],
    settings: Optional[UserSettings] = None,
) -> PaycheckPreview:
    """
    Aggregate earnings, taxes and take-home over a set of shifts.

    Take-home is split into the cash channel (cash tips, less their
    share of the tip-out) and the paycheck channel (credit tips less
    their share of the tip-out, plus wages, taxed on their own).
    """
    settings = _settings(settings)
    shifts = list(shifts)

    total_hours = sum((s.hours_worked for s in shifts), ZERO)
    total_cash_tips = sum((s.cash_tips for s in shifts), ZERO)
    total_credit_tips = sum((s.credit_tips for s in shifts), ZERO)
    total_tip_out = sum((s.tip_out for s in shifts), ZERO)

    total_tips = total_cash_tips + total_credit_tips
    net_tips = total_tips - total_tip_out
    hourly_earnings = total_hours * settings.hourly_wage
    gross_earnings = net_tips + hourly_earnings

    taxes = calculate_taxes(gross_earnings, settings)

    cash_weight = _ratio(total_cash_tips, total_tips)
    credit_weight = _ratio(total_credit_tips, total_tips)

    cash_take_home = total_cash_tips - total_tip_out * cash_weight
    paycheck_gross = (
        total_credit_tips - total_tip_out * credit_weight + hourly_earnings
    )
    paycheck_taxes = calculate_taxes(paycheck_gross, settings).total_tax
    paycheck_net = paycheck_gross - paycheck_taxes

    shift_count = Decimal(len(shifts))

    return PaycheckPreview(
        summary=PaycheckSummary(
            total_shifts=len(shifts),
            total_hours=total_hours,
            total_cash_tips=total_cash_tips,
            total_credit_tips=total_credit_tips,
            total_tip_out=total_tip_out,
            total_tips=total_tips,
            net_tips=net_tips,
            hourly_earnings=hourly_earnings,
            gross_earnings=gross_earnings,
        ),
        taxes=taxes,
        breakdown=PaycheckBreakdown(
            cash_take_home=cash_take_home,
            paycheck_gross=paycheck_gross,
            paycheck_taxes=paycheck_taxes,
            paycheck_net=paycheck_net,
            total_take_home=cash_take_home + paycheck_net,
        ),
        averages=PaycheckAverages(
            tips_per_shift=_ratio(net_tips, shift_count),
            hours_per_shift=_ratio(total_hours, shift_count),
            effective_hourly_rate=_ratio(gross_earnings, total_hours),
        ),
    )


# =============================================================================
# WEEKLY SUMMARY
# =============================================================================

def calculate_weekly_summary(
    shifts: Iterable[Shift],
    settings: Optional[UserSettings] = None,
) -> WeeklySummary:
    """
    Paycheck preview plus a breakdown by day of the week.

    Day buckets sum net tips (tip-out already taken off). Days are
    ranked by average net tips per shift with a stable sort, so ties
    keep the order in which the days were first seen.
    """
    settings = _settings(settings)
    shifts = list(shifts)

    grouped: dict[str, list[Shift]] = {}
    for shift in shifts:
        grouped.setdefault(day_name(shift), []).append(shift)

    by_day: dict[str, DayBucket] = {}
    day_stats: list[DayStats] = []
    for day, day_shifts in grouped.items():
        total_tips = sum(
            (calculate_shift_earnings(s, settings).net_tips for s in day_shifts),
            ZERO,
        )
        total_hours = sum((s.hours_worked for s in day_shifts), ZERO)
        by_day[day] = DayBucket(
            day=day,
            shifts=day_shifts,
            total_tips=total_tips,
            total_hours=total_hours,
        )
        day_stats.append(DayStats(
            day=day,
            shifts=day_shifts,
            total_tips=total_tips,
            total_hours=total_hours,
            avg_tips=total_tips / len(day_shifts),
        ))

    ranked = sorted(day_stats, key=lambda d: d.avg_tips, reverse=True)

    return WeeklySummary(
        preview=calculate_paycheck_preview(shifts, settings),
        by_day=by_day,
        day_stats=day_stats,
        best_day=ranked[0] if ranked else None,
        worst_day=ranked[-1] if ranked else None,
    )


def calculate_week_stats(
    shifts: Iterable[Shift],
    settings: Optional[UserSettings] = None,
) -> WeekStats:
    """
    Headline numbers for a week of shifts.

    `daily_tips` holds gross tips per weekday, every day present,
    ordered from the configured first day of the week.
    """
    settings = _settings(settings)
    shifts = list(shifts)

    start = int(settings.week_starts_on)
    ordered_days = [DAY_NAMES[(start + i) % 7] for i in range(7)]
    daily_tips = {day: ZERO for day in ordered_days}
    for shift in shifts:
        daily_tips[day_name(shift)] += shift.total_tips

    total_tips = sum((s.total_tips for s in shifts), ZERO)
    net_tips = sum((s.net_tips for s in shifts), ZERO)

    return WeekStats(
        shift_count=len(shifts),
        total_hours=sum((s.hours_worked for s in shifts), ZERO),
        total_tips=total_tips,
        net_tips=net_tips,
        avg_tips_per_shift=_ratio(net_tips, Decimal(len(shifts))),
        daily_tips=daily_tips,
    )


# =============================================================================
# TRENDS
# =============================================================================

def calculate_trends(
    current_shifts: Iterable[Shift],
    previous_shifts: Iterable[Shift],
    settings: Optional[UserSettings] = None,
) -> Trends:
    """Compare two periods (e.g. this week vs. last week)."""
    settings = _settings(settings)

    current = calculate_paycheck_preview(current_shifts, settings)
    previous = calculate_paycheck_preview(previous_shifts, settings)

    return Trends(
        current=current,
        previous=previous,
        changes=TrendChanges(
            total_tips=percent_change(
                current.summary.net_tips, previous.summary.net_tips
            ),
            total_hours=percent_change(
                current.summary.total_hours, previous.summary.total_hours
            ),
            effective_hourly_rate=percent_change(
                current.averages.effective_hourly_rate,
                previous.averages.effective_hourly_rate,
            ),
            gross_earnings=percent_change(
                current.summary.gross_earnings, previous.summary.gross_earnings
            ),
        ),
    )


__all__ = [
    "DAY_NAMES",
    "calculate_paycheck_preview",
    "calculate_shift_earnings",
    "calculate_taxes",
    "calculate_trends",
    "calculate_week_stats",
    "calculate_weekly_summary",
    "day_name",
    "percent_change",
    "to_decimal",
]
