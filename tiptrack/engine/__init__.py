"""Calculation engine package: pure earnings, tax, week and split math."""

from tiptrack.engine.calculations import (
    DAY_NAMES,
    calculate_paycheck_preview,
    calculate_shift_earnings,
    calculate_taxes,
    calculate_trends,
    calculate_week_stats,
    calculate_weekly_summary,
    day_name,
    percent_change,
    to_decimal,
)
from tiptrack.engine.formatting import (
    format_currency,
    format_hours,
    format_percentage,
)
from tiptrack.engine.splitter import (
    calculate_tip_out,
    split_tip_out,
    tip_out_for_percentage,
)
from tiptrack.engine.weeks import (
    filter_shifts_in_range,
    shifts_for_week,
    sunday_index,
    week_bounds,
)

__all__ = [
    "DAY_NAMES",
    "calculate_paycheck_preview",
    "calculate_shift_earnings",
    "calculate_taxes",
    "calculate_tip_out",
    "calculate_trends",
    "calculate_week_stats",
    "calculate_weekly_summary",
    "day_name",
    "filter_shifts_in_range",
    "format_currency",
    "format_hours",
    "format_percentage",
    "percent_change",
    "shifts_for_week",
    "split_tip_out",
    "sunday_index",
    "tip_out_for_percentage",
    "to_decimal",
    "week_bounds",
]
