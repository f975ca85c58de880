"""
Input Validation

DESIGN DECISION: Validation reports; it never corrects.
The calculation engine computes through odd input (tip-out larger than
tips, percentages over 100, negative gross). Validation is where those
cases get named so the user sees them before saving.

ERRORS (block the save):
- No hours worked

WARNINGS (shown, never blocking):
- Tip-out larger than the tips (negative net tips)
- Unusually long shift
- Shift dated in the future
- Another shift already logged for the same date
- Tip-out percentages adding up to more than 100
- Tax rates outside 0-100
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from tiptrack.config import get_settings
from tiptrack.models.results import SplitResult
from tiptrack.models.shift import Shift, UserSettings
from tiptrack.models.validation import ValidationIssue, ValidationResult
from tiptrack.services.storage import StorageError, TrackerStorageInterface


def _result(issues: list[ValidationIssue]) -> ValidationResult:
    return ValidationResult(
        is_valid=not any(issue.severity == "error" for issue in issues),
        issues=issues,
        warnings=[issue.message for issue in issues if issue.severity == "warning"],
    )


class ShiftValidator:
    """
    Validates shifts, tip-out splits and settings.

    Duplicate-date checks need storage; without it they are skipped.
    """

    def __init__(
        self,
        storage: Optional[TrackerStorageInterface] = None,
    ):
        """
        Initialize validator.

        Args:
            storage: Storage interface for duplicate-date checks.
                     If None, duplicate checking is skipped.
        """
        self._storage = storage
        self._settings = get_settings().app

    def _validate_shift_values(
        self,
        shift: Shift,
        today: date,
    ) -> list[ValidationIssue]:
        issues = []

        if shift.hours_worked <= 0:
            issues.append(ValidationIssue(
                field="hours_worked",
                issue_type="missing",
                message="Please enter hours worked",
                severity="error",
                suggested_fix="Enter the hours you were on the clock",
            ))

        max_hours = Decimal(str(self._settings.max_shift_hours))
        if shift.hours_worked > max_hours:
            issues.append(ValidationIssue(
                field="hours_worked",
                issue_type="suspicious_value",
                message=f"{shift.hours_worked} hours is an unusually long shift",
                severity="warning",
                suggested_fix="Please verify the hours are correct",
            ))

        if shift.net_tips < 0:
            issues.append(ValidationIssue(
                field="tip_out",
                issue_type="negative_net_tips",
                message=(
                    f"Tip-out (${shift.tip_out:,.2f}) is more than the tips "
                    f"received (${shift.total_tips:,.2f})"
                ),
                severity="warning",
                suggested_fix="Check the tip-out and tip amounts",
            ))

        latest = today + timedelta(days=self._settings.future_date_tolerance_days)
        if shift.shift_date > latest:
            issues.append(ValidationIssue(
                field="shift_date",
                issue_type="future_date",
                message=f"Shift date ({shift.shift_date}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        return issues

    async def _check_duplicate_date(self, shift: Shift) -> list[ValidationIssue]:
        """
        Flag another shift on the same date.

        One shift per date is expected but not enforced (doubles happen).
        """
        if self._storage is None:
            return []

        try:
            same_day = await self._storage.get_shifts_by_date_range(
                shift.shift_date, shift.shift_date
            )
        except StorageError:
            # A storage failure should not block logging a shift
            return []

        if any(other.id != shift.id for other in same_day):
            return [ValidationIssue(
                field="shift_date",
                issue_type="potential_duplicate",
                message=f"A shift is already logged for {shift.shift_date}",
                severity="warning",
                suggested_fix="Edit the existing shift if this is the same one",
            )]
        return []

    async def validate(
        self,
        shift: Shift,
        check_duplicates: bool = True,
        today: Optional[date] = None,
    ) -> ValidationResult:
        """
        Validate a shift before saving.

        Args:
            shift: The shift about to be saved or updated
            check_duplicates: Whether to look for other shifts on the same date
            today: Reference date for the future-date check

        Returns:
            ValidationResult with all issues found
        """
        issues = self._validate_shift_values(shift, today or date.today())
        if check_duplicates:
            issues.extend(await self._check_duplicate_date(shift))
        return _result(issues)

    def validate_split(self, split: SplitResult) -> ValidationResult:
        """Check a tip-out split for over-allocation and unnamed recipients."""
        issues = []

        if not split.allocations:
            issues.append(ValidationIssue(
                field="recipients",
                issue_type="missing",
                message="Add at least one tip-out recipient",
                severity="error",
            ))

        if split.over_allocated:
            issues.append(ValidationIssue(
                field="percentage",
                issue_type="over_allocated",
                message=(
                    f"Tip-out percentages add up to {split.total_percentage}%, "
                    "more than the whole tip pool"
                ),
                severity="warning",
                suggested_fix="Lower one or more percentages",
            ))

        unnamed = sum(1 for a in split.allocations if not a.role)
        if unnamed:
            issues.append(ValidationIssue(
                field="role",
                issue_type="missing",
                message=f"{unnamed} recipient(s) have no role name",
                severity="info",
            ))

        return _result(issues)

    def validate_settings(self, settings: UserSettings) -> ValidationResult:
        """Flag tax rates outside 0-100 and a combined rate of 100% or more."""
        issues = []

        rates = {
            "federal_tax_rate": settings.federal_tax_rate,
            "state_tax_rate": settings.state_tax_rate,
            "fica_rate": settings.fica_rate,
        }
        for field, rate in rates.items():
            if rate < 0 or rate > 100:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="out_of_range",
                    message=f"{field.replace('_', ' ').capitalize()} of {rate}% is outside 0-100",
                    severity="warning",
                ))

        combined = sum(rates.values(), Decimal("0"))
        if combined >= 100:
            issues.append(ValidationIssue(
                field="tax_rates",
                issue_type="suspicious_value",
                message=f"Combined tax rate of {combined}% leaves no take-home pay",
                severity="warning",
                suggested_fix="Please verify your tax rates",
            ))

        if settings.hourly_wage == 0:
            issues.append(ValidationIssue(
                field="hourly_wage",
                issue_type="missing",
                message="Hourly wage is $0.00; paychecks will only include tips",
                severity="info",
            ))

        return _result(issues)

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """Short text shown next to the save button."""
        if result.is_valid and not result.warnings:
            return "✅ Looks good!"

        lines = []

        if result.has_errors:
            lines.append("❌ Please fix the following before saving:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please double-check:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
