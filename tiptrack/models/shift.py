"""
Core Data Models for TipTrack

These models define the schemas for everything the store persists:
shifts, the single settings record and tip-out templates.
They are designed to:
1. Enforce type safety at runtime
2. Default missing numbers to zero explicitly (no loose coercion)
3. Be JSON-serializable for the local blob store
4. Load records written under the older camelCase field names

DESIGN DECISION: Money, hours and percentages are Decimal.
Arithmetic stays exact until a value is formatted for display.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


def utc_now() -> datetime:
    """Current time in UTC (timezone-aware)."""
    return datetime.now(timezone.utc)


ZERO = Decimal("0")

TIPPED_MINIMUM_WAGE = Decimal("2.13")
FEDERAL_MINIMUM_WAGE = Decimal("7.25")
DEFAULT_FICA_RATE = Decimal("7.65")


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Role(str, Enum):
    """Job role of the person logging shifts."""
    SERVER = "server"
    BARTENDER = "bartender"
    BARBACK = "barback"
    HOST = "host"
    BUSSER = "busser"
    OTHER = "other"

    @property
    def default_wage(self) -> Decimal:
        """
        Base hourly wage suggested during onboarding.

        Servers and bartenders are usually paid the tipped minimum;
        support roles the full federal minimum.
        """
        if self in (Role.SERVER, Role.BARTENDER):
            return TIPPED_MINIMUM_WAGE
        return FEDERAL_MINIMUM_WAGE


class Theme(str, Enum):
    """UI color theme."""
    DARK = "dark"
    LIGHT = "light"


class WeekStart(IntEnum):
    """First day of the week, numbered the way Sunday-first calendars do."""
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6


# =============================================================================
# SHIFT
# =============================================================================

class Shift(BaseModel):
    """
    One logged work session.

    Net tips may go negative when the tip-out is larger than the tips.
    That is not rejected here; validation surfaces it as a warning.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    # Identity
    id: UUID = Field(
        default_factory=uuid4,
        description="Unique shift ID"
    )

    shift_date: date = Field(
        ...,
        validation_alias=AliasChoices("shift_date", "date"),
        description="Calendar date the shift was worked"
    )

    hours_worked: Decimal = Field(
        default=ZERO,
        ge=0,
        validation_alias=AliasChoices("hours_worked", "hoursWorked"),
        description="Hours on the clock"
    )
    cash_tips: Decimal = Field(
        default=ZERO,
        ge=0,
        validation_alias=AliasChoices("cash_tips", "cashTips"),
        description="Tips received in hand"
    )
    credit_tips: Decimal = Field(
        default=ZERO,
        ge=0,
        validation_alias=AliasChoices("credit_tips", "creditTips"),
        description="Tips received via card (paid out on the paycheck)"
    )
    tip_out: Decimal = Field(
        default=ZERO,
        ge=0,
        validation_alias=AliasChoices(
            "tip_out", "tipOut", "tip_out_amount", "tipOutAmount"
        ),
        description="Amount paid out to support staff"
    )

    notes: Optional[str] = Field(
        default=None,
        max_length=1000,
        description="Free-form notes about the shift"
    )

    # Timestamps
    created_at: datetime = Field(
        default_factory=utc_now,
        validation_alias=AliasChoices("created_at", "createdAt"),
        description="When the shift was first saved"
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        validation_alias=AliasChoices("updated_at", "updatedAt"),
        description="Last edit timestamp"
    )

    @field_validator(
        'hours_worked', 'cash_tips', 'credit_tips', 'tip_out', mode='before'
    )
    @classmethod
    def absent_is_zero(cls, v):
        """Treat None and empty input as zero."""
        if v is None or v == "":
            return ZERO
        return v

    @field_validator('notes')
    @classmethod
    def empty_notes_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @property
    def total_tips(self) -> Decimal:
        return self.cash_tips + self.credit_tips

    @property
    def net_tips(self) -> Decimal:
        return self.total_tips - self.tip_out


# =============================================================================
# USER SETTINGS
# =============================================================================

class UserSettings(BaseModel):
    """
    The single per-installation settings record.

    Tax rates are flat percentages (0-100 expected, not clamped).
    Only the wage, the tax rates and week_starts_on feed the
    calculation engine; the rest is presentation configuration.
    """
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    hourly_wage: Decimal = Field(
        default=TIPPED_MINIMUM_WAGE,
        ge=0,
        validation_alias=AliasChoices("hourly_wage", "hourlyWage"),
        description="Base hourly wage"
    )
    federal_tax_rate: Decimal = Field(
        default=Decimal("12"),
        validation_alias=AliasChoices("federal_tax_rate", "federalTaxRate"),
        description="Flat federal withholding percentage"
    )
    state_tax_rate: Decimal = Field(
        default=Decimal("5"),
        validation_alias=AliasChoices("state_tax_rate", "stateTaxRate"),
        description="Flat state withholding percentage"
    )
    fica_rate: Decimal = Field(
        default=DEFAULT_FICA_RATE,
        validation_alias=AliasChoices("fica_rate", "ficaRate"),
        description="Social Security + Medicare percentage"
    )

    role: Role = Role.SERVER
    default_tip_out_percentage: Decimal = Field(
        default=Decimal("3"),
        validation_alias=AliasChoices(
            "default_tip_out_percentage", "defaultTipOutPercentage"
        ),
    )
    week_starts_on: WeekStart = Field(
        default=WeekStart.SUNDAY,
        validation_alias=AliasChoices("week_starts_on", "weekStartsOn"),
    )
    currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
    )
    theme: Theme = Theme.DARK
    onboarding_complete: bool = Field(
        default=False,
        validation_alias=AliasChoices("onboarding_complete", "onboardingComplete"),
    )
    notifications: bool = True

    @field_validator(
        'hourly_wage', 'federal_tax_rate', 'state_tax_rate', 'fica_rate',
        'default_tip_out_percentage',
        mode='before',
    )
    @classmethod
    def absent_is_zero(cls, v):
        if v is None or v == "":
            return ZERO
        return v

    @field_validator('week_starts_on', mode='before')
    @classmethod
    def parse_week_start(cls, v):
        """Accept day names ('sunday', 'Mon', 'tu') as well as 0-6."""
        if isinstance(v, str) and not v.isdigit():
            name = v.strip().lower()
            # Two letters is the shortest unambiguous prefix ('tu', 'th', 'sa')
            matches = [
                day for day in WeekStart
                if len(name) >= 2 and day.name.lower().startswith(name)
            ]
            if len(matches) != 1:
                raise ValueError(f"Unknown week start day: {v!r}")
            return matches[0]
        return v

    @field_validator('currency')
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()


# =============================================================================
# TIP-OUT TEMPLATES
# =============================================================================

class TipOutRecipient(BaseModel):
    """
    One line in a tip-out split.

    Percentages are not range-checked; a split adding up to more
    than 100% is reported by the splitter, not rejected.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    role: str = Field(
        default="",
        max_length=100,
        validation_alias=AliasChoices("role", "name"),
        description="Who receives this share (e.g. Busser)"
    )
    percentage: Decimal = Field(
        default=ZERO,
        description="Share of the tip pool, in percent"
    )

    @field_validator('percentage', mode='before')
    @classmethod
    def absent_is_zero(cls, v):
        if v is None or v == "":
            return ZERO
        return v


class TipOutTemplate(BaseModel):
    """A named, reusable split configuration."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="User label for the template"
    )
    recipients: list[TipOutRecipient] = Field(
        default_factory=list,
        validation_alias=AliasChoices("recipients", "roles"),
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        validation_alias=AliasChoices("created_at", "createdAt"),
    )


def default_templates() -> list[TipOutTemplate]:
    """Templates offered before the user has saved any of their own."""
    return [
        TipOutTemplate(
            name="Standard",
            recipients=[
                TipOutRecipient(role="Busser", percentage=Decimal("15")),
                TipOutRecipient(role="Bartender", percentage=Decimal("10")),
                TipOutRecipient(role="Host", percentage=Decimal("5")),
            ],
        ),
        TipOutTemplate(
            name="Fine Dining",
            recipients=[
                TipOutRecipient(role="Busser", percentage=Decimal("20")),
                TipOutRecipient(role="Bartender", percentage=Decimal("15")),
                TipOutRecipient(role="Food Runner", percentage=Decimal("10")),
                TipOutRecipient(role="Host", percentage=Decimal("5")),
            ],
        ),
    ]


class ExportBundle(BaseModel):
    """Everything the store holds, as exported for backup."""

    shifts: list[Shift] = Field(default_factory=list)
    settings: UserSettings = Field(default_factory=UserSettings)
    templates: list[TipOutTemplate] = Field(
        default_factory=list,
        validation_alias=AliasChoices("templates", "tipOutPresets"),
    )
    exported_at: datetime = Field(
        default_factory=utc_now,
        validation_alias=AliasChoices("exported_at", "exportedAt"),
    )
