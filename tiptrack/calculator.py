"""
Tip-Out Calculator Session

Holds the calculator's editable state: the tip pool and an ordered list
of recipients. The split itself is always recomputed from the current
snapshot by the splitter; nothing is cached here.
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from tiptrack.engine.calculations import ZERO, to_decimal
from tiptrack.engine.splitter import split_tip_out
from tiptrack.models.results import SplitResult
from tiptrack.models.shift import TipOutRecipient, TipOutTemplate


class CalculatorError(Exception):
    """Base exception for calculator edits."""
    pass


class LastRecipientError(CalculatorError):
    """The calculator must keep at least one recipient."""
    pass


class UnknownRecipientError(CalculatorError):
    pass


class RecipientRow(BaseModel):
    """One editable line in the calculator. `amount` is display-only."""

    role: str = ""
    percentage: Decimal = ZERO
    amount: Decimal = ZERO
    id: UUID = Field(default_factory=uuid4)


DEFAULT_RECIPIENTS = (
    ("Busser", Decimal("15")),
    ("Bartender", Decimal("5")),
    ("Host", Decimal("3")),
)


class TipOutCalculator:
    """
    Live state of the tip-out calculator.

    Every edit leaves `amount` on the rows stale until `recalculate()`
    runs against the new snapshot.
    """

    def __init__(
        self,
        total_tips=ZERO,
        recipients: Optional[list[TipOutRecipient]] = None,
    ):
        self.total_tips = to_decimal(total_tips)
        if recipients is None:
            self._rows = [
                RecipientRow(role=role, percentage=pct)
                for role, pct in DEFAULT_RECIPIENTS
            ]
        else:
            self._rows = [
                RecipientRow(role=r.role, percentage=r.percentage)
                for r in recipients
            ]

    @property
    def recipients(self) -> list[RecipientRow]:
        return list(self._rows)

    def set_total_tips(self, total_tips) -> None:
        self.total_tips = to_decimal(total_tips)

    def _find(self, recipient_id: UUID) -> RecipientRow:
        for row in self._rows:
            if row.id == recipient_id:
                return row
        raise UnknownRecipientError(f"No recipient with id {recipient_id}")

    def add_recipient(self, role: str = "", percentage=ZERO) -> RecipientRow:
        row = RecipientRow(role=role, percentage=to_decimal(percentage))
        self._rows.append(row)
        return row

    def update_recipient(
        self,
        recipient_id: UUID,
        role: Optional[str] = None,
        percentage=None,
    ) -> RecipientRow:
        row = self._find(recipient_id)
        if role is not None:
            row.role = role
        if percentage is not None:
            row.percentage = to_decimal(percentage)
        return row

    def remove_recipient(self, recipient_id: UUID) -> None:
        row = self._find(recipient_id)
        if len(self._rows) <= 1:
            raise LastRecipientError("You need at least one recipient.")
        self._rows.remove(row)

    def _snapshot(self) -> list[TipOutRecipient]:
        return [
            TipOutRecipient(role=row.role, percentage=row.percentage)
            for row in self._rows
        ]

    def result(self) -> SplitResult:
        """Split the current tip pool across the current recipients."""
        return split_tip_out(self.total_tips, self._snapshot())

    def recalculate(self) -> SplitResult:
        """Compute the split and copy each amount back onto its row."""
        split = self.result()
        for row, allocation in zip(self._rows, split.allocations):
            row.amount = allocation.amount
        return split

    def to_template(self, name: str) -> TipOutTemplate:
        """Capture the current roles and percentages as a named template."""
        return TipOutTemplate(name=name, recipients=self._snapshot())

    def load_template(self, template: TipOutTemplate) -> None:
        """
        Replace the recipients with a template's.

        Amounts start at zero until the next recalculation.
        """
        if not template.recipients:
            raise LastRecipientError(
                f"Template '{template.name}' has no recipients"
            )
        self._rows = [
            RecipientRow(role=r.role, percentage=r.percentage)
            for r in template.recipients
        ]
