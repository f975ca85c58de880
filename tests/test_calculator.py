"""Tests for the tip-out calculator session."""

import pytest
from decimal import Decimal
from uuid import uuid4

from tiptrack.calculator import (
    LastRecipientError,
    TipOutCalculator,
    UnknownRecipientError,
)
from tiptrack.models.shift import TipOutRecipient, TipOutTemplate, default_templates


class TestTipOutCalculator:
    """Tests for editing recipients and recomputing the split."""

    def test_default_recipients(self):
        calculator = TipOutCalculator()
        assert [(r.role, r.percentage) for r in calculator.recipients] == [
            ("Busser", Decimal("15")),
            ("Bartender", Decimal("5")),
            ("Host", Decimal("3")),
        ]

    def test_recalculate_sets_amounts(self):
        calculator = TipOutCalculator(total_tips=Decimal("200"))
        split = calculator.recalculate()
        assert [r.amount for r in calculator.recipients] == [
            Decimal("30"), Decimal("10"), Decimal("6"),
        ]
        assert split.remaining == Decimal("154")
        assert split.percentage_given == Decimal("23")

    def test_edits_follow_latest_snapshot(self):
        """Each recalculation uses the current pool and percentages."""
        calculator = TipOutCalculator(total_tips=100)
        busser = calculator.recipients[0]
        calculator.update_recipient(busser.id, percentage="20")
        calculator.set_total_tips(Decimal("50"))
        split = calculator.recalculate()
        assert split.allocations[0].amount == Decimal("10")

    def test_add_recipient(self):
        calculator = TipOutCalculator(total_tips=Decimal("100"))
        row = calculator.add_recipient("Food Runner", Decimal("4"))
        assert calculator.recipients[-1].id == row.id
        assert calculator.result().allocations[-1].amount == Decimal("4")

    def test_rename_recipient(self):
        calculator = TipOutCalculator()
        host = calculator.recipients[2]
        calculator.update_recipient(host.id, role="Hostess")
        assert calculator.result().allocations[2].role == "Hostess"

    def test_remove_recipient(self):
        calculator = TipOutCalculator()
        calculator.remove_recipient(calculator.recipients[0].id)
        assert [r.role for r in calculator.recipients] == ["Bartender", "Host"]

    def test_cannot_remove_last_recipient(self):
        calculator = TipOutCalculator(
            recipients=[TipOutRecipient(role="Busser", percentage=Decimal("10"))]
        )
        with pytest.raises(LastRecipientError):
            calculator.remove_recipient(calculator.recipients[0].id)
        assert len(calculator.recipients) == 1

    def test_unknown_recipient(self):
        calculator = TipOutCalculator()
        with pytest.raises(UnknownRecipientError):
            calculator.update_recipient(uuid4(), percentage=5)

    def test_recipients_property_is_a_copy(self):
        calculator = TipOutCalculator()
        calculator.recipients.clear()
        assert len(calculator.recipients) == 3


class TestCalculatorTemplates:
    """Tests for moving between templates and the calculator."""

    def test_load_template_resets_amounts(self):
        calculator = TipOutCalculator(total_tips=Decimal("100"))
        calculator.recalculate()
        calculator.load_template(default_templates()[1])
        assert [r.role for r in calculator.recipients] == [
            "Busser", "Bartender", "Food Runner", "Host",
        ]
        assert all(r.amount == Decimal("0") for r in calculator.recipients)
        assert calculator.result().total_allocated == Decimal("50")

    def test_load_empty_template(self):
        calculator = TipOutCalculator()
        with pytest.raises(LastRecipientError):
            calculator.load_template(TipOutTemplate(name="Empty"))
        assert len(calculator.recipients) == 3

    def test_to_template(self):
        calculator = TipOutCalculator()
        template = calculator.to_template("Weeknight")
        assert template.name == "Weeknight"
        assert [r.percentage for r in template.recipients] == [
            Decimal("15"), Decimal("5"), Decimal("3"),
        ]
