"""
Pricing tests: complement slots, unit prices and order totals.
"""

from decimal import Decimal

import pytest

from orderdesk.blueprints.orders import pricing
from orderdesk.core.exceptions import ValidationError
from orderdesk.core.utils import to_money

GROUPS = {
    "g1": {
        "id": "g1",
        "name": "Topping",
        "is_required": True,
        "options": [
            {"id": "o1", "name": "Ganache", "additional_price": Decimal("0")},
            {"id": "o2", "name": "Strawberries", "additional_price": Decimal("12.50")},
        ],
    },
    "g2": {
        "id": "g2",
        "name": "Candles",
        "is_required": False,
        "options": [{"id": "o3", "name": "Number candle", "additional_price": "3.00"}],
    },
}


class TestSlots:

    @pytest.mark.unit
    def test_one_slot_per_reference(self):
        slots = pricing.complement_slots(["g1", "g1", "g2"], GROUPS)

        assert [slot["slot_id"] for slot in slots] == ["g1-0", "g1-1", "g2-2"]
        assert slots[0]["group_name"] == "Topping"
        assert slots[2]["is_required"] is False

    @pytest.mark.unit
    def test_missing_groups_are_skipped(self):
        slots = pricing.complement_slots(["gone", "g2"], GROUPS)

        assert [slot["slot_id"] for slot in slots] == ["g2-1"]

    @pytest.mark.unit
    def test_option_prices_become_money(self):
        slots = pricing.complement_slots(["g2"], GROUPS)

        assert slots[0]["options"][0]["additional_price"] == Decimal("3.00")


class TestComplements:

    @pytest.mark.unit
    def test_required_slot_must_be_chosen(self):
        slots = pricing.complement_slots(["g1", "g2"], GROUPS)

        with pytest.raises(ValidationError) as exc:
            pricing.resolve_complements(slots, {})

        assert "Topping" in exc.value.message
        assert exc.value.errors == {"g1-0": 'Choose an option for "Topping"'}

    @pytest.mark.unit
    def test_optional_slot_may_stay_empty(self):
        slots = pricing.complement_slots(["g1", "g2"], GROUPS)

        chosen = pricing.resolve_complements(slots, {"g1-0": "o2"})

        assert [c["name"] for c in chosen] == ["Strawberries"]
        assert chosen[0]["group_name"] == "Topping"
        assert chosen[0]["additional_price"] == "12.50"

    @pytest.mark.unit
    def test_option_from_another_group_is_rejected(self):
        slots = pricing.complement_slots(["g1"], GROUPS)

        with pytest.raises(ValidationError):
            pricing.resolve_complements(slots, {"g1-0": "o3"})


class TestTotals:

    @pytest.mark.unit
    def test_unit_price_adds_complements(self):
        complements = [{"additional_price": "12.50"}, {"additional_price": "3.00"}]

        assert pricing.unit_price("50.00", complements) == Decimal("65.50")

    @pytest.mark.unit
    def test_line_total(self):
        assert pricing.line_total(Decimal("65.50"), 3) == Decimal("196.50")

    @pytest.mark.unit
    def test_subtotal_shipping_discount(self):
        totals = pricing.order_totals([{"unit_price": "50.00", "quantity": 1}], "10.00", "5.00")

        assert totals == {
            "subtotal": Decimal("50.00"),
            "shipping_fee": Decimal("10.00"),
            "discount": Decimal("5.00"),
            "total": Decimal("55.00"),
        }

    @pytest.mark.unit
    def test_empty_order(self):
        totals = pricing.order_totals([], None, None)

        assert totals["subtotal"] == Decimal("0.00")
        assert totals["total"] == Decimal("0.00")

    @pytest.mark.unit
    def test_total_matches_rounded_formula(self):
        items = [
            {"unit_price": "19.99", "quantity": 3},
            {"unit_price": "0.10", "quantity": 7},
        ]
        totals = pricing.order_totals(items, "7.35", "2.04")

        expected = to_money(Decimal("59.97") + Decimal("0.70") + Decimal("7.35") - Decimal("2.04"))
        assert totals["total"] == expected == Decimal("65.98")

    @pytest.mark.unit
    def test_rounding_is_half_up(self):
        assert to_money("2.675") == Decimal("2.68")
        assert to_money(2.675) == Decimal("2.68")
        assert to_money("-0.005") == Decimal("-0.01")
