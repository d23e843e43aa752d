"""
Order pricing: complement slots, line prices and order totals.

All amounts are ``Decimal`` rounded to cents (half up). Functions here work
on plain dicts so the order wizard and the order service share them.
"""

from decimal import Decimal
from typing import Dict, Iterable, List, Mapping

from orderdesk.core.exceptions import ValidationError
from orderdesk.core.utils import to_money


def complement_slots(group_ids: Iterable, groups_by_id: Mapping[str, dict]) -> List[dict]:
    """
    Expand a product's ordered group references into selection slots.

    A group referenced twice yields two slots; the slot id combines the
    group id with the position of the reference. References to groups that
    no longer exist are skipped.

    Args:
        group_ids: The product's ``complement_group_ids``
        groups_by_id: Group dicts (``name``, ``is_required``, ``options``) keyed by str(id)

    Returns:
        List of slot dicts
    """
    slots = []
    for idx, group_id in enumerate(group_ids or []):
        group = groups_by_id.get(str(group_id))
        if group is None:
            continue
        slots.append({
            "slot_id": f"{group_id}-{idx}",
            "group_id": str(group_id),
            "group_name": group["name"],
            "is_required": bool(group.get("is_required")),
            "options": [
                {
                    "id": str(option["id"]),
                    "name": option["name"],
                    "additional_price": to_money(option.get("additional_price")),
                }
                for option in group.get("options", [])
            ],
        })
    return slots


def resolve_complements(slots: List[dict], selections: Mapping[str, str]) -> List[dict]:
    """
    Turn ``slot_id -> option_id`` selections into the complement snapshot
    stored on an order item.

    Raises:
        ValidationError: one entry per required slot left empty (naming its
            group) or per selection that is not an option of its slot
    """
    selections = selections or {}
    chosen = []
    errors: Dict[str, str] = {}

    for slot in slots:
        option_id = selections.get(slot["slot_id"])
        if not option_id:
            if slot["is_required"]:
                errors[slot["slot_id"]] = f'Choose an option for "{slot["group_name"]}"'
            continue

        option = next((o for o in slot["options"] if o["id"] == str(option_id)), None)
        if option is None:
            errors[slot["slot_id"]] = f'Invalid option for "{slot["group_name"]}"'
            continue

        chosen.append({
            "id": option["id"],
            "name": option["name"],
            "additional_price": str(option["additional_price"]),
            "group_id": slot["group_id"],
            "group_name": slot["group_name"],
        })

    if errors:
        missing = ", ".join(
            slot["group_name"] for slot in slots if slot["slot_id"] in errors
        )
        raise ValidationError(f"Complement selection incomplete: {missing}", errors=errors)

    return chosen


def unit_price(base_price, complements: Iterable[Mapping]) -> Decimal:
    """Base price plus the additional price of every chosen complement."""
    extras = sum((to_money(c.get("additional_price")) for c in complements), Decimal("0"))
    return to_money(to_money(base_price) + extras)


def line_total(price, quantity: int) -> Decimal:
    return to_money(to_money(price) * int(quantity))


def order_totals(items: Iterable[Mapping], shipping_fee=0, discount=0) -> dict:
    """
    Compute subtotal and total for a list of items with ``unit_price`` and ``quantity``.

        total = round(subtotal + shipping_fee - discount, 2)
    """
    subtotal = sum(
        (line_total(item["unit_price"], item["quantity"]) for item in items),
        Decimal("0"),
    )
    subtotal = to_money(subtotal)
    shipping_fee = to_money(shipping_fee)
    discount = to_money(discount)
    return {
        "subtotal": subtotal,
        "shipping_fee": shipping_fee,
        "discount": discount,
        "total": to_money(subtotal + shipping_fee - discount),
    }
