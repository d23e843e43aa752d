"""
Order wizard: a three-step state machine for taking an order.

    1 SELECT_CUSTOMER    find by phone, or quick-register
    2 DELIVERY_DETAILS   pickup/delivery, date, time, address
    3 ITEMS_AND_PAYMENT  items with complements, fees, statuses, tags
    -> submitted         order created (or replaced in edit mode)

The draft is saved to a StateStore after every transition, so a reload
resumes where the user stopped. Data gathered in a step is merged into the
draft and survives going back. Editing an existing order starts at step 2
and cannot go back to step 1: the customer of an order is fixed.

Collaborators (customers, catalog, persistence) are reached through an
OrderGateway; the wizard itself never touches the database.
"""

from copy import deepcopy
from typing import Optional

from orderdesk.blueprints.orders import pricing
from orderdesk.blueprints.wizard.gateway import OrderGateway
from orderdesk.core.constants import PHONE_DIGITS
from orderdesk.core.exceptions import (
    ValidationError,
    WizardNotStartedError,
    WizardStepError,
    NotFoundError,
)
from orderdesk.core.state_store import StateStore, wizard_state_key, open_order_key
from orderdesk.core.utils import only_digits, to_money

SELECT_CUSTOMER = 1
DELIVERY_DETAILS = 2
ITEMS_AND_PAYMENT = 3

STEP_NAMES = {
    SELECT_CUSTOMER: "select_customer",
    DELIVERY_DETAILS: "delivery_details",
    ITEMS_AND_PAYMENT: "items_and_payment",
}

PICKUP = "pickup"
DELIVERY = "delivery"
PAYMENT_STATUSES = ("Paid", "Unpaid")
FULFILLMENT_STATUSES = ("Delivered", "Not Delivered")

DELIVERY_FIELDS = ("delivery_type", "delivery_date", "delivery_time", "address_id")
PAYMENT_FIELDS = ("shipping_fee", "discount", "payment_status", "fulfillment_status", "note", "tag_ids")


def initial_order_data() -> dict:
    return {
        "customer": None,
        "delivery_type": PICKUP,
        "delivery_date": "",
        "delivery_time": "",
        "address_id": None,
        "items": [],
        "shipping_fee": "0.00",
        "discount": "0.00",
        "payment_status": "Unpaid",
        "fulfillment_status": "Not Delivered",
        "note": None,
        "tag_ids": [],
    }


class OrderWizard:
    """
    One user's order wizard in one store.

    Args:
        gateway: Access to customers, catalog and order persistence
        state_store: Where the draft lives between requests
        store_slug: Store the order is taken for
        user_id: Whose draft this is
    """

    def __init__(self, gateway: OrderGateway, state_store: StateStore, store_slug: str, user_id):
        self.gateway = gateway
        self.state_store = state_store
        self.store_slug = store_slug
        self.key = wizard_state_key(store_slug, user_id)
        self.detail_key = open_order_key(store_slug, user_id)
        self.state = state_store.get(self.key)

    # ------------------------------------------------------------------
    # State handling
    # ------------------------------------------------------------------

    @property
    def started(self) -> bool:
        return self.state is not None

    @property
    def step(self) -> Optional[int]:
        return self.state["step"] if self.state else None

    @property
    def data(self) -> dict:
        self._require_started()
        return self.state["data"]

    def _require_started(self):
        if self.state is None:
            raise WizardNotStartedError()

    def _require_step(self, step: int):
        self._require_started()
        if self.state["step"] != step:
            raise WizardStepError(
                f"Only allowed at step {step} ({STEP_NAMES[step]}); "
                f"the wizard is at step {self.state['step']}"
            )

    def _merge(self, updates: dict, allowed) -> None:
        for key in allowed:
            if key in updates:
                self.state["data"][key] = deepcopy(updates[key])

    def _save(self) -> None:
        self.state_store.set(self.key, self.state)

    def snapshot(self) -> dict:
        """The draft as returned to clients, with computed totals."""
        self._require_started()
        state = deepcopy(self.state)
        state["step_name"] = STEP_NAMES[state["step"]]
        state["totals"] = {k: str(v) for k, v in self.totals().items()}
        return state

    def totals(self) -> dict:
        data = self.data
        return pricing.order_totals(data["items"], data["shipping_fee"], data["discount"])

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, order_id=None) -> dict:
        """
        Begin a new draft, discarding any previous one.

        With ``order_id`` the order is loaded and the wizard opens at step 2
        in edit mode.
        """
        data = initial_order_data()
        if order_id is not None:
            data.update(self.gateway.load_order(order_id))
            self.state = {
                "store_slug": self.store_slug,
                "step": DELIVERY_DETAILS,
                "edit_mode": True,
                "order_id": str(order_id),
                "data": data,
            }
        else:
            self.state = {
                "store_slug": self.store_slug,
                "step": SELECT_CUSTOMER,
                "edit_mode": False,
                "order_id": None,
                "data": data,
            }
        self._save()
        return self.snapshot()

    def cancel(self) -> None:
        self.state_store.delete(self.key)
        self.state = None

    # ------------------------------------------------------------------
    # Step 1: customer
    # ------------------------------------------------------------------

    @staticmethod
    def _valid_phone(phone: str) -> str:
        digits = only_digits(phone)
        if len(digits) < PHONE_DIGITS:
            raise ValidationError("Invalid phone number", errors={"phone": ["Phone must have at least 11 digits"]})
        return digits

    def lookup_customer(self, phone: str) -> Optional[dict]:
        """
        Find the customer by phone and select them.

        Returns:
            The customer, or None when the caller should offer quick registration

        Raises:
            ValidationError: If fewer than 11 digits are given
        """
        self._require_step(SELECT_CUSTOMER)
        digits = self._valid_phone(phone)

        customer = self.gateway.find_customer_by_phone(digits)
        if customer is not None:
            self.state["data"]["customer"] = customer
            self._save()
        return customer

    def register_customer(self, name: str, phone: str) -> dict:
        """Quick registration from the wizard; the new customer is selected."""
        self._require_step(SELECT_CUSTOMER)
        name = (name or "").strip()
        if not name:
            raise ValidationError("Validation failed", errors={"name": ["Name is required"]})
        digits = self._valid_phone(phone)

        customer = self.gateway.create_customer(name, digits)
        self.state["data"]["customer"] = customer
        self._save()
        return customer

    # ------------------------------------------------------------------
    # Step 2: delivery
    # ------------------------------------------------------------------

    def _customer_id(self) -> str:
        customer = self.data.get("customer")
        if not customer:
            raise ValidationError("Validation failed", errors={"customer": ["Select a customer"]})
        return str(customer["id"])

    def list_addresses(self) -> list:
        return self.gateway.list_addresses(self._customer_id())

    def add_address(self, fields: dict) -> dict:
        """
        Register an address for the selected customer and select it.

        The customer's first address is made principal.

        Raises:
            ValidationError: If street, number, city or state is missing
        """
        self._require_step(DELIVERY_DETAILS)
        customer_id = self._customer_id()

        missing = {
            name: ["This field is required"]
            for name in ("street", "number", "city", "state")
            if not (fields.get(name) or "").strip()
        }
        if missing:
            raise ValidationError("Incomplete address", errors=missing)

        payload = dict(fields)
        payload["postal_code"] = only_digits(fields.get("postal_code")) or None
        payload["is_principal"] = not self.gateway.list_addresses(customer_id)

        address = self.gateway.create_address(customer_id, payload)
        self.state["data"]["address_id"] = str(address["id"])
        self._save()
        return address

    def lookup_postal_code(self, code: str) -> dict:
        """Best-effort address prefill; never blocks the wizard."""
        return self.gateway.lookup_postal_code(code)

    def _preselect_principal_address(self) -> None:
        data = self.state["data"]
        if data.get("address_id"):
            return
        principal = next(
            (a for a in self.gateway.list_addresses(self._customer_id()) if a.get("is_principal")),
            None
        )
        if principal is not None:
            data["address_id"] = str(principal["id"])

    def _validate_delivery(self) -> None:
        data = self.state["data"]
        errors = {}

        if data.get("delivery_type") not in (PICKUP, DELIVERY):
            errors["delivery_type"] = ["Choose pickup or delivery"]
        if not data.get("delivery_date"):
            errors["delivery_date"] = ["Delivery date is required"]
        if not data.get("delivery_time"):
            errors["delivery_time"] = ["Delivery time is required"]

        if data.get("delivery_type") == DELIVERY:
            address_id = data.get("address_id")
            if not address_id:
                errors["address_id"] = ["Select or register a delivery address"]
            else:
                known = {str(a["id"]) for a in self.gateway.list_addresses(self._customer_id())}
                if str(address_id) not in known:
                    errors["address_id"] = ["Address does not belong to the customer"]

        if errors:
            raise ValidationError("Validation failed", errors=errors)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def advance(self, updates: Optional[dict] = None) -> dict:
        """
        Validate the current step and move to the next one.

        ``updates`` are merged into the draft first (step 2 accepts the
        delivery fields). Nothing is lost when validation fails.
        """
        self._require_started()
        updates = updates or {}
        step = self.state["step"]

        if step == SELECT_CUSTOMER:
            self._customer_id()
            self.state["step"] = DELIVERY_DETAILS
            self._preselect_principal_address()

        elif step == DELIVERY_DETAILS:
            self._merge(updates, DELIVERY_FIELDS)
            self._save()
            self._validate_delivery()
            self.state["step"] = ITEMS_AND_PAYMENT

        else:
            raise WizardStepError("This is the last step; submit the order to finish")

        self._save()
        return self.snapshot()

    def back(self) -> dict:
        self._require_started()
        step = self.state["step"]

        if step == SELECT_CUSTOMER:
            raise WizardStepError("Already at the first step")
        if step == DELIVERY_DETAILS and self.state["edit_mode"]:
            raise WizardStepError("The customer of an existing order cannot be changed")

        self.state["step"] = step - 1
        self._save()
        return self.snapshot()

    # ------------------------------------------------------------------
    # Step 3: items and payment
    # ------------------------------------------------------------------

    def product_slots(self, product_id) -> dict:
        self._require_step(ITEMS_AND_PAYMENT)
        return self.gateway.product_slots(product_id)

    def add_item(self, product_id, quantity: int = 1, note: Optional[str] = None,
                 selections: Optional[dict] = None) -> dict:
        """
        Price a product with its complement choices and append it.

        Raises:
            ValidationError: If a required complement slot has no choice
        """
        self._require_step(ITEMS_AND_PAYMENT)
        item = self.gateway.build_item(product_id, quantity, note, selections or {})
        self.state["data"]["items"].append(item)
        self._save()
        return item

    def remove_item(self, item_id: str) -> None:
        self._require_step(ITEMS_AND_PAYMENT)
        items = self.state["data"]["items"]
        remaining = [item for item in items if item["id"] != item_id]
        if len(remaining) == len(items):
            raise NotFoundError("Item not found in the order")
        self.state["data"]["items"] = remaining
        self._save()

    def update_payment(self, updates: dict) -> dict:
        """Merge shipping fee, discount, statuses, note and tags into the draft."""
        self._require_step(ITEMS_AND_PAYMENT)
        self._validate_payment(updates)
        self._merge(updates, PAYMENT_FIELDS)
        for money in ("shipping_fee", "discount"):
            self.state["data"][money] = str(to_money(self.state["data"][money]))
        self._save()
        return self.snapshot()

    @staticmethod
    def _validate_payment(updates: dict) -> None:
        errors = {}
        for money in ("shipping_fee", "discount"):
            if money in updates and to_money(updates[money]) < 0:
                errors[money] = ["Must not be negative"]
        if "payment_status" in updates and updates["payment_status"] not in PAYMENT_STATUSES:
            errors["payment_status"] = [f"Must be one of: {', '.join(PAYMENT_STATUSES)}"]
        if "fulfillment_status" in updates and updates["fulfillment_status"] not in FULFILLMENT_STATUSES:
            errors["fulfillment_status"] = [f"Must be one of: {', '.join(FULFILLMENT_STATUSES)}"]
        if errors:
            raise ValidationError("Validation failed", errors=errors)

    def submit(self, updates: Optional[dict] = None) -> dict:
        """
        Persist the order and close the wizard.

        Requires at least one item, and a shipping fee above zero for
        delivery orders. In edit mode the existing order is replaced.
        On failure the draft is kept untouched and the error propagates; on
        success the draft is cleared and the order is recorded as the open
        order detail.

        Returns:
            The gateway's result (at least ``id`` and ``order_number``)
        """
        self._require_step(ITEMS_AND_PAYMENT)
        if updates:
            self.update_payment(updates)

        data = self.state["data"]
        errors = {}
        if not data["items"]:
            errors["items"] = ["Add at least one item"]
        if data["delivery_type"] == DELIVERY and to_money(data["shipping_fee"]) <= 0:
            errors["shipping_fee"] = ["Shipping fee is required for delivery orders"]
        if data["items"] and self.totals()["total"] < 0:
            errors["discount"] = ["Discount cannot exceed the order value"]
        if errors:
            raise ValidationError("Validation failed", errors=errors)

        header = {
            "customer_id": str(data["customer"]["id"]),
            "delivery_type": data["delivery_type"],
            "delivery_date": data["delivery_date"],
            "delivery_time": data["delivery_time"],
            "address_id": data["address_id"] if data["delivery_type"] == DELIVERY else None,
            "shipping_fee": data["shipping_fee"],
            "discount": data["discount"],
            "payment_status": data["payment_status"],
            "fulfillment_status": data["fulfillment_status"],
            "note": data.get("note"),
            "tag_ids": list(data.get("tag_ids") or []),
        }

        if self.state["edit_mode"]:
            result = self.gateway.replace_order(self.state["order_id"], header, data["items"])
        else:
            result = self.gateway.create_order(header, data["items"])

        self.state_store.delete(self.key)
        self.state_store.set(self.detail_key, {"store_slug": self.store_slug, "order_id": str(result["id"])})
        self.state = None
        return result
