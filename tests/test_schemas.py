"""Request boundary: raw payloads become typed commands or coded errors."""

import pytest

from storefront.core.errors import (
    CartValidationError,
    DELIVERY_ADDRESS_REQUIRED,
    INVALID_INPUT,
    INVALID_ORDER_TYPE,
    INVALID_PAYMENT_METHOD,
    INVALID_QUANTITY,
    INVALID_SPECIAL_INSTRUCTIONS,
)
from storefront.models import OrderType, PaymentMethod
from storefront.schemas import (
    CartItemCreate,
    CartItemUpdate,
    CartPatch,
    CheckoutRequest,
    validate_payload,
)


def error_code(model_cls, payload) -> str:
    with pytest.raises(CartValidationError) as exc_info:
        validate_payload(model_cls, payload)
    assert exc_info.value.status == 400
    return exc_info.value.code


class TestCartItemCreate:
    def test_camel_case_payload(self):
        command = validate_payload(CartItemCreate, {
            "itemId": " item-margherita ",
            "quantity": "3",
            "selectedOptionIds": ["opt-b", " opt-a ", "opt-b"],
            "specialInstructions": "  extra crispy  ",
            "somethingElse": True,
        })

        assert command.item_id == "item-margherita"
        assert command.quantity == 3
        assert command.selected_option_ids == ["opt-b", "opt-a"]
        assert command.special_instructions == "extra crispy"

    def test_defaults(self):
        command = validate_payload(CartItemCreate, {"itemId": "item-coke"})

        assert command.quantity == 1
        assert command.selected_option_ids == []
        assert command.special_instructions == ""

    def test_item_id_required(self):
        assert error_code(CartItemCreate, {}) == INVALID_INPUT
        assert error_code(CartItemCreate, {"itemId": "   "}) == INVALID_INPUT

    @pytest.mark.parametrize("quantity", [0, -1, 21, 2.5, "two", True])
    def test_bad_quantity(self, quantity):
        assert error_code(CartItemCreate, {"itemId": "item-coke", "quantity": quantity}) == INVALID_QUANTITY

    def test_integral_float_quantity(self):
        assert validate_payload(CartItemCreate, {"itemId": "item-coke", "quantity": 4.0}).quantity == 4

    def test_quantity_message_names_limit(self):
        with pytest.raises(CartValidationError) as exc_info:
            validate_payload(CartItemCreate, {"itemId": "item-coke", "quantity": 50})

        assert exc_info.value.message == "Quantity must be between 1 and 20."

    def test_long_instructions(self):
        payload = {"itemId": "item-coke", "specialInstructions": "x" * 281}

        assert error_code(CartItemCreate, payload) == INVALID_SPECIAL_INSTRUCTIONS

    def test_instructions_at_limit(self):
        command = validate_payload(CartItemCreate, {"itemId": "item-coke", "specialInstructions": "x" * 280})

        assert len(command.special_instructions) == 280

    @pytest.mark.parametrize("option_ids", ["opt-a", ["opt-a", ""], [None]])
    def test_malformed_option_ids(self, option_ids):
        payload = {"itemId": "item-coke", "selectedOptionIds": option_ids}

        assert error_code(CartItemCreate, payload) == INVALID_INPUT

    def test_too_many_option_ids(self):
        payload = {"itemId": "item-coke", "selectedOptionIds": [f"opt-{i}" for i in range(25)]}

        assert error_code(CartItemCreate, payload) == INVALID_INPUT


class TestCartItemUpdate:
    def test_partial_update(self):
        command = validate_payload(CartItemUpdate, {"quantity": 2})

        assert command.quantity == 2
        assert command.selected_option_ids is None
        assert command.special_instructions is None

    def test_empty_selection_is_an_update(self):
        command = validate_payload(CartItemUpdate, {"selectedOptionIds": []})

        assert command.selected_option_ids == []

    def test_nothing_to_update(self):
        assert error_code(CartItemUpdate, {}) == INVALID_INPUT

    def test_bad_quantity(self):
        assert error_code(CartItemUpdate, {"quantity": 99}) == INVALID_QUANTITY


class TestCartPatch:
    def test_order_type_is_case_insensitive(self):
        assert validate_payload(CartPatch, {"orderType": "pickup"}).order_type == OrderType.PICKUP

    def test_order_type_required(self):
        assert error_code(CartPatch, {}) == INVALID_INPUT
        assert error_code(CartPatch, None) == INVALID_INPUT

    def test_unknown_order_type(self):
        assert error_code(CartPatch, {"orderType": "DRIVE_THRU"}) == INVALID_ORDER_TYPE


class TestCheckoutRequest:
    def test_defaults(self):
        command = validate_payload(CheckoutRequest, None)

        assert command.order_type is None
        assert command.payment_method == PaymentMethod.CARD
        assert command.delivery_address is None

    def test_full_payload(self):
        command = validate_payload(CheckoutRequest, {
            "orderType": "delivery",
            "paymentMethod": "apple_pay",
            "deliveryAddress": {"line1": " 1 Main St ", "city": "Springfield", "notes": "Back door"},
        })

        assert command.order_type == OrderType.DELIVERY
        assert command.payment_method == PaymentMethod.APPLE_PAY
        assert command.delivery_address.line1 == "1 Main St"
        assert command.delivery_address.notes == "Back door"

    def test_unknown_payment_method(self):
        assert error_code(CheckoutRequest, {"paymentMethod": "BITCOIN"}) == INVALID_PAYMENT_METHOD

    def test_unknown_order_type(self):
        assert error_code(CheckoutRequest, {"orderType": "TELEPORT"}) == INVALID_ORDER_TYPE

    def test_blank_address_is_no_address(self):
        command = validate_payload(CheckoutRequest, {"deliveryAddress": {"line1": " ", "city": ""}})

        assert command.delivery_address is None

    def test_partial_address(self):
        payload = {"deliveryAddress": {"line1": "1 Main St"}}

        assert error_code(CheckoutRequest, payload) == DELIVERY_ADDRESS_REQUIRED

    def test_address_must_be_object(self):
        assert error_code(CheckoutRequest, {"deliveryAddress": "1 Main St"}) == INVALID_INPUT
