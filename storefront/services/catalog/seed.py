"""
Sample Menu

Seed data for the development catalog: a small pizzeria menu with the
modifier shapes the cart has to handle (required single choice, optional
multi choice, required multi choice).
"""

from storefront.services.catalog.base import ItemDetail, ModifierGroup, ModifierOption
from storefront.services.catalog.mock import Category


def _size_group(item_key: str, large_delta: float) -> ModifierGroup:
    return ModifierGroup(
        id=f"grp-{item_key}-size",
        name="Size",
        is_required=True,
        min_select=1,
        max_select=1,
        options=(
            ModifierOption(id=f"opt-{item_key}-regular", name="Regular", price_delta=0.0),
            ModifierOption(id=f"opt-{item_key}-large", name="Large", price_delta=large_delta),
        ),
    )


PIZZA_TOPPINGS = ModifierGroup(
    id="grp-pizza-toppings",
    name="Extra Toppings",
    min_select=0,
    max_select=3,
    options=(
        ModifierOption(id="opt-topping-cheese", name="Extra Cheese", price_delta=1.50),
        ModifierOption(id="opt-topping-olives", name="Olives", price_delta=1.00),
        ModifierOption(id="opt-topping-basil", name="Fresh Basil", price_delta=0.50),
        ModifierOption(id="opt-topping-truffle", name="Truffle Oil", price_delta=3.00, is_active=False),
    ),
)

WING_SAUCES = ModifierGroup(
    id="grp-wings-sauce",
    name="Sauces",
    is_required=True,
    min_select=1,
    max_select=2,
    options=(
        ModifierOption(id="opt-sauce-buffalo", name="Buffalo"),
        ModifierOption(id="opt-sauce-bbq", name="BBQ"),
        ModifierOption(id="opt-sauce-honey-garlic", name="Honey Garlic", price_delta=0.50),
    ),
)

SALAD_DRESSING = ModifierGroup(
    id="grp-salad-dressing",
    name="Dressing",
    min_select=0,
    max_select=1,
    options=(
        ModifierOption(id="opt-dressing-side", name="Dressing on the side"),
        ModifierOption(id="opt-dressing-none", name="No dressing"),
    ),
)


SAMPLE_CATEGORIES = (
    Category(id="cat-pizza", name="Pizza"),
    Category(id="cat-pasta", name="Pasta"),
    Category(id="cat-sides", name="Sides & Salads"),
    Category(id="cat-dessert", name="Dessert"),
    Category(id="cat-drinks", name="Drinks"),
)

SAMPLE_ITEMS = (
    ItemDetail(
        id="item-margherita",
        name="Pizza Margherita",
        base_price=14.50,
        category_id="cat-pizza",
        modifier_groups=(_size_group("margherita", 2.00), PIZZA_TOPPINGS),
    ),
    ItemDetail(
        id="item-pepperoni",
        name="Pepperoni Pizza",
        base_price=16.99,
        category_id="cat-pizza",
        modifier_groups=(_size_group("pepperoni", 2.50), PIZZA_TOPPINGS),
    ),
    ItemDetail(id="item-carbonara", name="Pasta Carbonara", base_price=13.99, category_id="cat-pasta"),
    ItemDetail(
        id="item-caesar-salad",
        name="Caesar Salad",
        base_price=8.99,
        category_id="cat-sides",
        modifier_groups=(SALAD_DRESSING,),
    ),
    ItemDetail(
        id="item-wings",
        name="Chicken Wings (10pc)",
        base_price=12.99,
        category_id="cat-sides",
        modifier_groups=(WING_SAUCES,),
    ),
    ItemDetail(id="item-garlic-bread", name="Garlic Bread", base_price=5.99, category_id="cat-sides"),
    ItemDetail(id="item-tiramisu", name="Tiramisu", base_price=7.99, category_id="cat-dessert"),
    ItemDetail(id="item-coke", name="Coca-Cola", base_price=2.99, category_id="cat-drinks"),
)
