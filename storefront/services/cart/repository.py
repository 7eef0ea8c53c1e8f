"""
Cart Repository

Storage for carts, placed orders and the two id sequences. The store only
talks to ``BaseCartRepository``; the in-memory implementation keeps
everything for the lifetime of the process.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from storefront.models import Cart
from storefront.schemas import Order

logger = logging.getLogger(__name__)


class BaseCartRepository(ABC):
    """
    Abstract storage for carts and orders.

    Carts are returned by reference: the store mutates the returned object
    and calls ``save_cart`` when the write is complete.
    """

    @abstractmethod
    def get_cart(self, owner_key: str) -> Optional[Cart]:
        pass

    @abstractmethod
    def save_cart(self, cart: Cart) -> None:
        pass

    @abstractmethod
    def next_line_id(self) -> str:
        """Allocate the next cart line id (``cart-item-0001``, ...)."""
        pass

    @abstractmethod
    def next_order_id(self) -> str:
        """Allocate the next public order id (``ORD-2001``, ...)."""
        pass

    @abstractmethod
    def save_order(self, order: Order) -> None:
        pass

    @abstractmethod
    def get_order(self, order_id: str) -> Optional[Order]:
        pass

    @abstractmethod
    def stats(self) -> dict[str, int]:
        """Counts of stored carts and orders."""
        pass

    @abstractmethod
    def reset(self) -> None:
        """Drop all carts and orders and restart both sequences."""
        pass


class InMemoryCartRepository(BaseCartRepository):
    """
    Dictionary-backed repository.

    Attributes:
        order_number_start: First number handed out by ``next_order_id``
    """

    def __init__(self, order_number_start: int = 2001):
        self.order_number_start = order_number_start
        self.reset()

    def get_cart(self, owner_key: str) -> Optional[Cart]:
        return self._carts.get(owner_key)

    def save_cart(self, cart: Cart) -> None:
        self._carts[cart.owner_key] = cart

    def next_line_id(self) -> str:
        line_id = f"cart-item-{self._next_line_number:04d}"
        self._next_line_number += 1
        return line_id

    def next_order_id(self) -> str:
        order_id = f"ORD-{self._next_order_number}"
        self._next_order_number += 1
        return order_id

    def save_order(self, order: Order) -> None:
        self._orders[order.id] = order

    def get_order(self, order_id: str) -> Optional[Order]:
        return self._orders.get(order_id)

    def stats(self) -> dict[str, int]:
        return {"carts": len(self._carts), "orders": len(self._orders)}

    def reset(self) -> None:
        self._carts: dict[str, Cart] = {}
        self._orders: dict[str, Order] = {}
        self._next_line_number = 1
        self._next_order_number = self.order_number_start
        logger.debug("In-memory cart repository reset")
